[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "p1mcp"
version = "0.1.0"
description = "Tool definitions, filtering and handlers for managing PingOne environments from a Model Context Protocol server"
requires-python = ">=3.10"
dependencies = []
keywords = ["mcp", "model-context-protocol", "pingone", "environments", "tools"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["p1mcp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
