"""Tool definitions, filtering, invocation context and handlers for PingOne environment tools."""

__version__ = "0.1.0"

__all__ = ["__version__"]