# p1mcp

Building blocks for a Model Context Protocol server that manages PingOne
environments: tool definitions, tool filtering, per-invocation context and
authentication setup, and the handlers behind the environment tools.

The package has no runtime dependencies.

## Installation

```
pip install .
```

For development, install the test extra and run the suite:

```
pip install ".[test]"
pytest
```

## Modules

### `p1mcp.filter`

- `ToolDefinition`: a tool's name, title, description, input and output
  JSON schemas, a `read_only_hint` and a `validation_policy` mapping.
  `is_read_only()` returns the read-only hint.
- `should_include(name, included, excluded)`: an exclusion always wins; an
  empty (or `None`) include list lets in every name that is not excluded.
- `Filter(read_only, included_tools, excluded_tools, included_tool_collections,
  excluded_tool_collections)`: `should_include_tool(tool_def)` applies the tool
  lists and, in read-only mode, admits only read-only tools; it returns
  `False` for `None`. `should_include_collection(name)` applies the
  collection lists.
- `passthrough_filter()`: a filter that lets everything in.

### `p1mcp.invocation`

- `InvocationContext`: an immutable record of the tool name, transaction id,
  session id, request and a `logging.LoggerAdapter` carrying those values.
- `initialize_tool_invocation(ctx, name, request)`: returns a new context with
  a fresh transaction id from `generate_transaction_id()` (a UUID4 string).
- `ToolError(tool_name, cause)` and `ApiError(cause, status_code=None)`: the
  exceptions the handlers raise. An `ApiError` message includes the HTTP
  status when one is known.

### `p1mcp.auth_context`

- `initialize_auth_context(ctx, auth_client, token_store, grant_type)`: if
  `auth_client.browser_login_available(grant_type)` is true, the session comes
  from `auth_client.login_if_necessary(ctx, token_store, grant_type)`;
  otherwise `token_store.has_session()` must be true and the session is
  `token_store.get_session()`. The session id of the resulting `AuthSession`
  is recorded in the returned context. Failures raise `RuntimeError`.
- `auth_context_initializer(auth_client_factory, token_store, grant_type)`:
  returns a one-argument initializer that calls
  `auth_client_factory.new_auth_client()` on each use.

### `p1mcp.read_tools`

Handlers for `get_environment`, `get_environment_services` and
`list_environments` (built by `get_environment_handler`,
`get_environment_services_handler` and `list_environments_handler`), with
their tool definitions `GET_ENVIRONMENT_DEF`, `GET_ENVIRONMENT_SERVICES_DEF`
and `LIST_ENVIRONMENTS_DEF`. `EnvironmentsClient` and
`EnvironmentsClientFactory` describe what the handlers need from an API
client; each client call returns an `ApiResponse(data, status_code)`, and
`get_environments` returns an iterable of such pages. The `_links` field is
removed from returned environments and services. The listing gathers every
page into `EnvironmentSummary` records.

### `p1mcp.write_tools`

Handlers for `update_environment` (full replacement of the environment) and
`update_environment_services`, with `UPDATE_ENVIRONMENT_DEF` and
`UPDATE_ENVIRONMENT_SERVICES_DEF`. The services update first reads the
current services, keeps the stored configuration of products already
enabled (replacing only their bookmarks, console and tags), and expands
`NEO` (`NEO_SERVICE_VALUE`) into `PING_ONE_CREDENTIALS` and
`PING_ONE_VERIFY`. A service type outside `PRODUCT_TYPES` raises
`ToolError`. `update_environment_services_input_schema()` returns the input
schema with the allowed service types as an enum.

## Example

```python
import uuid

from p1mcp.filter import Filter, should_include
from p1mcp.read_tools import ApiResponse, GetEnvironmentInput, get_environment_handler

should_include("get_environment", [], ["update_environment"])  # True
Filter(read_only=True)  # admits only tools whose is_read_only() is true


class Client:
    def get_environment(self, ctx, environment_id):
        return ApiResponse({"id": str(environment_id), "name": "Dev", "_links": {}}, 200)


class Factory:
    def get_authenticated_client(self, ctx):
        return Client()


handler = get_environment_handler(Factory(), lambda ctx: ctx)
output = handler(None, None, GetEnvironmentInput(uuid.uuid4()))
output.to_dict()  # {"environment": {"id": "...", "name": "Dev"}}
```

A handler returns its output object, or raises `ToolError` or `ApiError`.

## What this package does not do

It contains no MCP server or transport, no PingOne API client, no token
store and no browser login flow. The handlers work with whatever client,
client factory, token store and auth client objects you pass in, as long as
they provide the methods named above.