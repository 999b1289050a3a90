import uuid

from p1mcp.invocation import (
    ApiError,
    InvocationContext,
    ToolError,
    generate_transaction_id,
    initialize_tool_invocation,
)


def test_transaction_ids_are_unique_uuids():
    first = generate_transaction_id()
    second = generate_transaction_id()
    assert str(uuid.UUID(first)) == first
    assert first != second


def test_initialize_sets_tool_and_transaction():
    request = {"params": {}}
    ctx = initialize_tool_invocation(None, "get_environment", request)
    assert ctx.tool_name == "get_environment"
    assert ctx.request is request
    assert str(uuid.UUID(ctx.transaction_id)) == ctx.transaction_id
    assert ctx.logger.extra["tool"] == "get_environment"
    assert ctx.logger.extra["transactionId"] == ctx.transaction_id


def test_initialize_keeps_existing_values():
    base = InvocationContext(session_id="session-1")
    ctx = initialize_tool_invocation(base, "list_environments", None)
    assert ctx.session_id == "session-1"
    assert base.tool_name is None


def test_each_invocation_gets_new_transaction():
    a = initialize_tool_invocation(None, "t", None)
    b = initialize_tool_invocation(a, "t", None)
    assert a.transaction_id != b.transaction_id


def test_tool_error_carries_cause():
    err = ToolError("get_environment", "failed to get authenticated client")
    assert "failed to get authenticated client" in str(err)
    assert "get_environment" in str(err)
    assert err.tool_name == "get_environment"


def test_api_error_status_and_message():
    cause = ValueError("environment not found")
    err = ApiError(cause, 404)
    assert err.status_code == 404
    assert err.cause is cause
    assert "environment not found" in str(err)
    assert "404" in str(err)


def test_api_error_without_status():
    err = ApiError("no data in response")
    assert err.status_code is None
    assert "no data in response" in str(err)