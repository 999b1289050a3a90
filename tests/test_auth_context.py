import pytest

from p1mcp.auth_context import AuthSession, auth_context_initializer, initialize_auth_context
from p1mcp.invocation import InvocationContext, initialize_tool_invocation


class FakeTokenStore:
    def __init__(self, session=None, has_error=None, get_error=None):
        self.session = session
        self.has_error = has_error
        self.get_error = get_error

    def has_session(self):
        if self.has_error:
            raise self.has_error
        return self.session is not None

    def get_session(self):
        if self.get_error:
            raise self.get_error
        return self.session


class FakeAuthClient:
    def __init__(self, browser=False, session=None, login_error=None):
        self.browser = browser
        self.session = session
        self.login_error = login_error
        self.login_calls = []

    def browser_login_available(self, grant_type):
        return self.browser

    def login_if_necessary(self, ctx, token_store, grant_type):
        self.login_calls.append(grant_type)
        if self.login_error:
            raise self.login_error
        return self.session


class FakeFactory:
    def __init__(self, client=None, error=None):
        self.client = client
        self.error = error

    def new_auth_client(self):
        if self.error:
            raise self.error
        return self.client


def test_stored_session_is_used_without_browser():
    store = FakeTokenStore(session=AuthSession("session-1"))
    ctx = initialize_auth_context(None, FakeAuthClient(), store, "client_credentials")
    assert ctx.session_id == "session-1"
    assert ctx.logger.extra["sessionId"] == "session-1"


def test_browser_login_is_used_when_available():
    client = FakeAuthClient(browser=True, session=AuthSession("session-2"))
    ctx = initialize_auth_context(None, client, FakeTokenStore(), "authorization_code")
    assert ctx.session_id == "session-2"
    assert client.login_calls == ["authorization_code"]


def test_tool_context_is_preserved():
    base = initialize_tool_invocation(InvocationContext(), "get_environment", None)
    store = FakeTokenStore(session=AuthSession("session-3"))
    ctx = initialize_auth_context(base, FakeAuthClient(), store, "g")
    assert ctx.transaction_id == base.transaction_id
    assert ctx.logger.extra["tool"] == "get_environment"


def test_no_session_without_browser_fails():
    with pytest.raises(RuntimeError, match="no active auth session found"):
        initialize_auth_context(None, FakeAuthClient(), FakeTokenStore(), "g")


def test_has_session_error_is_wrapped():
    store = FakeTokenStore(has_error=OSError("keyring locked"))
    with pytest.raises(RuntimeError, match="failed to check for auth session: keyring locked"):
        initialize_auth_context(None, FakeAuthClient(), store, "g")


def test_get_session_error_is_wrapped():
    store = FakeTokenStore(session=AuthSession("s"), get_error=OSError("corrupt"))
    with pytest.raises(RuntimeError, match="failed to get auth session: corrupt"):
        initialize_auth_context(None, FakeAuthClient(), store, "g")


def test_login_error_is_wrapped():
    client = FakeAuthClient(browser=True, login_error=ValueError("denied"))
    with pytest.raises(RuntimeError, match="failed to login: denied"):
        initialize_auth_context(None, client, FakeTokenStore(), "g")


def test_initializer_uses_factory_client():
    client = FakeAuthClient(browser=True, session=AuthSession("session-4"))
    init = auth_context_initializer(FakeFactory(client), FakeTokenStore(), "g")
    assert init(InvocationContext()).session_id == "session-4"


def test_initializer_wraps_factory_error():
    init = auth_context_initializer(FakeFactory(error=ValueError("bad config")), FakeTokenStore(), "g")
    with pytest.raises(RuntimeError, match="failed to create auth client: bad config"):
        init(None)