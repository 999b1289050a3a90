"""Attach an authenticated session to a tool invocation context."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from p1mcp.invocation import InvocationContext


@dataclass(frozen=True)
class AuthSession:
    """An authenticated session held by the token store."""

    session_id: str


def auth_context_initializer(
    auth_client_factory: Any, token_store: Any, grant_type: Any
) -> Callable[[InvocationContext | None], InvocationContext]:
    """Build a context initializer that creates a fresh auth client per call.

    The factory must provide ``new_auth_client()``.
    """

    def initialize(ctx: InvocationContext | None) -> InvocationContext:
        try:
            auth_client = auth_client_factory.new_auth_client()
        except Exception as exc:
            raise RuntimeError(f"failed to create auth client: {exc}") from exc
        return initialize_auth_context(ctx, auth_client, token_store, grant_type)

    return initialize


def initialize_auth_context(
    ctx: InvocationContext | None,
    auth_client: Any,
    token_store: Any,
    grant_type: Any,
) -> InvocationContext:
    """Find or obtain an auth session and record it in the context.

    When the client can log in through a browser it is asked to
    ``login_if_necessary(ctx, token_store, grant_type)``; otherwise an
    existing session must already be in the token store.
    """
    base = ctx if ctx is not None else InvocationContext()
    if auth_client.browser_login_available(grant_type):
        try:
            session = auth_client.login_if_necessary(base, token_store, grant_type)
        except Exception as exc:
            raise RuntimeError(f"failed to login: {exc}") from exc
    else:
        try:
            has_session = token_store.has_session()
        except Exception as exc:
            raise RuntimeError(f"failed to check for auth session: {exc}") from exc
        if not has_session:
            raise RuntimeError(
                "no active auth session found and a browser can't be used for login. "
                "Unable to authenticate"
            )
        try:
            session = token_store.get_session()
        except Exception as exc:
            raise RuntimeError(f"failed to get auth session: {exc}") from exc

    extra = {**(base.logger.extra or {}), "sessionId": session.session_id}
    return dataclasses.replace(
        base,
        session_id=session.session_id,
        logger=logging.LoggerAdapter(base.logger.logger, extra),
    )