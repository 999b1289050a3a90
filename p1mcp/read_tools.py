"""Read-only tools for PingOne environments: get, get services and list."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from p1mcp.filter import ToolDefinition
from p1mcp.invocation import (
    ApiError,
    InvocationContext,
    ToolError,
    initialize_tool_invocation,
)

ContextInitializer = Callable[[InvocationContext], InvocationContext]

_UUID_SCHEMA = {"type": "string", "format": "uuid"}


@dataclass(frozen=True)
class ApiResponse:
    """The data of one API response and the HTTP status that came with it."""

    data: Any
    status_code: int | None = None


class EnvironmentsClient(Protocol):
    """The environment operations the tools need from the PingOne API."""

    def get_environment(self, ctx: InvocationContext, environment_id: uuid.UUID) -> ApiResponse:
        """Fetch one environment."""
        ...

    def get_environment_services(
        self, ctx: InvocationContext, environment_id: uuid.UUID
    ) -> ApiResponse:
        """Fetch the bill of materials of one environment."""
        ...

    def get_environments(
        self, ctx: InvocationContext, filter: str | None
    ) -> Iterable[ApiResponse]:
        """Return the pages of environments matching an optional SCIM filter."""
        ...


class EnvironmentsClientFactory(Protocol):
    """Supplies a client authenticated for the current invocation."""

    def get_authenticated_client(self, ctx: InvocationContext) -> EnvironmentsClient:
        """Return an authenticated client."""
        ...


def _as_uuid(value: uuid.UUID | str) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


def _without_links(data: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key != "_links"}


@dataclass
class GetEnvironmentInput:
    """Input of the get_environment tool."""

    environment_id: uuid.UUID

    def __post_init__(self) -> None:
        self.environment_id = _as_uuid(self.environment_id)


@dataclass
class GetEnvironmentOutput:
    """The environment returned by get_environment."""

    environment: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"environment": self.environment}


@dataclass
class GetEnvironmentServicesInput:
    """Input of the get_environment_services tool."""

    environment_id: uuid.UUID

    def __post_init__(self) -> None:
        self.environment_id = _as_uuid(self.environment_id)


@dataclass
class GetEnvironmentServicesOutput:
    """The bill of materials returned by get_environment_services."""

    services: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"services": self.services}


@dataclass
class ListEnvironmentsInput:
    """Input of the list_environments tool."""

    filter: str | None = None


@dataclass
class EnvironmentSummary:
    """The essential fields of an environment."""

    id: uuid.UUID
    name: str
    created_at: datetime | str
    type: str
    status: str | None = None

    @classmethod
    def from_environment(cls, env: Mapping[str, Any]) -> EnvironmentSummary:
        return cls(
            id=_as_uuid(env["id"]),
            name=env["name"],
            created_at=env["createdAt"],
            type=env["type"],
            status=env.get("status"),
        )

    def to_dict(self) -> dict[str, Any]:
        created = (
            self.created_at.isoformat()
            if isinstance(self.created_at, datetime)
            else self.created_at
        )
        result: dict[str, Any] = {
            "id": str(self.id),
            "name": self.name,
            "createdAt": created,
            "type": self.type,
        }
        if self.status is not None:
            result["status"] = self.status
        return result


@dataclass
class ListEnvironmentsOutput:
    """All environments across every page of the listing."""

    environments: list[EnvironmentSummary] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"environments": [env.to_dict() for env in self.environments]}


GET_ENVIRONMENT_DEF = ToolDefinition(
    name="get_environment",
    title="Get PingOne Environment by ID",
    description=(
        "Retrieve an environment's full configuration by ID. Use 'list_environments' "
        "first if you need to find the environment ID. Call this before "
        "'update_environment' to get current configuration."
    ),
    input_schema={
        "type": "object",
        "properties": {
            "environmentId": {
                **_UUID_SCHEMA,
                "description": "REQUIRED. UUID format (e.g., '123e4567-e89b-12d3-a456-426614174000').",
            }
        },
        "required": ["environmentId"],
    },
    output_schema={
        "type": "object",
        "properties": {
            "environment": {
                "type": "object",
                "description": "The environment details including ID, name, type, region, and metadata",
            }
        },
        "required": ["environment"],
    },
    read_only_hint=True,
    validation_policy={"allow_production_environment_read": True},
)

GET_ENVIRONMENT_SERVICES_DEF = ToolDefinition(
    name="get_environment_services",
    title="Get PingOne Environment Services by ID",
    description=(
        "Retrieve all the services assigned to a specified PingOne environment, "
        "by the environment's unique ID."
    ),
    input_schema={
        "type": "object",
        "properties": {
            "environmentId": {
                **_UUID_SCHEMA,
                "description": "REQUIRED. The unique identifier (UUID) string of the PingOne environment",
            }
        },
        "required": ["environmentId"],
    },
    output_schema={
        "type": "object",
        "properties": {
            "services": {
                "type": "object",
                "description": "The bill of materials for the environment, including products and solution type",
            }
        },
        "required": ["services"],
    },
    read_only_hint=True,
    validation_policy={"allow_production_environment_read": True},
)

_FILTER_HELP = (
    "Only filters that 'name' with 'sw' (starts with); 'id', 'organization.id', "
    "'license.id', 'status' with 'eq' (equals); 'and' to combine are valid."
)

LIST_ENVIRONMENTS_DEF = ToolDefinition(
    name="list_environments",
    title="List PingOne Environments",
    description=(
        "Lists all PingOne environments accessible to the authenticated user.\n\n"
        "Use to discover environment IDs needed for other operations or to find "
        "environments by name/status.\n\n"
        f"{_FILTER_HELP}\n\n"
        "Filter examples:\n"
        '- name sw "Prod"\n'
        '- status eq "ACTIVE"\n'
        '- name sw "Dev" and status eq "ACTIVE"\n\n'
        "Returns: Array of environments with ID, name, type, region, license, and metadata."
    ),
    input_schema={
        "type": "object",
        "properties": {
            "filter": {
                "type": "string",
                "description": f"OPTIONAL. SCIM filter. {_FILTER_HELP}",
            }
        },
    },
    output_schema={
        "type": "object",
        "properties": {
            "environments": {
                "type": "array",
                "description": "List of environments with their basic details",
                "items": {
                    "type": "object",
                    "properties": {
                        "id": _UUID_SCHEMA,
                        "name": {"type": "string"},
                        "createdAt": {"type": "string", "format": "date-time"},
                        "type": {"type": "string"},
                        "status": {"type": "string"},
                    },
                    "required": ["id", "name", "createdAt", "type"],
                },
            }
        },
        "required": ["environments"],
    },
    read_only_hint=True,
    validation_policy={"production_environment_not_applicable": True},
)


def _log_error(ctx: InvocationContext, error: Exception) -> None:
    ctx.logger.error("%s", error)


def _log_response(ctx: InvocationContext, status_code: int | None) -> None:
    if status_code is not None:
        ctx.logger.debug("HTTP response", extra={"statusCode": status_code})


def _start(
    tool: ToolDefinition,
    ctx: InvocationContext | None,
    request: Any,
    client_factory: EnvironmentsClientFactory,
    initialize_auth_context: ContextInitializer,
) -> tuple[InvocationContext, EnvironmentsClient]:
    ctx = initialize_tool_invocation(ctx, tool.name, request)
    try:
        ctx = initialize_auth_context(ctx)
        client = client_factory.get_authenticated_client(ctx)
    except Exception as exc:
        error = ToolError(tool.name, exc)
        _log_error(ctx, error)
        raise error from exc
    return ctx, client


def _call(
    ctx: InvocationContext, call: Callable[[], ApiResponse], missing: str
) -> Any:
    """Run one API call, turning failures and empty responses into ApiError."""
    try:
        response = call()
    except Exception as exc:
        status = getattr(exc, "status_code", None)
        _log_response(ctx, status)
        error = ApiError(exc, status)
        _log_error(ctx, error)
        raise error from exc
    _log_response(ctx, response.status_code)
    if response.data is None:
        error = ApiError(missing, response.status_code)
        _log_error(ctx, error)
        raise error
    return response.data


def get_environment_handler(
    client_factory: EnvironmentsClientFactory,
    initialize_auth_context: ContextInitializer,
) -> Callable[[InvocationContext | None, Any, GetEnvironmentInput], GetEnvironmentOutput]:
    """Build the handler of the get_environment tool."""

    def handler(
        ctx: InvocationContext | None, request: Any, input: GetEnvironmentInput
    ) -> GetEnvironmentOutput:
        ctx, client = _start(
            GET_ENVIRONMENT_DEF, ctx, request, client_factory, initialize_auth_context
        )
        env_id = str(input.environment_id)
        ctx.logger.debug("Retrieving environment", extra={"environmentId": env_id})
        environment = _call(
            ctx,
            lambda: client.get_environment(ctx, input.environment_id),
            "no environment data in response",
        )
        ctx.logger.debug(
            "Environment retrieved successfully",
            extra={"environmentId": env_id, "environmentName": environment.get("name")},
        )
        return GetEnvironmentOutput(environment=_without_links(environment))

    return handler


def get_environment_services_handler(
    client_factory: EnvironmentsClientFactory,
    initialize_auth_context: ContextInitializer,
) -> Callable[
    [InvocationContext | None, Any, GetEnvironmentServicesInput],
    GetEnvironmentServicesOutput,
]:
    """Build the handler of the get_environment_services tool."""

    def handler(
        ctx: InvocationContext | None,
        request: Any,
        input: GetEnvironmentServicesInput,
    ) -> GetEnvironmentServicesOutput:
        ctx, client = _start(
            GET_ENVIRONMENT_SERVICES_DEF,
            ctx,
            request,
            client_factory,
            initialize_auth_context,
        )
        env_id = str(input.environment_id)
        ctx.logger.debug("Retrieving environment services", extra={"environmentId": env_id})
        services = _call(
            ctx,
            lambda: client.get_environment_services(ctx, input.environment_id),
            "no services data in response",
        )
        ctx.logger.debug(
            "Environment services retrieved successfully",
            extra={
                "environmentId": env_id,
                "productCount": len(services.get("products") or []),
            },
        )
        return GetEnvironmentServicesOutput(services=_without_links(services))

    return handler


def list_environments_handler(
    client_factory: EnvironmentsClientFactory,
    initialize_auth_context: ContextInitializer,
) -> Callable[[InvocationContext | None, Any, ListEnvironmentsInput], ListEnvironmentsOutput]:
    """Build the handler of the list_environments tool."""

    def handler(
        ctx: InvocationContext | None, request: Any, input: ListEnvironmentsInput
    ) -> ListEnvironmentsOutput:
        ctx, client = _start(
            LIST_ENVIRONMENTS_DEF, ctx, request, client_factory, initialize_auth_context
        )
        if input.filter is not None:
            ctx.logger.debug("Using filter", extra={"filter": input.filter})

        try:
            pages = iter(client.get_environments(ctx, input.filter))
        except Exception as exc:
            error = ToolError(LIST_ENVIRONMENTS_DEF.name, exc)
            _log_error(ctx, error)
            raise error from exc

        result = ListEnvironmentsOutput()
        while True:
            try:
                page = next(pages)
            except StopIteration:
                break
            except Exception as exc:
                status = getattr(exc, "status_code", None)
                _log_response(ctx, status)
                error = ApiError(exc, status)
                _log_error(ctx, error)
                raise error from exc
            _log_response(ctx, page.status_code)
            embedded = page.data.get("_embedded") if page.data is not None else None
            if embedded is None:
                error = ApiError("no data in response", page.status_code)
                _log_error(ctx, error)
                raise error
            found = embedded.get("environments") or []
            ctx.logger.debug("Retrieved environments page", extra={"count": len(found)})
            result.environments.extend(EnvironmentSummary.from_environment(env) for env in found)
        return result

    return handler


logging.getLogger("p1mcp").addHandler(logging.NullHandler())