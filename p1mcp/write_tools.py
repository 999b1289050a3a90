"""Tools that change PingOne environments: update and update services."""

from __future__ import annotations

import copy
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from p1mcp.filter import ToolDefinition
from p1mcp.invocation import InvocationContext, ToolError
from p1mcp.read_tools import (
    ContextInitializer,
    EnvironmentsClientFactory,
    _UUID_SCHEMA,
    _as_uuid,
    _call,
    _log_error,
    _start,
    _without_links,
)

NEO_SERVICE_VALUE = "NEO"

PRODUCT_TYPES = (
    "PING_ONE_BASE",
    "PING_ONE_AUTHORIZE",
    "PING_ONE_CREDENTIALS",
    "PING_ONE_DAVINCI",
    "PING_ONE_FRAUD",
    "PING_ONE_ID",
    "PING_ONE_MFA",
    "PING_ONE_PROVISIONING",
    "PING_ONE_RISK",
    "PING_ONE_VERIFY",
    "PING_ACCESS",
    "PING_AUTHORIZE",
    "PING_DIRECTORY",
    "PING_FEDERATE",
    "PING_INTELLIGENCE",
)

_NEO_PRODUCTS = ("PING_ONE_CREDENTIALS", "PING_ONE_VERIFY")

_SERVICE_TYPE_HELP = (
    "The product type value. Note that 'NEO' represents both 'PING_ONE_VERIFY' "
    "and 'PING_ONE_CREDENTIALS' services."
)


@dataclass
class UpdateEnvironmentInput:
    """Input of the update_environment tool; the whole environment is replaced."""

    environment_id: uuid.UUID
    name: str
    region: str
    type: str
    description: str | None = None
    icon: str | None = None
    bill_of_materials: dict[str, Any] | None = None
    license: dict[str, Any] | None = None
    status: str | None = None

    def __post_init__(self) -> None:
        self.environment_id = _as_uuid(self.environment_id)

    def to_replace_request(self) -> dict[str, Any]:
        """The request body for the replace call."""
        request: dict[str, Any] = {
            "name": self.name,
            "region": self.region,
            "type": self.type,
        }
        optional = {
            "description": self.description,
            "icon": self.icon,
            "billOfMaterials": self.bill_of_materials,
            "license": self.license,
            "status": self.status,
        }
        request.update({key: value for key, value in optional.items() if value is not None})
        return request


@dataclass
class UpdateEnvironmentOutput:
    """The environment as stored after the update."""

    environment: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"environment": self.environment}


@dataclass
class EnvironmentServiceInput:
    """One service requested for an environment."""

    type: str
    bookmarks: list[dict[str, Any]] | None = None
    console: dict[str, Any] | None = None
    tags: list[str] | None = None

    def _optional_fields(self) -> dict[str, Any]:
        return {"bookmarks": self.bookmarks, "console": self.console, "tags": self.tags}

    def to_product(self, product_type: str) -> dict[str, Any]:
        """A bill-of-materials product of the given type carrying this input's fields."""
        product: dict[str, Any] = {"type": product_type}
        product.update(
            {key: value for key, value in self._optional_fields().items() if value is not None}
        )
        return product


@dataclass
class UpdateEnvironmentServicesInput:
    """Input of the update_environment_services tool."""

    environment_id: uuid.UUID
    services: list[EnvironmentServiceInput] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.environment_id = _as_uuid(self.environment_id)


@dataclass
class UpdateEnvironmentServicesOutput:
    """The bill of materials as stored after the update."""

    services: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"services": self.services}


_BOOKMARK_SCHEMA = {
    "type": "object",
    "properties": {"name": {"type": "string"}, "href": {"type": "string"}},
    "required": ["name", "href"],
}


def update_environment_services_input_schema() -> dict[str, Any]:
    """Input schema of update_environment_services, listing every allowed service type."""
    return {
        "type": "object",
        "properties": {
            "environmentId": {
                **_UUID_SCHEMA,
                "description": "REQUIRED. The unique identifier (UUID) string of the PingOne environment",
            },
            "services": {
                "type": "array",
                "description": (
                    "REQUIRED. The services enabled for the environment. Note that 'NEO' "
                    "represents both 'PING_ONE_VERIFY' and 'PING_ONE_CREDENTIALS' services."
                ),
                "items": {
                    "type": "object",
                    "properties": {
                        "type": {
                            "type": "string",
                            "description": f"REQUIRED. {_SERVICE_TYPE_HELP}",
                            "enum": [*PRODUCT_TYPES, NEO_SERVICE_VALUE],
                        },
                        "bookmarks": {
                            "type": "array",
                            "items": _BOOKMARK_SCHEMA,
                            "description": "OPTIONAL. Custom bookmarks. Up to five can be specified per product.",
                        },
                        "console": {
                            "type": "object",
                            "properties": {"href": {"type": "string"}},
                            "description": (
                                "OPTIONAL. Link to your administrative console for the product. "
                                "If specified, must be an RFC 2396-compliant URI with a maximum "
                                "length of 1024 characters."
                            ),
                        },
                        "tags": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": (
                                "OPTIONAL. The set of tags for the PingOne products to be initially "
                                "configured. The currently supported value is DAVINCI_MINIMAL "
                                "(only valid when the product type is PING_ONE_DAVINCI)."
                            ),
                        },
                    },
                    "required": ["type"],
                },
            },
        },
        "required": ["environmentId", "services"],
    }


UPDATE_ENVIRONMENT_DEF = ToolDefinition(
    name="update_environment",
    title="Update PingOne Environment by ID",
    description=(
        "Update environment configuration using full replacement (HTTP PUT).\n\n"
        "WORKFLOW - Required to avoid data loss:\n"
        "1. Call 'get_environment' to fetch current configuration\n"
        "2. Modify only the fields you want to change\n"
        "3. Pass the complete merged object to this tool\n\n"
        "Omitted optional fields will be cleared. Common updates: name, description, "
        "type (SANDBOX\u2192PRODUCTION is permanent). Cannot change: region, ID."
    ),
    input_schema={
        "type": "object",
        "properties": {
            "billOfMaterials": {
                "type": "object",
                "description": "OPTIONAL. The Bill of Materials for the environment.",
            },
            "description": {
                "type": "string",
                "description": "OPTIONAL. The description of the environment.",
            },
            "environmentId": {
                **_UUID_SCHEMA,
                "description": "REQUIRED. The unique identifier (UUID) string of the PingOne environment to update.",
            },
            "icon": {
                "type": "string",
                "description": "OPTIONAL. The URL referencing the image to use for the environment icon.",
            },
            "license": {
                "type": "object",
                "description": "OPTIONAL. The active license associated with this environment.",
            },
            "name": {
                "type": "string",
                "description": "REQUIRED. Environment name, must be unique within organization.",
            },
            "region": {
                "type": "string",
                "description": "REQUIRED. Region code (NA/CA/EU/AU/SG/AP). Set at creation, immutable.",
            },
            "status": {
                "type": "string",
                "description": "OPTIONAL. ACTIVE or DELETE_PENDING.",
            },
            "type": {
                "type": "string",
                "description": "REQUIRED. PRODUCTION or SANDBOX.",
            },
        },
        "required": ["environmentId", "name", "region", "type"],
    },
    output_schema={
        "type": "object",
        "properties": {
            "environment": {
                "type": "object",
                "description": "The updated environment details including ID, name, type, region, and metadata",
            }
        },
        "required": ["environment"],
    },
)

UPDATE_ENVIRONMENT_SERVICES_DEF = ToolDefinition(
    name="update_environment_services",
    title="Update PingOne Environment Services by ID",
    description=(
        "Update the services assigned to a PingOne environment (update's the environment's "
        "Bill of Materials) by the environment's unique ID. IMPORTANT: when changing the "
        "services for an environment, include any optional fields you wish to retain from "
        "the existing configuration, as omitting them remove those fields from the configuration."
    ),
    input_schema=update_environment_services_input_schema(),
    output_schema={
        "type": "object",
        "properties": {
            "services": {
                "type": "object",
                "description": "The updated bill of materials for the environment, including products and solution type",
            }
        },
        "required": ["services"],
    },
)


def update_environment_handler(
    client_factory: EnvironmentsClientFactory,
    initialize_auth_context: ContextInitializer,
) -> Callable[[InvocationContext | None, Any, UpdateEnvironmentInput], UpdateEnvironmentOutput]:
    """Build the handler of the update_environment tool.

    The client must provide ``update_environment(ctx, environment_id, request)``.
    """

    def handler(
        ctx: InvocationContext | None, request: Any, input: UpdateEnvironmentInput
    ) -> UpdateEnvironmentOutput:
        ctx, client = _start(
            UPDATE_ENVIRONMENT_DEF, ctx, request, client_factory, initialize_auth_context
        )
        details = {
            "environmentId": str(input.environment_id),
            "name": input.name,
            "region": input.region,
            "type": input.type,
        }
        ctx.logger.debug("Updating environment", extra=details)
        replace_request = input.to_replace_request()
        environment = _call(
            ctx,
            lambda: client.update_environment(ctx, input.environment_id, replace_request),
            "no environment data in response",
        )
        ctx.logger.debug("Environment updated successfully", extra=details)
        return UpdateEnvironmentOutput(environment=_without_links(environment))

    return handler


def update_environment_services_handler(
    client_factory: EnvironmentsClientFactory,
    initialize_auth_context: ContextInitializer,
) -> Callable[
    [InvocationContext | None, Any, UpdateEnvironmentServicesInput],
    UpdateEnvironmentServicesOutput,
]:
    """Build the handler of the update_environment_services tool.

    Products already enabled keep their stored configuration; only their
    bookmarks, console and tags are taken from the input.
    """

    def handler(
        ctx: InvocationContext | None,
        request: Any,
        input: UpdateEnvironmentServicesInput,
    ) -> UpdateEnvironmentServicesOutput:
        ctx, client = _start(
            UPDATE_ENVIRONMENT_SERVICES_DEF,
            ctx,
            request,
            client_factory,
            initialize_auth_context,
        )
        current = _call(
            ctx,
            lambda: client.get_environment_services(ctx, input.environment_id),
            "no services data in response from get",
        )
        current_by_type = {
            product["type"]: product for product in current.get("products") or []
        }

        wanted: dict[str, EnvironmentServiceInput] = {}
        for service in input.services:
            if service.type == NEO_SERVICE_VALUE:
                for product_type in _NEO_PRODUCTS:
                    wanted[product_type] = service
            elif service.type in PRODUCT_TYPES:
                wanted[service.type] = service
            else:
                error = ToolError(
                    UPDATE_ENVIRONMENT_SERVICES_DEF.name,
                    f"invalid service value: {service.type}",
                )
                _log_error(ctx, error)
                raise error

        ctx.logger.debug(
            "Updating environment services",
            extra={
                "environmentId": str(input.environment_id),
                "productCount": len(input.services),
            },
        )

        products = []
        for product_type, service in wanted.items():
            existing = current_by_type.get(product_type)
            if existing is None:
                products.append(service.to_product(product_type))
                continue
            merged = copy.deepcopy(existing)
            for key, value in service._optional_fields().items():
                if value is None:
                    merged.pop(key, None)
                else:
                    merged[key] = value
            products.append(merged)
        replace_request = {"products": products}

        services = _call(
            ctx,
            lambda: client.update_environment_services(
                ctx, input.environment_id, replace_request
            ),
            "no services data in response",
        )
        ctx.logger.debug(
            "Environment services updated successfully",
            extra={
                "environmentId": str(input.environment_id),
                "productCount": len(services.get("products") or []),
            },
        )
        return UpdateEnvironmentServicesOutput(services=_without_links(services))

    return handler