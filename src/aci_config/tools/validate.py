"""validate_server and discover_ports tools -- check an ACI server config against the live server."""

from __future__ import annotations

import logging

from mcp.server.fastmcp import Context

from aci_config.config.reader import parse_server_config
from aci_config.errors import AciConfigError
from aci_config.tools._helpers import get_context

logger = logging.getLogger(__name__)


async def validate_server(
    host: str,
    port: int,
    ctx: Context,
    product_types: list[str] | None = None,
    product_type_regex: str = "",
    index_error_message: str = "",
    protocol: str = "http",
) -> dict[str, object]:
    """Check that an ACI server is reachable, of the expected type, and has working ports.

    Runs GetVersion against the server, then discovers its index and service
    ports and probes each of them (HTTP first, then HTTPS).

    Args:
        host: Host name of the server.
        port: Primary ACI port.
        product_types: Accepted product types (e.g. ["AXE", "DAH"]).
        product_type_regex: Pattern a reported product type must fully match.
            Takes precedence over product_types.
        index_error_message: The error the index port answers a test command
            with. Leave empty for servers that do not index.
        protocol: "http" or "https" for the primary port.

    Returns:
        Dict with "valid", "reason" (null when valid) and the "config" checked.
    """
    try:
        config = parse_server_config(
            _raw_config(
                host, port, protocol, product_types, product_type_regex, index_error_message
            )
        )
    except AciConfigError as exc:
        return {"valid": False, "reason": None, "error": str(exc)}

    try:
        app = get_context(ctx)
        result = await app.validator.validate(config)
        return {**result.to_dict(), "config": config.to_dict()}
    except Exception as exc:
        logger.warning("Unexpected error validating %s:%s", host, port, exc_info=exc)
        await ctx.error(f"Unexpected error in validate_server: {exc}")
        return {"valid": False, "reason": None, "error": f"Internal error: {type(exc).__name__}"}


async def discover_ports(
    host: str,
    port: int,
    ctx: Context,
    index_error_message: str = "",
    protocol: str = "http",
) -> dict[str, object]:
    """Discover the index and service ports of an ACI server.

    Args:
        host: Host name of the server.
        port: Primary ACI port.
        index_error_message: The error the index port answers a test command
            with. Leave empty for servers that do not index.
        protocol: "http" or "https" for the primary port.

    Returns:
        Dict with "success" and either the discovered "config" or an "error".
    """
    try:
        config = parse_server_config(
            _raw_config(host, port, protocol, None, "", index_error_message)
        )
        config.basic_validate("server")
        app = get_context(ctx)
        discovered = await app.validator.fetch_server_details(config)
        return {"success": True, "config": discovered.to_dict()}
    except AciConfigError as exc:
        return {"success": False, "error": str(exc)}
    except Exception as exc:
        logger.warning("Unexpected error discovering ports of %s:%s", host, port, exc_info=exc)
        await ctx.error(f"Unexpected error in discover_ports: {exc}")
        return {"success": False, "error": f"Internal error: {type(exc).__name__}"}


def _raw_config(
    host: str,
    port: int,
    protocol: str,
    product_types: list[str] | None,
    product_type_regex: str,
    index_error_message: str,
) -> dict[str, object]:
    raw: dict[str, object] = {"host": host, "port": port, "protocol": protocol}
    if product_types:
        raw["productType"] = product_types
    if product_type_regex:
        raw["productTypeRegex"] = product_type_regex
    if index_error_message:
        raw["indexErrorMessage"] = index_error_message
    return raw
