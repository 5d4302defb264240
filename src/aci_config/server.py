"""MCP server that validates ACI server configs against the live servers."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from aci_config.aci.base import AciServicePort, IndexingServicePort
from aci_config.aci.client import HttpAciService
from aci_config.aci.indexing import HttpIndexingService
from aci_config.tools.validate import discover_ports, validate_server
from aci_config.validation.base import ServerValidatorPort
from aci_config.validation.validator import ServerValidator

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class AppContext:
    """Shared state across all tool invocations."""

    http_client: httpx.AsyncClient
    aci_service: AciServicePort
    indexing_service: IndexingServicePort
    validator: ServerValidatorPort


def _env_seconds(name: str, default: float) -> float:
    raw = os.environ.get(name, "")
    if not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
    """Manage shared adapter lifecycle -- the composition root.

    No retries on the transport: each probe is a single attempt.
    """
    timeout = httpx.Timeout(
        _env_seconds("ACI_CONFIG_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
        connect=_env_seconds("ACI_CONFIG_CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT_SECONDS),
    )
    async with httpx.AsyncClient(
        timeout=timeout,
        limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
    ) as http_client:
        aci_service = HttpAciService(http_client)
        indexing_service = HttpIndexingService(http_client)

        yield AppContext(
            http_client=http_client,
            aci_service=aci_service,
            indexing_service=indexing_service,
            validator=ServerValidator(aci_service, indexing_service),
        )


mcp = FastMCP(
    "aci-config",
    instructions=(
        "aci-config checks ACI server settings against the live server.\n\n"
        "- **validate_server** -- confirm a host/port is reachable, is one of the "
        "expected product types, and has working index and service ports.\n"
        "- **discover_ports** -- report the index and service ports a server uses.\n\n"
        "When validation fails, explain the reason to the user: REQUIRED_FIELD_MISSING "
        "means the host or port is invalid, CONNECTION_ERROR means the server did not "
        "answer, INCORRECT_SERVER_TYPE lists the products that were expected, and "
        "FETCH_PORT_ERROR means the index or service port could not be confirmed."
    ),
    lifespan=app_lifespan,
)

# ─── Read-only tools ──────────────────────────────────────────
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(validate_server)
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(discover_ports)
