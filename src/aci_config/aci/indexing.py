"""HTTP client for the index port of an ACI server.

Index commands are sent as ``GET http://host:indexport/DRE<COMMAND>``. An
accepted command answers ``INDEXID=<n>``; anything else is the server's error
message for that command.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from aci_config.errors import AciServiceError, IndexingError
from aci_config.models import ServerDetails

logger = logging.getLogger(__name__)

_ACCEPTED_PREFIX = "INDEXID"


@dataclass
class HttpIndexingService:
    """Async adapter for IndexingServicePort over httpx."""

    http: httpx.AsyncClient

    async def execute_command(self, server: ServerDetails, command: str) -> str:
        url = f"{server.url}DRE{command.upper()}"
        logger.debug("Index command %s -> %s", command, url)
        try:
            response = await self.http.get(url)
        except httpx.HTTPError as exc:
            raise AciServiceError(f"Failed to reach index port {server.url}: {exc}") from exc

        body = response.text.strip()
        if response.is_success and body.upper().startswith(_ACCEPTED_PREFIX):
            return body
        if not body:
            raise AciServiceError(
                f"Index port {server.url} answered HTTP {response.status_code} with no body"
            )
        raise IndexingError(body)
