"""Probe candidate index and service ports of a server.

Each probe is a single attempt. Protocols are tried one after another in
PROBE_PROTOCOLS order, never concurrently.
"""

from __future__ import annotations

import logging

from aci_config.aci.base import AciServicePort, IndexingServicePort
from aci_config.errors import IndexingError
from aci_config.models import (
    PROBE_PROTOCOLS,
    AciServerDetails,
    IndexProbeResult,
    ServerDetails,
    TransportProtocol,
)

logger = logging.getLogger(__name__)

INDEX_TEST_COMMAND = "test"
SERVICE_STATUS_ACTION = "getstatus"


async def probe_index(
    indexing_service: IndexingServicePort | None,
    details: ServerDetails,
    error_message: str,
) -> IndexProbeResult:
    """Send the ``test`` index command and classify the answer.

    ``test`` is not a real index command, so a live index port rejects it with
    a known error message. Only that exact message confirms the port; success
    or any other error does not.
    """
    if indexing_service is None:
        logger.debug("No indexing service available to probe %s", details.url)
        return IndexProbeResult.TRANSPORT_ERROR

    try:
        await indexing_service.execute_command(details, INDEX_TEST_COMMAND)
    except IndexingError as exc:
        if str(exc) == error_message:
            return IndexProbeResult.CONFIRMED
        logger.debug("Index port %s answered unexpected error: %s", details.url, exc)
        return IndexProbeResult.NOT_CONFIRMED
    except Exception as exc:
        logger.debug("Index probe of %s failed: %s", details.url, exc)
        return IndexProbeResult.TRANSPORT_ERROR

    logger.debug("Index port %s accepted the test command", details.url)
    return IndexProbeResult.NOT_CONFIRMED


async def find_index_protocol(
    indexing_service: IndexingServicePort | None,
    host: str,
    port: int,
    error_message: str,
) -> TransportProtocol | None:
    """Return the first protocol on which ``port`` is confirmed as an index port.

    Transport errors are treated like an unconfirmed answer: the next
    protocol is tried and only exhaustion fails.
    """
    for protocol in PROBE_PROTOCOLS:
        details = ServerDetails(protocol=protocol, host=host, port=port)
        result = await probe_index(indexing_service, details, error_message)
        if result is IndexProbeResult.CONFIRMED:
            return protocol
    return None


async def probe_service(aci_service: AciServicePort, details: AciServerDetails) -> bool:
    """Return True if ``details`` answers a status action without error."""
    try:
        await aci_service.execute_action(details, SERVICE_STATUS_ACTION)
    except Exception as exc:
        logger.debug("Service probe of %s failed: %s", details.url, exc)
        return False
    return True


async def find_service_protocol(
    aci_service: AciServicePort,
    host: str,
    port: int,
) -> TransportProtocol | None:
    """Return the first protocol on which the service port answers."""
    for protocol in PROBE_PROTOCOLS:
        details = AciServerDetails(protocol=protocol, host=host, port=port)
        if await probe_service(aci_service, details):
            return protocol
    return None
