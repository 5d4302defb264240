"""Validate a ServerConfig against the live server it describes.

The steps run in a fixed order, each awaited before the next:

1. ``basic_validate`` -- local checks, no I/O.
2. GetVersion -- is the server one of the expected product types?
3. GetStatus or GetChildren -- which index and service ports does it report?
4. Index port probe (HTTP, then HTTPS), when the server reports one.
5. Service port probe (HTTP, then HTTPS).

``validate`` always returns a ValidationResult and never raises.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from aci_config.aci.base import AciServicePort, IndexingServicePort
from aci_config.errors import ConfigError, PortDiscoveryError
from aci_config.models import (
    MAX_PORT,
    MIN_PORT,
    Ports,
    ServerConfig,
    TransportProtocol,
    Validation,
    ValidationResult,
)
from aci_config.validation.matching import matches, mismatch_reason, split_product_types
from aci_config.validation.probes import find_index_protocol, find_service_protocol

logger = logging.getLogger(__name__)

GET_VERSION = "GetVersion"
GET_STATUS = "GetStatus"
GET_CHILDREN = "GetChildren"


class ServerValidator:
    """Runs the discovery and validation steps for ServerConfigs.

    Holds no per-validation state, so one instance can validate many
    configs, including concurrently.
    """

    def __init__(
        self,
        aci_service: AciServicePort,
        indexing_service: IndexingServicePort | None = None,
    ) -> None:
        self._aci = aci_service
        self._indexing = indexing_service

    async def validate(self, config: ServerConfig) -> ValidationResult:
        """Check that ``config`` is complete and that the server responds.

        Returns:
            A valid result, or an invalid one whose reason is an
            IncorrectServerType (wrong product type) or a Validation.
        """
        try:
            config.basic_validate()
        except ConfigError:
            # if the host is blank further testing is futile
            return ValidationResult.failed(Validation.REQUIRED_FIELD_MISSING)

        try:
            is_correct_version = await self.test_server_version(config)
        except Exception as exc:
            logger.debug(
                "Error validating server version for %s:%s", config.host, config.port,
                exc_info=exc,
            )
            return ValidationResult.failed(Validation.CONNECTION_ERROR)

        if not is_correct_version:
            return ValidationResult.failed(mismatch_reason(config.match_rule))

        try:
            discovered = await self.fetch_server_details(config)
        except Exception as exc:
            logger.debug(
                "Error fetching ports for %s:%s", config.host, config.port, exc_info=exc
            )
            return ValidationResult.failed(Validation.FETCH_PORT_ERROR)

        if not config.supports_indexing:
            if discovered.service_port > 0:
                return ValidationResult.ok()
            return ValidationResult.failed(Validation.SERVICE_PORT_ERROR)

        if discovered.service_port > 0 and discovered.index_port > 0:
            return ValidationResult.ok()
        return ValidationResult.failed(Validation.SERVICE_OR_INDEX_PORT_ERROR)

    async def test_server_version(self, config: ServerConfig) -> bool:
        """Return True if the server reports a product type matching ``config``.

        Raises whatever the ACI service raises when the server cannot be reached.
        """
        # Some products only report a generic ProductName, so use the type csv
        fields = await self._aci.execute_action(config.to_aci_server_details(), GET_VERSION)
        server_product_types = split_product_types(fields.get("producttypecsv", ""))
        return matches(config.match_rule, server_product_types)

    async def determine_ports(self, config: ServerConfig) -> Ports:
        """Ask the server which ports it is using.

        GetStatus only reports the index port on servers that have one, so it
        is used when indexing is configured and GetChildren otherwise.

        Raises:
            PortDiscoveryError: If the action fails or the answer lacks a port.
        """
        details = config.to_aci_server_details()
        try:
            if config.supports_indexing:
                fields = await self._aci.execute_action(details, GET_STATUS)
                return Ports(
                    aci_port=_required_port(fields, "aciport"),
                    index_port=_required_port(fields, "indexport"),
                    service_port=_required_port(fields, "serviceport"),
                )
            fields = await self._aci.execute_action(details, GET_CHILDREN)
            return Ports(
                aci_port=_required_port(fields, "port"),
                index_port=None,
                service_port=_optional_port(fields, "serviceport"),
            )
        except PortDiscoveryError:
            raise
        except Exception as exc:
            raise PortDiscoveryError(
                f"Unable to connect to ACI server {details.url}: {exc}"
            ) from exc

    async def fetch_server_details(self, config: ServerConfig) -> ServerConfig:
        """Discover and probe the index and service ports of the server.

        Returns:
            A new ServerConfig with the connection settings of ``config`` and
            the index and service settings found on the server.

        Raises:
            PortDiscoveryError: If the ports cannot be determined or do not answer.
        """
        host = config.host or ""
        ports = await self.determine_ports(config)

        index_protocol: TransportProtocol | None = None
        index_port = 0
        if ports.index_port is not None:
            index_protocol = await find_index_protocol(
                self._indexing, host, ports.index_port, config.index_error_message or ""
            )
            if index_protocol is None:
                raise PortDiscoveryError("Server does not have a valid index port")
            index_port = ports.index_port

        service_protocol: TransportProtocol | None = None
        service_port = 0
        if ports.service_port > 0:
            service_protocol = await find_service_protocol(self._aci, host, ports.service_port)
            if service_protocol is None:
                raise PortDiscoveryError("Server does not have a valid service port")
            service_port = ports.service_port
        else:
            logger.debug("%s:%s reported no service port", host, config.port)

        return ServerConfig(
            protocol=config.protocol,
            host=config.host,
            port=config.port,
            index_protocol=index_protocol or TransportProtocol.HTTP,
            index_port=index_port,
            service_protocol=service_protocol or TransportProtocol.HTTP,
            service_port=service_port,
        )


# ─── Response helpers ────────────────────────────────────────


def _optional_port(fields: Mapping[str, str], name: str) -> int:
    value = fields.get(name, "").strip()
    if not value:
        return 0
    try:
        port = int(value)
    except ValueError:
        raise PortDiscoveryError(f"Server reported an invalid {name}: {value!r}") from None
    if port != 0 and not MIN_PORT <= port <= MAX_PORT:
        raise PortDiscoveryError(f"Server reported {name} {port}, outside {MIN_PORT}-{MAX_PORT}")
    return port


def _required_port(fields: Mapping[str, str], name: str) -> int:
    port = _optional_port(fields, name)
    if not port:
        raise PortDiscoveryError(f"Server response did not include {name}")
    return port
