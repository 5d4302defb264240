"""Domain models for aci-config. All frozen dataclasses -- no mutation after creation."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum

from aci_config.errors import ConfigError

MIN_PORT = 1
MAX_PORT = 65535

# ─── Enumerations ─────────────────────────────────────────────


class TransportProtocol(StrEnum):
    HTTP = "http"
    HTTPS = "https"


# Probing order for index and service ports. A plain HTTP request to an HTTPS
# port fails fast; the reverse hangs until the read timeout.
PROBE_PROTOCOLS = (TransportProtocol.HTTP, TransportProtocol.HTTPS)


class ProductType(StrEnum):
    """Product tokens reported in the ``producttypecsv`` of GetVersion."""

    ANSWERSERVER = "ANSWERSERVER"
    AXE = "AXE"
    CATEGORY = "CATEGORY"
    CFS = "CFS"
    CONTROLLER = "CONTROLLER"
    DAH = "DAH"
    DIH = "DIH"
    EDUCTION = "EDUCTION"
    IDOLPROXY = "IDOLPROXY"
    LICENSESERVER = "LICENSESERVER"
    MEDIASERVER = "MEDIASERVER"
    QMS = "QMS"
    SERVICECOORDINATOR = "SERVICECOORDINATOR"
    STATSSERVER = "STATSSERVER"
    UASERVER = "UASERVER"
    VIEW = "VIEW"

    @property
    def friendly_name(self) -> str:
        return _FRIENDLY_NAMES[self]


_FRIENDLY_NAMES: dict[ProductType, str] = {
    ProductType.ANSWERSERVER: "Answer Server",
    ProductType.AXE: "Content",
    ProductType.CATEGORY: "Category",
    ProductType.CFS: "Connector Framework Server",
    ProductType.CONTROLLER: "Controller",
    ProductType.DAH: "Distributed Action Handler",
    ProductType.DIH: "Distributed Index Handler",
    ProductType.EDUCTION: "Eduction",
    ProductType.IDOLPROXY: "IDOL Proxy",
    ProductType.LICENSESERVER: "License Server",
    ProductType.MEDIASERVER: "Media Server",
    ProductType.QMS: "Query Manipulation Server",
    ProductType.SERVICECOORDINATOR: "Service Coordinator",
    ProductType.STATSSERVER: "Statistics Server",
    ProductType.UASERVER: "Community",
    ProductType.VIEW: "View",
}


class Validation(StrEnum):
    """Reasons attached to a failed ValidationResult."""

    REQUIRED_FIELD_MISSING = "REQUIRED_FIELD_MISSING"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    SERVICE_PORT_ERROR = "SERVICE_PORT_ERROR"
    SERVICE_OR_INDEX_PORT_ERROR = "SERVICE_OR_INDEX_PORT_ERROR"
    FETCH_PORT_ERROR = "FETCH_PORT_ERROR"
    INCORRECT_SERVER_TYPE = "INCORRECT_SERVER_TYPE"
    REGULAR_EXPRESSION_MATCH_ERROR = "REGULAR_EXPRESSION_MATCH_ERROR"


class IndexProbeResult(StrEnum):
    """Outcome of sending a test command to a candidate index port."""

    CONFIRMED = "confirmed"
    NOT_CONFIRMED = "not_confirmed"
    TRANSPORT_ERROR = "transport_error"


# ─── Addresses ────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class AciServerDetails:
    """Address of an ACI port (primary or service)."""

    protocol: TransportProtocol
    host: str
    port: int

    @property
    def url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.port}/"


@dataclass(frozen=True, slots=True)
class ServerDetails:
    """Address of an index port."""

    protocol: TransportProtocol
    host: str
    port: int

    @property
    def url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.port}/"


@dataclass(frozen=True, slots=True)
class Ports:
    """Ports reported by the server itself during discovery."""

    aci_port: int
    index_port: int | None
    service_port: int


# ─── Product type matching ────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ByEnumSet:
    product_types: tuple[ProductType, ...]


@dataclass(frozen=True, slots=True)
class ByRegex:
    pattern: re.Pattern[str]


MatchRule = ByEnumSet | ByRegex


# ─── Server config ────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Configuration for an ACI server, which can also include index and service ports.

    Ports use 0 for "unset". ``index_error_message`` is the error the index port
    answers a ``test`` command with; when it is None the server is assumed not
    to support indexing. ``product_type_regex`` takes precedence over
    ``product_types`` when matching the GetVersion response.
    """

    protocol: TransportProtocol | None = TransportProtocol.HTTP
    host: str | None = None
    port: int = 0
    index_protocol: TransportProtocol | None = TransportProtocol.HTTP
    index_port: int = 0
    service_protocol: TransportProtocol | None = TransportProtocol.HTTP
    service_port: int = 0
    product_types: tuple[ProductType, ...] | None = None
    product_type_regex: re.Pattern[str] | None = None
    index_error_message: str | None = None

    def __post_init__(self) -> None:
        for name in ("index_port", "service_port"):
            value = getattr(self, name)
            if value != 0 and not MIN_PORT <= value <= MAX_PORT:
                raise ConfigError(
                    name, f"{name} must be 0 (unset) or between {MIN_PORT} and {MAX_PORT}."
                )

        if self.product_types is not None:
            # Ordered set: keep first occurrence
            object.__setattr__(
                self, "product_types", tuple(dict.fromkeys(ProductType(p) for p in self.product_types))
            )

        if isinstance(self.product_type_regex, str):
            try:
                compiled = re.compile(self.product_type_regex)
            except re.error as exc:
                raise ConfigError(
                    "product_type_regex",
                    f"Invalid product type regex '{self.product_type_regex}': {exc}",
                ) from exc
            object.__setattr__(self, "product_type_regex", compiled)

    @property
    def match_rule(self) -> MatchRule:
        if self.product_type_regex is not None:
            return ByRegex(self.product_type_regex)
        return ByEnumSet(self.product_types or ())

    @property
    def supports_indexing(self) -> bool:
        return self.index_error_message is not None

    @property
    def is_enabled(self) -> bool:
        return True

    def merge(self, other: ServerConfig | None) -> ServerConfig:
        """Return a new config whose unset fields are taken from ``other``.

        None fields and zero ports count as unset. Merging with None returns self.
        """
        if other is None:
            return self

        return ServerConfig(
            protocol=self.protocol if self.protocol is not None else other.protocol,
            host=self.host if self.host is not None else other.host,
            port=self.port or other.port,
            index_protocol=(
                self.index_protocol if self.index_protocol is not None else other.index_protocol
            ),
            index_port=self.index_port or other.index_port,
            service_protocol=(
                self.service_protocol
                if self.service_protocol is not None
                else other.service_protocol
            ),
            service_port=self.service_port or other.service_port,
            product_types=(
                self.product_types if self.product_types is not None else other.product_types
            ),
            product_type_regex=(
                self.product_type_regex
                if self.product_type_regex is not None
                else other.product_type_regex
            ),
            index_error_message=(
                self.index_error_message
                if self.index_error_message is not None
                else other.index_error_message
            ),
        )

    def with_index_server(self, details: ServerDetails) -> ServerConfig:
        """Return a new config pointing its index settings at ``details``.

        Only the connection settings are carried over; product type matching
        and the index error message are dropped.
        """
        return ServerConfig(
            protocol=self.protocol,
            host=self.host,
            port=self.port,
            index_protocol=details.protocol,
            index_port=details.port,
            service_protocol=self.service_protocol,
            service_port=self.service_port,
        )

    def basic_validate(self, component: str | None = None) -> None:
        """Check the settings needed before any network call is attempted.

        Raises:
            ConfigError: If the port is out of range or the host is blank.
        """
        if not MIN_PORT <= self.port <= MAX_PORT:
            raise ConfigError(
                component, f"{component}: port number must be between {MIN_PORT} and {MAX_PORT}."
            )
        if self.host is None or not self.host.strip():
            raise ConfigError(component, f"{component}: host name must not be blank.")

    def to_aci_server_details(self) -> AciServerDetails:
        return AciServerDetails(
            protocol=self.protocol or TransportProtocol.HTTP,
            host=self.host or "",
            port=self.port,
        )

    def to_server_details(self) -> ServerDetails:
        """The index port of this server as a ServerDetails."""
        return ServerDetails(
            protocol=self.index_protocol or TransportProtocol.HTTP,
            host=self.host or "",
            port=self.index_port,
        )

    def to_service_server_details(self) -> AciServerDetails:
        return AciServerDetails(
            protocol=self.service_protocol or TransportProtocol.HTTP,
            host=self.host or "",
            port=self.service_port,
        )

    def to_dict(self) -> dict[str, object]:
        result: dict[str, object] = {
            "protocol": str(self.protocol or TransportProtocol.HTTP).upper(),
            "host": self.host,
            "port": self.port,
        }
        if self.index_port:
            result["indexProtocol"] = str(self.index_protocol or TransportProtocol.HTTP).upper()
            result["indexPort"] = self.index_port
        if self.service_port:
            result["serviceProtocol"] = str(
                self.service_protocol or TransportProtocol.HTTP
            ).upper()
            result["servicePort"] = self.service_port
        if self.product_types is not None:
            result["productType"] = [p.value for p in self.product_types]
        if self.product_type_regex is not None:
            result["productTypeRegex"] = self.product_type_regex.pattern
        if self.index_error_message is not None:
            result["indexErrorMessage"] = self.index_error_message
        return result


# ─── Validation results ───────────────────────────────────────


@dataclass(frozen=True, slots=True)
class IncorrectServerType:
    """The server answered, but is not one of the configured product types."""

    friendly_names: tuple[str, ...] = ()
    validation: Validation = field(default=Validation.INCORRECT_SERVER_TYPE, init=False)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validating a ServerConfig. Valid results carry no reason."""

    valid: bool
    reason: Validation | IncorrectServerType | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def failed(cls, reason: Validation | IncorrectServerType) -> ValidationResult:
        return cls(valid=False, reason=reason)

    def to_dict(self) -> dict[str, object]:
        reason: object
        if isinstance(self.reason, IncorrectServerType):
            reason = {
                "validation": self.reason.validation.value,
                "friendly_names": list(self.reason.friendly_names),
            }
        elif self.reason is None:
            reason = None
        else:
            reason = self.reason.value
        return {"valid": self.valid, "reason": reason}
