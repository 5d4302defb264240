"""Read serialized server configs with schema tolerance.

A server config is a flat mapping::

    {"protocol": "HTTP", "host": "...", "port": 9000, "indexPort": 9001, ...}

Unknown keys are ignored so older and newer config files both load.
Transport protocols default to HTTP when absent.
"""

from __future__ import annotations

from collections.abc import Mapping

from aci_config.errors import ConfigError, ConfigReadError
from aci_config.models import ProductType, ServerConfig, TransportProtocol


def parse_server_config(raw: Mapping[str, object], source: str = "") -> ServerConfig:
    """Build a ServerConfig from its serialized form.

    Raises:
        ConfigReadError: If a known key holds a value of the wrong shape.
    """
    where = f" in {source}" if source else ""
    if not isinstance(raw, Mapping):
        raise ConfigReadError(f"Invalid server config{where}: expected a mapping.")

    try:
        return ServerConfig(
            protocol=_parse_protocol(raw.get("protocol")),
            host=_parse_host(raw.get("host")),
            port=_parse_port(raw.get("port"), "port"),
            index_protocol=_parse_protocol(raw.get("indexProtocol")),
            index_port=_parse_port(raw.get("indexPort"), "indexPort"),
            service_protocol=_parse_protocol(raw.get("serviceProtocol")),
            service_port=_parse_port(raw.get("servicePort"), "servicePort"),
            product_types=_parse_product_types(raw.get("productType")),
            product_type_regex=_parse_optional_str(raw.get("productTypeRegex")),
            index_error_message=_parse_optional_str(raw.get("indexErrorMessage")),
        )
    except (ConfigError, ValueError, TypeError) as exc:
        raise ConfigReadError(f"Invalid server config{where}: {exc}") from exc


def merge_server_configs(*layers: ServerConfig | None) -> ServerConfig:
    """Fold several config sources into one. Earlier layers take precedence.

    Parsed layers always carry a transport protocol (HTTP when absent), so the
    protocols of the first layer win over anything later layers set.
    """
    result: ServerConfig | None = None
    for layer in layers:
        if layer is None:
            continue
        result = layer if result is None else result.merge(layer)
    return result if result is not None else ServerConfig()


# ─── Field parsers ───────────────────────────────────────────


def _parse_protocol(value: object) -> TransportProtocol:
    if value is None or value == "":
        return TransportProtocol.HTTP
    return TransportProtocol(str(value).lower())


def _parse_host(value: object) -> str | None:
    return None if value is None else str(value)


def _parse_port(value: object, name: str) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise TypeError(f"{name} must be an integer, got {value!r}")
    return int(value)  # type: ignore[arg-type]


def _parse_product_types(value: object) -> tuple[ProductType, ...] | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = [token for token in value.split(",") if token.strip()]
    if not isinstance(value, list | tuple):
        raise TypeError(f"productType must be a list, got {type(value).__name__}")
    return tuple(ProductType(str(token).strip().upper()) for token in value)


def _parse_optional_str(value: object) -> str | None:
    return None if value is None else str(value)
