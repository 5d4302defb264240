"""Exception hierarchy for aci-config.

All exceptions inherit from AciConfigError (single catch point).
Messages are written for the person fixing the config -- clear, no stack traces.
"""

from __future__ import annotations


class AciConfigError(Exception):
    """Base exception for all aci-config errors."""


class ConfigError(AciConfigError):
    """A server config is missing a required setting or has an invalid one."""

    def __init__(self, component: str | None, message: str) -> None:
        super().__init__(message)
        self.component = component


class ConfigReadError(AciConfigError):
    """A serialized server config could not be read."""


class AciServiceError(AciConfigError):
    """Error communicating with an ACI server."""


class IndexingError(AciConfigError):
    """The index port answered a command with an error message."""


class PortDiscoveryError(AciConfigError):
    """The index or service ports of a server could not be established."""
