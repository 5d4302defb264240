"""Port: validating server configs against live servers."""

from __future__ import annotations

from typing import Protocol

from aci_config.models import ServerConfig, ValidationResult


class ServerValidatorPort(Protocol):
    """Port for validating a ServerConfig and discovering its ports."""

    async def validate(self, config: ServerConfig) -> ValidationResult:
        """Validate the config against the server it describes. Never raises."""
        ...

    async def fetch_server_details(self, config: ServerConfig) -> ServerConfig:
        """Return a copy of the config with index and service ports discovered."""
        ...
