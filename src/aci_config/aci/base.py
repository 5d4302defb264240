"""Ports: ACI actions and index commands against a remote server."""

from __future__ import annotations

from typing import Protocol

from aci_config.models import AciServerDetails, ServerDetails


class AciServicePort(Protocol):
    """Port for executing ACI actions."""

    async def execute_action(
        self,
        server: AciServerDetails,
        action: str,
        **parameters: str,
    ) -> dict[str, str]:
        """Run ``action`` and return the flattened ``responsedata`` fields.

        Raises on any transport or ACI-level failure.
        """
        ...


class IndexingServicePort(Protocol):
    """Port for sending commands to an index port."""

    async def execute_command(self, server: ServerDetails, command: str) -> str:
        """Send an index command.

        Raises IndexingError when the index port answers with an error message.
        """
        ...
