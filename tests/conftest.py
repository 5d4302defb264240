"""Shared test fixtures: scripted ACI and indexing services."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from unittest.mock import AsyncMock, MagicMock

import pytest

from aci_config.errors import AciServiceError, IndexingError
from aci_config.models import AciServerDetails, ServerDetails, TransportProtocol

# Route keys are (action, port) or (action, port, protocol); the more
# specific key wins. Values are response dicts or exceptions to raise.
Routes = Mapping[tuple, object]


def scripted_aci(routes: Routes) -> MagicMock:
    """Build an AciServicePort whose answers come from ``routes``."""

    async def execute_action(server: AciServerDetails, action: str, **parameters: str):
        await asyncio.sleep(0)
        action_key = action.lower()
        for key in ((action_key, server.port, server.protocol), (action_key, server.port)):
            if key in routes:
                answer = routes[key]
                if isinstance(answer, BaseException):
                    raise answer
                return answer
        raise AciServiceError(f"Connection refused: {server.url}")

    service = MagicMock()
    service.execute_action = AsyncMock(side_effect=execute_action)
    return service


def scripted_indexing(answers: Mapping[TransportProtocol, object]) -> MagicMock:
    """Build an IndexingServicePort answering per protocol.

    A string answer is raised as an IndexingError with that message, an
    exception is raised as-is, and None means the command was accepted.
    """

    async def execute_command(server: ServerDetails, command: str) -> str:
        answer = answers.get(server.protocol)
        if isinstance(answer, str):
            raise IndexingError(answer)
        if isinstance(answer, BaseException):
            raise answer
        return "INDEXID=1"

    service = MagicMock()
    service.execute_command = AsyncMock(side_effect=execute_command)
    return service


@pytest.fixture()
def refused_aci() -> MagicMock:
    """An ACI service where every action fails to connect."""
    return scripted_aci({})


@pytest.fixture()
def make_aci():
    return scripted_aci


@pytest.fixture()
def make_indexing():
    return scripted_indexing
