"""Tests for index and service port probes (validation/probes.py)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from aci_config.errors import AciServiceError, IndexingError
from aci_config.models import (
    AciServerDetails,
    IndexProbeResult,
    ServerDetails,
    TransportProtocol,
)
from aci_config.validation.probes import (
    find_index_protocol,
    find_service_protocol,
    probe_index,
    probe_service,
)

_DETAILS = ServerDetails(protocol=TransportProtocol.HTTP, host="idx.local", port=9001)


def _indexing(side_effect=None, return_value: str = "INDEXID=7") -> MagicMock:
    service = MagicMock()
    service.execute_command = AsyncMock(side_effect=side_effect, return_value=return_value)
    return service


class TestProbeIndex:
    async def test_expected_error_confirms(self):
        service = _indexing(side_effect=IndexingError("Bad command"))

        assert await probe_index(service, _DETAILS, "Bad command") is IndexProbeResult.CONFIRMED

    async def test_other_error_does_not_confirm(self):
        service = _indexing(side_effect=IndexingError("ERRORPARAMBAD"))

        result = await probe_index(service, _DETAILS, "Bad command")

        assert result is IndexProbeResult.NOT_CONFIRMED

    async def test_success_does_not_confirm(self):
        result = await probe_index(_indexing(), _DETAILS, "Bad command")

        assert result is IndexProbeResult.NOT_CONFIRMED

    async def test_transport_error(self):
        service = _indexing(side_effect=AciServiceError("Connection refused"))

        result = await probe_index(service, _DETAILS, "Bad command")

        assert result is IndexProbeResult.TRANSPORT_ERROR

    async def test_no_indexing_service(self):
        assert await probe_index(None, _DETAILS, "x") is IndexProbeResult.TRANSPORT_ERROR


class TestFindIndexProtocol:
    async def test_stops_at_first_confirmation(self):
        service = _indexing(side_effect=IndexingError("Bad command"))

        protocol = await find_index_protocol(service, "idx.local", 9001, "Bad command")

        assert protocol is TransportProtocol.HTTP
        service.execute_command.assert_awaited_once()

    async def test_tries_https_after_http(self):
        service = _indexing(
            side_effect=[AciServiceError("reset"), IndexingError("Bad command")]
        )

        protocol = await find_index_protocol(service, "idx.local", 9001, "Bad command")

        assert protocol is TransportProtocol.HTTPS
        tried = [c.args[0].protocol for c in service.execute_command.call_args_list]
        assert tried == [TransportProtocol.HTTP, TransportProtocol.HTTPS]

    async def test_exhausted(self):
        service = _indexing(side_effect=IndexingError("nope"))

        assert await find_index_protocol(service, "idx.local", 9001, "Bad command") is None
        assert service.execute_command.await_count == 2


class TestProbeService:
    async def test_answer_is_success(self):
        aci = MagicMock()
        aci.execute_action = AsyncMock(return_value={})
        details = AciServerDetails(protocol=TransportProtocol.HTTP, host="h", port=9002)

        assert await probe_service(aci, details) is True
        aci.execute_action.assert_awaited_once_with(details, "getstatus")

    async def test_any_exception_is_failure(self):
        aci = MagicMock()
        aci.execute_action = AsyncMock(side_effect=ValueError("garbage"))
        details = AciServerDetails(protocol=TransportProtocol.HTTP, host="h", port=9002)

        assert await probe_service(aci, details) is False

    async def test_find_service_protocol_falls_back_to_https(self):
        aci = MagicMock()
        aci.execute_action = AsyncMock(side_effect=[AciServiceError("refused"), {}])

        protocol = await find_service_protocol(aci, "h", 9002)

        assert protocol is TransportProtocol.HTTPS

    async def test_find_service_protocol_exhausted(self):
        aci = MagicMock()
        aci.execute_action = AsyncMock(side_effect=AciServiceError("refused"))

        assert await find_service_protocol(aci, "h", 9002) is None
