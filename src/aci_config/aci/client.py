"""HTTP client for ACI servers.

An ACI action is a GET against the server root::

    http://host:port/?action=GetVersion

and the answer is an XML ``autnresponse`` document whose ``<response>`` is
SUCCESS or ERROR, with the payload under ``<responsedata>``.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass

import httpx

from aci_config.errors import AciServiceError
from aci_config.models import AciServerDetails

logger = logging.getLogger(__name__)

_SUCCESS = "SUCCESS"


@dataclass
class HttpAciService:
    """Async adapter for AciServicePort over httpx."""

    http: httpx.AsyncClient

    async def execute_action(
        self,
        server: AciServerDetails,
        action: str,
        **parameters: str,
    ) -> dict[str, str]:
        params = {"action": action, **parameters}
        logger.debug("ACI %s -> %s", action, server.url)
        try:
            response = await self.http.get(server.url, params=params)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise AciServiceError(
                f"Failed to run {action} against {server.url}: {exc}"
            ) from exc

        return parse_response(response.text, action=action)


def parse_response(text: str, *, action: str = "") -> dict[str, str]:
    """Parse an ``autnresponse`` document into a flat field mapping.

    Leaf elements under ``<responsedata>`` become lower-cased keys with their
    namespace prefix removed. Direct children of ``<responsedata>`` take
    precedence; otherwise the first occurrence of a repeated field wins.

    Raises:
        AciServiceError: If the document is malformed or reports an error.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise AciServiceError(f"Malformed response to {action or 'action'}: {exc}") from exc

    status = _child_text(root, "response")
    data = _find_child(root, "responsedata")
    if status.upper() != _SUCCESS:
        description = ""
        if data is not None:
            for element in data.iter():
                if _local_name(element.tag) == "errordescription":
                    description = (element.text or "").strip()
                    break
        raise AciServiceError(
            f"{action or 'Action'} failed: {description or status or 'no response status'}"
        )

    fields: dict[str, str] = {}
    if data is None:
        return fields
    # The server's own fields sit directly under responsedata; nested entries
    # (child engines, databases) only fill names it does not report itself.
    for element in data:
        if not len(element):
            fields.setdefault(_local_name(element.tag), (element.text or "").strip())
    for element in data.iter():
        if element is data or len(element):
            continue
        fields.setdefault(_local_name(element.tag), (element.text or "").strip())
    return fields


# ─── XML helpers ─────────────────────────────────────────────


def _local_name(tag: str) -> str:
    """Strip ``{namespace}`` from an ElementTree tag and lower-case it."""
    return tag.rsplit("}", 1)[-1].lower()


def _find_child(parent: ET.Element, name: str) -> ET.Element | None:
    for child in parent:
        if _local_name(child.tag) == name:
            return child
    return None


def _child_text(parent: ET.Element, name: str) -> str:
    child = _find_child(parent, name)
    return "" if child is None else (child.text or "").strip()
