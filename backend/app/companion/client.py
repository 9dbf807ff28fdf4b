"""
Selah Backend — Companion HTTP Client
======================================

What:  Thin async wrapper over the livestream REST endpoints.
How:   One httpx.AsyncClient per CompanionClient, bearer token on every
       request, camelCase JSON in and out (the API's wire format).
       Non-2xx answers raise httpx.HTTPStatusError via raise_for_status().

Usage:
    async with CompanionClient("https://selah.example", token) as client:
        stream = await client.get_livestream(7)
        await client.create_note(7, "Grace John 3:16", timestamp_seconds=95)
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from app.middleware.request_id import REQUEST_ID_HEADER, new_request_id

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class CompanionClient:
    """
    Args:
        base_url:  Server root, e.g. http://localhost:8000
        token:     Identity provider access token
        transport: Optional httpx transport (ASGITransport or MockTransport in tests)
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def __aenter__(self) -> "CompanionClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        # Correlates a client-side failure with the server's access log line
        headers = {REQUEST_ID_HEADER: new_request_id()}
        response = await self._client.request(method, path, headers=headers, **kwargs)
        response.raise_for_status()
        return response.json()

    # ── Livestreams ───────────────────────────────────────────────────────

    async def list_livestreams(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/livestreams")

    async def get_livestream(self, livestream_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/api/livestreams/{livestream_id}")

    async def create_livestream(
        self, title: str, source_url: str, description: Optional[str] = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"title": title, "sourceUrl": source_url}
        if description is not None:
            body["description"] = description
        return await self._request("POST", "/api/livestreams", json=body)

    async def update_position(self, livestream_id: int, position: int) -> Dict[str, Any]:
        return await self._request(
            "PATCH",
            f"/api/livestreams/{livestream_id}/position",
            json={"position": position},
        )

    # ── Notes ─────────────────────────────────────────────────────────────

    async def list_notes(self, livestream_id: int) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/api/livestreams/{livestream_id}/notes")

    async def create_note(
        self,
        livestream_id: int,
        content: str,
        timestamp_seconds: int = 0,
        bible_reference: Optional[str] = None,
    ) -> Dict[str, Any]:
        """The server fills bibleReference from the content when omitted."""
        body: Dict[str, Any] = {"content": content, "timestampSeconds": timestamp_seconds}
        if bible_reference is not None:
            body["bibleReference"] = bible_reference
        return await self._request(
            "POST", f"/api/livestreams/{livestream_id}/notes", json=body
        )

    async def delete_note(self, note_id: int) -> Dict[str, Any]:
        return await self._request("DELETE", f"/api/livestream-notes/{note_id}")

    # ── Detections ────────────────────────────────────────────────────────

    async def list_detected_verses(self, livestream_id: int) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/api/livestreams/{livestream_id}/detected-verses")

    async def add_detected_verse(
        self, livestream_id: int, bible_reference: str, timestamp_seconds: int = 0
    ) -> Dict[str, Any]:
        return await self._request(
            "POST",
            f"/api/livestreams/{livestream_id}/detected-verses",
            json={"bibleReference": bible_reference, "timestampSeconds": timestamp_seconds},
        )

    async def list_detected_hymns(self, livestream_id: int) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/api/livestreams/{livestream_id}/detected-hymns")

    async def add_detected_hymn(
        self,
        livestream_id: int,
        title: str,
        timestamp_seconds: int = 0,
        hymn_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"title": title, "timestampSeconds": timestamp_seconds}
        if hymn_id is not None:
            body["hymnId"] = hymn_id
        return await self._request(
            "POST", f"/api/livestreams/{livestream_id}/detected-hymns", json=body
        )

    async def submit_transcript(
        self,
        livestream_id: int,
        raw_text: str,
        segments: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """segments: [{"startSeconds", "endSeconds", "text"}, ...]"""
        return await self._request(
            "POST",
            f"/api/livestreams/{livestream_id}/transcript",
            json={"rawText": raw_text, "segments": segments or []},
        )
