"""
Transcript feed client (async, httpx) for transcription producers.

Pushes live text and finalized segments to the `/api/update-text` resource and
confirms external storage of finalized segments. The base URL and timeout are
loaded from app.core.config.get_settings unless given explicitly.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

import httpx

from app.core.config import get_settings
from app.core.logger import get_logger

log = get_logger(__name__)

FEED_PATH = "/api/update-text"

StreamId = Union[str, int]


class TranscriptFeedError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class TranscriptFeedClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.TRANSCRIPT_FEED_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.FEED_TIMEOUT
        self._transport = transport
        self._aclient: Optional[httpx.AsyncClient] = None

    def _get_async_client(self) -> httpx.AsyncClient:
        if self._aclient is None:
            self._aclient = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._aclient

    async def _request(self, method: str, **kwargs: Any) -> Dict[str, Any]:
        client = self._get_async_client()
        resp = await client.request(method, FEED_PATH, **kwargs)
        if resp.is_error:
            try:
                message = resp.json().get("error") or resp.text
            except ValueError:
                message = resp.text
            log.warning("Transcript feed %s failed: %d %s", method, resp.status_code, message)
            raise TranscriptFeedError(resp.status_code, message)
        return resp.json()

    # -------------------------
    # Writes
    # -------------------------
    async def send_live(self, stream_id: StreamId, text: str, timestamp: Optional[int] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"text": text, "streamId": stream_id}
        if timestamp is not None:
            payload["timestamp"] = timestamp
        return await self._request("POST", json=payload)

    async def send_final(
        self,
        stream_id: StreamId,
        text: str,
        timestamp: Optional[int] = None,
        external_ref: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Finalize a segment; the server clears the stream's live text."""
        payload: Dict[str, Any] = {"text": text, "streamId": stream_id, "finalized": True}
        if timestamp is not None:
            payload["timestamp"] = timestamp
        if external_ref is not None:
            payload["externalRef"] = external_ref
        return await self._request("POST", json=payload)

    async def mark_processed(self, external_ref: str, pending: bool = False) -> Dict[str, Any]:
        data = await self._request("PATCH", json={"externalRef": external_ref, "pending": pending})
        return data["transcript"]

    # -------------------------
    # Reads
    # -------------------------
    async def fetch_live(self, stream_id: StreamId) -> str:
        data = await self._request("GET", params={"streamId": str(stream_id)})
        return data.get("text", "")

    async def fetch_streams(self) -> List[str]:
        data = await self._request("GET")
        return list(data.get("streams", []))

    async def fetch_finalized(self, stream_id: Optional[StreamId] = None, newest_first: bool = False) -> List[Dict[str, Any]]:
        params = {"mode": "finalized", "order": "newest" if newest_first else "oldest"}
        if stream_id is not None:
            params["streamId"] = str(stream_id)
        data = await self._request("GET", params=params)
        return list(data.get("transcripts", []))

    async def aclose(self) -> None:
        if self._aclient is not None:
            await self._aclient.aclose()
            self._aclient = None
