"""
In-memory transcript store shared by the HTTP routes.

Holds one live (in-progress) text per stream, last write wins, and an
append-mostly log of finalized transcripts kept sorted by (stream id,
timestamp). State lives for the lifetime of the process.
"""

from __future__ import annotations

import random
import string
import threading
import time
from typing import Dict, List, Optional

from app.core.errors import NotFoundError, ValidationError
from app.core.logger import get_logger
from app.schemas.transcript import FinalizedTranscript, LiveEntry

log = get_logger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_SUFFIX_LEN = 9


def now_ms() -> int:
    return int(time.time() * 1000)


def _sort_key(t: FinalizedTranscript):
    return (t.stream_id, t.timestamp)


def _check_write_args(stream_id, text, timestamp) -> None:
    if not isinstance(text, str):
        raise ValidationError("Text must be a string.")
    if not isinstance(stream_id, str):
        raise ValidationError("streamId must be a string.")
    if timestamp is not None and (isinstance(timestamp, bool) or not isinstance(timestamp, int)):
        raise ValidationError("timestamp must be an integer.")


class TranscriptStore:
    """Thread-safe store for live text and finalized transcripts.

    Route handlers run in the server's thread pool, so every operation holds
    the lock for its whole read-modify-write.
    """

    def __init__(self, lock: Optional[threading.Lock] = None) -> None:
        self._lock = lock or threading.Lock()
        self._live: Dict[str, LiveEntry] = {}
        self._finalized: List[FinalizedTranscript] = []
        self._ids: set[str] = set()

    def write_live(self, stream_id: str, text: str, timestamp: Optional[int] = None) -> LiveEntry:
        _check_write_args(stream_id, text, timestamp)
        entry = LiveEntry(
            stream_id=stream_id,
            text=text,
            timestamp=now_ms() if timestamp is None else timestamp,
        )
        with self._lock:
            self._live[stream_id] = entry
        log.debug("Live text for stream %s updated (%d chars)", stream_id, len(text))
        return entry.model_copy()

    def finalize(
        self,
        stream_id: str,
        text: str,
        timestamp: Optional[int] = None,
        external_ref: Optional[str] = None,
    ) -> FinalizedTranscript:
        """Record a completed transcript and clear the stream's live text.

        The live entry is kept (with empty text) so the stream stays
        discoverable.
        """
        _check_write_args(stream_id, text, timestamp)
        if external_ref is not None and not isinstance(external_ref, str):
            raise ValidationError("externalRef must be a string.")
        ts = now_ms() if timestamp is None else timestamp

        with self._lock:
            transcript = FinalizedTranscript(
                id=self._new_id(stream_id, ts),
                stream_id=stream_id,
                text=text,
                timestamp=ts,
                external_ref=external_ref,
                pending=True,
            )
            self._finalized.append(transcript)
            self._finalized.sort(key=_sort_key)
            self._ids.add(transcript.id)

            live = self._live.get(stream_id)
            if live is None:
                self._live[stream_id] = LiveEntry(stream_id=stream_id, text="", timestamp=ts)
            else:
                live.text = ""

        log.info("Finalized transcript %s for stream %s (ref=%s)", transcript.id, stream_id, external_ref)
        return transcript.model_copy()

    def _new_id(self, stream_id: str, timestamp: int) -> str:
        # Caller holds the lock
        while True:
            suffix = "".join(random.choices(_ID_ALPHABET, k=_ID_SUFFIX_LEN))
            candidate = f"{stream_id}-{timestamp}-{suffix}"
            if candidate not in self._ids:
                return candidate

    def get_live(self, stream_id: str) -> str:
        with self._lock:
            entry = self._live.get(stream_id)
            return entry.text if entry is not None else ""

    def list_streams(self) -> List[str]:
        with self._lock:
            return sorted(self._live)

    def live_text_by_stream(self) -> Dict[str, LiveEntry]:
        with self._lock:
            return {sid: entry.model_copy() for sid, entry in sorted(self._live.items())}

    def list_finalized(self, stream_id: Optional[str] = None, newest_first: bool = False) -> List[FinalizedTranscript]:
        with self._lock:
            items = [
                t.model_copy()
                for t in self._finalized
                if stream_id is None or t.stream_id == stream_id
            ]
        if newest_first:
            # Streams stay ascending; timestamps descend within each stream
            items.sort(key=lambda t: t.timestamp, reverse=True)
            items.sort(key=lambda t: t.stream_id)
        return items

    def mark_processed(self, external_ref: str, pending: bool) -> FinalizedTranscript:
        """Update the pending flag of the transcript correlated to external_ref.

        pending only moves from True to False; asking to set it back on a
        processed transcript is rejected.
        """
        if not isinstance(external_ref, str) or not external_ref:
            raise ValidationError("externalRef is required.")
        if not isinstance(pending, bool):
            raise ValidationError("pending must be a boolean.")

        with self._lock:
            match = next((t for t in self._finalized if t.external_ref == external_ref), None)
            if match is None:
                raise NotFoundError("Transcript not found.")
            if pending and not match.pending:
                raise ValidationError("Transcript already processed; pending cannot be restored.")
            match.pending = pending
            updated = match.model_copy()

        log.info("Transcript %s (ref=%s) pending=%s", updated.id, external_ref, pending)
        return updated

    def reset(self) -> None:
        with self._lock:
            self._live.clear()
            self._finalized.clear()
            self._ids.clear()


_store: Optional[TranscriptStore] = None


def get_transcript_store() -> TranscriptStore:
    global _store
    if _store is None:
        _store = TranscriptStore()
    return _store
