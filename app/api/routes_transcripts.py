from typing import Any, Optional

from fastapi import APIRouter, Body, Query

from app.core.config import get_settings
from app.core.errors import ValidationError
from app.core.logger import get_logger
from app.schemas.transcript import StatusUpdateRequest, WriteTextRequest, parse_body
from app.services.transcript_store import get_transcript_store

router = APIRouter()
log = get_logger(__name__)

ALLOWED_METHODS = ["GET", "POST", "PATCH"]
MODES = ("live", "finalized")
ORDERS = ("oldest", "newest")


@router.post("")
def write_text(payload: Any = Body(None)):
    """Store live text for a stream, or finalize it when `finalized` is true."""
    body = parse_body(WriteTextRequest, payload)
    store = get_transcript_store()
    stream_id = body.stream_id or get_settings().DEFAULT_STREAM_ID

    if body.finalized:
        store.finalize(stream_id, body.text, timestamp=body.timestamp, external_ref=body.external_ref)
    else:
        store.write_live(stream_id, body.text, timestamp=body.timestamp)
    return {"success": True}


@router.get("")
def query_text(
    stream_id: Optional[str] = Query(None, alias="streamId"),
    mode: Optional[str] = Query(None),
    order: str = Query("oldest"),
    stream: Optional[str] = Query(None),
    channel: Optional[str] = Query(None),
    legacy_type: Optional[str] = Query(None, alias="type"),
):
    """Read live text or finalized transcripts.

    `stream`/`channel` and `type` are accepted from older dashboards in place
    of `streamId` and `mode`.
    """
    given = [s for s in (stream_id, stream, channel) if s is not None]
    sid = None
    if given:
        # An empty id names the default stream, as it does for writes
        sid = next((s for s in given if s), get_settings().DEFAULT_STREAM_ID)
    mode = mode or legacy_type or "live"
    if mode not in MODES:
        raise ValidationError(f"mode must be one of {', '.join(MODES)}.")

    store = get_transcript_store()

    if mode == "finalized":
        if order not in ORDERS:
            raise ValidationError(f"order must be one of {', '.join(ORDERS)}.")
        transcripts = store.list_finalized(sid, newest_first=order == "newest")
        out: dict = {"transcripts": [t.model_dump(by_alias=True) for t in transcripts]}
        if sid is not None:
            out["streamId"] = sid
        return out

    if sid is not None:
        return {"text": store.get_live(sid), "streamId": sid}

    live = store.live_text_by_stream()
    return {
        "streams": list(live),
        "liveTextByStream": {k: v.model_dump(by_alias=True) for k, v in live.items()},
    }


@router.patch("")
def update_status(payload: Any = Body(None)):
    """Confirm (or re-flag) external storage of a finalized transcript."""
    body = parse_body(StatusUpdateRequest, payload)
    transcript = get_transcript_store().mark_processed(body.external_ref, body.pending)
    return {"success": True, "transcript": transcript.model_dump(by_alias=True)}

