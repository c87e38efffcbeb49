from fastapi import APIRouter

from app.services.transcript_store import get_transcript_store

router = APIRouter()


@router.get("/ready")
def readiness_probe():
    store = get_transcript_store()
    return {"status": "ready", "streams": len(store.list_streams())}


@router.get("/live")
def liveness_probe():
    return {"status": "alive"}
