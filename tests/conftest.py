import pytest

from app.services.transcript_store import get_transcript_store


@pytest.fixture(autouse=True)
def clean_store():
    # The routes share the process-wide store; start every test empty
    store = get_transcript_store()
    store.reset()
    yield store
    store.reset()
