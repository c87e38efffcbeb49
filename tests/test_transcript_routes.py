from fastapi.testclient import TestClient

from app.main import app

URL = "/api/update-text"


def test_live_write_and_read():
    client = TestClient(app)

    r = client.post(URL, json={"text": "hello", "streamId": "A", "timestamp": 100})
    assert r.status_code == 200
    assert r.json() == {"success": True}

    r = client.get(URL, params={"streamId": "A"})
    assert r.status_code == 200
    assert r.json() == {"text": "hello", "streamId": "A"}


def test_finalize_scenario():
    client = TestClient(app)
    client.post(URL, json={"text": "hello", "streamId": "A", "timestamp": 100})
    r = client.post(URL, json={"text": "hello world", "streamId": "A", "timestamp": 200, "finalized": True})
    assert r.status_code == 200

    assert client.get(URL, params={"streamId": "A"}).json()["text"] == ""

    body = client.get(URL, params={"streamId": "A", "mode": "finalized"}).json()
    assert body["streamId"] == "A"
    assert len(body["transcripts"]) == 1
    t = body["transcripts"][0]
    assert t["streamId"] == "A"
    assert t["text"] == "hello world"
    assert t["timestamp"] == 200
    assert t["pending"] is True
    assert t["externalRef"] is None


def test_default_stream_id():
    client = TestClient(app)
    client.post(URL, json={"text": "hi"})
    body = client.get(URL).json()
    assert body["streams"] == ["default"]
    assert body["liveTextByStream"]["default"]["text"] == "hi"


def test_list_streams_and_live_map():
    client = TestClient(app)
    client.post(URL, json={"text": "b", "streamId": "B", "timestamp": 1})
    client.post(URL, json={"text": "a", "streamId": "A", "timestamp": 2})
    client.post(URL, json={"text": "c", "streamId": "C", "timestamp": 3, "finalized": True})

    body = client.get(URL).json()
    assert sorted(body["streams"]) == ["A", "B", "C"]
    assert body["liveTextByStream"]["A"] == {"streamId": "A", "text": "a", "timestamp": 2}
    assert body["liveTextByStream"]["C"]["text"] == ""


def test_finalized_all_streams_sorted():
    client = TestClient(app)
    client.post(URL, json={"text": "b", "streamId": "B", "timestamp": 50, "finalized": True})
    client.post(URL, json={"text": "a", "streamId": "A", "timestamp": 10, "finalized": True})

    body = client.get(URL, params={"mode": "finalized"}).json()
    assert "streamId" not in body
    assert [(t["streamId"], t["timestamp"]) for t in body["transcripts"]] == [("A", 10), ("B", 50)]


def test_finalized_newest_order():
    client = TestClient(app)
    for ts in (1, 3, 2):
        client.post(URL, json={"text": str(ts), "streamId": "A", "timestamp": ts, "finalized": True})
    body = client.get(URL, params={"mode": "finalized", "order": "newest"}).json()
    assert [t["timestamp"] for t in body["transcripts"]] == [3, 2, 1]


def test_numeric_and_legacy_fields():
    client = TestClient(app)
    r = client.post(URL, json={"text": "legacy", "channel_id": 3})
    assert r.status_code == 200
    assert client.get(URL, params={"channel": "3"}).json() == {"text": "legacy", "streamId": "3"}

    client.post(URL, json={"text": "done", "streamId": 3, "finalized": True, "uuid": "job-1"})
    body = client.get(URL, params={"stream": "3", "type": "finalized"}).json()
    assert body["transcripts"][0]["externalRef"] == "job-1"
    assert body["transcripts"][0]["streamId"] == "3"


def test_post_rejects_non_string_text():
    client = TestClient(app)
    r = client.post(URL, json={"text": 123, "streamId": "A"})
    assert r.status_code == 400
    assert r.json() == {"error": "Text must be a string."}
    assert client.get(URL).json()["streams"] == []


def test_post_rejects_missing_text_and_bad_types():
    client = TestClient(app)
    r = client.post(URL, json={"streamId": "A"})
    assert r.status_code == 400
    assert "text" in r.json()["error"]

    r = client.post(URL, json={"text": "x", "timestamp": "soon"})
    assert r.status_code == 400
    assert "timestamp" in r.json()["error"]

    r = client.post(URL, json=["text"])
    assert r.status_code == 400


def test_post_rejects_invalid_json():
    client = TestClient(app)
    r = client.post(URL, content=b"{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert "error" in r.json()


def test_get_rejects_unknown_mode():
    client = TestClient(app)
    r = client.get(URL, params={"mode": "archived"})
    assert r.status_code == 400


def test_patch_marks_processed():
    client = TestClient(app)
    client.post(URL, json={"text": "x", "streamId": "A", "timestamp": 1, "finalized": True, "externalRef": "r1"})

    r = client.patch(URL, json={"externalRef": "r1", "pending": False})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["transcript"]["externalRef"] == "r1"
    assert body["transcript"]["pending"] is False

    listed = client.get(URL, params={"mode": "finalized"}).json()["transcripts"]
    assert [t["pending"] for t in listed if t["externalRef"] == "r1"] == [False]


def test_patch_errors():
    client = TestClient(app)
    client.post(URL, json={"text": "x", "streamId": "A", "finalized": True, "externalRef": "r1"})

    r = client.patch(URL, json={"externalRef": "nope", "pending": False})
    assert r.status_code == 404
    assert r.json() == {"error": "Transcript not found."}

    r = client.patch(URL, json={"pending": False})
    assert r.status_code == 400
    assert r.json() == {"error": "externalRef is required."}

    r = client.patch(URL, json={"externalRef": "r1"})
    assert r.status_code == 400

    client.patch(URL, json={"externalRef": "r1", "pending": False})
    r = client.patch(URL, json={"externalRef": "r1", "pending": True})
    assert r.status_code == 400
    listed = client.get(URL, params={"mode": "finalized"}).json()["transcripts"]
    assert listed[0]["pending"] is False


def test_unsupported_methods():
    client = TestClient(app)
    for method in ("PUT", "DELETE", "TRACE", "PURGE", "OPTIONS"):
        r = client.request(method, URL)
        assert r.status_code == 405
        assert r.headers["allow"] == "GET, POST, PATCH"
        assert r.json() == {"error": f"Method {method} Not Allowed"}

    r = client.head(URL)
    assert r.status_code == 405
    assert r.headers["allow"] == "GET, POST, PATCH"


def test_other_http_errors_keep_default_shape():
    client = TestClient(app)
    r = client.get("/api/unknown")
    assert r.status_code == 404
    assert r.json() == {"detail": "Not Found"}

    r = client.put("/health/live")
    assert r.status_code == 405
    assert r.json() == {"detail": "Method Not Allowed"}


def test_health_probes():
    client = TestClient(app)
    assert client.get("/health/live").json() == {"status": "alive"}
    client.post(URL, json={"text": "x", "streamId": "A"})
    assert client.get("/health/ready").json() == {"status": "ready", "streams": 1}


def test_empty_stream_id_reads_default_stream():
    client = TestClient(app)
    client.post(URL, json={"text": "x", "streamId": ""})

    assert client.get(URL, params={"streamId": ""}).json() == {"text": "x", "streamId": "default"}

    client.post(URL, json={"text": "x y", "streamId": "", "finalized": True})
    body = client.get(URL, params={"streamId": "", "mode": "finalized"}).json()
    assert body["streamId"] == "default"
    assert [t["text"] for t in body["transcripts"]] == ["x y"]


def test_order_only_checked_for_finalized_queries():
    client = TestClient(app)
    client.post(URL, json={"text": "live", "streamId": "A"})

    r = client.get(URL, params={"streamId": "A", "order": ""})
    assert r.status_code == 200
    assert r.json()["text"] == "live"

    r = client.get(URL, params={"mode": "finalized", "order": "sideways"})
    assert r.status_code == 400
