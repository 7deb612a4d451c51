import json

import pytest
from fastapi.testclient import TestClient

from main import app
from services.video_services import get_video_service
from sportsreels.video_pipeline.service import VideoAnalysisService
from sportsreels.tests.fakes import FakeCompressor

HEADERS = {"X-Team-Id": "T1", "X-Uploader-Id": "U1"}


@pytest.fixture
def service(storage, store, compressor, analyzer):
    return VideoAnalysisService(storage=storage, metadata_store=store, compressor=compressor, analyzer=analyzer)


@pytest.fixture
def client(service):
    app.dependency_overrides[get_video_service] = lambda: service
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def _upload(client, metadata, content=b"\x00\x01" * 2048, content_type="video/mp4"):
    return client.post(
        "/videos",
        files={"file": ("derby.mp4", content, content_type)},
        data={"metadata": json.dumps(metadata)},
        headers=HEADERS,
    )


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "sportsreels"}


def test_upload_and_browse(client, match_metadata):
    response = _upload(client, match_metadata)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["teamId"] == "T1"
    assert len(body["analysisData"]["playerActions"]) == 3

    video_id = body["id"]
    assert client.get(f"/videos/{video_id}").json()["title"] == "Derby Match"

    analysis = client.get(f"/videos/{video_id}/analysis").json()
    assert analysis["videoType"] == "match"

    actions = client.post(f"/videos/{video_id}/actions/search", json={"playerId": "p7"}).json()
    assert [a["action"] for a in actions] == ["pass", "shot"]

    moments = client.post(f"/videos/{video_id}/moments/search", json={"text": "winner"}).json()
    assert [m["type"] for m in moments] == ["chance"]


def test_validation_error_names_field(client, match_metadata):
    del match_metadata["matchDetails"]["venue"]

    response = _upload(client, match_metadata)

    assert response.status_code == 422
    assert response.json()["field"] == "match_details.venue"
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_non_video_file_is_rejected(client, match_metadata):
    response = _upload(client, match_metadata, content=b"%PDF", content_type="application/pdf")

    assert response.status_code == 422
    assert response.json()["field"] == "file.content_type"


def test_malformed_metadata_is_rejected(client):
    response = client.post(
        "/videos",
        files={"file": ("derby.mp4", b"\x00", "video/mp4")},
        data={"metadata": "{not json"},
        headers=HEADERS,
    )
    assert response.status_code == 422
    assert response.json()["field"] == "metadata"


def test_stage_failure_is_reported(storage, store, analyzer, match_metadata):
    service = VideoAnalysisService(storage=storage, metadata_store=store,
                                   compressor=FakeCompressor(fail=OSError("encoder crashed")), analyzer=analyzer)
    app.dependency_overrides[get_video_service] = lambda: service
    try:
        with TestClient(app) as client:
            response = _upload(client, match_metadata)
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 502
    assert response.json()["stage"] == "compressing"
    assert response.json()["retryable_from"] == "compress"


def test_unknown_video_is_404(client):
    assert client.get("/videos/missing").status_code == 404
    assert client.get("/videos/missing/analysis").status_code == 404


def test_search_without_analysis_is_empty(client, service, match_metadata, analyzer):
    analyzer.fail = RuntimeError("model unavailable")
    video_id = _upload(client, match_metadata).json()["id"]

    assert client.get(f"/videos/{video_id}/analysis").status_code == 404
    assert client.post(f"/videos/{video_id}/actions/search", json={}).json() == []


def test_reanalyze(client, analyzer, match_metadata):
    analyzer.fail = RuntimeError("model unavailable")
    body = _upload(client, match_metadata).json()
    assert body["status"] == "failed"

    analyzer.fail = None
    response = client.post(f"/videos/{body['id']}/reanalyze")

    assert response.status_code == 200
    assert response.json()["status"] == "completed"


def test_deduplicate(client, match_metadata):
    first = _upload(client, match_metadata).json()
    second = _upload(client, match_metadata).json()

    response = client.post("/videos/deduplicate", json={"title": "Derby Match", "teamId": "T1"})

    assert response.status_code == 200
    survivor = response.json()["id"]
    assert survivor in {first["id"], second["id"]}
    loser = first["id"] if survivor == second["id"] else second["id"]
    assert client.get(f"/videos/{loser}").status_code == 404
