"""HTTP surface, exercised through FastAPI's TestClient in mock mode."""

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app


@pytest.fixture
def client(test_settings):
    with TestClient(create_app(test_settings)) as c:
        yield c


def run_body(*types, text="  Hello   World  "):
    return {
        "steps": [{"id": str(i), "type": t} for i, t in enumerate(types, start=1)],
        "inputText": text,
    }


def test_run_clean_text(client):
    response = client.post("/api/workflow/run", json=run_body("clean_text"))

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "success"
    assert data["originalInput"] == "  Hello   World  "
    assert data["steps"][0]["output"] == "Hello World"
    assert data["steps"][0]["stepType"] == "clean_text"
    assert data["durationMs"] == data["steps"][0]["durationMs"]


def test_failed_run_is_returned_not_raised(client):
    response = client.post("/api/workflow/run", json=run_body("clean_text", "teleport", "summarize"))

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "failed"
    assert len(data["steps"]) == 2
    assert data["steps"][1]["output"] == "Error processing step: Unknown step type: teleport"


@pytest.mark.parametrize(
    "body, error",
    [
        ({"inputText": "x"}, "Invalid steps"),
        ({"steps": [], "inputText": "x"}, "Invalid steps"),
        ({"steps": [{"id": "1", "type": "clean_text"}]}, "Missing input text"),
        ({"steps": [{"id": "1", "type": "clean_text"}], "inputText": ""}, "Missing input text"),
    ],
)
def test_request_validation(client, body, error):
    response = client.post("/api/workflow/run", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": error}


def test_history_and_lookup(client):
    first = client.post("/api/workflow/run", json=run_body("clean_text")).json()
    second = client.post("/api/workflow/run", json=run_body("summarize", text="Test")).json()

    history = client.get("/api/history").json()
    assert [r["id"] for r in history] == [second["id"], first["id"]]

    assert client.get(f"/api/workflow/{first['id']}").json()["id"] == first["id"]
    assert client.get("/api/workflow/unknown").status_code == 404


def test_health_mock_mode(client):
    data = client.get("/api/health").json()

    assert data["backend"] == "healthy"
    assert data["llm"] == "missing_key"
    assert data["database"] == "init_required"
    assert "timestamp" in data


def test_health_reports_configured_provider(tmp_path):
    settings = Settings(
        _env_file=None,
        HUGGING_FACE_API_KEY=None,
        GEMINI_API_KEY="gm-key",
        HISTORY_FILE=str(tmp_path / "history.json"),
    )
    with TestClient(create_app(settings)) as c:
        data = c.get("/api/health").json()

    assert data["llm"] == "gemini"
    assert data["database"] == "connected"


def test_agents_catalog(client):
    agents = client.get("/api/agents").json()

    assert [a["type"] for a in agents] == [
        "clean_text", "summarize", "extract_key_points",
        "analyze_sentiment", "extract_action_items", "rewrite_polite",
    ]
    assert agents[0]["label"] == "Data Sanitizer"
