from fastapi.testclient import TestClient
from meetsync.main import app

client = TestClient(app)


def test_health_check():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] in ("ok", "degraded")
    assert data["app"]
    assert data["env"]
    assert data["database"] in ("ok", "error")
