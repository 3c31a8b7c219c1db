from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError
from app.main import app

client = TestClient(app)

def test_404_not_found():
    response = client.get("/non-existent-route")
    assert response.status_code == 404
    data = response.json()
    assert "error" in data
    assert "code" in data
    assert data["code"] == "HTTP_ERROR"

def test_validation_error_structure():
    # We can define a temporary route to test validation
    from pydantic import BaseModel

    class Item(BaseModel):
        name: str
        price: int

    @app.post("/test-validation")
    def create_item(item: Item):
        return item

    response = client.post("/test-validation", json={"name": "foo", "price": "invalid"})
    assert response.status_code == 422
    data = response.json()
    assert data["code"] == "VALIDATION_ERROR"
    assert "details" in data
    assert len(data["details"]) > 0

def test_custom_exception():
    from app.core.exceptions import NotFoundError

    @app.get("/test-custom-error")
    def trigger_custom_error():
        raise NotFoundError(message="Item not found")

    response = client.get("/test-custom-error")
    assert response.status_code == 404
    data = response.json()
    assert data["code"] == "NOT_FOUND"
    assert data["error"] == "Item not found"

def test_conflict_is_client_error():
    from app.core.exceptions import ConflictError

    @app.get("/test-conflict-error")
    def trigger_conflict():
        raise ConflictError()

    response = client.get("/test-conflict-error")
    assert response.status_code == 400
    assert response.json()["code"] == "CONFLICT"

def test_store_failure_is_dependency_error():
    @app.get("/test-store-error")
    async def trigger_store_error():
        raise ServerSelectionTimeoutError("no servers")

    response = client.get("/test-store-error")
    assert response.status_code == 503
    data = response.json()
    assert data["code"] == "DEPENDENCY_FAILURE"
    assert "no servers" not in data["error"]

def test_liveness_endpoint():
    response = client.get("/live")
    assert response.status_code == 200
    assert response.json() == {"status": "alive"}

def test_health_without_database():
    response = client.get("/health")
    assert response.status_code == 503
    assert response.json()["checks"]["database"] == "unhealthy"
