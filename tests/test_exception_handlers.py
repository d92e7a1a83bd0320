from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.exception_handlers import setup_exception_handlers
from app.core.exceptions import StorageError


def _app_with_failing_route():
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/unguarded")
    async def unguarded():
        raise StorageError("event store unreachable")

    return app


def test_uncaught_storage_error_returns_503_envelope():
    """A StorageError no route handled is rendered as a 503 error envelope"""
    client = TestClient(_app_with_failing_route())

    response = client.get("/unguarded")

    assert response.status_code == 503
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "storage_error"
    assert body["request_id"]
