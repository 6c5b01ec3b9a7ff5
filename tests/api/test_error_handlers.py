"""
Tests for the error-kind → HTTP status mapping.

System role: Verification of uniform error responses
"""

import pytest
from fastapi.testclient import TestClient

from backend.api.error_handlers import ERROR_STATUS_MAP, status_for
from backend.core.exceptions import (
    ForbiddenError,
    InvalidStatusTransition,
    NotFoundError,
    PersistenceError,
    ProcessingError,
    QueueError,
    StorageError,
    UnauthenticatedError,
    ValidationError,
)
from backend.main import create_app


class TestStatusFor:
    """Test suite for status_for()."""

    @pytest.mark.parametrize(
        "exc,expected",
        [
            (ValidationError("bad"), 400),
            (UnauthenticatedError("who"), 401),
            (ForbiddenError("no"), 403),
            (NotFoundError("File", 1), 404),
            (StorageError("disk"), 500),
            (PersistenceError("db"), 500),
            (QueueError("broker"), 500),
            (ProcessingError("worker"), 500),
        ],
    )
    def test_each_kind_maps_to_its_status(self, exc, expected) -> None:
        assert status_for(exc) == expected

    def test_subclass_should_inherit_parent_status(self) -> None:
        """Test lookups walk the MRO."""
        assert InvalidStatusTransition not in ERROR_STATUS_MAP
        assert status_for(InvalidStatusTransition(1, "UPLOADED", "PROCESSED")) == 500

    def test_unknown_exception_should_be_500(self) -> None:
        assert status_for(RuntimeError("boom")) == 500


class TestUnhandledErrors:
    def test_unexpected_exception_should_render_generic_500(self, test_settings) -> None:
        """Test internal details never leak into the response body."""
        # Arrange
        app = create_app(test_settings)

        async def explode():
            raise RuntimeError("secret internal detail")

        app.add_api_route("/explode", explode)
        client = TestClient(app, raise_server_exceptions=False)

        # Act
        response = client.get("/explode")

        # Assert
        assert response.status_code == 500
        body = response.json()
        assert body["errorType"] == "InternalServerError"
        assert body["message"] == "Internal server error"
        assert "secret" not in response.text

    def test_unknown_route_should_use_error_body(self, test_settings) -> None:
        client = TestClient(create_app(test_settings))

        response = client.get("/nope")

        assert response.status_code == 404
        assert response.json()["errorType"] == "HTTPException"
