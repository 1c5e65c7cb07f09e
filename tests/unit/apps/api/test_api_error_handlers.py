from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel, ConfigDict

from apps.api.common import register_api_error_handlers
from duokey.platform.errors import DuokeyError


class _ValidationPayload(BaseModel):
    """
    Validation payload model with deliberately non-lexicographic field order for sorting test.
    """

    model_config = ConfigDict(extra="forbid")

    b: int
    a: int


def _app() -> FastAPI:
    app = FastAPI()
    register_api_error_handlers(app=app)

    @app.get("/conflict")
    def conflict() -> None:
        raise DuokeyError(code="conflict", message="Conflict happened", details={"uuid": "abc"})

    @app.get("/unknown")
    def unknown() -> None:
        raise DuokeyError(code="something_else", message="Broken")

    @app.post("/validate")
    def validate(payload: _ValidationPayload) -> dict[str, int]:
        return {"a": payload.a, "b": payload.b}

    return app


def test_duokey_error_handler_maps_code_to_status_and_payload() -> None:
    """
    Verify DuokeyError is converted into deterministic API payload and status mapping.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Unknown codes fall back to HTTP 500.
    Raises:
        AssertionError: If payload shape or HTTP status mapping is broken.
    Side Effects:
        None.
    """
    client = TestClient(_app())

    conflict = client.get("/conflict")
    unknown = client.get("/unknown")

    assert conflict.status_code == 409
    assert conflict.json() == {
        "error": {
            "code": "conflict",
            "message": "Conflict happened",
            "details": {"uuid": "abc"},
        }
    }
    assert unknown.status_code == 500
    assert unknown.json()["error"]["details"] == {}


def test_request_validation_error_handler_returns_sorted_validation_errors() -> None:
    """
    Verify validation handler returns `validation_error` payload with sorted errors.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Errors are sorted by path, then code, then message.
    Raises:
        AssertionError: If response payload differs from deterministic contract.
    Side Effects:
        None.
    """
    client = TestClient(_app())

    response = client.post("/validate", json={"z": 1})

    assert response.status_code == 422
    assert response.json() == {
        "error": {
            "code": "validation_error",
            "message": "Validation failed",
            "details": {
                "errors": [
                    {"path": "body.a", "code": "required", "message": "Field required"},
                    {"path": "body.b", "code": "required", "message": "Field required"},
                    {
                        "path": "body.z",
                        "code": "extra_forbidden",
                        "message": "Extra inputs are not permitted",
                    },
                ]
            },
        }
    }


def test_duokey_error_rejects_blank_code_and_normalizes_details() -> None:
    error = DuokeyError(code=" conflict ", message=" m ", details={"b": (1, 2), "a": object})

    assert error.code == "conflict"
    assert error.to_payload()["error"]["details"] == {"a": str(object), "b": [1, 2]}
    with pytest.raises(ValueError):
        DuokeyError(code=" ", message="m")
