"""
Name: Exception Handler Tests

Responsibilities:
  - error_code on AuthStoreError selects the HTTP status
  - Unknown error codes fall back to 500 INTERNAL_ERROR
  - Bodies are problem+json with the error_id attached
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from docauth.api.exception_handlers import _resolve_status, register_exception_handlers
from docauth.crosscutting.error_responses import PROBLEM_JSON_MEDIA_TYPE, ErrorCode
from docauth.crosscutting.exceptions import (
    AuthError,
    AuthStoreError,
    ConflictError,
    NotFoundError,
    PermissionDenied,
    ValidationError,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "exc,status_code,code",
    [
        (ValidationError("bad"), 400, ErrorCode.VALIDATION_ERROR),
        (AuthError(), 401, ErrorCode.UNAUTHORIZED),
        (PermissionDenied("no"), 403, ErrorCode.FORBIDDEN),
        (NotFoundError("gone"), 404, ErrorCode.NOT_FOUND),
        (ConflictError("taken"), 409, ErrorCode.CONFLICT),
        (AuthStoreError("boom"), 500, ErrorCode.INTERNAL_ERROR),
    ],
)
def test_status_follows_error_code(exc, status_code, code):
    assert _resolve_status(exc) == (status_code, code)


def _app_raising(exc: Exception) -> TestClient:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/boom")
    def boom():
        raise exc

    return TestClient(app, raise_server_exceptions=False)


def test_problem_json_carries_error_id():
    exc = ConflictError("Email is already registered.", error_id="err-1")

    response = _app_raising(exc).get("/boom")

    assert response.status_code == 409
    assert response.headers["content-type"].startswith(PROBLEM_JSON_MEDIA_TYPE)
    body = response.json()
    assert body["code"] == "CONFLICT"
    assert body["detail"] == "Email is already registered."
    assert {"error_id": "err-1"} in body["errors"]


def test_base_error_maps_to_internal():
    response = _app_raising(AuthStoreError("boom")).get("/boom")

    assert response.status_code == 500
    assert response.json()["code"] == "INTERNAL_ERROR"


def test_auth_error_sets_www_authenticate():
    response = _app_raising(AuthError()).get("/boom")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
