import pytest

from restapi.core.errors import (
    AppError,
    EncodingError,
    InvalidArgument,
    NotFound,
    PersistenceError,
)
from restapi.interfaces.api.errors import to_app_error


@pytest.mark.parametrize(
    "exc, status, code",
    [
        (InvalidArgument("bad id"), 400, "US-000001"),
        (NotFound("gone"), 404, "US-000003"),
        (PersistenceError("db down"), 500, "US-000004"),
        (EncodingError("odd id"), 500, "US-000005"),
        (RuntimeError("boom"), 500, "US-000000"),
    ],
)
def test_error_kinds_map_to_status_and_code(exc, status, code):
    err = to_app_error(exc)
    assert err.status_code == status
    assert err.code == code


def test_unclassified_error_hides_details():
    err = to_app_error(RuntimeError("secret connection string"))
    body = err.to_dict()
    assert body["message"] == "internal error"
    assert "secret" not in body["developer_message"]


def test_app_error_body_shape():
    err = NotFound("user 1 not found", message="user not found")
    assert err.to_dict() == {
        "message": "user not found",
        "developer_message": "user 1 not found",
        "code": "US-000003",
    }


def test_app_error_code_override():
    err = AppError("x", code="US-000042")
    assert err.code == "US-000042"
    assert AppError.code == "US-000000"
