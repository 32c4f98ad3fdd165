import pytest
from pydantic import ValidationError

from restapi.interfaces.api.schemas import UserCreate, UserPatch, UserUpdate


def test_user_create_defaults_to_empty_fields():
    req = UserCreate()
    assert req.username == ""
    assert req.email == ""
    assert req.password is None
    assert req.password_hash is None


def test_user_create_reads_camel_case_hash():
    req = UserCreate.model_validate({"username": "a", "passwordHash": "h"})
    assert req.password_hash == "h"


def test_user_create_ignores_id_in_payload():
    req = UserCreate.model_validate({"id": "abc", "ID": "def", "username": "a"})
    assert "id" not in req.model_dump()


def test_user_update_requires_password_material():
    with pytest.raises(ValidationError):
        UserUpdate(username="a", email="a@x.com")


def test_user_update_requires_username_and_email():
    with pytest.raises(ValidationError):
        UserUpdate.model_validate({"passwordHash": "h"})


def test_user_update_accepts_plain_password():
    req = UserUpdate(username="a", email="a@x.com", password="secret")
    assert req.password == "secret"


def test_password_and_hash_are_mutually_exclusive():
    with pytest.raises(ValidationError):
        UserPatch.model_validate({"password": "p", "passwordHash": "h"})


def test_user_patch_tracks_only_supplied_fields():
    req = UserPatch.model_validate({"email": "new@x.com"})
    assert req.email == "new@x.com"
    assert req.username is None
