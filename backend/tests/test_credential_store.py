# tests/test_credential_store.py
from __future__ import annotations

import json

import pytest

from commission_dashboard.core.errors import AuthError, UnknownError, ValidationError
from commission_dashboard.services.credential_store import CredentialStore


def test_match_returns_user_without_password(users_file):
    user = CredentialStore(users_file).authenticate("a", "p")

    assert user.username == "a"
    assert user.id == "1"
    assert user.role == "admin"
    assert "password" not in user.model_dump()


def test_wrong_password_is_auth_error(users_file):
    with pytest.raises(AuthError) as exc:
        CredentialStore(users_file).authenticate("a", "wrong")

    assert exc.value.status_code == 401
    assert exc.value.message == "Invalid username or password"


def test_unknown_user_is_auth_error(users_file):
    with pytest.raises(AuthError):
        CredentialStore(users_file).authenticate("nobody", "p")


@pytest.mark.parametrize("username,password", [(None, "p"), ("a", None), ("", "p"), ("a", "")])
def test_missing_input_is_rejected_before_lookup(tmp_path, username, password):
    # the file does not exist: a lookup would raise UnknownError instead
    store = CredentialStore(tmp_path / "missing.json")

    with pytest.raises(ValidationError) as exc:
        store.authenticate(username, password)

    assert exc.value.status_code == 400


def test_match_is_exact_and_case_sensitive(users_file):
    with pytest.raises(AuthError):
        CredentialStore(users_file).authenticate("A", "p")
    with pytest.raises(AuthError):
        CredentialStore(users_file).authenticate("a", "P")


def test_file_is_read_fresh_on_every_attempt(users_file):
    store = CredentialStore(users_file)
    assert store.authenticate("a", "p").username == "a"

    rows = json.loads(users_file.read_text(encoding="utf-8"))
    rows[0]["password"] = "rotated"
    users_file.write_text(json.dumps(rows), encoding="utf-8")

    with pytest.raises(AuthError):
        store.authenticate("a", "p")
    assert store.authenticate("a", "rotated").username == "a"


def test_unreadable_store_is_unknown_error(tmp_path):
    path = tmp_path / "users.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(UnknownError):
        CredentialStore(path).authenticate("a", "p")


def test_store_must_be_a_list(tmp_path):
    path = tmp_path / "users.json"
    path.write_text(json.dumps({"username": "a"}), encoding="utf-8")

    with pytest.raises(UnknownError):
        CredentialStore(path).authenticate("a", "p")


def test_malformed_neighbour_does_not_block_login(tmp_path):
    path = tmp_path / "users.json"
    path.write_text(
        json.dumps(
            [
                {"id": 1, "username": "a", "password": "p", "role": "admin"},
                {"username": "broken", "password": "x", "email": "not-an-email"},
                "not-a-row",
            ]
        ),
        encoding="utf-8",
    )

    assert CredentialStore(path).authenticate("a", "p").username == "a"
    with pytest.raises(AuthError):
        CredentialStore(path).authenticate("a", "wrong")


def test_malformed_matching_row_is_unknown_error(tmp_path):
    path = tmp_path / "users.json"
    path.write_text(
        json.dumps([{"username": "broken", "password": "x", "email": "not-an-email"}]),
        encoding="utf-8",
    )

    with pytest.raises(UnknownError):
        CredentialStore(path).authenticate("broken", "x")
