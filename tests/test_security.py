import base64
import hashlib
import json
from datetime import timedelta

import pytest

from blog_api.clients.image_client import sign_params
from blog_api.config import settings
from blog_api.security import (
    InvalidToken,
    hash_password,
    issue_token,
    verify_password,
    verify_token,
)


def test_issued_token_verifies_to_subject():
    claims = verify_token(issue_token("user-1"))
    assert claims.subject == "user-1"
    assert claims.expires_at is not None


def test_token_signed_with_other_secret_is_rejected():
    token = issue_token("user-1", secret="some-other-signing-key-0123456789abcdef")
    with pytest.raises(InvalidToken):
        verify_token(token)


def test_tampered_payload_is_rejected():
    header, _, signature = issue_token("user-1").split(".")
    forged = base64.urlsafe_b64encode(json.dumps({"sub": "intruder"}).encode()).rstrip(b"=")
    with pytest.raises(InvalidToken):
        verify_token(f"{header}.{forged.decode()}.{signature}")


def test_expired_token_is_rejected():
    token = issue_token("user-1", expires_delta=timedelta(seconds=-30))
    with pytest.raises(InvalidToken):
        verify_token(token)


@pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c", "Bearer x"])
def test_malformed_token_is_rejected(garbage):
    with pytest.raises(InvalidToken):
        verify_token(garbage)


def test_expiry_can_be_disabled(monkeypatch):
    monkeypatch.setattr(settings, "access_token_expire_minutes", 0)
    claims = verify_token(issue_token("user-1"))
    assert claims.subject == "user-1"
    assert claims.expires_at is None


def test_password_hash_is_salted_and_verifiable():
    first = hash_password("pw")
    second = hash_password("pw")
    assert first != "pw"
    assert first != second
    assert verify_password("pw", first)[0] is True
    assert verify_password("wrong", first)[0] is False


def test_upload_signature_sorts_params_and_appends_secret():
    expected = hashlib.sha1(b"folder=medium-blog&timestamp=1700000000secret").hexdigest()
    assert sign_params({"timestamp": "1700000000", "folder": "medium-blog"}, "secret") == expected
