"""Access tokens — issue/decode, expiry and tampering."""

import jwt
import pytest

from merch_store.core.errors import AuthenticationError
from merch_store.infrastructure.tokens import decode_token, issue_token


def test_issued_token_names_username():
    token = issue_token("alice", "secret", ttl_minutes=5)
    assert decode_token(token, "secret") == "alice"


def test_expired_token_rejected():
    token = issue_token("alice", "secret", ttl_minutes=-1)
    with pytest.raises(AuthenticationError, match="expired"):
        decode_token(token, "secret")


def test_wrong_secret_rejected():
    token = issue_token("alice", "secret", ttl_minutes=5)
    with pytest.raises(AuthenticationError):
        decode_token(token, "other")


def test_token_without_subject_rejected():
    token = jwt.encode({"exp": 4102444800}, "secret", algorithm="HS256")
    with pytest.raises(AuthenticationError):
        decode_token(token, "secret")


def test_garbage_rejected():
    with pytest.raises(AuthenticationError):
        decode_token("a.b.c", "secret")
