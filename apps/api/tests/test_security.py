from __future__ import annotations

import time

from conftest import TEST_JWT_KEY, make_token
from jose import jwt
from starlette.requests import Request

from projectflow.core.security import get_token_from_request, get_user_id_from_request


def _request(authorization=None) -> Request:
    headers = []
    if authorization is not None:
        headers.append((b"authorization", authorization.encode("latin-1")))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


def test_token_from_bearer_header():
    assert get_token_from_request(_request("Bearer abc.def")) == "abc.def"
    assert get_token_from_request(_request("bearer   abc.def  ")) == "abc.def"


def test_token_missing_or_wrong_scheme():
    assert get_token_from_request(_request()) is None
    assert get_token_from_request(_request("Basic dXNlcjpwYXNz")) is None
    assert get_token_from_request(_request("Bearer ")) is None


def test_user_id_from_valid_token(auth_settings):
    assert get_user_id_from_request(_request(f"Bearer {make_token('user_1')}")) == "user_1"


def test_expired_or_foreign_tokens_yield_no_user(auth_settings):
    expired = jwt.encode({"sub": "user_1", "exp": int(time.time()) - 60}, TEST_JWT_KEY, algorithm="HS256")
    foreign = jwt.encode({"sub": "user_1"}, "someone-else", algorithm="HS256")
    no_sub = jwt.encode({"email": "a@example.com"}, TEST_JWT_KEY, algorithm="HS256")

    assert get_user_id_from_request(_request(f"Bearer {expired}")) is None
    assert get_user_id_from_request(_request(f"Bearer {foreign}")) is None
    assert get_user_id_from_request(_request(f"Bearer {no_sub}")) is None


def test_issuer_is_checked_when_configured(auth_settings, monkeypatch):
    monkeypatch.setattr(auth_settings, "CLERK_ISSUER", "https://clerk.example.com")
    token = jwt.encode({"sub": "user_1", "iss": "https://evil.example.com"}, TEST_JWT_KEY, algorithm="HS256")
    good = jwt.encode({"sub": "user_1", "iss": "https://clerk.example.com"}, TEST_JWT_KEY, algorithm="HS256")

    assert get_user_id_from_request(_request(f"Bearer {token}")) is None
    assert get_user_id_from_request(_request(f"Bearer {good}")) == "user_1"
