"""Tests for session tokens and their transport."""
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from starlette.requests import Request

from jobboard.core.errors import Unauthorized
from jobboard.core.security import SessionEngine, extract_token
from jobboard.models import Identity

IDENTITY = Identity(uid=42, email="jane@example.com", role="user")


@pytest.fixture
def sessions() -> SessionEngine:
    return SessionEngine("test-secret")


def _request(cookie: str | None = None, authorization: str | None = None) -> Request:
    headers = []
    if cookie is not None:
        headers.append((b"cookie", f"session={cookie}".encode()))
    if authorization is not None:
        headers.append((b"authorization", authorization.encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


def test_round_trip_preserves_claims(sessions: SessionEngine) -> None:
    assert sessions.verify(sessions.issue(IDENTITY)) == IDENTITY


def test_token_expires_after_seven_days(sessions: SessionEngine) -> None:
    issued = datetime.now(timezone.utc) - timedelta(days=7, minutes=1)
    token = sessions.issue(IDENTITY, now=issued)
    with pytest.raises(Unauthorized):
        sessions.verify(token)

    claims = jwt.decode(sessions.issue(IDENTITY), "test-secret", algorithms=["HS256"])
    assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60


def test_token_from_six_days_ago_is_still_valid(sessions: SessionEngine) -> None:
    issued = datetime.now(timezone.utc) - timedelta(days=6)
    assert sessions.verify(sessions.issue(IDENTITY, now=issued)).uid == 42


@pytest.mark.parametrize(
    "token",
    [
        None,
        "",
        "not-a-jwt",
        SessionEngine("other-secret").issue(IDENTITY),
        jwt.encode({"uid": 1, "email": "x@y.z"}, "test-secret", algorithm="HS256"),
        jwt.encode(
            {"uid": 1, "email": "x@y.z", "role": "root", "exp": 4102444800},
            "test-secret",
            algorithm="HS256",
        ),
    ],
)
def test_every_failure_is_the_same_unauthorized(sessions: SessionEngine, token) -> None:
    with pytest.raises(Unauthorized) as exc:
        sessions.verify(token)
    assert exc.value.message == "unauthorized"


def test_tampered_payload_is_rejected(sessions: SessionEngine) -> None:
    header, _, signature = sessions.issue(IDENTITY).split(".")
    forged_payload = jwt.encode(
        {"uid": 42, "email": "jane@example.com", "role": "admin", "exp": 4102444800},
        "guess",
        algorithm="HS256",
    ).split(".")[1]
    with pytest.raises(Unauthorized):
        sessions.verify(f"{header}.{forged_payload}.{signature}")


def test_cookie_takes_precedence_over_header() -> None:
    assert extract_token(_request(cookie="from-cookie", authorization="Bearer from-header")) == "from-cookie"


def test_bearer_header_is_the_fallback() -> None:
    assert extract_token(_request(authorization="Bearer abc.def.ghi")) == "abc.def.ghi"
    assert extract_token(_request(authorization="bearer abc")) == "abc"


def test_non_bearer_header_is_ignored() -> None:
    assert extract_token(_request(authorization="Basic dXNlcjpwdw==")) is None
    assert extract_token(_request(authorization="Bearer ")) is None
    assert extract_token(_request()) is None
