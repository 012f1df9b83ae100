"""Unit tests: bearer parsing and the users-service credential validator."""
import httpx
import pytest
from fastapi import FastAPI
from starlette.requests import Request

from auth.credentials import (
    Identity,
    UsersServiceValidator,
    get_credential_validator,
    identity_for_request,
    parse_bearer,
    require_identity,
)
from utils.errors import Unauthenticated

pytestmark = pytest.mark.unit


def _validator(handler) -> UsersServiceValidator:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return UsersServiceValidator(base_url="http://users-service:3000/", timeout=1.0, client=client)


def test_parse_bearer_returns_token():
    assert parse_bearer("Bearer abc.def.ghi") == "abc.def.ghi"
    assert parse_bearer("  bearer   tok  ") == "tok"


@pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer   ", "Token abc", "abc"])
def test_parse_bearer_rejects(header):
    with pytest.raises(Unauthenticated):
        parse_bearer(header)


def test_validator_forwards_token_and_resolves_id():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        return httpx.Response(200, json={"status": "success", "user": 1})

    identity = _validator(handler).validate("tok-1")
    assert identity == Identity(user_id=1)
    assert seen["url"] == "http://users-service:3000/users/user"
    assert seen["auth"] == "Bearer tok-1"


def test_validator_accepts_user_object():
    def handler(request):
        return httpx.Response(200, json={"status": "success", "user": {"id": 4, "username": "jeremy"}})

    assert _validator(handler).validate("t") == Identity(user_id=4, username="jeremy")


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, json={"status": "error"}),
        httpx.Response(500, text="boom"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"status": "error", "user": 1}),
        httpx.Response(200, json={"status": "success"}),
        httpx.Response(200, json={"status": "success", "user": True}),
        httpx.Response(200, json={"status": "success", "user": "abc"}),
        httpx.Response(200, json=["success"]),
    ],
)
def test_validator_rejections(response):
    with pytest.raises(Unauthenticated):
        _validator(lambda request: response).validate("t")


def test_validator_transport_error_is_unauthenticated():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(Unauthenticated):
        _validator(handler).validate("t")


def test_validator_is_called_every_time():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"status": "success", "user": 1})

    v = _validator(handler)
    v.validate("t")
    v.validate("t")
    assert len(calls) == 2


class _Recorder:
    def __init__(self):
        self.tokens = []

    def validate(self, token):
        self.tokens.append(token)
        return Identity(user_id=9)


def test_require_identity_short_circuits_without_header():
    rec = _Recorder()
    with pytest.raises(Unauthenticated):
        require_identity(_request(), authorization=None, validator=rec)
    assert rec.tokens == []


def test_require_identity_passes_token_to_validator():
    rec = _Recorder()
    request = _request()
    assert require_identity(request, authorization="Bearer xyz", validator=rec) == Identity(user_id=9)
    assert rec.tokens == ["xyz"]
    assert request.state.identity == Identity(user_id=9)


def _request(headers=None, app=None) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/locations",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
    }
    if app is not None:
        scope["app"] = app
    return Request(scope)


def test_identity_for_request_reuses_resolved_identity():
    request = _request()
    request.state.identity = Identity(user_id=3)
    assert identity_for_request(request) == Identity(user_id=3)


def test_identity_for_request_uses_overridden_validator():
    app = FastAPI()
    rec = _Recorder()
    app.dependency_overrides[get_credential_validator] = lambda: rec
    request = _request({"authorization": "Bearer abc"}, app=app)
    assert identity_for_request(request) == Identity(user_id=9)
    assert rec.tokens == ["abc"]


def test_identity_for_request_without_header():
    app = FastAPI()
    rec = _Recorder()
    app.dependency_overrides[get_credential_validator] = lambda: rec
    with pytest.raises(Unauthenticated):
        identity_for_request(_request(app=app))
    assert rec.tokens == []
