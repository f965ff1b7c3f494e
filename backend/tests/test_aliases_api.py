"""Tests for the bearer gate and alias forwarding endpoints."""
from __future__ import annotations

import json
import time
from typing import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from aliasvault.deps import get_addy_client
from aliasvault.main import app
from aliasvault.security import issue_token
from aliasvault.services.addy import AddyClient

Handler = Callable[[httpx.Request], httpx.Response]


class _Upstream:
    """Records requests and answers with a canned response."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


def _use_upstream(handler: Handler) -> None:
    async def _client():
        async with AddyClient(
            "addy-test-key",
            base_url="https://addy.test/api/v1",
            transport=httpx.MockTransport(handler),
        ) as client:
            yield client

    app.dependency_overrides[get_addy_client] = _client


@pytest.fixture(name="upstream")
def upstream_fixture(client: TestClient) -> _Upstream:
    upstream = _Upstream(httpx.Response(200, json={"data": [{"id": "a1", "email": "x@addy.test"}]}))
    _use_upstream(upstream)
    return upstream


# ---------------------
# Gate
# ---------------------


def test_missing_header_is_rejected(client: TestClient, token: str, upstream: _Upstream) -> None:
    resp = client.get("/aliases")
    assert resp.status_code == 401
    assert resp.json() == {
        "success": False,
        "error": {"code": "INVALID_TOKEN", "message": "Missing or invalid authorization header"},
    }
    assert upstream.requests == []


def test_non_bearer_scheme_is_rejected(client: TestClient, token: str, upstream: _Upstream) -> None:
    resp = client.get("/aliases", headers={"Authorization": f"Basic {token}"})
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "INVALID_TOKEN"


@pytest.mark.parametrize(
    "make_token",
    [
        lambda secret: "garbage",
        lambda secret: issue_token("someone-else"),
        lambda secret: issue_token(secret, now=time.time() - 7200),
    ],
    ids=["malformed", "wrong-secret", "expired"],
)
def test_invalid_tokens_share_one_error(
    client: TestClient, token: str, jwt_secret: str, upstream: _Upstream, make_token
) -> None:
    resp = client.get("/aliases", headers={"Authorization": f"Bearer {make_token(jwt_secret)}"})
    assert resp.status_code == 401
    assert resp.json()["error"] == {"code": "INVALID_TOKEN", "message": "Token is invalid or expired"}
    assert upstream.requests == []


def test_protected_route_before_setup(client: TestClient) -> None:
    resp = client.get("/aliases", headers={"Authorization": "Bearer whatever"})
    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "NOT_INITIALIZED"


def test_unknown_route_is_not_found(client: TestClient, auth_headers: dict[str, str]) -> None:
    resp = client.get("/nope", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == {"code": "NOT_FOUND", "message": "Endpoint not found"}


# ---------------------
# Forwarding
# ---------------------


def test_list_aliases(client: TestClient, auth_headers: dict[str, str], upstream: _Upstream) -> None:
    resp = client.get("/aliases", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": [{"id": "a1", "email": "x@addy.test"}]}

    sent = upstream.requests[0]
    assert sent.method == "GET"
    assert sent.url.path == "/api/v1/aliases"
    assert sent.headers["Authorization"] == "Bearer addy-test-key"


def test_create_alias_forwards_only_provided_fields(
    client: TestClient, auth_headers: dict[str, str], upstream: _Upstream
) -> None:
    upstream.response = httpx.Response(201, json={"data": {"id": "new"}})
    resp = client.post(
        "/aliases",
        json={"local_part": "  ", "domain": "anonaddy.me", "description": "", "recipient_ids": []},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    assert resp.json() == {"success": True, "data": {"id": "new"}}
    assert json.loads(upstream.requests[0].content) == {"domain": "anonaddy.me"}


def test_create_alias_passes_upstream_status(
    client: TestClient, auth_headers: dict[str, str], upstream: _Upstream
) -> None:
    upstream.response = httpx.Response(422, json={"message": "The local part has already been taken."})
    resp = client.post("/aliases", json={"local_part": "taken"}, headers=auth_headers)
    assert resp.status_code == 422
    assert resp.json()["error"] == {
        "code": "ADDY_API_ERROR",
        "message": "Failed to create alias",
        "details": "The local part has already been taken.",
    }


def test_update_alias_forwards_body_verbatim(
    client: TestClient, auth_headers: dict[str, str], upstream: _Upstream
) -> None:
    upstream.response = httpx.Response(200, json={"data": {"id": "a1", "description": "hi"}})
    resp = client.patch("/aliases/a1", json={"description": "hi", "from_name": None}, headers=auth_headers)
    assert resp.status_code == 200
    sent = upstream.requests[0]
    assert (sent.method, sent.url.path) == ("PATCH", "/api/v1/aliases/a1")
    assert json.loads(sent.content) == {"description": "hi", "from_name": None}


def test_delete_alias(client: TestClient, auth_headers: dict[str, str], upstream: _Upstream) -> None:
    upstream.response = httpx.Response(204)
    resp = client.delete("/aliases/a1", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert upstream.requests[0].method == "DELETE"


def test_enable_and_disable_alias(
    client: TestClient, auth_headers: dict[str, str], upstream: _Upstream
) -> None:
    upstream.response = httpx.Response(200, json={"data": {"id": "a1", "active": True}})
    resp = client.post("/aliases/a1/enable", headers=auth_headers)
    assert resp.json() == {"success": True, "data": {"id": "a1", "active": True}}

    upstream.response = httpx.Response(204)
    resp = client.post("/aliases/a1/disable", headers=auth_headers)
    assert resp.status_code == 200

    enable, disable = upstream.requests
    assert (enable.method, enable.url.path) == ("POST", "/api/v1/active-aliases")
    assert json.loads(enable.content) == {"id": "a1"}
    assert (disable.method, disable.url.path) == ("DELETE", "/api/v1/active-aliases/a1")


@pytest.mark.parametrize("path", ["/recipients", "/domains"])
def test_listing_errors_map_to_bad_gateway(
    client: TestClient, auth_headers: dict[str, str], upstream: _Upstream, path: str
) -> None:
    upstream.response = httpx.Response(401, json={"message": "Unauthenticated."})
    resp = client.get(path, headers=auth_headers)
    assert resp.status_code == 502
    assert resp.json()["error"]["details"] == "Unauthenticated."


def test_unreachable_upstream_is_internal_error(client: TestClient, auth_headers: dict[str, str]) -> None:
    def _down(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    _use_upstream(_down)
    resp = client.get("/domains", headers=auth_headers)
    assert resp.status_code == 500
    assert resp.json()["error"] == {"code": "INTERNAL_ERROR", "message": "Failed to fetch domains"}
