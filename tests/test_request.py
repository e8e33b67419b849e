"""Tests for junction.http.request: immutable request and derivation."""

from typing import Any

import pytest

from junction.http.headers import Headers
from junction.http.request import Request


def _make_scope(**overrides: object) -> dict[str, object]:
    """Build a minimal valid ASGI HTTP scope dict."""
    base: dict[str, object] = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "path": "/",
        "query_string": b"",
        "root_path": "",
        "headers": [],
        "server": ("localhost", 8000),
        "client": ("127.0.0.1", 54321),
    }
    base.update(overrides)
    base.setdefault("raw_path", str(base["path"]).encode("latin-1"))
    return base


async def _no_body() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


class TestFromAsgi:
    def test_url_includes_query(self) -> None:
        scope = _make_scope(path="/admin/users", query_string=b"page=2")
        request = Request.from_asgi(scope, _no_body)
        assert request.url == "/admin/users?page=2"
        assert request.path == "/admin/users"
        assert request.query.get("page") == "2"

    def test_metadata(self) -> None:
        scope = _make_scope(
            method="POST",
            headers=[(b"content-type", b"application/json")],
        )
        request = Request.from_asgi(scope, _no_body)
        assert request.method == "POST"
        assert request.content_type == "application/json"
        assert request.server == ("localhost", 8000)
        assert request.client == ("127.0.0.1", 54321)
        assert request.original_url == ""
        assert request.mount_prefixes == ()


class TestDerivation:
    def test_with_url_records_prefix(self) -> None:
        request = Request(method="GET", url="/admin/users")
        child = request.with_url("/users", "/admin")
        assert child.url == "/users"
        assert child.base_path == "/admin"
        # The parent is untouched
        assert request.url == "/admin/users"
        assert request.mount_prefixes == ()

    def test_with_url_without_prefix(self) -> None:
        request = Request(method="GET", url="/a", mount_prefixes=("/x",))
        assert request.with_url("/b").mount_prefixes == ("/x",)

    def test_with_original_url_is_idempotent(self) -> None:
        request = Request(method="GET", url="/api/x").with_original_url()
        assert request.original_url == "/api/x"
        child = request.with_url("/x", "/api")
        assert child.with_original_url().original_url == "/api/x"

    def test_state_is_shared(self) -> None:
        request = Request(method="GET", url="/a/b")
        child = request.with_url("/b", "/a")
        child.state.user = "alice"
        assert request.state.user == "alice"

    def test_frozen(self) -> None:
        request = Request(method="GET", url="/")
        with pytest.raises(AttributeError):
            request.url = "/other"  # type: ignore[misc]


class TestComputed:
    def test_absolute_form(self) -> None:
        request = Request(method="GET", url="http://example.com/docs?x=1")
        assert request.protohost == "http://example.com"
        assert request.path == "/docs"
        assert request.query_string == "x=1"

    def test_no_query(self) -> None:
        request = Request(method="GET", url="/docs")
        assert request.query_string == ""
        assert len(request.query) == 0

    def test_headers_from_dict(self) -> None:
        request = Request(method="GET", url="/", headers=Headers.from_dict({"X-Token": "abc"}))
        assert request.headers.get("x-token") == "abc"
        assert "X-TOKEN" in request.headers


class TestBody:
    @pytest.mark.anyio
    async def test_body_read_once_and_shared(self) -> None:
        calls = 0

        async def receive() -> dict[str, Any]:
            nonlocal calls
            calls += 1
            if calls == 1:
                return {"type": "http.request", "body": b"hello ", "more_body": True}
            return {"type": "http.request", "body": b"world", "more_body": False}

        request = Request.from_asgi(_make_scope(method="POST"), receive)
        child = request.with_url("/x", "/api")

        assert await child.body() == b"hello world"
        assert await request.body() == b"hello world"
        assert calls == 2

    @pytest.mark.anyio
    async def test_default_body_is_empty(self) -> None:
        assert await Request(method="GET", url="/").body() == b""


class TestRawPath:
    def test_target_keeps_percent_encoding(self) -> None:
        scope = _make_scope(path="/files/a/b", raw_path=b"/files/a%2Fb", query_string=b"x=1")
        request = Request.from_asgi(scope, _no_body)
        assert request.url == "/files/a%2Fb?x=1"

    def test_target_falls_back_to_path(self) -> None:
        scope = _make_scope(path="/plain", query_string=b"")
        del scope["raw_path"]
        request = Request.from_asgi(scope, _no_body)
        assert request.url == "/plain"
