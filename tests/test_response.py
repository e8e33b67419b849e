"""Tests for junction.http.response: ResponseWriter ASGI emission."""

from typing import Any

import pytest

from junction.http.response import ResponseWriter


def _writer() -> tuple[ResponseWriter, list[dict[str, Any]]]:
    messages: list[dict[str, Any]] = []

    async def send(message: dict[str, Any]) -> None:
        messages.append(message)

    return ResponseWriter(send), messages


class TestEnd:
    @pytest.mark.anyio
    async def test_end_sends_start_and_body(self) -> None:
        response, messages = _writer()
        response.set_header("Content-Type", "text/plain")
        await response.end("ok")

        assert messages[0]["type"] == "http.response.start"
        assert messages[0]["status"] == 200
        headers = dict(messages[0]["headers"])
        assert headers[b"content-type"] == b"text/plain"
        assert headers[b"content-length"] == b"2"
        assert messages[1] == {"type": "http.response.body", "body": b"ok", "more_body": False}
        assert response.finished

    @pytest.mark.anyio
    async def test_end_twice_is_noop(self) -> None:
        response, messages = _writer()
        await response.end("a")
        await response.end("b")
        assert len(messages) == 2

    @pytest.mark.anyio
    async def test_204_drops_body(self) -> None:
        response, messages = _writer()
        response.status = 204
        await response.end("unexpected")
        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"0"
        assert messages[1]["body"] == b""


class TestWrite:
    @pytest.mark.anyio
    async def test_write_streams_chunks(self) -> None:
        response, messages = _writer()
        await response.write("a")
        await response.write(b"b")
        await response.end()

        assert messages[0]["type"] == "http.response.start"
        assert [m["body"] for m in messages[1:]] == [b"a", b"b", b""]
        assert messages[-1]["more_body"] is False
        assert b"content-length" not in dict(messages[0]["headers"])

    @pytest.mark.anyio
    async def test_headers_locked_after_start(self) -> None:
        response, _ = _writer()
        await response.write("a")
        assert response.headers_sent
        with pytest.raises(RuntimeError, match="after the response has started"):
            response.set_header("X-Late", "1")

    @pytest.mark.anyio
    async def test_write_after_end_raises(self) -> None:
        response, _ = _writer()
        await response.end()
        with pytest.raises(RuntimeError, match="already ended"):
            await response.write("more")


class TestHeaders:
    def test_set_replaces_case_insensitively(self) -> None:
        response, _ = _writer()
        response.set_header("X-Thing", "1")
        response.set_header("x-thing", "2")
        assert response.get_header("X-THING") == "2"
        assert len(response.headers) == 1

    def test_add_keeps_both(self) -> None:
        response, _ = _writer()
        response.add_header("Set-Cookie", "a=1")
        response.add_header("Set-Cookie", "b=2")
        assert response.headers.raw() == [(b"set-cookie", b"a=1"), (b"set-cookie", b"b=2")]

    def test_remove(self) -> None:
        response, _ = _writer()
        response.set_header("X-Thing", "1")
        response.remove_header("x-thing")
        assert "X-Thing" not in response.headers

    def test_reason(self) -> None:
        response, _ = _writer()
        response.status = 404
        assert response.reason == "Not Found"
        response.status = 799
        assert response.reason == ""
