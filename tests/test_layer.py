"""Tests for junction.routing.layer: normalisation and classification."""

import pytest

from junction.errors import ConfigurationError
from junction.routing.dispatcher import Dispatcher
from junction.routing.layer import (
    Layer,
    LayerKind,
    classify,
    handler_name,
    is_dispatcher,
    normalize_mount_path,
    unwrap_listener,
)
from junction.server.asgi import ASGIAdapter


async def noop(request, response, next):
    await next()


class TestNormalizeMountPath:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("", "/"),
            ("/", "/"),
            ("/admin", "/admin"),
            ("/admin/", "/admin"),
            ("admin", "/admin"),
            ("/api/v1/", "/api/v1"),
        ],
    )
    def test_normalize(self, raw: str, expected: str) -> None:
        assert normalize_mount_path(raw) == expected


class TestClassify:
    def test_plain(self) -> None:
        assert classify(noop) is LayerKind.PLAIN

    def test_error(self) -> None:
        assert classify(noop, error=True) is LayerKind.ERROR

    def test_dispatcher_is_nested(self) -> None:
        assert classify(Dispatcher()) is LayerKind.NESTED

    def test_dispatcher_cannot_be_error_handler(self) -> None:
        with pytest.raises(ConfigurationError, match="error handler"):
            classify(Dispatcher(), error=True)

    def test_non_callable_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="callable"):
            classify("not a handler")

    def test_callable_object_is_plain(self) -> None:
        class Handler:
            async def __call__(self, request, response, next):
                await next()

        assert classify(Handler()) is LayerKind.PLAIN
        assert handler_name(Handler()) == "Handler"

    def test_is_dispatcher(self) -> None:
        assert is_dispatcher(Dispatcher())
        assert not is_dispatcher(noop)


class TestUnwrapListener:
    def test_adapter_unwraps_to_dispatcher(self) -> None:
        inner = Dispatcher()
        assert unwrap_listener(ASGIAdapter(inner)) is inner

    def test_other_handlers_pass_through(self) -> None:
        assert unwrap_listener(noop) is noop


class TestLayer:
    def test_root_prefix_is_empty(self) -> None:
        assert Layer("/", noop, LayerKind.PLAIN).prefix == ""

    def test_prefix(self) -> None:
        assert Layer("/admin", noop, LayerKind.PLAIN).prefix == "/admin"

    def test_plain_accepts_only_without_error(self) -> None:
        layer = Layer("/", noop, LayerKind.PLAIN)
        assert layer.accepts(None)
        assert not layer.accepts(ValueError("boom"))

    def test_nested_accepts_only_without_error(self) -> None:
        layer = Layer("/", Dispatcher(), LayerKind.NESTED)
        assert layer.accepts(None)
        assert not layer.accepts("boom")

    def test_error_accepts_only_with_error(self) -> None:
        layer = Layer("/", noop, LayerKind.ERROR)
        assert not layer.accepts(None)
        assert layer.accepts(ValueError("boom"))

    def test_frozen(self) -> None:
        layer = Layer("/", noop, LayerKind.PLAIN)
        with pytest.raises(AttributeError):
            layer.mount_path = "/x"  # type: ignore[misc]

    def test_owner_is_weak(self) -> None:
        dispatcher = Dispatcher()
        dispatcher.use(noop)
        layer = dispatcher.layers[0]
        assert layer.owner is dispatcher
        assert layer.name == "noop"
