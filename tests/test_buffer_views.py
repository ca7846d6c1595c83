# tests/test_buffer_views.py

import logging

import pytest

from gltfdata.buffer_views import (BufferView, BufferViewResolver, get_entity,
                                   iter_entities)
from gltfdata.byte_view import RawBuffer
from gltfdata.errors import InvalidRange, MissingBuffer


@pytest.fixture
def buffers():
    return {"data": RawBuffer("data", bytes(range(16)))}


def test_resolve(buffers):
    resolver = BufferViewResolver(buffers)
    view = resolver.resolve("v", {"buffer": "data", "byteOffset": 4,
                                  "byteLength": 8, "byteStride": 4})
    assert view.buffer_id == "data"
    assert view.byte_stride == 4
    assert view.view().tobytes() == bytes(range(4, 12))


def test_resolve_missing_buffer(buffers):
    with pytest.raises(MissingBuffer):
        BufferViewResolver(buffers).resolve("v", {"buffer": "other", "byteLength": 1})


@pytest.mark.parametrize("declared", [
    {"buffer": "data", "byteOffset": 10, "byteLength": 8},
    {"buffer": "data", "byteOffset": -1, "byteLength": 1},
    {"buffer": "data", "byteOffset": 0, "byteLength": -1},
    {"buffer": "data", "byteOffset": "0", "byteLength": 1},
])
def test_resolve_invalid_range(buffers, declared):
    with pytest.raises(InvalidRange):
        BufferViewResolver(buffers).resolve("v", declared)


def test_missing_byte_length_uses_remaining_capacity(buffers, caplog):
    with caplog.at_level(logging.WARNING):
        view = BufferViewResolver(buffers).resolve("v", {"buffer": "data", "byteOffset": 6})
    assert view.byte_length == 10
    assert "has no byteLength" in caplog.text


def test_resolve_all_keeps_going(buffers):
    resolver = BufferViewResolver(buffers)
    views = resolver.resolve_all({
        "broken": {"buffer": "missing", "byteLength": 4},
        "too_long": {"buffer": "data", "byteLength": 17},
        "good": {"buffer": "data", "byteLength": 16},
    })
    assert list(views) == ["good"]
    assert [buffer_view_id for buffer_view_id, _ in resolver.errors] == ["broken", "too_long"]
    assert isinstance(resolver.errors[0][1], MissingBuffer)
    assert isinstance(resolver.errors[1][1], InvalidRange)


def test_resolve_all_with_list_layout():
    buffers = {"0": RawBuffer(0, b'abcd')}
    views = BufferViewResolver(buffers).resolve_all([
        {"buffer": 0, "byteOffset": 1, "byteLength": 2},
    ])
    assert views["0"].view().tobytes() == b'bc'


def test_buffer_view_bounds():
    buffer = RawBuffer("b", bytes(4))
    with pytest.raises(InvalidRange):
        BufferView(buffer, 2, 3)
    assert BufferView(buffer, 2, 2).view().tobytes() == bytes(2)


def test_iter_entities():
    assert list(iter_entities({"a": {"x": 1}, "b": 3})) == [("a", {"x": 1})]
    assert list(iter_entities([{"x": 1}, {"y": 2}])) == [("0", {"x": 1}), ("1", {"y": 2})]
    assert list(iter_entities(None)) == []


def test_get_entity():
    assert get_entity({"a": {"x": 1}}, "a") == {"x": 1}
    assert get_entity([{"x": 1}], "0") == {"x": 1}
    assert get_entity([{"x": 1}], 0) == {"x": 1}
    assert get_entity([{"x": 1}], 1) is None
    assert get_entity([{"x": 1}], "a") is None
    assert get_entity(None, 0) is None
