# tests/test_accessor_view.py

import logging
import struct

import numpy as np
import pytest

from gltfdata.accessor_view import (AccessorDescriptor, AccessorView,
                                    create_accessor_view, create_byte,
                                    create_float, create_short)
from gltfdata.buffer_views import BufferView
from gltfdata.byte_view import ByteView
from gltfdata.errors import (CapacityError, IndexOutOfRange, InvalidRange, MissingBuffer,
                             TypeMismatch)
from gltfdata.gltf_data import GltfData
from gltfdata.type_catalog import ComponentType, ElementShape, NumericKind


def view_of(data, component_type, shape, count, **kwargs):
    return AccessorView(component_type, shape, count, ByteView(data), **kwargs)


def test_unsigned_byte_widens_without_sign_extension():
    view = view_of(b'\xff', ComponentType.UNSIGNED_BYTE, "SCALAR", 1)
    assert view.get_as_int(0, 0) == 255
    assert view.get_as_int(0) == 255


def test_signed_byte_keeps_sign():
    view = view_of(b'\xff', ComponentType.BYTE, "SCALAR", 1)
    assert view.get_as_int(0, 0) == -1


def test_unsigned_short_and_int():
    data = struct.pack('<HI', 0xFFFF, 0xFFFFFFFF)
    shorts = view_of(data[:2], ComponentType.UNSIGNED_SHORT, "SCALAR", 1)
    ints = view_of(data[2:], ComponentType.UNSIGNED_INT, "SCALAR", 1)
    assert shorts.get_as_int(0) == 65535
    assert ints.get_as_int(0) == 4294967295


def test_signed_short():
    view = view_of(struct.pack('<h', -300), ComponentType.SHORT, "SCALAR", 1)
    assert view.get_as_int(0) == -300


def test_get_keeps_component_type():
    view = view_of(struct.pack('<2f', 1.5, -2.25), ComponentType.FLOAT, "VEC2", 1)
    value = view.get(0, 1)
    assert value == -2.25
    assert value.dtype == np.float32


def test_global_component_index():
    data = bytes(range(12))
    view = view_of(data, ComponentType.UNSIGNED_BYTE, "VEC3", 4)
    assert view.total_num_components == 12
    for index in range(12):
        assert view.get_as_int(index) == index
        assert view.get_as_int(index // 3, index % 3) == index


@pytest.mark.parametrize("element, component", [(2, 0), (-1, 0), (0, 3), (0, -1)])
def test_index_out_of_range(element, component):
    view = view_of(bytes(6), ComponentType.UNSIGNED_BYTE, "VEC3", 2)
    with pytest.raises(IndexOutOfRange):
        view.get(element, component)


def test_global_index_out_of_range():
    view = view_of(bytes(6), ComponentType.UNSIGNED_BYTE, "VEC3", 2)
    with pytest.raises(IndexOutOfRange):
        view.get(6)


def test_strided_access():
    # VEC3 positions interleaved with one float of padding each
    values = [1, 2, 3, 0, 4, 5, 6, 0, 7, 8, 9, 0]
    data = struct.pack('<12f', *values)
    view = view_of(data, ComponentType.FLOAT, "VEC3", 3, byte_stride=16)
    assert view.byte_stride == 16
    assert [float(view.get(e, c)) for e in range(3) for c in range(3)] == \
        [1, 2, 3, 4, 5, 6, 7, 8, 9]


def test_byte_offset():
    data = b'\x00\x00\x0a\x0b'
    view = view_of(data, ComponentType.UNSIGNED_BYTE, "VEC2", 1, byte_offset=2)
    assert view.get_as_int(0, 0) == 10
    assert view.get_as_int(0, 1) == 11


def test_tightly_packed_stride():
    for shape in ElementShape:
        for component_type in ComponentType:
            size = shape.num_components * component_type.width
            view = view_of(bytes(size * 2), component_type, shape, 2)
            assert view.byte_stride == size


@pytest.mark.parametrize("count", [1, 2, 5])
def test_capacity_error(count):
    # Four bytes short of the last element
    data = bytes(12 * (count - 1) + 8)
    with pytest.raises(CapacityError):
        view_of(data, ComponentType.FLOAT, "VEC3", count)


def test_capacity_error_with_offset():
    with pytest.raises(CapacityError):
        view_of(bytes(12), ComponentType.FLOAT, "VEC3", 1, byte_offset=4)


def test_capacity_includes_stride_of_last_element():
    # The last element itself fits, but not its full stride
    with pytest.raises(CapacityError):
        view_of(bytes(28), ComponentType.FLOAT, "VEC3", 2, byte_stride=16)


def test_exact_capacity_is_accepted():
    view = view_of(bytes(32), ComponentType.FLOAT, "VEC3", 2, byte_stride=16)
    assert view.count == 2


def test_empty_accessor():
    view = view_of(b'', ComponentType.UNSIGNED_SHORT, "VEC2", 0)
    assert view.total_num_components == 0
    assert view.get_min_int() == [65535, 65535]
    assert view.get_max_int() == [0, 0]
    assert view.extract_compact() == b''


def test_min_max():
    data = struct.pack('<6H', 5, 60000, 1, 7, 3, 2)
    view = view_of(data, ComponentType.UNSIGNED_SHORT, "VEC2", 3)
    assert view.get_min_int() == [1, 2]
    assert view.get_max_int() == [5, 60000]
    assert view.get_min().dtype == np.uint16


def test_signed_min_max():
    view = view_of(b'\xff\x01\x80', ComponentType.BYTE, "SCALAR", 3)
    assert view.get_min_int() == [-128]
    assert view.get_max_int() == [1]


def test_float_min_max():
    data = struct.pack('<6f', 1, -2, 3, -4, 5, 0.5)
    view = view_of(data, ComponentType.FLOAT, "VEC3", 2)
    assert view.get_min().tolist() == [-4, -2, 0.5]
    assert view.get_max().tolist() == [1, 5, 3]


def test_integer_operations_reject_floats():
    view = view_of(bytes(4), ComponentType.FLOAT, "SCALAR", 1)
    with pytest.raises(TypeMismatch):
        view.get_as_int(0)
    with pytest.raises(TypeMismatch):
        view.get_min_int()


def test_extract_compact_from_strided_data():
    values = [1, 2, 3, -1, 4, 5, 6, -1, 7, 8, 9, -1]
    data = struct.pack('<12f', *values)
    strided = view_of(data, ComponentType.FLOAT, "VEC3", 3, byte_stride=16)

    compact = strided.extract_compact()
    assert len(compact) == 3 * 3 * 4

    packed = view_of(compact, ComponentType.FLOAT, "VEC3", 3)
    for e in range(3):
        for c in range(3):
            assert packed.get(e, c) == strided.get(e, c)


def test_extract_compact_with_offset_and_stride_for_shorts():
    data = b'\xee\xee' + struct.pack('<hxx', -5) + struct.pack('<hxx', 7)
    view = view_of(data, ComponentType.SHORT, "SCALAR", 2, byte_offset=2, byte_stride=4)
    assert view.extract_compact() == struct.pack('<2h', -5, 7)


def test_view_does_not_copy():
    backing = bytearray(4)
    view = view_of(backing, ComponentType.UNSIGNED_BYTE, "VEC4", 1)
    backing[3] = 200
    assert view.get_as_int(0, 3) == 200


def test_big_endian_byte_order():
    view = view_of(b'\x01\x00', ComponentType.UNSIGNED_SHORT, "SCALAR", 1, byte_order='>')
    assert view.get_as_int(0) == 256
    assert view.extract_compact() == b'\x01\x00'


def test_kind_restriction():
    data = bytes(4)
    view_of(data, ComponentType.UNSIGNED_SHORT, "VEC2", 1, kind=NumericKind.SHORT)
    with pytest.raises(TypeMismatch):
        view_of(data, ComponentType.UNSIGNED_SHORT, "VEC2", 1, kind=NumericKind.FLOAT)


def test_to_numpy_is_a_copy():
    backing = bytearray(b'\x01\x02')
    array = view_of(backing, ComponentType.UNSIGNED_BYTE, "VEC2", 1).to_numpy()
    backing[0] = 9
    assert array.tolist() == [[1, 2]]


def test_format_string_scalars():
    view = view_of(b'\x01\x02\xff', ComponentType.UNSIGNED_BYTE, "SCALAR", 3)
    assert view.format_string() == "[1, 2, 255]"


def test_format_string_rows():
    view = view_of(bytes([1, 2, 3, 4, 5, 6]), ComponentType.UNSIGNED_BYTE, "VEC2", 3)
    assert view.format_string("{}", 2) == "[(1, 2), (3, 4), \n (5, 6)]"


def test_format_string_floats():
    view = view_of(struct.pack('<2f', 0.5, 1.25), ComponentType.FLOAT, "VEC2", 1)
    assert view.format_string("{:.2f}") == "[(0.50, 1.25)]"


class TestDescriptor:

    def test_effective_stride(self):
        buffer_view = BufferView.over(bytes(24))
        descriptor = AccessorDescriptor(buffer_view, 0, 5126, "VEC3", 2)
        assert descriptor.component_type is ComponentType.FLOAT
        assert descriptor.element_shape is ElementShape.VEC3
        assert descriptor.effective_stride == 12
        assert AccessorDescriptor(buffer_view, 0, 5126, "VEC3", 1, 20).effective_stride == 20

    def test_capacity_checked_eagerly(self):
        buffer_view = BufferView.over(bytes(24))
        with pytest.raises(CapacityError):
            AccessorDescriptor(buffer_view, 4, 5126, "VEC3", 2)

    @pytest.mark.parametrize("byte_offset, count, byte_stride", [
        ("0", 1, 0), (0, 1.0, 0), (0, True, 0), (0, 1, None),
    ])
    def test_non_integer_layout(self, byte_offset, count, byte_stride):
        buffer_view = BufferView.over(bytes(24))
        with pytest.raises(InvalidRange):
            AccessorDescriptor(buffer_view, byte_offset, 5126, "VEC3", count, byte_stride)

    def test_typed_factories(self):
        descriptor = AccessorDescriptor(BufferView.over(bytes(8)), 0, 5121, "VEC4", 2)
        assert create_byte(descriptor).count == 2
        with pytest.raises(TypeMismatch):
            create_short(descriptor)
        with pytest.raises(TypeMismatch):
            create_float(descriptor)


def test_create_accessor_view_uses_buffer_view_stride():
    data = struct.pack('<4H', 1, 0, 2, 0)
    buffer_views = {"0": BufferView.over(data, byte_stride=4)}
    accessor = {"bufferView": 0, "componentType": 5123, "count": 2, "type": "SCALAR"}
    view = create_accessor_view(accessor, buffer_views)
    assert view.byte_stride == 4
    assert [view.get_as_int(i) for i in range(2)] == [1, 2]


def test_create_accessor_view_prefers_accessor_stride():
    data = struct.pack('<4H', 1, 0, 2, 0)
    buffer_views = {"view": BufferView.over(data, byte_stride=2)}
    accessor = {"bufferView": "view", "componentType": 5123, "count": 2,
                "type": "SCALAR", "byteStride": 4}
    assert create_accessor_view(accessor, buffer_views).get_as_int(1) == 2


def test_create_accessor_view_missing_buffer_view():
    with pytest.raises(MissingBuffer):
        create_accessor_view({"bufferView": "nope", "componentType": 5126,
                              "count": 1, "type": "SCALAR"}, {})


def test_interleaved_offset_beyond_count_times_stride(caplog):
    # Second attribute of an interleaved view that is exactly count * stride long
    gltf = {"accessors": {"normals": {"bufferView": "view", "byteOffset": 12,
                                      "byteStride": 24, "componentType": 5126,
                                      "count": 2, "type": "VEC3"}}}
    gltf_data = GltfData(gltf)
    gltf_data.buffer_views["view"] = BufferView.over(bytes(48))

    with caplog.at_level(logging.WARNING):
        with pytest.raises(CapacityError):
            gltf_data.get_accessor_view("normals")
    assert "Accessor normals" in caplog.text
