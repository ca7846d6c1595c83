# gltfdata/accessor_view.py

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import numpy as np

from .buffer_views import BufferView
from .byte_view import ByteView
from .errors import (CapacityError, IndexOutOfRange, InvalidRange,
                     MissingBuffer, TypeMismatch)
from .type_catalog import (KIND_ASSERTIONS, ComponentType, ElementShape,
                           NumericKind, component_type_for, element_shape_for,
                           string_for)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessorDescriptor:
    """Layout of typed elements inside a buffer view"""
    buffer_view: BufferView
    byte_offset: int
    component_type: ComponentType
    element_shape: ElementShape
    count: int
    byte_stride: int = 0

    def __post_init__(self):
        for name in ('byte_offset', 'count', 'byte_stride'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidRange(f"Expected an integer {name}, but found {value!r}")
        object.__setattr__(self, 'component_type',
                           component_type_for(self.component_type))
        object.__setattr__(self, 'element_shape',
                           element_shape_for(self.element_shape))
        if self.byte_offset < 0 or self.count < 0 or self.byte_stride < 0:
            raise CapacityError(
                f"Negative byteOffset ({self.byte_offset}), count "
                f"({self.count}) or byteStride ({self.byte_stride})")
        required = self.byte_offset + self.count * self.effective_stride
        if required > self.buffer_view.byte_length:
            raise CapacityError(
                f"The accessor has an offset of {self.byte_offset} and "
                f"{self.count} elements with a byte stride of "
                f"{self.effective_stride}, requiring {required} bytes, but "
                f"the buffer view has only {self.buffer_view.byte_length} bytes")

    @property
    def num_components(self) -> int:
        return self.element_shape.num_components

    @property
    def element_size(self) -> int:
        return self.num_components * self.component_type.width

    @property
    def effective_stride(self) -> int:
        return self.byte_stride if self.byte_stride else self.element_size


class AccessorView:
    """Typed, strided element access to the bytes of an accessor.

    One class covers all component types; the optional ``kind`` restricts
    the view to one width class (byte, short, int or float) and rejects
    descriptors of any other class with a TypeMismatch.

    The elements are exposed through a numpy array that is a strided view
    on the region's memory, so constructing a view never copies data.
    Signedness always follows the declared component type.
    """

    def __init__(self, component_type, element_shape, count: int,
                 region: ByteView, byte_offset: int = 0, byte_stride: int = 0,
                 kind: Optional[NumericKind] = None, byte_order: str = '<'):
        self.component_type = component_type_for(component_type)
        self.element_shape = element_shape_for(element_shape)
        if kind is not None:
            KIND_ASSERTIONS[kind](self.component_type)
        self.kind = self.component_type.kind
        self.count = count
        self.byte_offset = byte_offset
        self.byte_order = byte_order
        self.num_components = self.element_shape.num_components
        self.component_width = self.component_type.width
        element_width = self.num_components * self.component_width
        self.byte_stride = byte_stride if byte_stride else element_width

        _validate_capacity(byte_offset, count, self.byte_stride,
                           element_width, len(region))

        self._region = region
        self._array = np.ndarray(
            shape=(count, self.num_components),
            dtype=self.component_type.dtype(byte_order),
            buffer=region.memory,
            offset=byte_offset,
            strides=(self.byte_stride, self.component_width))

    @classmethod
    def from_descriptor(cls, descriptor: AccessorDescriptor,
                        region: Optional[ByteView] = None,
                        kind: Optional[NumericKind] = None,
                        byte_order: str = '<') -> "AccessorView":
        if region is None:
            region = descriptor.buffer_view.view()
        return cls(descriptor.component_type, descriptor.element_shape,
                   descriptor.count, region, descriptor.byte_offset,
                   descriptor.byte_stride, kind, byte_order)

    def __repr__(self):
        return (f"AccessorView({string_for(self.component_type)}, "
                f"{self.element_shape.value}, count={self.count})")

    @property
    def unsigned(self) -> bool:
        return self.component_type.unsigned

    @property
    def total_num_components(self) -> int:
        return self.count * self.num_components

    def _indices(self, element_index: int, component_index: Optional[int]):
        if component_index is None:
            if not 0 <= element_index < self.total_num_components:
                raise IndexOutOfRange(
                    f"Global component index {element_index} outside of "
                    f"[0, {self.total_num_components})")
            return divmod(element_index, self.num_components)
        if not 0 <= element_index < self.count:
            raise IndexOutOfRange(
                f"Element index {element_index} outside of [0, {self.count})")
        if not 0 <= component_index < self.num_components:
            raise IndexOutOfRange(
                f"Component index {component_index} outside of "
                f"[0, {self.num_components})")
        return element_index, component_index

    def get(self, element_index: int, component_index: Optional[int] = None):
        """Component value with the declared component type.

        With a single argument, the index is a global component index.
        """
        e, c = self._indices(element_index, component_index)
        return self._array[e, c]

    def get_as_int(self, element_index: int,
                   component_index: Optional[int] = None) -> int:
        """Component value widened to a Python int.

        Unsigned types are widened without sign extension, so a byte 0xFF
        is 255 for GL_UNSIGNED_BYTE and -1 for GL_BYTE.
        """
        self._require_integer()
        return int(self.get(element_index, component_index))

    def get_min(self) -> np.ndarray:
        if self.count == 0:
            return np.full(self.num_components, self._limits().max,
                           dtype=self._array.dtype)
        return self._array.min(axis=0)

    def get_max(self) -> np.ndarray:
        if self.count == 0:
            return np.full(self.num_components, self._limits().min,
                           dtype=self._array.dtype)
        return self._array.max(axis=0)

    def get_min_int(self) -> List[int]:
        self._require_integer()
        return [int(v) for v in self.get_min()]

    def get_max_int(self) -> List[int]:
        self._require_integer()
        return [int(v) for v in self.get_max()]

    def to_numpy(self) -> np.ndarray:
        """Copy of the elements as a (count, num_components) array"""
        return np.array(self._array, copy=True)

    def extract_compact(self) -> bytes:
        """Tightly packed copy of all components, in the view's byte order"""
        return np.ascontiguousarray(self._array).tobytes()

    def format_string(self, number_format: str = "{}",
                      elements_per_row: int = -1) -> str:
        """Human readable dump of all elements.

        Elements are wrapped into rows of ``elements_per_row`` elements
        when it is positive. ``number_format`` is a str.format pattern, for
        example "{:.3f}", or "{:n}" for locale-aware output.
        """
        integer = self.kind is not NumericKind.FLOAT
        parts = ["["]
        for e in range(self.count):
            if e > 0:
                parts.append(", ")
                if elements_per_row > 0 and e % elements_per_row == 0:
                    parts.append("\n ")
            components = []
            for c in range(self.num_components):
                value = self.get_as_int(e, c) if integer else float(self._array[e, c])
                components.append(number_format.format(value))
            if self.num_components > 1:
                parts.append("(" + ", ".join(components) + ")")
            else:
                parts.append(components[0])
        parts.append("]")
        return "".join(parts)

    def _require_integer(self):
        if self.kind is NumericKind.FLOAT:
            raise TypeMismatch(
                "an integer component type", string_for(self.component_type))

    def _limits(self):
        if self.kind is NumericKind.FLOAT:
            return np.finfo(self._array.dtype)
        return np.iinfo(self._array.dtype)


def _validate_capacity(byte_offset: int, count: int, byte_stride: int,
                       element_width: int, capacity: int):
    if byte_offset < 0 or count < 0 or byte_stride <= 0:
        raise CapacityError(
            f"Invalid byteOffset ({byte_offset}), count ({count}) or "
            f"byteStride ({byte_stride})")
    if count == 0:
        if byte_offset > capacity:
            raise CapacityError(
                f"The byte offset {byte_offset} exceeds the region "
                f"of {capacity} bytes")
        return
    last_byte = byte_offset + (count - 1) * byte_stride + element_width
    required = max(last_byte, byte_offset + count * byte_stride)
    if required > capacity:
        raise CapacityError(
            f"The accessor has an offset of {byte_offset} and {count} "
            f"elements with a byte stride of {byte_stride}, requiring "
            f"{required} bytes, but the region has only {capacity} bytes")


def create_byte(descriptor: AccessorDescriptor, **kwargs) -> AccessorView:
    return AccessorView.from_descriptor(descriptor, kind=NumericKind.BYTE, **kwargs)


def create_short(descriptor: AccessorDescriptor, **kwargs) -> AccessorView:
    return AccessorView.from_descriptor(descriptor, kind=NumericKind.SHORT, **kwargs)


def create_int(descriptor: AccessorDescriptor, **kwargs) -> AccessorView:
    return AccessorView.from_descriptor(descriptor, kind=NumericKind.INT, **kwargs)


def create_float(descriptor: AccessorDescriptor, **kwargs) -> AccessorView:
    return AccessorView.from_descriptor(descriptor, kind=NumericKind.FLOAT, **kwargs)


def create_descriptor(accessor: Dict[str, Any],
                      buffer_views: Mapping[str, BufferView]) -> AccessorDescriptor:
    """Build the descriptor of a JSON accessor.

    glTF 1.0 declares the byteStride on the accessor, glTF 2.0 on the
    bufferView; the accessor value wins when both are present.
    """
    buffer_view_id = accessor.get('bufferView')
    buffer_view = buffer_views.get(str(buffer_view_id))
    if buffer_view is None:
        raise MissingBuffer(
            f"Could not find bufferView data for bufferView ID {buffer_view_id}")
    byte_stride = accessor.get('byteStride') or buffer_view.byte_stride or 0
    return AccessorDescriptor(
        buffer_view=buffer_view,
        byte_offset=accessor.get('byteOffset', 0),
        component_type=accessor.get('componentType'),
        element_shape=accessor.get('type'),
        count=accessor.get('count', 0),
        byte_stride=byte_stride)


def create_accessor_view(accessor: Dict[str, Any],
                         buffer_views: Mapping[str, BufferView],
                         kind: Optional[NumericKind] = None,
                         byte_order: str = '<') -> AccessorView:
    descriptor = create_descriptor(accessor, buffer_views)
    logger.debug(f"Creating accessor view for {descriptor.count} "
                 f"{descriptor.element_shape.value} elements of "
                 f"{string_for(descriptor.component_type)}")
    return AccessorView.from_descriptor(descriptor, kind=kind,
                                        byte_order=byte_order)
