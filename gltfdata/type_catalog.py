# gltfdata/type_catalog.py

from enum import Enum, IntEnum
from typing import Union

import numpy as np

from .errors import InvalidComponentType, InvalidShape, TypeMismatch


class ElementShape(Enum):
    """Accessor element types"""
    SCALAR = "SCALAR"
    VEC2 = "VEC2"
    VEC3 = "VEC3"
    VEC4 = "VEC4"
    MAT2 = "MAT2"
    MAT3 = "MAT3"
    MAT4 = "MAT4"

    @property
    def num_components(self) -> int:
        return _COMPONENT_COUNTS[self]


_COMPONENT_COUNTS = {
    ElementShape.SCALAR: 1,
    ElementShape.VEC2: 2,
    ElementShape.VEC3: 3,
    ElementShape.VEC4: 4,
    ElementShape.MAT2: 4,
    ElementShape.MAT3: 9,
    ElementShape.MAT4: 16,
}


class NumericKind(Enum):
    """Width classes of component types"""
    BYTE = "byte"
    SHORT = "short"
    INT = "int"
    FLOAT = "float"


class ComponentType(IntEnum):
    """Accessor component types, keyed by their GL constants"""
    BYTE = 5120
    UNSIGNED_BYTE = 5121
    SHORT = 5122
    UNSIGNED_SHORT = 5123
    INT = 5124
    UNSIGNED_INT = 5125
    FLOAT = 5126

    @property
    def width(self) -> int:
        return _COMPONENT_TYPE_INFO[self][0]

    @property
    def unsigned(self) -> bool:
        return _COMPONENT_TYPE_INFO[self][1]

    @property
    def kind(self) -> NumericKind:
        return _COMPONENT_TYPE_INFO[self][2]

    def dtype(self, byte_order: str = '<') -> np.dtype:
        """numpy dtype of this component type in the given byte order"""
        return np.dtype(_COMPONENT_TYPE_INFO[self][3]).newbyteorder(byte_order)


# width, unsigned, kind, base dtype
_COMPONENT_TYPE_INFO = {
    ComponentType.BYTE: (1, False, NumericKind.BYTE, np.int8),
    ComponentType.UNSIGNED_BYTE: (1, True, NumericKind.BYTE, np.uint8),
    ComponentType.SHORT: (2, False, NumericKind.SHORT, np.int16),
    ComponentType.UNSIGNED_SHORT: (2, True, NumericKind.SHORT, np.uint16),
    ComponentType.INT: (4, False, NumericKind.INT, np.int32),
    ComponentType.UNSIGNED_INT: (4, True, NumericKind.INT, np.uint32),
    ComponentType.FLOAT: (4, False, NumericKind.FLOAT, np.float32),
}

_GL_NAMES = {
    5120: "GL_BYTE",
    5121: "GL_UNSIGNED_BYTE",
    5122: "GL_SHORT",
    5123: "GL_UNSIGNED_SHORT",
    5124: "GL_INT",
    5125: "GL_UNSIGNED_INT",
    5126: "GL_FLOAT",
}


def element_shape_for(shape: Union[str, ElementShape]) -> ElementShape:
    """Convert a type tag like 'VEC3' into an ElementShape"""
    if isinstance(shape, ElementShape):
        return shape
    try:
        return ElementShape(shape)
    except ValueError:
        raise InvalidShape(f"Invalid accessor type: {shape}") from None


def component_type_for(component_type: Union[int, ComponentType]) -> ComponentType:
    """Convert a GL constant into a ComponentType"""
    if isinstance(component_type, ComponentType):
        return component_type
    # bool is an int, but never a valid constant
    if isinstance(component_type, bool):
        raise InvalidComponentType(
            f"Invalid accessor component type: {component_type}")
    try:
        return ComponentType(component_type)
    except (ValueError, TypeError):
        raise InvalidComponentType(
            f"Invalid accessor component type: {component_type}") from None


def component_count(shape: Union[str, ElementShape]) -> int:
    return element_shape_for(shape).num_components


def component_width(component_type: Union[int, ComponentType]) -> int:
    return component_type_for(component_type).width


def is_unsigned_variant(component_type: Union[int, ComponentType]) -> bool:
    return component_type_for(component_type).unsigned


def element_size(shape, component_type) -> int:
    """Number of bytes of one tightly packed element"""
    return component_count(shape) * component_width(component_type)


def string_for(constant: int) -> str:
    """GL name of a component type constant"""
    try:
        return _GL_NAMES[int(constant)]
    except (KeyError, TypeError, ValueError):
        return f"UNKNOWN_GL_CONSTANT[{constant}]"


def _assert_kind(component_type, kind: NumericKind, expected: str):
    actual = component_type_for(component_type)
    if actual.kind is not kind:
        raise TypeMismatch(
            expected, string_for(actual),
            f"The type is not {expected}, but {string_for(actual)}")


def assert_is_byte_like(component_type):
    _assert_kind(component_type, NumericKind.BYTE,
                 "GL_BYTE or GL_UNSIGNED_BYTE")


def assert_is_short_like(component_type):
    _assert_kind(component_type, NumericKind.SHORT,
                 "GL_SHORT or GL_UNSIGNED_SHORT")


def assert_is_int_like(component_type):
    _assert_kind(component_type, NumericKind.INT,
                 "GL_INT or GL_UNSIGNED_INT")


def assert_is_float_like(component_type):
    _assert_kind(component_type, NumericKind.FLOAT, "GL_FLOAT")


KIND_ASSERTIONS = {
    NumericKind.BYTE: assert_is_byte_like,
    NumericKind.SHORT: assert_is_short_like,
    NumericKind.INT: assert_is_int_like,
    NumericKind.FLOAT: assert_is_float_like,
}
