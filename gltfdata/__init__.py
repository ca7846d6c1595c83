# gltfdata/__init__.py
"""
glTF data package.
Reads glTF and binary glTF assets and decodes their buffers into typed
accessor views.
"""

from .accessor_view import AccessorDescriptor, AccessorView, create_accessor_view
from .bounding_box import BoundingBox, BoundingVolumeComputer
from .buffer_views import BufferView, BufferViewResolver
from .byte_view import ByteView, RawBuffer
from .config import LoaderConfig
from .errors import (CapacityError, FormatError, GltfError, IndexOutOfRange,
                     InvalidComponentType, InvalidRange, InvalidShape, JsonError,
                     MissingBuffer, TypeMismatch, UnsupportedSceneFormat)
from .gltf_data import GltfData
from .model_parser import GltfReference, MeshData, ModelFormat, ModelParser
from .type_catalog import ComponentType, ElementShape, NumericKind

__all__ = [
    'AccessorDescriptor', 'AccessorView', 'create_accessor_view',
    'BoundingBox', 'BoundingVolumeComputer',
    'BufferView', 'BufferViewResolver', 'ByteView', 'RawBuffer',
    'LoaderConfig', 'GltfData',
    'GltfReference', 'MeshData', 'ModelFormat', 'ModelParser',
    'ComponentType', 'ElementShape', 'NumericKind',
    'GltfError', 'FormatError', 'UnsupportedSceneFormat', 'InvalidShape',
    'InvalidComponentType', 'TypeMismatch', 'CapacityError', 'IndexOutOfRange',
    'MissingBuffer', 'InvalidRange', 'JsonError',
]
