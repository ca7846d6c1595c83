# gltfdata/binary_gltf.py

"""Binary glTF container (KHR_binary_glTF) header handling.

Layout, all integers little-endian uint32:

    0..3    magic "glTF"
    4..7    version
    8..11   total length of the container in bytes
    12..15  length of the scene (JSON) chunk
    16..19  scene format, 0 for JSON
    20..    scene chunk, followed by the binary payload
"""

import json
import logging
import struct
from dataclasses import dataclass
from typing import Tuple, Union

from .errors import FormatError, UnsupportedSceneFormat

logger = logging.getLogger(__name__)

MAGIC = b'glTF'
HEADER_LENGTH = 20
SUPPORTED_VERSION = 1
SCENE_FORMAT_JSON = 0

_HEADER = struct.Struct('<4sIIII')


@dataclass(frozen=True)
class BinaryGltfHeader:
    version: int
    length: int
    scene_length: int
    scene_format: int

    @property
    def binary_length(self) -> int:
        return self.length - self.scene_length - HEADER_LENGTH


def is_binary_gltf(data: bytes) -> bool:
    return bytes(data[:4]) == MAGIC


def read_header(data: bytes) -> BinaryGltfHeader:
    if len(data) < HEADER_LENGTH:
        raise FormatError(
            f"Expected {HEADER_LENGTH} bytes for header, but only found {len(data)}")
    magic, version, length, scene_length, scene_format = _HEADER.unpack_from(data, 0)
    if magic != MAGIC:
        raise FormatError(
            f"Expected \"glTF\" header, but found {magic!r}, as ASCII: {list(magic)}")
    return BinaryGltfHeader(version, length, scene_length, scene_format)


def split(data: Union[bytes, memoryview]) -> Tuple[BinaryGltfHeader, memoryview, memoryview]:
    """Validate a complete container and return header, scene and payload.

    The scene and payload are views on ``data``; nothing is copied.
    """
    header = read_header(data)
    if header.version != SUPPORTED_VERSION:
        logger.warning(f"Found binary glTF version {header.version}, "
                       f"only {SUPPORTED_VERSION} is supported")
    if header.length != len(data):
        raise FormatError(
            f"The length field indicated {header.length} bytes, "
            f"but {len(data)} bytes have been read")
    if header.scene_format != SCENE_FORMAT_JSON:
        raise UnsupportedSceneFormat(
            f"The scene format is {header.scene_format}, but only "
            f"JSON ({SCENE_FORMAT_JSON}) is supported")
    if header.binary_length < 0:
        raise FormatError(
            f"The scene length {header.scene_length} exceeds the "
            f"container length {header.length}")
    memory = memoryview(data)
    scene_end = HEADER_LENGTH + header.scene_length
    return header, memory[HEADER_LENGTH:scene_end], memory[scene_end:header.length]


def create(gltf: Union[dict, bytes], binary: bytes = b'',
           version: int = SUPPORTED_VERSION) -> bytes:
    """Assemble a binary glTF container from a scene and a payload"""
    scene = gltf if isinstance(gltf, (bytes, bytearray)) else \
        json.dumps(gltf, separators=(',', ':')).encode('utf-8')
    # Pad the scene with spaces so that the payload starts 4-byte aligned
    scene = bytes(scene) + b' ' * (-len(scene) % 4)
    length = HEADER_LENGTH + len(scene) + len(binary)
    header = _HEADER.pack(MAGIC, version, length, len(scene), SCENE_FORMAT_JSON)
    return header + scene + bytes(binary)
