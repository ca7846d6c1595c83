# tests/conftest.py

import struct

import pytest

from gltfdata import ModelParser
from gltfdata.binary_gltf import create

TRIANGLE = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)]


def pack_floats(points):
    values = [v for point in points for v in point]
    return struct.pack(f'<{len(values)}f', *values)


def gltf_with_positions(points, nodes=None, scenes=None):
    """glTF 1.0 scene with one mesh whose positions are stored in binary_glTF"""
    data = pack_floats(points)
    gltf = {
        "extensionsUsed": ["KHR_binary_glTF"],
        "buffers": {
            "binary_glTF": {"type": "arraybuffer", "byteLength": len(data), "uri": "data:,"}
        },
        "bufferViews": {
            "positions_view": {"buffer": "binary_glTF", "byteOffset": 0,
                               "byteLength": len(data), "target": 34962}
        },
        "accessors": {
            "positions": {"bufferView": "positions_view", "byteOffset": 0,
                          "byteStride": 0, "componentType": 5126,
                          "count": len(points), "type": "VEC3"}
        },
        "meshes": {
            "mesh": {"primitives": [{"attributes": {"POSITION": "positions"}, "mode": 4}]}
        },
        "nodes": nodes if nodes is not None else {"root": {"meshes": ["mesh"]}},
        "scenes": scenes if scenes is not None else {"default": {"nodes": ["root"]}},
        "scene": "default",
    }
    return gltf, data


@pytest.fixture
def parser():
    return ModelParser()


@pytest.fixture
def load_glb(parser):
    """Parse a glTF dict plus binary payload through the binary container path"""
    def load(gltf, binary=b''):
        return parser.parse_bytes(create(gltf, binary))
    return load
