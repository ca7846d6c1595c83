# tests/test_json_diagnostics.py

from gltfdata.errors import JsonError
from gltfdata.json_diagnostics import check_structure

from .conftest import TRIANGLE, gltf_with_positions


def paths(errors):
    return [e.json_path for e in errors]


def test_valid_asset():
    gltf, _ = gltf_with_positions(TRIANGLE)
    assert check_structure(gltf) == []


def test_accessor_fields():
    gltf, _ = gltf_with_positions(TRIANGLE)
    accessor = gltf["accessors"]["positions"]
    accessor["count"] = -1
    accessor["componentType"] = 5127
    accessor["type"] = "VEC5"
    accessor["byteStride"] = 256

    errors = check_structure(gltf)
    assert sorted(paths(errors)) == [
        "accessors/positions/byteStride",
        "accessors/positions/componentType",
        "accessors/positions/count",
        "accessors/positions/type",
    ]
    assert JsonError("expected a non-negative integer",
                     "accessors/positions/count") in errors


def test_unhashable_values_are_reported():
    errors = check_structure({"accessors": [{"componentType": [5126], "type": {}}]})
    assert paths(errors) == ["accessors/0/componentType", "accessors/0/type"]


def test_booleans_are_not_integers():
    errors = check_structure({"bufferViews": [{"buffer": 0, "byteLength": True}]})
    assert paths(errors) == ["bufferViews/0/byteLength"]


def test_entities_must_be_objects():
    errors = check_structure({"nodes": [1, {"children": "a"}], "meshes": "none"})
    assert paths(errors) == ["meshes", "nodes/0", "nodes/1/children"]


def test_primitives():
    gltf = {"meshes": {"m": {"primitives": [
        {"attributes": {"POSITION": 1.5}, "mode": 4},
        "triangle",
    ]}}}
    assert paths(check_structure(gltf)) == [
        "meshes/m/primitives/0/attributes", "meshes/m/primitives/1"]


def test_node_transforms():
    errors = check_structure({"nodes": [{"matrix": [1, 0, 0], "rotation": [0, 0, 0, "1"],
                                         "translation": [0, 0, 0]}]})
    assert paths(errors) == ["nodes/0/matrix", "nodes/0/rotation"]


def test_extensions():
    errors = check_structure({"extensionsUsed": ["KHR_binary_glTF", 3],
                              "images": {"i": {"extensions": []}}})
    assert paths(errors) == ["images/i/extensions", "extensionsUsed"]


def test_unknown_fields_are_tolerated():
    assert check_structure({"asset": {"version": "1.0"}, "nodes": [{"extras": 5}]}) == []


def test_root_must_be_an_object():
    assert paths(check_structure([])) == [""]


def test_str():
    assert str(JsonError("expected a string", "images/0/uri")) == \
        "images/0/uri: expected a string"
