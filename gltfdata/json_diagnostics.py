# gltfdata/json_diagnostics.py

"""Structural checks of a glTF JSON scene description.

The checks visit the known fields of the known entity types and report
values of the wrong type or range as JsonError entries. Unknown fields are
ignored, and nothing is raised: callers decide whether any reported problem
is fatal.
"""

import numbers
from typing import Any, Callable, Dict, List, Tuple

from .errors import JsonError
from .type_catalog import ComponentType, ElementShape

Check = Tuple[Callable[[Any], bool], str]


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _non_negative_int(value) -> bool:
    return _is_int(value) and value >= 0


def _is_id(value) -> bool:
    return isinstance(value, str) or _non_negative_int(value)


def _id_list(value) -> bool:
    return isinstance(value, list) and all(_is_id(v) for v in value)


def _numbers(count: int) -> Callable[[Any], bool]:
    def check(value):
        return (isinstance(value, list) and len(value) == count
                and all(_is_number(v) for v in value))
    return check


def _id_map(value) -> bool:
    return isinstance(value, dict) and all(_is_id(v) for v in value.values())


NON_NEGATIVE_INT: Check = (_non_negative_int, "expected a non-negative integer")
ID: Check = (_is_id, "expected an id")
ID_LIST: Check = (_id_list, "expected an array of ids")
STRING: Check = (lambda v: isinstance(v, str), "expected a string")

COMPONENT_TYPES = {int(c) for c in ComponentType}
ELEMENT_SHAPES = {s.value for s in ElementShape}

SCHEMA: Dict[str, Dict[str, Check]] = {
    'accessors': {
        'bufferView': ID,
        'byteOffset': NON_NEGATIVE_INT,
        'byteStride': ((lambda v: _is_int(v) and 0 <= v <= 255),
                       "expected an integer between 0 and 255"),
        'componentType': ((lambda v: _is_int(v) and v in COMPONENT_TYPES),
                          "expected a valid component type constant"),
        'count': NON_NEGATIVE_INT,
        'type': ((lambda v: isinstance(v, str) and v in ELEMENT_SHAPES),
                 "expected one of " + ", ".join(s.value for s in ElementShape)),
        'min': ((lambda v: isinstance(v, list) and all(_is_number(x) for x in v)),
                "expected an array of numbers"),
        'max': ((lambda v: isinstance(v, list) and all(_is_number(x) for x in v)),
                "expected an array of numbers"),
    },
    'bufferViews': {
        'buffer': ID,
        'byteOffset': NON_NEGATIVE_INT,
        'byteLength': NON_NEGATIVE_INT,
        'byteStride': NON_NEGATIVE_INT,
        'target': NON_NEGATIVE_INT,
    },
    'buffers': {
        'uri': STRING,
        'byteLength': NON_NEGATIVE_INT,
        'type': STRING,
    },
    'images': {
        'uri': STRING,
        'bufferView': ID,
        'mimeType': STRING,
    },
    'meshes': {
        'primitives': ((lambda v: isinstance(v, list)), "expected an array"),
    },
    'nodes': {
        'children': ID_LIST,
        'meshes': ID_LIST,
        'mesh': ID,
        'matrix': (_numbers(16), "expected an array of 16 numbers"),
        'translation': (_numbers(3), "expected an array of 3 numbers"),
        'rotation': (_numbers(4), "expected an array of 4 numbers"),
        'scale': (_numbers(3), "expected an array of 3 numbers"),
    },
    'scenes': {
        'nodes': ID_LIST,
    },
    'shaders': {
        'uri': STRING,
        'type': NON_NEGATIVE_INT,
    },
    'programs': {
        'vertexShader': ID,
        'fragmentShader': ID,
    },
}

PRIMITIVE_SCHEMA: Dict[str, Check] = {
    'attributes': (_id_map, "expected an object mapping names to accessor ids"),
    'indices': ID,
    'material': ID,
    'mode': NON_NEGATIVE_INT,
}


def _check_fields(entity: Dict, schema: Dict[str, Check], path: str,
                  errors: List[JsonError]):
    for field, (check, message) in schema.items():
        if field in entity and not check(entity[field]):
            errors.append(JsonError(message, f"{path}/{field}"))
    extensions = entity.get('extensions')
    if extensions is not None and not isinstance(extensions, dict):
        errors.append(JsonError("expected an object", f"{path}/extensions"))


def _entities(collection, path: str, errors: List[JsonError]):
    if isinstance(collection, dict):
        items = collection.items()
    elif isinstance(collection, list):
        items = enumerate(collection)
    else:
        errors.append(JsonError("expected an object or an array", path))
        return
    for entity_id, entity in items:
        entity_path = f"{path}/{entity_id}"
        if not isinstance(entity, dict):
            errors.append(JsonError("expected an object", entity_path))
            continue
        yield entity_path, entity


def check_structure(gltf: Any) -> List[JsonError]:
    """Collect the structural problems of a parsed glTF JSON object"""
    errors: List[JsonError] = []
    if not isinstance(gltf, dict):
        errors.append(JsonError("expected an object", ""))
        return errors

    for collection_name, schema in SCHEMA.items():
        if collection_name not in gltf:
            continue
        for path, entity in _entities(gltf[collection_name], collection_name, errors):
            _check_fields(entity, schema, path, errors)
            if collection_name == 'meshes' and isinstance(entity.get('primitives'), list):
                for index, primitive in enumerate(entity['primitives']):
                    primitive_path = f"{path}/primitives/{index}"
                    if not isinstance(primitive, dict):
                        errors.append(JsonError("expected an object", primitive_path))
                        continue
                    _check_fields(primitive, PRIMITIVE_SCHEMA, primitive_path, errors)

    for field in ('extensionsUsed', 'extensionsRequired'):
        value = gltf.get(field)
        if value is not None and not (isinstance(value, list)
                                      and all(isinstance(v, str) for v in value)):
            errors.append(JsonError("expected an array of strings", field))
    return errors
