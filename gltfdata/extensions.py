# gltfdata/extensions.py

from typing import Any, Dict, Optional

BINARY_GLTF_EXTENSION_NAME = "KHR_binary_glTF"
BINARY_GLTF_BUFFER_ID = "binary_glTF"


def get_extension_map(entity: Dict, extension_name: str) -> Optional[Dict[str, Any]]:
    """The property map of the named extension, or None"""
    extensions = entity.get('extensions')
    if not isinstance(extensions, dict):
        return None
    value = extensions.get(extension_name)
    return value if isinstance(value, dict) else None


def has_extension(entity: Dict, extension_name: str) -> bool:
    return get_extension_map(entity, extension_name) is not None


def get_extension_property_value(entity: Dict, extension_name: str,
                                 property_name: str, default: Any = None) -> Any:
    extension_map = get_extension_map(entity, extension_name)
    if extension_map is None:
        return default
    return extension_map.get(property_name, default)


def get_extension_property_value_as_string(entity: Dict, extension_name: str,
                                           property_name: str) -> Optional[str]:
    value = get_extension_property_value(entity, extension_name, property_name)
    return None if value is None else str(value)


def set_extension_property_value(entity: Dict, extension_name: str,
                                 property_name: str, value: Any):
    """Set an extension property, creating the extension map if needed"""
    extension_map = get_extension_map(entity, extension_name)
    if extension_map is None:
        extensions = entity.get('extensions')
        if not isinstance(extensions, dict):
            extensions = {}
            entity['extensions'] = extensions
        extension_map = {}
        extensions[extension_name] = extension_map
    extension_map[property_name] = value


def add_extension_used(gltf: Dict, extension_name: str):
    extensions_used = gltf.get('extensionsUsed') or []
    if extension_name not in extensions_used:
        gltf['extensionsUsed'] = list(extensions_used) + [extension_name]


def has_binary_gltf_extension(entity: Dict) -> bool:
    return has_extension(entity, BINARY_GLTF_EXTENSION_NAME)


def get_binary_gltf_buffer_view_id(entity: Dict) -> Optional[str]:
    return get_extension_property_value_as_string(
        entity, BINARY_GLTF_EXTENSION_NAME, 'bufferView')


def set_binary_gltf_buffer_view_id(entity: Dict, buffer_view_id: str):
    set_extension_property_value(
        entity, BINARY_GLTF_EXTENSION_NAME, 'bufferView', buffer_view_id)


def is_binary_gltf_buffer_id(buffer_id) -> bool:
    return buffer_id == BINARY_GLTF_BUFFER_ID
