# gltfdata/buffer_views.py

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .byte_view import ByteView, RawBuffer
from .errors import GltfError, InvalidRange, MissingBuffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BufferView:
    """A byte range of a raw buffer"""
    buffer: RawBuffer
    byte_offset: int
    byte_length: int
    byte_stride: int = 0

    def __post_init__(self):
        if self.byte_offset < 0 or self.byte_length < 0:
            raise InvalidRange(
                f"Negative byteOffset ({self.byte_offset}) or byteLength "
                f"({self.byte_length}) in bufferView")
        if self.byte_offset + self.byte_length > self.buffer.size:
            raise InvalidRange(
                f"The bufferView byteOffset is {self.byte_offset} and the "
                f"byteLength is {self.byte_length}, but the buffer capacity "
                f"is only {self.buffer.size}")

    @property
    def buffer_id(self) -> str:
        return self.buffer.buffer_id

    def view(self) -> ByteView:
        return self.buffer.view().slice(self.byte_offset, self.byte_length)

    @classmethod
    def over(cls, data, byte_stride: int = 0, buffer_id: str = "buffer") -> "BufferView":
        """Buffer view that covers all of the given bytes"""
        buffer = RawBuffer(buffer_id, data)
        return cls(buffer, 0, buffer.size, byte_stride)


class BufferViewResolver:
    """Creates BufferView instances for declared bufferViews.

    Entries that cannot be resolved are recorded in ``errors`` and skipped,
    so that one broken bufferView does not prevent loading the others.
    """

    def __init__(self, buffers: Mapping[str, RawBuffer]):
        self.buffers = buffers
        self.errors: List[Tuple[str, GltfError]] = []

    def resolve(self, buffer_view_id: str, declared: Dict[str, Any]) -> BufferView:
        buffer_id = str(declared.get('buffer'))
        buffer = self.buffers.get(buffer_id)
        if buffer is None:
            raise MissingBuffer(
                f"Could not find buffer data for buffer ID {buffer_id} "
                f"of bufferView {buffer_view_id}")

        byte_offset = declared.get('byteOffset', 0)
        byte_length = declared.get('byteLength')
        for name, value in (('byteOffset', byte_offset), ('byteLength', byte_length)):
            if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
                raise InvalidRange(f"Invalid {name} in bufferView: {value!r}")
        if byte_length is None:
            # Compatibility with early glTF 1.0 assets, where byteLength
            # was optional. It is required since glTF 1.0.1.
            byte_length = buffer.size - byte_offset
            logger.warning(
                f"bufferView {buffer_view_id} has no byteLength, "
                f"assuming {byte_length} (remaining buffer capacity)")

        if byte_offset < 0:
            raise InvalidRange(f"Negative byteOffset in bufferView: {byte_offset}")
        if byte_length < 0:
            raise InvalidRange(f"Negative byteLength in bufferView: {byte_length}")
        return BufferView(buffer, byte_offset, byte_length,
                          declared.get('byteStride') or 0)

    def resolve_all(self, declared_views) -> Dict[str, BufferView]:
        """Resolve all bufferViews of a dict (glTF 1.0) or list (glTF 2.0)"""
        result = {}
        for buffer_view_id, declared in iter_entities(declared_views):
            try:
                result[buffer_view_id] = self.resolve(buffer_view_id, declared)
            except (MissingBuffer, InvalidRange) as e:
                logger.warning(f"Skipping bufferView {buffer_view_id}: {e}")
                self.errors.append((buffer_view_id, e))
        return result


def iter_entities(collection):
    """Yield (id, entity) pairs of a glTF collection.

    glTF 1.0 stores top-level entities in dictionaries keyed by id, glTF 2.0
    in lists addressed by index. Ids are always returned as strings.
    """
    if not collection:
        return
    if isinstance(collection, dict):
        items = collection.items()
    else:
        items = enumerate(collection)
    for entity_id, entity in items:
        if isinstance(entity, dict):
            yield str(entity_id), entity


def get_entity(collection, entity_id) -> Optional[Dict[str, Any]]:
    """Look up an entity by id in a dict or list collection"""
    if collection is None or entity_id is None:
        return None
    if isinstance(collection, dict):
        entity = collection.get(str(entity_id))
    else:
        try:
            index = int(entity_id)
        except (TypeError, ValueError):
            return None
        entity = collection[index] if 0 <= index < len(collection) else None
    return entity if isinstance(entity, dict) else None
