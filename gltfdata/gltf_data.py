# gltfdata/gltf_data.py

import logging
from typing import Any, Dict, List, Optional, Tuple

from .accessor_view import AccessorView, create_accessor_view
from .bounding_box import BoundingBox, BoundingVolumeComputer
from .buffer_views import BufferView, get_entity
from .byte_view import RawBuffer
from .errors import CapacityError, GltfError, JsonError, MissingBuffer
from .type_catalog import NumericKind

logger = logging.getLogger(__name__)


class GltfData:
    """A glTF scene description together with the data it refers to.

    Buffers, buffer views, images and shaders are stored by their logical
    id. In glTF 1.0 ids are the keys of the top-level dictionaries, in
    glTF 2.0 they are the string form of the array indices.
    """

    def __init__(self, gltf: Dict[str, Any], uri: Optional[str] = None,
                 byte_order: str = '<'):
        self.gltf = gltf
        self.uri = uri
        self.byte_order = byte_order
        self.buffers: Dict[str, RawBuffer] = {}
        self.buffer_views: Dict[str, BufferView] = {}
        self.images: Dict[str, bytes] = {}
        self.image_mime_types: Dict[str, Optional[str]] = {}
        self.shaders: Dict[str, str] = {}
        self.json_errors: List[JsonError] = []
        self.buffer_view_errors: List[Tuple[str, GltfError]] = []
        self._extracted: Dict[str, bytes] = {}

    def __repr__(self):
        return (f"GltfData({self.uri!r}, {len(self.buffers)} buffers, "
                f"{len(self.buffer_views)} buffer views)")

    def put_buffer(self, buffer_id, data) -> RawBuffer:
        buffer = RawBuffer(buffer_id, data)
        self.buffers[buffer.buffer_id] = buffer
        return buffer

    def get_buffer(self, buffer_id) -> Optional[RawBuffer]:
        return self.buffers.get(str(buffer_id))

    def get_buffer_view(self, buffer_view_id) -> Optional[BufferView]:
        return self.buffer_views.get(str(buffer_view_id))

    def get_accessor(self, accessor_id) -> Optional[Dict[str, Any]]:
        return get_entity(self.gltf.get('accessors'), accessor_id)

    def get_accessor_view(self, accessor_id,
                          kind: Optional[NumericKind] = None) -> AccessorView:
        """Typed view on the data of the given accessor"""
        accessor = self.get_accessor(accessor_id)
        if accessor is None:
            raise MissingBuffer(f"Could not find accessor {accessor_id}")
        try:
            return create_accessor_view(accessor, self.buffer_views, kind,
                                        self.byte_order)
        except CapacityError as e:
            logger.warning(f"Accessor {accessor_id} does not fit its bufferView: {e}")
            raise

    def get_extracted_accessor_data(self, accessor_id) -> bytes:
        """Tightly packed data of the given accessor, computed once"""
        key = str(accessor_id)
        if key not in self._extracted:
            self._extracted[key] = self.get_accessor_view(accessor_id).extract_compact()
        return self._extracted[key]

    def compute_bounding_box(self) -> BoundingBox:
        return BoundingVolumeComputer(self).compute()
