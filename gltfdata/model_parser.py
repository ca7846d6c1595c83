# gltfdata/model_parser.py

import json
import logging
import numpy as np
from typing import Callable, Dict, List, Optional, Union
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from . import binary_gltf
from .buffer_views import BufferViewResolver, iter_entities, get_entity
from .config import LoaderConfig
from .errors import FormatError, GltfError
from .extensions import (BINARY_GLTF_BUFFER_ID, BINARY_GLTF_EXTENSION_NAME,
                         get_binary_gltf_buffer_view_id, get_extension_map,
                         is_binary_gltf_buffer_id)
from .gltf_data import GltfData
from .json_diagnostics import check_structure
from .uri_io import (ProgressCallback, create_base_uri_resolver, data_uri_mime_type,
                     describe, get_parent, is_data_uri, read_uri, to_uri)

UriResolver = Callable[[str], Optional[bytes]]


class ModelFormat(Enum):
    """Supported glTF container formats"""
    GLTF = "gltf"
    GLB = "glb"


@dataclass
class GltfReference:
    """External data that a glTF asset refers to by URI"""
    name: str
    uri: str
    target: Callable[[bytes], None]


@dataclass
class MeshData:
    """Decoded mesh data structure"""
    name: str
    vertices: Optional[np.ndarray] = None
    indices: Optional[np.ndarray] = None
    normals: Optional[np.ndarray] = None
    uvs: Optional[np.ndarray] = None
    material_id: Optional[str] = None
    primitives: List[Dict] = field(default_factory=list)


class ModelParser:
    """Reads glTF and binary glTF assets into GltfData"""

    def __init__(self, debug: bool = False, config: Optional[LoaderConfig] = None):
        self.config = config or LoaderConfig(debug=debug)
        self.debug = self.config.debug
        self.logger = logging.getLogger(__name__)
        self.setup_logging()

    def setup_logging(self):
        """Configure logging"""
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.DEBUG if self.debug else logging.INFO)

    def parse_file(self, file_path: Union[str, Path],
                   progress_callback: Optional[ProgressCallback] = None) -> GltfData:
        """Parse a glTF/GLB file or URI and return the loaded data"""
        try:
            uri = to_uri(file_path)
            self.logger.info(f"Reading glTF {describe(uri)}")
            data = read_uri(uri, progress_callback, self.config.chunk_size)
            return self.parse_bytes(data, uri)

        except Exception as e:
            self.logger.error(f"Error parsing file: {e}")
            raise

    def parse_bytes(self, data: bytes, uri: Optional[str] = None,
                    uri_resolver: Optional[UriResolver] = None) -> GltfData:
        """Parse glTF or binary glTF data that has already been read.

        External references are resolved relative to ``uri`` unless an
        explicit ``uri_resolver`` is given.
        """
        if uri_resolver is None and uri is not None:
            uri_resolver = create_base_uri_resolver(get_parent(uri))

        model_format = self.detect_format(data, uri)
        self.logger.info(f"Detected format: {model_format.value}")

        if model_format == ModelFormat.GLB:
            return self.parse_binary_format(data, uri, uri_resolver)
        return self.parse_gltf(data, uri, uri_resolver)

    def detect_format(self, data: bytes, uri: Optional[str] = None) -> ModelFormat:
        """Detect the format based on the content, then the extension"""
        if binary_gltf.is_binary_gltf(data):
            return ModelFormat.GLB
        if uri is not None and not is_data_uri(uri) and uri.lower().endswith('.glb'):
            return ModelFormat.GLB
        return ModelFormat.GLTF

    def parse_binary_format(self, data: bytes, uri: Optional[str] = None,
                            uri_resolver: Optional[UriResolver] = None) -> GltfData:
        """Parse a binary glTF container"""
        try:
            header, scene, payload = binary_gltf.split(data)
            self.logger.debug(f"Binary format version: {header.version}, "
                              f"length: {header.length}, "
                              f"scene length: {header.scene_length}")

            gltf_data = self._create_gltf_data(scene, uri)
            gltf_data.put_buffer(BINARY_GLTF_BUFFER_ID, payload)
            self._load_data(gltf_data, uri_resolver)
            return gltf_data

        except Exception as e:
            self.logger.error(f"Error parsing binary format: {e}")
            raise

    def parse_gltf(self, data: bytes, uri: Optional[str] = None,
                   uri_resolver: Optional[UriResolver] = None) -> GltfData:
        """Parse a glTF JSON scene description"""
        try:
            gltf_data = self._create_gltf_data(data, uri)
            self._load_data(gltf_data, uri_resolver)
            return gltf_data

        except Exception as e:
            self.logger.error(f"Error parsing glTF: {e}")
            raise

    def _create_gltf_data(self, scene: bytes, uri: Optional[str]) -> GltfData:
        try:
            gltf = json.loads(bytes(scene).decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise FormatError(f"Could not parse the glTF JSON: {e}") from e
        if not isinstance(gltf, dict):
            raise FormatError(
                f"Expected a JSON object, but found {type(gltf).__name__}")

        gltf_data = GltfData(gltf, uri, self.config.byte_order)
        if self.config.check_structure:
            gltf_data.json_errors = check_structure(gltf)
            for error in gltf_data.json_errors:
                self.logger.warning(f"JSON error: {error}")
        return gltf_data

    def _load_data(self, gltf_data: GltfData, uri_resolver: Optional[UriResolver]):
        """Load buffers, then buffer views, then the images and shaders"""
        self.load_references(self.list_buffer_references(gltf_data), uri_resolver)
        self.create_buffer_views(gltf_data)
        if self.config.load_images:
            self.load_references(self.list_image_references(gltf_data), uri_resolver)
            self.create_binary_images(gltf_data)
        if self.config.load_shaders:
            self.load_references(self.list_shader_references(gltf_data), uri_resolver)
            self.create_binary_shaders(gltf_data)

    def list_references(self, gltf_data: GltfData) -> List[GltfReference]:
        """All external buffers, images and shaders of the asset"""
        return (self.list_buffer_references(gltf_data)
                + self.list_image_references(gltf_data)
                + self.list_shader_references(gltf_data))

    def list_buffer_references(self, gltf_data: GltfData) -> List[GltfReference]:
        references = []
        for buffer_id, buffer in iter_entities(gltf_data.gltf.get('buffers')):
            if is_binary_gltf_buffer_id(buffer_id):
                continue
            uri = buffer.get('uri')
            if not isinstance(uri, str):
                self.logger.warning(f"Buffer {buffer_id} has no URI")
                continue
            references.append(GltfReference(
                f"buffer {buffer_id}", uri,
                lambda data, buffer_id=buffer_id: gltf_data.put_buffer(buffer_id, data)))
        return references

    def list_image_references(self, gltf_data: GltfData) -> List[GltfReference]:
        references = []
        for image_id, image in iter_entities(gltf_data.gltf.get('images')):
            if get_extension_map(image, BINARY_GLTF_EXTENSION_NAME) is not None:
                continue
            uri = image.get('uri')
            if not isinstance(uri, str):
                continue

            def store(data, image_id=image_id, uri=uri):
                gltf_data.images[image_id] = data
                gltf_data.image_mime_types[image_id] = guess_image_mime_type(uri)

            references.append(GltfReference(f"image {image_id}", uri, store))
        return references

    def list_shader_references(self, gltf_data: GltfData) -> List[GltfReference]:
        references = []
        for shader_id, shader in iter_entities(gltf_data.gltf.get('shaders')):
            if get_extension_map(shader, BINARY_GLTF_EXTENSION_NAME) is not None:
                continue
            uri = shader.get('uri')
            if not isinstance(uri, str):
                continue

            def store(data, shader_id=shader_id):
                gltf_data.shaders[shader_id] = data.decode('utf-8', errors='replace')

            references.append(GltfReference(f"shader {shader_id}", uri, store))
        return references

    def load_references(self, references: List[GltfReference],
                        uri_resolver: Optional[UriResolver],
                        progress_callback: Optional[ProgressCallback] = None):
        """Read the data of each reference and pass it to its target.

        References that cannot be resolved are logged and skipped.
        """
        for index, reference in enumerate(references):
            resolved = None
            if is_data_uri(reference.uri):
                try:
                    resolved = read_uri(reference.uri)
                except ValueError as e:
                    self.logger.warning(f"Invalid data URI of {reference.name}: {e}")
                    continue
            elif uri_resolver is not None:
                resolved = uri_resolver(reference.uri)
            if resolved is None:
                self.logger.warning(
                    f"Could not resolve URI of {reference.name}: {describe(reference.uri)}")
            else:
                self.logger.debug(f"Read {len(resolved)} bytes for {reference.name}")
                reference.target(resolved)
            if progress_callback is not None:
                progress_callback((index + 1) / len(references))

    def create_buffer_views(self, gltf_data: GltfData):
        resolver = BufferViewResolver(gltf_data.buffers)
        gltf_data.buffer_views = resolver.resolve_all(gltf_data.gltf.get('bufferViews'))
        gltf_data.buffer_view_errors = resolver.errors
        self.logger.debug(f"Resolved {len(gltf_data.buffer_views)} buffer views")

    def _binary_buffer_view_data(self, gltf_data: GltfData, entity: Dict) -> Optional[bytes]:
        """Data of the buffer view that an image or shader is stored in"""
        buffer_view_id = get_binary_gltf_buffer_view_id(entity)
        if buffer_view_id is None:
            buffer_view_id = entity.get('bufferView')
        if buffer_view_id is None:
            return None
        buffer_view = gltf_data.get_buffer_view(buffer_view_id)
        if buffer_view is None:
            self.logger.warning(f"Could not find bufferView {buffer_view_id}")
            return None
        return buffer_view.view().tobytes()

    def create_binary_images(self, gltf_data: GltfData):
        for image_id, image in iter_entities(gltf_data.gltf.get('images')):
            data = self._binary_buffer_view_data(gltf_data, image)
            if data is None:
                continue
            extension = get_extension_map(image, BINARY_GLTF_EXTENSION_NAME) or {}
            gltf_data.images[image_id] = data
            gltf_data.image_mime_types[image_id] = (
                extension.get('mimeType') or image.get('mimeType')
                or guess_image_mime_type_from_data(data))
            self.logger.debug(f"Read image {image_id} from binary buffer")

    def create_binary_shaders(self, gltf_data: GltfData):
        for shader_id, shader in iter_entities(gltf_data.gltf.get('shaders')):
            if get_extension_map(shader, BINARY_GLTF_EXTENSION_NAME) is None:
                continue
            data = self._binary_buffer_view_data(gltf_data, shader)
            if data is not None:
                gltf_data.shaders[shader_id] = data.decode('utf-8', errors='replace')
                self.logger.debug(f"Read shader {shader_id} from binary buffer")

    def parse_meshes(self, gltf_data: GltfData) -> List[MeshData]:
        """Decode the vertex data of all meshes.

        The primitives of a mesh are concatenated. Their indices are offset
        by the number of vertices of the preceding primitives, so that they
        refer to the concatenated vertices.
        """
        meshes = []

        for mesh_id, mesh in iter_entities(gltf_data.gltf.get('meshes')):
            mesh_name = mesh.get('name', f'mesh_{mesh_id}')
            primitives = mesh.get('primitives')
            if not isinstance(primitives, list):
                primitives = []
            primitives_data = [
                self._parse_primitive(gltf_data, prim)
                for prim in primitives if isinstance(prim, dict)
            ]

            def concatenate(key):
                arrays = [p[key] for p in primitives_data if key in p]
                if not arrays or len(arrays) != len(primitives_data):
                    return None
                return np.concatenate(arrays)

            meshes.append(MeshData(
                name=mesh_name,
                vertices=concatenate('vertices'),
                indices=self._concatenate_indices(primitives_data),
                normals=concatenate('normals'),
                uvs=concatenate('uvs'),
                material_id=str(primitives_data[0]['material'])
                    if primitives_data and 'material' in primitives_data[0] else None,
                primitives=primitives_data
            ))

        return meshes

    def _concatenate_indices(self, primitives_data: List[Dict]) -> Optional[np.ndarray]:
        """Indices of all primitives, relative to the concatenated vertices"""
        if not primitives_data or not all('indices' in p and 'vertices' in p
                                          for p in primitives_data):
            return None
        vertex_counts = [len(p['vertices']) for p in primitives_data]
        offsets = np.cumsum([0] + vertex_counts[:-1])
        return np.concatenate([
            p['indices'].astype(np.int64) + offset
            for p, offset in zip(primitives_data, offsets)
        ]).astype(np.uint32)

    def _parse_primitive(self, gltf_data: GltfData, primitive: Dict) -> Dict:
        """Decode a single mesh primitive"""
        result = {}
        attributes = primitive.get('attributes')
        if not isinstance(attributes, dict):
            attributes = {}

        for attribute, key in (('POSITION', 'vertices'), ('NORMAL', 'normals'),
                               ('TEXCOORD_0', 'uvs')):
            if attribute in attributes:
                data = self._get_accessor_data(gltf_data, attributes[attribute])
                if data is not None:
                    result[key] = data

        if 'indices' in primitive:
            data = self._get_accessor_data(gltf_data, primitive['indices'])
            if data is not None:
                result['indices'] = data.reshape(-1).astype(np.uint32)

        if 'material' in primitive:
            result['material'] = primitive['material']

        return result

    def _get_accessor_data(self, gltf_data: GltfData, accessor_id) -> Optional[np.ndarray]:
        """Decoded accessor data, or None if the accessor is unusable"""
        try:
            data = gltf_data.get_accessor_view(accessor_id).to_numpy()
        except GltfError as e:
            self.logger.warning(f"Skipping accessor {accessor_id}: {e}")
            return None

        accessor = get_entity(gltf_data.gltf.get('accessors'), accessor_id)
        if accessor.get('normalized'):
            data = self._normalize_data(data)

        return data

    def _normalize_data(self, data: np.ndarray) -> np.ndarray:
        """Map normalized integer data to [0, 1] or [-1, 1]"""
        if not np.issubdtype(data.dtype, np.integer):
            return data
        info = np.iinfo(data.dtype)
        normalized = data.astype(np.float32) / float(info.max)
        if info.min < 0:
            normalized = np.maximum(normalized, -1.0)
        return normalized


def guess_image_mime_type(uri: str) -> Optional[str]:
    """MIME type of an image, from its data URI header or file extension"""
    if is_data_uri(uri):
        return data_uri_mime_type(uri)
    name = uri.rsplit('/', 1)[-1]
    if '.' not in name:
        return None
    extension = name.rsplit('.', 1)[-1].lower()
    if extension in ('jpg', 'jpeg'):
        return 'image/jpeg'
    return f'image/{extension}'


_IMAGE_SIGNATURES = (
    (b'\x89PNG\r\n\x1a\n', 'image/png'),
    (b'\xff\xd8\xff', 'image/jpeg'),
    (b'GIF8', 'image/gif'),
    (b'BM', 'image/bmp'),
)


def guess_image_mime_type_from_data(data: bytes) -> Optional[str]:
    for signature, mime_type in _IMAGE_SIGNATURES:
        if data.startswith(signature):
            return mime_type
    return None
