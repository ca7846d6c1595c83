# gltfdata/bounding_box.py

import logging
from typing import TYPE_CHECKING, Dict, List, Optional

import numpy as np

from . import transforms
from .buffer_views import get_entity, iter_entities
from .errors import GltfError
from .type_catalog import (ComponentType, NumericKind, element_shape_for,
                           string_for)

if TYPE_CHECKING:
    from .gltf_data import GltfData

POSITION = 'POSITION'


class BoundingBox:
    """Axis-aligned bounding box accumulator.

    A new box is empty: its minimum is +inf and its maximum is -inf in
    every dimension. Check is_empty() before using center or size.
    """

    def __init__(self):
        self.min = np.full(3, np.inf)
        self.max = np.full(3, -np.inf)

    def combine_point(self, x: float, y: float, z: float):
        point = np.array([x, y, z], dtype=np.float64)
        np.minimum(self.min, point, out=self.min)
        np.maximum(self.max, point, out=self.max)

    def combine_points(self, points: np.ndarray):
        if len(points) == 0:
            return
        np.minimum(self.min, points.min(axis=0), out=self.min)
        np.maximum(self.max, points.max(axis=0), out=self.max)

    def combine(self, other: "BoundingBox"):
        if other is None:
            raise ValueError("The other bounding box may not be None")
        np.minimum(self.min, other.min, out=self.min)
        np.maximum(self.max, other.max, out=self.max)

    def is_empty(self) -> bool:
        return bool(np.any(self.min > self.max))

    @property
    def size(self) -> np.ndarray:
        return self.max - self.min

    @property
    def center(self) -> np.ndarray:
        return self.min + self.size * 0.5

    def __repr__(self):
        return (f"[({self.min[0]},{self.min[1]},{self.min[2]})-"
                f"({self.max[0]},{self.max[1]},{self.max[2]})]")


class BoundingVolumeComputer:
    """Computes the bounding box of all mesh positions of an asset,
    in the coordinate system of the scenes' root nodes."""

    def __init__(self, gltf_data: "GltfData"):
        self.gltf_data = gltf_data
        self.gltf = gltf_data.gltf
        self.logger = logging.getLogger(__name__)

    def compute(self) -> BoundingBox:
        box = BoundingBox()
        for scene_id, _ in iter_entities(self.gltf.get('scenes')):
            self.compute_scene(scene_id, transforms.identity(), box)
        return box

    def compute_scene(self, scene_id, root_transform: Optional[np.ndarray] = None,
                      box: Optional[BoundingBox] = None) -> BoundingBox:
        result = box if box is not None else BoundingBox()
        if root_transform is None:
            root_transform = transforms.identity()
        scene = get_entity(self.gltf.get('scenes'), scene_id)
        if scene is None:
            self.logger.warning(f"Could not find scene {scene_id}")
            return result
        for node_id in self._list_property(scene, 'nodes', f"scene {scene_id}"):
            self.compute_node(node_id, root_transform, result)
        return result

    def compute_node(self, node_id, parent_transform: np.ndarray,
                     box: Optional[BoundingBox] = None) -> BoundingBox:
        result = box if box is not None else BoundingBox()
        node = get_entity(self.gltf.get('nodes'), node_id)
        if node is None:
            self.logger.warning(f"Could not find node {node_id}")
            return result

        transform = parent_transform @ transforms.local_transform(node)

        mesh_ids = self._list_property(node, 'meshes', f"node {node_id}") or _node_mesh(node)
        for mesh_id in mesh_ids:
            self.compute_mesh_bounding_box(mesh_id, transform, result)

        for child_id in self._list_property(node, 'children', f"node {node_id}"):
            self.compute_node(child_id, transform, result)
        return result

    def compute_mesh_bounding_box(self, mesh_id, transform: np.ndarray,
                                  box: Optional[BoundingBox] = None) -> BoundingBox:
        result = box if box is not None else BoundingBox()
        mesh = get_entity(self.gltf.get('meshes'), mesh_id)
        if mesh is None:
            self.logger.warning(f"Could not find mesh {mesh_id}")
            return result
        for primitive in self._list_property(mesh, 'primitives', f"mesh {mesh_id}"):
            if not isinstance(primitive, dict):
                self.logger.warning(f"Skipping mesh primitive of mesh {mesh_id}: {primitive!r}")
                continue
            primitive_box = self.compute_primitive_bounding_box(primitive, transform)
            if primitive_box is not None:
                result.combine(primitive_box)
        return result

    def _list_property(self, entity: Dict, name: str, owner: str) -> List:
        value = entity.get(name)
        if value is None:
            return []
        if not isinstance(value, list):
            self.logger.warning(
                f"Ignoring {name} of {owner}: expected an array, found {value!r}")
            return []
        return value

    def compute_primitive_bounding_box(self, primitive: Dict,
                                       transform: Optional[np.ndarray]) -> Optional[BoundingBox]:
        """Box of the transformed POSITION data, or None if there is none"""
        attributes = primitive.get('attributes')
        if not isinstance(attributes, dict):
            return None
        accessor_id = attributes.get(POSITION)
        if accessor_id is None:
            return None
        accessor = get_entity(self.gltf.get('accessors'), accessor_id)
        if accessor is None:
            self.logger.warning(f"Could not find {POSITION} accessor {accessor_id}")
            return None

        accessor_type = accessor.get('type')
        try:
            num_components = element_shape_for(accessor_type).num_components
        except GltfError as e:
            self.logger.warning(f"Skipping mesh primitive: {e}")
            return None
        if num_components < 3:
            self.logger.warning(
                f"Mesh primitive {POSITION} attribute refers to an accessor "
                f"with type {accessor_type} - expected \"VEC3\"")
            return None
        if accessor.get('componentType') != ComponentType.FLOAT:
            self.logger.warning(
                f"Mesh primitive {POSITION} attribute refers to an accessor "
                f"with component type {string_for(accessor.get('componentType'))}"
                f" - expected GL_FLOAT")
            return None

        try:
            accessor_view = self.gltf_data.get_accessor_view(accessor_id, NumericKind.FLOAT)
        except GltfError as e:
            self.logger.warning(f"Could not read {POSITION} accessor {accessor_id}: {e}")
            return None

        points = accessor_view.to_numpy()[:, 0:3]
        box = BoundingBox()
        box.combine_points(transforms.transform_points(transform, points))
        return box


def _node_mesh(node: Dict):
    """glTF 2.0 nodes refer to a single mesh"""
    if node.get('mesh') is not None:
        return [node['mesh']]
    return []
