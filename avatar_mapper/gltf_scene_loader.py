#!/usr/bin/env python3
"""
glTF Scene Loader
Loads glTF/GLB models with pygltflib and converts them into SceneGraph values
that bone extraction can walk.

Bones are recognised the way engine loaders do it: every node listed in a
skin's joints is a bone, and a mesh node that references a skin gets a
skeleton holding those joint nodes in skin order.
"""

import base64
import logging
import re
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Union

from pygltflib import GLTF2

from .bone_extraction import extract_bones
from .scene_graph import InvalidSourceError, SceneGraph, SceneNode, Skeleton

logger = logging.getLogger(__name__)

GLB_MAGIC = b'glTF'
GLTF_JSON_MIME = 'model/gltf+json'
GLTF_BINARY_MIME = 'model/gltf-binary'

# Characters animation track paths cannot contain; stripped when sanitizing node names
RESERVED_NAME_CHARS = re.compile(r'[\[\]\.:/]')

ModelSource = Union[str, Path, bytes]

# What pygltflib raises on a corrupt GLB header, truncated chunks or bad JSON
PARSE_ERRORS = (OSError, ValueError, KeyError, TypeError, struct.error)


@dataclass
class LoadedAvatar:
    """Result of loading a model: the parsed document, its root scene and bones."""
    gltf: Any
    scene: SceneNode
    bones: List[SceneNode]
    nodes: List[SceneNode]


def guess_model_mime_type(file_name: str) -> str:
    ext = Path(file_name).suffix.lower().lstrip('.') or 'glb'
    return GLTF_JSON_MIME if ext == 'gltf' else GLTF_BINARY_MIME


def create_data_url(file_data: bytes, file_name: str) -> str:
    """Encode model bytes as a data URL that load_gltf accepts."""
    mime_type = guess_model_mime_type(file_name)
    encoded = base64.b64encode(bytes(file_data)).decode('ascii')
    return f"data:{mime_type};base64,{encoded}"


def sanitize_node_name(name: str) -> str:
    """Whitespace becomes '_' and reserved characters are dropped, e.g. 'mixamorig:Head' -> 'mixamorigHead'."""
    return RESERVED_NAME_CHARS.sub('', re.sub(r'\s', '_', name))


def _decode_data_url(url: str) -> bytes:
    header, _, payload = url.partition(',')
    if not header.endswith(';base64'):
        raise ValueError(f"Only base64 data URLs are supported: {header}")
    return base64.b64decode(payload)


def _load_gltf_bytes(data: bytes, label: str) -> GLTF2:
    try:
        if data[:4] == GLB_MAGIC:
            return GLTF2.load_from_bytes(data)
        return GLTF2.from_json(data.decode('utf-8'), infer_missing=True)
    except PARSE_ERRORS as e:
        raise ValueError(f"Could not parse model file: {label}: {e}") from e


def load_gltf(source: Optional[ModelSource]) -> GLTF2:
    """
    Parse a glTF/GLB model.

    Args:
        source: File path, raw file bytes, or a base64 data URL

    Returns:
        pygltflib GLTF2 document

    Raises:
        InvalidSourceError: If no source is given
        FileNotFoundError: If the path doesn't exist
        ValueError: If the file cannot be parsed
    """
    if source is None or (not isinstance(source, Path) and len(source) == 0):
        raise InvalidSourceError("Avatar source is empty")

    if isinstance(source, (bytes, bytearray)):
        return _load_gltf_bytes(bytes(source), _source_label(source))

    if isinstance(source, str) and source.startswith('data:'):
        return _load_gltf_bytes(_decode_data_url(source), _source_label(source))

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Model file not found: {path}")

    logger.info(f"Loading model file: {path}")
    try:
        gltf = GLTF2().load(str(path))
    except PARSE_ERRORS as e:
        raise ValueError(f"Could not parse model file: {path}: {e}") from e
    if gltf is None:
        raise ValueError(f"Could not parse model file: {path}")
    return gltf


class UniqueNames:
    """Hands out node names the way engine loaders do: a repeated "Hand" becomes "Hand_1", "Hand_2"."""

    def __init__(self, sanitize: bool = True):
        self.sanitize = sanitize
        self.used = {}

    def create(self, original_name: Optional[str]) -> str:
        name = original_name or ""
        if not name:
            return ""
        if self.sanitize:
            name = sanitize_node_name(name)
            if not name:
                return ""
        if name in self.used:
            self.used[name] += 1
            return f"{name}_{self.used[name]}"
        self.used[name] = 0
        return name


def _node_at(scene_nodes: List[SceneNode], index: int, context: str) -> Optional[SceneNode]:
    if 0 <= index < len(scene_nodes):
        return scene_nodes[index]
    logger.warning(f"Skipping node reference {index} in {context}: only {len(scene_nodes)} nodes")
    return None


def build_scene_graph(gltf: GLTF2, source: str = "", sanitize_names: bool = True) -> SceneGraph:
    """
    Convert a pygltflib document into a SceneGraph.

    Each glTF node becomes exactly one SceneNode, so a node referenced from a
    parent and from a skin is the same object with the same uuid. Node names
    are made unique in node order, then scene names, so a name-keyed joint
    mapping always points at one bone.
    """
    gltf_nodes = gltf.nodes or []
    skins = gltf.skins or []
    joint_indices = {j for skin in skins for j in (skin.joints or [])}

    names = UniqueNames(sanitize=sanitize_names)
    scene_nodes = []
    for index, node in enumerate(gltf_nodes):
        scene_nodes.append(SceneNode(
            name=names.create(node.name),
            is_bone=index in joint_indices,
            uuid=f"node-{index}",
            is_mesh=node.mesh is not None,
        ))

    for index, node in enumerate(gltf_nodes):
        scene_node = scene_nodes[index]
        for child_index in node.children or []:
            child = _node_at(scene_nodes, child_index, f"children of node {index}")
            if child is not None:
                scene_node.add_child(child)

        if node.mesh is not None and node.skin is not None:
            if not 0 <= node.skin < len(skins):
                logger.warning(f"Node {index} references missing skin {node.skin}")
                continue
            bones = [_node_at(scene_nodes, j, f"skin {node.skin}") for j in skins[node.skin].joints or []]
            scene_node.skeleton = Skeleton(bones=[b for b in bones if b is not None])

    scene_roots = []
    for scene_index, scene in enumerate(gltf.scenes or []):
        root = SceneNode(name=names.create(scene.name), uuid=f"scene-{scene_index}")
        for node_index in scene.nodes or []:
            child = _node_at(scene_nodes, node_index, f"scene {scene_index}")
            if child is not None:
                root.add_child(child)
        scene_roots.append(root)

    default_scene = None
    if scene_roots:
        scene_index = gltf.scene if gltf.scene is not None and 0 <= gltf.scene < len(scene_roots) else 0
        default_scene = scene_roots[scene_index]

    logger.debug(f"Built scene graph: {len(scene_nodes)} nodes, {len(skins)} skins, {len(scene_roots)} scenes")
    return SceneGraph(scene=default_scene, scenes=scene_roots, source=source, raw=gltf)


def _source_label(source: ModelSource) -> str:
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    if isinstance(source, str) and source.startswith('data:'):
        return source.split(',', 1)[0]
    return str(source)


def load_scene_graph(source: Optional[ModelSource], sanitize_names: bool = True) -> SceneGraph:
    gltf = load_gltf(source)
    return build_scene_graph(gltf, source=_source_label(source), sanitize_names=sanitize_names)


def load_avatar_model(source: Optional[ModelSource], sanitize_names: bool = True) -> LoadedAvatar:
    """
    Load a model and extract its bones and named nodes.

    Raises:
        InvalidSourceError: If no source is given
        InvalidSceneError: If the model has no scene
    """
    scene_graph = load_scene_graph(source, sanitize_names=sanitize_names)
    root = scene_graph.resolve_root()
    result = extract_bones(root)
    logger.info(f"Loaded {scene_graph.source}: {len(result.bones)} bones, {len(result.nodes)} named nodes")
    return LoadedAvatar(gltf=scene_graph.raw, scene=root, bones=result.bones, nodes=result.nodes)
