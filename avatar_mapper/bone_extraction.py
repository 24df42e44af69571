#!/usr/bin/env python3
"""
Bone Extraction
Walks a loaded scene graph once and collects every named node plus every bone,
whether the bone is a node of the graph itself or is only reachable through a
skinned mesh's skeleton. Exporters disagree on where bones live, so both paths
are collected and duplicates are dropped by identity key.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from .scene_graph import InvalidSceneError, SceneGraph, SceneNode

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    """Bones and named nodes found in a scene graph, in traversal order."""
    bones: List[SceneNode] = None
    nodes: List[SceneNode] = None

    def __post_init__(self):
        if self.bones is None:
            self.bones = []
        if self.nodes is None:
            self.nodes = []


def is_named(node: Optional[SceneNode]) -> bool:
    return node is not None and bool(node.name)


def bone_identity_key(node: SceneNode) -> str:
    """Stable id when the source provides one, else the bone name."""
    return node.uuid or node.name


def _resolve_root(scene_graph: Union[SceneGraph, SceneNode, None]) -> SceneNode:
    if scene_graph is None:
        raise InvalidSceneError("No scene graph supplied")
    if isinstance(scene_graph, SceneNode):
        return scene_graph
    return scene_graph.resolve_root()


def iter_scene_nodes(root: SceneNode):
    """Pre-order depth-first walk; a node object shared by two parents is yielded once."""
    visited = set()
    stack = [root]
    while stack:
        node = stack.pop()
        if node is None or id(node) in visited:
            continue
        visited.add(id(node))
        yield node
        # Reversed so the first child is visited first
        stack.extend(reversed(node.children))


def dedupe_bones(candidates: List[SceneNode]) -> List[SceneNode]:
    """Keep the first occurrence of each identity key."""
    unique_bones = []
    seen = set()
    for bone in candidates:
        if not is_named(bone):
            continue
        key = bone_identity_key(bone)
        if key in seen:
            continue
        seen.add(key)
        unique_bones.append(bone)
    return unique_bones


def extract_bones(scene_graph: Union[SceneGraph, SceneNode, None]) -> ExtractionResult:
    """
    Collect named nodes and unique bones from a scene graph.

    Args:
        scene_graph: SceneGraph (its default scene is used) or a root SceneNode

    Returns:
        ExtractionResult with deduplicated bones and all named nodes

    Raises:
        InvalidSceneError: If there is no root scene to traverse
    """
    root = _resolve_root(scene_graph)

    nodes = []
    candidates = []
    for node in iter_scene_nodes(root):
        if not is_named(node):
            continue
        nodes.append(node)

        # 1) Bone nodes in the graph itself
        if node.is_bone:
            candidates.append(node)

        # 2) Bones bound to a skinned mesh; many exports keep them off the scene root
        if node.skeleton is not None:
            candidates.extend(b for b in node.skeleton.bones if is_named(b))

    bones = dedupe_bones(candidates)
    logger.debug(f"Extracted {len(bones)} bones ({len(candidates)} candidates) from {len(nodes)} named nodes")
    return ExtractionResult(bones=bones, nodes=nodes)
