#!/usr/bin/env python3
"""
Scene Graph Types
Plain value types describing a loaded 3D model: named nodes, their children,
and the skinning skeleton bound to mesh nodes. These are decoupled from the
glTF parser so that bone extraction and mapping can run on any source.
"""

from dataclasses import dataclass
from typing import Any, List, Optional


class InvalidSourceError(ValueError):
    """Raised when no model source reference is supplied."""


class InvalidSceneError(ValueError):
    """Raised when a scene graph has no root scene to traverse."""


@dataclass
class Skeleton:
    """Ordered list of bones a skinned mesh is bound to."""
    bones: List[Optional["SceneNode"]] = None

    def __post_init__(self):
        if self.bones is None:
            self.bones = []


@dataclass(eq=False)
class SceneNode:
    """A node in a loaded scene graph."""
    name: str = ""
    is_bone: bool = False
    uuid: Optional[str] = None
    children: List["SceneNode"] = None
    skeleton: Optional[Skeleton] = None  # Only set on skinned mesh nodes
    is_mesh: bool = False

    def __post_init__(self):
        if self.children is None:
            self.children = []
        if self.name is None:
            self.name = ""

    def add_child(self, child: "SceneNode") -> "SceneNode":
        self.children.append(child)
        return child


@dataclass
class SceneGraph:
    """A loaded model: the default scene root plus every scene in the file."""
    scene: Optional[SceneNode] = None
    scenes: List[SceneNode] = None
    source: str = ""
    raw: Any = None  # Parser document the graph was built from

    def __post_init__(self):
        if self.scenes is None:
            self.scenes = []

    def resolve_root(self) -> SceneNode:
        """Return the default scene, falling back to the first scene."""
        root = self.scene
        if root is None and self.scenes:
            root = self.scenes[0]
        if root is None:
            raise InvalidSceneError(f"Scene graph has no scene: {self.source or '<unnamed>'}")
        return root
