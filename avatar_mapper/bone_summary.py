#!/usr/bin/env python3
"""
Bone and node summaries for display and JSON export.
Scene nodes hold parser state; the UI only needs names and the bone flag.
"""

from typing import Any, Dict, List

from .bone_extraction import ExtractionResult
from .scene_graph import SceneNode


def summarize_bones(bones: List[SceneNode]) -> List[Dict[str, str]]:
    return [{'name': bone.name} for bone in bones]


def summarize_nodes(nodes: List[SceneNode]) -> List[Dict[str, Any]]:
    return [{'name': node.name, 'isBone': bool(node.is_bone)} for node in nodes]


def summarize_extraction(result: ExtractionResult) -> Dict[str, List[Dict[str, Any]]]:
    """Summaries of both lists of an extraction, ready for json.dumps."""
    return {
        'bones': summarize_bones(result.bones),
        'nodes': summarize_nodes(result.nodes),
    }
