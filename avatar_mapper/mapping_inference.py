#!/usr/bin/env python3
"""
Mapping Inference
Guesses which bone fills each logical joint from bone naming conventions.

Side-qualified joints are matched in two phases: first a bone that has both a
keyword and a side hint for the requested side, then any bone with a keyword.
Rigs without left/right markers therefore still get suggestions, at the cost
of the same bone being proposed for both sides. The suggestion is meant to be
reviewed and corrected by a person.

The "l_" / "r_" hints only count at the start of a name token. A side letter
buried inside a word, as in "ArmL_01" or "UpperArmL_jnt", is therefore not
read as a side; such rigs fall back to keyword-only matching.
"""

import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .joint_schema import LOGICAL_JOINTS, create_empty_mapping
from .scene_graph import SceneNode

logger = logging.getLogger(__name__)

# Body part -> lowercase substrings that identify it
JOINT_KEYWORDS = {
    'head': ('head',),
    'spine': ('spine', 'hips', 'pelvis'),
    'shoulder': ('shoulder', 'clavicle'),
    'upperArm': ('upperarm', 'upper_arm', 'arm'),
    'lowerArm': ('lowerarm', 'lower_arm', 'forearm'),
    'hand': ('hand', 'wrist', 'palm'),
}

# Logical joint -> (body part, side)
JOINT_RULES = {
    'head': ('head', None),
    'spine': ('spine', None),
    'leftShoulder': ('shoulder', 'left'),
    'leftUpperArm': ('upperArm', 'left'),
    'leftLowerArm': ('lowerArm', 'left'),
    'leftHand': ('hand', 'left'),
    'rightShoulder': ('shoulder', 'right'),
    'rightUpperArm': ('upperArm', 'right'),
    'rightLowerArm': ('lowerArm', 'right'),
    'rightHand': ('hand', 'right'),
}

# Substrings of the lowercased name
SIDE_HINTS = {
    'left': ('left', '_l', '.l', '-l'),
    'right': ('right', '_r', '.r', '-r'),
}

# "l_" / "r_" only count at the start of a name token, so "shoulder_l" is not a right bone
SIDE_PREFIX_PATTERNS = {
    'left': re.compile(r'(?:^|[^a-z0-9])l_'),
    'right': re.compile(r'(?:^|[^a-z0-9])r_'),
}

# Trailing letter of the original name, e.g. "ShoulderL"
SIDE_SUFFIX_LETTERS = {
    'left': 'L',
    'right': 'R',
}

BoneView = List[Tuple[str, str]]


def _has_side_hint(lower: str, name: str, side: str) -> bool:
    if any(hint in lower for hint in SIDE_HINTS[side]):
        return True
    if SIDE_PREFIX_PATTERNS[side].search(lower):
        return True
    return name.endswith(SIDE_SUFFIX_LETTERS[side])


def has_left_hint(lower: str, name: str) -> bool:
    return _has_side_hint(lower, name, 'left')


def has_right_hint(lower: str, name: str) -> bool:
    return _has_side_hint(lower, name, 'right')


def build_bone_view(bones: Sequence[Union[SceneNode, str]]) -> BoneView:
    """(name, lowercased name) pairs in bone order; unnamed entries are skipped."""
    view = []
    for bone in bones:
        name = bone if isinstance(bone, str) else getattr(bone, 'name', None)
        if name:
            view.append((name, name.lower()))
    return view


def _matches_keywords(lower: str, keywords: Sequence[str]) -> bool:
    return any(keyword in lower for keyword in keywords)


def find_bone_match(bone_view: BoneView, keywords: Sequence[str],
                    side: Optional[str] = None) -> Tuple[str, bool]:
    """
    Find the first bone matching the keywords, preferring the requested side.

    Returns:
        (bone name or "", True if the side-agnostic fallback produced the match)
    """
    if side is not None:
        for name, lower in bone_view:
            if _matches_keywords(lower, keywords) and _has_side_hint(lower, name, side):
                return name, False

    for name, lower in bone_view:
        if _matches_keywords(lower, keywords):
            return name, side is not None
    return '', False


def suggest_mapping(bones: Sequence[Union[SceneNode, str]]) -> Dict[str, str]:
    """
    Suggest a bone for every logical joint.

    Args:
        bones: Deduplicated bones (SceneNode objects or bone names)

    Returns:
        New mapping with all logical joints; "" where nothing matched
    """
    bone_view = build_bone_view(bones)
    suggestions = create_empty_mapping()

    for joint in LOGICAL_JOINTS:
        part, side = JOINT_RULES[joint]
        bone_name, used_fallback = find_bone_match(bone_view, JOINT_KEYWORDS[part], side)
        suggestions[joint] = bone_name
        if used_fallback:
            logger.debug(f"{joint}: no {side}-side bone, fell back to '{bone_name}'")

    matched = sum(1 for name in suggestions.values() if name)
    logger.debug(f"Suggested {matched}/{len(LOGICAL_JOINTS)} joints from {len(bone_view)} bones")
    return suggestions
