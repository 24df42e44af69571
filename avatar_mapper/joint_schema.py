#!/usr/bin/env python3
"""
Logical Joint Schema
The fixed set of body-part slots an animation rig drives, the mapping from
those slots to bone names, and the avatar configuration that carries it.

Logical joints follow a RobotExpressive-style arm chain:
shoulder -> upper arm -> lower arm -> hand.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

DEFAULT_AVATAR_NAME = "Custom Avatar"

LOGICAL_JOINTS = (
    'head',
    'spine',
    'leftShoulder',
    'leftUpperArm',
    'leftLowerArm',
    'leftHand',
    'rightShoulder',
    'rightUpperArm',
    'rightLowerArm',
    'rightHand',
)


def create_empty_mapping() -> Dict[str, str]:
    """Return a new mapping with every logical joint unmapped."""
    return {joint: '' for joint in LOGICAL_JOINTS}


def validate_mapping(mapping: Dict[str, str]) -> Dict[str, str]:
    """
    Check that a mapping covers exactly the logical joints with string values.

    Raises:
        ValueError: On missing or unknown joints, or non-string bone names
    """
    keys = set(mapping)
    missing = [j for j in LOGICAL_JOINTS if j not in keys]
    unknown = sorted(keys.difference(LOGICAL_JOINTS))
    if missing or unknown:
        raise ValueError(f"Invalid joint mapping: missing={missing}, unknown={unknown}")
    for joint, bone_name in mapping.items():
        if not isinstance(bone_name, str):
            raise ValueError(f"Bone name for {joint} must be a string, got {type(bone_name).__name__}")
    return mapping


@dataclass
class AvatarConfig:
    """
    One complete custom avatar configuration.

    url: model source, a path or a data URL
    name: display label
    mapping: logical joint -> bone name
    """
    url: str = ""
    name: str = DEFAULT_AVATAR_NAME
    mapping: Dict[str, str] = None

    def __post_init__(self):
        if self.mapping is None:
            self.mapping = create_empty_mapping()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'url': self.url,
            'name': self.name,
            'mapping': dict(self.mapping),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AvatarConfig":
        mapping = data.get('mapping')
        if mapping is not None:
            mapping = validate_mapping(dict(mapping))
        return create_avatar_config(
            url=data.get('url', ''),
            name=data.get('name', DEFAULT_AVATAR_NAME),
            mapping=mapping,
        )


def create_avatar_config(url: str = "", name: str = DEFAULT_AVATAR_NAME,
                         mapping: Optional[Dict[str, str]] = None) -> AvatarConfig:
    """Build a config; an explicit mapping is used as-is, otherwise a fresh empty one."""
    return AvatarConfig(url=url, name=name, mapping=mapping if mapping is not None else create_empty_mapping())


def save_avatar_config(config: AvatarConfig, output_path: Union[str, Path]) -> None:
    output_path = Path(output_path)
    with open(output_path, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)


def load_avatar_config(config_path: Union[str, Path]) -> AvatarConfig:
    """
    Load an avatar config from JSON.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the stored mapping is malformed
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Avatar config not found: {config_path}")
    with open(config_path, 'r') as f:
        return AvatarConfig.from_dict(json.load(f))
