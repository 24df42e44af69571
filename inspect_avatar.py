#!/usr/bin/env python3
"""
Inspect a humanoid glTF/GLB model: list its bones and nodes and suggest which
bones drive the logical joints (head, spine, shoulders, arms, hands).

Usage:
    python inspect_avatar.py model.glb                     # Print bones and suggested mapping
    python inspect_avatar.py model.glb --json              # Same, as JSON
    python inspect_avatar.py model.glb --config-out a.json # Write an avatar config
    python inspect_avatar.py model.glb --store             # Keep the file as the custom avatar
    python inspect_avatar.py --from-store                  # Inspect the stored custom avatar
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from avatar_mapper.avatar_storage import AvatarFileStore
from avatar_mapper.bone_summary import summarize_bones, summarize_nodes
from avatar_mapper.gltf_scene_loader import load_avatar_model
from avatar_mapper.joint_schema import DEFAULT_AVATAR_NAME, LOGICAL_JOINTS, create_avatar_config, save_avatar_config
from avatar_mapper.mapping_inference import suggest_mapping
from avatar_mapper.scene_graph import InvalidSceneError, InvalidSourceError

# Logging Configuration
LOG_LEVEL = logging.WARNING   # Overridden by --log-level


def setup_logging(level=LOG_LEVEL):
    """Configure logging with the specified verbosity level."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    return logging.getLogger(__name__)


def print_report(source_label: str, bones, nodes, mapping) -> None:
    print(f"\nAvatar: {source_label}")
    print("-" * 50)
    print(f"Nodes: {len(nodes)}  Bones: {len(bones)}")
    for bone in bones:
        print(f"   {bone['name']}")

    print("\nSuggested mapping:")
    for joint in LOGICAL_JOINTS:
        print(f"   {joint:<14} -> {mapping[joint] or '(unmapped)'}")
    print("-" * 50)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Inspect avatar bones and suggest a joint mapping")
    parser.add_argument("model", nargs="?", help="Path to a .glb or .gltf file")
    parser.add_argument("--from-store", action="store_true",
                        help="Inspect the stored custom avatar instead of a file")
    parser.add_argument("--store", action="store_true",
                        help="Save the model file as the custom avatar")
    parser.add_argument("--store-dir", type=str, default=None,
                        help="Custom avatar store directory")
    parser.add_argument("--raw-names", action="store_true",
                        help="Keep node names as stored instead of sanitizing them for animation track paths")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a report")
    parser.add_argument("--config-out", type=str, default=None,
                        help="Write an avatar config with the suggested mapping")
    parser.add_argument("--name", type=str, default=DEFAULT_AVATAR_NAME, help="Avatar display name")
    parser.add_argument("--log-level", type=str, default=logging.getLevelName(LOG_LEVEL),
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    args = parser.parse_args(argv)
    logger = setup_logging(args.log_level)
    store = AvatarFileStore(args.store_dir)

    source = args.model
    url = args.model or ""
    if args.from_store:
        record = store.load_custom_avatar_file()
        if record is None:
            logger.error("No custom avatar stored")
            return 1
        source = record.to_data_url()
        url = record.file_name

    try:
        avatar = load_avatar_model(source, sanitize_names=not args.raw_names)
    except (InvalidSourceError, InvalidSceneError, FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    if args.store and args.model:
        model_path = Path(args.model)
        store.save_custom_avatar_file(model_path.read_bytes(), model_path.name)

    bones = summarize_bones(avatar.bones)
    nodes = summarize_nodes(avatar.nodes)
    mapping = suggest_mapping(avatar.bones)

    if args.json:
        print(json.dumps({'bones': bones, 'nodes': nodes, 'mapping': mapping}, indent=2))
    else:
        print_report(url, bones, nodes, mapping)

    if args.config_out:
        config = create_avatar_config(url=url, name=args.name, mapping=mapping)
        save_avatar_config(config, args.config_out)
        if not args.json:
            print(f"Saved avatar config to: {args.config_out}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
