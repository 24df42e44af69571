#!/usr/bin/env python3
"""
Avatar File Storage
Keeps the user's uploaded model file as a single record on disk so the custom
avatar survives restarts. The file bytes and a small JSON metadata record are
stored side by side under one record id.
"""

import json
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .gltf_scene_loader import create_data_url

logger = logging.getLogger(__name__)

CUSTOM_RECORD_ID = 'custom'
DEFAULT_STORE_DIR = Path(os.environ.get('AVATAR_MAPPER_STORE_DIR', '~/.avatar_mapper')).expanduser()


@dataclass
class StoredAvatarFile:
    """A stored model file and its metadata."""
    file_data: bytes
    file_name: str
    saved_at: float  # Unix time in milliseconds

    def to_data_url(self) -> str:
        return create_data_url(self.file_data, self.file_name)


class AvatarFileStore:
    """Single-record store for the custom avatar model file."""

    def __init__(self, root_dir: Union[str, Path, None] = None, record_id: str = CUSTOM_RECORD_ID):
        self.root_dir = Path(root_dir) if root_dir is not None else DEFAULT_STORE_DIR
        self.record_id = record_id

    @property
    def data_path(self) -> Path:
        return self.root_dir / f"{self.record_id}.bin"

    @property
    def meta_path(self) -> Path:
        return self.root_dir / f"{self.record_id}.json"

    def save_custom_avatar_file(self, file_data: bytes, file_name: str) -> StoredAvatarFile:
        """Store a model file, replacing any previous one."""
        self.root_dir.mkdir(parents=True, exist_ok=True)
        record = StoredAvatarFile(file_data=bytes(file_data), file_name=file_name,
                                  saved_at=time.time() * 1000)

        # A record without metadata reads as missing: drop the old metadata first,
        # then move the new metadata into place only once the bytes are written
        self.meta_path.unlink(missing_ok=True)
        with open(self.data_path, 'wb') as f:
            f.write(record.file_data)

        meta_tmp_path = self.meta_path.with_name(self.meta_path.name + '.tmp')
        with open(meta_tmp_path, 'w') as f:
            f.write(json.dumps({
                'id': self.record_id,
                'fileName': record.file_name,
                'savedAt': record.saved_at,
                'size': len(record.file_data),
            }, indent=2))
        meta_tmp_path.replace(self.meta_path)

        logger.info(f"Saved custom avatar file: {file_name} size: {len(record.file_data)}")
        return record

    def load_custom_avatar_file(self) -> Optional[StoredAvatarFile]:
        """Return the stored model file, or None if nothing is stored."""
        if not self.meta_path.exists() or not self.data_path.exists():
            return None

        with open(self.meta_path, 'r') as f:
            meta = json.load(f)
        with open(self.data_path, 'rb') as f:
            file_data = f.read()

        record = StoredAvatarFile(file_data=file_data, file_name=meta['fileName'], saved_at=meta['savedAt'])
        logger.info(f"Loaded custom avatar file: {record.file_name} size: {len(file_data)}")
        return record

    def clear_custom_avatar_file(self) -> None:
        for path in (self.meta_path, self.data_path):
            if path.exists():
                path.unlink()
        logger.info("Cleared custom avatar file")
