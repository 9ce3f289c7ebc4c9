"""Archive extraction for downloaded PyPy releases."""
from __future__ import annotations

import logging
import os
import tarfile
import tempfile
import zipfile
from typing import Optional, Protocol

from common.errors import TransportError

logger = logging.getLogger(__name__)


class Extractor(Protocol):
    """Narrow interface the installer uses to unpack archives."""

    def extract_zip(self, archive_path: str, dest: Optional[str] = None) -> str:
        raise NotImplementedError

    def extract_tar(self, archive_path: str, dest: Optional[str] = None) -> str:
        raise NotImplementedError


def _fresh_dir(dest: Optional[str], temp_root: Optional[str]) -> str:
    if dest:
        os.makedirs(dest, exist_ok=True)
        return dest
    if temp_root:
        os.makedirs(temp_root, exist_ok=True)
    return tempfile.mkdtemp(prefix="pypy-", dir=temp_root)


class ArchiveExtractor:
    """Extractor using ``zipfile`` and ``tarfile`` (bz2, gz, xz)."""

    def __init__(self, temp_root: Optional[str] = None):
        self.temp_root = temp_root

    def extract_zip(self, archive_path: str, dest: Optional[str] = None) -> str:
        target = _fresh_dir(dest, self.temp_root)
        logger.debug("Extracting zip %s into %s", archive_path, target)
        try:
            with zipfile.ZipFile(archive_path, "r") as zf:
                zf.extractall(target)
        except (OSError, zipfile.BadZipFile) as exc:
            raise TransportError(f"Failed to extract {archive_path}: {exc}") from exc
        return target

    def extract_tar(self, archive_path: str, dest: Optional[str] = None) -> str:
        target = _fresh_dir(dest, self.temp_root)
        logger.debug("Extracting tar %s into %s", archive_path, target)
        try:
            with tarfile.open(archive_path, "r:*") as tf:
                # Release archives carry interpreter symlinks and exec bits.
                tf.extractall(target, filter="tar")
        except (OSError, tarfile.TarError) as exc:
            raise TransportError(f"Failed to extract {archive_path}: {exc}") from exc
        return target
