"""On-disk tool cache keyed by (tool, version, architecture).

Layout mirrors the hosted runner tool cache::

    <root>/<tool>/<version>/<arch>/...
    <root>/<tool>/<version>/<arch>.complete
"""
from __future__ import annotations

import logging
import os
import shutil
from typing import List, Protocol

from common.errors import ToolCacheError
from common.logging_utils import extra_context, is_debug_enabled
from versioning.semver import to_version

logger = logging.getLogger(__name__)


class ToolCache(Protocol):
    """Narrow interface the resolver and installer use."""

    def find(self, tool: str, version: str, arch: str) -> str:
        """Return the install dir for an exact version, or '' when absent."""
        raise NotImplementedError

    def find_all_versions(self, tool: str, arch: str) -> List[str]:
        """Return every completely cached version of ``tool`` for ``arch``."""
        raise NotImplementedError

    def cache_dir(self, source_dir: str, tool: str, version: str, arch: str) -> str:
        """Copy ``source_dir`` into the cache and return its final location."""
        raise NotImplementedError


class FileSystemToolCache:
    """ToolCache backed by a directory tree."""

    def __init__(self, root: str):
        self.root = os.path.abspath(os.path.expanduser(root))

    def _version_dir(self, tool: str, version: str) -> str:
        return os.path.join(self.root, tool, version)

    def _complete_marker(self, tool: str, version: str, arch: str) -> str:
        return os.path.join(self._version_dir(tool, version), f"{arch}.complete")

    def find(self, tool: str, version: str, arch: str) -> str:
        if not version or to_version(version) is None:
            return ""
        path = os.path.join(self._version_dir(tool, version), arch)
        if os.path.isdir(path) and os.path.isfile(self._complete_marker(tool, version, arch)):
            if is_debug_enabled(logger):
                logger.debug(
                    "Tool cache hit",
                    extra=extra_context(
                        event="cache_hit",
                        component="toolcache",
                        action="find",
                        target=path,
                    )
                )
            return path
        return ""

    def find_all_versions(self, tool: str, arch: str) -> List[str]:
        tool_dir = os.path.join(self.root, tool)
        if not os.path.isdir(tool_dir):
            return []
        versions = []
        for child in sorted(os.listdir(tool_dir)):
            if to_version(child) is None:
                continue
            if self.find(tool, child, arch):
                versions.append(child)
        return versions

    def cache_dir(self, source_dir: str, tool: str, version: str, arch: str) -> str:
        if not os.path.isdir(source_dir):
            raise ToolCacheError(f"sourceDir is not a directory: {source_dir}")
        dest = os.path.join(self._version_dir(tool, version), arch)
        marker = self._complete_marker(tool, version, arch)
        logger.debug("Caching tool %s %s %s into %s", tool, version, arch, dest)
        try:
            if os.path.exists(marker):
                os.remove(marker)
            if os.path.isdir(dest):
                shutil.rmtree(dest)
            os.makedirs(os.path.dirname(dest), exist_ok=True)
            shutil.copytree(source_dir, dest, symlinks=True)
            with open(marker, "w", encoding="utf-8"):
                pass
        except OSError as exc:
            raise ToolCacheError(f"Failed to cache {tool} {version} ({arch}) in {dest}: {exc}") from exc
        return dest
