"""Download-and-install path for PyPy releases."""
from __future__ import annotations

import logging
import os
import shutil
from typing import Callable, List, Optional

from constants import Constants
from common.errors import ReleaseNotFoundError, TransportError
from common.http_client import download_tool
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from versioning.models import ResolvedInstall
from versioning.semver import is_nightly_keyword
from .archive import ArchiveExtractor, Extractor
from .cache_lookup import write_exact_pypy_version
from .layout import InterpreterLayout
from .manifest import Release, fetch_manifest, find_release
from .platform import HostPlatform
from .toolcache import ToolCache

logger = logging.getLogger(__name__)


class PyPyInstaller:
    """Sequences manifest lookup, download, extraction, caching and layout.

    Every collaborator is injected; each step runs only after the previous
    one finished, and any failure propagates unchanged.
    """

    def __init__(
        self,
        *,
        host: HostPlatform,
        tool_cache: ToolCache,
        layout: InterpreterLayout,
        manifest_url: str = Constants.MANIFEST_URL,
        fetch_releases: Optional[Callable[[str], List[Release]]] = None,
        downloader: Optional[Callable[[str], str]] = None,
        extractor: Optional[Extractor] = None,
    ):
        self.host = host
        self.tool_cache = tool_cache
        self.layout = layout
        self.manifest_url = manifest_url
        self.fetch_releases = fetch_releases or fetch_manifest
        self.downloader = downloader or download_tool
        self.extractor = extractor or ArchiveExtractor()

    def install(self, pypy_version: str, python_version: str, architecture: str) -> ResolvedInstall:
        """Install the best release matching the requested ranges.

        Args:
            pypy_version: PyPy version range or ``nightly``
            python_version: Python version range
            architecture: Target architecture

        Returns:
            ResolvedInstall describing the new tree

        Raises:
            ReleaseNotFoundError: If no release matches.
            TransportError: If fetching, downloading or extracting fails.
            ToolCacheError: If the tree cannot be cached or its marker written.
            LayoutError: If the symlink or pip fix-ups fail.
        """
        releases = self.fetch_releases(self.manifest_url)
        match = find_release(releases, python_version, pypy_version, architecture, self.host)
        if match is None:
            raise ReleaseNotFoundError(python_version, pypy_version, architecture)

        resolved_python = match.resolved_python_version
        resolved_pypy = match.resolved_pypy_version
        download_url = match.asset.download_url

        logger.info("Downloading PyPy from \"%s\" ...", safe_url(download_url))
        with Timer() as t:
            archive_path = self.downloader(download_url)
        if is_debug_enabled(logger):
            logger.debug(
                "Downloaded PyPy archive",
                extra=extra_context(
                    event="download",
                    component="installer",
                    action="install",
                    outcome="success",
                    duration_ms=t.duration_ms(),
                    target=safe_url(download_url),
                )
            )

        logger.info("Extracting downloaded archive...")
        nightly = is_nightly_keyword(resolved_pypy)
        download_dir = None
        try:
            download_dir = self._extract(archive_path)
            tool_dir = self._top_level_dir(download_dir, archive_path)
            if nightly:
                install_dir = tool_dir
            else:
                logger.info("Adding PyPy %s (Python %s) to the tool cache", resolved_pypy, resolved_python)
                install_dir = self.tool_cache.cache_dir(
                    tool_dir, Constants.TOOL_NAME, resolved_python, architecture
                )
        finally:
            _discard(archive_path)
            # Nightly trees are used in place from the extraction directory.
            if download_dir and not nightly:
                _discard(download_dir)

        write_exact_pypy_version(install_dir, resolved_pypy)
        self.layout.fix_up(install_dir, resolved_python)

        return ResolvedInstall(
            install_dir=install_dir,
            resolved_python_version=resolved_python,
            resolved_pypy_version=resolved_pypy,
        )

    def _extract(self, archive_path: str) -> str:
        if self.host.is_windows:
            return self.extractor.extract_zip(archive_path)
        return self.extractor.extract_tar(archive_path)

    @staticmethod
    def _top_level_dir(download_dir: str, archive_path: str) -> str:
        """Return the archive's single top-level directory.

        Nightly archives use a build-stamped folder name, so the folder is
        discovered by listing rather than derived from the asset filename.
        """
        entries = sorted(os.listdir(download_dir))
        if not entries:
            raise TransportError(f"Archive {archive_path} extracted no files")
        return os.path.join(download_dir, entries[0])


def _discard(path: str) -> None:
    """Remove a temporary file or directory, logging instead of failing."""
    if not os.path.lexists(path):
        return
    try:
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.remove(path)
    except OSError as exc:
        logger.warning("Could not remove temporary path %s: %s", path, exc)
