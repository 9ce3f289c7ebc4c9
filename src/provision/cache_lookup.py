"""Resolution of an already installed PyPy from the local tool cache."""
from __future__ import annotations

import logging
import os
from typing import Optional, Tuple

from constants import Constants
from common.errors import ToolCacheError
from common.logging_utils import extra_context, is_debug_enabled
from versioning.models import ResolvedInstall
from versioning.semver import evaluate_versions, is_nightly_keyword, satisfies, to_version
from .toolcache import ToolCache

logger = logging.getLogger(__name__)


def read_exact_pypy_version(install_dir: str) -> str:
    """Return the PyPy release recorded next to an install, or '' when unknown.

    The interpreter's own banner is not used: prereleases report their
    final release number.
    """
    path = os.path.join(install_dir, Constants.PYPY_VERSION_FILENAME)
    if not os.path.isfile(path):
        return ""
    with open(path, encoding="utf-8") as fh:
        return fh.read().strip()


def write_exact_pypy_version(install_dir: str, pypy_version: str) -> None:
    """Record the literal PyPy release version for ``install_dir``.

    Raises:
        ToolCacheError: If the marker cannot be written.
    """
    path = os.path.join(install_dir, Constants.PYPY_VERSION_FILENAME)
    try:
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(pypy_version)
    except OSError as exc:
        raise ToolCacheError(f"Failed to write {path}: {exc}") from exc


def _find_cached_python(
    tool_cache: ToolCache,
    python_version: str,
    architecture: str,
) -> Tuple[str, str]:
    """Return (install_dir, python version) of the best cached match."""
    versions = tool_cache.find_all_versions(Constants.TOOL_NAME, architecture)
    best = evaluate_versions(versions, python_version)
    if not best:
        return "", ""
    return tool_cache.find(Constants.TOOL_NAME, best, architecture), best


def find_pypy_tool_cache(
    python_version: str,
    pypy_version: str,
    architecture: str,
    *,
    tool_cache: ToolCache,
    fallback_architecture: Optional[str] = None,
) -> Optional[ResolvedInstall]:
    """Look up a cached PyPy satisfying both ranges.

    Nightly requests never hit the cache. A cached tree whose recorded PyPy
    version is missing or outside ``pypy_version`` is a miss; other cached
    Python versions are not tried in its place.

    Args:
        python_version: Python version range
        pypy_version: PyPy version range or ``nightly``
        architecture: Requested architecture
        tool_cache: Cache store to query
        fallback_architecture: Architecture to retry with when nothing is cached

    Returns:
        ResolvedInstall on a hit, None on a miss
    """
    result = None
    if is_nightly_keyword(pypy_version):
        logger.info("PyPy nightly builds are always installed fresh; skipping the local cache")
    else:
        result = _lookup(python_version, pypy_version, architecture, tool_cache, fallback_architecture)

    if result is None:
        logger.info(
            "PyPy version %s (%s) was not found in the local cache",
            python_version,
            pypy_version,
        )
    return result


def _lookup(
    python_version: str,
    pypy_version: str,
    architecture: str,
    tool_cache: ToolCache,
    fallback_architecture: Optional[str],
) -> Optional[ResolvedInstall]:
    install_dir, resolved_python = _find_cached_python(tool_cache, python_version, architecture)
    if not install_dir and fallback_architecture:
        logger.debug("Retrying tool cache lookup with architecture %s", fallback_architecture)
        install_dir, resolved_python = _find_cached_python(
            tool_cache, python_version, fallback_architecture
        )
    if not install_dir:
        return None

    resolved_pypy = read_exact_pypy_version(install_dir)
    matched = bool(resolved_pypy) and satisfies(to_version(resolved_pypy), pypy_version)
    if is_debug_enabled(logger):
        logger.debug(
            "Validated cached PyPy version",
            extra=extra_context(
                event="decision",
                component="cache_lookup",
                action="find_pypy_tool_cache",
                outcome="hit" if matched else "miss",
                target=install_dir,
                version=resolved_pypy or None,
            )
        )
    if not matched:
        return None
    return ResolvedInstall(
        install_dir=install_dir,
        resolved_python_version=resolved_python,
        resolved_pypy_version=resolved_pypy,
    )
