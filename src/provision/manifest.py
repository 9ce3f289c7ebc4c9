"""PyPy release manifest parsing and release matching.

The manifest is the JSON array published at
https://downloads.python.org/pypy/versions.json; each entry lists one PyPy
release, the Python version it implements and its per-platform archives.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Tuple

import semantic_version

from common.errors import TransportError
from common.http_client import get_json
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from versioning.semver import (
    coerce_version,
    is_nightly_keyword,
    satisfies,
    to_version,
)
from .platform import HostPlatform

logger = logging.getLogger(__name__)

_LOWEST = semantic_version.Version("0.0.0")


@dataclass(frozen=True)
class Asset:
    """One downloadable archive of a release."""
    filename: str
    arch: str
    platform: str
    download_url: str


@dataclass(frozen=True)
class Release:
    """One manifest entry."""
    pypy_version: str
    python_version: str
    stable: bool
    latest_pypy: bool
    files: Tuple[Asset, ...]

    def find_asset(self, architecture: str, host: HostPlatform) -> Optional[Asset]:
        """Return the asset for ``architecture`` on ``host``, if the release has one."""
        for asset in self.files:
            if asset.arch == architecture and host.supports(asset.platform):
                return asset
        return None


@dataclass(frozen=True)
class ReleaseMatch:
    """Best release for a request, with its literal (unnormalized) versions."""
    asset: Asset
    resolved_python_version: str
    resolved_pypy_version: str


def _parse_asset(raw: Any) -> Optional[Asset]:
    if not isinstance(raw, dict):
        return None
    return Asset(
        filename=str(raw.get("filename", "")),
        arch=str(raw.get("arch", "")),
        platform=str(raw.get("platform", "")),
        download_url=str(raw.get("download_url", "")),
    )


def parse_manifest(payload: Any) -> List[Release]:
    """Convert the decoded manifest JSON into Release objects.

    Raises:
        TransportError: If the payload is not a JSON array.
    """
    if not isinstance(payload, list):
        raise TransportError("PyPy manifest is not a JSON array")
    releases: List[Release] = []
    for entry in payload:
        if not isinstance(entry, dict):
            logger.debug("Skipping malformed manifest entry: %r", entry)
            continue
        files = tuple(
            asset for asset in (_parse_asset(f) for f in entry.get("files") or []) if asset
        )
        releases.append(
            Release(
                pypy_version=str(entry.get("pypy_version", "")),
                python_version=str(entry.get("python_version", "")),
                stable=bool(entry.get("stable", False)),
                latest_pypy=bool(entry.get("latest_pypy", False)),
                files=files,
            )
        )
    return releases


def fetch_manifest(
    url: str,
    *,
    fetch_json: Callable[[str], Any] = get_json,
) -> List[Release]:
    """Download and parse the release manifest."""
    logger.info("Fetching PyPy release manifest from %s", safe_url(url))
    releases = parse_manifest(fetch_json(url))
    if is_debug_enabled(logger):
        logger.debug(
            "Parsed manifest",
            extra=extra_context(
                event="parse",
                component="manifest",
                action="fetch_manifest",
                outcome="success",
                count=len(releases),
                target=safe_url(url),
            )
        )
    return releases


def _release_is_candidate(
    release: Release,
    python_version: str,
    pypy_version: str,
    architecture: str,
    host: HostPlatform,
) -> bool:
    if not satisfies(coerce_version(release.python_version), python_version):
        return False
    if is_nightly_keyword(pypy_version):
        if not is_nightly_keyword(release.pypy_version):
            return False
    elif not satisfies(to_version(release.pypy_version), pypy_version):
        return False
    return release.find_asset(architecture, host) is not None


def _rank_key(release: Release) -> Tuple[semantic_version.Version, semantic_version.Version]:
    pypy = to_version(release.pypy_version) or _LOWEST
    python = coerce_version(release.python_version) or _LOWEST
    return pypy, python


def find_release(
    releases: Iterable[Release],
    python_version: str,
    pypy_version: str,
    architecture: str,
    host: HostPlatform,
) -> Optional[ReleaseMatch]:
    """Pick the best release for the requested ranges and architecture.

    Candidates are ranked by PyPy version, then Python version, both
    descending; prereleases rank below their final release. Returns None
    when nothing matches.
    """
    candidates = [
        release
        for release in releases
        if _release_is_candidate(release, python_version, pypy_version, architecture, host)
    ]
    if is_debug_enabled(logger):
        logger.debug(
            "Filtered manifest releases",
            extra=extra_context(
                event="decision",
                component="manifest",
                action="find_release",
                outcome="empty" if not candidates else "non_empty",
                count=len(candidates),
            )
        )
    if not candidates:
        return None

    best = sorted(candidates, key=_rank_key, reverse=True)[0]
    asset = best.find_asset(architecture, host)
    if asset is None:
        return None
    return ReleaseMatch(
        asset=asset,
        resolved_python_version=best.python_version,
        resolved_pypy_version=best.pypy_version,
    )
