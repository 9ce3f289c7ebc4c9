"""Semantic version helpers built on ``semantic_version``.

Ranges use npm syntax (``3.6``, ``7.3.x``, ``>=7.3.1 <7.4``) through
``semantic_version.NpmSpec``, so prerelease versions only satisfy a range
whose comparator names a prerelease of the same major.minor.patch.
"""

import re
from typing import Callable, Iterable, Optional

import semantic_version

from constants import Constants

# PyPy writes prereleases inline ("7.3.3rc1"); semver wants "7.3.3-rc.1".
_INLINE_PRERELEASE = re.compile(r"(\d+\.\d+\.\d+)(a|b|rc)(\d*)")
_NUMERIC_PREFIX = re.compile(r"\d+(?:\.\d+){0,2}")


def is_nightly_keyword(value: Optional[str]) -> bool:
    """Return True only for the literal ``nightly`` sentinel."""
    return value == Constants.NIGHTLY


def pypy_version_to_semantic(version: str) -> str:
    """Rewrite inline prerelease tags to dashed semver form.

    Idempotent; ``7.3.x``, ``7.x`` and ``nightly`` pass through unchanged.
    """
    def _dash(match: "re.Match[str]") -> str:
        base, tag, number = match.groups()
        return f"{base}-{tag}.{number}" if number else f"{base}-{tag}"

    return _INLINE_PRERELEASE.sub(_dash, version)


def parse_range(range_str: str) -> semantic_version.NpmSpec:
    """Parse an npm-style range.

    Raises:
        ValueError: If the range cannot be parsed.
    """
    if not range_str or not range_str.strip():
        raise ValueError("Empty version range")
    return semantic_version.NpmSpec(range_str.strip())


def is_valid_range(range_str: str) -> bool:
    """Return True when ``range_str`` parses as an npm range."""
    try:
        parse_range(range_str)
    except ValueError:
        return False
    return True


def to_version(value: str) -> Optional[semantic_version.Version]:
    """Parse a PyPy version literal, keeping prerelease information."""
    if not value:
        return None
    try:
        return semantic_version.Version(pypy_version_to_semantic(value.strip()))
    except ValueError:
        return None


def coerce_version(value: str) -> Optional[semantic_version.Version]:
    """Coerce a loose version string to major.minor.patch, dropping any suffix."""
    if not value:
        return None
    match = _NUMERIC_PREFIX.match(value.strip())
    if not match:
        return None
    return semantic_version.Version.coerce(match.group(0))


def _range_matcher(range_str: str) -> Callable[[semantic_version.Version], bool]:
    """Compile ``range_str`` into a predicate.

    A bare full version matches only itself: ``NpmSpec("7.3.3-rc.1")`` also
    accepts the final ``7.3.3``.

    Raises:
        ValueError: If the range cannot be parsed.
    """
    text = (range_str or "").strip()
    if semantic_version.validate(text):
        exact = semantic_version.Version(text)
        return lambda candidate: candidate == exact
    return parse_range(text).match


def satisfies(version: Optional[semantic_version.Version], range_str: str) -> bool:
    """Return True when ``version`` falls within ``range_str``.

    Unparseable versions or ranges never satisfy anything.
    """
    if version is None:
        return False
    try:
        matches = _range_matcher(range_str)
    except ValueError:
        return False
    return matches(version)


def evaluate_versions(versions: Iterable[str], range_str: str) -> str:
    """Return the highest version in ``versions`` satisfying ``range_str``.

    Returns an empty string when nothing matches.
    """
    try:
        matches = _range_matcher(range_str)
    except ValueError:
        return ""
    best = ""
    best_parsed: Optional[semantic_version.Version] = None
    for candidate in versions:
        parsed = to_version(candidate)
        if parsed is None or not matches(parsed):
            continue
        if best_parsed is None or parsed > best_parsed:
            best, best_parsed = candidate, parsed
    return best
