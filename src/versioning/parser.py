"""Parsing of ``pypy<python>-<pypy>`` version spec strings."""

import logging

from constants import Constants
from common.errors import InvalidSpecError
from common.logging_utils import extra_context, is_debug_enabled
from .models import PyPyVersionSpec
from .semver import is_nightly_keyword, is_valid_range, pypy_version_to_semantic

logger = logging.getLogger(__name__)

PREFIX = "pypy"
INVALID_SPEC_MESSAGE = (
    "Invalid 'version' property for PyPy. "
    "PyPy version should be specified as 'pypy<python-version>' or "
    "'pypy<python-version>-<pypy-version>'. See readme for more examples."
)


def is_pypy_spec(version_spec: str) -> bool:
    """Return True when the spec names the PyPy implementation."""
    return version_spec.strip().lower().startswith(PREFIX)


def _normalize_pypy_segment(segment: str) -> str:
    """Turn the second spec segment into a range or the nightly sentinel."""
    if is_nightly_keyword(segment):
        return segment
    if segment[:1] in ("v", "V") and segment[1:2].isdigit():
        segment = segment[1:]
    return pypy_version_to_semantic(segment)


def parse_pypy_version(version_spec: str) -> PyPyVersionSpec:
    """Parse a spec like ``pypy3.7-7.3.x`` or ``pypy-3.9-nightly``.

    The PyPy range defaults to any version when only the Python segment is
    given. Inline prereleases (``7.3.3rc1``) are normalized to semver form.

    Raises:
        InvalidSpecError: If either segment is missing or not a valid range.
    """
    raw = (version_spec or "").strip()
    if not is_pypy_spec(raw):
        raise InvalidSpecError(INVALID_SPEC_MESSAGE)

    remainder = raw[len(PREFIX):]
    if remainder.startswith("-"):
        remainder = remainder[1:]
    segments = remainder.split("-")

    python_version = segments[0].strip()
    if not python_version or not is_valid_range(python_version):
        raise InvalidSpecError(INVALID_SPEC_MESSAGE)

    if len(segments) > 1:
        pypy_segment = "-".join(segments[1:]).strip()
        if not pypy_segment:
            raise InvalidSpecError(INVALID_SPEC_MESSAGE)
        pypy_version = _normalize_pypy_segment(pypy_segment)
    else:
        pypy_version = Constants.ANY_VERSION

    if not is_nightly_keyword(pypy_version) and not is_valid_range(pypy_version):
        raise InvalidSpecError(INVALID_SPEC_MESSAGE)

    if is_debug_enabled(logger):
        logger.debug(
            "Parsed version spec",
            extra=extra_context(
                event="parse",
                component="parser",
                action="parse_pypy_version",
                outcome="success",
                target=raw,
            )
        )
    return PyPyVersionSpec(python_version=python_version, pypy_version=pypy_version)
