"""Data models for version resolution and install results."""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class ResolutionSource(Enum):
    """Where a resolved interpreter came from."""
    CACHE = "cache"
    INSTALL = "install"


@dataclass(frozen=True)
class PyPyVersionSpec:
    """Parsed user request: a Python range and a PyPy range (or ``nightly``)."""
    python_version: str
    pypy_version: str


@dataclass(frozen=True)
class ResolvedInstall:
    """A concrete interpreter tree and the exact versions it provides."""
    install_dir: str
    resolved_python_version: str
    resolved_pypy_version: str


@dataclass(frozen=True)
class CacheHit:
    """Resolution satisfied from the local tool cache."""
    install: ResolvedInstall
    source: ResolutionSource = ResolutionSource.CACHE


@dataclass(frozen=True)
class Installed:
    """Resolution satisfied by downloading and installing a release."""
    install: ResolvedInstall
    source: ResolutionSource = ResolutionSource.INSTALL


ResolutionOutcome = Union[CacheHit, Installed]
