"""Tests for host platform detection and architecture fallback."""

import pytest

from constants import ArchFallback
from provision.platform import LINUX, MACOS, WINDOWS, default_architecture, detect_host_platform


@pytest.mark.parametrize("sys_platform, expected", [
    ("linux", LINUX),
    ("linux2", LINUX),
    ("darwin", MACOS),
    ("win32", WINDOWS),
])
def test_detect_host_platform(sys_platform, expected):
    assert detect_host_platform(sys_platform) == expected


def test_detect_unknown_platform():
    host = detect_host_platform("freebsd13")
    assert host.name == "freebsd13"
    assert host.supports("freebsd13")
    assert not host.is_windows


@pytest.mark.parametrize("machine, expected", [
    ("x86_64", "x64"),
    ("AMD64", "x64"),
    ("i686", "x86"),
    ("aarch64", "aarch64"),
    ("arm64", "arm64"),
    ("ppc64le", "ppc64le"),
])
def test_default_architecture(machine, expected):
    assert default_architecture(machine) == expected


def test_supports():
    assert WINDOWS.supports("win32")
    assert WINDOWS.supports("win64")
    assert not LINUX.supports("darwin")


class TestFallbackArchitecture:
    def test_windows_always(self):
        assert WINDOWS.fallback_architecture("x64", ArchFallback.ALWAYS, True) == "x86"

    def test_windows_implicit(self):
        assert WINDOWS.fallback_architecture("x64", ArchFallback.IMPLICIT, False) == "x86"
        assert WINDOWS.fallback_architecture("x64", ArchFallback.IMPLICIT, True) is None

    def test_never(self):
        assert WINDOWS.fallback_architecture("x64", ArchFallback.NEVER, False) is None

    def test_same_architecture_has_no_fallback(self):
        assert WINDOWS.fallback_architecture("x86", ArchFallback.ALWAYS, True) is None

    def test_multi_architecture_platforms(self):
        assert LINUX.fallback_architecture("x64", ArchFallback.ALWAYS, False) is None
        assert MACOS.fallback_architecture("arm64", ArchFallback.ALWAYS, False) is None
