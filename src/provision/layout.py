"""Post-install interpreter layout: python symlinks and pip bootstrap."""
from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from common.errors import LayoutError
from versioning.semver import coerce_version
from .platform import HostPlatform

logger = logging.getLogger(__name__)


@dataclass
class ExecResult:
    """Exit code and captured output of a command."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""


class ProcessExecutor(Protocol):
    def exec(self, command: str, args: Sequence[str]) -> ExecResult:
        raise NotImplementedError


class SubprocessExecutor:
    """ProcessExecutor running commands without a shell."""

    def exec(self, command: str, args: Sequence[str]) -> ExecResult:
        argv: List[str] = [command, *args]
        logger.debug("Running %s", " ".join(argv))
        try:
            completed = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise LayoutError(f"Failed to run {command}: {exc}") from exc
        return ExecResult(completed.returncode, completed.stdout or "", completed.stderr or "")


def get_pypy_binary_path(install_dir: str, host: HostPlatform) -> str:
    """The interpreter lives in the install root on Windows, in ``bin`` elsewhere."""
    return install_dir if host.is_windows else os.path.join(install_dir, "bin")


def get_pip_dir(install_dir: str, host: HostPlatform) -> str:
    return os.path.join(install_dir, "Scripts" if host.is_windows else "bin")


def python_executable(binary_path: str, host: HostPlatform) -> str:
    return os.path.join(binary_path, "python.exe" if host.is_windows else "python")


def _create_symlink_in_folder(
    folder: str,
    source_name: str,
    target_name: str,
    host: HostPlatform,
    set_executable: bool = False,
) -> None:
    source = os.path.join(folder, source_name)
    target = os.path.join(folder, target_name)
    if os.path.lexists(target):
        logger.debug("Symlink %s already exists, skipping", target)
        return
    try:
        os.symlink(source, target)
        if set_executable and not host.is_windows:
            os.chmod(target, 0o755)
    except OSError as exc:
        raise LayoutError(f"Failed to create symlink {target} -> {source}: {exc}") from exc


def create_pypy_symlink(binary_path: str, python_version: str, host: HostPlatform) -> None:
    """Link ``python`` and ``python<major>`` to the PyPy binary.

    Existing links are left untouched.
    """
    version = coerce_version(python_version)
    if version is None:
        raise LayoutError(f"Cannot derive a major version from Python {python_version!r}")
    major = version.major
    pypy_postfix = "" if major == 2 else "3"
    ext = ".exe" if host.is_windows else ""

    logger.info("Creating symlinks...")
    _create_symlink_in_folder(
        binary_path, f"pypy{pypy_postfix}{ext}", f"python{major}{ext}", host, True
    )
    _create_symlink_in_folder(
        binary_path, f"pypy{pypy_postfix}{ext}", f"python{ext}", host, True
    )


def install_pip(binary_path: str, host: HostPlatform, executor: ProcessExecutor) -> None:
    """Bootstrap pip with ensurepip, then upgrade it.

    Raises:
        LayoutError: If either command exits non-zero.
    """
    logger.info("Installing and updating pip")
    python = python_executable(binary_path, host)
    for args in (["-m", "ensurepip"], ["-m", "pip", "install", "--ignore-installed", "pip"]):
        result = executor.exec(python, args)
        if result.exit_code != 0:
            raise LayoutError(
                f"Command '{python} {' '.join(args)}' failed with exit code "
                f"{result.exit_code}: {result.stderr.strip()}"
            )


class InterpreterLayout:
    """Applies the post-install fix-ups to a fresh PyPy tree."""

    def __init__(
        self,
        host: HostPlatform,
        executor: Optional[ProcessExecutor] = None,
        bootstrap_pip: bool = True,
    ):
        self.host = host
        self.executor = executor or SubprocessExecutor()
        self.bootstrap_pip = bootstrap_pip

    def fix_up(self, install_dir: str, python_version: str) -> None:
        binary_path = get_pypy_binary_path(install_dir, self.host)
        create_pypy_symlink(binary_path, python_version, self.host)
        if self.bootstrap_pip:
            install_pip(binary_path, self.host, self.executor)
        else:
            logger.info("Skipping pip bootstrap")
