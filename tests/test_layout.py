"""Tests for the post-install interpreter layout."""

import os
import sys
from unittest.mock import patch

import pytest

from common.errors import LayoutError
from provision.layout import (
    ExecResult,
    InterpreterLayout,
    SubprocessExecutor,
    create_pypy_symlink,
    get_pip_dir,
    get_pypy_binary_path,
    install_pip,
    python_executable,
)
from provision.platform import LINUX, WINDOWS

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="creates POSIX symlinks")


class RecordingExecutor:
    def __init__(self, results=None):
        self.calls = []
        self.results = list(results or [])

    def exec(self, command, args):
        self.calls.append((command, list(args)))
        return self.results.pop(0) if self.results else ExecResult(0)


def test_binary_and_pip_paths():
    assert get_pypy_binary_path("/opt/pypy", LINUX) == os.path.join("/opt/pypy", "bin")
    assert get_pypy_binary_path("/opt/pypy", WINDOWS) == "/opt/pypy"
    assert get_pip_dir("/opt/pypy", LINUX) == os.path.join("/opt/pypy", "bin")
    assert get_pip_dir("/opt/pypy", WINDOWS) == os.path.join("/opt/pypy", "Scripts")
    assert python_executable("/opt/pypy", WINDOWS) == os.path.join("/opt/pypy", "python.exe")


@posix_only
class TestCreatePyPySymlink:
    """Tests for create_pypy_symlink()."""

    def test_python3_links(self, tmp_path):
        (tmp_path / "pypy3").write_text("", encoding="utf-8")
        create_pypy_symlink(str(tmp_path), "3.7.9", LINUX)
        assert os.readlink(tmp_path / "python3") == str(tmp_path / "pypy3")
        assert os.readlink(tmp_path / "python") == str(tmp_path / "pypy3")

    def test_python2_links(self, tmp_path):
        (tmp_path / "pypy").write_text("", encoding="utf-8")
        create_pypy_symlink(str(tmp_path), "2.7.18", LINUX)
        assert os.readlink(tmp_path / "python2") == str(tmp_path / "pypy")
        assert os.readlink(tmp_path / "python") == str(tmp_path / "pypy")

    def test_windows_names(self, tmp_path):
        (tmp_path / "pypy3.exe").write_text("", encoding="utf-8")
        create_pypy_symlink(str(tmp_path), "3.6.12", WINDOWS)
        assert os.readlink(tmp_path / "python3.exe") == str(tmp_path / "pypy3.exe")
        assert os.readlink(tmp_path / "python.exe") == str(tmp_path / "pypy3.exe")

    def test_existing_links_are_kept(self, tmp_path):
        (tmp_path / "pypy3").write_text("", encoding="utf-8")
        (tmp_path / "python").write_text("keep", encoding="utf-8")
        create_pypy_symlink(str(tmp_path), "3.7", LINUX)
        create_pypy_symlink(str(tmp_path), "3.7", LINUX)
        assert (tmp_path / "python").read_text(encoding="utf-8") == "keep"
        assert os.readlink(tmp_path / "python3") == str(tmp_path / "pypy3")

    def test_unparseable_python_version(self, tmp_path):
        with pytest.raises(LayoutError):
            create_pypy_symlink(str(tmp_path), "nightly", LINUX)


class TestInstallPip:
    """Tests for install_pip()."""

    def test_runs_ensurepip_then_upgrade(self):
        executor = RecordingExecutor()
        install_pip("/opt/pypy/bin", LINUX, executor)
        python = os.path.join("/opt/pypy/bin", "python")
        assert executor.calls == [
            (python, ["-m", "ensurepip"]),
            (python, ["-m", "pip", "install", "--ignore-installed", "pip"]),
        ]

    def test_failure_raises_layout_error(self):
        executor = RecordingExecutor([ExecResult(1, "", "No module named ensurepip\n")])
        with pytest.raises(LayoutError) as exc:
            install_pip("/opt/pypy/bin", LINUX, executor)
        assert "No module named ensurepip" in str(exc.value)
        assert len(executor.calls) == 1

    def test_upgrade_failure_raises(self):
        executor = RecordingExecutor([ExecResult(0), ExecResult(2, "", "network down")])
        with pytest.raises(LayoutError):
            install_pip("/opt/pypy/bin", LINUX, executor)


@posix_only
class TestInterpreterLayout:
    def test_fix_up_without_pip(self, tmp_path):
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir()
        (bin_dir / "pypy3").write_text("", encoding="utf-8")
        executor = RecordingExecutor()

        InterpreterLayout(LINUX, executor=executor, bootstrap_pip=False).fix_up(str(tmp_path), "3.9.10")

        assert os.path.islink(bin_dir / "python3")
        assert executor.calls == []


class TestSubprocessExecutor:
    @patch("provision.layout.subprocess.run")
    def test_returns_exec_result(self, mock_run):
        mock_run.return_value.returncode = 3
        mock_run.return_value.stdout = "out"
        mock_run.return_value.stderr = "err"

        result = SubprocessExecutor().exec("python", ["-m", "ensurepip"])

        assert result == ExecResult(3, "out", "err")
        mock_run.assert_called_once_with(
            ["python", "-m", "ensurepip"], capture_output=True, text=True, check=False
        )

    @patch("provision.layout.subprocess.run", side_effect=FileNotFoundError("python"))
    def test_missing_binary_raises_layout_error(self, _mock_run):
        with pytest.raises(LayoutError):
            SubprocessExecutor().exec("python", [])
