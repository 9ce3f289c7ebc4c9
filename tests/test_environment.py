"""Tests for exporting the interpreter to the calling environment."""

import io
import os

from provision.environment import ActionsEnvironment


def test_github_files(tmp_path):
    env_file = tmp_path / "env"
    path_file = tmp_path / "path"
    output_file = tmp_path / "output"
    environ = {
        "GITHUB_ENV": str(env_file),
        "GITHUB_PATH": str(path_file),
        "GITHUB_OUTPUT": str(output_file),
    }
    sink = ActionsEnvironment(environ=environ, stream=io.StringIO())

    sink.export_variable("pythonLocation", "/opt/pypy/bin")
    sink.add_path("/opt/pypy/bin")
    sink.set_output("python-version", "pypy3.7.9-7.3.3")
    sink.set_output("python-path", "/opt/pypy/bin/python")

    assert env_file.read_text(encoding="utf-8") == "pythonLocation=/opt/pypy/bin\n"
    assert path_file.read_text(encoding="utf-8") == "/opt/pypy/bin\n"
    assert output_file.read_text(encoding="utf-8") == (
        "python-version=pypy3.7.9-7.3.3\npython-path=/opt/pypy/bin/python\n"
    )
    assert sink.stream.getvalue() == ""


def test_multiline_values_use_delimiter(tmp_path):
    output_file = tmp_path / "output"
    sink = ActionsEnvironment(environ={"GITHUB_OUTPUT": str(output_file)})

    sink.set_output("notes", "first\nsecond")

    lines = output_file.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("notes<<ghadelimiter_")
    assert lines[1:3] == ["first", "second"]
    assert lines[3] == lines[0].split("<<", 1)[1]


def test_stdout_fallback():
    stream = io.StringIO()
    sink = ActionsEnvironment(environ={}, stream=stream)

    sink.export_variable("pythonLocation", "/opt/it's")
    sink.add_path("/opt/pypy/bin")
    sink.set_output("python-version", "pypy3.6.12-7.3.3")

    assert stream.getvalue().splitlines() == [
        "export pythonLocation='/opt/it'\"'\"'s'",
        f"export PATH='/opt/pypy/bin'{os.pathsep}\"$PATH\"",
        "python-version=pypy3.6.12-7.3.3",
    ]
