"""Export of the resolved interpreter to the invoking environment.

Inside GitHub Actions the runner's ``GITHUB_ENV``/``GITHUB_PATH``/
``GITHUB_OUTPUT`` files are appended to; elsewhere shell ``export`` lines
and ``name=value`` outputs are printed so callers can ``eval`` them.
"""
from __future__ import annotations

import logging
import os
import sys
import uuid
from typing import Mapping, Optional, Protocol, TextIO

from constants import Constants

logger = logging.getLogger(__name__)


class EnvironmentSink(Protocol):
    def export_variable(self, name: str, value: str) -> None:
        raise NotImplementedError

    def add_path(self, path: str) -> None:
        raise NotImplementedError

    def set_output(self, name: str, value: str) -> None:
        raise NotImplementedError


def _append_file_command(path: str, name: str, value: str) -> None:
    if "\n" in value:
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        line = f"{name}<<{delimiter}\n{value}\n{delimiter}\n"
    else:
        line = f"{name}={value}\n"
    with open(path, "a", encoding="utf-8") as fh:
        fh.write(line)


def _shell_quote(value: str) -> str:
    return "'" + value.replace("'", "'\"'\"'") + "'"


class ActionsEnvironment:
    """EnvironmentSink for GitHub Actions, with a stdout fallback."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None, stream: Optional[TextIO] = None):
        self.environ = os.environ if environ is None else environ
        self.stream = stream or sys.stdout

    def export_variable(self, name: str, value: str) -> None:
        env_file = self.environ.get(Constants.ENV_GITHUB_ENV)
        if env_file:
            _append_file_command(env_file, name, value)
        else:
            self.stream.write(f"export {name}={_shell_quote(value)}\n")
        logger.debug("Exported %s=%s", name, value)

    def add_path(self, path: str) -> None:
        path_file = self.environ.get(Constants.ENV_GITHUB_PATH)
        if path_file:
            with open(path_file, "a", encoding="utf-8") as fh:
                fh.write(f"{path}\n")
        else:
            self.stream.write(f"export PATH={_shell_quote(path)}{os.pathsep}\"$PATH\"\n")
        logger.debug("Prepended %s to PATH", path)

    def set_output(self, name: str, value: str) -> None:
        output_file = self.environ.get(Constants.ENV_GITHUB_OUTPUT)
        if output_file:
            _append_file_command(output_file, name, value)
        else:
            self.stream.write(f"{name}={value}\n")
