"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    INVALID_INPUT = 4
    NOT_FOUND = 5
    LAYOUT_ERROR = 6


class ArchFallback(Enum):
    """When a cache lookup may retry with the host's only shipped architecture.

    Args:
        Enum (string): Fallback policy names accepted on the CLI and in config.
    """

    ALWAYS = "always"
    IMPLICIT = "implicit"
    NEVER = "never"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    TOOL_NAME = "PyPy"
    MANIFEST_URL = "https://downloads.python.org/pypy/versions.json"
    PYPY_VERSION_FILENAME = "PYPY_VERSION"
    NIGHTLY = "nightly"
    ANY_VERSION = "x"
    DEFAULT_TOOL_CACHE = "~/.cache/setup-pypy/tools"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVEL_ENV = "SETUP_PYPY_LOG_LEVEL"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    DOWNLOAD_CHUNK_SIZE = 1024 * 1024
    ARCH_FALLBACK = ArchFallback.ALWAYS.value
    INSTALL_PIP = True

    # Environment variables consulted for settings
    ENV_TOOL_CACHE = "RUNNER_TOOL_CACHE"
    ENV_TEMP = "RUNNER_TEMP"
    ENV_MANIFEST_URL = "SETUP_PYPY_MANIFEST_URL"
    ENV_ARCH_FALLBACK = "SETUP_PYPY_ARCH_FALLBACK"
    ENV_GITHUB_ENV = "GITHUB_ENV"
    ENV_GITHUB_PATH = "GITHUB_PATH"
    ENV_GITHUB_OUTPUT = "GITHUB_OUTPUT"

    # Action outputs
    OUTPUT_PYTHON_VERSION = "python-version"
    OUTPUT_PYTHON_PATH = "python-path"
    PYTHON_LOCATION_VAR = "pythonLocation"
