"""Exception taxonomy for PyPy resolution and provisioning.

Collaborators raise these; the resolution flow lets them propagate and
only the CLI entrypoint maps them to exit codes.
"""

from constants import ExitCodes


class SetupPyPyError(Exception):
    """Base class for all errors surfaced to the CLI."""

    exit_code = ExitCodes.FILE_ERROR


class InvalidSpecError(SetupPyPyError, ValueError):
    """Malformed version spec or configuration value."""

    exit_code = ExitCodes.INVALID_INPUT


class ReleaseNotFoundError(SetupPyPyError):
    """No manifest release satisfies the requested ranges and architecture."""

    exit_code = ExitCodes.NOT_FOUND

    def __init__(self, python_version: str, pypy_version: str, architecture: str):
        self.python_version = python_version
        self.pypy_version = pypy_version
        self.architecture = architecture
        super().__init__(
            f"PyPy version {python_version} ({pypy_version}) with arch {architecture} not found"
        )


class TransportError(SetupPyPyError):
    """Manifest fetch, download or archive extraction failed."""

    exit_code = ExitCodes.CONNECTION_ERROR


class ToolCacheError(SetupPyPyError):
    """Registering a tree in the tool cache or writing its version marker failed."""

    exit_code = ExitCodes.FILE_ERROR


class LayoutError(SetupPyPyError):
    """Symlink creation, permission change or pip bootstrap failed."""

    exit_code = ExitCodes.LAYOUT_ERROR
