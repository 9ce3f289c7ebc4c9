"""setup-pypy - Resolve a PyPy version spec to an installed interpreter

    Returns:
        int: Exit code
"""
import logging
import sys

from constants import ExitCodes
from common.errors import SetupPyPyError
from common.logging_utils import add_file_handler, configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import Settings, load_config_file
from provision.finder import find_pypy_version
from provision.platform import default_architecture, detect_host_platform


def run(args) -> int:
    """Resolve and activate the requested PyPy; return the process exit code."""
    logger = logging.getLogger(__name__)
    host = detect_host_platform()
    explicit_architecture = bool(getattr(args, "ARCHITECTURE", None))
    architecture = args.ARCHITECTURE if explicit_architecture else default_architecture()

    try:
        settings = Settings.from_sources(args, load_config_file(getattr(args, "CONFIG", None)))
        if is_debug_enabled(logger):
            logger.debug(
                "Settings loaded",
                extra=extra_context(
                    event="config",
                    component="cli",
                    action="run",
                    target=settings.tool_cache_dir,
                )
            )
        find_pypy_version(
            args.version_spec,
            architecture,
            settings=settings,
            host=host,
            explicit_architecture=explicit_architecture,
        )
    except SetupPyPyError as e:
        logger.error("%s", e)
        return e.exit_code.value
    return ExitCodes.SUCCESS.value


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(getattr(args, "LOG_LEVEL", None))
    if getattr(args, "LOG_FILE", None):
        add_file_handler(args.LOG_FILE)

    logger = logging.getLogger(__name__)
    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    sys.exit(run(args))


if __name__ == "__main__":
    main()
