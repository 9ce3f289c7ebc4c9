"""Argument parsing functionality for setup-pypy."""

import argparse

from constants import ArchFallback


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="setup-pypy",
        description=(
            "setup-pypy - Resolve, install and activate a PyPy interpreter"
        ),
        add_help=True,
    )

    parser.add_argument("version_spec",
                        metavar="VERSION",
                        help="PyPy version spec, i.e: pypy3.9, pypy-3.7-7.3.x, pypy3.10-nightly",
                        type=str)
    parser.add_argument("-a", "--architecture",
                        dest="ARCHITECTURE",
                        help="Target architecture, i.e: x64, x86, aarch64 (default: host architecture)",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--tool-cache",
                        dest="TOOL_CACHE",
                        help="Tool cache directory (default: $RUNNER_TOOL_CACHE or ~/.cache/setup-pypy/tools)",
                        action="store",
                        type=str)
    parser.add_argument("--manifest-url",
                        dest="MANIFEST_URL",
                        help="URL of the PyPy versions.json manifest",
                        action="store",
                        type=str)
    parser.add_argument("--arch-fallback",
                        dest="ARCH_FALLBACK",
                        help="Retry cache lookups with the platform's only architecture: "
                             "always, implicit (only without --architecture) or never",
                        action="store",
                        type=str.lower,
                        choices=[policy.value for policy in ArchFallback])
    parser.add_argument("--no-pip",
                        dest="NO_PIP",
                        help="Do not bootstrap pip after installing.",
                        action="store_true")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
