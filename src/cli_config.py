"""Runtime settings assembled from CLI flags, a config file and the environment.

Precedence, highest first: CLI flags, config file, environment variables,
``Constants`` defaults.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import yaml

from constants import ArchFallback, Constants
from common.errors import InvalidSpecError

logger = logging.getLogger(__name__)

KNOWN_KEYS = (
    "manifest_url",
    "tool_cache_dir",
    "temp_dir",
    "arch_fallback",
    "request_timeout",
    "install_pip",
)


def load_config_file(config_path: Optional[str]) -> Dict[str, Any]:
    """Load settings from a YAML or JSON file.

    A missing path only warns; a file that does not parse is an input error.

    Args:
        config_path: Path to YAML/JSON config file.

    Returns:
        Settings dict (the ``setup-pypy`` section when present).
    """
    if not config_path:
        return {}

    if not os.path.isfile(config_path):
        logger.warning("Config file not found: %s", config_path)
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.lower().endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise InvalidSpecError(f"Failed to load config {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidSpecError(f"Config {config_path} must contain a mapping")
    section = data.get("setup-pypy", data)
    if not isinstance(section, dict):
        raise InvalidSpecError(f"Config {config_path}: 'setup-pypy' must be a mapping")
    unknown = sorted(set(section) - set(KNOWN_KEYS))
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
    return {key: section[key] for key in KNOWN_KEYS if key in section}


def _parse_arch_fallback(value: Any) -> ArchFallback:
    if isinstance(value, ArchFallback):
        return value
    try:
        return ArchFallback(str(value).strip().lower())
    except ValueError as e:
        choices = ", ".join(policy.value for policy in ArchFallback)
        raise InvalidSpecError(f"Invalid arch_fallback {value!r}; expected one of: {choices}") from e


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Configuration for a resolution run."""

    manifest_url: str = Constants.MANIFEST_URL
    tool_cache_dir: str = Constants.DEFAULT_TOOL_CACHE
    temp_dir: Optional[str] = None
    arch_fallback: ArchFallback = ArchFallback(Constants.ARCH_FALLBACK)
    request_timeout: float = Constants.REQUEST_TIMEOUT
    install_pip: bool = Constants.INSTALL_PIP

    @classmethod
    def from_sources(
        cls,
        args: Any = None,
        file_config: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        """Create settings from CLI arguments, config file values and environment.

        Args:
            args: Parsed CLI arguments namespace.
            file_config: Values returned by load_config_file.
            environ: Environment mapping (defaults to os.environ).

        Returns:
            Settings instance.

        Raises:
            InvalidSpecError: If a value has the wrong type or an unknown choice.
        """
        environ = os.environ if environ is None else environ
        settings = cls()

        if environ.get(Constants.ENV_MANIFEST_URL):
            settings.manifest_url = environ[Constants.ENV_MANIFEST_URL]
        if environ.get(Constants.ENV_TOOL_CACHE):
            settings.tool_cache_dir = environ[Constants.ENV_TOOL_CACHE]
        if environ.get(Constants.ENV_TEMP):
            settings.temp_dir = environ[Constants.ENV_TEMP]
        if environ.get(Constants.ENV_ARCH_FALLBACK):
            settings.arch_fallback = _parse_arch_fallback(environ[Constants.ENV_ARCH_FALLBACK])

        for key, value in (file_config or {}).items():
            if key == "arch_fallback":
                settings.arch_fallback = _parse_arch_fallback(value)
            elif key == "request_timeout":
                try:
                    settings.request_timeout = float(value)
                except (TypeError, ValueError) as e:
                    raise InvalidSpecError(f"Invalid request_timeout {value!r}") from e
            elif key == "install_pip":
                settings.install_pip = _parse_bool(value)
            else:
                setattr(settings, key, str(value))

        if args is not None:
            if getattr(args, "MANIFEST_URL", None):
                settings.manifest_url = args.MANIFEST_URL
            if getattr(args, "TOOL_CACHE", None):
                settings.tool_cache_dir = args.TOOL_CACHE
            if getattr(args, "ARCH_FALLBACK", None):
                settings.arch_fallback = _parse_arch_fallback(args.ARCH_FALLBACK)
            if getattr(args, "NO_PIP", False):
                settings.install_pip = False

        return settings
