"""Entry point of PyPy resolution: cache fast path, install slow path, export."""
from __future__ import annotations

import logging
from functools import partial
from typing import Optional

from constants import ArchFallback, Constants
from common.http_client import download_tool, get_json
from common.logging_utils import extra_context, is_debug_enabled
from versioning.models import CacheHit, Installed, ResolutionOutcome, ResolvedInstall
from versioning.parser import parse_pypy_version
from .archive import ArchiveExtractor
from .cache_lookup import find_pypy_tool_cache
from .environment import ActionsEnvironment, EnvironmentSink
from .install import PyPyInstaller
from .layout import InterpreterLayout, get_pip_dir, get_pypy_binary_path, python_executable
from .manifest import fetch_manifest
from .platform import HostPlatform
from .toolcache import FileSystemToolCache, ToolCache

logger = logging.getLogger(__name__)


def build_installer(settings, host: HostPlatform, tool_cache: ToolCache) -> PyPyInstaller:
    """Wire the default HTTP, archive and layout collaborators from settings."""
    fetch_json = partial(get_json, timeout=settings.request_timeout)
    return PyPyInstaller(
        host=host,
        tool_cache=tool_cache,
        layout=InterpreterLayout(host, bootstrap_pip=settings.install_pip),
        manifest_url=settings.manifest_url,
        fetch_releases=partial(fetch_manifest, fetch_json=fetch_json),
        downloader=partial(download_tool, dest_dir=settings.temp_dir, timeout=settings.request_timeout),
        extractor=ArchiveExtractor(temp_root=settings.temp_dir),
    )


def resolve(
    python_version: str,
    pypy_version: str,
    architecture: str,
    *,
    host: HostPlatform,
    tool_cache: ToolCache,
    installer: PyPyInstaller,
    arch_fallback: ArchFallback = ArchFallback.ALWAYS,
    explicit_architecture: bool = True,
) -> ResolutionOutcome:
    """Resolve parsed ranges to a CacheHit or, failing that, a fresh install."""
    fallback = host.fallback_architecture(architecture, arch_fallback, explicit_architecture)
    cached = find_pypy_tool_cache(
        python_version,
        pypy_version,
        architecture,
        tool_cache=tool_cache,
        fallback_architecture=fallback,
    )
    if cached is not None:
        outcome: ResolutionOutcome = CacheHit(cached)
    else:
        outcome = Installed(installer.install(pypy_version, python_version, architecture))

    if is_debug_enabled(logger):
        logger.debug(
            "Resolved PyPy",
            extra=extra_context(
                event="decision",
                component="finder",
                action="resolve",
                outcome=outcome.source.value,
                target=outcome.install.install_dir,
            )
        )
    return outcome


def export_environment(install: ResolvedInstall, host: HostPlatform, environment: EnvironmentSink) -> None:
    """Publish the interpreter location, PATH entries and outputs."""
    logger.info("PyPy install folder is %s", install.install_dir)
    binary_path = get_pypy_binary_path(install.install_dir, host)
    pip_dir = get_pip_dir(install.install_dir, host)

    environment.export_variable(Constants.PYTHON_LOCATION_VAR, binary_path)
    if pip_dir != binary_path:
        environment.add_path(pip_dir)
    environment.add_path(binary_path)
    environment.set_output(
        Constants.OUTPUT_PYTHON_VERSION,
        f"pypy{install.resolved_python_version}-{install.resolved_pypy_version}",
    )
    environment.set_output(Constants.OUTPUT_PYTHON_PATH, python_executable(binary_path, host))


def find_pypy_version(
    version_spec: str,
    architecture: str,
    *,
    settings,
    host: HostPlatform,
    explicit_architecture: bool = True,
    tool_cache: Optional[ToolCache] = None,
    installer: Optional[PyPyInstaller] = None,
    environment: Optional[EnvironmentSink] = None,
) -> ResolutionOutcome:
    """Parse ``version_spec``, resolve it and export the result.

    Raises:
        InvalidSpecError: If the spec is malformed.
        ReleaseNotFoundError: If no cached or published release matches.
        TransportError: If fetching, downloading or extracting fails.
        LayoutError: If post-install fix-ups fail.
    """
    spec = parse_pypy_version(version_spec)
    tool_cache = tool_cache or FileSystemToolCache(settings.tool_cache_dir)
    installer = installer or build_installer(settings, host, tool_cache)
    environment = environment or ActionsEnvironment()

    outcome = resolve(
        spec.python_version,
        spec.pypy_version,
        architecture,
        host=host,
        tool_cache=tool_cache,
        installer=installer,
        arch_fallback=settings.arch_fallback,
        explicit_architecture=explicit_architecture,
    )
    export_environment(outcome.install, host, environment)
    logger.info(
        "Successfully set up PyPy %s with Python (%s)",
        outcome.install.resolved_pypy_version,
        outcome.install.resolved_python_version,
    )
    return outcome
