"""Shared HTTP helpers used to fetch the release manifest and archives.

Encapsulates request/timeout error handling so callers see a single
``TransportError`` for every failure mode. Requests are never retried:
a transient failure cannot be told apart from a permanent one here, so the
caller decides.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from typing import Any, Dict, Optional

import requests

from constants import Constants
from common.errors import TransportError
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


def safe_get(
    url: str,
    *,
    context: str,
    timeout: Optional[float] = None,
    **kwargs: Any
) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Raises:
        TransportError: On timeout or connection failure.
    """
    safe_target = safe_url(url)
    timeout = Constants.REQUEST_TIMEOUT if timeout is None else timeout
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    context=context
                )
            )
        try:
            res = requests.get(url, timeout=timeout, **kwargs)
        except requests.Timeout as exc:
            raise TransportError(
                f"{context} request to {safe_target} timed out after {timeout} seconds"
            ) from exc
        except requests.RequestException as exc:  # includes ConnectionError
            raise TransportError(f"{context} connection error for {safe_target}: {exc}") from exc
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    outcome="success" if res.status_code == 200 else "http_error",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context
                )
            )
        return res


def get_json(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
    **kwargs: Any
) -> Any:
    """Perform GET request and parse the JSON body.

    Args:
        url: Target URL
        headers: Optional request headers
        timeout: Request timeout in seconds (defaults to Constants.REQUEST_TIMEOUT)
        **kwargs: Additional requests.get parameters

    Returns:
        Parsed JSON document

    Raises:
        TransportError: On connection failure, non-200 status or invalid JSON.
    """
    res = safe_get(url, context="manifest", headers=headers, timeout=timeout, **kwargs)
    if res.status_code != 200:
        raise TransportError(
            f"Unexpected HTTP status {res.status_code} fetching {safe_url(url)}"
        )
    try:
        parsed = json.loads(res.text)
    except json.JSONDecodeError as exc:
        if is_debug_enabled(logger):
            logger.debug(
                "JSON decode error",
                extra=extra_context(
                    event="parse",
                    component="http_client",
                    action="get_json",
                    outcome="json_decode_error",
                    status_code=res.status_code,
                    target=safe_url(url)
                )
            )
        raise TransportError(f"Invalid JSON received from {safe_url(url)}: {exc}") from exc
    return parsed


def download_tool(
    url: str,
    dest_dir: Optional[str] = None,
    *,
    timeout: Optional[float] = None,
) -> str:
    """Stream ``url`` into a uniquely named file and return its path.

    Args:
        url: Archive URL
        dest_dir: Directory for the downloaded file (defaults to the system temp dir)
        timeout: Request timeout in seconds

    Returns:
        str: Path of the downloaded file

    Raises:
        TransportError: On connection failure, non-200 status or write error.
    """
    dest_dir = dest_dir or tempfile.gettempdir()
    dest = os.path.join(dest_dir, str(uuid.uuid4()))
    res = safe_get(url, context="download", stream=True, timeout=timeout)
    try:
        if res.status_code != 200:
            raise TransportError(
                f"Unexpected HTTP status {res.status_code} downloading {safe_url(url)}"
            )
        os.makedirs(dest_dir, exist_ok=True)
        with Timer() as t:
            try:
                with open(dest, "wb") as fh:
                    for chunk in res.iter_content(chunk_size=Constants.DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            fh.write(chunk)
            except (OSError, requests.RequestException) as exc:
                if os.path.exists(dest):
                    os.remove(dest)
                raise TransportError(f"Failed to download {safe_url(url)}: {exc}") from exc
        if is_debug_enabled(logger):
            logger.debug(
                "Download complete",
                extra=extra_context(
                    event="download",
                    component="http_client",
                    action="download_tool",
                    outcome="success",
                    duration_ms=t.duration_ms(),
                    target=safe_url(url)
                )
            )
    finally:
        res.close()
    return dest
