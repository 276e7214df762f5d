"""Shared HTTP helpers used by the forge registry client.

Encapsulates request/timeout/retry handling so the registry client avoids
duplicating try/except blocks. Failures surface as TransportError; retrying
beyond HTTP_RETRY_MAX attempts is left to the caller.
"""
from __future__ import annotations

import json
import logging
import os
import time
from typing import Any, Dict, Optional, Tuple

import requests

from constants import Constants
from errors import TransportError
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


def robust_get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], str]:
    """Perform GET request with timeout and retries, with DEBUG traces.

    Server errors (5xx), timeouts and connection errors are retried with a
    linear backoff. Client errors are returned to the caller as-is.

    Raises:
        TransportError: When every attempt failed.
    """
    safe_target = safe_url(url)
    last_exception = None

    for attempt in range(Constants.HTTP_RETRY_MAX):
        if attempt:
            time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * attempt)
        with Timer() as t:
            try:
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request",
                        extra=extra_context(
                            event="http_request",
                            component="http_client",
                            action="GET",
                            target=safe_target,
                            attempt=attempt + 1
                        )
                    )

                response = requests.get(
                    url,
                    timeout=Constants.REQUEST_TIMEOUT,
                    headers=headers,
                    **kwargs
                )

                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP response",
                        extra=extra_context(
                            event="http_response",
                            component="http_client",
                            action="GET",
                            status_code=response.status_code,
                            duration_ms=t.duration_ms(),
                            target=safe_target
                        )
                    )
                if response.status_code >= 500:
                    last_exception = f"HTTP {response.status_code}"
                    continue
                return response.status_code, dict(response.headers), response.text

            except requests.Timeout:
                last_exception = "timeout"
                logger.debug("HTTP timeout on attempt %d: %s", attempt + 1, safe_target)
                continue
            except requests.RequestException as exc:
                last_exception = str(exc)
                logger.debug("HTTP request exception on attempt %d: %s", attempt + 1, safe_target)
                continue

    raise TransportError(
        f"GET {safe_target} failed after {Constants.HTTP_RETRY_MAX} attempts: {last_exception}",
        url=safe_target,
    )


def get_json(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], Optional[Any]]:
    """Perform GET request and parse JSON response.

    Args:
        url: Target URL
        headers: Optional request headers
        **kwargs: Additional requests.get parameters

    Returns:
        Tuple of (status_code, headers_dict, parsed_json_or_none)
    """
    status_code, response_headers, text = robust_get(url, headers=headers, **kwargs)

    if status_code == 200 and text:
        try:
            return status_code, response_headers, json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Invalid JSON received from %s", safe_url(url))
            return status_code, response_headers, None

    return status_code, response_headers, None


def download(url: str, dest: str, *, context: str) -> str:
    """Stream url into dest, writing through a temporary file.

    Returns:
        The destination path.

    Raises:
        TransportError: On connection failure, a non-200 response, or when
            the archive cannot be written; no ``.part`` file is left behind.
    """
    safe_target = safe_url(url)
    partial = f"{dest}.part"
    with Timer() as t:
        try:
            os.makedirs(os.path.dirname(dest) or ".", exist_ok=True)
            with requests.get(url, stream=True, timeout=Constants.REQUEST_TIMEOUT) as res:
                if res.status_code != 200:
                    raise TransportError(
                        f"{context} download of {safe_target} returned HTTP {res.status_code}",
                        url=safe_target,
                        status_code=res.status_code,
                    )
                with open(partial, "wb") as fh:
                    for chunk in res.iter_content(chunk_size=Constants.DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            fh.write(chunk)
            os.replace(partial, dest)
        # RequestException is itself an OSError; it must be caught first.
        except requests.RequestException as exc:
            raise TransportError(f"{context} download of {safe_target} failed: {exc}", url=safe_target) from exc
        except OSError as exc:
            raise TransportError(
                f"{context} download of {safe_target} could not be written to {dest}: {exc}",
                url=safe_target,
            ) from exc
        finally:
            if os.path.exists(partial):
                os.remove(partial)
    logger.debug(
        "Downloaded archive",
        extra=extra_context(
            event="download",
            component="http_client",
            outcome="success",
            duration_ms=t.duration_ms(),
            target=safe_target,
            context=context
        )
    )
    return dest
