"""Forge registry client: release metadata and archive retrieval."""

from __future__ import annotations

import logging
import os
import threading
from typing import Any, Dict, List, Optional

from constants import Constants
from errors import TransportError
from common.http_client import download, get_json
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from versioning.catalog import Repository
from versioning.models import ModuleName

logger = logging.getLogger(__name__)


class ForgeRepository(Repository):
    """Repository backed by the forge HTTP API.

    The releases endpoint answers with release data for the requested module
    and its whole dependency closure, keyed by ``owner/name``. Every entry of a
    response is kept, so later lookups for those modules need no request.
    """

    def __init__(self, base_url: Optional[str] = None, cache_dir: Optional[str] = None):
        self.base_url = (base_url or Constants.FORGE_URL).rstrip("/")
        self.cache_dir = cache_dir or Constants.CACHE_DIR
        self._info: Dict[str, List[Dict[str, Any]]] = {}
        self._lock = threading.Lock()

    @property
    def uri(self) -> str:
        return safe_url(self.base_url)

    def remote_dependency_info(self, module: ModuleName) -> List[Dict[str, Any]]:
        key = module.forge_name
        with self._lock:
            if key in self._info:
                return self._info[key]

        url = f"{self.base_url}{Constants.RELEASES_ENDPOINT}"
        status_code, _, data = get_json(
            url,
            headers={"Accept": "application/json"},
            params={"module": key},
        )
        if status_code in (404, 410):
            logger.warning("Forge %s has no module %s", self.uri, key)
            return []
        if status_code != 200:
            raise TransportError(
                f"Forge {self.uri} returned HTTP {status_code} for {key}",
                url=safe_url(url),
                status_code=status_code,
            )
        if not isinstance(data, dict):
            raise TransportError(f"Forge {self.uri} returned malformed release data for {key}", url=safe_url(url))

        with self._lock:
            for name, releases in data.items():
                self._info.setdefault(name, list(releases or []))
            result = self._info.setdefault(key, [])

        if is_debug_enabled(logger):
            logger.debug(
                "Forge release info",
                extra=extra_context(
                    event="release_info",
                    component="forge",
                    target=key,
                    count=len(result),
                    closure=len(data)
                )
            )
        return result

    def retrieve(self, archive_ref: str) -> str:
        filename = os.path.basename(archive_ref or "")
        if not filename:
            raise TransportError(f"Invalid archive reference '{archive_ref}'")
        dest = os.path.join(self.cache_dir, filename)
        if os.path.isfile(dest) and os.path.getsize(dest) > 0:
            logger.debug("Archive cache hit: %s", dest)
            return dest

        url = f"{self.base_url}/{archive_ref.lstrip('/')}"
        logger.info("Downloading %s", safe_url(url))
        return download(url, dest, context="forge")
