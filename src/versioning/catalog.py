"""Per-run view of registry release metadata.

The catalog is filled lazily: the solver asks for a module the first time it
discovers an edge to it, and every later lookup is served from memory.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import semantic_version

from errors import CatalogUnavailable, InvalidConstraint, InvalidName, InvalidVersion
from common.logging_utils import extra_context, is_debug_enabled, Timer
from .constraints import VersionConstraint, parse_version
from .models import ModuleName, Release
from .parser import parse_module_name

logger = logging.getLogger(__name__)


class Repository(ABC):
    """Registry capabilities consumed by the installer."""

    @abstractmethod
    def remote_dependency_info(self, module: ModuleName) -> List[Dict[str, Any]]:
        """Return every known release of module.

        Each entry is a mapping with ``version``, ``dependencies`` (a list of
        ``[name, requirement]`` pairs) and ``file`` (the archive locator).
        """

    @abstractmethod
    def retrieve(self, archive_ref: str) -> str:
        """Fetch one archive into the local cache and return its path."""


def release_from_dict(module: ModuleName, data: Dict[str, Any]) -> Release:
    """Build a Release from one registry entry.

    Raises:
        InvalidVersion: If the entry's version is not semver.
        InvalidName, InvalidConstraint: If a dependency entry is malformed.
    """
    version = parse_version(data.get("version"))
    dependencies = []
    for entry in data.get("dependencies") or []:
        if isinstance(entry, dict):
            dep_name, requirement = entry.get("name"), entry.get("version_requirement")
        else:
            dep_name = entry[0]
            requirement = entry[1] if len(entry) > 1 else None
        dependencies.append((parse_module_name(dep_name), VersionConstraint(requirement)))
    return Release(
        module=module,
        version=version,
        dependencies=tuple(dependencies),
        archive_ref=data.get("file", ""),
    )


class VersionCatalog:
    """Memoising, read-only release index for one install run."""

    def __init__(self, repository: Repository):
        self.repository = repository
        self._releases: Dict[ModuleName, List[Release]] = {}
        self._lock = threading.Lock()
        self.fetch_count = 0

    def fetch(self, module: ModuleName) -> List[Release]:
        """Return module's releases, highest version first.

        Raises:
            CatalogUnavailable: If the registry has no usable release data.
        """
        with self._lock:
            cached = self._releases.get(module)
        if cached is not None:
            return cached

        with Timer() as t:
            raw = self.repository.remote_dependency_info(module)
        releases = []
        for entry in raw or []:
            try:
                releases.append(release_from_dict(module, entry))
            except (InvalidVersion, InvalidName, InvalidConstraint) as exc:
                logger.warning("Skipping unusable release of %s: %s", module, exc)
        if not releases:
            raise CatalogUnavailable(module)
        releases.sort(key=lambda r: r.version, reverse=True)

        if is_debug_enabled(logger):
            logger.debug(
                "Catalog fetch",
                extra=extra_context(
                    event="catalog_fetch",
                    component="catalog",
                    target=module.full_name,
                    count=len(releases),
                    duration_ms=t.duration_ms()
                )
            )
        with self._lock:
            # Another thread may have filled it meanwhile; keep the first copy.
            existing = self._releases.setdefault(module, releases)
            if existing is releases:
                self.fetch_count += 1
        return existing

    def versions(self, module: ModuleName) -> List[semantic_version.Version]:
        return [r.version for r in self.fetch(module)]

    def find(self, module: ModuleName, version: semantic_version.Version) -> Optional[Release]:
        for release in self.fetch(module):
            if release.version == version:
                return release
        return None

    def highest(self, module: ModuleName, constraint: Optional[VersionConstraint] = None) -> Optional[Release]:
        """Return the highest release matching constraint, or None."""
        constraint = constraint or VersionConstraint.unconstrained()
        for release in self.fetch(module):
            if constraint.matches(release.version):
                return release
        return None
