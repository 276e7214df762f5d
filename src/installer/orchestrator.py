"""Install run driver: validate, resolve, retrieve and unpack.

Resolution-stage failures are returned inside a failure InstallResult so the
CLI can render them uniformly. A malformed module name raises InvalidName
before anything else happens, and transport or unpack failures propagate to
the caller. Nothing is unpacked until every archive has been retrieved.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from constants import Constants
from errors import (
    CatalogUnavailable,
    InstallerError,
    LocalMetadataInvalid,
    UnsatisfiableConstraints,
)
from common.logging_utils import extra_context, is_debug_enabled, Timer
from versioning.catalog import Repository, VersionCatalog
from versioning.constraints import VersionConstraint
from versioning.models import ResolutionMode, ResolutionNode
from versioning.parser import (
    ARCHIVE_SUFFIXES,
    is_valid_module_name,
    parse_archive_filename,
    parse_module_name,
)
from versioning.solver import ConstraintSolver

from .local import check_installed
from .reporter import format_conflict, format_local_metadata, format_unavailable
from .unpacker import TarballUnpacker, Unpacker

logger = logging.getLogger(__name__)


@dataclass
class InstallOptions:
    """Options for one install run, handed unchanged to the unpacker."""
    dir: str = field(default_factory=lambda: Constants.MODULE_DIR)
    version: Optional[str] = None
    force: bool = False
    ignore_dependencies: bool = False


class InstallStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class InstallResult:
    """Terminal artifact of an install run."""
    result: InstallStatus
    installed_modules: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[Dict[str, str]] = None
    tree: Optional[ResolutionNode] = None

    @property
    def ok(self) -> bool:
        return self.result is InstallStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "result": self.result.value,
            "installed_modules": self.installed_modules,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


def _is_archive_path(raw_name: str) -> bool:
    """A module identifier always wins over a same-named file on disk."""
    if raw_name.endswith(ARCHIVE_SUFFIXES):
        return True
    return os.path.isfile(raw_name) and not is_valid_module_name(raw_name)


def resolution_mode(options: InstallOptions) -> ResolutionMode:
    """Either override flag restricts the run to the root module."""
    if options.force or options.ignore_dependencies:
        return ResolutionMode.ROOT_ONLY
    return ResolutionMode.FULL


class Installer:
    """Installs a module and its resolved dependencies."""

    def __init__(self, repository: Repository, unpacker: Optional[Unpacker] = None):
        self.repository = repository
        self.unpacker = unpacker or TarballUnpacker()

    def run(self, raw_name: str, options: Optional[InstallOptions] = None) -> InstallResult:
        """Install raw_name according to options.

        Raises:
            InvalidName: If raw_name is not a module identifier.
            InvalidConstraint: If options.version cannot be parsed.
            TransportError, UnpackError: If a collaborator fails.
        """
        options = options or InstallOptions()
        if _is_archive_path(raw_name):
            module, version = parse_archive_filename(raw_name)
            raise InstallerError(
                f"Installing {module} (v{version}) from a local archive is not supported: {raw_name}"
            )
        module = parse_module_name(raw_name)
        constraint = VersionConstraint(options.version)
        mode = resolution_mode(options)
        logger.info("Installing %s (%s) into %s [%s]", module, constraint, options.dir, mode.value)

        solver = ConstraintSolver(VersionCatalog(self.repository))
        tree: Optional[ResolutionNode] = None
        try:
            if mode is ResolutionMode.ROOT_ONLY:
                tree = solver.resolve_root_only(module, constraint)
            else:
                tree = solver.resolve(module, constraint)
            nodes = self._unique_nodes(tree)
            for node in nodes:
                check_installed(options.dir, node.module, options.force)
        except UnsatisfiableConstraints as exc:
            attempted = exc.root_version if exc.root_version is not None else constraint.describe()
            return self._failure(format_conflict(module, attempted, exc))
        except CatalogUnavailable as exc:
            return self._failure(format_unavailable(module, constraint.describe(), exc))
        except LocalMetadataInvalid as exc:
            return self._failure(format_local_metadata(module, tree.version if tree is not None else constraint.describe(), exc))

        self._install(nodes, options)
        return InstallResult(
            result=InstallStatus.SUCCESS,
            installed_modules=[tree.to_dict()],
            tree=tree,
        )

    @staticmethod
    def _unique_nodes(tree: ResolutionNode) -> List[ResolutionNode]:
        seen: Set[Tuple[str, str]] = set()
        nodes = []
        for node in tree.walk():
            key = (node.module.full_name, str(node.version))
            if key not in seen:
                seen.add(key)
                nodes.append(node)
        return nodes

    def _install(self, nodes: List[ResolutionNode], options: InstallOptions) -> None:
        """Retrieve every archive, then unpack each one exactly once."""
        with Timer() as t:
            archives = [(node, self.repository.retrieve(node.archive_ref)) for node in nodes]
            for node, path in archives:
                logger.debug("Unpacking %s (v%s) from %s", node.module, node.version, path)
                self.unpacker.run(path, options)
        if is_debug_enabled(logger):
            logger.debug(
                "Install finished",
                extra=extra_context(
                    event="install",
                    component="orchestrator",
                    count=len(nodes),
                    duration_ms=t.duration_ms()
                )
            )

    @staticmethod
    def _failure(error: Dict[str, str]) -> InstallResult:
        logger.error(error["oneline"])
        return InstallResult(result=InstallStatus.FAILURE, error=error)


def install(
    raw_name: str,
    options: Optional[InstallOptions] = None,
    repository: Optional[Repository] = None,
    unpacker: Optional[Unpacker] = None,
) -> InstallResult:
    """Install raw_name using the configured forge and the tarball unpacker."""
    if repository is None:
        from registry.forge import ForgeRepository  # pylint: disable=import-outside-toplevel
        repository = ForgeRepository(Constants.FORGE_URL, Constants.CACHE_DIR)
    return Installer(repository, unpacker).run(raw_name, options)
