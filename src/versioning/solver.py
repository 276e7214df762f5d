"""Constraint propagation over the dependency demand graph.

Every discovered module carries an ordered map of demands keyed by the
requesting module. A module is (re)evaluated whenever its demands change: the
highest known version satisfying all of them is selected and its own
dependencies become demands on their targets. The loop runs until no
selection changes.

Demands from a superseded selection are withdrawn, so a module whose demand
set shrinks is re-evaluated and may move back up. Every upward move is
recorded with the solver state it was made from and is never repeated from
that state; the state space is finite, so upward moves are finite and the loop
terminates. A module that can only keep cycling through moves already tried
is reported like an empty intersection.

An empty intersection at any module is reported as UnsatisfiableConstraints
together with the live demands that produced it.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, FrozenSet, List, Optional, Set, Tuple

import semantic_version

from errors import UnsatisfiableConstraints
from common.logging_utils import extra_context, is_debug_enabled
from .catalog import VersionCatalog
from .constraints import VersionConstraint
from .models import Demand, ModuleName, Release, ResolutionNode

logger = logging.getLogger(__name__)

# Key of the root request in a module's demand map.
ROOT = None

# Current selections and the pending queue.
_State = Tuple[FrozenSet[Tuple[ModuleName, semantic_version.Version]], Tuple[ModuleName, ...]]


class ConstraintSolver:
    """Resolves one version per module across the transitive closure of a root."""

    def __init__(self, catalog: VersionCatalog):
        self.catalog = catalog

    def resolve(self, root: ModuleName, constraint: Optional[VersionConstraint] = None) -> ResolutionNode:
        """Resolve root and its dependency closure.

        Raises:
            UnsatisfiableConstraints: When some module has no version satisfying
                every active demand on it.
            CatalogUnavailable: When a referenced module has no releases.
        """
        constraint = constraint or VersionConstraint.unconstrained()
        demands: Dict[ModuleName, Dict[Optional[ModuleName], Demand]] = {
            root: {ROOT: Demand(requester=None, requester_version=None, constraint=constraint)}
        }
        selected: Dict[ModuleName, Release] = {}
        tried: Set[Tuple[_State, ModuleName, semantic_version.Version]] = set()
        queue: Deque[ModuleName] = deque([root])
        queued: Set[ModuleName] = {root}

        def conflict(module: ModuleName, active: Dict[Optional[ModuleName], Demand]) -> UnsatisfiableConstraints:
            root_release = selected.get(root)
            return UnsatisfiableConstraints(
                module,
                list(active.values()),
                root_version=root_release.version if root_release else None,
            )

        def enqueue(module: ModuleName) -> None:
            if module not in queued:
                queued.add(module)
                queue.append(module)

        def withdraw(release: Release) -> None:
            for dep, _ in release.dependencies:
                incoming = demands.get(dep)
                if incoming is not None and incoming.pop(release.module, None) is not None:
                    enqueue(dep)

        while queue:
            module = queue.popleft()
            queued.discard(module)
            active = demands.get(module) or {}
            current = selected.get(module)

            if not active:
                # Nothing requires it any more.
                if current is not None:
                    del selected[module]
                    withdraw(current)
                continue

            allowed = self.catalog.versions(module)
            for demand in active.values():
                allowed = demand.constraint.filter(allowed)
            if not allowed:
                raise conflict(module, active)

            state: _State = (frozenset((m, r.version) for m, r in selected.items()), tuple(queue))
            choice = next(
                (
                    version for version in allowed
                    if (current is not None and version <= current.version)
                    or (state, module, version) not in tried
                ),
                None,
            )
            if choice is None:
                logger.warning("Selection of %s keeps cycling between versions", module)
                raise conflict(module, active)
            if current is not None and current.version == choice:
                continue
            if current is None or choice > current.version:
                tried.add((state, module, choice))
            best = self.catalog.find(module, choice)

            if is_debug_enabled(logger):
                logger.debug(
                    "Selected version",
                    extra=extra_context(
                        event="select",
                        component="solver",
                        target=module.full_name,
                        version=str(best.version),
                        previous=str(current.version) if current else None,
                        demands=len(active)
                    )
                )

            if current is not None:
                withdraw(current)
            selected[module] = best
            for dep, dep_constraint in best.dependencies:
                demands.setdefault(dep, {})[module] = Demand(
                    requester=module,
                    requester_version=best.version,
                    constraint=dep_constraint,
                )
                enqueue(dep)

        tree = self._build_tree(root, selected)
        logger.info(
            "Resolved %s (v%s) with %d dependencies",
            root, tree.version, sum(1 for _ in tree.walk()) - 1,
        )
        return tree

    def resolve_root_only(self, root: ModuleName, constraint: Optional[VersionConstraint] = None) -> ResolutionNode:
        """Pick the highest release of root matching constraint, ignoring dependencies."""
        constraint = constraint or VersionConstraint.unconstrained()
        release = self.catalog.highest(root, constraint)
        if release is None:
            raise UnsatisfiableConstraints(
                root, [Demand(requester=None, requester_version=None, constraint=constraint)]
            )
        return ResolutionNode(module=root, version=release.version, archive_ref=release.archive_ref)

    @staticmethod
    def _build_tree(root: ModuleName, selected: Dict[ModuleName, Release]) -> ResolutionNode:
        """Attach each module under the first requester reached breadth-first."""
        placed: Set[ModuleName] = {root}
        children: Dict[ModuleName, List[ModuleName]] = {}
        pending: Deque[ModuleName] = deque([root])
        while pending:
            module = pending.popleft()
            kids = []
            for dep, _ in selected[module].dependencies:
                if dep not in placed:
                    placed.add(dep)
                    kids.append(dep)
                    pending.append(dep)
            children[module] = kids

        def build(module: ModuleName) -> ResolutionNode:
            release = selected[module]
            return ResolutionNode(
                module=module,
                version=release.version,
                archive_ref=release.archive_ref,
                children=tuple(build(kid) for kid in children[module]),
            )

        return build(root)
