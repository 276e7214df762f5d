"""Data models for module names, releases and resolution trees."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple

import semantic_version

from .constraints import VersionConstraint


class ResolutionMode(Enum):
    """How much of the dependency graph an install run resolves."""
    FULL = "full"
    ROOT_ONLY = "root_only"


@dataclass(frozen=True, order=True)
class ModuleName:
    """Validated owner/name pair identifying a module on the forge."""
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        """Caller-visible form, e.g. ``puppetlabs-stdlib``."""
        return f"{self.owner}-{self.name}"

    @property
    def forge_name(self) -> str:
        """Registry form, e.g. ``puppetlabs/stdlib``."""
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class Release:
    """One published version of a module as reported by the registry."""
    module: ModuleName
    version: semantic_version.Version
    dependencies: Tuple[Tuple[ModuleName, VersionConstraint], ...] = ()
    archive_ref: str = ""


@dataclass(frozen=True)
class Demand:
    """A constraint imposed on a module by a requester.

    ``requester`` is None for the root request made by the user.
    """
    requester: Optional[ModuleName]
    requester_version: Optional[semantic_version.Version]
    constraint: VersionConstraint

    @property
    def is_root(self) -> bool:
        return self.requester is None


@dataclass(frozen=True)
class ResolutionNode:
    """A resolved module and the dependencies installed on its behalf."""
    module: ModuleName
    version: semantic_version.Version
    archive_ref: str
    children: Tuple["ResolutionNode", ...] = field(default_factory=tuple)

    def walk(self) -> Iterator["ResolutionNode"]:
        """Yield this node and every descendant, depth-first, root first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "module": self.module.full_name,
            "version": {"vstring": str(self.version)},
            "dependencies": [child.to_dict() for child in self.children],
        }
