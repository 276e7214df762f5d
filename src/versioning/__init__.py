"""Module names, version constraints, release catalog and the constraint solver."""

from .catalog import Repository, VersionCatalog
from .constraints import VersionConstraint, parse_version
from .models import Demand, ModuleName, Release, ResolutionMode, ResolutionNode
from .parser import is_valid_module_name, parse_module_name
from .solver import ConstraintSolver

__all__ = [
    "ConstraintSolver",
    "Demand",
    "ModuleName",
    "Release",
    "Repository",
    "ResolutionMode",
    "ResolutionNode",
    "VersionCatalog",
    "VersionConstraint",
    "is_valid_module_name",
    "parse_module_name",
    "parse_version",
]
