"""Version requirement parsing and matching on top of semantic_version."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Union

import semantic_version

from errors import InvalidConstraint, InvalidVersion

_UNCONSTRAINED = {"", "*", "x", "latest", ">=0.0.0"}
# Forge metadata writes comparators as ">= 1.0.0"; NpmSpec wants ">=1.0.0".
_OPERATOR_SPACE_RE = re.compile(r"(<=|>=|<|>|=|~|\^)\s+")
_EXACT_RE = re.compile(r"^=?v?(\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?)$")


def parse_version(text: Union[str, semantic_version.Version, None]) -> semantic_version.Version:
    """Parse a strict semantic version.

    Raises:
        InvalidVersion: If text is empty or not semver.
    """
    if isinstance(text, semantic_version.Version):
        return text
    if not text or not isinstance(text, str):
        raise InvalidVersion(text)
    try:
        return semantic_version.Version(text.strip())
    except ValueError as exc:
        raise InvalidVersion(text) from exc


class VersionConstraint:
    """A predicate over versions: exact, range, or unconstrained."""

    def __init__(self, raw: Optional[str] = None):
        self.raw = (raw or "").strip()
        self._normalized = _OPERATOR_SPACE_RE.sub(r"\1", self.raw)
        self._exact: Optional[semantic_version.Version] = None
        self._spec: Optional[semantic_version.base.BaseSpec] = None

        if self._normalized.lower() in _UNCONSTRAINED:
            return

        m = _EXACT_RE.match(self._normalized)
        if m:
            self._exact = semantic_version.Version(m.group(1))
            return

        try:
            self._spec = semantic_version.NpmSpec(self._normalized)
        except ValueError:
            try:
                self._spec = semantic_version.SimpleSpec(self._normalized.replace(" ", ","))
            except ValueError as exc:
                raise InvalidConstraint(self.raw, str(exc)) from exc

    @classmethod
    def unconstrained(cls) -> "VersionConstraint":
        return cls(None)

    @property
    def is_unconstrained(self) -> bool:
        return self._exact is None and self._spec is None

    @property
    def is_exact(self) -> bool:
        return self._exact is not None

    def matches(self, version: semantic_version.Version) -> bool:
        """Return True if version satisfies this constraint."""
        if self._exact is not None:
            return version == self._exact
        if self._spec is None:
            return True
        return self._spec.match(version)

    def filter(self, versions: Iterable[semantic_version.Version]) -> List[semantic_version.Version]:
        return [v for v in versions if self.matches(v)]

    def describe(self) -> str:
        """Render the constraint for messages: ``v1.0.0`` when exact, else the raw text."""
        if self._exact is not None:
            return f"v{self._exact}"
        if self._spec is None:
            return "latest"
        return self.raw

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionConstraint):
            return NotImplemented
        return (self._exact, self._normalized if self._spec is not None else None) == (
            other._exact, other._normalized if other._spec is not None else None
        )

    def __hash__(self) -> int:
        return hash((self._exact, self._normalized if self._spec is not None else None))

    def __repr__(self) -> str:
        return f"VersionConstraint({self.raw!r})"

    def __str__(self) -> str:
        return self.raw or "latest"
