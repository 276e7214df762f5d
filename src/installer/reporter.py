"""Render resolution failures as a one-line summary and a detailed report.

The exact wording and indentation of these messages is relied upon by callers
that compare them verbatim.
"""

from __future__ import annotations

from typing import Dict, Union

import semantic_version

from constants import Constants
from errors import CatalogUnavailable, LocalMetadataInvalid, UnsatisfiableConstraints
from versioning.models import ModuleName

VersionLabel = Union[semantic_version.Version, str, None]


def _label(version: VersionLabel) -> str:
    if isinstance(version, semantic_version.Version):
        return f"v{version}"
    return version or "latest"


def _header(root: ModuleName, root_version: VersionLabel) -> str:
    return f"Could not install module '{root}' ({_label(root_version)})"


def format_conflict(
    root: ModuleName,
    root_version: VersionLabel,
    conflict: UnsatisfiableConstraints,
) -> Dict[str, str]:
    """Describe an empty version intersection.

    Returns:
        dict with ``oneline`` and ``multiline`` keys.
    """
    oneline = f"'{root}' ({_label(root_version)}) requested; Invalid dependency cycle"
    lines = [
        _header(root, root_version),
        f"  No version of '{conflict.module}' will satisfy dependencies:",
    ]
    for demand in conflict.demands:
        if demand.is_root:
            lines.append(
                f"    You requested '{conflict.module}' ({demand.constraint.describe()})"
            )
        else:
            lines.append(
                f"    '{demand.requester}' (v{demand.requester_version}) requires "
                f"'{conflict.module}' ({demand.constraint.describe()})"
            )
    lines.append(f"    {Constants.FORCE_HINT}")
    return {"oneline": oneline, "multiline": "\n".join(lines)}


def format_unavailable(
    root: ModuleName,
    root_version: VersionLabel,
    error: CatalogUnavailable,
) -> Dict[str, str]:
    """Describe a module the registry knows nothing about."""
    oneline = f"'{root}' ({_label(root_version)}) requested; No releases found for '{error.module}'"
    multiline = "\n".join([
        _header(root, root_version),
        f"  No releases are available for '{error.module}'",
        "    Check the module name and the configured forge URL",
    ])
    return {"oneline": oneline, "multiline": multiline}


def format_local_metadata(
    root: ModuleName,
    root_version: VersionLabel,
    error: LocalMetadataInvalid,
) -> Dict[str, str]:
    """Describe an installed copy that cannot safely be replaced."""
    oneline = (
        f"'{root}' ({_label(root_version)}) requested; "
        f"Installed module '{error.module}' is invalid"
    )
    multiline = "\n".join([
        _header(root, root_version),
        f"  Installed module '{error.module}' at {error.path} cannot be replaced:",
        f"    {error.reason}",
        f"    {Constants.FORCE_HINT}",
    ])
    return {"oneline": oneline, "multiline": multiline}
