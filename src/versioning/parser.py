"""Module identifier parsing.

Identifiers take the form ``owner-name`` or ``owner/name``. The owner is
alphanumeric; the name starts with a lowercase letter followed by lowercase
letters, digits or underscores.
"""

import os
import re
from typing import Tuple

from errors import InvalidName
from .constraints import parse_version
from .models import ModuleName

_NAME_RE = re.compile(r"^([A-Za-z0-9]+)[-/]([a-z][a-z0-9_]*)$")
_ARCHIVE_RE = re.compile(r"^(?P<module>.+)-(?P<version>\d+\.\d+\.\d+[^/]*?)\.(?:tar\.gz|tgz)$")
ARCHIVE_SUFFIXES = (".tar.gz", ".tgz")


def parse_module_name(raw: str) -> ModuleName:
    """Parse raw into a ModuleName.

    Raises:
        InvalidName: If raw does not match the identifier grammar.
    """
    if not isinstance(raw, str):
        raise InvalidName(str(raw))
    m = _NAME_RE.match(raw.strip())
    if not m:
        raise InvalidName(raw)
    return ModuleName(owner=m.group(1), name=m.group(2))


def is_valid_module_name(raw: str) -> bool:
    """Return True if raw parses as a module identifier."""
    try:
        parse_module_name(raw)
    except InvalidName:
        return False
    return True


def parse_archive_filename(path: str) -> Tuple[ModuleName, str]:
    """Parse a release archive path like ``owner-name-1.2.3.tar.gz``.

    Returns:
        Tuple of (module, version string).

    Raises:
        InvalidName: Carrying the full path when the filename is not a
            valid release archive name.
    """
    m = _ARCHIVE_RE.match(os.path.basename(path))
    if not m or not is_valid_module_name(m.group("module")):
        raise InvalidName(path)
    try:
        version = parse_version(m.group("version"))
    except ValueError as exc:
        raise InvalidName(path) from exc
    return parse_module_name(m.group("module")), str(version)
