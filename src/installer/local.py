"""Checks against modules already present in the target directory."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Optional

import semantic_version

from constants import Constants
from errors import InvalidName, InvalidVersion, LocalMetadataInvalid
from versioning.constraints import parse_version
from versioning.models import ModuleName
from versioning.parser import parse_module_name

logger = logging.getLogger(__name__)


@dataclass
class LocalModule:
    """An installed copy of a module and the identity its metadata declares."""
    module: ModuleName
    path: str
    version: semantic_version.Version

    @staticmethod
    def install_path(target_dir: str, module: ModuleName) -> str:
        return os.path.join(target_dir, module.name)

    @classmethod
    def inspect(cls, target_dir: str, module: ModuleName) -> Optional["LocalModule"]:
        """Read the installed copy of module under target_dir, if any.

        Returns:
            LocalModule, or None when nothing is installed at that path.

        Raises:
            LocalMetadataInvalid: If the metadata is missing, unreadable,
                lacks a semantic version, or names a different module.
        """
        path = cls.install_path(target_dir, module)
        if not os.path.isdir(path):
            return None

        metadata_path = os.path.join(path, Constants.METADATA_FILE)
        if not os.path.isfile(metadata_path):
            raise LocalMetadataInvalid(module, path, f"no {Constants.METADATA_FILE} found")
        try:
            with open(metadata_path, "r", encoding="utf-8") as fh:
                metadata = json.load(fh)
        except (OSError, ValueError) as exc:
            raise LocalMetadataInvalid(module, path, f"unreadable {Constants.METADATA_FILE}: {exc}") from exc
        if not isinstance(metadata, dict):
            raise LocalMetadataInvalid(module, path, f"{Constants.METADATA_FILE} is not an object")

        raw_version = metadata.get("version")
        if not raw_version:
            raise LocalMetadataInvalid(module, path, "metadata has no version")
        try:
            version = parse_version(raw_version)
        except InvalidVersion as exc:
            raise LocalMetadataInvalid(module, path, f"version '{raw_version}' is not a semantic version") from exc

        raw_name = metadata.get("name")
        try:
            declared = parse_module_name(raw_name)
        except InvalidName as exc:
            raise LocalMetadataInvalid(module, path, f"metadata name '{raw_name}' is not a module name") from exc
        if declared != module:
            raise LocalMetadataInvalid(
                module, path, f"installed module is '{declared}', not '{module}'"
            )
        return cls(module=module, path=path, version=version)


def check_installed(target_dir: str, module: ModuleName, force: bool) -> Optional[LocalModule]:
    """Validate an existing install of module before it is overwritten.

    With force set, invalid metadata is logged and the copy is replaced.
    """
    try:
        local = LocalModule.inspect(target_dir, module)
    except LocalMetadataInvalid as exc:
        if not force:
            raise
        logger.warning("Overwriting %s despite invalid metadata: %s", exc.path, exc.reason)
        return None
    if local is not None:
        logger.info("Replacing installed %s (v%s) at %s", module, local.version, local.path)
    return local
