"""Archive extraction into the module directory.

Extracts to a temporary workspace inside the target directory, validates the
layout, then moves the module into place so a failed extraction never leaves a
half-written module behind.
"""

from __future__ import annotations

import logging
import os
import shutil
import tarfile
import tempfile
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List

from errors import InvalidName, UnpackError
from versioning.parser import parse_archive_filename

if TYPE_CHECKING:
    from installer.orchestrator import InstallOptions

logger = logging.getLogger(__name__)


class Unpacker(ABC):
    """Materializes a retrieved archive into the install directory."""

    @abstractmethod
    def run(self, archive_path: str, options: "InstallOptions") -> None:
        """Install archive_path honouring options.dir."""


def _safe_members(tar: tarfile.TarFile, archive_path: str) -> List[tarfile.TarInfo]:
    """Return members, rejecting anything that would land outside the workspace."""
    members = []
    for member in tar.getmembers():
        name = member.name
        if os.path.isabs(name) or ".." in name.replace("\\", "/").split("/"):
            raise UnpackError(archive_path, f"unsafe path in archive: {name}")
        if member.issym() or member.islnk():
            target = os.path.normpath(os.path.join(os.path.dirname(name), member.linkname))
            if os.path.isabs(member.linkname) or target.startswith(".."):
                raise UnpackError(archive_path, f"unsafe link in archive: {name}")
        if member.isdev():
            raise UnpackError(archive_path, f"device entry in archive: {name}")
        members.append(member)
    return members


class TarballUnpacker(Unpacker):
    """Unpacks ``owner-name-X.Y.Z.tar.gz`` into ``<dir>/<name>``."""

    def run(self, archive_path: str, options: "InstallOptions") -> None:
        try:
            module, version = parse_archive_filename(archive_path)
        except InvalidName as exc:
            raise UnpackError(archive_path, "not a release archive name") from exc

        target_dir = options.dir
        try:
            os.makedirs(target_dir, exist_ok=True)
        except OSError as exc:
            raise UnpackError(archive_path, f"cannot create {target_dir}: {exc}") from exc

        destination = os.path.join(target_dir, module.name)
        workspace = tempfile.mkdtemp(prefix=".modinstall-", dir=target_dir)
        try:
            try:
                with tarfile.open(archive_path, "r:gz") as tar:
                    members = _safe_members(tar, archive_path)
                    if hasattr(tarfile, "data_filter"):
                        tar.extractall(workspace, members=members, filter="data")
                    else:
                        tar.extractall(workspace, members=members)  # nosec B202
            except (tarfile.TarError, OSError) as exc:
                raise UnpackError(archive_path, str(exc)) from exc

            entries = [e for e in os.listdir(workspace) if not e.startswith(".")]
            if len(entries) == 1 and os.path.isdir(os.path.join(workspace, entries[0])):
                source = os.path.join(workspace, entries[0])
            else:
                source = workspace

            if os.path.exists(destination):
                shutil.rmtree(destination)
            shutil.move(source, destination)
            logger.info("Installed %s (v%s) into %s", module, version, destination)
        finally:
            shutil.rmtree(workspace, ignore_errors=True)
