"""Module installation: orchestration, local checks, unpacking and reporting."""

from .orchestrator import InstallOptions, InstallResult, InstallStatus, Installer, install
from .unpacker import TarballUnpacker, Unpacker

__all__ = [
    "InstallOptions",
    "InstallResult",
    "InstallStatus",
    "Installer",
    "install",
    "TarballUnpacker",
    "Unpacker",
]
