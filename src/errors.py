"""Exception hierarchy shared by the resolver, installer and registry client."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from semantic_version import Version
    from versioning.models import Demand, ModuleName


class InstallerError(Exception):
    """Base class for every error raised by modinstall."""


class InvalidName(InstallerError, ValueError):
    """A module identifier did not match the owner-name grammar."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Could not install module with invalid name: {raw}")


class InvalidConstraint(InstallerError, ValueError):
    """A version requirement string could not be parsed."""

    def __init__(self, raw: str, reason: str = ""):
        self.raw = raw
        message = f"Invalid version requirement '{raw}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InvalidVersion(InstallerError, ValueError):
    """A version string is not a semantic version."""

    def __init__(self, raw: object):
        self.raw = raw
        super().__init__(f"Invalid semantic version '{raw}'")


class ResolutionError(InstallerError):
    """Errors raised while computing the install set.

    These are captured into a failure InstallResult rather than propagated to
    the caller.
    """


class CatalogUnavailable(ResolutionError):
    """The registry returned no release data for a referenced module."""

    def __init__(self, module: "ModuleName"):
        self.module = module
        super().__init__(f"No releases available for '{module}'")


class UnsatisfiableConstraints(ResolutionError):
    """No version of ``module`` satisfies every active demand on it."""

    def __init__(
        self,
        module: "ModuleName",
        demands: List["Demand"],
        root_version: Optional["Version"] = None,
    ):
        self.module = module
        self.demands = list(demands)
        self.root_version = root_version
        super().__init__(
            f"No version of '{module}' will satisfy {len(self.demands)} dependencies"
        )


class LocalMetadataInvalid(ResolutionError):
    """An installed copy of a module has missing or conflicting metadata."""

    def __init__(self, module: "ModuleName", path: str, reason: str):
        self.module = module
        self.path = path
        self.reason = reason
        super().__init__(f"Installed module '{module}' at {path}: {reason}")


class TransportError(InstallerError):
    """The registry or archive download failed."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class UnpackError(InstallerError):
    """An archive could not be extracted into the target directory."""

    def __init__(self, archive: str, reason: str):
        self.archive = archive
        self.reason = reason
        super().__init__(f"Could not unpack {archive}: {reason}")
