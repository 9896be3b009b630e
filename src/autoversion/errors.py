# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Exceptions raised while resolving a release version or reconciling its tags."""

from typing import Optional


class AutoversionError(Exception):
    """Base class for all errors that end a release run."""


class ResolutionError(AutoversionError):
    """Raised when no release version can be resolved."""


class ManifestUnreadable(ResolutionError):
    """Raised when the manifest was required but could not supply a version."""

    def __init__(self, manifest: Optional[str] = None) -> None:
        """Build the error message.

        Args:
            manifest: Description of the manifest that was read, if known.
        """
        self.manifest = manifest
        location = f" from {manifest}" if manifest else ""
        super().__init__(f"Could not read version{location}")


class VersionMismatch(ResolutionError):
    """Raised when a resolved version conflicts with the version encoded in the branch name."""

    def __init__(self, field: str, candidate: str, branch_version: str) -> None:
        """Build the error message.

        Args:
            field: Version component that conflicted ("major" or "minor").
            candidate: Version that was checked, e.g. "2.0.0".
            branch_version: Version encoded in the branch name, e.g. "2.1".
        """
        self.field = field
        self.candidate = candidate
        self.branch_version = branch_version
        super().__init__(
            f"Version {candidate} does not match release branch version {branch_version} "
            f"({field} differs)"
        )


class NoVersionSource(ResolutionError):
    """Raised when neither the manifest nor the branch name yields a version."""

    def __init__(self, branch_name: str) -> None:
        """Build the error message.

        Args:
            branch_name: Branch that was inspected.
        """
        self.branch_name = branch_name
        super().__init__(f"Could not determine version from any source (branch {branch_name!r})")


class TagAlreadyExists(AutoversionError):
    """Raised when the exact patch tag for a release already exists."""

    def __init__(self, tag_name: str, target: str) -> None:
        """Build the error message.

        Args:
            tag_name: Name of the existing patch tag.
            target: Commit the existing tag points at.
        """
        self.tag_name = tag_name
        self.target = target
        super().__init__(f"Tag {tag_name} already exists (points at {target}); refusing to re-release it")


class MissingCredential(AutoversionError):
    """Raised when tags should be created but no credential was supplied."""


class TagStoreError(Exception):
    """Raised by tag stores for remote failures other than "tag not found"."""


class TagOperationFailed(Exception):
    """Failure of a single tag operation. Recorded in the report, never fatal."""

    def __init__(self, tag_name: str, reason: str) -> None:
        """Build the error message.

        Args:
            tag_name: Tag whose operation failed.
            reason: Human readable cause.
        """
        self.tag_name = tag_name
        self.reason = reason
        super().__init__(f"Failed to create/update tag {tag_name}: {reason}")
