# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Unit tests for release version resolution."""

from typing import Optional

import pytest

from autoversion.constants import VersionSource
from autoversion.errors import ManifestUnreadable, NoVersionSource, VersionMismatch
from autoversion.structures.semver import SemVer
from autoversion.versioning.resolver import (
    manual_version,
    needs_existing_tags,
    next_patch_number,
    resolve_version,
)


@pytest.mark.parametrize("branch", ["release/v9.9.9", "release/v1", "main"])
def test_manual_mode_ignores_branch(branch: str) -> None:
    """Return the manual version verbatim, whatever the branch name says.

    Args:
        branch: Current branch.
    """
    version = resolve_version(
        branch, VersionSource.MANUAL, manifest_version=SemVer(5, 5, 5), manual=SemVer(2, 3, 4)
    )
    assert version == SemVer(2, 3, 4)


def test_manual_mode_defaults_absent_components() -> None:
    """Default absent manual components to 0."""
    assert manual_version(3) == SemVer(3, 0, 0)
    assert manual_version(None, 4, None) == SemVer(0, 4, 0)
    assert resolve_version("release/v1", VersionSource.MANUAL) == SemVer(0, 0, 0)


@pytest.mark.parametrize("source", [VersionSource.MANIFEST, VersionSource.AUTO])
def test_major_only_branch_accepts_any_minor(source: VersionSource) -> None:
    """A branch naming only the major version imposes no constraint on the minor.

    Args:
        source: Version source under test.
    """
    assert resolve_version("release/v1", source, manifest_version=SemVer(1, 1, 0)) == SemVer(1, 1, 0)
    assert resolve_version("release/v1", source, manifest_version=SemVer(1, 7, 3)) == SemVer(1, 7, 3)


@pytest.mark.parametrize(
    "branch, manifest, field",
    [
        ("release/v2.1", SemVer(2, 0, 0), "minor"),
        ("release/v2.1", SemVer(3, 1, 0), "major"),
        ("release/v1", SemVer(2, 0, 0), "major"),
        ("release/v1.0", SemVer(1, 1, 0), "minor"),
    ],
)
@pytest.mark.parametrize("source", [VersionSource.MANIFEST, VersionSource.AUTO])
def test_mismatch_fails(branch: str, manifest: SemVer, field: str, source: VersionSource) -> None:
    """Fail when the manifest disagrees with the version in the branch name.

    Args:
        branch: Current branch.
        manifest: Manifest version.
        field: Component expected to conflict.
        source: Version source under test.
    """
    with pytest.raises(VersionMismatch) as exc_info:
        resolve_version(branch, source, manifest_version=manifest)
    assert exc_info.value.field == field
    assert exc_info.value.candidate == str(manifest)
    assert str(manifest) in str(exc_info.value)


def test_explicit_minor_zero_is_checked() -> None:
    """A literal .0 in the branch name is a constraint, unlike an absent minor."""
    with pytest.raises(VersionMismatch):
        resolve_version("release/v1.0", VersionSource.MANIFEST, manifest_version=SemVer(1, 2, 0))
    assert resolve_version("release/v1.0", VersionSource.MANIFEST, manifest_version=SemVer(1, 0, 4)) == SemVer(
        1, 0, 4
    )


def test_patch_in_branch_is_not_checked_against_manifest() -> None:
    """Only major and minor are compared against the manifest."""
    version = resolve_version("release/v1.2.3", VersionSource.MANIFEST, manifest_version=SemVer(1, 2, 9))
    assert version == SemVer(1, 2, 9)


def test_manifest_mode_requires_manifest() -> None:
    """Fail in manifest mode when the manifest supplies no version, even on a versioned branch."""
    with pytest.raises(ManifestUnreadable):
        resolve_version("release/v1.2.3", VersionSource.MANIFEST, manifest_version=None)

    with pytest.raises(ManifestUnreadable, match="package.json"):
        resolve_version("release/v1", VersionSource.MANIFEST, manifest_name="package.json")


def test_manifest_mode_without_branch_version() -> None:
    """Accept the manifest version when the branch encodes no version to compare against."""
    assert resolve_version("release/next", VersionSource.MANIFEST, manifest_version=SemVer(4, 0, 1)) == SemVer(
        4, 0, 1
    )


def test_auto_increments_patch() -> None:
    """Take the next unused patch number from the existing tags."""
    version = resolve_version("release/v1", VersionSource.AUTO, existing_tags={"v1.0.0"})
    assert version == SemVer(1, 0, 1)


def test_auto_increment_uses_highest_patch() -> None:
    """Use the numerically highest patch of the matching major.minor only."""
    tags = {"v1.2.0", "v1.2.9", "v1.2.10", "v1.3.40", "v2.2.50", "v1.2", "v1", "v1.2.11-rc1", "x1.2.99"}
    assert resolve_version("release/v1.2", VersionSource.AUTO, existing_tags=tags) == SemVer(1, 2, 11)


def test_auto_without_tags_starts_at_zero() -> None:
    """Start at patch 0 when no tag matches, or when the tags are unknown."""
    assert resolve_version("release/v1", VersionSource.AUTO, existing_tags=set()) == SemVer(1, 0, 0)
    assert resolve_version("release/v3.2", VersionSource.AUTO, existing_tags=None) == SemVer(3, 2, 0)


def test_auto_explicit_patch_is_literal() -> None:
    """Use a non-zero patch spelled out in the branch name as-is, without incrementing."""
    tags = {"v1.2.0", "v1.2.3", "v1.2.4"}
    assert resolve_version("release/v1.2.3", VersionSource.AUTO, existing_tags=tags) == SemVer(1, 2, 3)


def test_auto_zero_patch_in_branch_is_derived() -> None:
    """Derive the patch for a release/vX.Y.0 branch like for release/vX.Y."""
    tags = {"v1.2.0", "v1.2.3", "v1.2.4"}
    assert resolve_version("release/v1.2.0", VersionSource.AUTO, existing_tags=tags) == SemVer(1, 2, 5)
    assert resolve_version("release/v1.2.0", VersionSource.AUTO, existing_tags=set()) == SemVer(1, 2, 0)


def test_auto_prefers_manifest() -> None:
    """Use the manifest version over the branch name in auto mode."""
    version = resolve_version(
        "release/v1", VersionSource.AUTO, manifest_version=SemVer(1, 4, 2), existing_tags={"v1.0.0"}
    )
    assert version == SemVer(1, 4, 2)


@pytest.mark.parametrize("branch", ["release/next", "main", "feature/v1"])
def test_auto_without_any_source_fails(branch: str) -> None:
    """Fail when neither the manifest nor the branch name yields a version.

    Args:
        branch: Current branch.
    """
    with pytest.raises(NoVersionSource):
        resolve_version(branch, VersionSource.AUTO)


def test_next_patch_escapes_prefix() -> None:
    """Treat regex metacharacters in the prefix literally."""
    tags = {"rel+1.0.4", "relll1.0.9", "rel.1.0.7", "(v)1.0.2"}
    assert next_patch_number(tags, "rel+", 1, 0) == 5
    assert next_patch_number(tags, "(v)", 1, 0) == 3
    assert next_patch_number(tags, "[", 1, 0) == 0


@pytest.mark.parametrize(
    "branch, source, manifest, expected",
    [
        ("release/v1", VersionSource.AUTO, None, True),
        ("release/v1.2", VersionSource.AUTO, None, True),
        ("release/v1.2.3", VersionSource.AUTO, None, False),
        ("release/v1.2.0", VersionSource.AUTO, None, True),
        ("release/v1", VersionSource.AUTO, SemVer(1, 0, 0), False),
        ("release/v1", VersionSource.MANIFEST, None, False),
        ("release/v1", VersionSource.MANUAL, None, False),
        ("release/next", VersionSource.AUTO, None, False),
    ],
)
def test_needs_existing_tags(branch: str, source: VersionSource, manifest: Optional[SemVer], expected: bool) -> None:
    """Only list tags on the auto-increment path.

    Args:
        branch: Current branch.
        source: Version source.
        manifest: Manifest version.
        expected: Whether the tag listing is needed.
    """
    assert needs_existing_tags(branch, source, manifest) is expected
