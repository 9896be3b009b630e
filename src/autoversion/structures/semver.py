# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Release version structures and the parsers that produce them."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final, Optional

from autoversion.constants import BRANCH_REF_PREFIX, RELEASE_BRANCH_PREFIX

# release/v1, release/1.2, release/v1.2.3 (anything after the last component is ignored).
_BRANCH_VERSION_RE: Final = re.compile(r"^release/v?(\d+)(?:\.(\d+))?(?:\.(\d+))?")

# Leading digits of one dot-separated version component: "3" in "3-rc", nothing in "x".
_COMPONENT_RE: Final = re.compile(r"^\d+")


@dataclass(frozen=True)
class SemVer:
    """A fully specified release version.

    Args:
        major: Major version component.
        minor: Minor version component.
        patch: Patch version component.
    """

    major: int
    minor: int
    patch: int

    def __post_init__(self) -> None:
        """Check that every component is a non-negative integer.

        Raises:
            ValueError: If any component is negative or not an integer.
        """
        for name in ("major", "minor", "patch"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"SemVer {name} must be a non-negative integer, got {value!r}")

    def __str__(self) -> str:
        """Format as MAJOR.MINOR.PATCH."""
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class BranchVersionHint:
    """Partial version encoded in a release branch name.

    `None` means the branch name did not encode that component, which is not the same as
    encoding a literal 0.

    Args:
        major: Major version component.
        minor: Minor version component, if present in the branch name.
        patch: Patch version component, if present in the branch name.
    """

    major: int
    minor: Optional[int] = None
    patch: Optional[int] = None

    @property
    def pins_patch(self) -> bool:
        """Whether the branch name fixes a non-zero patch number.

        An absent patch and a literal .0 patch both leave the patch to be derived from the
        existing tags, so `release/v1.2.0` can be released more than once.
        """
        return bool(self.patch)

    def __str__(self) -> str:
        """Format the components present in the branch name, e.g. "1.2"."""
        components = [self.major, self.minor, self.patch]
        return ".".join(str(c) for c in components if c is not None)


def strip_ref_prefix(branch: str) -> str:
    """Remove a leading `refs/heads/` from a branch reference.

    Args:
        branch: Branch name or fully qualified ref.

    Returns:
        The short branch name.
    """
    if branch.startswith(BRANCH_REF_PREFIX):
        return branch[len(BRANCH_REF_PREFIX) :]
    return branch


def is_release_branch(branch: str) -> bool:
    """Return whether the branch is a release branch (`release/...`)."""
    return strip_ref_prefix(branch).startswith(RELEASE_BRANCH_PREFIX)


def parse_branch_hint(branch: str) -> Optional[BranchVersionHint]:
    """Extract the version encoded in a release branch name.

    Args:
        branch: Branch name, optionally prefixed with `refs/heads/`.

    Returns:
        The parsed hint, or None if the branch does not look like `release/v<major>...`.
    """
    match = _BRANCH_VERSION_RE.match(strip_ref_prefix(branch))
    if match is None:
        return None
    major, minor, patch = match.groups()
    return BranchVersionHint(
        major=int(major),
        minor=int(minor) if minor is not None else None,
        patch=int(patch) if patch is not None else None,
    )


def parse_version_string(raw: str) -> Optional[SemVer]:
    """Parse a manifest version string into a SemVer.

    Only the leading digits of each of the first three dot-separated components count.
    Missing or non-numeric minor/patch components default to 0 and components past the
    patch are ignored, so "1.2.x" is 1.2.0 and "1.2.3.4" is 1.2.3.

    Args:
        raw: Version string, e.g. "1.2.3" or "v1.2".

    Returns:
        The parsed version, or None if the string does not start with a numeric major.
    """
    text = raw.strip()
    if text.startswith("v"):
        text = text[1:]
    components = (text.split(".") + ["", ""])[:3]
    matches = [_COMPONENT_RE.match(c) for c in components]
    if matches[0] is None:
        return None
    major, minor, patch = (int(m.group(0)) if m is not None else 0 for m in matches)
    return SemVer(major, minor, patch)
