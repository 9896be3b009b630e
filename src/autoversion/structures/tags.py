# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Tag names derived from a release version, and the outcome of reconciling them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from autoversion.constants import OutcomeStatus, TagKind
from autoversion.errors import TagOperationFailed
from autoversion.structures.semver import SemVer


@dataclass(frozen=True)
class TagTarget:
    """A tag name together with the version component it tracks."""

    name: str
    kind: TagKind


def compute_tag_targets(semver: SemVer, tag_prefix: str) -> Tuple[TagTarget, TagTarget, TagTarget]:
    """Compute the major, minor and patch tags for a release.

    Args:
        semver: Resolved release version.
        tag_prefix: String prepended to every tag name.

    Returns:
        (major, minor, patch) tag targets, always in that order.
    """
    return (
        TagTarget(f"{tag_prefix}{semver.major}", TagKind.MAJOR),
        TagTarget(f"{tag_prefix}{semver.major}.{semver.minor}", TagKind.MINOR),
        TagTarget(f"{tag_prefix}{semver}", TagKind.PATCH),
    )


@dataclass(frozen=True)
class TagOutcome:
    """Result of reconciling one tag.

    Args:
        target: Tag that was reconciled.
        status: Whether the tag was created, moved, or could not be reconciled.
        reason: Cause of the failure, set only when `status` is FAILED.
    """

    target: TagTarget
    status: OutcomeStatus
    reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        """Whether the tag now points at the release commit."""
        return self.status is not OutcomeStatus.FAILED


@dataclass
class ReconciliationReport:
    """Ordered per-tag outcomes of a reconciliation run."""

    commit_sha: str
    outcomes: List[TagOutcome] = field(default_factory=list)

    def add(self, outcome: TagOutcome) -> None:
        """Append the outcome for the next tag."""
        self.outcomes.append(outcome)

    @property
    def succeeded_tags(self) -> List[str]:
        """Names of the tags that were created or updated, in reconciliation order."""
        return [o.target.name for o in self.outcomes if o.succeeded]

    @property
    def failures(self) -> List[TagOperationFailed]:
        """Failures for the tags that could not be reconciled."""
        return [
            TagOperationFailed(o.target.name, o.reason or "unknown error") for o in self.outcomes if not o.succeeded
        ]

    @property
    def ok(self) -> bool:
        """Whether every tag was reconciled."""
        return all(o.succeeded for o in self.outcomes)
