# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Create or move the major, minor and patch tags of a release."""

import logging
from typing import Optional

from autoversion.constants import OutcomeStatus
from autoversion.errors import TagAlreadyExists, TagStoreError
from autoversion.structures.semver import SemVer
from autoversion.structures.tags import ReconciliationReport, TagOutcome, TagTarget, compute_tag_targets
from autoversion.tagging.tag_store import TagStore

logger = logging.getLogger(__name__)


def _failed(target: TagTarget, reason: str) -> TagOutcome:
    logger.error("Failed to create/update tag %s: %s", target.name, reason)
    return TagOutcome(target, OutcomeStatus.FAILED, reason)


def _create(store: TagStore, target: TagTarget, commit_sha: str) -> TagOutcome:
    logger.info("Creating new tag: %s", target.name)
    try:
        store.create_tag(target.name, commit_sha)
    except TagStoreError as e:
        return _failed(target, str(e))
    return TagOutcome(target, OutcomeStatus.CREATED)


def _create_or_move(store: TagStore, target: TagTarget, commit_sha: str) -> TagOutcome:
    try:
        current: Optional[str] = store.get_tag_target(target.name)
    except TagStoreError as e:
        return _failed(target, str(e))

    if current is None:
        return _create(store, target, commit_sha)

    logger.info("Updating existing tag: %s (%s -> %s)", target.name, current[:7], commit_sha[:7])
    try:
        store.move_tag(target.name, commit_sha)
    except TagStoreError as e:
        return _failed(target, str(e))
    return TagOutcome(target, OutcomeStatus.UPDATED)


def reconcile_tags(semver: SemVer, commit_sha: str, tag_prefix: str, store: TagStore) -> ReconciliationReport:
    """Point the major, minor and patch tags of a release at a commit.

    The patch tag is looked up before anything is changed. If it already exists the release
    is a duplicate and the run fails without touching any tag. Otherwise the major and minor
    tags are created or moved, and the patch tag is created, in that order. A failing tag
    operation is recorded in the report and the remaining tags are still processed.

    If the patch tag lookup itself fails, no tag is changed: every tag is reported as failed,
    since moving the major and minor tags onto a possibly duplicate release is not safe.

    Args:
        semver: Resolved release version.
        commit_sha: Commit the tags should point at.
        tag_prefix: String prepended to every tag name.
        store: Tag store to reconcile against.

    Returns:
        Outcomes for the major, minor and patch tags, in that order.

    Raises:
        TagAlreadyExists: If the patch tag already exists.
    """
    major_target, minor_target, patch_target = compute_tag_targets(semver, tag_prefix)
    report = ReconciliationReport(commit_sha=commit_sha)

    try:
        existing_patch = store.get_tag_target(patch_target.name)
    except TagStoreError as e:
        reason = f"could not check whether {patch_target.name} exists: {e}"
        for target in (major_target, minor_target, patch_target):
            report.add(_failed(target, reason))
        return report

    if existing_patch is not None:
        raise TagAlreadyExists(patch_target.name, existing_patch)

    report.add(_create_or_move(store, major_target, commit_sha))
    report.add(_create_or_move(store, minor_target, commit_sha))
    report.add(_create(store, patch_target, commit_sha))

    if report.ok:
        logger.info("Successfully created/updated tags: %s", ", ".join(report.succeeded_tags))
    else:
        logger.warning(
            "Created/updated %s; failed %s",
            ", ".join(report.succeeded_tags) or "no tags",
            ", ".join(f.tag_name for f in report.failures),
        )
    return report
