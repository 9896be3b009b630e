# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Run a release: resolve the version, then reconcile its tags."""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Set, Tuple

from autoversion.constants import DEFAULT_TAG_PREFIX, VersionSource
from autoversion.errors import MissingCredential, TagStoreError
from autoversion.structures.semver import SemVer, is_release_branch, strip_ref_prefix
from autoversion.structures.tags import ReconciliationReport, TagTarget, compute_tag_targets
from autoversion.tagging.reconciler import reconcile_tags
from autoversion.tagging.tag_store import TagStore
from autoversion.utils.manifest import ManifestReader
from autoversion.versioning.resolver import manual_version, needs_existing_tags, resolve_version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReleaseConfig:
    """Operator-selected settings of a release run.

    Args:
        branch: Current branch name or `refs/heads/...` ref.
        commit_sha: Commit the tags should point at. Required when creating tags.
        source: Where the version is taken from.
        tag_prefix: String prepended to every tag name.
        create_tags: Whether to create/move tags, or only report the version.
        major_version: Manual major component (manual mode only).
        minor_version: Manual minor component (manual mode only).
        patch_version: Manual patch component (manual mode only).
    """

    branch: str
    commit_sha: Optional[str] = None
    source: VersionSource = VersionSource.AUTO
    tag_prefix: str = DEFAULT_TAG_PREFIX
    create_tags: bool = True
    major_version: Optional[int] = None
    minor_version: Optional[int] = None
    patch_version: Optional[int] = None


@dataclass(frozen=True)
class ReleaseResult:
    """Outcome of a release run.

    Args:
        version: Resolved release version.
        targets: Major, minor and patch tags of the release.
        report: Tag reconciliation outcomes, or None if tags were not created.
    """

    version: SemVer
    targets: Tuple[TagTarget, TagTarget, TagTarget]
    report: Optional[ReconciliationReport] = None

    @property
    def ok(self) -> bool:
        """Whether every requested tag operation succeeded."""
        return self.report is None or self.report.ok

    def outputs(self) -> Dict[str, str]:
        """Step outputs of the run."""
        major_target, minor_target, patch_target = self.targets
        return {
            "version": str(self.version),
            "tags": ",".join(self.report.succeeded_tags) if self.report is not None else "",
            "major-tag": major_target.name,
            "minor-tag": minor_target.name,
            "patch-tag": patch_target.name,
            "failed-tags": ",".join(f.tag_name for f in self.report.failures) if self.report is not None else "",
        }


def _list_existing_tags(store: Optional[TagStore]) -> Optional[Set[str]]:
    if store is None:
        return None
    try:
        return store.list_tags()
    except TagStoreError as e:
        logger.warning("Could not fetch existing tags: %s", e)
        return None


def run_release(
    config: ReleaseConfig, manifest: ManifestReader, store: Optional[TagStore] = None
) -> Optional[ReleaseResult]:
    """Resolve the release version and, if requested, reconcile its tags.

    Args:
        config: Release settings.
        manifest: Source of the version declared by the project.
        store: Tag store. Required when `config.create_tags` is set; otherwise only used to
            look up existing tags for the next patch number.

    Returns:
        The result of the run, or None if the branch is not a release branch.

    Raises:
        MissingCredential: If tags should be created but no tag store is available.
        ValueError: If tags should be created but no commit was given.
        ResolutionError: If no version can be resolved.
        TagAlreadyExists: If the patch tag of the resolved version already exists.
    """
    if config.create_tags and store is None:
        raise MissingCredential("github-token is required when create-tags is true")
    if config.create_tags and not config.commit_sha:
        raise ValueError("A commit SHA is required when create-tags is true")

    branch_name = strip_ref_prefix(config.branch)
    logger.info("Current branch: %s", branch_name)
    logger.info("Version source: %s", config.source.value)
    logger.info("Create tags: %s", config.create_tags)

    if not is_release_branch(branch_name):
        logger.warning("Not on a release branch. Skipping versioning.")
        return None

    manifest_version = None
    if config.source is not VersionSource.MANUAL:
        manifest_version = manifest.read_version()
        if manifest_version is None:
            logger.info("No version found in %s", manifest.description)

    existing_tags = None
    if needs_existing_tags(branch_name, config.source, manifest_version):
        existing_tags = _list_existing_tags(store)

    version = resolve_version(
        branch_name,
        config.source,
        manifest_version=manifest_version,
        manual=manual_version(config.major_version, config.minor_version, config.patch_version),
        existing_tags=existing_tags,
        tag_prefix=config.tag_prefix,
        manifest_name=manifest.description,
    )
    targets = compute_tag_targets(version, config.tag_prefix)

    if not config.create_tags:
        logger.info("Version determined (tags not created): %s", version)
        return ReleaseResult(version, targets)

    assert store is not None and config.commit_sha is not None
    report = reconcile_tags(version, config.commit_sha, config.tag_prefix, store)
    logger.info("Version: %s", version)
    return ReleaseResult(version, targets, report)
