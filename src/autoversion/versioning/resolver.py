# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Resolve the release version from the manifest, the branch name, or operator input.

Resolution is pure: the manifest version and the existing tag names are fetched by the
caller and passed in. Use `needs_existing_tags` to decide whether the tag listing is
required at all before paying for the remote call.
"""

import logging
import re
from typing import Iterable, Optional

from autoversion.constants import VersionSource
from autoversion.errors import ManifestUnreadable, NoVersionSource, VersionMismatch
from autoversion.structures.semver import BranchVersionHint, SemVer, parse_branch_hint

logger = logging.getLogger(__name__)


def manual_version(major: Optional[int] = None, minor: Optional[int] = None, patch: Optional[int] = None) -> SemVer:
    """Build the version requested by the operator, defaulting absent components to 0.

    Args:
        major: Major version component.
        minor: Minor version component.
        patch: Patch version component.

    Returns:
        The requested version.
    """
    return SemVer(major or 0, minor or 0, patch or 0)


def validate_against_hint(candidate: SemVer, hint: Optional[BranchVersionHint]) -> None:
    """Check that an exact version agrees with the version encoded in the branch name.

    The minor component is only compared when the branch name spells it out: `release/v1`
    accepts any 1.x.y, while `release/v1.0` only accepts 1.0.y.

    Args:
        candidate: Version to check.
        hint: Version encoded in the branch name, or None if the branch encodes none.

    Raises:
        VersionMismatch: If the major component, or the minor component when present, differs.
    """
    # A release branch without a version in its name (e.g. release/next) constrains nothing.
    if hint is None:
        return
    if hint.major != candidate.major:
        raise VersionMismatch("major", str(candidate), str(hint))
    if hint.minor is not None and hint.minor != candidate.minor:
        raise VersionMismatch("minor", str(candidate), str(hint))


def next_patch_number(existing_tags: Iterable[str], tag_prefix: str, major: int, minor: int) -> int:
    """Return the first patch number above every `{prefix}{major}.{minor}.<patch>` tag.

    Args:
        existing_tags: Tag names currently present in the tag store.
        tag_prefix: Tag prefix. Escaped before being used in a pattern.
        major: Major version component.
        minor: Minor version component.

    Returns:
        The highest matching patch number plus one, or 0 if no tag matches.
    """
    pattern = re.compile(rf"^{re.escape(tag_prefix)}{major}\.{minor}\.(\d+)$")
    max_patch = -1
    for name in existing_tags:
        match = pattern.match(name)
        if match is not None:
            max_patch = max(max_patch, int(match.group(1)))
    return max_patch + 1


def needs_existing_tags(branch_name: str, source: VersionSource, manifest_version: Optional[SemVer]) -> bool:
    """Return whether `resolve_version` will consult the existing tags.

    Only the branch-name fallback of auto mode, on a branch that does not pin a non-zero
    patch number, looks at existing tags.

    Args:
        branch_name: Current branch name.
        source: Selected version source.
        manifest_version: Version read from the manifest, if any.

    Returns:
        True if the caller should list the existing tags before resolving.
    """
    if source is not VersionSource.AUTO or manifest_version is not None:
        return False
    hint = parse_branch_hint(branch_name)
    return hint is not None and not hint.pins_patch


def resolve_version(
    branch_name: str,
    source: VersionSource,
    manifest_version: Optional[SemVer] = None,
    manual: Optional[SemVer] = None,
    existing_tags: Optional[Iterable[str]] = None,
    tag_prefix: str = "v",
    manifest_name: Optional[str] = None,
) -> SemVer:
    """Resolve the release version.

    - manual: `manual` verbatim (0.0.0 when not given), branch name ignored.
    - manifest: the manifest version, validated against the branch name.
    - auto: as manifest when the manifest supplies a version. Otherwise major and minor
      come from the branch name (minor defaults to 0) and the patch is the next unused
      patch number among `existing_tags`, unless the branch pins a non-zero patch number.
      A `.0` patch in the branch name is derived like an absent one.

    Args:
        branch_name: Current branch name, optionally prefixed with `refs/heads/`.
        source: Selected version source.
        manifest_version: Version read from the manifest, or None if it could not be read.
        manual: Operator-supplied version for manual mode.
        existing_tags: Existing tag names, used for the next patch number.
        tag_prefix: Prefix of the existing tag names.
        manifest_name: Name of the manifest, used in error messages.

    Returns:
        The resolved version.

    Raises:
        ManifestUnreadable: If manifest mode is selected and the manifest supplied no version.
        VersionMismatch: If the manifest version disagrees with the branch name.
        NoVersionSource: If auto mode finds no manifest version and no versioned branch name.
    """
    if source is VersionSource.MANUAL:
        version = manual if manual is not None else manual_version()
        logger.info("Using manual version: %s", version)
        return version

    hint = parse_branch_hint(branch_name)

    if manifest_version is not None:
        validate_against_hint(manifest_version, hint)
        logger.info("Using version from manifest: %s", manifest_version)
        return manifest_version

    if source is VersionSource.MANIFEST:
        raise ManifestUnreadable(manifest_name)

    if hint is None:
        raise NoVersionSource(branch_name)

    if hint.pins_patch:
        version = SemVer(hint.major, hint.minor or 0, hint.patch or 0)
        logger.info("Using version from branch name: %s", version)
        return version

    minor = hint.minor if hint.minor is not None else 0
    if existing_tags is None:
        logger.warning("Existing tags unknown; assuming no %s%d.%d.x release yet", tag_prefix, hint.major, minor)
        existing_tags = ()
    patch = next_patch_number(existing_tags, tag_prefix, hint.major, minor)
    version = SemVer(hint.major, minor, patch)
    logger.info("Auto-detected version from branch name: %s", version)
    return version
