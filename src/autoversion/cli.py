# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Command line entry point, usable locally or as a GitHub Actions step."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from autoversion.constants import (
    DEFAULT_GITHUB_API_URL,
    DEFAULT_MANIFEST_FILENAME,
    DEFAULT_TAG_PREFIX,
    TAG_BACKEND_CHOICES,
    VERSION_SOURCE_CHOICES,
    TagBackend,
    VersionSource,
)
from autoversion.errors import AutoversionError
from autoversion.release import ReleaseConfig, run_release
from autoversion.tagging.tag_store import GitHubTagStore, GitTagStore, TagStore
from autoversion.utils.manifest import PackageJsonManifestReader
from autoversion.utils.outputs import write_outputs


def build_tag_store(
    backend: TagBackend,
    repository: Optional[str],
    token: Optional[str],
    api_url: str,
    repo_root: Path,
    remote: Optional[str],
) -> Optional[TagStore]:
    """Create the tag store for the selected backend.

    Args:
        backend: Selected backend.
        repository: GitHub repository in `owner/name` form.
        token: GitHub token.
        api_url: Base URL of the GitHub REST API.
        repo_root: Root of the local git checkout.
        remote: Remote the git backend pushes tags to.

    Returns:
        The tag store, or None for the GitHub backend when no token is configured.

    Raises:
        click.UsageError: If a token is given without a repository.
    """
    if backend is TagBackend.GIT:
        return GitTagStore(repo_root, remote=remote)
    if not token:
        return None
    if not repository:
        raise click.UsageError("--repository (or GITHUB_REPOSITORY) is required for the github backend")
    return GitHubTagStore(repository, token, api_url=api_url)


@click.command(help="Derive the release version of a release branch and tag the release commit.")
@click.option("--branch", envvar="GITHUB_REF", required=True, help="Current branch or refs/heads/... ref.")
@click.option("--sha", envvar="GITHUB_SHA", default=None, help="Commit to tag.")
@click.option("--repository", envvar="GITHUB_REPOSITORY", default=None, help="GitHub repository (owner/name).")
@click.option(
    "--version-source",
    envvar="INPUT_VERSION-SOURCE",
    default=VersionSource.AUTO.value,
    show_default=True,
    type=click.Choice(VERSION_SOURCE_CHOICES, case_sensitive=False),
    help="Where to take the version from.",
)
@click.option(
    "--tag-prefix", envvar="INPUT_TAG-PREFIX", default=DEFAULT_TAG_PREFIX, show_default=True, help="Tag name prefix."
)
@click.option(
    "--create-tags/--no-create-tags",
    envvar="INPUT_CREATE-TAGS",
    default=True,
    show_default=True,
    help="Create/update the major, minor and patch tags.",
)
@click.option(
    "--github-token", envvar=["INPUT_GITHUB-TOKEN", "GITHUB_TOKEN"], default=None, help="Token for the GitHub API."
)
@click.option("--major-version", envvar="INPUT_MAJOR-VERSION", type=click.IntRange(min=0), default=None)
@click.option("--minor-version", envvar="INPUT_MINOR-VERSION", type=click.IntRange(min=0), default=None)
@click.option("--patch-version", envvar="INPUT_PATCH-VERSION", type=click.IntRange(min=0), default=None)
@click.option(
    "--manifest",
    envvar="INPUT_MANIFEST",
    default=DEFAULT_MANIFEST_FILENAME,
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Manifest declaring the project version.",
)
@click.option(
    "--backend",
    envvar="INPUT_BACKEND",
    default=TagBackend.GITHUB.value,
    show_default=True,
    type=click.Choice(TAG_BACKEND_CHOICES, case_sensitive=False),
    help="Where tags are stored.",
)
@click.option(
    "--repo-root",
    default=".",
    type=click.Path(exists=True, file_okay=False),
    help="Root of the local checkout (git backend).",
)
@click.option("--remote", envvar="INPUT_REMOTE", default=None, help="Remote to push tags to (git backend).")
@click.option("--api-url", envvar="GITHUB_API_URL", default=DEFAULT_GITHUB_API_URL, help="GitHub REST API URL.")
@click.option(
    "--github-output",
    envvar="GITHUB_OUTPUT",
    default=None,
    type=click.Path(dir_okay=False),
    help="File to append step outputs to. Outputs are printed when omitted.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def run_autoversion(
    branch: str,
    sha: Optional[str],
    repository: Optional[str],
    version_source: str,
    tag_prefix: str,
    create_tags: bool,
    github_token: Optional[str],
    major_version: Optional[int],
    minor_version: Optional[int],
    patch_version: Optional[int],
    manifest: str,
    backend: str,
    repo_root: str,
    remote: Optional[str],
    api_url: str,
    github_output: Optional[str],
    verbose: bool,
) -> None:
    """Click entry point for release versioning."""
    logging.basicConfig(stream=sys.stdout, level=logging.DEBUG if verbose else logging.INFO)

    config = ReleaseConfig(
        branch=branch,
        commit_sha=sha,
        source=VersionSource.from_input(version_source),
        tag_prefix=tag_prefix,
        create_tags=create_tags,
        major_version=major_version,
        minor_version=minor_version,
        patch_version=patch_version,
    )
    store = build_tag_store(TagBackend(backend.lower()), repository, github_token, api_url, Path(repo_root), remote)
    manifest_path = Path(manifest)
    if not manifest_path.is_absolute():
        manifest_path = Path(repo_root) / manifest_path

    try:
        result = run_release(config, PackageJsonManifestReader(manifest_path), store)
    except (AutoversionError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    if result is None:
        return

    write_outputs(result.outputs(), Path(github_output) if github_output else None)
    if not result.ok:
        assert result.report is not None
        failed = ", ".join(str(f) for f in result.report.failures)
        raise click.ClickException(f"Version {result.version} resolved, but some tags failed: {failed}")


if __name__ == "__main__":
    run_autoversion()
