# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Tag store backends: GitHub REST API, a local git checkout, and an in-memory store."""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple
from urllib.parse import quote

import requests

from autoversion.constants import DEFAULT_GITHUB_API_URL, REQUEST_TIMEOUT_S
from autoversion.errors import TagStoreError

logger = logging.getLogger(__name__)


class TagStore(ABC):
    """Interface to the place release tags live.

    Implementations raise `TagStoreError` for any failure other than a tag not existing.
    """

    @abstractmethod
    def list_tags(self) -> Set[str]:
        """Return the names of all tags in the store."""

    @abstractmethod
    def get_tag_target(self, name: str) -> Optional[str]:
        """Return the commit a tag points at.

        Args:
            name: Tag name, e.g. 'v1.2.3'.

        Returns:
            The commit SHA, or None if the tag does not exist.
        """

    @abstractmethod
    def create_tag(self, name: str, sha: str) -> None:
        """Create a new tag pointing at a commit.

        Args:
            name: Tag name.
            sha: Commit SHA.
        """

    @abstractmethod
    def move_tag(self, name: str, sha: str) -> None:
        """Point an existing tag at a different commit.

        Args:
            name: Tag name.
            sha: Commit SHA.
        """


class InMemoryTagStore(TagStore):
    """Dictionary-backed tag store.

    Every call is recorded in `calls` as an (operation, tag name) pair. Failures can be
    injected per operation and tag name through `fail_on`.

    Args:
        tags: Initial mapping from tag name to commit SHA.
        fail_on: Mapping from (operation, tag name) to the error message to raise.
    """

    def __init__(
        self, tags: Optional[Dict[str, str]] = None, fail_on: Optional[Dict[Tuple[str, str], str]] = None
    ) -> None:
        """Initialize the store with optional tags and injected failures."""
        self.tags: Dict[str, str] = dict(tags or {})
        self.fail_on: Dict[Tuple[str, str], str] = dict(fail_on or {})
        self.calls: List[Tuple[str, str]] = []

    def _record(self, operation: str, name: str) -> None:
        self.calls.append((operation, name))
        message = self.fail_on.get((operation, name))
        if message is not None:
            raise TagStoreError(message)

    @property
    def mutations(self) -> List[Tuple[str, str]]:
        """Recorded create/move calls."""
        return [c for c in self.calls if c[0] in ("create", "move")]

    def list_tags(self) -> Set[str]:
        """Return the names of all tags in memory."""
        self._record("list", "*")
        return set(self.tags)

    def get_tag_target(self, name: str) -> Optional[str]:
        """Return the commit a tag points at, or None if it does not exist."""
        self._record("get", name)
        return self.tags.get(name)

    def create_tag(self, name: str, sha: str) -> None:
        """Add a tag, failing if it already exists."""
        self._record("create", name)
        if name in self.tags:
            raise TagStoreError(f"Reference refs/tags/{name} already exists")
        self.tags[name] = sha

    def move_tag(self, name: str, sha: str) -> None:
        """Repoint a tag, failing if it does not exist."""
        self._record("move", name)
        if name not in self.tags:
            raise TagStoreError(f"Reference refs/tags/{name} does not exist")
        self.tags[name] = sha


class GitHubTagStore(TagStore):
    """Tags of a GitHub repository, managed through the REST API.

    Args:
        repository: Repository in `owner/name` form.
        token: Token with `contents: write` permission.
        api_url: Base URL of the GitHub REST API.
        session: Session used for all requests. A new one is created when omitted.
    """

    def __init__(
        self,
        repository: str,
        token: str,
        api_url: str = DEFAULT_GITHUB_API_URL,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Create a session authenticated with the token."""
        if "/" not in repository:
            raise ValueError(f"Repository must be given as 'owner/name', got {repository!r}")
        self.repository = repository
        self.api_url = api_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )

    def _url(self, path: str) -> str:
        return f"{self.api_url}/repos/{self.repository}/{path}"

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Send a request, turning transport errors into `TagStoreError`."""
        try:
            return self.session.request(method, url, timeout=REQUEST_TIMEOUT_S, **kwargs)
        except requests.RequestException as e:
            raise TagStoreError(f"{method} {url} failed: {e}") from e

    @staticmethod
    def _raise_for_status(response: requests.Response) -> None:
        if not response.ok:
            raise TagStoreError(f"GitHub API returned {response.status_code}: {response.text.strip()}")

    def list_tags(self) -> Set[str]:
        """Return every tag name of the repository, following pagination."""
        names: Set[str] = set()
        url: Optional[str] = self._url("tags")
        params: Optional[Dict[str, int]] = {"per_page": 100}
        while url is not None:
            response = self._request("GET", url, params=params)
            self._raise_for_status(response)
            names.update(tag["name"] for tag in response.json())
            # The "next" link already carries the query string.
            url = response.links.get("next", {}).get("url")
            params = None
        return names

    def get_tag_target(self, name: str) -> Optional[str]:
        """Return the commit a tag ref points at, or None on 404."""
        response = self._request("GET", self._url(f"git/ref/tags/{quote(name)}"))
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        sha: str = response.json()["object"]["sha"]
        return sha

    def create_tag(self, name: str, sha: str) -> None:
        """Create the tag ref."""
        response = self._request("POST", self._url("git/refs"), json={"ref": f"refs/tags/{name}", "sha": sha})
        self._raise_for_status(response)

    def move_tag(self, name: str, sha: str) -> None:
        """Force-update the tag ref."""
        response = self._request(
            "PATCH", self._url(f"git/refs/tags/{quote(name)}"), json={"sha": sha, "force": True}
        )
        self._raise_for_status(response)


class GitTagStore(TagStore):
    """Lightweight tags of a local git checkout, optionally pushed to a remote.

    Args:
        repo_root: Path to the repository root.
        remote: Remote to push created and moved tags to. Tags stay local when None.
    """

    def __init__(self, repo_root: Path, remote: Optional[str] = None) -> None:
        """Remember the checkout and the remote to push to."""
        self.repo_root = repo_root
        self.remote = remote

    def _git(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        try:
            result = subprocess.run(["git", *args], cwd=self.repo_root, text=True, capture_output=True)
        except OSError as e:
            raise TagStoreError(f"Could not run git: {e}") from e
        if check and result.returncode != 0:
            raise TagStoreError(f"git {' '.join(args)} failed: {result.stderr.strip()}")
        return result

    def _push(self, name: str, force: bool) -> None:
        if self.remote is None:
            return
        args = ["push", self.remote, f"refs/tags/{name}"]
        if force:
            args.insert(1, "--force")
        self._git(*args)

    def list_tags(self) -> Set[str]:
        """Return the local tag names."""
        output = self._git("tag", "--list").stdout
        return {line.strip() for line in output.splitlines() if line.strip()}

    def get_tag_target(self, name: str) -> Optional[str]:
        """Resolve the tag to the commit it points at."""
        result = self._git("rev-parse", "--verify", "--quiet", f"refs/tags/{name}^{{commit}}", check=False)
        if result.returncode == 0:
            return result.stdout.strip()
        # --verify --quiet exits with 1 and no output when the ref does not exist.
        if result.returncode == 1 and not result.stderr.strip():
            return None
        raise TagStoreError(f"git rev-parse refs/tags/{name} failed: {result.stderr.strip()}")

    def create_tag(self, name: str, sha: str) -> None:
        """Create a lightweight tag and push it if a remote is configured."""
        self._git("tag", name, sha)
        self._push(name, force=False)

    def move_tag(self, name: str, sha: str) -> None:
        """Force-move the tag and force-push it if a remote is configured."""
        self._git("tag", "--force", name, sha)
        self._push(name, force=True)
