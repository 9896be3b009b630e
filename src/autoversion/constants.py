# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Constants used throughout the package."""

from enum import Enum, unique
from typing import Final

DEFAULT_TAG_PREFIX: Final[str] = "v"
DEFAULT_MANIFEST_FILENAME: Final[str] = "package.json"
DEFAULT_GITHUB_API_URL: Final[str] = "https://api.github.com"

BRANCH_REF_PREFIX: Final[str] = "refs/heads/"
RELEASE_BRANCH_PREFIX: Final[str] = "release/"

# Timeout (in seconds) applied to every remote call made by the GitHub backend.
REQUEST_TIMEOUT_S: Final[float] = 30.0


@unique
class VersionSource(str, Enum):
    """Where the release version is taken from."""

    AUTO = "auto"
    MANIFEST = "manifest"
    MANUAL = "manual"

    @classmethod
    def from_input(cls, value: str) -> "VersionSource":
        """Parse an operator-supplied version source.

        `package.json` is accepted as an alias for `manifest`.

        Args:
            value: Raw option value (case-insensitive).

        Returns:
            The matching version source.

        Raises:
            ValueError: If the value names no known source.
        """
        normalized = value.strip().lower()
        if normalized == "package.json":
            return cls.MANIFEST
        return cls(normalized)


@unique
class TagKind(str, Enum):
    """The three tracking tags maintained for every release."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


@unique
class OutcomeStatus(str, Enum):
    """Result of reconciling a single tag."""

    CREATED = "created"
    UPDATED = "updated"
    FAILED = "failed"


@unique
class TagBackend(str, Enum):
    """Supported tag store backends."""

    GITHUB = "github"
    GIT = "git"


VERSION_SOURCE_CHOICES: Final = tuple(x.value for x in VersionSource) + ("package.json",)
TAG_BACKEND_CHOICES: Final = tuple(x.value for x in TagBackend)
