# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Read the version declared in a project manifest."""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from autoversion.structures.semver import SemVer, parse_version_string

logger = logging.getLogger(__name__)


class ManifestReader(ABC):
    """Source of the version declared by the project itself."""

    @abstractmethod
    def read_version(self) -> Optional[SemVer]:
        """Return the declared version, or None if the manifest cannot supply one."""

    @property
    def description(self) -> str:
        """Human readable name of the manifest, used in log messages."""
        return self.__class__.__name__


class PackageJsonManifestReader(ManifestReader):
    """Reads the `version` field of a `package.json` file.

    Missing files, invalid JSON, a missing or non-string `version` field, and a version that
    does not start with a number are all reported as "no version".

    Args:
        path: Path to the manifest file.
    """

    def __init__(self, path: Path) -> None:
        """Remember the manifest path."""
        self.path = path

    @property
    def description(self) -> str:
        """Path of the manifest."""
        return str(self.path)

    def read_version(self) -> Optional[SemVer]:
        """Return the version declared in the manifest, or None."""
        if not self.path.exists():
            logger.debug("Manifest %s does not exist", self.path)
            return None
        try:
            manifest = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.debug("Could not read %s: %s", self.path, e)
            return None

        raw = manifest.get("version") if isinstance(manifest, dict) else None
        if not isinstance(raw, str):
            logger.debug("Manifest %s has no version field", self.path)
            return None

        version = parse_version_string(raw)
        if version is None:
            logger.debug("Manifest %s declares an unparseable version %r", self.path, raw)
        return version


class StaticManifestReader(ManifestReader):
    """Manifest reader returning a fixed version (or none)."""

    def __init__(self, version: Optional[SemVer] = None) -> None:
        """Remember the version to return."""
        self.version = version

    def read_version(self) -> Optional[SemVer]:
        """Return the configured version."""
        return self.version
