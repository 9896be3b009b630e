# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Fixtures shared by the unit tests."""

from typing import Final

import pytest

from autoversion.tagging.tag_store import InMemoryTagStore

COMMIT_SHA: Final = "abc123def4567890abc123def4567890abc123de"


@pytest.fixture()
def commit_sha() -> str:
    """Return the commit that a release run should tag."""
    return COMMIT_SHA


@pytest.fixture()
def empty_store() -> InMemoryTagStore:
    """Return a tag store without any tags."""
    return InMemoryTagStore()
