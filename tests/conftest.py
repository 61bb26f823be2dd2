from collections.abc import Iterator

import pytest

from warble.registry import Registry, default_registry


@pytest.fixture
def registry() -> Registry:
    """A fresh registry per test — the process-wide one is never touched."""
    return Registry()


@pytest.fixture
def shared_registry() -> Iterator[Registry]:
    """The process-wide registry, emptied again after the test."""
    shared = default_registry()
    yield shared
    shared.clear()
