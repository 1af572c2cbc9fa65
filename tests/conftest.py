"""Shared pytest fixtures for rewire tests."""

from collections.abc import Iterator

import pytest

from rewire import Container, LockMode
from rewire.container_context import container_context


@pytest.fixture()
def container() -> Container:
    """Default container with thread locking enabled."""
    return Container()


@pytest.fixture()
def unlocked_container() -> Container:
    """Container with locking disabled."""
    return Container(lock_mode=LockMode.NONE)


@pytest.fixture()
def clean_container_context() -> Iterator[None]:
    """Release the process-wide container after the test."""
    yield
    container_context.clear()
