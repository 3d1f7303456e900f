"""Shared fixtures for the careerboard tests."""

from typing import Callable, Optional

import pytest

from careerboard.config import Settings
from careerboard.services import Services, create_services
from careerboard.store.memory import InMemoryDocumentStore

from helpers import FrozenClock


@pytest.fixture
def test_settings():
    """Settings independent of the environment."""
    return Settings(_env_file=None, debug=True, log_level="WARNING")


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def make_services(test_settings) -> Callable[..., Services]:
    """Factory for fresh service graphs over an empty in-memory store."""
    def factory(clock: Optional[FrozenClock] = None) -> Services:
        return create_services(
            store=InMemoryDocumentStore(),
            clock=clock or FrozenClock(),
            config=test_settings,
        )

    return factory


@pytest.fixture
def services(make_services, clock):
    return make_services(clock)
