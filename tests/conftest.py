"""Shared fixtures: fresh store, event bus and config per test."""

import pytest

from aiteam.core.events import EventBus
from aiteam.core.store import SessionStore

from tests.helpers import FakeSandbox, fake_config


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def recorded_events(event_bus):
    """Every event published on the bus, in publish order"""
    events = []
    event_bus.subscribe("*", events.append)
    return events


@pytest.fixture
def config():
    return fake_config()


@pytest.fixture
def sandbox():
    return FakeSandbox()
