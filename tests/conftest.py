"""
Shared fixtures for the training core tests.

Every fixture returns a fresh in-memory fake, so tests never share state.
"""
from datetime import datetime, timezone

import pytest

from backend.settings import Settings
from tests.fakes import (
    FakeDeviceStore,
    FakeRecordStore,
    FakeTrainingLogWriter,
)

FIXED_NOW = datetime(2024, 1, 1, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def record_store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture
def device_store() -> FakeDeviceStore:
    return FakeDeviceStore()


@pytest.fixture
def writer() -> FakeTrainingLogWriter:
    return FakeTrainingLogWriter()


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the developer's .env file."""
    return Settings(environment="test", _env_file=None)
