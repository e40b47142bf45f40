"""Shared test fixtures for Sciledger."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from sciledger.config import RegistrySettings
from sciledger.core.clock import ManualClock
from sciledger.core.payments import RecordingPaymentService
from sciledger.core.registry import ContributionRegistry
from sciledger.core.store import InMemoryStore, SQLiteStore

SUBMITTER = "ST1TEST"
AUTHORITY = "ST2TEST"
OUTSIDER = "ST3FAKE"


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test databases."""
    return tmp_path


@pytest.fixture
def registry_settings() -> RegistrySettings:
    """Settings with library defaults, isolated from any .env file."""
    return RegistrySettings(_env_file=None)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def payments() -> RecordingPaymentService:
    return RecordingPaymentService()


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def sqlite_store(tmp_dir: Path) -> SQLiteStore:
    """Provide a fresh SQLiteStore backed by a temp database."""
    store = SQLiteStore(tmp_dir / "registry.db")
    yield store
    store.close()


@pytest.fixture(params=["memory", "sqlite"])
def store(request: pytest.FixtureRequest) -> InMemoryStore | SQLiteStore:
    """Run a test against both store backends."""
    if request.param == "memory":
        return request.getfixturevalue("memory_store")
    return request.getfixturevalue("sqlite_store")


@pytest.fixture
def registry(
    store: InMemoryStore | SQLiteStore,
    clock: ManualClock,
    payments: RecordingPaymentService,
    registry_settings: RegistrySettings,
) -> ContributionRegistry:
    """A registry with no authority configured."""
    return ContributionRegistry(
        store, clock=clock, payments=payments, settings=registry_settings
    )


@pytest.fixture
def authorized_registry(registry: ContributionRegistry) -> ContributionRegistry:
    """A registry whose authority is AUTHORITY."""
    registry.set_authority(AUTHORITY)
    return registry


def hash_of(byte: int) -> bytes:
    """A 32-byte fingerprint filled with *byte*."""
    return bytes([byte]) * 32


@pytest.fixture
def make_submission() -> Callable[..., dict[str, Any]]:
    """Factory fixture: keyword arguments for a valid submission."""

    def _factory(**overrides: Any) -> dict[str, Any]:
        defaults: dict[str, Any] = {
            "data_hash": hash_of(1),
            "metadata": "Meta data",
            "category": "environment",
            "data_type": "observation",
            "description": "Detailed desc",
            "location": "LocationX",
            "expiry": 100,
            "initial_points": 50,
            "caller": SUBMITTER,
        }
        defaults.update(overrides)
        return defaults

    return _factory


@pytest.fixture
def submit(
    authorized_registry: ContributionRegistry,
    make_submission: Callable[..., dict[str, Any]],
) -> Callable[..., int]:
    """Submit a valid contribution to ``authorized_registry``; returns the id."""

    def _submit(**overrides: Any) -> int:
        return authorized_registry.submit_contribution(**make_submission(**overrides))

    return _submit
