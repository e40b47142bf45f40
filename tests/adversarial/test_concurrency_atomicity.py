"""Adversarial tests: concurrent submissions and failure atomicity.

These tests verify that:
1. Concurrent submissions of one hash yield exactly one success
2. Concurrent distinct submissions get dense, unique ids
3. A failure at any point after validation leaves no partial state
"""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from conftest import AUTHORITY, SUBMITTER, hash_of
from sciledger.config import RegistrySettings
from sciledger.core.errors import ErrorKind, RegistryError
from sciledger.core.payments import RecordingPaymentService, StorePaymentService
from sciledger.core.registry import ContributionRegistry
from sciledger.core.store import InMemoryStore, SQLiteStore


def _run_concurrently(target, count: int) -> list:
    results: list = []
    lock = threading.Lock()
    barrier = threading.Barrier(count)

    def _worker(index: int) -> None:
        barrier.wait()
        try:
            outcome = target(index)
        except RegistryError as exc:
            outcome = exc
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=_worker, args=(i,)) for i in range(count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results


def _submission(data_hash: bytes, caller: str = SUBMITTER) -> dict:
    return {
        "data_hash": data_hash,
        "metadata": "Meta",
        "category": "environment",
        "data_type": "observation",
        "description": "Desc",
        "location": "LocX",
        "expiry": 100,
        "initial_points": 50,
        "caller": caller,
    }


class TestConcurrentSubmissions:
    @pytest.fixture(params=["memory", "sqlite"])
    def shared_registry(self, request, tmp_path: Path) -> ContributionRegistry:
        store = InMemoryStore() if request.param == "memory" else SQLiteStore(tmp_path / "race.db")
        registry = ContributionRegistry(
            store,
            payments=RecordingPaymentService(),
            settings=RegistrySettings(_env_file=None),
        )
        registry.set_authority(AUTHORITY)
        return registry

    def test_same_hash_exactly_one_wins(self, shared_registry: ContributionRegistry):
        results = _run_concurrently(
            lambda i: shared_registry.submit_contribution(
                **_submission(hash_of(7), caller=f"ST{i}")
            ),
            count=8,
        )
        successes = [r for r in results if isinstance(r, int)]
        failures = [r for r in results if isinstance(r, RegistryError)]
        assert successes == [0]
        assert len(failures) == 7
        assert all(f.kind == ErrorKind.ALREADY_EXISTS for f in failures)
        assert len(shared_registry.payments.transfers) == 1
        assert shared_registry.get_contribution_count() == 1

    def test_distinct_hashes_get_dense_ids(self, shared_registry: ContributionRegistry):
        results = _run_concurrently(
            lambda i: shared_registry.submit_contribution(**_submission(hash_of(i + 1))),
            count=10,
        )
        assert sorted(results) == list(range(10))
        assert shared_registry.get_contribution_count() == 10


class TestFailureAtomicity:
    def test_store_failure_after_payment_rolls_back(self, monkeypatch: pytest.MonkeyPatch):
        store = InMemoryStore()
        payments = RecordingPaymentService()
        registry = ContributionRegistry(
            store, payments=payments, settings=RegistrySettings(_env_file=None)
        )
        registry.set_authority(AUTHORITY)

        def _broken_put(contribution):
            raise OSError("disk full")

        monkeypatch.setattr(store, "put_contribution", _broken_put)
        with pytest.raises(OSError):
            registry.submit_contribution(**_submission(hash_of(1)))

        # The recording service sits outside the store; its transfer stands.
        assert len(payments.transfers) == 1

        monkeypatch.undo()
        assert registry.get_contribution_count() == 0
        assert registry.check_existence(hash_of(1)) is False
        assert registry.submit_contribution(**_submission(hash_of(1))) == 0
        assert len(payments.transfers) == 2

    def test_store_failure_rolls_back_store_payment(self, monkeypatch: pytest.MonkeyPatch):
        store = InMemoryStore()
        registry = ContributionRegistry(
            store,
            payments=StorePaymentService(store),
            settings=RegistrySettings(_env_file=None),
        )
        registry.set_authority(AUTHORITY)

        def _broken_put(contribution):
            raise OSError("disk full")

        monkeypatch.setattr(store, "put_contribution", _broken_put)
        with pytest.raises(OSError):
            registry.submit_contribution(**_submission(hash_of(1)))

        assert store.list_transfers() == []

        monkeypatch.undo()
        assert registry.check_existence(hash_of(1)) is False
        assert registry.submit_contribution(**_submission(hash_of(1))) == 0

    def test_payment_refusal_on_sqlite_leaves_no_trace(self, tmp_path: Path):
        payments = RecordingPaymentService(refuse=True)
        store = SQLiteStore(tmp_path / "atomic.db")
        registry = ContributionRegistry(
            store, payments=payments, settings=RegistrySettings(_env_file=None)
        )
        registry.set_authority(AUTHORITY)

        with pytest.raises(RegistryError, match="PaymentFailed"):
            registry.submit_contribution(**_submission(hash_of(1)))

        assert store.lookup_hash(hash_of(1).hex()) is None
        assert store.get_contribution(0) is None
        assert store.load_config().next_id == 0
        store.close()
