"""Registry persistence: in-memory and SQLite-backed key-value stores.

A store holds four collections: the registry config, contributions keyed
by id, the latest update record per contribution, and the hash index
(hex fingerprint -> id). It also keeps the fee transfer log and the
persisted block height used by ``StoreClock``.

Writes only become durable when the enclosing ``transaction()`` exits
cleanly. An exception inside the block rolls every write back, which is
what lets the registry promise no partial state on failure.
"""

from __future__ import annotations

import abc
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sciledger.core.payments import Transfer
from sciledger.models.contributions import (
    Category,
    Contribution,
    ContributionStatus,
    ContributionUpdate,
    DataType,
)
from sciledger.models.registry import RegistryConfig


class StoreError(RuntimeError):
    """Raised when the backing store rejects a write."""


class RegistryStore(abc.ABC):
    """Abstract key-value store for registry state."""

    @abc.abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Group writes atomically. Nested calls join the outer transaction."""

    # -- config ---------------------------------------------------------

    @abc.abstractmethod
    def has_config(self) -> bool: ...

    @abc.abstractmethod
    def load_config(self) -> RegistryConfig: ...

    @abc.abstractmethod
    def save_config(self, config: RegistryConfig) -> None: ...

    @abc.abstractmethod
    def load_height(self) -> int: ...

    @abc.abstractmethod
    def save_height(self, height: int) -> None: ...

    # -- contributions --------------------------------------------------

    @abc.abstractmethod
    def get_contribution(self, contribution_id: int) -> Contribution | None: ...

    @abc.abstractmethod
    def put_contribution(self, contribution: Contribution) -> None: ...

    @abc.abstractmethod
    def list_contributions(self) -> list[Contribution]:
        """All contributions in id order."""

    @abc.abstractmethod
    def get_update(self, contribution_id: int) -> ContributionUpdate | None: ...

    @abc.abstractmethod
    def put_update(self, update: ContributionUpdate) -> None:
        """Store *update*, replacing any earlier record for the same id."""

    # -- hash index -----------------------------------------------------

    @abc.abstractmethod
    def lookup_hash(self, key: str) -> int | None: ...

    @abc.abstractmethod
    def index_hash(self, key: str, contribution_id: int) -> None:
        """Insert into the hash index. Raises ``StoreError`` on a duplicate key."""

    # -- transfers ------------------------------------------------------

    @abc.abstractmethod
    def append_transfer(self, transfer: Transfer) -> None: ...

    @abc.abstractmethod
    def list_transfers(self) -> list[Transfer]: ...


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class InMemoryStore(RegistryStore):
    """Dict-backed store. Rolls back by restoring a snapshot."""

    def __init__(self) -> None:
        self._config: RegistryConfig | None = None
        self._height = 0
        self._contributions: dict[int, Contribution] = {}
        self._updates: dict[int, ContributionUpdate] = {}
        self._hash_index: dict[str, int] = {}
        self._transfers: list[Transfer] = []
        self._depth = 0
        self._lock = threading.RLock()

    def _snapshot(self) -> tuple:
        # Models are frozen, so shallow copies are enough.
        return (
            self._config,
            self._height,
            dict(self._contributions),
            dict(self._updates),
            dict(self._hash_index),
            list(self._transfers),
        )

    def _restore(self, snapshot: tuple) -> None:
        (
            self._config,
            self._height,
            self._contributions,
            self._updates,
            self._hash_index,
            self._transfers,
        ) = snapshot

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            snapshot = self._snapshot() if self._depth == 0 else None
            self._depth += 1
            try:
                yield
            except BaseException:
                if snapshot is not None:
                    self._restore(snapshot)
                raise
            finally:
                self._depth -= 1

    def has_config(self) -> bool:
        return self._config is not None

    def load_config(self) -> RegistryConfig:
        return self._config or RegistryConfig()

    def save_config(self, config: RegistryConfig) -> None:
        self._config = config

    def load_height(self) -> int:
        return self._height

    def save_height(self, height: int) -> None:
        self._height = height

    def get_contribution(self, contribution_id: int) -> Contribution | None:
        return self._contributions.get(contribution_id)

    def put_contribution(self, contribution: Contribution) -> None:
        self._contributions[contribution.contribution_id] = contribution

    def list_contributions(self) -> list[Contribution]:
        return [self._contributions[cid] for cid in sorted(self._contributions)]

    def get_update(self, contribution_id: int) -> ContributionUpdate | None:
        return self._updates.get(contribution_id)

    def put_update(self, update: ContributionUpdate) -> None:
        self._updates[update.contribution_id] = update

    def lookup_hash(self, key: str) -> int | None:
        return self._hash_index.get(key)

    def index_hash(self, key: str, contribution_id: int) -> None:
        if key in self._hash_index:
            raise StoreError(f"Hash {key} is already indexed")
        self._hash_index[key] = contribution_id

    def append_transfer(self, transfer: Transfer) -> None:
        self._transfers.append(transfer)

    def list_transfers(self) -> list[Transfer]:
        return list(self._transfers)


# ---------------------------------------------------------------------------
# SQLite store
# ---------------------------------------------------------------------------

# Block heights, expiries, points and fee amounts are unbounded integers;
# they are stored as decimal TEXT because SQLite INTEGER stops at 64 bits.
_CREATE_KV = """
CREATE TABLE IF NOT EXISTS registry_kv (
    key    TEXT PRIMARY KEY,
    value  TEXT NOT NULL
);
"""

_CREATE_CONTRIBUTIONS = """
CREATE TABLE IF NOT EXISTS contributions (
    contribution_id  INTEGER PRIMARY KEY,
    data_hash        TEXT NOT NULL UNIQUE,
    metadata         TEXT NOT NULL,
    category         TEXT NOT NULL,
    data_type        TEXT NOT NULL,
    description      TEXT NOT NULL,
    location         TEXT NOT NULL DEFAULT '',
    submitter        TEXT NOT NULL,
    timestamp        TEXT NOT NULL,
    expiry           TEXT NOT NULL,
    points_awarded   TEXT NOT NULL DEFAULT '0',
    status           TEXT NOT NULL
);
"""

_CREATE_UPDATES = """
CREATE TABLE IF NOT EXISTS contribution_updates (
    contribution_id     INTEGER PRIMARY KEY,
    update_metadata     TEXT NOT NULL,
    update_description  TEXT NOT NULL,
    update_timestamp    TEXT NOT NULL,
    updater             TEXT NOT NULL
);
"""

_CREATE_HASH_INDEX = """
CREATE TABLE IF NOT EXISTS contributions_by_hash (
    data_hash        TEXT PRIMARY KEY,
    contribution_id  INTEGER NOT NULL UNIQUE
);
"""

_CREATE_TRANSFERS = """
CREATE TABLE IF NOT EXISTS fee_transfers (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    amount     TEXT NOT NULL,
    sender     TEXT NOT NULL,
    recipient  TEXT NOT NULL
);
"""

_CONFIG_KEY = "registry_config"
_HEIGHT_KEY = "block_height"


class SQLiteStore(RegistryStore):
    """Durable store backed by a single SQLite database.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file, created if missing. ``":memory:"``
        gives a throwaway database.
    """

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = str(db_path)
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        # Autocommit mode; transaction() issues BEGIN/COMMIT itself.
        self._conn = sqlite3.connect(
            self._db_path, check_same_thread=False, isolation_level=None
        )
        self._lock = threading.RLock()
        self._depth = 0
        self._init_schema()

    def _init_schema(self) -> None:
        with self._lock:
            self._conn.execute("PRAGMA journal_mode=WAL")
            for ddl in (
                _CREATE_KV,
                _CREATE_CONTRIBUTIONS,
                _CREATE_UPDATES,
                _CREATE_HASH_INDEX,
                _CREATE_TRANSFERS,
            ):
                self._conn.execute(ddl)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                self._conn.execute("BEGIN IMMEDIATE")
            self._depth += 1
            try:
                yield
            except BaseException:
                if outermost:
                    self._conn.execute("ROLLBACK")
                raise
            else:
                if outermost:
                    self._conn.execute("COMMIT")
            finally:
                self._depth -= 1

    def _fetchone(self, sql: str, params: tuple = ()) -> tuple | None:
        with self._lock:
            return self._conn.execute(sql, params).fetchone()

    def _fetchall(self, sql: str, params: tuple = ()) -> list[tuple]:
        with self._lock:
            return self._conn.execute(sql, params).fetchall()

    def _execute(self, sql: str, params: tuple = ()) -> None:
        with self._lock:
            try:
                self._conn.execute(sql, params)
            except sqlite3.IntegrityError as exc:
                raise StoreError(str(exc)) from exc

    # -- config ---------------------------------------------------------

    def _get_kv(self, key: str) -> str | None:
        row = self._fetchone("SELECT value FROM registry_kv WHERE key = ?", (key,))
        return row[0] if row else None

    def _set_kv(self, key: str, value: str) -> None:
        self._execute(
            "INSERT INTO registry_kv (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, value),
        )

    def has_config(self) -> bool:
        return self._get_kv(_CONFIG_KEY) is not None

    def load_config(self) -> RegistryConfig:
        raw = self._get_kv(_CONFIG_KEY)
        return RegistryConfig.model_validate_json(raw) if raw else RegistryConfig()

    def save_config(self, config: RegistryConfig) -> None:
        self._set_kv(_CONFIG_KEY, config.model_dump_json())

    def load_height(self) -> int:
        raw = self._get_kv(_HEIGHT_KEY)
        return int(raw) if raw else 0

    def save_height(self, height: int) -> None:
        self._set_kv(_HEIGHT_KEY, str(height))

    # -- contributions --------------------------------------------------

    def get_contribution(self, contribution_id: int) -> Contribution | None:
        row = self._fetchone(
            "SELECT * FROM contributions WHERE contribution_id = ?", (contribution_id,)
        )
        return self._row_to_contribution(row) if row else None

    def put_contribution(self, contribution: Contribution) -> None:
        self._execute(
            """
            INSERT INTO contributions
                (contribution_id, data_hash, metadata, category, data_type,
                 description, location, submitter, timestamp, expiry,
                 points_awarded, status)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(contribution_id) DO UPDATE SET
                metadata = excluded.metadata,
                description = excluded.description,
                timestamp = excluded.timestamp,
                status = excluded.status
            """,
            (
                contribution.contribution_id,
                contribution.hash_hex,
                contribution.metadata,
                contribution.category.value,
                contribution.data_type.value,
                contribution.description,
                contribution.location,
                contribution.submitter,
                str(contribution.timestamp),
                str(contribution.expiry),
                str(contribution.points_awarded),
                contribution.status.value,
            ),
        )

    def list_contributions(self) -> list[Contribution]:
        rows = self._fetchall("SELECT * FROM contributions ORDER BY contribution_id ASC")
        return [self._row_to_contribution(row) for row in rows]

    def get_update(self, contribution_id: int) -> ContributionUpdate | None:
        row = self._fetchone(
            "SELECT * FROM contribution_updates WHERE contribution_id = ?",
            (contribution_id,),
        )
        if row is None:
            return None
        cid, metadata, description, timestamp, updater = row
        return ContributionUpdate(
            contribution_id=cid,
            update_metadata=metadata,
            update_description=description,
            update_timestamp=int(timestamp),
            updater=updater,
        )

    def put_update(self, update: ContributionUpdate) -> None:
        self._execute(
            """
            INSERT OR REPLACE INTO contribution_updates
                (contribution_id, update_metadata, update_description,
                 update_timestamp, updater)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                update.contribution_id,
                update.update_metadata,
                update.update_description,
                str(update.update_timestamp),
                update.updater,
            ),
        )

    # -- hash index -----------------------------------------------------

    def lookup_hash(self, key: str) -> int | None:
        row = self._fetchone(
            "SELECT contribution_id FROM contributions_by_hash WHERE data_hash = ?", (key,)
        )
        return row[0] if row else None

    def index_hash(self, key: str, contribution_id: int) -> None:
        self._execute(
            "INSERT INTO contributions_by_hash (data_hash, contribution_id) VALUES (?, ?)",
            (key, contribution_id),
        )

    # -- transfers ------------------------------------------------------

    def append_transfer(self, transfer: Transfer) -> None:
        self._execute(
            "INSERT INTO fee_transfers (amount, sender, recipient) VALUES (?, ?, ?)",
            (str(transfer.amount), transfer.sender, transfer.recipient),
        )

    def list_transfers(self) -> list[Transfer]:
        rows = self._fetchall("SELECT amount, sender, recipient FROM fee_transfers ORDER BY id")
        return [Transfer(amount=int(a), sender=s, recipient=r) for a, s, r in rows]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_contribution(row: tuple) -> Contribution:
        """Convert a SQLite row tuple to a Contribution."""
        (
            contribution_id,
            data_hash,
            metadata,
            category,
            data_type,
            description,
            location,
            submitter,
            timestamp,
            expiry,
            points_awarded,
            status,
        ) = row
        return Contribution(
            contribution_id=contribution_id,
            data_hash=bytes.fromhex(data_hash),
            metadata=metadata,
            category=Category(category),
            data_type=DataType(data_type),
            description=description,
            location=location,
            submitter=submitter,
            timestamp=int(timestamp),
            expiry=int(expiry),
            points_awarded=int(points_awarded),
            status=ContributionStatus(status),
        )
