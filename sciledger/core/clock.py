"""Block-height clocks.

The registry never reads wall-clock time. Height is an external,
monotonically non-decreasing counter supplied by a ``BlockClock``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sciledger.core.store import RegistryStore


@runtime_checkable
class BlockClock(Protocol):
    """Read-only source of the current block height."""

    def current_height(self) -> int:
        ...


class ManualClock:
    """In-process clock advanced explicitly by the caller."""

    def __init__(self, height: int = 0) -> None:
        if height < 0:
            raise ValueError(f"Block height cannot be negative: {height}")
        self._height = height

    def current_height(self) -> int:
        return self._height

    def set_height(self, height: int) -> None:
        if height < self._height:
            raise ValueError(
                f"Block height is monotonic: cannot move from {self._height} to {height}"
            )
        self._height = height

    def advance(self, blocks: int = 1) -> int:
        """Move forward *blocks* heights and return the new height."""
        self.set_height(self._height + blocks)
        return self._height


class StoreClock:
    """Clock whose height is persisted in a registry store.

    Used by the CLI so separate invocations share one timeline.
    """

    def __init__(self, store: RegistryStore) -> None:
        self._store = store

    def current_height(self) -> int:
        return self._store.load_height()

    def advance(self, blocks: int = 1) -> int:
        if blocks < 0:
            raise ValueError(f"Block height is monotonic: cannot advance by {blocks}")
        with self._store.transaction():
            height = self._store.load_height() + blocks
            self._store.save_height(height)
        return height
