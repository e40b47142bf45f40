"""Payment collaborators for submission fees.

Settlement mechanics are opaque to the registry: it asks a
``PaymentService`` to move ``amount`` from the submitter to the authority
and treats any ``PaymentError`` as a refused submission.

A transfer happens before the submission is written. If a later store
write fails, the store rolls back but a service outside the store keeps
its transfer; only ``StorePaymentService`` is undone with the submission.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from sciledger.models.contributions import Principal

if TYPE_CHECKING:
    from sciledger.core.store import RegistryStore

logger = logging.getLogger(__name__)


class PaymentError(RuntimeError):
    """Raised when a transfer cannot be completed."""


class Transfer(BaseModel):
    """A completed fee transfer."""

    model_config = ConfigDict(frozen=True)

    amount: int
    sender: Principal
    recipient: Principal


@runtime_checkable
class PaymentService(Protocol):
    """Moves funds between principals."""

    def transfer(self, amount: int, sender: Principal, recipient: Principal) -> None:
        ...


class RecordingPaymentService:
    """In-memory payment service that records every transfer.

    Set ``refuse`` to make subsequent transfers fail. Transfers live
    outside the store and survive a rolled-back submission.
    """

    def __init__(self, *, refuse: bool = False) -> None:
        self.transfers: list[Transfer] = []
        self.refuse = refuse

    def transfer(self, amount: int, sender: Principal, recipient: Principal) -> None:
        if self.refuse:
            raise PaymentError(f"Transfer of {amount} from {sender} refused")
        self.transfers.append(Transfer(amount=amount, sender=sender, recipient=recipient))


class StorePaymentService:
    """Payment service that appends transfers to the registry store.

    Runs inside the registry's transaction, so a transfer is only kept if
    the submission it pays for commits.
    """

    def __init__(self, store: RegistryStore) -> None:
        self._store = store

    def transfer(self, amount: int, sender: Principal, recipient: Principal) -> None:
        if amount < 0:
            raise PaymentError(f"Cannot transfer a negative amount: {amount}")
        self._store.append_transfer(Transfer(amount=amount, sender=sender, recipient=recipient))
        logger.debug("Recorded transfer of %d from %s to %s", amount, sender, recipient)
