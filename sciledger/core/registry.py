"""Contribution Registry: the contribution lifecycle state machine.

The registry owns all mutable state (parameters, contributions, update
records and the hash index) through a ``RegistryStore`` and enforces:

- Write-once authority configuration
- Fixed-precedence submission validation (first failure wins)
- Fee collection before any state is written
- Dense, zero-based, never-reused contribution ids
- Global uniqueness of data hashes
- One-way PENDING -> APPROVED lifecycle; APPROVED is terminal
- Submitter-only updates while pending; authority-only approval

Every operation runs under one lock and one store transaction, so
operations are serialized and a refused operation leaves no trace.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sciledger.config import RegistrySettings
from sciledger.core.clock import BlockClock, ManualClock
from sciledger.core.errors import ErrorKind, registry_error
from sciledger.core.hasher import hash_key
from sciledger.core.payments import PaymentError, PaymentService, RecordingPaymentService
from sciledger.core.store import InMemoryStore, RegistryStore, StoreError
from sciledger.core.validation import (
    check_fee,
    check_reward_rate,
    check_validation_threshold,
    validate_submission,
    validate_update_fields,
)
from sciledger.models.contributions import (
    VALID_TRANSITIONS,
    Category,
    Contribution,
    ContributionStatus,
    ContributionUpdate,
    DataType,
    Principal,
)
from sciledger.models.registry import RegistryConfig

logger = logging.getLogger(__name__)


class ContributionRegistry:
    """Registry of fee-gated, authority-approved data contributions.

    Parameters
    ----------
    store:
        Backing key-value store. Defaults to an ``InMemoryStore``.
    clock:
        Source of the current block height. Defaults to a ``ManualClock``
        at height 0.
    payments:
        Service charged the submission fee on every successful submit.
        Defaults to a ``RecordingPaymentService``.
    settings:
        Seeds the parameters of a fresh store and supplies the access
        policy. Defaults to ``RegistrySettings()``.
    """

    def __init__(
        self,
        store: RegistryStore | None = None,
        *,
        clock: BlockClock | None = None,
        payments: PaymentService | None = None,
        settings: RegistrySettings | None = None,
    ) -> None:
        self.store = store if store is not None else InMemoryStore()
        self.clock = clock if clock is not None else ManualClock()
        self.payments = payments if payments is not None else RecordingPaymentService()
        self.settings = settings if settings is not None else RegistrySettings()
        self._lock = threading.RLock()

        with self._atomic():
            if not self.store.has_config():
                self.store.save_config(
                    RegistryConfig(
                        max_contributions=self.settings.max_contributions,
                        submission_fee=self.settings.submission_fee,
                        reward_rate=self.settings.reward_rate,
                        validation_threshold=self.settings.validation_threshold,
                    )
                )

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        with self._lock, self.store.transaction():
            yield

    # ------------------------------------------------------------------
    # Configuration operations
    # ------------------------------------------------------------------

    def set_authority(self, principal: Principal) -> bool:
        """Configure the approving authority. Succeeds at most once."""
        with self._atomic():
            if not principal or principal == self.settings.null_principal:
                raise registry_error(
                    ErrorKind.INVALID_AUTHORITY, f"{principal!r} cannot be the authority"
                )
            config = self.store.load_config()
            if config.has_authority:
                logger.warning("Refused to replace authority %s", config.authority)
                raise registry_error(
                    ErrorKind.ALREADY_CONFIGURED, "authority is already configured"
                )
            self.store.save_config(config.model_copy(update={"authority": principal}))
        logger.info("Authority configured: %s", principal)
        return True

    def _require_param_access(self, config: RegistryConfig, caller: Principal | None) -> None:
        if not config.has_authority:
            logger.warning("Parameter change refused: no authority configured")
            raise registry_error(ErrorKind.NOT_AUTHORIZED, "no authority configured")
        if self.settings.require_authority_caller_for_params and caller != config.authority:
            logger.warning("Parameter change by %s refused: not the authority", caller)
            raise registry_error(
                ErrorKind.NOT_AUTHORIZED, "only the authority may change parameters"
            )

    def set_submission_fee(self, fee: int, *, caller: Principal | None = None) -> bool:
        with self._atomic():
            config = self.store.load_config()
            self._require_param_access(config, caller)
            check_fee(fee)
            self.store.save_config(config.model_copy(update={"submission_fee": fee}))
        logger.info("Submission fee set to %d", fee)
        return True

    def set_reward_rate(self, rate: int, *, caller: Principal | None = None) -> bool:
        with self._atomic():
            config = self.store.load_config()
            self._require_param_access(config, caller)
            check_reward_rate(rate)
            self.store.save_config(config.model_copy(update={"reward_rate": rate}))
        logger.info("Reward rate set to %d", rate)
        return True

    def set_validation_threshold(
        self, threshold: int, *, caller: Principal | None = None
    ) -> bool:
        with self._atomic():
            config = self.store.load_config()
            self._require_param_access(config, caller)
            check_validation_threshold(threshold)
            self.store.save_config(
                config.model_copy(update={"validation_threshold": threshold})
            )
        logger.info("Validation threshold set to %d", threshold)
        return True

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    def submit_contribution(
        self,
        data_hash: bytes,
        metadata: str,
        category: str | Category,
        data_type: str | DataType,
        description: str,
        location: str,
        expiry: int,
        initial_points: int,
        *,
        caller: Principal,
    ) -> int:
        """Register a new pending contribution and return its id.

        Checks run in a fixed order and the first failure wins:
        capacity, hash length, metadata, category, data type, description,
        location, expiry, points, duplicate hash, authority. The fee is
        then charged from *caller* to the authority; only once it has been
        collected is the contribution written.
        """
        with self._atomic():
            config = self.store.load_config()
            height = self.clock.current_height()

            if config.at_capacity:
                raise registry_error(
                    ErrorKind.CAPACITY_EXCEEDED,
                    f"registry holds the maximum of {config.max_contributions}",
                )

            parsed_category, parsed_data_type = validate_submission(
                data_hash=data_hash,
                metadata=metadata,
                category=category,
                data_type=data_type,
                description=description,
                location=location,
                expiry=expiry,
                initial_points=initial_points,
                current_height=height,
            )
            data_hash = bytes(data_hash)
            key = hash_key(data_hash)

            if self.store.lookup_hash(key) is not None:
                raise registry_error(ErrorKind.ALREADY_EXISTS, f"hash {key} already submitted")
            if not config.has_authority:
                raise registry_error(
                    ErrorKind.AUTHORITY_NOT_VERIFIED, "no authority configured"
                )

            try:
                self.payments.transfer(config.submission_fee, caller, config.authority)
            except PaymentError as exc:
                logger.warning("Submission fee from %s refused: %s", caller, exc)
                raise registry_error(ErrorKind.PAYMENT_FAILED, str(exc)) from exc

            contribution_id = config.next_id
            contribution = Contribution(
                contribution_id=contribution_id,
                data_hash=data_hash,
                metadata=metadata,
                category=parsed_category,
                data_type=parsed_data_type,
                description=description,
                location=location,
                submitter=caller,
                timestamp=height,
                expiry=expiry,
                points_awarded=initial_points,
            )
            try:
                self.store.index_hash(key, contribution_id)
            except StoreError as exc:
                raise registry_error(ErrorKind.ALREADY_EXISTS, str(exc)) from exc
            self.store.put_contribution(contribution)
            self.store.save_config(config.model_copy(update={"next_id": contribution_id + 1}))

        logger.info(
            "Contribution %d submitted by %s (hash=%s, fee=%d)",
            contribution_id,
            caller,
            key,
            config.submission_fee,
        )
        return contribution_id

    def _require_contribution(self, contribution_id: int) -> Contribution:
        contribution = self.store.get_contribution(contribution_id)
        if contribution is None:
            raise registry_error(
                ErrorKind.NOT_FOUND, f"contribution {contribution_id} does not exist"
            )
        return contribution

    def update_contribution(
        self,
        contribution_id: int,
        update_metadata: str,
        update_description: str,
        *,
        caller: Principal,
    ) -> bool:
        """Replace metadata and description of a pending contribution.

        Only the submitter may update. The latest update is also kept as
        the contribution's audit record, replacing any earlier one.
        """
        with self._atomic():
            contribution = self._require_contribution(contribution_id)
            if caller != contribution.submitter:
                logger.warning(
                    "Update of contribution %d by %s refused: not the submitter",
                    contribution_id,
                    caller,
                )
                raise registry_error(
                    ErrorKind.NOT_AUTHORIZED, "only the submitter may update"
                )
            if contribution.status != ContributionStatus.PENDING:
                raise registry_error(
                    ErrorKind.UPDATE_NOT_ALLOWED,
                    f"contribution {contribution_id} is {contribution.status.value}",
                )
            validate_update_fields(update_metadata, update_description)

            height = self.clock.current_height()
            self.store.put_contribution(
                contribution.model_copy(
                    update={
                        "metadata": update_metadata,
                        "description": update_description,
                        "timestamp": height,
                    }
                )
            )
            self.store.put_update(
                ContributionUpdate(
                    contribution_id=contribution_id,
                    update_metadata=update_metadata,
                    update_description=update_description,
                    update_timestamp=height,
                    updater=caller,
                )
            )
        logger.info("Contribution %d updated by %s", contribution_id, caller)
        return True

    def approve_contribution(self, contribution_id: int, *, caller: Principal) -> bool:
        """Move a pending contribution to APPROVED. Authority only."""
        with self._atomic():
            contribution = self._require_contribution(contribution_id)
            authority = self.store.load_config().authority
            if authority is None or caller != authority:
                logger.warning(
                    "Approval of contribution %d by %s refused: not the authority",
                    contribution_id,
                    caller,
                )
                raise registry_error(
                    ErrorKind.NOT_AUTHORIZED, "only the authority may approve"
                )
            target = ContributionStatus.APPROVED
            if target not in VALID_TRANSITIONS[contribution.status]:
                raise registry_error(
                    ErrorKind.INVALID_STATUS,
                    f"contribution {contribution_id} is already {contribution.status.value}",
                )
            self.store.put_contribution(
                contribution.model_copy(
                    update={"status": target, "timestamp": self.clock.current_height()}
                )
            )
        logger.info("Contribution %d approved by %s", contribution_id, caller)
        return True

    # ------------------------------------------------------------------
    # Query methods (read-only)
    # ------------------------------------------------------------------

    def get_contribution(self, contribution_id: int) -> Contribution | None:
        with self._lock:
            return self.store.get_contribution(contribution_id)

    def get_contribution_count(self) -> int:
        """Total contributions ever created, approved ones included."""
        with self._lock:
            return self.store.load_config().next_id

    def check_existence(self, data_hash: bytes) -> bool:
        with self._lock:
            return self.store.lookup_hash(hash_key(bytes(data_hash))) is not None

    def get_contribution_update(self, contribution_id: int) -> ContributionUpdate | None:
        with self._lock:
            return self.store.get_update(contribution_id)

    def get_config(self) -> RegistryConfig:
        with self._lock:
            return self.store.load_config()

    def list_contributions(
        self, status: ContributionStatus | None = None
    ) -> list[Contribution]:
        with self._lock:
            contributions = self.store.list_contributions()
        if status is None:
            return contributions
        return [c for c in contributions if c.status == status]

