"""Registry-wide parameter model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from sciledger.models.contributions import Principal

DEFAULT_MAX_CONTRIBUTIONS = 10000
DEFAULT_SUBMISSION_FEE = 500
DEFAULT_REWARD_RATE = 10
DEFAULT_VALIDATION_THRESHOLD = 3


class RegistryConfig(BaseModel):
    """Process-wide registry parameters.

    ``authority`` is ``None`` until configured and is write-once afterwards.
    ``next_id`` is the count of contributions ever created.
    """

    model_config = ConfigDict(frozen=True)

    next_id: int = 0
    max_contributions: int = DEFAULT_MAX_CONTRIBUTIONS
    submission_fee: int = DEFAULT_SUBMISSION_FEE
    authority: Principal | None = None
    reward_rate: int = DEFAULT_REWARD_RATE
    validation_threshold: int = DEFAULT_VALIDATION_THRESHOLD

    @property
    def has_authority(self) -> bool:
        return self.authority is not None

    @property
    def at_capacity(self) -> bool:
        return self.next_id >= self.max_contributions
