"""Sciledger data models: all Pydantic v2, all frozen (immutable)."""

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

__all__ = [
    # contributions
    "Principal",
    "Category",
    "DataType",
    "ContributionStatus",
    "VALID_TRANSITIONS",
    "Contribution",
    "ContributionUpdate",
    # registry
    "RegistryConfig",
]
