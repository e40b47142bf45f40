"""Contribution models: records, update audit entries, lifecycle states."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

# Opaque, equality-comparable identity of a caller or account.
Principal = str


class Category(str, Enum):
    """Scientific domain a contribution belongs to."""

    ENVIRONMENT = "environment"
    BIOLOGY = "biology"
    ASTRONOMY = "astronomy"
    PHYSICS = "physics"


class DataType(str, Enum):
    """Kind of data a contribution carries."""

    OBSERVATION = "observation"
    MEASUREMENT = "measurement"
    PHOTO = "photo"
    SAMPLE = "sample"


class ContributionStatus(str, Enum):
    """Lifecycle state of a contribution."""

    PENDING = "pending"
    APPROVED = "approved"


# One-way lifecycle. APPROVED is terminal.
VALID_TRANSITIONS: dict[ContributionStatus, set[ContributionStatus]] = {
    ContributionStatus.PENDING: {ContributionStatus.APPROVED},
    ContributionStatus.APPROVED: set(),
}


class Contribution(BaseModel):
    """A single submitted data record and its approval state.

    Instances are frozen; the registry replaces a record with
    ``model_copy(update=...)`` when it changes.
    """

    model_config = ConfigDict(frozen=True)

    contribution_id: int
    data_hash: bytes  # 32-byte content fingerprint
    metadata: str
    category: Category
    data_type: DataType
    description: str
    location: str = ""
    submitter: Principal
    timestamp: int  # block height of last change
    expiry: int  # block height
    points_awarded: int = 0
    status: ContributionStatus = ContributionStatus.PENDING

    @property
    def is_approved(self) -> bool:
        return self.status == ContributionStatus.APPROVED

    @property
    def hash_hex(self) -> str:
        return self.data_hash.hex()


class ContributionUpdate(BaseModel):
    """Latest update applied to a contribution by its submitter.

    Only one record per contribution is kept; a newer update overwrites it.
    """

    model_config = ConfigDict(frozen=True)

    contribution_id: int
    update_metadata: str
    update_description: str
    update_timestamp: int
    updater: Principal
