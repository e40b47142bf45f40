"""Tests for Pydantic models: immutability, enums, lifecycle table."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from sciledger.models import (
    VALID_TRANSITIONS,
    Category,
    Contribution,
    ContributionStatus,
    ContributionUpdate,
    DataType,
    RegistryConfig,
)


def _contribution(**overrides) -> Contribution:
    fields = {
        "contribution_id": 0,
        "data_hash": b"\x01" * 32,
        "metadata": "Meta",
        "category": Category.ENVIRONMENT,
        "data_type": DataType.OBSERVATION,
        "description": "Desc",
        "submitter": "ST1TEST",
        "timestamp": 0,
        "expiry": 100,
    }
    fields.update(overrides)
    return Contribution(**fields)


class TestEnums:
    def test_category_values(self):
        assert {c.value for c in Category} == {"environment", "biology", "astronomy", "physics"}

    def test_data_type_values(self):
        assert {d.value for d in DataType} == {"observation", "measurement", "photo", "sample"}

    def test_approved_is_terminal(self):
        assert VALID_TRANSITIONS[ContributionStatus.APPROVED] == set()
        assert VALID_TRANSITIONS[ContributionStatus.PENDING] == {ContributionStatus.APPROVED}


class TestContribution:
    def test_defaults(self):
        c = _contribution()
        assert c.status == ContributionStatus.PENDING
        assert c.is_approved is False
        assert c.location == ""
        assert c.points_awarded == 0

    def test_frozen(self):
        c = _contribution()
        with pytest.raises(ValidationError):
            c.status = ContributionStatus.APPROVED  # type: ignore[misc]

    def test_model_copy_leaves_original(self):
        c = _contribution()
        approved = c.model_copy(update={"status": ContributionStatus.APPROVED})
        assert approved.is_approved
        assert not c.is_approved

    def test_hash_hex(self):
        assert _contribution().hash_hex == "01" * 32

    def test_category_coerced_from_string(self):
        assert _contribution(category="physics").category == Category.PHYSICS


class TestContributionUpdate:
    def test_fields(self):
        u = ContributionUpdate(
            contribution_id=3,
            update_metadata="m",
            update_description="d",
            update_timestamp=7,
            updater="ST1TEST",
        )
        assert u.contribution_id == 3
        assert u.updater == "ST1TEST"


class TestRegistryConfig:
    def test_defaults(self):
        config = RegistryConfig()
        assert config.next_id == 0
        assert config.max_contributions == 10000
        assert config.submission_fee == 500
        assert config.reward_rate == 10
        assert config.validation_threshold == 3
        assert config.authority is None
        assert config.has_authority is False

    def test_at_capacity(self):
        assert RegistryConfig(next_id=1, max_contributions=1).at_capacity
        assert not RegistryConfig(next_id=0, max_contributions=1).at_capacity

    def test_json_round_trip_keeps_unset_authority(self):
        config = RegistryConfig(next_id=4)
        restored = RegistryConfig.model_validate_json(config.model_dump_json())
        assert restored == config
        assert restored.authority is None
