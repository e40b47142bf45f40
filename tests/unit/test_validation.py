"""Tests for the submission and update rule set."""

from __future__ import annotations

from typing import Any

import pytest

from sciledger.core.errors import ErrorKind, RegistryError, ValidationError
from sciledger.core.validation import (
    MAX_DESCRIPTION_LENGTH,
    MAX_LOCATION_LENGTH,
    MAX_METADATA_LENGTH,
    check_fee,
    check_reward_rate,
    check_validation_threshold,
    validate_submission,
    validate_update_fields,
)
from sciledger.models.contributions import Category, DataType


def _fields(**overrides: Any) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "data_hash": b"\x01" * 32,
        "metadata": "Meta",
        "category": "environment",
        "data_type": "observation",
        "description": "Desc",
        "location": "LocX",
        "expiry": 100,
        "initial_points": 50,
        "current_height": 0,
    }
    fields.update(overrides)
    return fields


def _kind_of(**overrides: Any) -> ErrorKind:
    with pytest.raises(RegistryError) as exc_info:
        validate_submission(**_fields(**overrides))
    return exc_info.value.kind


class TestValidateSubmission:
    def test_valid_returns_parsed_enums(self):
        category, data_type = validate_submission(**_fields())
        assert category == Category.ENVIRONMENT
        assert data_type == DataType.OBSERVATION

    @pytest.mark.parametrize(
        ("overrides", "kind"),
        [
            ({"data_hash": b"\x01" * 31}, ErrorKind.INVALID_HASH),
            ({"data_hash": b"\x01" * 33}, ErrorKind.INVALID_HASH),
            ({"metadata": ""}, ErrorKind.INVALID_METADATA),
            ({"metadata": "m" * (MAX_METADATA_LENGTH + 1)}, ErrorKind.INVALID_METADATA),
            ({"category": "invalid"}, ErrorKind.INVALID_CATEGORY),
            ({"data_type": "video"}, ErrorKind.INVALID_DATA_TYPE),
            ({"description": ""}, ErrorKind.INVALID_DESCRIPTION),
            ({"description": "d" * (MAX_DESCRIPTION_LENGTH + 1)}, ErrorKind.INVALID_DESCRIPTION),
            ({"location": "l" * (MAX_LOCATION_LENGTH + 1)}, ErrorKind.INVALID_LOCATION),
            ({"expiry": 0}, ErrorKind.INVALID_EXPIRY),
            ({"expiry": 10, "current_height": 10}, ErrorKind.INVALID_EXPIRY),
            ({"initial_points": -1}, ErrorKind.INVALID_POINTS),
        ],
    )
    def test_single_violation(self, overrides, kind):
        assert _kind_of(**overrides) == kind

    def test_boundaries_accepted(self):
        validate_submission(
            **_fields(
                metadata="m" * MAX_METADATA_LENGTH,
                description="d" * MAX_DESCRIPTION_LENGTH,
                location="l" * MAX_LOCATION_LENGTH,
                expiry=11,
                current_height=10,
                initial_points=0,
            )
        )

    def test_empty_location_accepted(self):
        validate_submission(**_fields(location=""))

    def test_hash_checked_before_metadata(self):
        assert _kind_of(data_hash=b"", metadata="") == ErrorKind.INVALID_HASH

    def test_metadata_checked_before_category(self):
        assert _kind_of(metadata="", category="invalid") == ErrorKind.INVALID_METADATA

    def test_category_checked_before_data_type(self):
        assert _kind_of(category="x", data_type="y") == ErrorKind.INVALID_CATEGORY

    def test_description_checked_before_location(self):
        assert _kind_of(description="", location="l" * 500) == ErrorKind.INVALID_DESCRIPTION

    def test_expiry_checked_before_points(self):
        assert _kind_of(expiry=0, initial_points=-5) == ErrorKind.INVALID_EXPIRY

    def test_errors_are_validation_errors(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_submission(**_fields(metadata=""))
        assert exc_info.value.code == 102


class TestValidateUpdateFields:
    def test_valid(self):
        validate_update_fields("New meta", "New desc")

    @pytest.mark.parametrize(
        ("metadata", "description"),
        [
            ("", "desc"),
            ("meta", ""),
            ("m" * (MAX_METADATA_LENGTH + 1), "desc"),
            ("meta", "d" * (MAX_DESCRIPTION_LENGTH + 1)),
        ],
    )
    def test_invalid_reports_update_param(self, metadata, description):
        with pytest.raises(RegistryError) as exc_info:
            validate_update_fields(metadata, description)
        assert exc_info.value.kind == ErrorKind.INVALID_UPDATE_PARAM


class TestParameterRules:
    def test_fee(self):
        check_fee(0)
        with pytest.raises(RegistryError, match="InvalidFee"):
            check_fee(-1)

    @pytest.mark.parametrize("rate", [1, 10, 50])
    def test_reward_rate_in_range(self, rate):
        check_reward_rate(rate)

    @pytest.mark.parametrize("rate", [0, 51, -3])
    def test_reward_rate_out_of_range(self, rate):
        with pytest.raises(RegistryError, match="InvalidRate"):
            check_reward_rate(rate)

    @pytest.mark.parametrize("threshold", [1, 10])
    def test_threshold_in_range(self, threshold):
        check_validation_threshold(threshold)

    @pytest.mark.parametrize("threshold", [0, 11])
    def test_threshold_out_of_range(self, threshold):
        with pytest.raises(RegistryError, match="InvalidThreshold"):
            check_validation_threshold(threshold)
