"""Structural validation rules for submissions and updates.

Each rule raises a ``ValidationError`` of a specific kind on failure.
``validate_submission`` applies the caller-local rules in their fixed
precedence; the registry wraps it with the capacity check before and the
state-dependent checks (duplicate hash, authority) after.
"""

from __future__ import annotations

import logging

from sciledger.core.errors import ErrorKind, RegistryError, registry_error
from sciledger.core.hasher import HASH_LENGTH
from sciledger.models.contributions import Category, DataType

logger = logging.getLogger(__name__)

MAX_METADATA_LENGTH = 256
MAX_DESCRIPTION_LENGTH = 512
MAX_LOCATION_LENGTH = 100

MIN_REWARD_RATE = 1
MAX_REWARD_RATE = 50
MIN_VALIDATION_THRESHOLD = 1
MAX_VALIDATION_THRESHOLD = 10


def _reject(kind: ErrorKind, message: str) -> RegistryError:
    logger.debug("Validation failed: %s (%s)", kind.value, message)
    return registry_error(kind, message)


def _bounded_text(value: str, max_length: int) -> bool:
    return isinstance(value, str) and 0 < len(value) <= max_length


# ---------------------------------------------------------------------------
# Individual rules
# ---------------------------------------------------------------------------


def check_hash(data_hash: bytes) -> None:
    if not isinstance(data_hash, (bytes, bytearray)) or len(data_hash) != HASH_LENGTH:
        length = len(data_hash) if isinstance(data_hash, (bytes, bytearray)) else "n/a"
        raise _reject(ErrorKind.INVALID_HASH, f"data hash must be {HASH_LENGTH} bytes, got {length}")


def check_metadata(metadata: str) -> None:
    if not _bounded_text(metadata, MAX_METADATA_LENGTH):
        raise _reject(ErrorKind.INVALID_METADATA, f"metadata must be 1-{MAX_METADATA_LENGTH} chars")


def parse_category(category: str | Category) -> Category:
    try:
        return Category(category)
    except ValueError:
        raise _reject(ErrorKind.INVALID_CATEGORY, f"unknown category {category!r}") from None


def parse_data_type(data_type: str | DataType) -> DataType:
    try:
        return DataType(data_type)
    except ValueError:
        raise _reject(ErrorKind.INVALID_DATA_TYPE, f"unknown data type {data_type!r}") from None


def check_description(description: str) -> None:
    if not _bounded_text(description, MAX_DESCRIPTION_LENGTH):
        raise _reject(
            ErrorKind.INVALID_DESCRIPTION,
            f"description must be 1-{MAX_DESCRIPTION_LENGTH} chars",
        )


def check_location(location: str) -> None:
    if not isinstance(location, str) or len(location) > MAX_LOCATION_LENGTH:
        raise _reject(ErrorKind.INVALID_LOCATION, f"location must be at most {MAX_LOCATION_LENGTH} chars")


def check_expiry(expiry: int, current_height: int) -> None:
    if expiry <= current_height:
        raise _reject(
            ErrorKind.INVALID_EXPIRY,
            f"expiry {expiry} must be after current height {current_height}",
        )


def check_points(points: int) -> None:
    if points < 0:
        raise _reject(ErrorKind.INVALID_POINTS, f"initial points cannot be negative: {points}")


# ---------------------------------------------------------------------------
# Composite rule sets
# ---------------------------------------------------------------------------


def validate_submission(
    *,
    data_hash: bytes,
    metadata: str,
    category: str | Category,
    data_type: str | DataType,
    description: str,
    location: str,
    expiry: int,
    initial_points: int,
    current_height: int,
) -> tuple[Category, DataType]:
    """Apply the caller-local submission rules; first failure wins.

    Returns the parsed ``(category, data_type)`` pair.
    """
    check_hash(data_hash)
    check_metadata(metadata)
    parsed_category = parse_category(category)
    parsed_data_type = parse_data_type(data_type)
    check_description(description)
    check_location(location)
    check_expiry(expiry, current_height)
    check_points(initial_points)
    return parsed_category, parsed_data_type


def validate_update_fields(update_metadata: str, update_description: str) -> None:
    """Updates share the submission bounds but report a single kind."""
    if not _bounded_text(update_metadata, MAX_METADATA_LENGTH):
        raise _reject(ErrorKind.INVALID_UPDATE_PARAM, f"metadata must be 1-{MAX_METADATA_LENGTH} chars")
    if not _bounded_text(update_description, MAX_DESCRIPTION_LENGTH):
        raise _reject(
            ErrorKind.INVALID_UPDATE_PARAM,
            f"description must be 1-{MAX_DESCRIPTION_LENGTH} chars",
        )


# ---------------------------------------------------------------------------
# Parameter rules
# ---------------------------------------------------------------------------


def check_fee(fee: int) -> None:
    if fee < 0:
        raise _reject(ErrorKind.INVALID_FEE, f"submission fee cannot be negative: {fee}")


def check_reward_rate(rate: int) -> None:
    if not MIN_REWARD_RATE <= rate <= MAX_REWARD_RATE:
        raise _reject(ErrorKind.INVALID_RATE, f"reward rate must be {MIN_REWARD_RATE}-{MAX_REWARD_RATE}")


def check_validation_threshold(threshold: int) -> None:
    if not MIN_VALIDATION_THRESHOLD <= threshold <= MAX_VALIDATION_THRESHOLD:
        raise _reject(
            ErrorKind.INVALID_THRESHOLD,
            f"validation threshold must be {MIN_VALIDATION_THRESHOLD}-{MAX_VALIDATION_THRESHOLD}",
        )
