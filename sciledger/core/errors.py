"""Registry error taxonomy.

Every refused operation raises a ``RegistryError`` subclass carrying an
``ErrorKind`` and a stable numeric code. Callers that need a code for
display or RPC framing read ``exc.code``; callers that branch on the
failure catch the subclass or compare ``exc.kind``.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Failure kinds, valued by their stable name."""

    NOT_AUTHORIZED = "NotAuthorized"
    INVALID_HASH = "InvalidHash"
    INVALID_METADATA = "InvalidMetadata"
    INVALID_CATEGORY = "InvalidCategory"
    ALREADY_EXISTS = "AlreadyExists"
    NOT_FOUND = "NotFound"
    INVALID_STATUS = "InvalidStatus"
    CAPACITY_EXCEEDED = "CapacityExceeded"
    INVALID_AUTHORITY = "InvalidAuthority"
    INVALID_DESCRIPTION = "InvalidDescription"
    INVALID_LOCATION = "InvalidLocation"
    INVALID_DATA_TYPE = "InvalidDataType"
    INVALID_THRESHOLD = "InvalidThreshold"
    AUTHORITY_NOT_VERIFIED = "AuthorityNotVerified"
    INVALID_UPDATE_PARAM = "InvalidUpdateParam"
    UPDATE_NOT_ALLOWED = "UpdateNotAllowed"
    INVALID_FEE = "InvalidFee"
    INVALID_RATE = "InvalidRate"
    INVALID_EXPIRY = "InvalidExpiry"
    INVALID_POINTS = "InvalidPoints"
    ALREADY_CONFIGURED = "AlreadyConfigured"
    PAYMENT_FAILED = "PaymentFailed"


ERROR_CODES: dict[ErrorKind, int] = {
    ErrorKind.NOT_AUTHORIZED: 100,
    ErrorKind.INVALID_HASH: 101,
    ErrorKind.INVALID_METADATA: 102,
    ErrorKind.INVALID_CATEGORY: 103,
    ErrorKind.ALREADY_EXISTS: 105,
    ErrorKind.NOT_FOUND: 106,
    ErrorKind.INVALID_STATUS: 107,
    ErrorKind.CAPACITY_EXCEEDED: 108,
    ErrorKind.INVALID_AUTHORITY: 109,
    ErrorKind.INVALID_DESCRIPTION: 110,
    ErrorKind.INVALID_LOCATION: 111,
    ErrorKind.INVALID_DATA_TYPE: 112,
    ErrorKind.INVALID_THRESHOLD: 113,
    ErrorKind.AUTHORITY_NOT_VERIFIED: 114,
    ErrorKind.INVALID_UPDATE_PARAM: 115,
    ErrorKind.UPDATE_NOT_ALLOWED: 116,
    ErrorKind.INVALID_FEE: 117,
    ErrorKind.INVALID_RATE: 118,
    ErrorKind.INVALID_EXPIRY: 119,
    ErrorKind.INVALID_POINTS: 120,
    ErrorKind.ALREADY_CONFIGURED: 121,
    ErrorKind.PAYMENT_FAILED: 122,
}


class RegistryError(RuntimeError):
    """Base class for every refused registry operation."""

    kind: ErrorKind

    def __init__(self, kind: ErrorKind, message: str = "") -> None:
        self.kind = kind
        super().__init__(message or kind.value)

    @property
    def code(self) -> int:
        return ERROR_CODES[self.kind]

    def __str__(self) -> str:
        return f"{self.kind.value} (u{self.code}): {self.args[0]}"


class ValidationError(RegistryError):
    """Structural or format violation in caller-supplied input."""


class AuthorizationError(RegistryError):
    """Caller lacks the role required for the action."""


class LifecycleError(RegistryError):
    """Action attempted on a contribution in the wrong lifecycle state."""


class ConflictError(RegistryError):
    """Duplicate data hash."""


class NotFoundError(RegistryError):
    """Referenced contribution id has no record."""


class ConfigurationError(RegistryError):
    """Parameter or authority configuration violation."""


class CapacityError(RegistryError):
    """Registry is at its configured maximum."""


class PaymentFailedError(RegistryError):
    """Submission fee could not be collected."""


_KIND_TO_CLASS: dict[ErrorKind, type[RegistryError]] = {
    ErrorKind.NOT_AUTHORIZED: AuthorizationError,
    ErrorKind.AUTHORITY_NOT_VERIFIED: AuthorizationError,
    ErrorKind.ALREADY_EXISTS: ConflictError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.INVALID_STATUS: LifecycleError,
    ErrorKind.UPDATE_NOT_ALLOWED: LifecycleError,
    ErrorKind.CAPACITY_EXCEEDED: CapacityError,
    ErrorKind.ALREADY_CONFIGURED: ConfigurationError,
    ErrorKind.INVALID_AUTHORITY: ConfigurationError,
    ErrorKind.INVALID_FEE: ConfigurationError,
    ErrorKind.INVALID_RATE: ConfigurationError,
    ErrorKind.INVALID_THRESHOLD: ConfigurationError,
    ErrorKind.PAYMENT_FAILED: PaymentFailedError,
}


def registry_error(kind: ErrorKind, message: str = "") -> RegistryError:
    """Build the ``RegistryError`` subclass matching *kind*."""
    cls = _KIND_TO_CLASS.get(kind, ValidationError)
    return cls(kind, message)
