"""Exception hierarchy for the Soroban introspection layer."""

from enum import Enum
from typing import Any


class SorobanIntrospectError(Exception):
    """Base exception for all introspection, conversion and execution errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NetworkError(SorobanIntrospectError):
    """Raised when network/connection issues occur."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class ValidationError(SorobanIntrospectError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class ParseFailure(str, Enum):
    """Reason a type expression was rejected."""

    EMPTY = "empty"
    TOO_LONG = "too_long"
    INVALID_CHARACTERS = "invalid_characters"
    UNBALANCED_BRACKETS = "unbalanced_brackets"
    NESTING_TOO_DEEP = "nesting_too_deep"
    WRONG_ARITY = "wrong_arity"


class ParseError(SorobanIntrospectError):
    """Raised when a type expression is malformed or exceeds parsing limits."""

    def __init__(self, message: str, reason: ParseFailure, expression: str | None = None):
        super().__init__(message, {"reason": reason.value})
        self.reason = reason
        self.expression = expression


class DetectionError(SorobanIntrospectError):
    """Raised when a contract's executable kind cannot be determined."""

    def __init__(
        self,
        message: str,
        contract_id: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.contract_id = contract_id


class MissingContractDataError(DetectionError):
    """Raised when the ledger holds no published contract instance or executable."""


class ConversionError(ValidationError):
    """Raised when a native value cannot be converted to the declared wire type."""


class ConfigurationError(ValidationError):
    """Raised for unsupported execution configuration. Never retried."""


class SubmissionError(SorobanIntrospectError):
    """Raised when a signer backend fails before a transaction hash exists."""


class ConfirmationFailedError(SorobanIntrospectError):
    """Raised when the ledger reports a submitted transaction as failed."""

    def __init__(self, message: str, tx_hash: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.tx_hash = tx_hash


class ConfirmationTimeoutError(SorobanIntrospectError):
    """Raised when confirmation polling exhausts its attempt limit."""

    def __init__(self, message: str, tx_hash: str | None = None, attempts: int = 0):
        super().__init__(message, {"attempts": attempts})
        self.tx_hash = tx_hash
        self.attempts = attempts
