"""
Structured error types for keel.

Provides a small hierarchy of typed errors carrying a category, a retry
flag and structured context, so callers can tell a timeout apart from a
validation failure by type rather than by parsing messages.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure family
    - **Explicit Retry Semantics:** Each error knows if it's retryable
    - **Rich Context:** Errors carry metadata for logging
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                        KeelError                          │
        │         (category, retryable, context, cause)             │
        ├──────────────────────────────────────────────────────────┤
        │                                                           │
        │  TransientError       ValidationError     ConfigError     │
        │  (retryable=True)     (VALIDATION)        (CONFIG)        │
        │       │                                        │          │
        │  OperationTimeoutError                 InvalidConfigError │
        │  (TIMEOUT)                                                │
        │                                                           │
        │  SchedulingError                                          │
        │  (SCHEDULING)                                             │
        └──────────────────────────────────────────────────────────┘

Examples:
    >>> error = OperationTimeoutError("fetch timed out")
    >>> error.retryable
    True
    >>> error.category
    <ErrorCategory.TIMEOUT: 'TIMEOUT'>

    >>> error = ValidationError("too short", field="username", constraint="length")
    >>> error.to_dict()["constraint"]
    'length'

Guardrails:
    ❌ DON'T: Match on error messages to detect timeouts
    ✅ DO: ``except OperationTimeoutError``

    ❌ DON'T: Swallow the original exception
    ✅ DO: Pass it as cause= for error chaining

Tags:
    error-handling, exception-hierarchy, retry-logic, error-context, keel-core

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        VALIDATION: Malformed or disallowed input
        CONFIG: Missing or invalid settings
        TIMEOUT: A guarded operation exceeded its deadline
        SCHEDULING: Repeating task / timer bookkeeping failures
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    TIMEOUT = "TIMEOUT"
    SCHEDULING = "SCHEDULING"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only non-None fields are emitted by ``to_dict()``; anything that does not
    fit a named field goes into ``metadata``.

    Examples:
        >>> ctx = ErrorContext(operation="with_timeout", metadata={"timeout": 0.5})
        >>> ctx.to_dict()
        {'operation': 'with_timeout', 'timeout': 0.5}
    """

    operation: str | None = None
    task: str | None = None
    parameter: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "task", "parameter"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class KeelError(Exception):
    """
    Base exception for all keel errors.

    Subclasses set ``default_category`` and ``default_retryable`` to give
    sensible defaults for their family; both can be overridden per instance.

    Examples:
        >>> error = KeelError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.retryable
        False

        >>> error = KeelError("Fetch failed").with_context(operation="sync")
        >>> error.context.operation
        'sync'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> KeelError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ValidationError("Bad id").with_context(operation="import")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }

        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict

        if self.cause is not None:
            result["cause"] = str(self.cause)

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# TRANSIENT ERRORS (Usually Retryable)
# =============================================================================


class TransientError(KeelError):
    """
    Temporary error that may succeed on retry.

    keel itself never retries; the flag is a hint for callers.
    """

    default_category = ErrorCategory.TIMEOUT
    default_retryable = True


class OperationTimeoutError(TransientError):
    """A guarded operation did not settle before its deadline."""

    default_category = ErrorCategory.TIMEOUT


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(KeelError):
    """
    Input validation error.

    Never retryable - the input must be fixed.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.constraint = constraint
        if field is not None:
            self.context.parameter = field

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        if self.constraint:
            result["constraint"] = self.constraint
        return result


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(KeelError):
    """Configuration error. Never retryable."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# SCHEDULING ERRORS
# =============================================================================


class SchedulingError(KeelError):
    """Repeating task or timer bookkeeping error."""

    default_category = ErrorCategory.SCHEDULING
    default_retryable = False


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: BaseException) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, KeelError):
        return error.retryable
    return False


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "KeelError",
    "TransientError",
    "OperationTimeoutError",
    "ValidationError",
    "ConfigError",
    "InvalidConfigError",
    "SchedulingError",
    "is_retryable",
]
