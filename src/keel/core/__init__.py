"""Keel Core -- shared runtime utilities for backend services.

Manifesto:
    Every service needs the same small set of runtime helpers: short unique
    IDs, a username legality check, and a few async timing primitives that
    are easy to get subtly wrong. ``keel.core`` provides them once, with
    structured logging and typed errors around them.

Architecture::

    Layer 1 -- Type System & Errors
        errors.py          Structured error hierarchy (KeelError, OperationTimeoutError)
        protocols.py       ServerLike / Cancellable contracts

    Layer 2 -- Primitives
        ids.py             Random and deterministic identifiers
        usernames.py       Forbidden-username policy + username validation
        helpers.py         Small pure helpers (padding, dates, type checks)
        concurrency/       RepeatingTask, with_timeout, run_sequentially,
                           promisify_listen

    Layer 3 -- Cross-Cutting Concerns
        logging.py         Structured logging (structlog)
        settings.py        KeelSettings (pydantic-settings) + get_settings()

Tags:
    keel-core, foundation, identifiers, usernames, asyncio

Doc-Types:
    package-overview, architecture-map, module-index
"""

from keel.core.concurrency import (
    GuardedOperation,
    RepeatingTask,
    clear_interval,
    delay,
    promisify_listen,
    run_sequentially,
    set_interval,
    with_timeout,
)
from keel.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidConfigError,
    KeelError,
    OperationTimeoutError,
    SchedulingError,
    TransientError,
    ValidationError,
    is_retryable,
)
from keel.core.ids import (
    DEFAULT_ID_LENGTH,
    ID_ALPHABET,
    deterministic_identifier,
    random_identifier,
)
from keel.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_for_environment,
    configure_from_settings,
    configure_logging,
    get_logger,
    unbind_context,
)
from keel.core.protocols import Cancellable, ServerLike
from keel.core.usernames import (
    ANONYMOUS_USERNAME,
    FORBIDDEN_USERNAME_PATTERNS,
    UsernamePolicy,
    get_username_policy,
    is_forbidden_username,
    is_valid_username,
    validate_username,
)

__all__ = [
    # errors
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
    # ids
    "ID_ALPHABET",
    "DEFAULT_ID_LENGTH",
    "random_identifier",
    "deterministic_identifier",
    # usernames
    "ANONYMOUS_USERNAME",
    "FORBIDDEN_USERNAME_PATTERNS",
    "UsernamePolicy",
    "get_username_policy",
    "is_forbidden_username",
    "validate_username",
    "is_valid_username",
    # concurrency
    "RepeatingTask",
    "set_interval",
    "clear_interval",
    "GuardedOperation",
    "with_timeout",
    "delay",
    "run_sequentially",
    "promisify_listen",
    # protocols
    "ServerLike",
    "Cancellable",
    # logging
    "configure_logging",
    "configure_for_environment",
    "configure_from_settings",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
    # ---------- optional (explicit import) ----------
    # "KeelSettings", "get_settings",  # pydantic-settings
    # helpers: keel.core.helpers
]
