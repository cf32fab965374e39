"""Error kinds raised by the storefront domain.

Validation and lookup failures reuse Protean's own exceptions so that
``register_exception_handlers`` renders them; the kinds below cover the
cases Protean has no vocabulary for.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError

NotFoundError = ObjectNotFoundError


class InvalidTransitionError(ValidationError):
    """A requested state change is not allowed by the state machine."""

    def __init__(self, current, target, reason=None):
        self.current = current
        self.target = target
        message = reason or f"Cannot transition from {current} to {target}"
        super().__init__({"status": [message]})


class ConcurrencyConflict(Exception):
    """A shared counter or aggregate kept changing underneath us.

    Raised only after bounded internal retries are exhausted; callers may
    safely retry the whole request.
    """

    def __init__(self, message, attempts=None):
        self.attempts = attempts
        super().__init__(message)


class AuthenticationError(Exception):
    """Credentials or session token could not be verified."""


class AccessDeniedError(Exception):
    """The authenticated actor lacks the role or ownership required."""


__all__ = [
    "AccessDeniedError",
    "AuthenticationError",
    "ConcurrencyConflict",
    "InvalidTransitionError",
    "NotFoundError",
    "ValidationError",
]
