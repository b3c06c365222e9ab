"""Error taxonomy shared by the signup client and server."""


class SignupError(Exception):
    """Base class for signup pipeline errors."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SignupError):
    """Input rejected locally; no network attempt was made."""

    kind = "validation"


class TransientNetworkError(SignupError):
    """Server unreachable, timed out or answered with a retryable failure."""

    kind = "transient"


class PersistenceError(SignupError):
    """Server-side storage failure. Surfaced to users as transient."""

    kind = "transient"


class NotificationDispatchError(SignupError):
    """
    Email delivery failed.

    ``ambiguous`` is True when the provider may have accepted the message
    (timeouts, 5xx) and False when it was definitely not sent.
    """

    kind = "notification"

    def __init__(self, message: str, *, ambiguous: bool = False):
        super().__init__(message)
        self.ambiguous = ambiguous
