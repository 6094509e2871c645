"""Custom exceptions for the negotiation engine."""


class NegotiationEngineError(Exception):
    """Base exception for the negotiation engine."""

    retryable: bool = False


class ValidationError(NegotiationEngineError):
    """Raised when validation fails."""

    pass


class NotFoundError(NegotiationEngineError):
    """Raised when a resource is not found."""

    pass


class ConfigurationError(NegotiationEngineError):
    """Raised when configuration is invalid."""

    pass


class PersistenceError(NegotiationEngineError):
    """Raised when the backing store rejects a read or write.

    The turn that raised it is not complete and may be retried by the caller.
    """

    retryable = True


class TurnInProgressError(NegotiationEngineError):
    """Raised when a conversation already has an AI turn in flight."""

    retryable = True


class ConversationClosedError(NegotiationEngineError):
    """Raised when a terminal conversation receives a new debtor message."""

    pass
