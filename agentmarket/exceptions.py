"""Agent marketplace data-layer exception classes."""


class MarketError(Exception):
    """Base exception for all marketplace data-layer errors."""

    def __init__(
        self,
        code: str,
        message: str,
        operation: str | None = None,
        agent_id: str | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.operation = operation
        self.agent_id = agent_id
        super().__init__(f"[{code}] {message}")


class ConfigurationError(MarketError):
    """Raised when pool configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class ValidationError(MarketError):
    """Raised on invalid arguments (pagination, sort order) before any query runs."""

    pass


class NotFoundError(MarketError):
    """Raised when no row exists for a requested identifier."""

    pass


class QueryError(MarketError):
    """Raised when the store rejects or fails to execute a statement."""

    pass


class ScanError(MarketError):
    """Raised when a returned row does not match the expected projection."""

    pass


class TransactionError(MarketError):
    """Raised when a write transaction fails. The transaction is already rolled back."""

    pass
