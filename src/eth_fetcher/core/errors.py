"""Error taxonomy shared by resolution, submission and ingestion."""


class EthFetcherError(Exception):
    """Base class for all service errors."""


class NotFoundError(EthFetcherError):
    """Requested row does not exist in the store."""


class DuplicateKeyError(EthFetcherError):
    """Insert hit a unique constraint; the row already exists."""


class PendingError(EthFetcherError):
    """Transaction is known to the node but not yet included in a block."""

    def __init__(self, tx_hash: str):
        super().__init__(f"transaction {tx_hash} is still pending")
        self.tx_hash = tx_hash


class FetchError(EthFetcherError):
    """Node query failed for a non-transient reason."""

    def __init__(self, message: str, tx_hash: str | None = None):
        super().__init__(message)
        self.tx_hash = tx_hash


class ConfirmationTimeoutError(EthFetcherError, TimeoutError):
    """Receipt did not appear before the confirmation deadline."""

    def __init__(self, tx_hash: str, timeout: float):
        super().__init__(f"transaction {tx_hash} not confirmed within {timeout}s")
        self.tx_hash = tx_hash
        self.timeout = timeout


class ConfigurationError(EthFetcherError):
    """Startup configuration is unusable (missing key, unreachable node)."""


class SubscriptionError(EthFetcherError):
    """Push subscription failed or was closed by the node."""


class InvalidCredentialsError(EthFetcherError):
    """Password does not match the stored hash."""
