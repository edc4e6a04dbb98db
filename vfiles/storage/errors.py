"""Storage error hierarchy."""


class StorageError(Exception):
    """Base class for durable store failures."""


class TransactionError(StorageError):
    """A transaction failed and was rolled back."""


class PartialWriteError(StorageError):
    """Some items of a write could not be applied."""

    def __init__(self, message: str, failures: list[str]):
        super().__init__(message)
        self.failures = failures
