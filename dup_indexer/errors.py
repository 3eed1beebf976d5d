"""Exceptions raised by the indexer."""


class ConsumedIndexerError(RuntimeError):
    """Raised when an indexer is used after `into_list()` or `into_iter()`."""
