"""Shelfmark error types."""


class ShelfmarkError(Exception):
    """Base error for all shelfmark failures."""


class EmbeddingProviderError(ShelfmarkError):
    """The embedding provider failed or timed out."""


class DimensionMismatch(ShelfmarkError):
    """Vectors of different lengths or kinds were compared."""


class PersistenceError(ShelfmarkError):
    """Cache backend read/write failed, or stored bytes are unusable."""


class UnknownMethodError(ShelfmarkError):
    """No vectorization method is registered under the given id."""
