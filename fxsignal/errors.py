"""Exceptions raised across the signal engine.

Only ``UnknownPairError`` ever reaches callers of the engine; provider
failures are absorbed by the quote source and replaced with synthetic data.
"""


class FXSignalError(Exception):
    """Base class for engine errors."""


class UnknownPairError(FXSignalError, ValueError):
    def __init__(self, pair: str):
        super().__init__(f"Unknown pair: {pair}")
        self.pair = pair


class ProviderError(FXSignalError):
    """External quote provider returned an error or an unusable payload."""
