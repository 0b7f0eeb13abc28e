"""
BlockQL Exceptions

Custom exception classes for block selection and retrieval.
"""

from typing import Any, Optional


class BlockQLException(Exception):
    """Base exception for BlockQL."""
    pass


class ValidationError(BlockQLException):
    """Selector arguments are ambiguous, missing, out of bounds or too large."""
    pass


class ResolutionError(BlockQLException):
    """A hash or tag endpoint could not be resolved to a block height."""
    pass


class FetchError(BlockQLException):
    """A block fetch failed or returned nothing during fan-out."""

    def __init__(self, message: str, identifier: Optional[Any] = None):
        super().__init__(message)
        self.identifier = identifier


class BlockSourceError(BlockQLException):
    """Upstream data source communication error."""
    pass


class ConfigurationError(BlockQLException):
    """Configuration error."""
    pass
