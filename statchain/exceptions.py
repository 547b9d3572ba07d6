"""
exceptions.py - Custom exceptions for the statchain package.
"""

class StatChainError(Exception):
    """Base exception for statchain errors."""
    pass

class InvalidInput(StatChainError):
    """Raised when a batch is empty or holds non-numeric samples."""
    pass

class IOFailure(StatChainError):
    """Raised when an external data file or the block log cannot be read or written."""
    pass

class ChainClosed(StatChainError):
    """Raised when appending to a chain whose worker pool has been shut down."""
    pass
