"""
Exceptions raised while resolving the metadata action build context.
"""


class ContextError(Exception):
    """Base exception for context resolution errors."""
    pass


class InvalidContextSourceError(ContextError):
    """Raised when the context source is neither workflow nor git."""
    pass


class MissingDataError(ContextError):
    """Raised when data required to build the context is absent."""
    pass
