"""Custom exceptions for question service errors."""


class ProviderError(Exception):
    """Base exception for question service errors."""
    pass


class ProviderUnavailable(ProviderError):
    """Network/API failure, missing API key, or malformed response."""
    pass


class EmptyResult(ProviderError):
    """Service answered, but with zero questions."""
    pass
