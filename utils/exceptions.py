"""
Custom exception hierarchy for the Search Comparison System.
"""

class SearchComparisonException(Exception):
    """Base exception for all system errors."""
    pass

class ConfigurationError(SearchComparisonException):
    """Configuration validation failed."""
    pass

class DataValidationError(SearchComparisonException):
    """Dataset loading or validation failed."""
    pass

class InvalidInputError(SearchComparisonException):
    """Reporter received an empty result set or a bad top_n."""
    pass
