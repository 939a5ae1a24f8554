import functools
import logging
from utils.exceptions import SearchComparisonException

def handle_engine_errors(operation_name: str):
    """
    Decorator for consistent error logging in engines.

    Errors are logged with the operation name and re-raised unchanged so
    callers see the original scikit-learn or I/O exception type.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except SearchComparisonException:
                raise
            except Exception as e:
                logger = args[0].logger if args and hasattr(args[0], 'logger') else logging.getLogger()
                logger.error(f"{operation_name} failed: {e}", exc_info=True)
                raise
        return wrapper
    return decorator
