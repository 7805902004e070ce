import functools
import logging

from crossvalidation.utils.exceptions import CrossValidationError


def handle_search_errors(operation_name: str):
    """
    Decorator for engine entry points (``execute`` methods).

    Package errors propagate unchanged. Anything else is logged with its
    traceback on the engine's logger and re-raised as CrossValidationError,
    chained to the original exception.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(engine, *args, **kwargs):
            try:
                return func(engine, *args, **kwargs)
            except CrossValidationError:
                raise
            except Exception as e:
                logger = getattr(engine, 'logger', None) or logging.getLogger(__name__)
                logger.error(f"{operation_name} failed in {type(engine).__name__}: {e}", exc_info=True)
                raise CrossValidationError(f"{operation_name} failed: {e}") from e
        return wrapper
    return decorator
