"""
Service decorators for error translation and call logging.
"""
import functools
from typing import Callable, TypeVar

from botocore.exceptions import BotoCoreError, ClientError
from logger_config import get_logger
from utils.exceptions import translate_error

logger = get_logger(__name__)

F = TypeVar('F', bound=Callable)


def aws_operation(operation: str) -> Callable[[F], F]:
    """
    Decorator for service methods that make a single AWS call.

    Provides:
    - Debug logging of each call
    - Translation of botocore errors into ServiceOperationError

    No retry is attempted; the first failure is raised to the caller.

    Args:
        operation: AWS operation name used in logs and error details

    Returns:
        Decorator wrapping the service method
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger.debug(f'Calling {operation}')
            try:
                return func(*args, **kwargs)
            except (ClientError, BotoCoreError) as e:
                error = translate_error(e, operation)
                logger.debug(
                    f'{operation} failed with {error.detail.code.value}: {error.message}'
                )
                raise error from e

        return wrapper  # type: ignore[return-value]

    return decorator
