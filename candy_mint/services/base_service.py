"""
Base service class for Candy Mint services.

This module provides a base class for all services in the Candy Mint
package, with common functionality for error handling, timeouts, and logging.
"""

import asyncio
import logging
import time
from functools import wraps
from typing import Any, Callable, Optional

from candy_mint.utils.errors import CandyMintError, RpcError, RpcTimeoutError


# Configure logger
logger = logging.getLogger(__name__)


def handle_errors(error_type: type = RpcError):
    """
    Decorator to handle errors in service methods.

    Errors that are already ``CandyMintError`` pass through unchanged;
    timeouts become ``RpcTimeoutError`` and anything else ``error_type``.

    Args:
        error_type: The type of error to raise if an exception occurs

    Returns:
        Decorated function
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except CandyMintError as e:
                logger.debug(f"Error in {func.__name__}: {str(e)}")
                raise
            except asyncio.TimeoutError as e:
                logger.exception(f"Timeout in {func.__name__}: {str(e)}")
                raise RpcTimeoutError(f"Operation timed out: {func.__name__}", timeout=0.0) from e
            except Exception as e:
                logger.exception(f"Error in {func.__name__}: {str(e)}")
                raise error_type(f"Error in {func.__name__}: {str(e)}") from e
        return wrapper
    return decorator


class BaseService:
    """
    Base service class with common functionality.

    This class provides:
    - Timeout management
    - Logging
    - Performance tracking
    """

    def __init__(self, timeout: float = 30.0, logger: Optional[logging.Logger] = None):
        """
        Initialize the base service.

        Args:
            timeout: Default timeout for service operations in seconds
            logger: Optional logger instance
        """
        self.timeout = timeout
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    def log_with_context(self, level: str, message: str, **context: Any) -> None:
        """Log a message with keyword context appended."""
        log_method = getattr(self.logger, level.lower(), self.logger.info)
        if context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in context.items())
            log_method(f"{message} [{context_str}]")
        else:
            log_method(message)

    def log_timing(self, operation_name: str) -> "TimingContextManager":
        """
        Create a context manager to log timing information.

        Args:
            operation_name: Name of the operation

        Returns:
            Timing context manager
        """
        return TimingContextManager(operation_name, self.logger)


class TimingContextManager:
    """Context manager to log timing information."""

    def __init__(self, operation_name: str, logger: logging.Logger):
        self.operation_name = operation_name
        self.logger = logger
        self.start_time = 0.0

    async def __aenter__(self) -> "TimingContextManager":
        self.start_time = time.time()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        elapsed = time.time() - self.start_time
        if exc_val is not None:
            self.logger.error(
                f"{self.operation_name} failed after {elapsed:.2f}s: {str(exc_val)}"
            )
        else:
            self.logger.debug(f"{self.operation_name} completed in {elapsed:.2f}s")
