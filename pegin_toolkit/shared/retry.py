"""
Retry utilities for collaborator transport failures.

The proof engine itself never retries: a failed fetch aborts the whole
assembly. Retrying is the job of the concrete collaborators (bitcoind,
Electrum, L2 bridge clients), which wrap their raw transport calls with the
helpers below before translating the final failure into an UpstreamException.

Exception Handling:
- By default, retries on RetryableException and transport-level errors
- NonRetryableException is never retried (propagates immediately)
- Can customize retryable_exceptions per operation
"""

import asyncio
from typing import Any, Callable, Optional, Tuple, Type

import httpx

from pegin_toolkit.shared.exceptions import RetryableException
from pegin_toolkit.shared.logging import get_logger

logger = get_logger(__name__)

# Transport-level failures only: RPC error payloads are answers, not outages
DEFAULT_RETRYABLE_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    RetryableException,
    httpx.TransportError,
    asyncio.TimeoutError,
    ConnectionError,
    TimeoutError,
    OSError,
)


def _compute_delay(
    attempt: int, base_delay: float, max_delay: float, exponential: bool
) -> float:
    if exponential:
        return min(base_delay * (2**attempt), max_delay)
    return base_delay


async def retry_async_operation(
    operation: Callable[..., Any],
    *args: Any,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential: bool = True,
    retryable_exceptions: Optional[Tuple[Type[Exception], ...]] = None,
    operation_name: Optional[str] = None,
    **kwargs: Any,
) -> Any:
    """
    Retry an async operation with configurable backoff.

    Args:
        operation: Async function to call
        *args: Positional arguments for the operation
        max_attempts: Maximum attempts, including the first one
        base_delay: Initial delay between retries
        max_delay: Maximum delay between retries
        exponential: Use exponential backoff
        retryable_exceptions: Exception types to retry on
        operation_name: Optional name for logging
        **kwargs: Keyword arguments for the operation

    Returns:
        Result of the operation

    Example:
        raw_tx = await retry_async_operation(
            electrum.request,
            "blockchain.transaction.get",
            [txid],
            max_attempts=3,
            operation_name="get_transaction",
        )
    """
    if retryable_exceptions is None:
        retryable_exceptions = DEFAULT_RETRYABLE_EXCEPTIONS

    name = operation_name or getattr(operation, "__name__", "operation")
    last_exception: Optional[Exception] = None

    for attempt in range(max_attempts):
        try:
            return await operation(*args, **kwargs)
        except retryable_exceptions as e:
            last_exception = e

            if attempt < max_attempts - 1:
                delay = _compute_delay(attempt, base_delay, max_delay, exponential)
                logger.warning(
                    f"Attempt {attempt + 1}/{max_attempts} failed for "
                    f"{name}: {e}. Retrying in {delay:.1f}s..."
                )
                await asyncio.sleep(delay)

    if last_exception:
        raise last_exception
    raise RuntimeError(
        "Unexpected state: no exception but all attempts exhausted"
    )


class RetryConfig:
    """
    Configuration class for retry behavior.

    Shared by a collaborator across all of its calls.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential: bool = True,
        retryable_exceptions: Optional[Tuple[Type[Exception], ...]] = None,
    ):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential = exponential
        self.retryable_exceptions = (
            retryable_exceptions or DEFAULT_RETRYABLE_EXCEPTIONS
        )

    def with_attempts(self, max_attempts: int) -> "RetryConfig":
        """Copy of this config with a different attempt budget."""
        return RetryConfig(
            max_attempts=max_attempts,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            exponential=self.exponential,
            retryable_exceptions=self.retryable_exceptions,
        )

    async def run(
        self,
        operation: Callable[..., Any],
        *args: Any,
        operation_name: Optional[str] = None,
        **kwargs: Any,
    ) -> Any:
        """Run ``operation`` under this retry policy."""
        return await retry_async_operation(
            operation,
            *args,
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            exponential=self.exponential,
            retryable_exceptions=self.retryable_exceptions,
            operation_name=operation_name,
            **kwargs,
        )


# Pre-configured retry configs for common use cases
RPC_RETRY_CONFIG = RetryConfig(
    max_attempts=3,
    base_delay=1.0,
    max_delay=10.0,
    exponential=True,
)
