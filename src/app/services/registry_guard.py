import asyncio
import functools
import logging

from sqlalchemy.exc import SQLAlchemyError

from config import ApplicationConfig
from src.libs.result import Error, Return

logger = logging.getLogger(__name__)

UNAVAILABLE = Error("UNAVAILABLE", "Authentication service temporarily unavailable")


def bounded_registry_call(func):
    """
    Bound a use case method by REGISTRY_TIMEOUT_SECONDS.

    A timeout or storage failure becomes a retryable UNAVAILABLE result,
    never a security failure. On timeout the inner coroutine is cancelled
    and its unit of work rolls back, so a half-applied rotation is never
    committed.
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await asyncio.wait_for(
                func(*args, **kwargs), timeout=ApplicationConfig.REGISTRY_TIMEOUT_SECONDS
            )
        except TimeoutError:
            logger.error(f"Registry call {func.__qualname__} timed out")
            return Return.err(UNAVAILABLE)
        except SQLAlchemyError as exc:
            logger.error(f"Registry call {func.__qualname__} failed: {exc.__class__.__name__}")
            return Return.err(UNAVAILABLE)

    return wrapper
