import functools
from typing import Any, Awaitable, Callable, TypeVar

from loguru import logger
from pymongo.errors import PyMongoError

from convohub.core.exceptions import StoreUnavailable


T = TypeVar("T")


def store_operation(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Translate driver failures into StoreUnavailable so no pymongo error leaks upward."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await func(*args, **kwargs)
        except PyMongoError as exc:
            logger.error("Store operation {} failed: {}", func.__qualname__, exc)
            raise StoreUnavailable() from exc

    return wrapper
