"""
A lazy, single-use asynchronous stream, and an adapter that turns one-shot
backend calls into streams.
"""


import functools
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Awaitable,
    Callable,
    Iterable,
    List,
    TypeVar,
    Union,
)

import aioitertools
from loguru import logger

from .models import Outcome
from .parallel import fan_out, fan_out_map, iter_outcomes

ItemType = TypeVar("ItemType")
MappedType = TypeVar("MappedType")


class StreamConsumedError(RuntimeError):
    """
    Raised when someone tries to iterate over a stream a second time.
    """


class Stream(AsyncIterable[ItemType]):
    """
    A lazy asynchronous stream. Nothing happens until the stream is iterated,
    and it can only be iterated once.

    Errors raised by the underlying source are raised to whoever is iterating
    the stream, after which the stream is finished. Use `outcomes()` to get
    errors as items instead.
    """

    def __init__(self, source: Callable[[], AsyncIterable[ItemType]]):
        """
        Args:
            source: Zero-argument function that produces the underlying
                iterable. It will not be called until the stream is first
                iterated.

        """
        self.__source = source
        self.__consumed = False

    @classmethod
    def from_iterable(
        cls, items: Union[Iterable[ItemType], AsyncIterable[ItemType]]
    ) -> "Stream[ItemType]":
        """
        Creates a stream that produces the items from an existing iterable.

        Args:
            items: The items to produce. Can be sync or async.

        Returns:
            The stream.

        """

        async def _produce() -> AsyncIterator[ItemType]:
            if isinstance(items, AsyncIterable):
                async for item in items:
                    yield item
            else:
                for item in items:
                    yield item

        return cls(_produce)

    @property
    def consumed(self) -> bool:
        """
        Returns:
            True iff iteration of this stream has already started.

        """
        return self.__consumed

    def __aiter__(self) -> AsyncIterator[ItemType]:
        if self.__consumed:
            raise StreamConsumedError("This stream has already been consumed.")
        self.__consumed = True

        return aiter(self.__source())

    def map(
        self, func: Callable[[ItemType], MappedType]
    ) -> "Stream[MappedType]":
        """
        Applies a function to every item.

        Args:
            func: The function to apply.

        Returns:
            A new stream with the transformed items.

        """

        async def _mapped() -> AsyncIterator[MappedType]:
            async for item in self:
                yield func(item)

        return Stream(_mapped)

    def parallel(self, limit: int) -> "Stream[Outcome]":
        """
        Drains a stream of streams, running up to `limit` of them at once.

        Args:
            limit: The maximum number of sub-streams to run concurrently.

        Returns:
            A stream of every outcome from every sub-stream, in completion
            order.

        """
        return Stream(lambda: fan_out(self, limit))

    def parallel_map(
        self, func: Callable[[ItemType], Any], limit: int
    ) -> "Stream[Outcome]":
        """
        Creates a sub-stream for every item and drains them, running up to
        `limit` of them at once. Unlike `map(func).parallel(limit)`, an
        error raised by `func` itself only affects the item it was called
        on.

        Args:
            func: Creates the sub-stream (or awaitable) for an item.
            limit: The maximum number of sub-streams to run concurrently.

        Returns:
            A stream of every outcome from every sub-stream, in completion
            order. There is at least one outcome per item.

        """
        return Stream(lambda: fan_out_map(self, func, limit))

    def outcomes(self) -> "Stream[Outcome]":
        """
        Returns:
            A stream where each item of this stream is wrapped in an
            `Outcome`. An error becomes the final outcome instead of being
            raised.

        """
        return Stream(lambda: iter_outcomes(self))

    def take(self, count: int) -> "Stream[ItemType]":
        """
        Args:
            count: The maximum number of items to produce.

        Returns:
            A stream with at most the first `count` items of this one.

        """
        return Stream(lambda: aioitertools.islice(self, count))

    async def collect(self) -> List[ItemType]:
        """
        Consumes the entire stream.

        Returns:
            All the items, in order.

        """
        return [item async for item in self]

    async def first(self) -> ItemType:
        """
        Consumes only the first item of the stream.

        Raises:
            `ValueError` if the stream produced nothing.

        Returns:
            The first item.

        """
        async for item in self:
            return item
        raise ValueError("Stream ended without producing anything.")


def wrap_call(
    func: Callable[..., Awaitable[ItemType]]
) -> Callable[..., Stream[ItemType]]:
    """
    Turns a one-shot asynchronous call into a function that returns a stream
    with exactly one item: the result of the call. The call is not made
    until the stream is iterated. Errors from the call are raised from the
    stream unchanged.

    Args:
        func: The coroutine function to wrap.

    Returns:
        The wrapped function. It takes the same arguments as `func`.

    """
    name = getattr(func, "__name__", repr(func))

    @functools.wraps(func)
    def _wrapped(*args: Any, **kwargs: Any) -> Stream[ItemType]:
        async def _call() -> AsyncIterator[ItemType]:
            logger.debug("Calling {}.", name)
            yield await func(*args, **kwargs)

        return Stream(_call)

    return _wrapped
