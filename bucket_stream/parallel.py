"""
Runs many single-item streams at once while limiting how many are in flight.
"""


import asyncio
import functools
import inspect
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Awaitable,
    Callable,
    Iterable,
    List,
    Set,
    Union,
)

from loguru import logger

from .models import Outcome

SourceType = Union[AsyncIterable[Any], Any]
"""
Things that `fan_out` knows how to run: async iterables or awaitables.
"""


async def iter_outcomes(source: AsyncIterable[Any]) -> AsyncIterator[Outcome]:
    """
    Wraps every item from an async iterable in an `Outcome`. If the iterable
    raises, the error is produced as the last outcome.

    Args:
        source: The iterable to wrap.

    Yields:
        The outcome for each item.

    """
    source_iter = aiter(source)
    while True:
        try:
            item = await anext(source_iter)
        except StopAsyncIteration:
            return
        except Exception as error:
            yield Outcome(error=error)
            return

        yield Outcome(value=item)


async def _drain(source: SourceType) -> List[Outcome]:
    """
    Runs a single source to completion.

    Args:
        source: The source to run.

    Returns:
        Every outcome it produced.

    """
    if inspect.isawaitable(source):
        try:
            return [Outcome(value=await source)]
        except Exception as error:
            return [Outcome(error=error)]

    return [outcome async for outcome in iter_outcomes(source)]


async def _apply(
    func: Callable[[Any], SourceType], item: Any
) -> List[Outcome]:
    """
    Creates a source from an item and runs it to completion.

    Args:
        func: Creates the source for the item.
        item: The item.

    Returns:
        Every outcome the source produced. If `func` itself raises, that is
        the only outcome.

    """
    try:
        source = func(item)
    except Exception as error:
        logger.debug("Failed to start work for item: {}", error)
        return [Outcome(error=error)]

    return await _drain(source)


async def _as_async_iter(
    items: Union[Iterable[Any], AsyncIterable[Any]]
) -> AsyncIterator[Any]:
    if isinstance(items, AsyncIterable):
        async for item in items:
            yield item
    else:
        for item in items:
            yield item


async def _run_limited(
    items: Union[Iterable[Any], AsyncIterable[Any]],
    start: Callable[[Any], Awaitable[List[Outcome]]],
    limit: int,
) -> AsyncIterator[Outcome]:
    """
    Runs `start` on every item, with at most `limit` of them at once.

    Args:
        items: The items to run.
        start: Runs one item and returns its outcomes. It must not raise.
        limit: The maximum number of items that can be running at once.

    Yields:
        Every outcome, in the order that they finish.

    """
    if limit < 1:
        raise ValueError(f"Concurrency limit must be at least 1, got {limit}.")

    items_iter = _as_async_iter(items)
    # Work that is currently running.
    pending: Set[asyncio.Task] = set()
    input_done = False

    try:
        while True:
            # Start as much new work as we have room for.
            while not input_done and len(pending) < limit:
                try:
                    item = await anext(items_iter)
                except StopAsyncIteration:
                    input_done = True
                    break
                except Exception as error:
                    logger.debug("Input failed, not starting anything else.")
                    input_done = True
                    yield Outcome(error=error)
                    break

                pending.add(asyncio.create_task(start(item)))
                logger.debug("Started new work, {} in flight.", len(pending))

            if not pending:
                # Everything is finished.
                break

            # Wait for at least one to finish.
            done, pending = await asyncio.wait(
                pending, return_when=asyncio.FIRST_COMPLETED
            )
            for task in done:
                for outcome in task.result():
                    yield outcome

    finally:
        # Only happens if the consumer stops iterating early.
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)


def fan_out(
    sources: Union[Iterable[SourceType], AsyncIterable[SourceType]],
    limit: int,
) -> AsyncIterator[Outcome]:
    """
    Runs a sequence of sources (usually single-item streams) concurrently.
    A failure in one source is reported as an outcome and does not stop the
    others.

    Args:
        sources: The sources to run. Each one may be an async iterable or an
            awaitable. It will not be pulled any faster than there is room to
            start new work.
        limit: The maximum number of sources that can be running at once.

    Yields:
        One outcome for every item or error produced by every source, in the
        order that they finish. If pulling from `sources` itself fails, that
        error is produced as an outcome and no more sources are started.

    """
    return _run_limited(sources, _drain, limit)


def fan_out_map(
    items: Union[Iterable[Any], AsyncIterable[Any]],
    func: Callable[[Any], SourceType],
    limit: int,
) -> AsyncIterator[Outcome]:
    """
    Like `fan_out`, but creates the source for each item by calling `func`
    on it. If `func` raises for an item, that becomes the outcome for that
    item, and the remaining items are still processed.

    Args:
        items: The items to process.
        func: Creates a source (async iterable or awaitable) for an item.
        limit: The maximum number of items that can be running at once.

    Yields:
        Same as `fan_out`.

    """
    return _run_limited(items, functools.partial(_apply, func), limit)
