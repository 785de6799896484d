"""
Streams the results of paginated listing operations one entity at a time,
requesting additional pages transparently.
"""


import enum
from collections import deque
from typing import (
    Any,
    AsyncIterator,
    Callable,
    Deque,
    Dict,
    Mapping,
    Optional,
    TypeVar,
)

from aiobotocore.client import AioBaseClient
from loguru import logger
from pydantic import BaseModel, ConfigDict

from .params import Operation, pick_params

ItemType = TypeVar("ItemType")


@enum.unique
class ListingState(enum.Enum):
    """
    The states that a `ListingStream` can be in.
    """

    IDLE = enum.auto()
    """
    Nothing has been requested yet.
    """
    REQUESTING = enum.auto()
    """
    Waiting for the backend to return a page.
    """
    EMITTING = enum.auto()
    """
    Handing out entities from the most recent page.
    """
    ERRORED = enum.auto()
    """
    A page request failed. Terminal.
    """
    EXHAUSTED = enum.auto()
    """
    All entities have been produced. Terminal.
    """


_TERMINAL_STATES = frozenset({ListingState.ERRORED, ListingState.EXHAUSTED})


class Pagination(BaseModel):
    """
    Describes how a particular listing operation is paginated.

    Attributes:
        operation: The operation to call for each page.
        result_key: The key in the response that holds the page's entities.
        input_token: The request parameter that carries the cursor.
        output_token: The response field that carries the next cursor.
        truncation_flag: The response field that indicates whether more
            pages are available. If not set, there are more pages iff the
            response has a cursor.
        fallback_token_field: If a response is truncated but has no cursor,
            use this field of the last entity as the cursor.

    """

    model_config = ConfigDict(frozen=True)

    operation: Operation
    result_key: str
    input_token: str
    output_token: str
    truncation_flag: Optional[str] = None
    fallback_token_field: Optional[str] = None

    def next_cursor(self, response: Mapping[str, Any]) -> Optional[str]:
        """
        Determines where the next page should start.

        Args:
            response: The response for the current page.

        Returns:
            The cursor for the next page, or None if this was the last page.

        """
        cursor = response.get(self.output_token)

        if self.truncation_flag is not None:
            if not response.get(self.truncation_flag, False):
                return None

            if not cursor and self.fallback_token_field is not None:
                entities = response.get(self.result_key) or []
                if entities:
                    cursor = entities[-1].get(self.fallback_token_field)

            if not cursor:
                logger.warning(
                    "{} response is truncated, but has no cursor. Stopping.",
                    self.operation.value,
                )

        return cursor or None


LIST_OBJECTS = Pagination(
    operation=Operation.LIST_OBJECTS,
    result_key="Contents",
    input_token="Marker",
    output_token="NextMarker",
    truncation_flag="IsTruncated",
    fallback_token_field="Key",
)
"""
Pagination for the original `ListObjects` API.
"""

LIST_OBJECTS_V2 = Pagination(
    operation=Operation.LIST_OBJECTS_V2,
    result_key="Contents",
    input_token="ContinuationToken",
    output_token="NextContinuationToken",
    truncation_flag="IsTruncated",
)
"""
Pagination for the `ListObjectsV2` API.
"""

LIST_BUCKETS = Pagination(
    operation=Operation.LIST_BUCKETS,
    result_key="Buckets",
    input_token="ContinuationToken",
    output_token="ContinuationToken",
)
"""
Pagination for the `ListBuckets` API.
"""


class ListingStream(AsyncIterator[ItemType]):
    """
    Iterates over every entity returned by a paginated listing operation.
    Pages are requested lazily, only once the consumer has pulled every
    entity from the previous page, and entities are produced in the order
    that the backend reports them.

    If a page request fails, the error is raised to the consumer and the
    iteration ends. No more pages will be requested after that.
    """

    def __init__(
        self,
        client: AioBaseClient,
        pagination: Pagination,
        params: Mapping[str, Any],
        *,
        transform: Optional[Callable[[Dict[str, Any]], ItemType]] = None,
    ):
        """
        Args:
            client: The client to make requests with.
            pagination: Describes the listing operation.
            params: Parameters for the listing request. Parameters that the
                operation does not accept will be ignored.
            transform: Optional function to apply to each entity before
                producing it.

        """
        self.__client = client
        self.__pagination = pagination
        self.__params = pick_params(pagination.operation, params)
        self.__transform = transform

        self.__state = ListingState.IDLE
        # Entities that we have received but not produced yet.
        self.__buffer: Deque[Dict[str, Any]] = deque()
        # Where the next page starts.
        self.__cursor: Optional[str] = None
        self.__num_pages = 0

    @property
    def state(self) -> ListingState:
        return self.__state

    @property
    def num_pages(self) -> int:
        """
        Returns:
            The number of pages that have been received so far.

        """
        return self.__num_pages

    def __aiter__(self) -> "ListingStream[ItemType]":
        return self

    async def __anext__(self) -> ItemType:
        while not self.__buffer:
            if self.__state in _TERMINAL_STATES:
                raise StopAsyncIteration
            if self.__state == ListingState.EMITTING and self.__cursor is None:
                logger.debug(
                    "Finished listing after {} page(s).", self.__num_pages
                )
                self.__state = ListingState.EXHAUSTED
                raise StopAsyncIteration

            await self.__request_page()

        self.__state = ListingState.EMITTING
        entity = self.__buffer.popleft()
        if self.__transform is not None:
            return self.__transform(entity)
        return entity

    async def __request_page(self) -> None:
        """
        Requests the next page and adds its entities to the buffer.

        """
        self.__state = ListingState.REQUESTING

        request = dict(self.__params)
        if self.__cursor is not None:
            request[self.__pagination.input_token] = self.__cursor

        operation_name = self.__pagination.operation.value
        logger.debug(
            "Requesting page {} of {}.", self.__num_pages + 1, operation_name
        )
        try:
            response = await getattr(self.__client, operation_name)(**request)
        except Exception:
            self.__state = ListingState.ERRORED
            logger.debug("Page request for {} failed.", operation_name)
            raise

        self.__num_pages += 1
        self.__buffer.extend(response.get(self.__pagination.result_key) or [])
        self.__cursor = self.__pagination.next_cursor(response)
        self.__state = ListingState.EMITTING
