"""
Stream-based wrapper around an S3 client.
"""


from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional

from aiobotocore.client import AioBaseClient
from aiobotocore.session import get_session
from confuse import ConfigView
from loguru import logger

from .files import FileLike, derive_key
from .listing import LIST_BUCKETS, LIST_OBJECTS, ListingStream, Pagination
from .models import Outcome
from .objects import S3Object, merge_response, name_to_bucket
from .params import Operation, pick_params
from .stream import Stream, wrap_call


class S3Streams:
    """
    Exposes S3 operations as lazy streams, so that they can be chained
    together. Parameters are whitelisted for each call, so the output of one
    operation can be passed directly to another.

    Single-shot operations produce one `S3Object`: the caller's parameters
    with the fields from the backend response merged on top. Errors from the
    client are raised from the stream unchanged.
    """

    _DEFAULT_PARALLELISM = 3
    """
    Default number of concurrent requests for bulk operations.
    """

    def __init__(
        self, client: AioBaseClient, parallelism: int = _DEFAULT_PARALLELISM
    ):
        """
        Args:
            client: The S3 client to use. It will not be closed by this class.
            parallelism: Default number of concurrent requests to allow for
                bulk operations.

        """
        if parallelism < 1:
            raise ValueError(
                f"Parallelism must be at least 1, got {parallelism}."
            )

        self.__client = client
        self.__parallelism = parallelism

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: ConfigView
    ) -> AsyncIterator["S3Streams"]:
        """
        Context manager that creates a client from configuration. The client
        is closed on exit.

        Args:
            config: The S3 configuration.

        Yields:
            The new instance that it created.

        """
        region_name = config["region_name"].as_str()
        access_key = config["access_key"].as_str()
        access_key_id = config["access_key_id"].as_str()
        endpoint_url = config["endpoint_url"].as_str()
        parallelism = config["parallelism"].get(int)

        logger.info(
            "Connecting to S3-compatible object store at {}.", endpoint_url
        )

        session = get_session()
        async with session.create_client(
            "s3",
            region_name=region_name,
            aws_secret_access_key=access_key,
            aws_access_key_id=access_key_id,
            endpoint_url=endpoint_url,
        ) as client:
            yield cls(client, parallelism=parallelism)

    @property
    def client(self) -> AioBaseClient:
        return self.__client

    @staticmethod
    def name_to_bucket(bucket: Mapping[str, Any]) -> Dict[str, str]:
        return name_to_bucket(bucket)

    def new_object(self, params: Mapping[str, Any]) -> S3Object:
        """
        Args:
            params: The object attributes.

        Returns:
            A handle for an object that uses our client.

        """
        return S3Object(self.__client, params)

    def __single_call(
        self, operation: Operation, params: Mapping[str, Any]
    ) -> Stream[S3Object]:
        """
        Makes a single-shot call.

        Args:
            operation: The operation to call.
            params: The parameters. They will be whitelisted for the call.

        Returns:
            A stream containing the parameters merged with the response.

        """
        call = wrap_call(getattr(self.__client, operation.value))
        return call(**pick_params(operation, params)).map(
            lambda response: self.new_object(merge_response(params, response))
        )

    def create_bucket(self, params: Mapping[str, Any]) -> Stream[S3Object]:
        """
        Creates a bucket.

        Args:
            params: Parameters for `CreateBucket`.

        Returns:
            A stream with one item. The response includes the `Location`.

        """
        return self.__single_call(Operation.CREATE_BUCKET, params)

    def delete_bucket(self, params: Mapping[str, Any]) -> Stream[S3Object]:
        """
        Deletes a bucket. The bucket must be empty.

        Args:
            params: Parameters for `DeleteBucket`.

        Returns:
            A stream with one item.

        """
        return self.__single_call(Operation.DELETE_BUCKET, params)

    def put_object(self, params: Mapping[str, Any]) -> Stream[S3Object]:
        """
        Uploads an object.

        Args:
            params: Parameters for `PutObject`.

        Returns:
            A stream with one item. Although the backend only responds with
            an `ETag` (and possibly a `VersionId`), the item will also have
            all the passed-in parameters.

        """
        return self.__single_call(Operation.PUT_OBJECT, params)

    def delete_object(self, params: Mapping[str, Any]) -> Stream[S3Object]:
        """
        Deletes an object.

        Args:
            params: Parameters for `DeleteObject`.

        Returns:
            A stream with one item: the original parameters, extended with
            `DeleteMarker` and `VersionId` if the backend reported them.

        """
        return self.__single_call(Operation.DELETE_OBJECT, params)

    def put_file_object(
        self, file: FileLike, params: Optional[Mapping[str, Any]] = None
    ) -> Stream[S3Object]:
        """
        Uploads a virtual file.

        Args:
            file: The file to upload. The body is taken from its contents.
            params: Additional parameters for `PutObject`. Must include the
                `Bucket`. If there is no `Key`, it will be calculated from
                the file's base and path.

        Raises:
            `InvalidKeyDerivation` immediately if there is no key and it
            cannot be calculated.

        Returns:
            A stream with one item, containing the upload parameters and the
            response.

        """
        params = dict(params or {})
        key = derive_key(file, params.get("Key"))
        logger.debug("Using key {} for file {}.", key, file.path)

        return self.put_object({**params, "Key": key, "Body": file.contents})

    def stream_bucket_contents(
        self, params: Mapping[str, Any], pagination: Pagination = LIST_OBJECTS
    ) -> Stream[S3Object]:
        """
        Lists the contents of a bucket.

        Args:
            params: Parameters for the listing call. Must include the
                `Bucket`.
            pagination: The listing API to use.

        Returns:
            A stream with one item for each object in the bucket. Each item
            has the bucket name and the metadata from the listing, and a
            `Body` of None, since the contents are never downloaded.

        """
        bucket = params["Bucket"]

        def _to_object(entity: Dict[str, Any]) -> S3Object:
            return self.new_object({**entity, "Bucket": bucket, "Body": None})

        return Stream(
            lambda: ListingStream(
                self.__client, pagination, params, transform=_to_object
            )
        )

    def stream_buckets(
        self, params: Optional[Mapping[str, Any]] = None
    ) -> Stream[Dict[str, Any]]:
        """
        Lists all the buckets.

        Args:
            params: Optional parameters for `ListBuckets`.

        Returns:
            A stream with one item for each bucket. Each has a `Name` and a
            `CreationDate`. The owner information is discarded. Use
            `name_to_bucket` to convert them to parameters for other calls.

        """
        return Stream(
            lambda: ListingStream(self.__client, LIST_BUCKETS, params or {})
        )

    def empty_bucket(
        self, params: Mapping[str, Any], parallelism: Optional[int] = None
    ) -> Stream[Outcome]:
        """
        Deletes every object in a bucket.

        Args:
            params: Parameters for the listing call. Must include the
                `Bucket`.
            parallelism: Maximum number of concurrent deletions. Defaults
                to the value passed to the constructor.

        Returns:
            A stream with one outcome for each object.

        """
        if parallelism is None:
            parallelism = self.__parallelism

        return (
            self.stream_bucket_contents(params)
            .parallel_map(self.delete_object, parallelism)
        )

    def dispose_bucket(
        self, params: Mapping[str, Any], parallelism: Optional[int] = None
    ) -> Stream[S3Object]:
        """
        Deletes every object in a bucket, and then the bucket itself.

        Args:
            params: Must include the `Bucket`.
            parallelism: Maximum number of concurrent object deletions.

        Returns:
            A stream with one item, which is the response from deleting the
            bucket. If any object could not be deleted, the bucket is left
            in place and the first error is raised instead.

        """

        async def _dispose() -> S3Object:
            failures: List[BaseException] = []
            num_deleted = 0
            async for outcome in self.empty_bucket(params, parallelism):
                if outcome.ok:
                    num_deleted += 1
                else:
                    failures.append(outcome.error)

            logger.info(
                "Deleted {} object(s) from {}, {} failure(s).",
                num_deleted,
                params["Bucket"],
                len(failures),
            )
            if failures:
                raise failures[0]

            return await self.delete_bucket(params).first()

        return wrap_call(_dispose)()


def new_object(client: AioBaseClient, params: Mapping[str, Any]) -> S3Object:
    """
    Args:
        client: The client to use.
        params: The object attributes.

    Returns:
        A handle for the object.

    """
    return S3Object(client, params)


def put_object(obj: S3Object) -> Stream[S3Object]:
    """
    Uploads an object using its own client. Suitable for use with
    `Stream.parallel_map()`.

    Args:
        obj: The object to upload.

    Returns:
        Same as `S3Streams.put_object`.

    """
    return S3Streams(obj.client).put_object(obj)


def delete_object(obj: S3Object) -> Stream[S3Object]:
    """
    Deletes an object using its own client. Suitable for use with
    `Stream.parallel_map()`.

    Args:
        obj: The object to delete.

    Returns:
        Same as `S3Streams.delete_object`.

    """
    return S3Streams(obj.client).delete_object(obj)


def list_objects(
    client: AioBaseClient, params: Mapping[str, Any]
) -> Stream[S3Object]:
    """
    Lists the contents of a bucket.

    Args:
        client: The client to use.
        params: Same as `S3Streams.stream_bucket_contents`.

    Returns:
        Same as `S3Streams.stream_bucket_contents`.

    """
    return S3Streams(client).stream_bucket_contents(params)


def create_bucket(
    client: AioBaseClient, params: Mapping[str, Any]
) -> Stream[S3Object]:
    """
    Args:
        client: The client to use.
        params: Same as `S3Streams.create_bucket`.

    Returns:
        Same as `S3Streams.create_bucket`.

    """
    return S3Streams(client).create_bucket(params)


def delete_bucket(
    client: AioBaseClient, params: Mapping[str, Any]
) -> Stream[S3Object]:
    """
    Args:
        client: The client to use.
        params: Same as `S3Streams.delete_bucket`.

    Returns:
        Same as `S3Streams.delete_bucket`.

    """
    return S3Streams(client).delete_bucket(params)
