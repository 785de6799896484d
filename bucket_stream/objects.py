"""
Handles for objects in the store.
"""


from typing import Any, Dict, Iterator, Mapping

from aiobotocore.client import AioBaseClient

_TRANSPORT_FIELDS = frozenset({"ResponseMetadata"})
"""
Response fields that describe the HTTP exchange rather than the object.
"""


class S3Object(Mapping[str, Any]):
    """
    A read-only set of object attributes (`Bucket`, `Key`, etc.) that also
    remembers the client it came from, so that further operations can be
    performed on it. The client is shared and is never closed by this class.
    """

    def __init__(self, client: AioBaseClient, attributes: Mapping[str, Any]):
        """
        Args:
            client: The client that operations on this object should use.
            attributes: The object attributes.

        """
        self.__client = client
        self.__attributes = dict(attributes)

    @property
    def client(self) -> AioBaseClient:
        return self.__client

    def __getitem__(self, key: str) -> Any:
        return self.__attributes[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.__attributes)

    def __len__(self) -> int:
        return len(self.__attributes)

    def __repr__(self) -> str:
        return f"S3Object({self.__attributes!r})"

    def merged(self, extra: Mapping[str, Any]) -> "S3Object":
        """
        Args:
            extra: Additional attributes.

        Returns:
            A new object with the same client, where `extra` has been merged
            on top of the current attributes.

        """
        return S3Object(self.__client, {**self.__attributes, **extra})


def merge_response(
    params: Mapping[str, Any], response: Mapping[str, Any]
) -> Dict[str, Any]:
    """
    Merges the response from a backend call onto the parameters that were
    passed in by the caller. Fields from the response win if there is a
    conflict.

    Args:
        params: The caller's original parameters.
        response: The backend response.

    Returns:
        The merged attributes.

    """
    merged = dict(params)
    merged.update(
        (k, v) for k, v in response.items() if k not in _TRANSPORT_FIELDS
    )
    return merged


def name_to_bucket(bucket: Mapping[str, Any]) -> Dict[str, str]:
    """
    Converts a bucket descriptor, as produced by the bucket listing, into
    parameters for operations that expect a `Bucket` parameter.

    Args:
        bucket: The descriptor. Should have a `Name` field.

    Returns:
        A dictionary with a single `Bucket` field.

    """
    return dict(Bucket=bucket["Name"])
