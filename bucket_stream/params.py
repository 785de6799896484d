"""
Whitelists of the parameters that each backend operation accepts.
"""


import enum
from typing import Any, Dict, FrozenSet, Iterable, Mapping


@enum.unique
class Operation(enum.Enum):
    """
    Backend operations that we know how to call.
    """

    CREATE_BUCKET = "create_bucket"
    DELETE_BUCKET = "delete_bucket"
    PUT_OBJECT = "put_object"
    DELETE_OBJECT = "delete_object"
    LIST_OBJECTS = "list_objects"
    LIST_OBJECTS_V2 = "list_objects_v2"
    LIST_BUCKETS = "list_buckets"


ALLOWED_PARAMS: Dict[Operation, FrozenSet[str]] = {
    Operation.CREATE_BUCKET: frozenset(
        {
            "Bucket",
            "ACL",
            "CreateBucketConfiguration",
            "GrantFullControl",
            "GrantRead",
            "GrantReadACP",
            "GrantWrite",
            "GrantWriteACP",
            "ObjectLockEnabledForBucket",
            "ObjectOwnership",
        }
    ),
    Operation.DELETE_BUCKET: frozenset({"Bucket", "ExpectedBucketOwner"}),
    Operation.PUT_OBJECT: frozenset(
        {
            "Bucket",
            "Key",
            "ACL",
            "Body",
            "CacheControl",
            "ContentDisposition",
            "ContentEncoding",
            "ContentLanguage",
            "ContentLength",
            "ContentMD5",
            "ContentType",
            "Expires",
            "GrantFullControl",
            "GrantRead",
            "GrantReadACP",
            "GrantWriteACP",
            "Metadata",
            "SSECustomerAlgorithm",
            "SSECustomerKey",
            "SSECustomerKeyMD5",
            "SSEKMSKeyId",
            "ServerSideEncryption",
            "StorageClass",
            "WebsiteRedirectLocation",
        }
    ),
    Operation.DELETE_OBJECT: frozenset({"Bucket", "Key", "MFA", "VersionId"}),
    Operation.LIST_OBJECTS: frozenset(
        {
            "Bucket",
            "Delimiter",
            "EncodingType",
            "Marker",
            "MaxKeys",
            "Prefix",
            "RequestPayer",
            "ExpectedBucketOwner",
        }
    ),
    Operation.LIST_OBJECTS_V2: frozenset(
        {
            "Bucket",
            "ContinuationToken",
            "Delimiter",
            "EncodingType",
            "FetchOwner",
            "MaxKeys",
            "Prefix",
            "RequestPayer",
            "StartAfter",
            "ExpectedBucketOwner",
        }
    ),
    Operation.LIST_BUCKETS: frozenset(
        {"MaxBuckets", "ContinuationToken", "Prefix", "BucketRegion"}
    ),
}
"""
Maps each operation to the set of parameters that the client accepts for it.
"""


def pick(params: Mapping[str, Any], allowed: Iterable[str]) -> Dict[str, Any]:
    """
    Selects a subset of the parameters.

    Args:
        params: The parameters to filter.
        allowed: The names of the parameters to keep.

    Returns:
        A new dictionary with only the allowed parameters that are present in
        `params`. Ordering and values are preserved.

    """
    allowed = frozenset(allowed)
    return {k: v for k, v in params.items() if k in allowed}


def pick_params(
    operation: Operation, params: Mapping[str, Any]
) -> Dict[str, Any]:
    """
    Filters parameters down to the ones that a particular operation accepts.

    Args:
        operation: The operation that we are going to call.
        params: Arbitrary parameters, possibly with extra fields.

    Returns:
        The parameters that are legal for this operation.

    """
    return pick(params, ALLOWED_PARAMS[operation])
