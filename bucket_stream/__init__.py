"""
Lazy, composable asynchronous streams for S3 operations.
"""


from .files import FileLike, InvalidKeyDerivation, derive_key
from .listing import (
    LIST_BUCKETS,
    LIST_OBJECTS,
    LIST_OBJECTS_V2,
    ListingState,
    ListingStream,
    Pagination,
)
from .models import Outcome
from .objects import S3Object, name_to_bucket
from .parallel import fan_out, fan_out_map
from .params import Operation, pick, pick_params
from .s3_streams import (
    S3Streams,
    create_bucket,
    delete_bucket,
    delete_object,
    list_objects,
    new_object,
    put_object,
)
from .stream import Stream, StreamConsumedError, wrap_call
