from .bucket_maps import Bucket, ValueBucket, WeakBucketMap, WeakKeyBucketMap, WeakValueBucketMap
from .slot import StrongSlot, WeakHandle, WeakSlot
from .weak_list import WeakList
from .weak_maps import WeakKeyMap, WeakMap, WeakValueMap

__all__ = [
    "Bucket",
    "StrongSlot",
    "ValueBucket",
    "WeakBucketMap",
    "WeakHandle",
    "WeakKeyBucketMap",
    "WeakKeyMap",
    "WeakList",
    "WeakMap",
    "WeakSlot",
    "WeakValueBucketMap",
    "WeakValueMap",
]
