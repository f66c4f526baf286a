"""
Wire formats of the Spatial attribute.

- spatial: Spatial variant record decoder and encoder
- time_tag: time tag decoding and timestamp reconstruction
- types: SpatialSample
"""

from drcheck.codec.spatial import (
    VARIANT_LAYOUTS,
    FloatEncoding,
    SpatialDecoder,
    SpatialEncoder,
    SpatialSchema,
)
from drcheck.codec.time_tag import (
    MICROS_PER_HOUR,
    TimeReconstructor,
    as_utc,
    decode_time_tag,
    offset_in_hour,
)
from drcheck.codec.types import SpatialSample

__all__ = [
    "VARIANT_LAYOUTS",
    "FloatEncoding",
    "SpatialDecoder",
    "SpatialEncoder",
    "SpatialSchema",
    "MICROS_PER_HOUR",
    "TimeReconstructor",
    "as_utc",
    "decode_time_tag",
    "offset_in_hour",
    "SpatialSample",
]
