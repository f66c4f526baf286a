"""
Spatial variant record codec.

The Spatial attribute is an HLA variant record. Its first octet is the
discriminant (the DR model number 0-9), which selects a cumulative layout
of alternatives:

    Discriminant   Fields after the discriminant
    ------------   ----------------------------------------------------------
    0              location
    1              location, frozen, orientation
    2, 6           location, frozen, orientation, velocity
    3, 7           ... velocity, angular velocity
    4, 8           ... velocity, acceleration, angular velocity
    5, 9           ... velocity, acceleration

Every vector field is a fixed record of three floats. Orientation travels
as (psi, theta, phi) and is returned as (phi, theta, psi).

The float representation of each struct is configurable through a
SpatialSchema. With the default schema the location is HLAfloat64BE and
every other struct is HLAfloat32BE.

Alignment follows the HLA encoding rules: each element starts at a
multiple of its octet boundary counted from the start of the record, and
the alternative is aligned to the largest boundary of its elements. With
the default schema, discriminant 4 decodes as:

    offset  0       discriminant (HLAoctet)
    offset  8..32   location (3 x float64)
    offset 32       frozen (HLAoctet)
    offset 36..48   orientation (3 x float32)
    offset 48..60   velocity
    offset 60..72   acceleration
    offset 72..84   angular velocity

References:
    IEEE 1516.2 (HLA OMT) - Encoding of basic and variant record data types
    SISO-STD-001 (RPR FOM) - Spatial variant struct
"""

import logging
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np

from drcheck.codec.types import SpatialSample
from drcheck.errors import DecodeError
from drcheck.utils.diagnostics import resolve_logger

FROZEN_FIELD = "is_frozen"
FROZEN_BOUNDARY = 1

_BASE = ("position", FROZEN_FIELD, "orientation")

VARIANT_LAYOUTS: Dict[int, Tuple[str, ...]] = {
    0: ("position",),
    1: _BASE,
    2: _BASE + ("velocity",),
    3: _BASE + ("velocity", "angular_velocity"),
    4: _BASE + ("velocity", "acceleration", "angular_velocity"),
    5: _BASE + ("velocity", "acceleration"),
    6: _BASE + ("velocity",),
    7: _BASE + ("velocity", "angular_velocity"),
    8: _BASE + ("velocity", "acceleration", "angular_velocity"),
    9: _BASE + ("velocity", "acceleration"),
}


class FloatEncoding(Enum):
    """HLA basic float representations: (HLA name, struct format)."""

    FLOAT32_BE = ("HLAfloat32BE", ">f")
    FLOAT64_BE = ("HLAfloat64BE", ">d")
    FLOAT32_LE = ("HLAfloat32LE", "<f")
    FLOAT64_LE = ("HLAfloat64LE", "<d")

    def __init__(self, hla_name: str, fmt: str):
        self.hla_name = hla_name
        self.fmt = fmt

    @property
    def size(self) -> int:
        return struct.calcsize(self.fmt)

    @property
    def boundary(self) -> int:
        return self.size

    @classmethod
    def from_name(cls, name: str) -> "FloatEncoding":
        """
        Look up a representation by HLA name (e.g. "HLAfloat32BE").

        Raises:
            DecodeError: If the name is not one of the four float representations.
        """
        for encoding in cls:
            if encoding.hla_name == name:
                return encoding
        raise DecodeError(f"Unsupported field representation: {name!r}")


@dataclass(frozen=True)
class SpatialSchema:
    """
    Float representation of each struct of the Spatial record.

    Attributes:
        location: Representation of the world location.
        orientation: Representation of the Euler angles.
        velocity: Representation of the velocity vector.
        acceleration: Representation of the acceleration vector.
        angular_velocity: Representation of the angular velocity vector.
        aligned: Apply HLA octet boundary alignment. False gives a packed layout.
    """

    location: FloatEncoding = FloatEncoding.FLOAT64_BE
    orientation: FloatEncoding = FloatEncoding.FLOAT32_BE
    velocity: FloatEncoding = FloatEncoding.FLOAT32_BE
    acceleration: FloatEncoding = FloatEncoding.FLOAT32_BE
    angular_velocity: FloatEncoding = FloatEncoding.FLOAT32_BE
    aligned: bool = True

    def __post_init__(self) -> None:
        for name in ("location", "orientation", "velocity", "acceleration", "angular_velocity"):
            value = getattr(self, name)
            if not isinstance(value, FloatEncoding):
                raise DecodeError(f"Unsupported field representation for {name}: {value!r}")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> "SpatialSchema":
        """
        Build a schema from HLA representation names.

        Example:
            >>> SpatialSchema.from_mapping({"location": "HLAfloat32BE"}).location
            <FloatEncoding.FLOAT32_BE: ('HLAfloat32BE', '>f')>
        """
        kwargs = {}
        for key, value in mapping.items():
            if key == "aligned":
                kwargs[key] = bool(value)
            elif key in cls.__dataclass_fields__:
                kwargs[key] = FloatEncoding.from_name(str(value))
            else:
                raise DecodeError(f"Unknown Spatial struct: {key!r}")
        return cls(**kwargs)

    def encoding_for(self, field_name: str) -> FloatEncoding:
        return self.location if field_name == "position" else getattr(self, field_name)

    def boundary_of(self, field_name: str) -> int:
        if field_name == FROZEN_FIELD:
            return FROZEN_BOUNDARY
        return self.encoding_for(field_name).boundary

    def alternative_boundary(self, layout: Tuple[str, ...]) -> int:
        return max(self.boundary_of(name) for name in layout)


def _padding(offset: int, boundary: int) -> int:
    return (-offset) % boundary


class _Reader:
    """Sequential reader over a payload with HLA alignment."""

    def __init__(self, data: bytes, aligned: bool):
        self.data = data
        self.aligned = aligned
        self.offset = 0

    def align(self, boundary: int) -> None:
        if self.aligned:
            self.offset += _padding(self.offset, boundary)

    def take(self, fmt: str, what: str) -> tuple:
        size = struct.calcsize(fmt)
        end = self.offset + size
        if end > len(self.data):
            raise DecodeError(
                f"Spatial payload truncated: {what} needs octets {self.offset}..{end}, "
                f"payload has {len(self.data)}"
            )
        values = struct.unpack_from(fmt, self.data, self.offset)
        self.offset = end
        return values


class _Writer:
    def __init__(self, aligned: bool):
        self.aligned = aligned
        self.buffer = bytearray()

    def align(self, boundary: int) -> None:
        if self.aligned:
            self.buffer.extend(b"\x00" * _padding(len(self.buffer), boundary))

    def put(self, fmt: str, *values) -> None:
        self.buffer.extend(struct.pack(fmt, *values))


def _vector_format(encoding: FloatEncoding) -> str:
    return encoding.fmt[0] + 3 * encoding.fmt[1]


class SpatialDecoder:
    """
    Decode Spatial attribute payloads into SpatialSample values.

    Example:
        >>> decoder = SpatialDecoder()
        >>> decoder.decode(bytes(8) + bytes(24)).discriminant
        0
    """

    def __init__(self, schema: Optional[SpatialSchema] = None,
                 logger: Optional[logging.Logger] = None):
        self.schema = schema if schema is not None else SpatialSchema()
        self.logger = resolve_logger(logger)

    def decode(self, payload: bytes) -> SpatialSample:
        """
        Decode one payload.

        Trailing octets after the last field are ignored.

        Args:
            payload: Raw attribute value.

        Returns:
            SpatialSample with absent fields zero-filled.

        Raises:
            DecodeError: Unknown discriminant, invalid frozen octet or
                         truncated payload.
        """
        data = bytes(payload)
        reader = _Reader(data, self.schema.aligned)
        (discriminant,) = reader.take(">B", "discriminant")

        layout = VARIANT_LAYOUTS.get(discriminant)
        if layout is None:
            raise DecodeError(f"Unknown Spatial discriminant: {discriminant}")

        reader.align(self.schema.alternative_boundary(layout))

        fields = {}
        for name in layout:
            reader.align(self.schema.boundary_of(name))
            if name == FROZEN_FIELD:
                (octet,) = reader.take(">B", "frozen flag")
                if octet not in (0, 1):
                    raise DecodeError(f"Invalid frozen flag octet: {octet}")
                fields[name] = bool(octet)
                continue
            values = reader.take(_vector_format(self.schema.encoding_for(name)), name)
            if name == "orientation":
                values = values[::-1]
            fields[name] = np.array(values, dtype=np.float64)

        sample = SpatialSample(discriminant, **fields)
        self.logger.debug("Decoded Spatial record DRM %d (%d octets)", discriminant, reader.offset)
        return sample


class SpatialEncoder:
    """Encode SpatialSample values with the same layout SpatialDecoder reads."""

    def __init__(self, schema: Optional[SpatialSchema] = None):
        self.schema = schema if schema is not None else SpatialSchema()

    def encode(self, sample: SpatialSample) -> bytes:
        """
        Encode one sample.

        Raises:
            DecodeError: If the discriminant has no layout or a vector field
                         does not have three components.
        """
        layout = VARIANT_LAYOUTS.get(sample.discriminant)
        if layout is None:
            raise DecodeError(f"Unknown Spatial discriminant: {sample.discriminant}")

        writer = _Writer(self.schema.aligned)
        writer.put(">B", sample.discriminant)
        writer.align(self.schema.alternative_boundary(layout))

        for name in layout:
            writer.align(self.schema.boundary_of(name))
            if name == FROZEN_FIELD:
                writer.put(">B", 1 if sample.is_frozen else 0)
                continue
            values: List[float] = getattr(sample, name).tolist()
            if len(values) != 3:
                raise DecodeError(f"{name} must have 3 components, got {len(values)}")
            if name == "orientation":
                values = values[::-1]
            writer.put(_vector_format(self.schema.encoding_for(name)), *values)

        return bytes(writer.buffer)
