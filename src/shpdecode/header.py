from __future__ import annotations

from typing import NamedTuple

from .constants import FILE_CODE, FILE_VERSION, HEADER_LENGTH, SHAPETYPE_LOOKUP
from .exceptions import BadFileCode, BadVersion, InvalidLength, NullInput
from .helpers import read_double, read_doubles, read_int32
from .types import BBox, BufferT, ByteOrder, MBox, ZBox


class Header(NamedTuple):
    """The 100 byte header shared by the .shp main file and the .shx index file.

    Byte layout:

    ======  ============  ======  =======
    Offset  Field         Type    Order
    ======  ============  ======  =======
    0       File Code     int32   Big
    24      File Length   int32   Big
    28      Version       int32   Little
    32      Shape Type    int32   Little
    36      Xmin..Ymax    4 x f8  Little
    68      Zmin, Zmax    2 x f8  Little
    84      Mmin, Mmax    2 x f8  Little
    ======  ============  ======  =======

    Bytes 4 to 23 are unused.  The Z and M ranges are always present,
    files without Z or M values simply leave them zeroed.
    """

    file_code: int
    file_length: int  # in 16 bit words, including the header
    version: int
    shape_type: int
    bbox: BBox
    zbox: ZBox
    mbox: MBox

    @property
    def shapeTypeName(self) -> str:
        return SHAPETYPE_LOOKUP.get(self.shape_type, f"UNKNOWN ({self.shape_type})")

    @property
    def length_in_bytes(self) -> int:
        return self.file_length * 2


def parse_header(header_bytes: BufferT | None) -> Header:
    """Decodes and validates a .shp or .shx file header.
    Raises a ShapefileException subclass if the bytes are not a valid header."""
    if header_bytes is None:
        raise NullInput("Header bytes are required, got None.")
    if len(header_bytes) != HEADER_LENGTH:
        raise InvalidLength(
            f"A shapefile header must be {HEADER_LENGTH} bytes long. "
            f"Got: {len(header_bytes)} bytes."
        )

    file_code = read_int32(header_bytes, 0, ByteOrder.BIG)
    if file_code != FILE_CODE:
        raise BadFileCode(
            f"Header file code is {file_code}, expected {FILE_CODE}."
        )

    version = read_int32(header_bytes, 28, ByteOrder.LITTLE)
    if version != FILE_VERSION:
        raise BadVersion(f"Header version is {version}, expected {FILE_VERSION}.")

    return Header(
        file_code=file_code,
        file_length=read_int32(header_bytes, 24, ByteOrder.BIG),
        version=version,
        shape_type=read_int32(header_bytes, 32, ByteOrder.LITTLE),
        bbox=BBox(*read_doubles(header_bytes, 36, 4, ByteOrder.LITTLE)),
        zbox=ZBox(
            read_double(header_bytes, 68, ByteOrder.LITTLE),
            read_double(header_bytes, 76, ByteOrder.LITTLE),
        ),
        mbox=MBox(
            read_double(header_bytes, 84, ByteOrder.LITTLE),
            read_double(header_bytes, 92, ByteOrder.LITTLE),
        ),
    )
