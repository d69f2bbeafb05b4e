"""
shpdecode
Decodes the geometry of ESRI Shapefiles (.shp, .shx) into shape objects,
together with the attributes of the matching .dbf table.
Compatible with Python versions >=3.9
"""

from __future__ import annotations

import logging
import sys

from .__version__ import __version__
from ._doctest_runner import _test
from .constants import (
    FILE_CODE,
    FILE_VERSION,
    HEADER_LENGTH,
    MULTIPATCH,
    MULTIPOINT,
    MULTIPOINTM,
    MULTIPOINTZ,
    NULL,
    POINT,
    POINTM,
    POINTZ,
    POLYGON,
    POLYGONM,
    POLYGONZ,
    POLYLINE,
    POLYLINEM,
    POLYLINEZ,
    SHAPETYPE_LOOKUP,
)
from .dbf import DbfTable, Field
from .exceptions import (
    BadFileCode,
    BadVersion,
    BufferTooSmall,
    InvalidHeader,
    InvalidLength,
    InvalidShapeData,
    LengthMismatch,
    NullBuffer,
    NullInput,
    RecordTooShort,
    ShapefileException,
    StructuralMismatch,
    TooShort,
    UnsupportedShapeType,
)
from .header import Header, parse_header
from .helpers import read_double, read_doubles, read_int32, read_int32s
from .reader import Reader
from .shapes import (
    SHAPE_CLASS_FROM_SHAPETYPE,
    MultiPoint,
    NullShape,
    Point,
    Polygon,
    Polyline,
    PolylineM,
    Shape,
    parse_shape,
)
from .types import BBox, ByteOrder, MBox, Point2D, ZBox

__all__ = [
    "__version__",
    "NULL",
    "POINT",
    "POLYLINE",
    "POLYGON",
    "MULTIPOINT",
    "POINTZ",
    "POLYLINEZ",
    "POLYGONZ",
    "MULTIPOINTZ",
    "POINTM",
    "POLYLINEM",
    "POLYGONM",
    "MULTIPOINTM",
    "MULTIPATCH",
    "SHAPETYPE_LOOKUP",
    "FILE_CODE",
    "FILE_VERSION",
    "HEADER_LENGTH",
    "ByteOrder",
    "Point2D",
    "BBox",
    "MBox",
    "ZBox",
    "read_int32",
    "read_double",
    "read_int32s",
    "read_doubles",
    "Header",
    "parse_header",
    "Shape",
    "NullShape",
    "Point",
    "MultiPoint",
    "Polyline",
    "PolylineM",
    "Polygon",
    "SHAPE_CLASS_FROM_SHAPETYPE",
    "parse_shape",
    "Field",
    "DbfTable",
    "Reader",
    "ShapefileException",
    "NullInput",
    "NullBuffer",
    "InvalidLength",
    "RecordTooShort",
    "TooShort",
    "InvalidHeader",
    "BadFileCode",
    "BadVersion",
    "StructuralMismatch",
    "LengthMismatch",
    "InvalidShapeData",
    "UnsupportedShapeType",
    "BufferTooSmall",
]

logger = logging.getLogger(__name__)


def main() -> None:
    """
    Doctests are contained in the file 'README.md', and are tested using the built-in
    testing libraries.
    """
    failure_count = _test()
    sys.exit(failure_count)
