from __future__ import annotations

from collections.abc import Iterable, Mapping
from itertools import chain
from types import MappingProxyType
from typing import Any, Final, cast

from .constants import (
    MULTIPOINT,
    NULL,
    POINT,
    POLYGON,
    POLYLINE,
    POLYLINEM,
    RECORD_HEADER_LENGTH,
    SHAPETYPE_LOOKUP,
    SHAPETYPENUM_LOOKUP,
)
from .exceptions import (
    InvalidShapeData,
    NullInput,
    RecordTooShort,
    StructuralMismatch,
    UnsupportedShapeType,
)
from .helpers import read_double, read_doubles, read_int32, read_int32s
from .types import BBox, BufferT, ByteOrder, MBox, Point2D, PointsT

# Every record starts with an 8 byte big endian header (record number,
# content length in 16 bit words), followed by the little endian shape type.
# All offsets below include that 8 byte header.
_SHAPE_TYPE_OFFSET = 8
_BBOX_OFFSET = 12
_NPARTS_OFFSET = 44
_NPOINTS_OFFSET = 48
_PARTS_OFFSET = 52
_MULTIPOINT_POINTS_OFFSET = 48

MetadataT = Mapping[str, str]

_EMPTY_METADATA: Final[MetadataT] = MappingProxyType({})


class _NoShapeTypeSentinel:
    """For use as a default value for Shape.__init__, so the
    shape type can be looked up from the class name."""


_NO_SHAPE_TYPE_SENTINEL: Final = _NoShapeTypeSentinel()


def _points_from_flat(flat: Iterable[float]) -> PointsT:
    return tuple(Point2D(x, y) for x, y in zip(*(iter(flat),) * 2))


def _read_bbox(data: BufferT) -> BBox:
    return BBox(*read_doubles(data, _BBOX_OFFSET, 4, ByteOrder.LITTLE))


def _read_counts(data: BufferT) -> tuple[int, int]:
    """Reads the number of parts and the number of points of a
    polyline or polygon record."""
    if len(data) < _NPARTS_OFFSET:
        raise InvalidShapeData(
            f"Record of {len(data)} bytes is too short for a bounding box."
        )
    nParts = read_int32(data, _NPARTS_OFFSET, ByteOrder.LITTLE)
    nPoints = read_int32(data, _NPOINTS_OFFSET, ByteOrder.LITTLE)
    if nParts < 0 or nPoints < 0:
        raise InvalidShapeData(
            f"Negative part or point count. Got: {nParts=}, {nPoints=}"
        )
    return nParts, nPoints


def _check_length(data: BufferT, expected: int) -> None:
    if len(data) != expected:
        raise InvalidShapeData(
            f"Record is {len(data)} bytes long, its counts require {expected} bytes."
        )


def _read_parts(
    data: BufferT, nParts: int, nPoints: int
) -> tuple[PointsT, ...]:
    """Reads the part start indexes and the point array of a polyline
    or polygon record (of any flavour) and splits the points into parts.

    Each part runs from its start index up to the start index of the next
    part, and the last part runs to the end of the point array.  Anything
    that follows the point array (e.g. measures) is not touched.
    The record length must already have been validated by the caller.
    """
    starts = read_int32s(data, _PARTS_OFFSET, nParts, ByteOrder.LITTLE)
    points_offset = _PARTS_OFFSET + 4 * nParts
    points = _points_from_flat(
        read_doubles(data, points_offset, 2 * nPoints, ByteOrder.LITTLE)
    )

    parts = []
    for start, stop in zip(starts, (*starts[1:], nPoints)):
        if not 0 <= start <= stop <= nPoints:
            raise InvalidShapeData(
                f"Part from point {start} to point {stop} does not lie within "
                f"the {nPoints} points of the record."
            )
        # An empty part (start == stop) is allowed.
        parts.append(points[start:stop])
    return tuple(parts)


class Shape:
    def __init__(
        self,
        shapeType: int | _NoShapeTypeSentinel = _NO_SHAPE_TYPE_SENTINEL,
        recordNumber: int = 0,
        metadata: MetadataT | None = None,
    ):
        """Base of every decoded shape record.  Holds the record number
        from the record header, the shape type and the attributes that
        were read along with the record.

        The metadata mapping is kept as given (not copied).  Its keys are
        expected to be lower case column names.
        """
        if shapeType is not _NO_SHAPE_TYPE_SENTINEL:
            self._shapeType = cast(int, shapeType)
        else:
            class_name = self.__class__.__name__
            self._shapeType = SHAPETYPENUM_LOOKUP.get(class_name.upper(), NULL)

        self._recordNumber = recordNumber
        self._metadata: MetadataT = _EMPTY_METADATA if metadata is None else metadata

    # Fields of a decoded shape are read only.
    @property
    def shapeType(self) -> int:
        return self._shapeType

    @property
    def recordNumber(self) -> int:
        return self._recordNumber

    @property
    def metadata(self) -> MetadataT:
        return self._metadata

    @property
    def shapeTypeName(self) -> str:
        return SHAPETYPE_LOOKUP[self.shapeType]

    def getMetadata(self, name: str) -> str:
        """Returns the attribute value for a column name, ignoring case.
        An empty string is a value, a missing column raises KeyError."""
        try:
            return self.metadata[name.lower()]
        except KeyError:
            raise KeyError(
                f"{name} is not an attribute of record {self.recordNumber}"
            ) from None

    def hasMetadata(self, name: str) -> bool:
        return name.lower() in self.metadata

    @property
    def metadataNames(self) -> list[str]:
        return list(self.metadata)

    def _geometry(self) -> tuple[Any, ...]:
        return ()

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        other = cast(Shape, other)
        return (
            self.shapeType == other.shapeType
            and self.recordNumber == other.recordNumber
            and self._geometry() == other._geometry()
            and dict(self.metadata) == dict(other.metadata)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        if class_name == "Shape":
            return f"Shape #{self.recordNumber}: {self.shapeTypeName}"
        return f"{class_name} #{self.recordNumber}"


class NullShape(Shape):
    def __init__(self, recordNumber: int = 0, metadata: MetadataT | None = None):
        Shape.__init__(
            self, shapeType=NULL, recordNumber=recordNumber, metadata=metadata
        )

    @staticmethod
    def from_record_bytes(
        shapeType: int,
        data: BufferT,
        recordNumber: int,
        metadata: MetadataT | None = None,
    ) -> NullShape:
        # A null shape has no content beyond its shape type
        return NullShape(recordNumber=recordNumber, metadata=metadata)


class Point(Shape):
    # record header (8), shape type (4), x and y (16)
    RECORD_LENGTH: Final = 28

    def __init__(
        self,
        x: float,
        y: float,
        recordNumber: int = 0,
        metadata: MetadataT | None = None,
    ):
        Shape.__init__(self, recordNumber=recordNumber, metadata=metadata)
        self._x = x
        self._y = y

    @property
    def x(self) -> float:
        return self._x

    @property
    def y(self) -> float:
        return self._y

    @property
    def point(self) -> Point2D:
        return Point2D(self.x, self.y)

    def _geometry(self) -> tuple[Any, ...]:
        return (self.x, self.y)

    @classmethod
    def from_record_bytes(
        cls,
        shapeType: int,
        data: BufferT,
        recordNumber: int,
        metadata: MetadataT | None = None,
    ) -> Point:
        if len(data) != cls.RECORD_LENGTH:
            raise InvalidShapeData(
                f"A point record must be {cls.RECORD_LENGTH} bytes long. "
                f"Got: {len(data)} bytes."
            )
        x = read_double(data, 12, ByteOrder.LITTLE)
        y = read_double(data, 20, ByteOrder.LITTLE)
        return cls(x, y, recordNumber=recordNumber, metadata=metadata)


def _bbox_from_points(points: Iterable[Point2D]) -> BBox:
    xs: list[float] = []
    ys: list[float] = []

    for point in points:
        xs.append(point[0])
        ys.append(point[1])

    if not xs:
        return BBox(0.0, 0.0, 0.0, 0.0)
    return BBox(min(xs), min(ys), max(xs), max(ys))


class MultiPoint(Shape):
    def __init__(
        self,
        points: Iterable[tuple[float, float]],
        bbox: BBox | None = None,
        recordNumber: int = 0,
        metadata: MetadataT | None = None,
    ):
        """Points are kept in file order, which need not be
        geometrically meaningful.  The bbox is computed from the
        points if not given."""
        Shape.__init__(self, recordNumber=recordNumber, metadata=metadata)
        self._points: PointsT = tuple(Point2D(*p) for p in points)
        self._bbox = bbox if bbox is not None else _bbox_from_points(self._points)

    @property
    def points(self) -> PointsT:
        return self._points

    @property
    def bbox(self) -> BBox:
        return self._bbox

    def _geometry(self) -> tuple[Any, ...]:
        return (self.bbox, self.points)

    @classmethod
    def from_record_bytes(
        cls,
        shapeType: int,
        data: BufferT,
        recordNumber: int,
        metadata: MetadataT | None = None,
    ) -> MultiPoint:
        # record header (8), shape type (4), bbox (32), number of points (4)
        if len(data) < _MULTIPOINT_POINTS_OFFSET:
            raise InvalidShapeData(
                f"A multipoint record must be at least {_MULTIPOINT_POINTS_OFFSET} "
                f"bytes long. Got: {len(data)} bytes."
            )
        bbox = _read_bbox(data)
        nPoints = read_int32(data, 44, ByteOrder.LITTLE)
        if nPoints < 0:
            raise InvalidShapeData(f"Negative point count. Got: {nPoints}")
        _check_length(data, _MULTIPOINT_POINTS_OFFSET + 16 * nPoints)

        flat = read_doubles(
            data, _MULTIPOINT_POINTS_OFFSET, 2 * nPoints, ByteOrder.LITTLE
        )
        return cls(
            _points_from_flat(flat),
            bbox=bbox,
            recordNumber=recordNumber,
            metadata=metadata,
        )


class _CanHaveParts(Shape):
    """Polylines and polygons share one binary layout, a bounding box
    followed by part start indexes and a flat array of points:

    ======  =========  ==========  =========
    Offset  Field      Type        Number
    ======  =========  ==========  =========
    12      Box        f8          4
    44      NumParts   int32       1
    48      NumPoints  int32       1
    52      Parts      int32       NumParts
    X       Points     2 x f8      NumPoints
    ======  =========  ==========  =========

    where X = 52 + 4 * NumParts.
    """

    def __init__(
        self,
        parts: Iterable[Iterable[tuple[float, float]]],
        bbox: BBox | None = None,
        recordNumber: int = 0,
        metadata: MetadataT | None = None,
    ):
        Shape.__init__(self, recordNumber=recordNumber, metadata=metadata)
        self._parts: tuple[PointsT, ...] = tuple(
            tuple(Point2D(*p) for p in part) for part in parts
        )
        self._bbox = bbox if bbox is not None else _bbox_from_points(self.points)

    @property
    def parts(self) -> tuple[PointsT, ...]:
        return self._parts

    @property
    def bbox(self) -> BBox:
        return self._bbox

    @property
    def points(self) -> PointsT:
        """All points of all parts, as one flat sequence."""
        return tuple(chain.from_iterable(self.parts))

    @property
    def partIndexes(self) -> tuple[int, ...]:
        """The index into points at which each part starts."""
        indexes = []
        n = 0
        for part in self.parts:
            indexes.append(n)
            n += len(part)
        return tuple(indexes)

    def _geometry(self) -> tuple[Any, ...]:
        return (self.bbox, self.parts)

    @classmethod
    def from_record_bytes(
        cls,
        shapeType: int,
        data: BufferT,
        recordNumber: int,
        metadata: MetadataT | None = None,
    ) -> _CanHaveParts:
        nParts, nPoints = _read_counts(data)
        _check_length(data, _PARTS_OFFSET + 4 * nParts + 16 * nPoints)

        parts = _read_parts(data, nParts, nPoints)
        return cls(
            parts,
            bbox=_read_bbox(data),
            recordNumber=recordNumber,
            metadata=metadata,
        )


class Polyline(_CanHaveParts):
    pass


class Polygon(_CanHaveParts):
    # Ring orientation (clockwise outer rings) is not checked.
    pass


class PolylineM(Polyline):
    """A polyline with a measure per point.  The point array is
    followed by Mmin, Mmax and then one measure per point, stored end to
    end across all parts in the same order as the points."""

    def __init__(
        self,
        parts: Iterable[Iterable[tuple[float, float]]],
        m: Iterable[float] = (),
        bbox: BBox | None = None,
        mbox: MBox | None = None,
        recordNumber: int = 0,
        metadata: MetadataT | None = None,
    ):
        Polyline.__init__(
            self, parts, bbox=bbox, recordNumber=recordNumber, metadata=metadata
        )
        self._m: tuple[float, ...] = tuple(m)
        if mbox is not None:
            self._mbox = mbox
        elif self._m:
            self._mbox = MBox(min(self._m), max(self._m))
        else:
            self._mbox = MBox(0.0, 0.0)

    @property
    def m(self) -> tuple[float, ...]:
        return self._m

    @property
    def mbox(self) -> MBox:
        return self._mbox

    @property
    def mmin(self) -> float:
        return self.mbox.mmin

    @property
    def mmax(self) -> float:
        return self.mbox.mmax

    def _geometry(self) -> tuple[Any, ...]:
        return (self.bbox, self.parts, self.mbox, self.m)

    @classmethod
    def from_record_bytes(
        cls,
        shapeType: int,
        data: BufferT,
        recordNumber: int,
        metadata: MetadataT | None = None,
    ) -> PolylineM:
        nParts, nPoints = _read_counts(data)
        m_offset = _PARTS_OFFSET + 4 * nParts + 16 * nPoints
        _check_length(data, m_offset + 16 + 8 * nPoints)

        parts = _read_parts(data, nParts, nPoints)
        mbox = MBox(*read_doubles(data, m_offset, 2, ByteOrder.LITTLE))
        m = read_doubles(data, m_offset + 16, nPoints, ByteOrder.LITTLE)
        return cls(
            parts,
            m=m,
            bbox=_read_bbox(data),
            mbox=mbox,
            recordNumber=recordNumber,
            metadata=metadata,
        )


SHAPE_CLASS_FROM_SHAPETYPE: dict[
    int, type[NullShape | Point | MultiPoint | _CanHaveParts]
] = {
    NULL: NullShape,
    POINT: Point,
    MULTIPOINT: MultiPoint,
    POLYLINE: Polyline,
    POLYLINEM: PolylineM,
    POLYGON: Polygon,
}


def parse_shape(data: BufferT | None, metadata: MetadataT | None = None) -> Shape:
    """Decodes one .shp record, including its 8 byte record header,
    into the shape class for its shape type.

    The buffer length must match the content length declared in the
    record header, otherwise StructuralMismatch is raised before any
    geometry is decoded.  Shape types other than Null, Point, MultiPoint,
    PolyLine, PolyLineM and Polygon raise UnsupportedShapeType.
    """
    if data is None:
        raise NullInput("Shape record bytes are required, got None.")
    if len(data) < RECORD_HEADER_LENGTH + 4:
        raise RecordTooShort(
            f"A shape record must be at least {RECORD_HEADER_LENGTH + 4} bytes long. "
            f"Got: {len(data)} bytes."
        )

    recordNumber = read_int32(data, 0, ByteOrder.BIG)
    contentLength = read_int32(data, 4, ByteOrder.BIG)
    shapeType = read_int32(data, _SHAPE_TYPE_OFFSET, ByteOrder.LITTLE)

    # Content length is in 16 bit words and excludes the record header
    if len(data) != contentLength * 2 + RECORD_HEADER_LENGTH:
        raise StructuralMismatch(
            f"Record {recordNumber} declares {contentLength} words of content "
            f"({contentLength * 2 + RECORD_HEADER_LENGTH} bytes with its header), "
            f"but {len(data)} bytes were given."
        )

    try:
        ShapeClass = SHAPE_CLASS_FROM_SHAPETYPE[shapeType]
    except KeyError:
        raise UnsupportedShapeType(shapeType)

    return ShapeClass.from_record_bytes(shapeType, data, recordNumber, metadata)
