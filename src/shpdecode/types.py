from os import PathLike
from typing import IO, Any, Final, Literal, NamedTuple, Protocol, Union

## Custom type variables

ByteOrderT = Literal[">", "<"]


class ByteOrder:
    """A bare bones 'enum' of struct byte order prefixes, as the enum
    library noticeably slows performance."""

    BIG: Final = ">"
    LITTLE: Final = "<"
    __members__: set[ByteOrderT] = {">", "<"}


class Point2D(NamedTuple):
    x: float
    y: float


class BBox(NamedTuple):
    xmin: float
    ymin: float
    xmax: float
    ymax: float

    # The ESRI format description calls these a Rectangle.  The names are positional,
    # 'top' is Ymin and 'bottom' is Ymax.
    @property
    def left(self) -> float:
        return self.xmin

    @property
    def top(self) -> float:
        return self.ymin

    @property
    def right(self) -> float:
        return self.xmax

    @property
    def bottom(self) -> float:
        return self.ymax


class MBox(NamedTuple):
    mmin: float
    mmax: float


class ZBox(NamedTuple):
    zmin: float
    zmax: float


PointsT = tuple[Point2D, ...]

# Anything that hands out bytes through the buffer protocol
BufferT = Union[bytes, bytearray, memoryview]


class ReadSeekableBinStream(Protocol):
    def seek(self, offset: int, whence: int = 0) -> int: ...
    def tell(self) -> int: ...
    def read(self, size: int = -1) -> bytes: ...


# File name, file object or anything with a read() method that returns bytes.
BinaryFileT = Union[str, PathLike[Any], IO[bytes]]
