from __future__ import annotations

import os
from os import PathLike
from struct import Struct
from typing import Any, TypeVar, overload

from .exceptions import BufferTooSmall, NullInput, ShapefileException
from .types import BufferT, ByteOrder, ByteOrderT

T = TypeVar("T")

# Helpers

_INT32 = {order: Struct(f"{order}i") for order in ByteOrder.__members__}
_DOUBLE = {order: Struct(f"{order}d") for order in ByteOrder.__members__}


@overload
def fsdecode_if_pathlike(path: PathLike[Any]) -> str: ...
@overload
def fsdecode_if_pathlike(path: T) -> T: ...
def fsdecode_if_pathlike(path: Any) -> Any:
    if isinstance(path, PathLike):
        return os.fsdecode(path)  # str

    return path


def _check_span(
    buffer: BufferT | None, offset: int, size: int, order: ByteOrderT
) -> None:
    if buffer is None:
        raise NullInput("A buffer is required, got None.")
    if size < 0:
        raise ShapefileException(f"Cannot read a negative number of bytes: {size}")
    if order not in ByteOrder.__members__:
        raise ShapefileException(
            f"Byte order must be one of {ByteOrder.__members__}. Got: {order!r}"
        )
    if offset < 0 or offset + size > len(buffer):
        raise BufferTooSmall(
            f"Cannot read {size} bytes at offset {offset} "
            f"from a buffer of {len(buffer)} bytes."
        )


def read_int32(buffer: BufferT | None, offset: int, order: ByteOrderT) -> int:
    """Returns the signed 32 bit integer stored at offset in the given byte order."""
    _check_span(buffer, offset, 4, order)
    return _INT32[order].unpack_from(buffer, offset)[0]  # type: ignore[arg-type]


def read_double(buffer: BufferT | None, offset: int, order: ByteOrderT) -> float:
    """Returns the 64 bit float stored at offset in the given byte order."""
    _check_span(buffer, offset, 8, order)
    return _DOUBLE[order].unpack_from(buffer, offset)[0]  # type: ignore[arg-type]


def read_int32s(
    buffer: BufferT | None, offset: int, count: int, order: ByteOrderT
) -> tuple[int, ...]:
    """Returns count consecutive signed 32 bit integers starting at offset."""
    _check_span(buffer, offset, 4 * count, order)
    return Struct(f"{order}{count}i").unpack_from(buffer, offset)  # type: ignore[arg-type]


def read_doubles(
    buffer: BufferT | None, offset: int, count: int, order: ByteOrderT
) -> tuple[float, ...]:
    """Returns count consecutive 64 bit floats starting at offset."""
    _check_span(buffer, offset, 8 * count, order)
    return Struct(f"{order}{count}d").unpack_from(buffer, offset)  # type: ignore[arg-type]
