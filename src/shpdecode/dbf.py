from __future__ import annotations

from collections.abc import Iterator
from struct import Struct, calcsize, unpack
from typing import IO, NamedTuple

from .exceptions import ShapefileException


class Field(NamedTuple):
    name: str
    field_type: str
    size: int
    decimal: int

    def __repr__(self) -> str:
        return f'Field(name="{self.name}", field_type="{self.field_type}", size={self.size}, decimal={self.decimal})'


class DbfTable:
    """Reads the rows of a .dbf attribute table as mappings from lower
    case column name to the row's value as text.

    Values are not converted by field type.  Every row is returned,
    including rows flagged as deleted, so that row i always belongs to
    shape i of the matching .shp file.

    Xbase-related code borrows heavily from ActiveState Python Cookbook
    Recipe 362715 by Raymond Hettinger.
    """

    def __init__(
        self,
        dbf: IO[bytes],
        encoding: str = "utf-8",
        encodingErrors: str = "strict",
    ):
        self.dbf = dbf
        self.encoding = encoding
        self.encodingErrors = encodingErrors
        self.fields: list[Field] = []
        self.__header()

    def __header(self) -> None:
        dbf = self.dbf
        # read relevant header parts
        dbf.seek(0)
        header = dbf.read(32)
        if len(header) != 32:
            raise ShapefileException(
                f"Shapefile dbf header is truncated. Got: {len(header)} bytes."
            )
        self.numRecords, self.__dbfHdrLength, self.__recordLength = unpack(
            "<xxxxLHH20x", header
        )

        # read fields
        numFields = (self.__dbfHdrLength - 33) // 32
        for __field in range(numFields):
            descriptor = dbf.read(32)
            if len(descriptor) != 32:
                raise ShapefileException(
                    f"Shapefile dbf field descriptor is truncated. Got: {len(descriptor)} bytes."
                )
            encoded_name, encoded_type_char, size, decimal = unpack(
                "<11sc4xBB14x", descriptor
            )

            if b"\x00" in encoded_name:
                idx = encoded_name.index(b"\x00")
            else:
                idx = len(encoded_name) - 1
            encoded_name = encoded_name[:idx]
            name = encoded_name.decode(self.encoding, self.encodingErrors)
            name = name.lstrip()

            field_type = encoded_type_char.decode("ascii", "replace").upper()
            self.fields.append(Field(name, field_type, size, decimal))
        terminator = dbf.read(1)
        if terminator != b"\r":
            raise ShapefileException(
                "Shapefile dbf header lacks expected terminator. (likely corrupt?)"
            )

        # the deletion flag is unpacked first and dropped
        fmt = "1x" + "".join(f"{field.size}s" for field in self.fields)
        fmtSize = calcsize(fmt)
        # total size of fields should add up to recordlength from the header
        if fmtSize < self.__recordLength:
            fmt += f"{self.__recordLength - fmtSize}x"
        self.__recStruct = Struct(fmt)
        self.__names = [field.name.lower() for field in self.fields]

    def __len__(self) -> int:
        return self.numRecords

    def __record(self) -> dict[str, str]:
        """Reads the row at the current position of the file."""
        data = self.dbf.read(self.__recStruct.size)
        if len(data) != self.__recStruct.size:
            raise ShapefileException(
                f"Shapefile dbf record is truncated. Expected {self.__recStruct.size} "
                f"bytes, got {len(data)}."
            )
        values = self.__recStruct.unpack(data)
        return {
            name: value.decode(self.encoding, self.encodingErrors)
            .strip()
            .rstrip("\x00")  # remove null-padding at end of strings
            for name, value in zip(self.__names, values)
        }

    def record(self, i: int) -> dict[str, str]:
        """Returns row i of the table."""
        if not 0 <= i < self.numRecords:
            raise IndexError(
                f"Record index: {i} out of range. Number of records: {self.numRecords}"
            )
        self.dbf.seek(self.__dbfHdrLength + (i * self.__recordLength))
        return self.__record()

    def iterRecords(self) -> Iterator[dict[str, str]]:
        """Returns a generator of all rows, in file order."""
        self.dbf.seek(self.__dbfHdrLength)
        for __i in range(self.numRecords):
            yield self.__record()
