from __future__ import annotations

import io
import logging
import os
from collections.abc import Iterator
from os import PathLike
from types import TracebackType
from typing import IO, Any

from .constants import (
    HEADER_LENGTH,
    INDEX_RECORD_LENGTH,
    RECORD_HEADER_LENGTH,
    VERBOSE,
)
from .dbf import DbfTable, Field
from .exceptions import InvalidHeader, ShapefileException
from .header import Header, parse_header
from .helpers import fsdecode_if_pathlike, read_int32
from .shapes import MetadataT, Shape, parse_shape
from .types import BinaryFileT, ByteOrder, ReadSeekableBinStream

logger = logging.getLogger(__name__)


def _read_range(f: ReadSeekableBinStream, offset: int, length: int) -> bytes:
    """Returns up to length bytes starting at offset.  Fewer bytes
    are returned if the file ends first, the decoders report that."""
    f.seek(offset)
    return f.read(length)


class Reader:
    """Reads the shapes of a shapefile along with their attributes.

    The .shp main file and the .shx index file are required, the .dbf
    attribute table is optional (shapes then carry no metadata).  The
    "shapefile_path" argument is the path to any of the three files, the
    extension is ignored.  Alternatively, already open binary file objects
    can be given with the shp, shx and dbf keyword arguments.  Files
    opened by the Reader are closed by close() or on leaving a with block,
    files given as objects are left open.

    Only the headers are read upon loading.  Each shape is located through
    the index file and decoded when it is requested.

    A Reader holds the read position of its files, so one Reader must not
    be iterated from several threads at once.
    """

    CONSTITUENT_FILE_EXTS = ["shp", "shx", "dbf"]
    assert all(ext.islower() for ext in CONSTITUENT_FILE_EXTS)

    def __init__(
        self,
        shapefile_path: str | PathLike[Any] = "",
        /,
        *,
        encoding: str = "utf-8",
        encodingErrors: str = "strict",
        shp: BinaryFileT | None = None,
        shx: BinaryFileT | None = None,
        dbf: BinaryFileT | None = None,
    ):
        self.shp: IO[bytes] | None = None
        self.shx: IO[bytes] | None = None
        self.dbf: IO[bytes] | None = None
        self._files_to_close: list[IO[bytes]] = []
        self._table: DbfTable | None = None
        self.shapeName = "Not specified"
        self.encoding = encoding
        self.encodingErrors = encodingErrors
        try:
            if shapefile_path:
                self.load(fsdecode_if_pathlike(shapefile_path))
            else:
                self.shp = self._open_from_file_or_name("shp", shp)
                self.shx = self._open_from_file_or_name("shx", shx)
                self.dbf = self._open_from_file_or_name("dbf", dbf)
                self._read_headers()
        except BaseException:
            # Don't leave files open if the shapefile turned out to be unreadable
            self.close()
            raise

    def _open_from_file_or_name(
        self, ext: str, file_: BinaryFileT | None
    ) -> IO[bytes] | None:
        if file_ is None:
            return None

        if isinstance(file_, (str, PathLike)):
            baseName, __ = os.path.splitext(file_)
            f = self._load_constituent_file(baseName, ext)
            if f is None:
                raise ShapefileException(f"Unable to open {baseName}.{ext}")
            return f

        if hasattr(file_, "read"):
            # Copy if required
            try:
                file_.seek(0)
                return file_
            except (NameError, io.UnsupportedOperation):
                return io.BytesIO(file_.read())

        raise ShapefileException(
            f"Could not load shapefile constituent file from: {file_}"
        )

    def _try_get_open_constituent_file(
        self,
        shapefile_name: str,
        ext: str,
    ) -> IO[bytes] | None:
        """
        Attempts to open a .shp, .dbf or .shx file,
        with both lower case and upper case file extensions,
        and return it.  If it was not possible to open the file, None is returned.
        """
        assert ext in self.CONSTITUENT_FILE_EXTS

        try:
            return open(f"{shapefile_name}.{ext}", "rb")
        except OSError:
            try:
                return open(f"{shapefile_name}.{ext.upper()}", "rb")
            except OSError:
                return None

    def _load_constituent_file(
        self,
        shapefile_name: str,
        ext: str,
    ) -> IO[bytes] | None:
        """
        Attempts to open a .shp, .dbf or .shx file, with the extension
        as both lower and upper case, and if successful append it to
        self._files_to_close.
        """
        f = self._try_get_open_constituent_file(shapefile_name, ext)
        if f is not None:
            logger.debug("Opened %s.%s", shapefile_name, ext)
            self._files_to_close.append(f)
        return f

    def load(self, shapefile: str) -> None:
        """Opens the .shp, .shx and (if present) .dbf files of a
        shapefile and reads their headers.  Normally this method would
        be called by the constructor with the file name as an argument."""
        (shapeName, __ext) = os.path.splitext(shapefile)
        self.shapeName = shapeName
        self.shp = self._load_constituent_file(shapeName, "shp")
        self.shx = self._load_constituent_file(shapeName, "shx")
        self.dbf = self._load_constituent_file(shapeName, "dbf")
        if not self.shp:
            raise ShapefileException(f"Unable to open {shapeName}.shp")
        if not self.shx:
            raise ShapefileException(f"Unable to open {shapeName}.shx")
        self._read_headers()

    def _read_headers(self) -> None:
        if not self.shp or not self.shx:
            raise ShapefileException(
                "Shapefile Reader requires both a .shp and a .shx file or file-like object."
            )
        self.shpHeader: Header = parse_header(_read_range(self.shp, 0, HEADER_LENGTH))
        self.shxHeader: Header = parse_header(_read_range(self.shx, 0, HEADER_LENGTH))

        self.shapeType = self.shpHeader.shape_type
        self.bbox = self.shpHeader.bbox
        self.zbox = self.shpHeader.zbox
        self.mbox = self.shpHeader.mbox

        # The index file length is in 16 bit words and includes the 50 word
        # header, each index record after it is 4 words long.
        if self.shxHeader.file_length < HEADER_LENGTH // 2:
            raise InvalidHeader(
                f"The index file declares a length of {self.shxHeader.file_length} "
                f"words, shorter than its own {HEADER_LENGTH // 2} word header."
            )
        self.numShapes = (self.shxHeader.file_length - HEADER_LENGTH // 2) // (
            INDEX_RECORD_LENGTH // 2
        )
        logger.debug(
            "Read headers: %s shapes of type %s",
            self.numShapes,
            self.shpHeader.shapeTypeName,
        )

        if VERBOSE and self.shxHeader.shape_type != self.shapeType:
            logger.warning(
                "Shape type of the index file (%s) differs from the main file (%s).",
                self.shxHeader.shapeTypeName,
                self.shpHeader.shapeTypeName,
            )

        if self.dbf:
            self._table = DbfTable(
                self.dbf, encoding=self.encoding, encodingErrors=self.encodingErrors
            )
            if VERBOSE and self._table.numRecords != self.numShapes:
                logger.warning(
                    "The dbf file has %s records but the index lists %s shapes, "
                    "only the first %s are read.",
                    self._table.numRecords,
                    self.numShapes,
                    min(self._table.numRecords, self.numShapes),
                )

    def __str__(self) -> str:
        """
        Use some general info on the shapefile as __str__
        """
        info = ["shapefile Reader"]
        if self.shp:
            info.append(
                f"    {len(self)} shapes (type '{self.shapeTypeName}')"
            )
        if self._table is not None:
            info.append(f"    {len(self._table)} records ({len(self.fields)} fields)")
        return "\n".join(info)

    def __enter__(self) -> Reader:
        """
        Enter phase of context manager.
        """
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        """
        Exit phase of context manager, close opened files.
        """
        self.close()
        return None

    def close(self) -> None:
        # Close any files that the reader opened (but not those given by user)
        for attribute in self._files_to_close:
            if hasattr(attribute, "close"):
                try:
                    attribute.close()
                    logger.debug("Closed %s", getattr(attribute, "name", attribute))
                except OSError:
                    logger.debug("Failed to close %r", attribute, exc_info=True)
        self._files_to_close = []

    def __len__(self) -> int:
        """Returns the number of shapes that are read together with
        their attributes."""
        if self._table is not None:
            return min(self.numShapes, self._table.numRecords)
        return self.numShapes

    def __iter__(self) -> Iterator[Shape]:
        """Iterates through the shapes in the shapefile."""
        yield from self.iterShapes()

    @property
    def shapeTypeName(self) -> str:
        return self.shpHeader.shapeTypeName

    @property
    def fields(self) -> list[Field]:
        """The columns of the dbf file, or an empty list without one."""
        if self._table is None:
            return []
        return self._table.fields

    def __restrictIndex(self, i: int) -> int:
        """Provides list-like handling of a shape index with a clearer
        error message if the index is out of bounds."""
        n = len(self)
        if not -n <= i < n:
            raise IndexError(f"Shape index: {i} out of range. Number of shapes: {n}")
        return range(n)[i]

    def __shapeOffset(self, i: int) -> tuple[int, int]:
        """Returns the byte offset and byte length in the .shp file of shape i,
        including its record header, from the .shx index."""
        assert self.shx is not None
        entry = _read_range(
            self.shx, HEADER_LENGTH + i * INDEX_RECORD_LENGTH, INDEX_RECORD_LENGTH
        )
        # Both values are in 16 bit words
        offset = read_int32(entry, 0, ByteOrder.BIG)
        contentLength = read_int32(entry, 4, ByteOrder.BIG)
        return offset * 2, contentLength * 2 + RECORD_HEADER_LENGTH

    def metadata(self, i: int) -> MetadataT:
        """Returns the attributes of record i, keyed by lower case column name."""
        if self._table is None:
            return {}
        return self._table.record(self.__restrictIndex(i))

    def shape(self, i: int = 0) -> Shape:
        """Returns the shape at index i, along with its attributes."""
        if not self.shp:
            raise ShapefileException(
                "Shapefile Reader requires a shapefile or file-like object."
            )
        i = self.__restrictIndex(i)
        offset, length = self.__shapeOffset(i)
        data = _read_range(self.shp, offset, length)
        return parse_shape(data, self.metadata(i))

    def iterShapes(self, skip_invalid: bool = False) -> Iterator[Shape]:
        """Returns a generator of the shapes in the shapefile.  Useful
        for handling large shapefiles.
        A record that cannot be decoded raises its ShapefileException,
        unless skip_invalid is set, in which case it is logged and skipped.
        """
        for i in range(len(self)):
            try:
                shape = self.shape(i)
            except ShapefileException as e:
                if not skip_invalid:
                    raise
                if VERBOSE:
                    logger.warning("Skipping shape %s: %s", i, e)
                continue
            yield shape

    def shapes(self, skip_invalid: bool = False) -> list[Shape]:
        """Returns all shapes in the shapefile."""
        return list(self.iterShapes(skip_invalid=skip_invalid))

    def iterRecords(self) -> Iterator[MetadataT]:
        """Returns a generator of the attributes of every row in the dbf file."""
        if self._table is None:
            raise ShapefileException(
                "Shapefile Reader requires a dbf file or file-like object to read records."
            )
        yield from self._table.iterRecords()

    def records(self) -> list[MetadataT]:
        """Returns the attributes of every row in the dbf file."""
        return list(self.iterRecords())
