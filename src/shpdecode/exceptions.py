class ShapefileException(Exception):
    """An exception to handle shapefile specific problems."""


class NullInput(ShapefileException):
    """No buffer was supplied."""


class InvalidLength(ShapefileException):
    """A header or record is not the size it is required to be."""


class RecordTooShort(InvalidLength):
    """A shape record is too short to hold a record header and shape type."""


class InvalidHeader(ShapefileException):
    pass


class BadFileCode(InvalidHeader):
    pass


class BadVersion(InvalidHeader):
    pass


class StructuralMismatch(ShapefileException):
    """The length declared in a record disagrees with the bytes present."""


class InvalidShapeData(StructuralMismatch):
    """The geometry payload of a record is inconsistent with its counts."""


class UnsupportedShapeType(ShapefileException):
    def __init__(self, shapeType: int):
        self.shapeType = shapeType
        super().__init__(f"Shape type {shapeType} is not supported.")


class BufferTooSmall(ShapefileException):
    """A read would run past the end of the buffer."""


# Alternative names for the same failures
NullBuffer = NullInput
TooShort = RecordTooShort
LengthMismatch = StructuralMismatch
