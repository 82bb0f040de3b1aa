"""
Error taxonomy for the conversion pipeline.

Stages raise these (or plain OSError for filesystem failures); only the
orchestrator catches them and turns them into a ConvertResult.
"""

from enum import Enum


class ErrorKind(str, Enum):
    UNSUPPORTED_FORMAT = "unsupported-format"
    SCHEMA_VIOLATION = "schema-violation"
    EMPTY_RESULT = "empty-result"
    IO = "io"
    CODEC = "codec"


class ConversionError(Exception):
    """Base class for pipeline errors."""
    kind = ErrorKind.CODEC


class UnsupportedFormatError(ConversionError):
    """Input or output filename has no known suffix."""
    kind = ErrorKind.UNSUPPORTED_FORMAT


class SchemaViolationError(ConversionError):
    """Table or file does not carry the data the pipeline requires."""
    kind = ErrorKind.SCHEMA_VIOLATION


class EmptyResultError(ConversionError):
    """Nothing left to write after processing."""
    kind = ErrorKind.EMPTY_RESULT


class CodecError(ConversionError):
    """Failure inside (or lookup of) a reader, writer or processor."""
    kind = ErrorKind.CODEC


def classify_error(exc: BaseException) -> ErrorKind:
    """Map an arbitrary exception onto the pipeline's error kinds."""
    if isinstance(exc, ConversionError):
        return exc.kind
    if isinstance(exc, OSError):
        return ErrorKind.IO
    return ErrorKind.CODEC
