"""
Codec registry.

Format codecs are collaborators of the pipeline: each one converts between
a DataTable / FileRecord and its own byte layout. The pipeline only looks
them up by CodecKind.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Dict, Optional, Sequence

from splat_utils.data_table import DataTable, FileRecord

from ..errors import CodecError
from ..formats import CodecKind


@dataclass(frozen=True)
class WriteContext:
    """Options forwarded opaquely to writers (sog/lod use iterations and device)."""
    filename: Path
    iterations: int = 10
    device: str = "cpu"


# fn(open binary file, source filename) -> FileRecord
Reader = Callable[[BinaryIO, Path], FileRecord]
# fn(open binary file, table, context); must not close the file
Writer = Callable[[BinaryIO, DataTable, WriteContext], None]
# fn(filename, params) -> FileRecord; no file is opened by the pipeline
Generator = Callable[[Path, Sequence[str]], FileRecord]
# fn(parsed compressed ply) -> vertex table
Decompressor = Callable[[FileRecord], DataTable]


class CodecRegistry:
    """Lookup tables from CodecKind to reader/writer callables."""

    def __init__(self):
        self.readers: Dict[CodecKind, Reader] = {}
        self.writers: Dict[CodecKind, Writer] = {}
        self.generator: Optional[Generator] = None
        self.decompressor: Optional[Decompressor] = None

    def register_reader(self, kind: CodecKind, reader: Reader) -> None:
        self.readers[CodecKind(kind)] = reader

    def register_writer(self, kind: CodecKind, writer: Writer) -> None:
        self.writers[CodecKind(kind)] = writer

    def register_generator(self, generator: Generator) -> None:
        self.generator = generator

    def register_decompressor(self, decompressor: Decompressor) -> None:
        self.decompressor = decompressor

    def get_reader(self, kind: CodecKind) -> Reader:
        try:
            return self.readers[kind]
        except KeyError:
            raise CodecError(f"No reader registered for '{kind.value}' files") from None

    def get_writer(self, kind: CodecKind) -> Writer:
        try:
            return self.writers[kind]
        except KeyError:
            raise CodecError(f"No writer registered for '{kind.value}' files") from None

    def get_generator(self) -> Generator:
        if self.generator is None:
            raise CodecError("No procedural generator registered for '.mjs' inputs")
        return self.generator

    def get_decompressor(self) -> Decompressor:
        if self.decompressor is None:
            raise CodecError("No decompressor registered for compressed PLY inputs")
        return self.decompressor
