"""
Format codecs.

The module-level ``registry`` is what the pipeline uses. PLY (read/write)
and CSV (write) are built in; other formats are plugged in with the
``register_*`` functions.
"""

from ..formats import CodecKind
from .csv_writer import write_csv
from .ply import is_compressed_ply, read_ply, write_ply, write_ply_record
from .registry import CodecRegistry, WriteContext

registry = CodecRegistry()
registry.register_reader(CodecKind.PLY, read_ply)
registry.register_writer(CodecKind.PLY, write_ply)
registry.register_writer(CodecKind.CSV, write_csv)

register_reader = registry.register_reader
register_writer = registry.register_writer
register_generator = registry.register_generator
register_decompressor = registry.register_decompressor

__all__ = [
    "CodecRegistry",
    "WriteContext",
    "registry",
    "register_reader",
    "register_writer",
    "register_generator",
    "register_decompressor",
    "read_ply",
    "write_ply",
    "write_ply_record",
    "write_csv",
    "is_compressed_ply",
]
