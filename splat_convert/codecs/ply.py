"""
PLY codec.

Reads ascii and binary (little/big endian) PLY files with scalar
properties into a FileRecord, and writes binary little-endian PLY.
A table written through the pipeline becomes a single 'vertex' element.
"""

from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple

import numpy as np

from splat_utils.data_table import Column, DataTable, Element, FileRecord

from ..errors import CodecError
from .registry import WriteContext


PLY_TYPES = {
    'char': 'i1', 'int8': 'i1',
    'uchar': 'u1', 'uint8': 'u1',
    'short': 'i2', 'int16': 'i2',
    'ushort': 'u2', 'uint16': 'u2',
    'int': 'i4', 'int32': 'i4',
    'uint': 'u4', 'uint32': 'u4',
    'float': 'f4', 'float32': 'f4',
    'double': 'f8', 'float64': 'f8',
}

# Names written for each dtype (the canonical PLY spellings)
PLY_TYPE_NAMES = {
    np.dtype('i1'): 'char',
    np.dtype('u1'): 'uchar',
    np.dtype('i2'): 'short',
    np.dtype('u2'): 'ushort',
    np.dtype('i4'): 'int',
    np.dtype('u4'): 'uint',
    np.dtype('f4'): 'float',
    np.dtype('f8'): 'double',
}

FORMATS = {
    'ascii': None,
    'binary_little_endian': '<',
    'binary_big_endian': '>',
}

MAX_HEADER_LINES = 4096

# (element name, count, [(property name, dtype code)])
ElementHeader = Tuple[str, int, List[Tuple[str, str]]]


def _read_header(fh: BinaryIO) -> Tuple[Optional[str], List[str], List[ElementHeader]]:
    magic = fh.readline().strip()
    if magic != b'ply':
        raise CodecError("Not a PLY file (missing 'ply' magic)")

    byte_order = None
    format_seen = False
    comments: List[str] = []
    elements: List[ElementHeader] = []

    for _ in range(MAX_HEADER_LINES):
        raw = fh.readline()
        if not raw:
            raise CodecError("Unexpected end of file in PLY header")
        line = raw.decode('ascii', errors='replace').strip()
        if not line:
            continue
        if line == 'end_header':
            break

        keyword, _, rest = line.partition(' ')
        if keyword == 'format':
            parts = rest.split()
            if not parts or parts[0] not in FORMATS:
                raise CodecError(f"Unsupported PLY format: {rest}")
            byte_order = FORMATS[parts[0]]
            format_seen = True
        elif keyword == 'comment':
            comments.append(rest)
        elif keyword == 'obj_info':
            continue
        elif keyword == 'element':
            parts = rest.split()
            if len(parts) != 2:
                raise CodecError(f"Malformed PLY element line: {line}")
            elements.append((parts[0], int(parts[1]), []))
        elif keyword == 'property':
            parts = rest.split()
            if not elements:
                raise CodecError(f"PLY property outside of an element: {line}")
            if parts and parts[0] == 'list':
                raise CodecError(f"PLY list properties are not supported: {line}")
            if len(parts) != 2 or parts[0] not in PLY_TYPES:
                raise CodecError(f"Unsupported PLY property: {line}")
            elements[-1][2].append((parts[1], PLY_TYPES[parts[0]]))
        else:
            raise CodecError(f"Unexpected PLY header line: {line}")
    else:
        raise CodecError("PLY header too long (no end_header)")

    if not format_seen:
        raise CodecError("PLY header has no format line")

    return byte_order, comments, elements


def _read_binary_element(fh: BinaryIO, byte_order: str, header: ElementHeader) -> DataTable:
    name, count, properties = header
    if not properties:
        return DataTable()
    dtype = np.dtype([(pname, byte_order + code) for pname, code in properties])
    if count == 0:
        return DataTable([Column(pname, np.zeros(0, dtype=code)) for pname, code in properties])
    nbytes = dtype.itemsize * count
    buf = fh.read(nbytes)
    if len(buf) < nbytes:
        raise CodecError(
            f"PLY element '{name}' truncated: expected {nbytes} bytes, got {len(buf)}"
        )
    data = np.frombuffer(buf, dtype=dtype, count=count)
    return DataTable([
        Column(pname, data[pname].astype(np.dtype(code)))
        for pname, code in properties
    ])


def _read_ascii_element(fh: BinaryIO, header: ElementHeader) -> DataTable:
    name, count, properties = header
    rows = np.empty((count, len(properties)), dtype=np.float64)
    for i in range(count):
        raw = fh.readline()
        if not raw:
            raise CodecError(f"PLY element '{name}' truncated at row {i}")
        values = raw.decode('ascii', errors='replace').split()
        if len(values) != len(properties):
            raise CodecError(
                f"PLY element '{name}' row {i} has {len(values)} values, "
                f"expected {len(properties)}"
            )
        rows[i] = [float(v) for v in values]
    return DataTable([
        Column(pname, rows[:, i].astype(np.dtype(code)))
        for i, (pname, code) in enumerate(properties)
    ])


def read_ply(fh: BinaryIO, filename: Optional[Path] = None) -> FileRecord:
    """Parse every element of a PLY file into a FileRecord."""
    byte_order, comments, headers = _read_header(fh)

    elements = []
    for header in headers:
        if byte_order is None:
            table = _read_ascii_element(fh, header)
        else:
            table = _read_binary_element(fh, byte_order, header)
        elements.append(Element(header[0], table))

    return FileRecord(comments=comments, elements=elements)


def write_ply_record(fh: BinaryIO, record: FileRecord) -> None:
    """Write a FileRecord as binary little-endian PLY."""
    lines = ['ply', 'format binary_little_endian 1.0']
    lines.extend(f'comment {c}' for c in record.comments)

    blocks = []
    for element in record.elements:
        table = element.table
        names = table.column_names
        if len(set(names)) != len(names):
            raise CodecError(f"PLY element '{element.name}' has duplicate column names: {names}")

        lines.append(f'element {element.name} {table.num_rows}')
        fields = []
        for column in table.columns:
            type_name = PLY_TYPE_NAMES.get(column.dtype)
            if type_name is None:
                raise CodecError(
                    f"Column '{column.name}' has type {column.dtype}, which PLY cannot store"
                )
            lines.append(f'property {type_name} {column.name}')
            fields.append((column.name, column.dtype.newbyteorder('<')))

        data = np.empty(table.num_rows, dtype=np.dtype(fields))
        for column in table.columns:
            data[column.name] = column.data
        blocks.append(data)

    lines.append('end_header')
    fh.write(('\n'.join(lines) + '\n').encode('ascii'))
    for data in blocks:
        fh.write(data.tobytes())


def write_ply(fh: BinaryIO, table: DataTable, context: WriteContext) -> None:
    write_ply_record(fh, FileRecord(comments=[], elements=[Element('vertex', table)]))


def is_compressed_ply(record: FileRecord) -> bool:
    """
    True if ``record`` has the layout of a PlayCanvas compressed PLY:
    'chunk' then 'vertex' elements (optionally 'sh'), with packed vertex data.
    """
    names = record.element_names
    if names not in (['chunk', 'vertex'], ['chunk', 'vertex', 'sh']):
        return False

    chunk = record.elements[0].table
    vertex = record.elements[1].table
    chunk_columns = ('min_x', 'min_y', 'min_z', 'max_x', 'max_y', 'max_z')
    vertex_columns = ('packed_position', 'packed_rotation', 'packed_scale', 'packed_color')

    if not all(chunk.has_column(c) for c in chunk_columns):
        return False
    return all(
        vertex.get_column_by_identity(c, np.uint32) is not None
        for c in vertex_columns
    )
