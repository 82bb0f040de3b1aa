"""Tests for the built-in codecs and the codec registry."""

import io

import numpy as np
import pytest

from splat_convert.codecs import (
    CodecRegistry,
    WriteContext,
    is_compressed_ply,
    read_ply,
    registry,
    write_csv,
    write_ply,
    write_ply_record,
)
from splat_convert.errors import CodecError
from splat_convert.formats import CodecKind
from splat_utils.data_table import Column, DataTable, Element, FileRecord


def compressed_ply_record():
    chunk = DataTable([
        Column(name, np.zeros(1, dtype=np.float32))
        for name in ('min_x', 'min_y', 'min_z', 'max_x', 'max_y', 'max_z')
    ])
    vertex = DataTable([
        Column(name, np.zeros(3, dtype=np.uint32))
        for name in ('packed_position', 'packed_rotation', 'packed_scale', 'packed_color')
    ])
    return FileRecord(elements=[Element('chunk', chunk), Element('vertex', vertex)])


class TestPlyReader:
    """Tests for read_ply."""

    def test_ascii(self):
        content = b"ply\nformat ascii 1.0\nelement vertex 3\n" \
                  b"property float x\nproperty float y\nproperty uchar red\nend_header\n" \
                  b"0 0 255\n1.5 2 0\n-3 4.25 7\n"

        record = read_ply(io.BytesIO(content))

        table = record.elements[0].table
        assert record.element_names == ['vertex']
        assert table.num_rows == 3
        assert table.get_column('x').dtype == np.float32
        assert table.get_column('red').dtype == np.uint8
        np.testing.assert_array_equal(table.get_column('y').data, [0, 2, 4.25])
        np.testing.assert_array_equal(table.get_column('red').data, [255, 0, 7])

    def test_big_endian(self):
        values = np.array([1.5, -2.0], dtype='>f4')
        content = b"ply\nformat binary_big_endian 1.0\nelement vertex 2\n" \
                  b"property float x\nend_header\n" + values.tobytes()

        table = read_ply(io.BytesIO(content)).elements[0].table

        assert table.get_column('x').dtype == np.float32
        np.testing.assert_array_equal(table.get_column('x').data, [1.5, -2.0])

    def test_not_a_ply(self):
        with pytest.raises(CodecError):
            read_ply(io.BytesIO(b"splat\x00\x01"))

    def test_list_properties_rejected(self):
        content = b"ply\nformat ascii 1.0\nelement face 1\n" \
                  b"property list uchar int vertex_indices\nend_header\n3 0 1 2\n"

        with pytest.raises(CodecError):
            read_ply(io.BytesIO(content))

    def test_truncated_binary(self):
        content = b"ply\nformat binary_little_endian 1.0\nelement vertex 10\n" \
                  b"property float x\nend_header\n" + b"\x00" * 8

        with pytest.raises(CodecError):
            read_ply(io.BytesIO(content))

    def test_missing_end_header(self):
        with pytest.raises(CodecError):
            read_ply(io.BytesIO(b"ply\nformat ascii 1.0\nelement vertex 1\n"))


class TestPlyWriter:
    """Tests for write_ply / write_ply_record."""

    def test_binary_round_trip_keeps_types_and_comments(self):
        table = DataTable([
            Column('x', np.array([0.25, -1.0, 3.5], dtype=np.float32)),
            Column('weight', np.array([1e-3, 2.0, 7.0], dtype=np.float64)),
            Column('label', np.array([1, 200, 3], dtype=np.uint8)),
            Column('index', np.array([-5, 0, 70000], dtype=np.int32)),
        ])
        record = FileRecord(comments=['made by tests'], elements=[Element('vertex', table)])
        buf = io.BytesIO()

        write_ply_record(buf, record)
        buf.seek(0)
        result = read_ply(buf)

        assert result.comments == ['made by tests']
        loaded = result.elements[0].table
        assert loaded.column_names == table.column_names
        for original in table.columns:
            column = loaded.get_column(original.name)
            assert column.dtype == original.dtype
            np.testing.assert_array_equal(column.data, original.data)

    def test_header_lists_properties(self):
        table = DataTable([Column('x', np.zeros(2, dtype=np.float32))])
        buf = io.BytesIO()

        write_ply(buf, table, WriteContext(filename='out.ply'))

        header = buf.getvalue().split(b'end_header\n')[0].decode()
        assert 'format binary_little_endian 1.0' in header
        assert 'element vertex 2' in header
        assert 'property float x' in header

    def test_duplicate_column_names_rejected(self):
        table = DataTable([
            Column('x', np.zeros(1, dtype=np.float32)),
            Column('x', np.zeros(1, dtype=np.float64)),
        ])

        with pytest.raises(CodecError):
            write_ply(io.BytesIO(), table, WriteContext(filename='out.ply'))

    def test_int64_rejected(self):
        table = DataTable([Column('id', np.zeros(1, dtype=np.int64))])

        with pytest.raises(CodecError):
            write_ply(io.BytesIO(), table, WriteContext(filename='out.ply'))


class TestCsvWriter:
    """Tests for write_csv."""

    def test_header_and_rows(self):
        table = DataTable([
            Column('x', np.array([0.5, -1.25], dtype=np.float32)),
            Column('label', np.array([3, 250], dtype=np.uint8)),
        ])
        buf = io.BytesIO()

        write_csv(buf, table, WriteContext(filename='out.csv'))

        assert not buf.closed
        lines = buf.getvalue().decode().splitlines()
        assert lines == ['x,label', '0.5,3', '-1.25,250']

    def test_large_integers_are_exact(self):
        """64-bit values past 2**53 are written digit for digit."""
        table = DataTable([
            Column('id', np.array([2**53 + 1, -(2**63)], dtype=np.int64)),
            Column('mask', np.array([2**64 - 1, 0], dtype=np.uint64)),
        ])
        buf = io.BytesIO()

        write_csv(buf, table, WriteContext(filename='out.csv'))

        lines = buf.getvalue().decode().splitlines()
        assert lines == [
            'id,mask',
            '9007199254740993,18446744073709551615',
            '-9223372036854775808,0',
        ]

    def test_empty_table_writes_header_only(self):
        table = DataTable([Column('x', np.zeros(0, dtype=np.float32))])
        buf = io.BytesIO()

        write_csv(buf, table, WriteContext(filename='out.csv'))

        assert buf.getvalue() == b'x\n'


class TestCompressedPlyDetection:
    """Tests for is_compressed_ply."""

    def test_compressed_layout(self):
        assert is_compressed_ply(compressed_ply_record())

    def test_with_sh_element(self):
        record = compressed_ply_record()
        record.elements.append(Element('sh', DataTable()))

        assert is_compressed_ply(record)

    def test_plain_vertex_file(self):
        vertex = DataTable([Column('x', np.zeros(1, dtype=np.float32))])

        assert not is_compressed_ply(FileRecord(elements=[Element('vertex', vertex)]))

    def test_packed_columns_must_be_uint32(self):
        record = compressed_ply_record()
        vertex = record.elements[1].table
        vertex.remove_column('packed_color')
        vertex.add_column(Column('packed_color', np.zeros(3, dtype=np.float32)))

        assert not is_compressed_ply(record)


class TestRegistry:
    """Tests for codec lookup."""

    def test_builtins(self):
        assert registry.get_reader(CodecKind.PLY) is read_ply
        assert registry.get_writer(CodecKind.PLY) is write_ply
        assert registry.get_writer(CodecKind.CSV) is write_csv

    def test_missing_codecs_raise_codec_error(self):
        fresh = CodecRegistry()

        with pytest.raises(CodecError, match="html"):
            fresh.get_writer(CodecKind.HTML)
        with pytest.raises(CodecError):
            fresh.get_reader(CodecKind.SPZ)
        with pytest.raises(CodecError):
            fresh.get_generator()
        with pytest.raises(CodecError):
            fresh.get_decompressor()

    def test_register(self):
        fresh = CodecRegistry()
        reader = lambda fh, filename: FileRecord()

        fresh.register_reader(CodecKind.SPLAT, reader)

        assert fresh.get_reader(CodecKind.SPLAT) is reader
