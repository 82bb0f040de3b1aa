"""CSV writer: one header line of column names, one line per splat."""

import io
from typing import BinaryIO

import numpy as np

from splat_utils.data_table import DataTable

from .registry import WriteContext


def _column_format(dtype: np.dtype) -> str:
    if dtype.kind in 'iu':
        return '%d'
    if dtype == np.float32:
        return '%.9g'
    return '%.17g'


def write_csv(fh: BinaryIO, table: DataTable, context: WriteContext) -> None:
    text = io.TextIOWrapper(fh, encoding='utf-8', newline='')
    try:
        text.write(','.join(table.column_names) + '\n')
        if table.num_columns and table.num_rows:
            # object cells keep 64-bit integers exact under %d
            matrix = np.empty((table.num_rows, table.num_columns), dtype=object)
            for i, column in enumerate(table.columns):
                matrix[:, i] = column.data
            fmt = [_column_format(c.dtype) for c in table.columns]
            np.savetxt(text, matrix, fmt=fmt, delimiter=',', newline='\n')
        text.flush()
    finally:
        # hand the binary handle back without closing it
        text.detach()
