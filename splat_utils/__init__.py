"""Table model and validation helpers for splat conversion."""

from .data_table import (
    Column,
    DataTable,
    Element,
    FileRecord,
)
from .validation import (
    SPLAT_COLUMNS,
    ConvertOptions,
    is_splat_table,
    missing_splat_columns,
)

__all__ = [
    "Column",
    "DataTable",
    "Element",
    "FileRecord",
    "SPLAT_COLUMNS",
    "ConvertOptions",
    "is_splat_table",
    "missing_splat_columns",
]
