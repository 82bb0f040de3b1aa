"""Columnar table model shared by every codec and pipeline stage."""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np


ColumnIdentity = Tuple[str, np.dtype]


class Column:
    """A named, typed 1-D buffer. The element type is the array dtype."""

    def __init__(self, name: str, data: np.ndarray):
        data = np.asarray(data)
        if data.ndim != 1:
            raise ValueError(f"Column '{name}' must be 1-D, got shape {data.shape}")
        # native byte order, so identity compares element types only
        data = np.ascontiguousarray(data, dtype=data.dtype.newbyteorder('='))
        self.name = name
        self.data = data

    @property
    def dtype(self) -> np.dtype:
        return self.data.dtype

    @property
    def identity(self) -> ColumnIdentity:
        """(name, element type) pair used to match columns across tables."""
        return (self.name, self.data.dtype)

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"Column({self.name!r}, {self.data.dtype}, rows={len(self.data)})"


class DataTable:
    """
    Ordered sequence of equal-length columns.

    Column order is presentational only. Column names are expected to be
    unique within a table; identity for merging is (name, dtype).
    """

    def __init__(self, columns: Optional[Sequence[Column]] = None):
        self.columns: List[Column] = []
        for column in columns or []:
            self.add_column(column)

    @property
    def num_rows(self) -> int:
        return len(self.columns[0]) if self.columns else 0

    @property
    def num_columns(self) -> int:
        return len(self.columns)

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def has_column(self, name: str) -> bool:
        return any(c.name == name for c in self.columns)

    def get_column(self, name: str) -> Column:
        for column in self.columns:
            if column.name == name:
                return column
        raise KeyError(f"No column named '{name}'")

    def get_column_by_identity(self, name: str, dtype) -> Optional[Column]:
        dtype = np.dtype(dtype).newbyteorder('=')
        for column in self.columns:
            if column.name == name and column.dtype == dtype:
                return column
        return None

    def add_column(self, column: Column) -> None:
        if self.columns and len(column) != self.num_rows:
            raise ValueError(
                f"Column '{column.name}' has {len(column)} rows, table has {self.num_rows}"
            )
        self.columns.append(column)

    def remove_column(self, name: str) -> Column:
        column = self.get_column(name)
        self.columns.remove(column)
        return column

    def clone(self) -> "DataTable":
        """Deep copy; the returned table shares no buffers with this one."""
        return DataTable([Column(c.name, c.data.copy()) for c in self.columns])

    def take(self, rows: Union[np.ndarray, Sequence[int]]) -> "DataTable":
        """Return a fresh table holding the selected rows (index array or bool mask)."""
        rows = np.asarray(rows)
        return DataTable([Column(c.name, c.data[rows]) for c in self.columns])

    def __iter__(self) -> Iterator[Column]:
        return iter(self.columns)

    def __repr__(self) -> str:
        return f"DataTable(rows={self.num_rows}, columns={self.column_names})"


@dataclass
class Element:
    """Named sub-record of a file, e.g. the PLY 'vertex' element."""
    name: str
    table: DataTable


@dataclass
class FileRecord:
    """Format-neutral in-memory file: what readers produce and writers consume."""
    comments: List[str] = field(default_factory=list)
    elements: List[Element] = field(default_factory=list)

    def get_element(self, name: str) -> Optional[Element]:
        for element in self.elements:
            if element.name == name:
                return element
        return None

    @property
    def element_names(self) -> List[str]:
        return [e.name for e in self.elements]
