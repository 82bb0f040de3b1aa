"""
Merge several splat tables into one.

Columns are unified by identity (name, dtype): two columns with the same
name but different element types stay separate. Output column order is the
first table's columns, then columns first introduced by later tables, in
table order. Rows are concatenated in table order.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np

from splat_utils.data_table import Column, ColumnIdentity, DataTable

from .errors import SchemaViolationError


@dataclass(frozen=True)
class FillPolicy:
    """
    What to put in rows whose source table lacks a column.

    By default missing columns are zero-filled. ``fill_values`` overrides
    the value per column name; ``strict`` refuses to merge tables whose
    column identities differ.
    """
    strict: bool = False
    fill_values: Dict[str, float] = field(default_factory=dict)

    def fill_value(self, name: str, dtype: np.dtype):
        return np.asarray(self.fill_values.get(name, 0)).astype(dtype)


ZERO_FILL = FillPolicy()
STRICT = FillPolicy(strict=True)


def unified_identities(tables: Sequence[DataTable]) -> List[ColumnIdentity]:
    """Ordered, duplicate-free list of column identities across ``tables``."""
    identities: List[ColumnIdentity] = []
    seen = set()
    for table in tables:
        for column in table.columns:
            if column.identity not in seen:
                seen.add(column.identity)
                identities.append(column.identity)
    return identities


def combine(tables: Sequence[DataTable], policy: FillPolicy = ZERO_FILL) -> DataTable:
    """
    Concatenate ``tables`` row-wise into a fresh table.

    A single table is returned as is, without copying. Empty tables and
    mismatched schemas never fail under the default policy; the missing
    regions hold the policy's fill value.
    """
    if not tables:
        raise ValueError("combine() needs at least one table")

    if len(tables) == 1:
        return tables[0]

    identities = unified_identities(tables)

    if policy.strict:
        for index, table in enumerate(tables):
            present = {c.identity for c in table.columns}
            missing = [f"{name}:{dtype}" for name, dtype in identities if (name, dtype) not in present]
            if missing:
                raise SchemaViolationError(
                    f"Table {index} is missing columns {missing}; strict merge refuses to fill"
                )

    total_rows = sum(table.num_rows for table in tables)

    outputs: Dict[ColumnIdentity, np.ndarray] = {
        (name, dtype): np.full(total_rows, policy.fill_value(name, dtype), dtype=dtype)
        for name, dtype in identities
    }

    row_offset = 0
    for table in tables:
        rows = table.num_rows
        for column in table.columns:
            outputs[column.identity][row_offset:row_offset + rows] = column.data
        row_offset += rows

    return DataTable([Column(name, outputs[(name, dtype)]) for name, dtype in identities])
