"""
Row-level Splat Processing

Ordered per-splat transforms applied to a table: translate, uniform scale,
and filters (non-finite values, column comparisons, near-transparent splats).
Every action returns a new table; the input is never modified.
"""

import operator
from dataclasses import dataclass
from typing import Callable, Dict, Sequence, Tuple, Union

import numpy as np

from splat_utils.data_table import Column, DataTable

from .errors import SchemaViolationError

POSITION_COLUMNS = ('x', 'y', 'z')
SCALE_COLUMNS = ('scale_0', 'scale_1', 'scale_2')

COMPARATORS: Dict[str, Callable] = {
    'lt': operator.lt,
    'lte': operator.le,
    'gt': operator.gt,
    'gte': operator.ge,
    'eq': operator.eq,
    'neq': operator.ne,
}


def _require(table: DataTable, names: Sequence[str]) -> None:
    missing = [n for n in names if not table.has_column(n)]
    if missing:
        raise SchemaViolationError(f"Table is missing columns {missing}")


def _replace_columns(table: DataTable, replacements: Dict[str, np.ndarray]) -> DataTable:
    return DataTable([
        Column(c.name, replacements[c.name].astype(c.dtype) if c.name in replacements else c.data.copy())
        for c in table.columns
    ])


@dataclass(frozen=True)
class Translate:
    offset: Tuple[float, float, float]

    def apply(self, table: DataTable) -> DataTable:
        _require(table, POSITION_COLUMNS)
        return _replace_columns(table, {
            name: table.get_column(name).data + delta
            for name, delta in zip(POSITION_COLUMNS, self.offset)
        })


@dataclass(frozen=True)
class Scale:
    """Uniform scale. Gaussian scales are stored in log space, so they shift by log(factor)."""
    factor: float

    def apply(self, table: DataTable) -> DataTable:
        if self.factor <= 0:
            raise ValueError(f"Scale factor must be positive, got {self.factor}")
        _require(table, POSITION_COLUMNS)
        replacements = {
            name: table.get_column(name).data * self.factor
            for name in POSITION_COLUMNS
        }
        log_factor = np.log(self.factor)
        for name in SCALE_COLUMNS:
            if table.has_column(name):
                replacements[name] = table.get_column(name).data + log_factor
        return _replace_columns(table, replacements)


@dataclass(frozen=True)
class FilterNaN:
    """Drop splats holding NaN or +/-inf in any floating-point column."""

    def apply(self, table: DataTable) -> DataTable:
        mask = np.ones(table.num_rows, dtype=bool)
        for column in table.columns:
            if column.dtype.kind == 'f':
                mask &= np.isfinite(column.data)
        return table.take(mask)


@dataclass(frozen=True)
class FilterByValue:
    column: str
    comparator: str
    value: float

    def apply(self, table: DataTable) -> DataTable:
        if self.comparator not in COMPARATORS:
            raise ValueError(
                f"Unknown comparator '{self.comparator}'. Must be one of {sorted(COMPARATORS)}"
            )
        _require(table, [self.column])
        data = table.get_column(self.column).data
        return table.take(COMPARATORS[self.comparator](data, self.value))


@dataclass(frozen=True)
class FilterOpacity:
    """Remove near-transparent splats. Opacity is stored as a logit."""
    min_opacity: float = 0.05

    def apply(self, table: DataTable) -> DataTable:
        _require(table, ['opacity'])
        opacities = table.get_column('opacity').data.astype(np.float64)
        sigmoid_opacity = 1.0 / (1.0 + np.exp(-np.clip(opacities, -60, 60)))
        return table.take(sigmoid_opacity >= self.min_opacity)


ProcessAction = Union[Translate, Scale, FilterNaN, FilterByValue, FilterOpacity]


def process_data_table(table: DataTable, actions: Sequence[ProcessAction]) -> DataTable:
    """Apply ``actions`` in order. With no actions the input table is returned."""
    for action in actions:
        table = action.apply(table)
    return table
