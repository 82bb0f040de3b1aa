"""Validation utilities for splat tables and conversion options."""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from .data_table import DataTable


# Columns every Gaussian-splat vertex table must carry. Extra columns
# (f_rest_*, normals, ...) are allowed and passed through.
SPLAT_COLUMNS = (
    'x', 'y', 'z',
    'rot_0', 'rot_1', 'rot_2', 'rot_3',
    'scale_0', 'scale_1', 'scale_2',
    'f_dc_0', 'f_dc_1', 'f_dc_2',
    'opacity',
)


def missing_splat_columns(table: DataTable) -> List[str]:
    """Return the required splat columns absent from ``table``, in schema order."""
    return [name for name in SPLAT_COLUMNS if not table.has_column(name)]


def is_splat_table(table: DataTable) -> bool:
    """True iff every required splat column is present. Order and extras are ignored."""
    return not missing_splat_columns(table)


class ConvertOptions(BaseModel):
    """Options consumed by the conversion pipeline and forwarded to writers."""

    overwrite: bool = True
    cpu: bool = True
    iterations: int = Field(default=10, gt=0)
    viewer_settings_path: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("viewer_settings_path")
    @classmethod
    def validate_viewer_settings_path(cls, v):
        if v is not None and not v.strip():
            raise ValueError("viewer_settings_path must not be blank")
        return v

    @property
    def device(self) -> str:
        """Compute device forwarded opaquely to the sog/lod writers."""
        return "cpu" if self.cpu else "gpu"
