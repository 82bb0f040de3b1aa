#!/usr/bin/env python3
"""
Generate a synthetic Gaussian-splat PLY: a ring of colored splats.

Use this to exercise the converter without a trained scene.

Usage:
    python scripts/generate_synthetic_splat.py [output.ply] [count]

Then convert it:
    python -c "from splat_convert.convert import convert_gsplat; convert_gsplat('synthetic.ply', 'synthetic.csv')"
"""

from pathlib import Path
import sys

import numpy as np

from splat_utils.data_table import Column, DataTable, Element, FileRecord
from splat_convert.codecs import write_ply_record


RING_RADIUS = 1.0
SPLAT_LOG_SCALE = np.log(0.02)  # 2cm splats
SH_C0 = 0.28209479177387814     # DC spherical-harmonic basis constant


def build_ring(count: int, seed: int = 0) -> DataTable:
    rng = np.random.default_rng(seed)
    angle = np.linspace(0, 2 * np.pi, count, endpoint=False)

    # hue around the ring, stored as SH DC coefficients
    rgb = np.stack([
        0.5 + 0.5 * np.cos(angle),
        0.5 + 0.5 * np.cos(angle - 2 * np.pi / 3),
        0.5 + 0.5 * np.cos(angle + 2 * np.pi / 3),
    ], axis=1)
    f_dc = (rgb - 0.5) / SH_C0

    columns = {
        'x': RING_RADIUS * np.cos(angle),
        'y': rng.normal(0, 0.01, count),
        'z': RING_RADIUS * np.sin(angle),
        'rot_0': np.ones(count),
        'rot_1': np.zeros(count),
        'rot_2': np.zeros(count),
        'rot_3': np.zeros(count),
        'scale_0': np.full(count, SPLAT_LOG_SCALE),
        'scale_1': np.full(count, SPLAT_LOG_SCALE),
        'scale_2': np.full(count, SPLAT_LOG_SCALE),
        'f_dc_0': f_dc[:, 0],
        'f_dc_1': f_dc[:, 1],
        'f_dc_2': f_dc[:, 2],
        'opacity': np.full(count, 3.0),  # logit, ~0.95 after sigmoid
    }
    return DataTable([Column(name, data.astype(np.float32)) for name, data in columns.items()])


def main():
    out = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("synthetic.ply")
    count = int(sys.argv[2]) if len(sys.argv) > 2 else 1000

    table = build_ring(count)
    record = FileRecord(
        comments=["synthetic ring generated by generate_synthetic_splat.py"],
        elements=[Element('vertex', table)],
    )
    with open(out, 'wb') as f:
        write_ply_record(f, record)

    size_kb = out.stat().st_size / 1024
    print(f"Wrote {count} splats to {out} ({size_kb:.1f} KB)")


if __name__ == "__main__":
    main()
