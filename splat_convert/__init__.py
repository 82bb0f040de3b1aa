"""
Gaussian Splat Format Conversion

Converts 3D Gaussian-splat assets between encodings (ply, splat, ksplat,
spz, sog, compressed-ply, lod, csv, html) through a common columnar table.

Pipeline stages:
1. Read - Resolve the input codec by suffix and parse into a FileRecord
2. Validate - Require a single 'vertex' element carrying the splat schema
3. Process - Per-source row transforms
4. Combine - Merge source tables by column identity
5. Process - Transforms over the merged table
6. Write - Stage to a temp file, fsync, atomically rename onto the target
"""

__version__ = "0.1.0"
