"""
Filename → codec resolution.

Resolution is suffix based and case-insensitive. Several suffixes overlap
(".compressed.ply" / ".ply", "lod-meta.json" / "meta.json"), so each table
is resolved by the longest matching suffix rather than by rule order: a more
specific suffix always wins, however the table is arranged.
"""

from enum import Enum
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

from .errors import UnsupportedFormatError


class CodecKind(str, Enum):
    MJS = "mjs"
    KSPLAT = "ksplat"
    SPLAT = "splat"
    SOG = "sog"
    PLY = "ply"
    COMPRESSED_PLY = "compressed-ply"
    SPZ = "spz"
    CSV = "csv"
    LOD = "lod"
    HTML = "html"


SuffixRule = Tuple[Tuple[str, ...], CodecKind]

# Input rules. COMPRESSED_PLY is never chosen by name on input: a ".ply"
# file is parsed first and split into plain / compressed by content.
INPUT_RULES: Tuple[SuffixRule, ...] = (
    ((".mjs",), CodecKind.MJS),
    ((".ksplat",), CodecKind.KSPLAT),
    ((".splat",), CodecKind.SPLAT),
    ((".sog", "meta.json"), CodecKind.SOG),
    ((".ply",), CodecKind.PLY),
    ((".spz",), CodecKind.SPZ),
)

OUTPUT_RULES: Tuple[SuffixRule, ...] = (
    ((".csv",), CodecKind.CSV),
    (("lod-meta.json",), CodecKind.LOD),
    ((".sog", "meta.json"), CodecKind.SOG),
    ((".compressed.ply",), CodecKind.COMPRESSED_PLY),
    ((".ply",), CodecKind.PLY),
    ((".html",), CodecKind.HTML),
)


def match_suffix(filename: Union[str, Path], rules: Sequence[SuffixRule]) -> Optional[CodecKind]:
    """
    Return the kind whose suffix is the longest match for ``filename``.

    Two rules sharing an identical suffix would be ambiguous; the tables
    above contain none, and ties resolve to the earlier rule.
    """
    lower = str(filename).lower()
    best_kind = None
    best_len = -1
    for suffixes, kind in rules:
        for suffix in suffixes:
            if lower.endswith(suffix) and len(suffix) > best_len:
                best_kind = kind
                best_len = len(suffix)
    return best_kind


def resolve_input_kind(filename: Union[str, Path]) -> CodecKind:
    kind = match_suffix(filename, INPUT_RULES)
    if kind is None:
        raise UnsupportedFormatError(f"Unsupported input file type: {filename}")
    return kind


def resolve_output_kind(filename: Union[str, Path]) -> CodecKind:
    kind = match_suffix(filename, OUTPUT_RULES)
    if kind is None:
        raise UnsupportedFormatError(f"Unsupported output file type: {filename}")
    return kind
