"""Tests for filename → codec resolution."""

import pytest

from splat_convert.errors import UnsupportedFormatError
from splat_convert.formats import (
    INPUT_RULES,
    OUTPUT_RULES,
    CodecKind,
    match_suffix,
    resolve_input_kind,
    resolve_output_kind,
)


class TestInputResolution:
    """Tests for input kind resolution."""

    @pytest.mark.parametrize("filename, kind", [
        ("scene.ksplat", CodecKind.KSPLAT),
        ("scene.splat", CodecKind.SPLAT),
        ("scene.sog", CodecKind.SOG),
        ("scene/meta.json", CodecKind.SOG),
        ("scene.ply", CodecKind.PLY),
        ("SCENE.PLY", CodecKind.PLY),
        ("scene.spz", CodecKind.SPZ),
        ("generator.mjs", CodecKind.MJS),
    ])
    def test_known_suffixes(self, filename, kind):
        assert resolve_input_kind(filename) == kind

    def test_ksplat_is_not_splat(self):
        """'.ksplat' ends in 'splat' but not in '.splat'."""
        assert resolve_input_kind("a.ksplat") == CodecKind.KSPLAT

    def test_compressed_ply_input_is_decided_by_content(self):
        assert resolve_input_kind("scene.compressed.ply") == CodecKind.PLY

    @pytest.mark.parametrize("filename", ["scene.csv", "scene.txt", "scene", "scene.html"])
    def test_unsupported(self, filename):
        with pytest.raises(UnsupportedFormatError):
            resolve_input_kind(filename)


class TestOutputResolution:
    """Tests for output kind resolution."""

    @pytest.mark.parametrize("filename, kind", [
        ("scene.csv", CodecKind.CSV),
        ("scene.lod-meta.json", CodecKind.LOD),
        ("lod-meta.json", CodecKind.LOD),
        ("meta.json", CodecKind.SOG),
        ("scene.sog", CodecKind.SOG),
        ("scene.compressed.ply", CodecKind.COMPRESSED_PLY),
        ("SCENE.Compressed.PLY", CodecKind.COMPRESSED_PLY),
        ("scene.ply", CodecKind.PLY),
        ("viewer.html", CodecKind.HTML),
    ])
    def test_known_suffixes(self, filename, kind):
        assert resolve_output_kind(filename) == kind

    def test_compressed_ply_never_resolves_to_ply(self):
        assert resolve_output_kind("x.compressed.ply") != CodecKind.PLY

    def test_lod_meta_never_resolves_to_sog(self):
        assert resolve_output_kind("x.lod-meta.json") == CodecKind.LOD

    @pytest.mark.parametrize("filename", ["scene.json", "scene.splat", "scene.spz", "scene.mjs"])
    def test_unsupported(self, filename):
        with pytest.raises(UnsupportedFormatError):
            resolve_output_kind(filename)


class TestRuleOrder:
    """Resolution must not depend on how the rule tables are ordered."""

    NAMES = [
        "a.csv", "a.lod-meta.json", "meta.json", "a.sog", "a.compressed.ply",
        "a.ply", "a.html", "a.ksplat", "a.splat", "a.spz", "a.mjs", "a.txt",
    ]

    def test_reversed_output_rules(self):
        for name in self.NAMES:
            assert match_suffix(name, OUTPUT_RULES) == match_suffix(name, OUTPUT_RULES[::-1])

    def test_reversed_input_rules(self):
        for name in self.NAMES:
            assert match_suffix(name, INPUT_RULES) == match_suffix(name, INPUT_RULES[::-1])
