"""Tests for target box resolution and fit computation."""

import pytest

from pagepeek.gateway.preview.sizing import (
    MAX_DIMENSION,
    DerivedAxis,
    SizeRequest,
    TargetBox,
    clamp_dimension,
    derived_axis,
    fit_within,
    resolve_target_box,
)


class TestClampDimension:
    @pytest.mark.parametrize(("value", "expected"), [(0, 1), (-5, 1), (1, 1), (300, 300), (1920, 1920), (5000, 1920)])
    def test_clamps_into_bounds(self, value, expected):
        assert clamp_dimension(value) == expected


class TestDerivedAxis:
    def test_width_only_derives_height(self):
        assert derived_axis(100, None, 256, 256) == DerivedAxis.HEIGHT

    def test_height_only_derives_width(self):
        assert derived_axis(None, 100, 256, 256) == DerivedAxis.WIDTH

    def test_both_supplied_is_explicit_box(self):
        assert derived_axis(100, 80, 256, 256) is None

    def test_neither_supplied_is_explicit_box(self):
        assert derived_axis(None, None, 256, 256) is None

    def test_supplied_value_equal_to_default_is_explicit_box(self):
        assert derived_axis(256, None, 256, 256) is None


class TestResolveTargetBox:
    def test_defaults_without_source(self):
        assert resolve_target_box(None, None, 300, 300) == TargetBox(300, 300, preserve_aspect=False)

    def test_explicit_box_ignores_source_ratio(self):
        box = resolve_target_box(100, 80, 256, 256, source_aspect_ratio=2.0)
        assert box == TargetBox(100, 80, preserve_aspect=False)

    def test_width_only_derives_height_from_ratio(self):
        # 400x200 source
        box = resolve_target_box(100, None, 256, 256, source_aspect_ratio=2.0)
        assert box == TargetBox(100, 50, preserve_aspect=True)

    def test_height_only_derives_width_from_ratio(self):
        box = resolve_target_box(None, 90, 256, 256, source_aspect_ratio=4 / 3)
        assert box == TargetBox(120, 90, preserve_aspect=True)

    def test_derived_dimension_is_rounded(self):
        # 100 / (3 / 2) = 66.67
        box = resolve_target_box(100, None, 300, 300, source_aspect_ratio=1.5)
        assert box.height == 67

    def test_derived_dimension_is_clamped(self):
        # Very tall source: 1000 / 0.1 would be 10000
        box = resolve_target_box(1000, None, 300, 300, source_aspect_ratio=0.1)
        assert box == TargetBox(1000, MAX_DIMENSION, preserve_aspect=True)

    def test_derived_dimension_never_below_one(self):
        box = resolve_target_box(None, 2, 300, 300, source_aspect_ratio=0.01)
        assert box.width == 1

    def test_oversized_request_is_clamped(self):
        box = resolve_target_box(4000, 3000, 256, 256)
        assert box.size == (MAX_DIMENSION, MAX_DIMENSION)

    def test_missing_ratio_falls_back_to_explicit_box(self):
        box = resolve_target_box(100, None, 256, 256, source_aspect_ratio=None)
        assert box == TargetBox(100, 256, preserve_aspect=False)


class TestSizeRequest:
    def test_entry_point_defaults(self):
        assert SizeRequest.for_path().resolve().size == (256, 256)
        assert SizeRequest.for_period().resolve().size == (300, 300)

    def test_effective_dimensions(self):
        size = SizeRequest.for_period(width=120)
        assert size.effective_width == 120
        assert size.effective_height == 300

    def test_resolve_uses_source_size(self):
        assert SizeRequest.for_path(width=100).resolve((400, 200)) == TargetBox(100, 50, preserve_aspect=True)

    def test_resolve_ignores_degenerate_source(self):
        assert SizeRequest.for_path(width=100).resolve((0, 200)).preserve_aspect is False

    def test_fallback_box_has_no_aspect_derivation(self):
        assert SizeRequest.for_path(width=100).fallback_box() == TargetBox(100, 256, preserve_aspect=False)


class TestFitWithin:
    def test_shrinks_to_limiting_side(self):
        assert fit_within((400, 200), TargetBox(100, 100), allow_upscale=False) == (100, 50)

    def test_tall_source(self):
        assert fit_within((200, 800), TargetBox(300, 300), allow_upscale=False) == (75, 300)

    def test_no_upscale_keeps_small_source(self):
        assert fit_within((50, 25), TargetBox(100, 50), allow_upscale=False) == (50, 25)

    def test_upscale_when_allowed(self):
        assert fit_within((50, 25), TargetBox(100, 100), allow_upscale=True) == (100, 50)

    def test_never_collapses_to_zero(self):
        assert fit_within((10000, 1), TargetBox(10, 10), allow_upscale=False) == (10, 1)
