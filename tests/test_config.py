"""Tests for graphcore/config.py."""

import pytest

from graphcore import Viewport, ViewportError, load_settings, validate_viewport
from graphcore.config import sanitize_viewport


class TestValidateViewport:
    @pytest.mark.parametrize("kwargs", [
        {"xmin": 5, "xmax": -5},
        {"ymin": 1, "ymax": 1},
        {"minor_step": 0},
        {"major_step": -1},
        {"label_step": float("nan")},
        {"xmin": float("nan")},
        {"xmax": float("inf")},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ViewportError):
            validate_viewport(Viewport(**kwargs))

    def test_valid(self):
        vp = Viewport()
        assert validate_viewport(vp) is vp

    def test_messages(self):
        with pytest.raises(ViewportError, match="xmax > xmin"):
            validate_viewport(Viewport(xmin=5, xmax=-5))
        with pytest.raises(ViewportError, match="Steps must be > 0"):
            validate_viewport(Viewport(minor_step=0))

    def test_too_dense_grid(self):
        with pytest.raises(ViewportError, match="too dense"):
            validate_viewport(Viewport(xmin=-1e6, xmax=1e6, minor_step=0.1))
        with pytest.raises(ViewportError, match="too dense"):
            validate_viewport(Viewport(ymin=0, ymax=50, label_step=0.001))


class TestSanitizeViewport:
    def test_size_clamped(self):
        assert sanitize_viewport(Viewport(size=50)).size == 200
        assert sanitize_viewport(Viewport(size=9000)).size == 2400

    def test_non_positive_steps_untouched(self):
        assert sanitize_viewport(Viewport(minor_step=-1)).minor_step == -1
        assert sanitize_viewport(Viewport(label_step=0)).label_step == 0

    def test_positive_steps_clamped(self):
        vp = sanitize_viewport(Viewport(minor_step=1e-9, major_step=5000, label_step=0.05))
        assert (vp.minor_step, vp.major_step, vp.label_step) == (0.1, 1000.0, 0.1)

    def test_in_range_steps_kept(self):
        assert sanitize_viewport(Viewport()) == Viewport()


class TestSettings:
    def test_defaults(self):
        s = load_settings({})
        assert s.log_level == "WARNING"
        assert s.expression_cache_size is None

    def test_from_env(self):
        s = load_settings({"GRAPHCORE_LOG_LEVEL": "debug", "GRAPHCORE_EXPRESSION_CACHE_SIZE": "32"})
        assert s.log_level == "DEBUG"
        assert s.expression_cache_size == 32

    @pytest.mark.parametrize("raw", ["abc", "0", "-4", ""])
    def test_bad_cache_size_means_unbounded(self, raw):
        assert load_settings({"GRAPHCORE_EXPRESSION_CACHE_SIZE": raw}).expression_cache_size is None
