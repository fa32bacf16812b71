"""Tests for graphcore/mapper.py."""

import itertools

import pytest

from graphcore import CoordinateMapper, Viewport


class TestMapperGeometry:
    def test_pad_is_eight_percent_rounded(self):
        m = CoordinateMapper(Viewport(size=760))
        assert m.pad == 61
        assert m.inner == 760 - 2 * 61

    def test_pad_rounds_to_nearest_pixel(self):
        assert CoordinateMapper(Viewport(size=625)).pad == 50
        assert CoordinateMapper(Viewport(size=1007)).pad == 81
        assert CoordinateMapper(Viewport(size=1001)).pad == 80

    def test_corners_map_to_inner_square(self):
        vp = Viewport(xmin=-10, xmax=10, ymin=-10, ymax=10, size=760)
        m = CoordinateMapper(vp)
        assert m.to_device(-10, -10) == pytest.approx((61, 61 + 638))
        assert m.to_device(10, 10) == pytest.approx((61 + 638, 61))

    def test_y_axis_is_inverted(self):
        m = CoordinateMapper(Viewport())
        _, low = m.to_device(0, -5)
        _, high = m.to_device(0, 5)
        assert high < low


class TestMapperRoundTrip:
    @pytest.mark.parametrize("vp", [
        Viewport(),
        Viewport(xmin=-0.5, xmax=0.25, ymin=100, ymax=1e4, size=333),
        Viewport(xmin=1e-3, xmax=2e-3, ymin=-7, ymax=-6, size=2400),
    ])
    def test_to_graph_inverts_to_device(self, vp):
        m = CoordinateMapper(vp)
        xs = [vp.xmin + vp.x_span * t for t in (0, 0.1, 0.37, 0.5, 0.99, 1)]
        ys = [vp.ymin + vp.y_span * t for t in (0, 0.2, 0.5, 0.73, 1)]
        for x, y in itertools.product(xs, ys):
            gx, gy = m.to_graph(*m.to_device(x, y))
            assert gx == pytest.approx(x, rel=1e-6, abs=1e-12)
            assert gy == pytest.approx(y, rel=1e-6, abs=1e-12)
