"""Tests for graphcore/layout.py (gridlines, axes, tick labels)."""

import pytest

from graphcore import CoordinateMapper, Style, Viewport
from graphcore.layout import compute_layout, format_tick, is_major, step_positions


class TestGridlines:
    def test_minor_lines_and_major_flags(self):
        vp = Viewport(xmin=-10, xmax=10, minor_step=1, major_step=5)
        layout = compute_layout(vp, Style())
        vertical = layout.vertical_lines()
        assert len(vertical) == 21
        majors = sorted(g.value for g in vertical if g.major)
        assert majors == [-10, -5, 0, 5, 10]

    def test_major_lines_heavier_and_more_opaque(self):
        layout = compute_layout(Viewport(), Style(stroke_width=1.5))
        major = next(g for g in layout.gridlines if g.major)
        minor = next(g for g in layout.gridlines if not g.major)
        assert major.width > minor.width
        assert major.opacity > minor.opacity
        assert major.width == pytest.approx(1.8)
        assert minor.width == pytest.approx(0.9)

    def test_horizontal_lines_mirror_vertical(self):
        layout = compute_layout(Viewport(ymin=-3, ymax=4, minor_step=1), Style())
        assert [g.value for g in layout.horizontal_lines()] == [-3, -2, -1, 0, 1, 2, 3, 4]

    def test_first_line_is_first_multiple_above_min(self):
        assert step_positions(-2.5, 1.0, 1.0) == [-2, -1, 0, 1]
        assert step_positions(0.3, 0.9, 1.0) == []

    def test_upper_bound_inclusive_within_epsilon(self):
        positions = step_positions(0, 1.0 - 1e-12, 0.5)
        assert len(positions) == 3

    def test_is_major(self):
        assert is_major(10.0, 5.0)
        assert is_major(0.0, 5.0)
        assert not is_major(3.0, 5.0)

    def test_lines_span_the_inner_area(self):
        vp = Viewport()
        m = CoordinateMapper(vp)
        layout = compute_layout(vp, Style(), m)
        line = layout.vertical_lines()[0]
        assert line.start[1] == pytest.approx(m.pad + m.inner)
        assert line.end[1] == pytest.approx(m.pad)


class TestAxesAndBorder:
    def test_axes_when_zero_in_range(self):
        layout = compute_layout(Viewport(), Style(stroke_width=1.0))
        assert len(layout.axes) == 2
        major_w = max(g.width for g in layout.gridlines)
        assert all(a.width > major_w for a in layout.axes)

    def test_no_vertical_axis_when_zero_outside_x_range(self):
        layout = compute_layout(Viewport(xmin=1, xmax=9), Style())
        assert [a.vertical for a in layout.axes] == [False]

    def test_axes_hidden(self):
        layout = compute_layout(Viewport(show_axes=False), Style())
        assert layout.axes == []

    def test_border_matches_plot_rect(self):
        vp = Viewport(show_border=True)
        assert compute_layout(vp, Style()).border == CoordinateMapper(vp).plot_rect
        assert compute_layout(Viewport(show_border=False), Style()).border is None


class TestTickLabels:
    def test_hide_zero_label(self):
        layout = compute_layout(Viewport(hide_zero_label=True), Style())
        assert all(lbl.text != "0" for lbl in layout.labels)
        assert all(abs(lbl.value) > 0 for lbl in layout.labels)

    def test_zero_label_shown_on_both_axes(self):
        layout = compute_layout(Viewport(hide_zero_label=False), Style())
        zeros = [lbl for lbl in layout.labels if lbl.text == "0"]
        assert sorted(lbl.axis for lbl in zeros) == ["x", "y"]

    def test_labels_every_label_step(self):
        layout = compute_layout(Viewport(label_step=2, hide_zero_label=False), Style())
        x_texts = [lbl.text for lbl in layout.labels if lbl.axis == "x"]
        assert x_texts == ["-10", "-8", "-6", "-4", "-2", "0", "2", "4", "6", "8", "10"]

    def test_anchors(self):
        layout = compute_layout(Viewport(), Style())
        assert {lbl.anchor for lbl in layout.labels if lbl.axis == "x"} == {"middle"}
        assert {lbl.anchor for lbl in layout.labels if lbl.axis == "y"} == {"end"}

    def test_labels_follow_axis(self):
        vp = Viewport()
        style = Style(font_size=14)
        m = CoordinateMapper(vp)
        layout = compute_layout(vp, style, m)
        x_label = next(lbl for lbl in layout.labels if lbl.axis == "x")
        y_label = next(lbl for lbl in layout.labels if lbl.axis == "y")
        assert x_label.y == pytest.approx(m.y_to_device(0) + 14 + 6)
        assert y_label.x == pytest.approx(m.x_to_device(0) - 8)

    def test_labels_fall_back_to_edges_when_axes_hidden(self):
        vp = Viewport(show_axes=False)
        m = CoordinateMapper(vp)
        layout = compute_layout(vp, Style(font_size=14), m)
        x_label = next(lbl for lbl in layout.labels if lbl.axis == "x")
        y_label = next(lbl for lbl in layout.labels if lbl.axis == "y")
        assert x_label.y == pytest.approx(m.y_to_device(vp.ymin) + 20)
        assert y_label.x == pytest.approx(m.x_to_device(vp.xmin) - 8)

    def test_labels_fall_back_to_edges_when_zero_out_of_range(self):
        vp = Viewport(ymin=2, ymax=12)
        m = CoordinateMapper(vp)
        layout = compute_layout(vp, Style(font_size=10), m)
        x_label = next(lbl for lbl in layout.labels if lbl.axis == "x")
        assert x_label.y == pytest.approx(m.y_to_device(2) + 16)


class TestFormatTick:
    @pytest.mark.parametrize("value,expected", [
        (2.0, "2"),
        (-10.0, "-10"),
        (0.5, "0.5"),
        (-1.25, "-1.25"),
        (0.1 + 0.2, "0.3"),
        (-1e-17, "0"),
        (0.0, "0"),
        (100.0, "100"),
    ])
    def test_shortest_form(self, value, expected):
        assert format_tick(value) == expected
