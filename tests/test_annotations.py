"""Tests for graphcore/annotations.py (placement and drag commands)."""

import pytest

from graphcore import Annotation, CoordinateMapper, LayerStack, Style, Viewport
from graphcore.annotations import DragSession, apply_drag_event, place_annotations


class TestPlacement:
    def test_split_by_clip_flag_in_order(self):
        annos = [Annotation(id="a1", clip_to_plot=True), Annotation(id="a2", clip_to_plot=False),
                 Annotation(id="a3", clip_to_plot=True)]
        clipped, free = place_annotations(annos, Viewport(), Style())
        assert [n.id for n in clipped] == ["a1", "a3"]
        assert [n.id for n in free] == ["a2"]

    def test_node_mapped_to_device(self):
        vp = Viewport()
        anno = Annotation(id="a1", x=2, y=-3, bold=False, font_size=12)
        (node,), _ = place_annotations([anno], vp, Style(font_family="Serif"))
        assert (node.x, node.y) == pytest.approx(CoordinateMapper(vp).to_device(2, -3))
        assert node.font_weight == "400"
        assert node.font_family == "Serif"


class TestDragSession:
    def test_begin_move_commit(self):
        vp = Viewport()
        m = CoordinateMapper(vp)
        session = DragSession(m)
        start = m.to_device(0, 0)

        session.begin("a1", start, pointer_pos=(500, 500))
        session.move((510, 490))
        assert session.move((500 + m.sx, 500 - 2 * m.sy)) == pytest.approx((start[0] + m.sx, start[1] - 2 * m.sy))

        anno_id, gx, gy = session.commit()
        assert anno_id == "a1"
        assert (gx, gy) == pytest.approx((1.0, 2.0))
        assert not session.active

    def test_commit_updates_stack(self):
        vp = Viewport()
        m = CoordinateMapper(vp)
        stack = LayerStack(annotations=[Annotation(id="a1", x=0, y=0)])
        session = DragSession(m)
        session.begin("a1", m.to_device(0, 0), (0, 0))
        session.move((0, 0))
        stack.move_annotation(*session.commit())
        assert stack.annotations[0].position == pytest.approx((0.0, 0.0))

    def test_move_without_begin(self):
        with pytest.raises(RuntimeError):
            DragSession(CoordinateMapper(Viewport())).move((1, 1))


class TestApplyDragEvent:
    def test_release_moves_annotation(self):
        m = CoordinateMapper(Viewport())
        stack = LayerStack(annotations=[Annotation(id="a1", x=0, y=0)])
        start = m.to_device(0, 0)
        end = m.to_device(3, -4)
        event = {"id": "a1", "start": list(start), "end": list(end), "seq": 1}

        anno_id, gx, gy = apply_drag_event(event, m, stack)
        assert anno_id == "a1"
        assert (gx, gy) == pytest.approx((3.0, -4.0))
        assert stack.annotations[0].position == pytest.approx((3.0, -4.0))

    def test_unknown_annotation_ignored(self):
        m = CoordinateMapper(Viewport())
        stack = LayerStack(annotations=[Annotation(id="a1", x=1, y=1)])
        event = {"id": "a9", "start": [10, 10], "end": [50, 50], "seq": 2}
        assert apply_drag_event(event, m, stack) is None
        assert stack.annotations[0].position == (1, 1)
