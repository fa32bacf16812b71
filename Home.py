import streamlit as st

from graphcore import (
    DomainRestriction,
    EndpointDisplay,
    GraphEngine,
    LayerLimitError,
    RasterExportError,
    RenderError,
    Style,
    Viewport,
)
from graphcore.annotations import apply_drag_event
from graphcore.export import svg_to_png
from graphcore.interactive_viewer import render_interactive_graph
from graphcore.layers import ENDPOINT_STYLES, default_stack
from graphcore.log import setup_logging

setup_logging()
st.set_page_config(layout="wide", page_title="Cartesian Graph Maker")

st.markdown("""
    <style>
        header {visibility: hidden;}
        .block-container { padding-top: 3rem !important; padding-bottom: 1rem; }
        div[data-testid="column"] { padding: 0px; }
    </style>
""", unsafe_allow_html=True)

if 'stack' not in st.session_state:
    st.session_state.stack = default_stack()
    st.session_state.last_render = None
    st.session_state.last_drag_seq = None

stack = st.session_state.stack

# Drag released in the previous run: apply it before the annotation widgets exist
pending = st.session_state.pop("pending_drag", None)
if pending is not None and st.session_state.last_render is not None:
    moved = apply_drag_event(pending, st.session_state.last_render.mapper, stack)
    if moved is not None:
        st.session_state.pop(f"ax_{moved[0]}", None)
        st.session_state.pop(f"ay_{moved[0]}", None)

# --- SIDEBAR: Grid & Style ---
st.sidebar.title("📈 Graph Settings")
st.sidebar.header("Grid")

size = st.sidebar.number_input("Image size (px)", 200, 2400, 760, step=10)
c_x1, c_x2 = st.sidebar.columns(2)
xmin = c_x1.number_input("x min", value=-10.0, step=1.0)
xmax = c_x2.number_input("x max", value=10.0, step=1.0)
c_y1, c_y2 = st.sidebar.columns(2)
ymin = c_y1.number_input("y min", value=-10.0, step=1.0)
ymax = c_y2.number_input("y max", value=10.0, step=1.0)

minor_step = st.sidebar.number_input("Minor grid step", value=1.0, step=0.5)
major_step = st.sidebar.number_input("Major grid step", value=5.0, step=1.0)
label_step = st.sidebar.number_input("Label every (units)", value=2.0, step=1.0)

c_t1, c_t2 = st.sidebar.columns(2)
hide_zero = c_t1.checkbox("Hide 0 label", value=True)
show_axes = c_t2.checkbox("Show axes", value=True)
show_border = c_t1.checkbox("Show border", value=True)

st.sidebar.header("Style")
c_s1, c_s2 = st.sidebar.columns(2)
stroke = c_s1.color_picker("Grid/axis color", "#000000")
background = c_s2.color_picker("Background", "#ffffff")

viewport = Viewport(xmin=xmin, xmax=xmax, ymin=ymin, ymax=ymax,
                    minor_step=minor_step, major_step=major_step, label_step=label_step,
                    hide_zero_label=hide_zero, show_axes=show_axes, show_border=show_border, size=int(size))
style = Style(stroke=stroke, background=background)


def try_add(add, *args):
    try:
        add(*args)
    except LayerLimitError as e:
        st.toast(str(e))


# --- MAIN LAYOUT ---
col_layers, col_preview = st.columns([2, 3])

with col_layers:
    st.subheader("Functions")
    for i, f in enumerate(stack.functions):
        with st.expander(f"{f.label or f'Function {i + 1}'}", expanded=True):
            c_en, c_del = st.columns([5, 1])
            f.enabled = c_en.checkbox("Enabled", f.enabled, key=f"fen_{i}")
            if c_del.button("🗑️", key=f"fdel_{i}"):
                stack.functions.pop(i)
                st.rerun()
            f.expression = st.text_input("y =", f.expression, key=f"expr_{i}")
            c_col, c_thk, c_smp = st.columns(3)
            f.color = c_col.color_picker("Color", f.color, key=f"fcol_{i}")
            f.width = c_thk.number_input("Width", 0.5, 20.0, float(f.width), step=0.5, key=f"fthk_{i}")
            f.samples_per_pixel = c_smp.number_input("Samples per pixel", 0.2, 6.0, float(f.samples_per_pixel),
                                                     step=0.1, key=f"fspp_{i}")

            restricted = st.checkbox("Restrict domain (x-range)", f.domain is not None, key=f"use_dom_{i}")
            if restricted:
                prev = f.domain or DomainRestriction(viewport.xmin, viewport.xmax)
                c_d1, c_d2 = st.columns(2)
                d_min = c_d1.number_input("Domain x min", value=float(prev.min), step=0.5, key=f"dmin_{i}")
                d_max = c_d2.number_input("Domain x max", value=float(prev.max), step=0.5, key=f"dmax_{i}")
                f.domain = DomainRestriction(d_min, d_max)

                ep = f.endpoints or EndpointDisplay()
                show_ep = st.checkbox("Show endpoints", ep.show, key=f"ep_{i}")
                c_e1, c_e2, c_e3 = st.columns(3)
                left = c_e1.selectbox("Left endpoint", ENDPOINT_STYLES, index=ENDPOINT_STYLES.index(ep.left),
                                      key=f"epl_{i}")
                right = c_e2.selectbox("Right endpoint", ENDPOINT_STYLES, index=ENDPOINT_STYLES.index(ep.right),
                                       key=f"epr_{i}")
                radius = c_e3.number_input("Endpoint radius (px)", 2.0, 20.0, float(ep.radius), step=1.0,
                                           key=f"eprad_{i}")
                f.endpoints = EndpointDisplay(show_ep, left, right, radius)
            else:
                f.domain = None

    if st.button(f"➕ Add function ({len(stack.functions)}/{stack.max_functions})"):
        try_add(stack.add_function)
        st.rerun()

    st.subheader("Point sets")
    for i, p in enumerate(stack.point_sets):
        with st.expander(p.label or f"Point set {i + 1}", expanded=False):
            c_en, c_del = st.columns([5, 1])
            p.enabled = c_en.checkbox("Enabled", p.enabled, key=f"pen_{i}")
            if c_del.button("🗑️", key=f"pdel_{i}"):
                stack.point_sets.pop(i)
                st.rerun()
            p.points_text = st.text_area("Points (one per line: (x,y) or x,y)", p.points_text, key=f"pts_{i}")
            c_p1, c_p2 = st.columns(2)
            p.point_color = c_p1.color_picker("Point color", p.point_color, key=f"pcol_{i}")
            p.point_radius = c_p2.number_input("Point radius (px)", 1.0, 30.0, float(p.point_radius), key=f"prad_{i}")
            p.connect_in_order = st.checkbox("Connect points in order", p.connect_in_order, key=f"pcon_{i}")
            if p.connect_in_order:
                c_l1, c_l2 = st.columns(2)
                p.line_color = c_l1.color_picker("Line color", p.line_color, key=f"plcol_{i}")
                p.line_width = c_l2.number_input("Line width", 0.5, 20.0, float(p.line_width), step=0.5,
                                                 key=f"plw_{i}")

    if st.button(f"➕ Add point set ({len(stack.point_sets)}/{stack.max_point_sets})"):
        try_add(stack.add_point_set)
        st.rerun()

    st.subheader("Segment sets")
    for i, s in enumerate(stack.segment_sets):
        with st.expander(s.label or f"Segment set {i + 1}", expanded=False):
            c_en, c_del = st.columns([5, 1])
            s.enabled = c_en.checkbox("Enabled", s.enabled, key=f"sen_{i}")
            if c_del.button("🗑️", key=f"sdel_{i}"):
                stack.segment_sets.pop(i)
                st.rerun()
            s.segments_text = st.text_area("Segments (one per line: (x1,y1)->(x2,y2))", s.segments_text,
                                           key=f"segs_{i}")
            c_g1, c_g2 = st.columns(2)
            s.color = c_g1.color_picker("Segment color", s.color, key=f"scol_{i}")
            s.width = c_g2.number_input("Segment width", 0.5, 20.0, float(s.width), step=0.5, key=f"sw_{i}")

    if st.button(f"➕ Add segment set ({len(stack.segment_sets)}/{stack.max_segment_sets})"):
        try_add(stack.add_segment_set)
        st.rerun()

    st.subheader("Annotations")
    for i, a in enumerate(stack.annotations):
        with st.expander(f"{a.id}: {a.text}", expanded=False):
            c_txt, c_del = st.columns([5, 1])
            a.text = c_txt.text_input("Text", a.text, key=f"atxt_{a.id}")
            if c_del.button("🗑️", key=f"adel_{a.id}"):
                stack.remove_annotation(a.id)
                st.rerun()
            c_a1, c_a2, c_a3 = st.columns(3)
            a.color = c_a1.color_picker("Color", a.color, key=f"acol_{a.id}")
            a.font_size = c_a2.number_input("Font size", 6.0, 96.0, float(a.font_size), key=f"afs_{a.id}")
            a.bold = c_a3.checkbox("Bold", a.bold, key=f"abold_{a.id}")
            a.clip_to_plot = st.checkbox("Clip to plot", a.clip_to_plot, key=f"aclip_{a.id}")
            c_a4, c_a5 = st.columns(2)
            a.x = c_a4.number_input("x (graph)", value=float(a.x), step=0.5, key=f"ax_{a.id}")
            a.y = c_a5.number_input("y (graph)", value=float(a.y), step=0.5, key=f"ay_{a.id}")

    if st.button(f"➕ Add annotation ({len(stack.annotations)}/{stack.max_annotations})"):
        try_add(stack.add_annotation, viewport)
        st.rerun()

with col_preview:
    st.subheader("Preview")
    try:
        rendered = GraphEngine(viewport, style).render(stack.snapshot())
        st.session_state.last_render = rendered
    except RenderError as e:
        st.error(str(e))
        rendered = st.session_state.last_render

    if rendered is not None:
        drag = render_interactive_graph(rendered, key="viewer")
        if drag and drag.get("seq") != st.session_state.last_drag_seq:
            st.session_state.last_drag_seq = drag["seq"]
            st.session_state.pending_drag = drag
            st.rerun()

        c_dl1, c_dl2 = st.columns(2)
        c_dl1.download_button("Download SVG", rendered.svg, file_name="graph.svg", mime="image/svg+xml")
        try:
            png = svg_to_png(rendered.svg, background=rendered.background)
            c_dl2.download_button("Download PNG", png, file_name="graph.png", mime="image/png")
        except RasterExportError as e:
            c_dl2.warning(str(e))
