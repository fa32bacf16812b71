import os
from typing import Optional

import streamlit.components.v1 as components

from .annotations import ANNO_ID_ATTR
from .graph_maker import RenderedGraph

_component_func = components.declare_component(
    "graph_viewer",
    path=os.path.join(os.path.dirname(os.path.abspath(__file__)), "viewer_frontend")
)


def viewer_args(rendered: RenderedGraph, height: int = 820) -> dict:
    """Component arguments; Streamlit ships them to the frame as JSON."""
    return {
        "svg": rendered.svg,
        "anno_attr": ANNO_ID_ATTR,
        "frame_height": height,
    }


def render_interactive_graph(rendered: RenderedGraph, height: int = 820, key: Optional[str] = None):
    """
    Shows the SVG with zoom buttons and draggable annotations.

    Returns the last drag release as ``{"id", "start", "end", "seq"}`` (device
    positions of the node at press and release), or None before any drag.
    """
    return _component_func(**viewer_args(rendered, height), key=key, default=None)
