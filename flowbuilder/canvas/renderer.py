"""
Canvas Renderer - SVG drawing and hit testing for the flow canvas.

The canvas is a NiceGUI interactive_image: a transparent SVG image sized to
the canvas, with the flow drawn as SVG overlay content. Mouse events report
image coordinates, so the canvas origin in screen space is (0, 0).

Everything inside the world group is drawn in world coordinates; pan and
zoom are applied once through the group transform.
"""

import html
from typing import List, Optional, Tuple
from urllib.parse import quote

from flowbuilder.canvas.constants import (
    NODE_WIDTH,
    NODE_HEIGHT,
    NODE_HEADER_HEIGHT,
    GRID_SPACING,
    HANDLE_RADIUS,
    NODE_KIND_STYLES,
)
from flowbuilder.canvas.controller import CanvasController
from flowbuilder.canvas.edges import iter_edge_paths
from flowbuilder.canvas.graph_store import GraphStore, Node
from flowbuilder.canvas.transform import Point, screen_to_world
from flowbuilder.canvas.viewport import ViewportState

EDGE_COLOR = '#64748b'
SELECTION_COLOR = '#6366f1'
CARD_FILL = '#1e293b'


def blank_canvas_source(width: float, height: float) -> str:
    """Transparent SVG data URL that gives the interactive image its size."""
    svg = f'<svg xmlns="http://www.w3.org/2000/svg" width="{int(width)}" height="{int(height)}"></svg>'
    return 'data:image/svg+xml;charset=utf-8,' + quote(svg)


def hit_test_node(store: GraphStore, viewport: ViewportState,
                  screen_point: Point, origin: Point = (0.0, 0.0)) -> Optional[str]:
    """Return the topmost node whose card contains the screen point."""
    wx, wy = screen_to_world(screen_point, origin, viewport.pan_offset, viewport.scale)
    # Later nodes are drawn on top
    for node in reversed(store.nodes):
        x, y = node.position
        if x <= wx <= x + NODE_WIDTH and y <= wy <= y + NODE_HEIGHT:
            return node.id
    return None


class SvgCanvasSurface:
    """CanvasSurface backed by the rendered SVG geometry."""

    def __init__(self, controller: CanvasController, width: float, height: float,
                 origin: Point = (0.0, 0.0)):
        self._controller = controller
        self._size = (float(width), float(height))
        self._origin = origin

    def canvas_origin(self) -> Point:
        return self._origin

    def canvas_size(self) -> Tuple[float, float]:
        return self._size

    def hit_test(self, screen_point: Point) -> Optional[str]:
        return hit_test_node(self._controller.store, self._controller.viewport, screen_point, self._origin)


def _render_node(node: Node, is_selected: bool) -> str:
    style = NODE_KIND_STYLES[node.kind.value]
    color = style['color']
    stroke = SELECTION_COLOR if is_selected else color
    stroke_width = 3 if is_selected else 2
    x, y = node.position
    mid_y = NODE_HEIGHT / 2

    parts = [
        f'<g transform="translate({x:.2f} {y:.2f})">',
        f'<rect width="{NODE_WIDTH}" height="{NODE_HEIGHT}" rx="12" fill="{CARD_FILL}" '
        f'stroke="{stroke}" stroke-width="{stroke_width}" />',
        f'<rect width="{NODE_WIDTH}" height="{NODE_HEADER_HEIGHT}" rx="10" fill="{color}" />',
        f'<rect y="{NODE_HEADER_HEIGHT - 10}" width="{NODE_WIDTH}" height="10" fill="{color}" />',
        f'<text x="12" y="26" fill="#ffffff" font-size="14" font-weight="bold" '
        f'font-family="system-ui, sans-serif">{html.escape(style["label"])}</text>',
        f'<text x="12" y="{NODE_HEADER_HEIGHT + 24}" fill="#e2e8f0" font-size="14" '
        f'font-family="system-ui, sans-serif">{html.escape(node.label)}</text>',
        f'<text x="12" y="{NODE_HEADER_HEIGHT + 44}" fill="#64748b" font-size="12" '
        f'font-family="system-ui, sans-serif">{html.escape(style["hint"])}</text>',
    ]
    if node.kind.accepts_incoming:
        parts.append(f'<circle cx="0" cy="{mid_y}" r="{HANDLE_RADIUS}" fill="#334155" stroke="#ffffff" stroke-width="2" />')
    if node.kind.allows_outgoing:
        parts.append(f'<circle cx="{NODE_WIDTH}" cy="{mid_y}" r="{HANDLE_RADIUS}" fill="#334155" stroke="#ffffff" stroke-width="2" />')
    parts.append('</g>')
    return ''.join(parts)


def render_canvas_svg(controller: CanvasController) -> str:
    """
    Build the SVG overlay content for the current editor state.

    Returns:
        SVG fragment (no outer <svg> element) for interactive_image.content
    """
    viewport = controller.viewport
    scale = viewport.scale
    pan_x, pan_y = viewport.pan_offset
    spacing = GRID_SPACING * scale
    selected_id = controller.selected_node_id

    parts: List[str] = [
        '<defs>',
        f'<marker id="arrowhead" markerWidth="10" markerHeight="7" refX="9" refY="3.5" orient="auto">'
        f'<polygon points="0 0, 10 3.5, 0 7" fill="{EDGE_COLOR}" /></marker>',
        f'<pattern id="grid" width="{spacing:.2f}" height="{spacing:.2f}" x="{pan_x:.2f}" y="{pan_y:.2f}" '
        f'patternUnits="userSpaceOnUse"><circle cx="1" cy="1" r="1" fill="{EDGE_COLOR}" /></pattern>',
        '</defs>',
        '<rect width="100%" height="100%" fill="url(#grid)" opacity="0.2" />',
        f'<g transform="translate({pan_x:.2f} {pan_y:.2f}) scale({scale:.3f})">',
    ]

    for path in iter_edge_paths(controller.store):
        parts.append(
            f'<path d="{path.to_svg()}" stroke="{EDGE_COLOR}" stroke-width="2" '
            f'fill="none" marker-end="url(#arrowhead)" />'
        )

    for node in controller.store.nodes:
        parts.append(_render_node(node, node.id == selected_id))

    parts.append('</g>')
    return ''.join(parts)
