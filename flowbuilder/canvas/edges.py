"""
Edge path geometry.

Connections are drawn as cubic bezier curves from the source node's output
handle (right edge) to the target node's input handle (left edge). All
coordinates are world space; the renderer applies pan/zoom as a group
transform.
"""

from dataclasses import dataclass
from typing import Iterator

from flowbuilder.canvas.constants import NODE_WIDTH, EDGE_ANCHOR_Y, EDGE_CURVATURE
from flowbuilder.canvas.graph_store import GraphStore, Node
from flowbuilder.canvas.transform import Point


@dataclass(frozen=True)
class EdgePath:
    """Cubic bezier descriptor for one connection."""
    connection_id: str
    start: Point
    control1: Point
    control2: Point
    end: Point

    def to_svg(self) -> str:
        """SVG path data, e.g. 'M 340 340 C 420 340, 520 340, 600 340'."""
        return (
            f"M {_fmt(self.start[0])} {_fmt(self.start[1])} "
            f"C {_fmt(self.control1[0])} {_fmt(self.control1[1])}, "
            f"{_fmt(self.control2[0])} {_fmt(self.control2[1])}, "
            f"{_fmt(self.end[0])} {_fmt(self.end[1])}"
        )


def _fmt(value: float) -> str:
    return f"{value:.2f}".rstrip('0').rstrip('.')


def build_edge_path(source: Node, target: Node, connection_id: str = '') -> EdgePath:
    start = (source.position[0] + NODE_WIDTH, source.position[1] + EDGE_ANCHOR_Y)
    end = (target.position[0], target.position[1] + EDGE_ANCHOR_Y)
    dist = abs(end[0] - start[0]) * EDGE_CURVATURE
    return EdgePath(
        connection_id=connection_id,
        start=start,
        control1=(start[0] + dist, start[1]),
        control2=(end[0] - dist, end[1]),
        end=end,
    )


def iter_edge_paths(store: GraphStore) -> Iterator[EdgePath]:
    """Yield a path for every connection whose endpoints both resolve."""
    for conn in store.connections:
        source = store.get_node(conn.source_id)
        target = store.get_node(conn.target_id)
        if source is None or target is None:
            continue
        yield build_edge_path(source, target, conn.id)
