"""
Flow canvas editing engine.

This package provides the pannable, zoomable node canvas:
- GraphStore: Nodes, connections and selection
- ViewportState: Zoom and pan snapshot with pure update functions
- CanvasController: Pointer state machine and toolbar actions
- Edge paths: Bezier geometry for connections
- Renderer / handlers: NiceGUI integration

Usage:
    from flowbuilder.canvas import CanvasController, GraphStore
    from flowbuilder.canvas.handlers import setup_canvas_handlers
"""

from flowbuilder.canvas.constants import (
    NODE_WIDTH,
    NODE_HEIGHT,
    EDGE_ANCHOR_Y,
    MIN_SCALE,
    MAX_SCALE,
    ZOOM_STEP,
    NODE_KIND_STYLES,
)
from flowbuilder.canvas.transform import screen_to_world, world_to_screen
from flowbuilder.canvas.viewport import ViewportState
from flowbuilder.canvas.graph_store import GraphStore, Node, NodeKind, Connection
from flowbuilder.canvas.edges import EdgePath, build_edge_path, iter_edge_paths
from flowbuilder.canvas.controller import (
    CanvasController,
    CanvasSurface,
    InteractionSession,
    ToolMode,
    Idle,
    Panning,
    DraggingNode,
)

__all__ = [
    'CanvasController',
    'CanvasSurface',
    'InteractionSession',
    'ToolMode',
    'Idle',
    'Panning',
    'DraggingNode',
    'GraphStore',
    'Node',
    'NodeKind',
    'Connection',
    'ViewportState',
    'EdgePath',
    'build_edge_path',
    'iter_edge_paths',
    'screen_to_world',
    'world_to_screen',
    'NODE_WIDTH',
    'NODE_HEIGHT',
    'EDGE_ANCHOR_Y',
    'MIN_SCALE',
    'MAX_SCALE',
    'ZOOM_STEP',
    'NODE_KIND_STYLES',
]
