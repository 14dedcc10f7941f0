"""
Canvas Controller - single source of truth for flow editing state.

The controller coordinates between:
- Pointer events from the rendering layer (down / move / up / leave)
- Toolbar and palette actions (add node, delete, tool mode, zoom)
- The GraphStore (nodes, connections, selection)
- The ViewportState (scale, pan offset)

Pointer handling is a small state machine with three states: Idle,
Panning and DraggingNode. A press on empty canvas always pans, even in
select mode; only a press on a node in select mode drags it. There is no
marquee selection.

Session and viewport are immutable snapshots that each event replaces in
one step. The rendering layer is reached only through the CanvasSurface
protocol, so the controller runs without a browser.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol, Tuple, Union, runtime_checkable

from flowbuilder.canvas.constants import ZOOM_STEP, DEFAULT_CANVAS_WIDTH, DEFAULT_CANVAS_HEIGHT
from flowbuilder.canvas.graph_store import GraphStore, Node, NodeKind
from flowbuilder.canvas.transform import Point, screen_to_world, sub_points
from flowbuilder.canvas import viewport as vp

logger = logging.getLogger(__name__)


class ToolMode(str, Enum):
    SELECT = 'select'
    HAND = 'hand'


@dataclass(frozen=True)
class Idle:
    """No pointer session in progress."""


@dataclass(frozen=True)
class Panning:
    """Dragging the canvas. `anchor` is the last screen point seen."""
    anchor: Point


@dataclass(frozen=True)
class DraggingNode:
    """Dragging a node. `grab_offset` is pointer world point minus node position at press."""
    node_id: str
    grab_offset: Point


ActiveDrag = Union[Idle, Panning, DraggingNode]

IDLE = Idle()


@dataclass(frozen=True)
class InteractionSession:
    """Immutable snapshot of the pointer session."""
    tool_mode: ToolMode = ToolMode.SELECT
    active_drag: ActiveDrag = IDLE

    @property
    def is_idle(self) -> bool:
        return isinstance(self.active_drag, Idle)

    @property
    def dragging_node_id(self) -> Optional[str]:
        if isinstance(self.active_drag, DraggingNode):
            return self.active_drag.node_id
        return None


@runtime_checkable
class CanvasSurface(Protocol):
    """
    What the controller needs from the rendering layer.

    Hit testing lives here because it depends on rendered node geometry.
    """

    def canvas_origin(self) -> Point:
        """Screen position of the canvas element's top-left corner."""
        ...

    def canvas_size(self) -> Tuple[float, float]:
        """Visible canvas size in screen pixels."""
        ...

    def hit_test(self, screen_point: Point) -> Optional[str]:
        """Id of the node under screen_point, or None for empty canvas."""
        ...


class CanvasController:
    """Applies pointer events and toolbar actions to the flow graph and viewport."""

    def __init__(self, store: Optional[GraphStore] = None,
                 surface: Optional[CanvasSurface] = None,
                 viewport: Optional[vp.ViewportState] = None):
        self._store = store or GraphStore()
        self._surface = surface
        self._viewport = viewport or vp.ViewportState()
        self._session = InteractionSession()
        self._on_change: Optional[Callable[['CanvasController'], None]] = None

    @property
    def store(self) -> GraphStore:
        return self._store

    @property
    def viewport(self) -> vp.ViewportState:
        return self._viewport

    @property
    def session(self) -> InteractionSession:
        return self._session

    @property
    def selected_node_id(self) -> Optional[str]:
        return self._store.selected_id

    def attach_surface(self, surface: CanvasSurface) -> None:
        self._surface = surface

    def set_on_change(self, callback: Callable[['CanvasController'], None]):
        self._on_change = callback

    def _notify_change(self):
        if self._on_change:
            self._on_change(self)

    # --- Coordinate helpers ---

    def _origin(self) -> Point:
        return self._surface.canvas_origin() if self._surface else (0.0, 0.0)

    def _size(self) -> Tuple[float, float]:
        if self._surface:
            width, height = self._surface.canvas_size()
            if width and height:
                return width, height
        return DEFAULT_CANVAS_WIDTH, DEFAULT_CANVAS_HEIGHT

    def world_at(self, screen_point: Point) -> Point:
        """World point under a screen point for the current viewport."""
        return screen_to_world(screen_point, self._origin(), self._viewport.pan_offset, self._viewport.scale)

    def viewport_center(self) -> Point:
        """World point at the center of the visible canvas."""
        origin = self._origin()
        width, height = self._size()
        return self.world_at((origin[0] + width / 2, origin[1] + height / 2))

    # --- Toolbar / palette actions ---

    def set_tool_mode(self, mode: Union[ToolMode, str]) -> InteractionSession:
        """Switch tools; an in-progress drag or pan is left running."""
        self._session = replace(self._session, tool_mode=ToolMode(mode))
        self._notify_change()
        return self._session

    def add_node(self, kind: Union[NodeKind, str]) -> Node:
        node = self._store.add_node(kind, self.viewport_center())
        self._notify_change()
        return node

    def delete_selected_node(self) -> bool:
        selected = self._store.selected_id
        if selected is None:
            return False
        deleted = self._store.delete_node(selected)
        self._notify_change()
        return deleted

    def select_node(self, node_id: Optional[str]) -> bool:
        selected = self._store.select(node_id)
        self._notify_change()
        return selected

    def zoom_by(self, delta: float) -> vp.ViewportState:
        self._viewport = vp.zoom_by(self._viewport, delta)
        self._notify_change()
        return self._viewport

    def zoom_in(self) -> vp.ViewportState:
        return self.zoom_by(ZOOM_STEP)

    def zoom_out(self) -> vp.ViewportState:
        return self.zoom_by(-ZOOM_STEP)

    def reset_view(self) -> vp.ViewportState:
        self._viewport = vp.reset(self._viewport)
        self._notify_change()
        return self._viewport

    def load_flow(self, payload: Dict[str, Any]) -> None:
        """Replace the graph with a saved snapshot and end any pointer session."""
        self._store.load_dict(payload)
        self._session = replace(self._session, active_drag=IDLE)
        self._notify_change()

    # --- Pointer events ---

    def on_pointer_down(self, screen_point: Point, hit_node_id: Optional[str] = None) -> InteractionSession:
        """
        Start a pointer session.

        Hand mode, or a press that hit no live node, pans. A press on a
        node in select mode selects and drags it, remembering where on the
        node it was grabbed so the node does not jump to the cursor.
        """
        node = self._store.get_node(hit_node_id) if hit_node_id else None

        if self._session.tool_mode is ToolMode.HAND or node is None:
            drag = Panning(anchor=screen_point)
        else:
            self._store.select(node.id)
            grab_offset = sub_points(self.world_at(screen_point), node.position)
            drag = DraggingNode(node_id=node.id, grab_offset=grab_offset)

        self._session = replace(self._session, active_drag=drag)
        logger.debug(f"pointer down at {screen_point}: {type(drag).__name__}")
        self._notify_change()
        return self._session

    def on_pointer_move(self, screen_point: Point) -> InteractionSession:
        drag = self._session.active_drag

        if isinstance(drag, Panning):
            delta = sub_points(screen_point, drag.anchor)
            self._viewport = vp.pan_by(self._viewport, delta)
            # Move the anchor so the next delta is incremental
            self._session = replace(self._session, active_drag=Panning(anchor=screen_point))
        elif isinstance(drag, DraggingNode):
            position = sub_points(self.world_at(screen_point), drag.grab_offset)
            self._store.update_node_position(drag.node_id, position)
        else:
            return self._session

        self._notify_change()
        return self._session

    def on_pointer_up(self) -> InteractionSession:
        if self._session.is_idle:
            return self._session
        self._session = replace(self._session, active_drag=IDLE)
        logger.debug("pointer session ended")
        self._notify_change()
        return self._session

    def on_pointer_leave(self) -> InteractionSession:
        """Losing the pointer ends the session; the last position or pan stands."""
        return self.on_pointer_up()
