"""
Canvas Handlers - Event handlers wiring NiceGUI events to the controller.

This module keeps the pointer and keyboard plumbing out of app.py so the
main application file stays focused on layout.
"""

import logging
from typing import Any, Callable, Dict

from nicegui import ui

from flowbuilder.canvas.controller import CanvasController, CanvasSurface

logger = logging.getLogger(__name__)

# Keys that delete the selected node
DELETE_KEYS = ('Delete', 'Backspace')


def setup_canvas_handlers(
    controller: CanvasController,
    surface: CanvasSurface,
    refresh_canvas_ui: Callable[[], None],
) -> Dict[str, Callable[[Any], None]]:
    """
    Set up all canvas event handlers.

    Args:
        controller: CanvasController instance
        surface: Rendering surface used for hit testing
        refresh_canvas_ui: Function to redraw the canvas and toolbar

    Returns:
        Dict with handler functions for binding to UI events
    """

    def on_controller_change(_controller):
        """Called whenever editor state changes - redraw."""
        refresh_canvas_ui()

    controller.set_on_change(on_controller_change)

    def handle_mouse(event):
        """Route interactive_image mouse events into the pointer state machine."""
        event_type = getattr(event, 'type', None)
        point = (float(getattr(event, 'image_x', 0.0)), float(getattr(event, 'image_y', 0.0)))

        if event_type == 'mousedown':
            controller.on_pointer_down(point, surface.hit_test(point))
        elif event_type == 'mousemove':
            controller.on_pointer_move(point)
        elif event_type == 'mouseup':
            controller.on_pointer_up()
        elif event_type in ('mouseleave', 'mouseout'):
            controller.on_pointer_leave()
        else:
            logger.debug(f"Ignoring canvas event {event_type}")

    def handle_keyboard(e):
        """Delete the selected node on Delete/Backspace."""
        if not e.action.keydown or e.action.repeat:
            return
        if e.key.name in DELETE_KEYS and controller.selected_node_id:
            if controller.delete_selected_node():
                ui.notify('Node deleted', position='bottom', timeout=800)

    return {
        'handle_mouse': handle_mouse,
        'handle_keyboard': handle_keyboard,
    }
