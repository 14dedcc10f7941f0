"""
Coordinate transform between screen space and world space.

Screen space is pixels on the rendered canvas; world space is the flow's own
coordinate system, which panning and zooming never change.

Every conversion from a pointer position to a node position goes through
screen_to_world, so drag starts, drag moves and new-node placement agree.
"""

from typing import Tuple

Point = Tuple[float, float]


def screen_to_world(screen: Point, origin: Point, pan_offset: Point, scale: float) -> Point:
    """
    Map a screen point to world coordinates.

    Args:
        screen: Pointer position in screen pixels
        origin: Screen position of the canvas element's top-left corner
        pan_offset: Current world-to-screen translation
        scale: Current zoom factor (never zero)
    """
    return (
        (screen[0] - origin[0] - pan_offset[0]) / scale,
        (screen[1] - origin[1] - pan_offset[1]) / scale,
    )


def world_to_screen(world: Point, origin: Point, pan_offset: Point, scale: float) -> Point:
    """Inverse of screen_to_world."""
    return (
        world[0] * scale + pan_offset[0] + origin[0],
        world[1] * scale + pan_offset[1] + origin[1],
    )


def add_points(a: Point, b: Point) -> Point:
    return (a[0] + b[0], a[1] + b[1])


def sub_points(a: Point, b: Point) -> Point:
    return (a[0] - b[0], a[1] - b[1])
