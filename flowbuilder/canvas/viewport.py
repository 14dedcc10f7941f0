"""
Viewport state: zoom factor and pan offset.

ViewportState is an immutable snapshot; the functions below return a new
snapshot instead of mutating, so readers never see a half-applied update.

Zoom is anchored at the canvas origin, not at the cursor. The world point
under the cursor drifts while zooming; this is a known limitation.
"""

from dataclasses import dataclass, replace
from typing import Tuple

from flowbuilder.canvas.constants import MIN_SCALE, MAX_SCALE
from flowbuilder.canvas.transform import Point, add_points


@dataclass(frozen=True)
class ViewportState:
    """Immutable snapshot of the canvas viewport."""
    scale: float = 1.0
    pan_offset: Tuple[float, float] = (0.0, 0.0)

    @property
    def zoom_percent(self) -> int:
        return int(round(self.scale * 100))


def clamp_scale(scale: float) -> float:
    return max(MIN_SCALE, min(MAX_SCALE, scale))


def zoom_by(viewport: ViewportState, delta: float) -> ViewportState:
    # round() keeps repeated 0.1 steps from accumulating float noise
    return replace(viewport, scale=clamp_scale(round(viewport.scale + delta, 6)))


def pan_by(viewport: ViewportState, delta_screen: Point) -> ViewportState:
    """Pan by a screen-space pixel delta; not divided by scale."""
    return replace(viewport, pan_offset=add_points(viewport.pan_offset, delta_screen))


def reset(viewport: ViewportState) -> ViewportState:
    return ViewportState()
