"""
Shared constants for the flow canvas.

These values are used by the geometry code (edges, hit testing) and by
the SVG renderer. Keep them in sync!
"""

# Node card geometry in world units
NODE_WIDTH = 240.0
NODE_HEIGHT = 100.0
NODE_HEADER_HEIGHT = 40.0

# Edges attach this far below a node's top edge
EDGE_ANCHOR_Y = 40.0

# Bezier control points sit this fraction of the horizontal span away from the ends
EDGE_CURVATURE = 0.5

# Zoom limits and toolbar step
MIN_SCALE = 0.2
MAX_SCALE = 2.0
ZOOM_STEP = 0.1

# New nodes land at the viewport center, shifted by this offset plus a random jitter
NEW_NODE_OFFSET = (-100.0, -50.0)
NEW_NODE_JITTER = 50.0

# Fallback canvas size when the surface cannot report one
DEFAULT_CANVAS_WIDTH = 800.0
DEFAULT_CANVAS_HEIGHT = 600.0

# Background dot grid spacing at scale 1
GRID_SPACING = 20.0

HANDLE_RADIUS = 7.0

# Display metadata per node kind, in palette order
NODE_KIND_STYLES = {
    'trigger': {
        'label': 'Trigger',
        'icon': 'bolt',
        'color': '#10b981',
        'hint': 'When a user sends a message...',
    },
    'message': {
        'label': 'Message',
        'icon': 'chat',
        'color': '#3b82f6',
        'hint': 'Send "Hello World"...',
    },
    'condition': {
        'label': 'Condition',
        'icon': 'call_split',
        'color': '#f59e0b',
        'hint': 'Check if user is subscribed...',
    },
    'action': {
        'label': 'Action',
        'icon': 'play_circle',
        'color': '#ec4899',
        'hint': 'Perform logic...',
    },
}
