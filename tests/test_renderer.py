from types import SimpleNamespace

import pytest

from flowbuilder.canvas import CanvasController, CanvasSurface, GraphStore, ViewportState
from flowbuilder.canvas.handlers import setup_canvas_handlers
from flowbuilder.canvas.renderer import (
    SvgCanvasSurface,
    blank_canvas_source,
    hit_test_node,
    render_canvas_svg,
)


@pytest.fixture
def controller():
    store = GraphStore()
    store.seed_demo_flow()
    return CanvasController(store=store)


@pytest.fixture
def surface(controller):
    surface = SvgCanvasSurface(controller, 1200, 720)
    controller.attach_surface(surface)
    return surface


class TestHitTest:

    def test_hit_inside_card(self, controller):
        assert hit_test_node(controller.store, ViewportState(), (120, 320)) == '1'
        assert hit_test_node(controller.store, ViewportState(), (639, 399)) == '2'

    def test_miss_between_cards(self, controller):
        assert hit_test_node(controller.store, ViewportState(), (370, 320)) is None

    def test_hit_respects_pan_and_zoom(self, controller):
        viewport = ViewportState(scale=0.5, pan_offset=(100, -50))
        # world (400, 300) -> screen (400 * 0.5 + 100, 300 * 0.5 - 50)
        assert hit_test_node(controller.store, viewport, (302, 102)) == '2'
        assert hit_test_node(controller.store, viewport, (298, 102)) is None

    def test_topmost_node_wins(self, controller):
        controller.store.update_node_position('2', (100, 300))
        assert hit_test_node(controller.store, ViewportState(), (150, 350)) == '2'

    def test_surface_matches_protocol(self, surface):
        assert isinstance(surface, CanvasSurface)
        assert surface.canvas_origin() == (0.0, 0.0)
        assert surface.canvas_size() == (1200.0, 720.0)
        assert surface.hit_test((120, 320)) == '1'


class TestRenderSvg:

    def test_contains_edges_and_nodes(self, controller):
        svg = render_canvas_svg(controller)
        assert 'M 340 340 C 370 340, 370 340, 400 340' in svg
        assert 'marker-end="url(#arrowhead)"' in svg
        assert 'Start Flow' in svg
        assert 'Welcome Message' in svg

    def test_group_transform_follows_viewport(self, controller):
        controller.zoom_in()
        svg = render_canvas_svg(controller)
        assert 'translate(0.00 0.00) scale(1.100)' in svg

    def test_labels_are_escaped(self, controller):
        controller.store.rename_node('1', '<script>alert(1)</script>')
        svg = render_canvas_svg(controller)
        assert '<script>' not in svg
        assert '&lt;script&gt;' in svg

    def test_selection_ring(self, controller):
        assert '#6366f1' not in render_canvas_svg(controller)
        controller.select_node('2')
        assert '#6366f1' in render_canvas_svg(controller)

    def test_trigger_has_no_input_handle(self):
        store = GraphStore()
        store.load_dict({'nodes': [{'id': 't', 'type': 'trigger', 'label': 'T', 'x': 0, 'y': 0}]})
        svg = render_canvas_svg(CanvasController(store=store))
        assert 'cx="0" cy="50.0"' not in svg
        assert 'cx="240.0" cy="50.0"' in svg

    def test_blank_source_is_svg_data_url(self):
        source = blank_canvas_source(1200, 720)
        assert source.startswith('data:image/svg+xml')
        assert 'width%3D%221200%22' in source


class TestMouseHandlers:

    def test_mouse_events_drive_controller(self, controller, surface):
        redraws = []
        handlers = setup_canvas_handlers(controller, surface, lambda: redraws.append(1))
        handle_mouse = handlers['handle_mouse']

        handle_mouse(SimpleNamespace(type='mousedown', image_x=410, image_y=320))
        assert controller.session.dragging_node_id == '2'
        assert controller.selected_node_id == '2'

        handle_mouse(SimpleNamespace(type='mousemove', image_x=460, image_y=300))
        assert controller.store.get_node('2').position == (450.0, 280.0)

        handle_mouse(SimpleNamespace(type='mouseleave', image_x=0, image_y=0))
        assert controller.session.is_idle
        assert redraws

    def test_empty_canvas_mouse_pans(self, controller, surface):
        handlers = setup_canvas_handlers(controller, surface, lambda: None)
        handlers['handle_mouse'](SimpleNamespace(type='mousedown', image_x=800, image_y=600))
        handlers['handle_mouse'](SimpleNamespace(type='mousemove', image_x=820, image_y=590))
        handlers['handle_mouse'](SimpleNamespace(type='mouseup', image_x=820, image_y=590))
        assert controller.viewport.pan_offset == (20, -10)
