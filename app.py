"""
Main NiceGUI application for Flow Builder.
Wires the CanvasController to a toolbar, a component palette and an SVG
canvas rendered with ui.interactive_image.
"""

from nicegui import ui
import logging
import sys

from dotenv import load_dotenv
load_dotenv()

from flowbuilder.config import get_canvas_size, get_port, get_flows_path
from flowbuilder.flow_store import FlowStore
from flowbuilder.canvas import CanvasController, ToolMode, NodeKind, NODE_KIND_STYLES
from flowbuilder.canvas.handlers import setup_canvas_handlers
from flowbuilder.canvas.renderer import SvgCanvasSurface, render_canvas_svg, blank_canvas_source

logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
logger = logging.getLogger(__name__)

DEFAULT_FLOW_NAME = 'main'

CANVAS_EVENTS = ['mousedown', 'mousemove', 'mouseup', 'mouseleave']


def load_initial_flow(controller: CanvasController, flow_store: FlowStore) -> None:
    """Load the saved flow if there is a usable one, else the starter flow."""
    saved = flow_store.load(DEFAULT_FLOW_NAME)
    if saved:
        try:
            controller.load_flow(saved)
            return
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Saved flow '{DEFAULT_FLOW_NAME}' is malformed, using demo flow: {e}")
    controller.store.seed_demo_flow()


# UI Construction - encapsulated in page function so each client gets its own editor
@ui.page('/')
def main_page():
    ui.dark_mode().enable()
    ui.query('body').style('margin: 0; padding: 0; overflow: hidden;')

    width, height = get_canvas_size()
    flow_store = FlowStore(str(get_flows_path()))

    controller = CanvasController()
    load_initial_flow(controller, flow_store)
    surface = SvgCanvasSurface(controller, width, height)
    controller.attach_surface(surface)

    state = {}

    def refresh_canvas_ui():
        """Redraw the canvas and sync toolbar widgets with editor state."""
        state['canvas'].content = render_canvas_svg(controller)
        state['zoom_label'].text = f'{controller.viewport.zoom_percent}%'
        state['delete_btn'].set_visibility(controller.selected_node_id is not None)

        mode = controller.session.tool_mode
        for btn_mode, btn in state['tool_buttons'].items():
            btn.props(remove='color')
            btn.props(f'flat color={"primary" if btn_mode is mode else "grey"}')

    def save_flow():
        try:
            flow_store.save(DEFAULT_FLOW_NAME, controller.store.to_dict())
        except OSError as e:
            logger.error(f"Failed to save flow: {e}")
            ui.notify(f'Save failed: {e}', type='negative')
            return
        ui.notify('Flow saved', type='positive', position='bottom', timeout=1000)

    handlers = setup_canvas_handlers(controller, surface, refresh_canvas_ui)

    # --- Layout Construction ---

    # 1. Toolbar
    with ui.row().classes('w-full h-14 items-center justify-between px-4 bg-slate-800 border-b border-slate-700'):
        with ui.row().classes('items-center gap-2'):
            ui.label('Flow Builder').classes('font-bold text-white mr-4')
            with ui.button_group().props('flat'):
                select_btn = ui.button(icon='near_me', on_click=lambda: controller.set_tool_mode(ToolMode.SELECT)).props('flat')
                select_btn.tooltip('Select Mode')
                hand_btn = ui.button(icon='pan_tool', on_click=lambda: controller.set_tool_mode(ToolMode.HAND)).props('flat')
                hand_btn.tooltip('Pan Mode')
            state['tool_buttons'] = {ToolMode.SELECT: select_btn, ToolMode.HAND: hand_btn}

            ui.separator().props('vertical')

            ui.button(icon='zoom_out', on_click=controller.zoom_out).props('flat color=grey')
            state['zoom_label'] = ui.label('100%').classes('text-xs text-slate-400 w-12 text-center')
            ui.button(icon='zoom_in', on_click=controller.zoom_in).props('flat color=grey')

        with ui.row().classes('items-center gap-3'):
            state['delete_btn'] = ui.button(icon='delete', on_click=controller.delete_selected_node).props('flat color=red')
            state['delete_btn'].tooltip('Delete Selected')
            ui.button('Save Flow', icon='save', on_click=save_flow).props('color=primary')

    with ui.row().classes('w-full no-wrap gap-0').style('height: calc(100vh - 56px);'):
        # 2. Component palette
        with ui.column().classes('w-64 h-full p-2 gap-2 bg-slate-800 border-r border-slate-700'):
            ui.label('Components').classes('text-xs font-bold text-slate-500 uppercase tracking-wider p-2')
            for kind in NodeKind:
                style = NODE_KIND_STYLES[kind.value]
                with ui.card().classes('w-full cursor-pointer bg-slate-800/50 hover:bg-slate-700').on(
                        'click', lambda _, k=kind: controller.add_node(k)):
                    with ui.row().classes('items-center gap-3 no-wrap'):
                        ui.icon(style['icon'], size='md').style(f'color: {style["color"]}')
                        with ui.column().classes('gap-0'):
                            ui.label(style['label']).classes('text-sm font-medium text-white')
                            ui.label('Click to add').classes('text-xs text-slate-500')

        # 3. Canvas
        with ui.element('div').classes('relative flex-1 h-full overflow-hidden bg-slate-900'):
            state['canvas'] = ui.interactive_image(
                blank_canvas_source(width, height),
                content='',
                on_mouse=handlers['handle_mouse'],
                events=CANVAS_EVENTS,
                cross=False,
            ).style(f'width: {width}px; height: {height}px; cursor: grab;')

            # Floating "fit to screen" control
            with ui.element('div').classes('absolute bottom-6 right-6 z-20'):
                ui.button(icon='fit_screen', on_click=controller.reset_view).props('flat color=grey').tooltip('Fit to Screen')

    ui.keyboard(on_key=handlers['handle_keyboard'])

    refresh_canvas_ui()


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title='Flow Builder',
        port=get_port(),
        reload=not getattr(sys, 'frozen', False),
    )
