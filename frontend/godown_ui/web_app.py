"""
NiceGUI frontend for the Godown inventory API.

Pages: login/signup, the hierarchy dashboard and inventory statistics.
"""

import logging
import os
from typing import Any, Dict, List

from nicegui import app, ui

from godown_ui.api_client import API_URL, ApiClient, ApiError
from godown_ui.controller import STATS_ERROR, DashboardController
from godown_ui.state import DashboardState
from godown_ui.tree import TreeNode, iter_nodes

logger = logging.getLogger(__name__)

STORAGE_SECRET = os.getenv("STORAGE_SECRET", "godown-dashboard")

# Tree node header: items can be dragged onto leaf locations or other items
DRAGGABLE_HEADER = r'''
    <div class="row items-center no-wrap"
         :draggable="props.node.type === 'item'"
         @dragstart="() => $parent.$emit('drag_node', props.node.id)"
         @dragover.prevent
         @drop.prevent="() => $parent.$emit('drop_node', props.node.id)">
        <q-icon :name="props.node.icon" class="q-mr-sm" />
        <span>{{ props.node.label }}</span>
    </div>
'''


# --- Styles ---

def setup_styles():
    """CSS shared by every page."""
    ui.add_head_html("""
    <style>
        .container {
            max-width: 1200px;
            margin: 0 auto;
            padding: 20px;
        }
        .stat-card {
            text-align: center;
            padding: 20px;
        }
        .stat-value {
            font-size: 2em;
            font-weight: bold;
            color: #1f538d;
        }
        .stat-label {
            color: #666;
            margin-top: 5px;
        }
    </style>
    """)


# --- Helpers ---

def current_client() -> ApiClient:
    return ApiClient(API_URL, token=app.storage.user.get("token"))


def to_ui_nodes(nodes: List[TreeNode]) -> List[Dict[str, Any]]:
    """Display nodes -> the dict shape ``ui.tree`` renders."""
    return [
        {
            "id": node.id,
            "label": node.name if node.is_location else f"{node.name} ({node.item_details.get('quantity', 0)})",
            "type": node.type,
            "icon": "warehouse" if node.is_location else "inventory_2",
            "children": to_ui_nodes(node.children),
        }
        for node in nodes
    ]


def with_current(options: List[str], value: str) -> List[str]:
    """Keep the selected value selectable after the option list changes."""
    return options if value in options else options + [value]


def leaf_locations(nodes: List[TreeNode]) -> Dict[str, str]:
    return {node.id: node.name for node in iter_nodes(nodes) if node.is_location and node.is_leaf_location}


def nav_bar():
    with ui.row().classes('w-full items-center'):
        ui.link('Dashboard', '/')
        ui.link('Statistics', '/statistics')

        def logout():
            app.storage.user.pop("token", None)
            ui.navigate.to('/login')

        ui.button('Log out', on_click=logout).props('flat')


# --- Pages ---

@ui.page('/login')
async def login_page():
    """Login and signup."""
    setup_styles()

    with ui.column().classes('container'):
        ui.label('Godown Inventory').style('font-size: 2em; font-weight: bold; margin-bottom: 20px;')

        with ui.card():
            name = ui.input('Name (signup only)').classes('w-full')
            email = ui.input('Email').classes('w-full')
            password = ui.input('Password', password=True).classes('w-full')

            async def submit(signup: bool):
                client = ApiClient(API_URL)
                try:
                    if signup:
                        await client.signup(name.value, email.value, password.value)
                    else:
                        await client.login(email.value, password.value)
                except ApiError as e:
                    ui.notify(f"Error: {e.detail}", type='negative')
                    return
                app.storage.user["token"] = client.token
                ui.navigate.to('/')

            with ui.row():
                ui.button('Log in', on_click=lambda: submit(False))
                ui.button('Sign up', on_click=lambda: submit(True)).props('outline')


@ui.page('/')
async def dashboard():
    """Hierarchy tree with search, filters, item details and moves."""
    if not app.storage.user.get("token"):
        ui.navigate.to('/login')
        return
    setup_styles()

    state = DashboardState()
    controller = DashboardController(current_client(), state)
    ui.context.client.on_disconnect(controller.teardown)

    with ui.column().classes('container'):
        nav_bar()
        ui.label('Godowns').style('font-size: 2em; font-weight: bold;')

        ui.input('Search items', on_change=lambda e: controller.search(e.value or '')).classes('w-full')

        @ui.refreshable
        def filter_panel():
            filters = state.filters
            with ui.row():
                ui.select(with_current(state.categories, filters.category), value=filters.category, label='Category').bind_value(filters, 'category')
                ui.select(with_current(state.statuses, filters.status), value=filters.status, label='Status').bind_value(filters, 'status')
                ui.select(with_current(state.brands, filters.brand), value=filters.brand, label='Brand').bind_value(filters, 'brand')
            with ui.row():
                ui.input('Min price').bind_value(filters, 'min_price')
                ui.input('Max price').bind_value(filters, 'max_price')
                ui.input('Min quantity').bind_value(filters, 'min_quantity')
                ui.input('Max quantity').bind_value(filters, 'max_quantity')

            async def reset():
                filters.reset()
                await controller.refresh()

            with ui.row():
                ui.button('Apply filters', on_click=controller.refresh)
                ui.button('Reset', on_click=reset).props('outline')

        @ui.refreshable
        def tree_panel():
            if state.loading:
                ui.spinner()
            elif state.error:
                ui.label(state.error).style('color: red;')
            elif not state.displayed_tree:
                ui.label('No items found.').style('color: #666;')
            else:
                tree = ui.tree(
                    to_ui_nodes(state.displayed_tree),
                    label_key='label',
                    on_select=lambda e: controller.select(e.value),
                    on_expand=lambda e: state.expansion.sync(e.value),
                )
                tree.add_slot('default-header', DRAGGABLE_HEADER)
                tree.on('drag_node', lambda e: dragging.update(id=e.args))
                tree.on('drop_node', drop_on)
                tree.expand(state.expansion.expanded_ids())

        dragging: Dict[str, Any] = {'id': None}

        async def drop_on(e):
            dragged_id, dragging['id'] = dragging['id'], None
            if not dragged_id or dragged_id == e.args:
                return
            if await controller.drop(dragged_id, e.args):
                ui.notify('Item moved', type='positive')
            else:
                ui.notify('Item could not be moved', type='negative')

        @ui.refreshable
        def details_panel():
            node = state.selected
            if node is None or not node.is_item:
                ui.label('Select an item to see its details.').style('color: #666;')
                return
            details = node.item_details or {}
            with ui.card():
                ui.label(details.get('name', '')).style('font-size: 1.2em; font-weight: bold;')
                for label, key in (
                    ('Quantity', 'quantity'),
                    ('Category', 'category'),
                    ('Brand', 'brand'),
                    ('Price', 'price'),
                    ('Status', 'status'),
                ):
                    ui.label(f'{label}: {details.get(key)}')
                for key, value in (details.get('attributes') or {}).items():
                    ui.label(f'{key}: {value}')
                if details.get('image_url'):
                    ui.image(details['image_url']).style('max-width: 300px;')

                targets = leaf_locations(state.tree)
                destination = ui.select(targets, label='Move to')

                async def do_move():
                    if not destination.value:
                        return
                    if await controller.move(node.id, destination.value):
                        ui.notify('Item moved', type='positive')
                    else:
                        ui.notify('Item could not be moved', type='negative')

                ui.button('Move', on_click=do_move)

        def redraw():
            filter_panel.refresh()
            tree_panel.refresh()
            details_panel.refresh()

        controller.on_change = redraw

        with ui.expansion('Filters'):
            filter_panel()
        with ui.row().classes('w-full'):
            with ui.column().classes('w-1/2'):
                tree_panel()
            with ui.column().classes('w-1/2'):
                details_panel()

    await controller.refresh()


@ui.page('/statistics')
async def statistics_page():
    """Inventory statistics, optionally scoped by godown, sub-godown, brand and category."""
    if not app.storage.user.get("token"):
        ui.navigate.to('/login')
        return
    setup_styles()

    controller = DashboardController(current_client())
    client = controller.client
    scope: Dict[str, Any] = {"godown": None, "subgodown": None, "brand": None, "category": None}

    with ui.column().classes('container'):
        nav_bar()
        ui.label('Inventory Statistics').style('font-size: 2em; font-weight: bold; margin-bottom: 20px;')

        @ui.refreshable
        async def scope_panel():
            try:
                godowns = await client.list_godowns()
                subgodowns = await client.list_godowns(scope["godown"]) if scope["godown"] else []
                options = await client.filter_options(
                    godown=scope["godown"], subgodown=scope["subgodown"]
                )
            except ApiError as e:
                logger.error(f"Error fetching filter options: {e}")
                ui.label(STATS_ERROR).style('color: red;')
                return

            async def pick(key: str, value: Any):
                scope[key] = value or None
                if key == "godown":
                    scope["subgodown"] = None
                scope_panel.refresh()

            with ui.row():
                ui.select(
                    {g["id"]: g["name"] for g in godowns},
                    value=scope["godown"],
                    label='Godown',
                    clearable=True,
                    on_change=lambda e: pick("godown", e.value),
                )
                ui.select(
                    {g["id"]: g["name"] for g in subgodowns},
                    value=scope["subgodown"],
                    label='SubGodown',
                    clearable=True,
                    on_change=lambda e: pick("subgodown", e.value),
                )
                ui.select(
                    with_current(options["brands"], scope["brand"]) if scope["brand"] else options["brands"],
                    value=scope["brand"],
                    label='Brand',
                    clearable=True,
                    on_change=lambda e: scope.update(brand=e.value or None),
                )
                ui.select(
                    with_current(options["categories"], scope["category"]) if scope["category"] else options["categories"],
                    value=scope["category"],
                    label='Category',
                    clearable=True,
                    on_change=lambda e: scope.update(category=e.value or None),
                )

            async def reset():
                for key in scope:
                    scope[key] = None
                scope_panel.refresh()
                stats_panel.refresh()

            with ui.row():
                ui.button('Apply', on_click=stats_panel.refresh)
                ui.button('Reset', on_click=reset).props('outline')

        @ui.refreshable
        async def stats_panel():
            try:
                stats = await controller.statistics(**scope)
            except ApiError as e:
                logger.error(f"Error fetching statistics: {e}")
                ui.label(STATS_ERROR).style('color: red;')
                return

            with ui.row().classes('w-full'):
                for value, label in (
                    (stats.total_locations, 'Total Locations'),
                    (stats.total_godowns, 'Total Godowns'),
                    (stats.total_sub_godowns, 'Total SubGodowns'),
                    (stats.total_items, 'Total Items'),
                    (stats.in_stock, 'In Stock'),
                    (stats.out_of_stock, 'Out of Stock'),
                    (f'{stats.total_inventory_value:.2f}', 'Inventory Value'),
                ):
                    with ui.card().classes('stat-card'):
                        ui.label(f'{value}').classes('stat-value')
                        ui.label(label).classes('stat-label')

            for title, counts in (
                ('Items per Category', stats.items_per_category),
                ('Items per Brand', stats.items_per_brand),
            ):
                with ui.card().classes('w-full'):
                    ui.label(title).style('font-size: 1.2em;')
                    ui.table(
                        columns=[
                            {'name': 'name', 'label': 'Name', 'field': 'name'},
                            {'name': 'count', 'label': 'Items', 'field': 'count'},
                        ],
                        rows=[{'name': name, 'count': count} for name, count in sorted(counts.items())],
                    ).classes('w-full')

            with ui.card().classes('w-full'):
                ui.label('Low Stock Items').style('font-size: 1.2em;')
                if stats.low_stock_items:
                    ui.table(
                        columns=[
                            {'name': 'name', 'label': 'Item', 'field': 'name'},
                            {'name': 'quantity', 'label': 'Quantity', 'field': 'quantity'},
                        ],
                        rows=[
                            {'name': item['name'], 'quantity': item['quantity']}
                            for item in stats.low_stock_items
                        ],
                    ).classes('w-full')
                else:
                    ui.label('No low stock items.').style('color: #666;')

        with ui.expansion('Filter Stats'):
            await scope_panel()
        await stats_panel()


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ui.run(port=8081, title="Godown Inventory", storage_secret=STORAGE_SECRET)


if __name__ in {"__main__", "__mp_main__"}:
    main()
