from typing import Dict, List

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.validation import Integer, Number
from textual.widgets import (
    Button,
    DataTable,
    Input,
    Label,
    MarkdownViewer,
    Select,
    TabbedContent,
    TabPane,
)

from wandermart.db.errors import UploadError
from wandermart.db.models import NewProduct, Order
from wandermart.utils.messages import ModeSwitchedMessage, NewOrderMessage
from wandermart.utils.pure import format_price, short_date
from wandermart.views.base_screen import BaseScreen
from wandermart.views.modal_dialog import PromptModal
from wandermart.views.scr_orders import order_markdown


class MerchantDashboardScreen(BaseScreen):
    """
    Store dashboard: the merchant's own listings, a form to add one, and
    the orders that contain at least one of their products.
    """

    def __init__(self) -> None:
        super().__init__()
        self._orders: Dict[str, Order] = {}

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Label("", id="label-merchant-status")
        with TabbedContent(id="tabs-merchant"):
            with TabPane("My Products", id="tab-products"):
                yield DataTable(id="table-my-products")
                with Vertical(id="div-new-product"):
                    with Horizontal():
                        yield Input(placeholder="Product name", id="input-prod-name")
                        yield Input(
                            placeholder="Price",
                            id="input-prod-price",
                            type="number",
                            validators=[Number(minimum=0.0)],
                        )
                        yield Input(
                            placeholder="Stock",
                            id="input-prod-stock",
                            type="integer",
                            validators=[Integer(minimum=0)],
                        )
                    yield Input(placeholder="Description", id="input-prod-descr")
                    with Horizontal():
                        yield Select([], prompt="Linked attraction (optional)", id="select-prod-attr")
                        yield Input(placeholder="Image path (optional)", id="input-prod-image")
                        yield Button("Add Product", id="btn-add-product", variant="success")
            with TabPane("Orders", id="tab-orders"):
                yield DataTable(id="table-merchant-orders")
                yield MarkdownViewer(id="md-merchant-order", show_table_of_contents=False)
                with Horizontal():
                    yield Button("Refresh", id="btn-refresh")
                    yield Button("Mark Shipped", id="btn-ship", variant="primary")

    def on_mount(self) -> None:
        products = self.query_one("#table-my-products", DataTable)
        products.cursor_type = "row"
        products.zebra_stripes = True
        products.add_columns("Product", "Near", "Price", "Stock")

        orders = self.query_one("#table-merchant-orders", DataTable)
        orders.cursor_type = "row"
        orders.zebra_stripes = True
        orders.add_columns("Order", "Date", "Buyer", "Status", "Tracking")

    @property
    def _merchant_active(self) -> bool:
        user = self.app_state.user
        return user is not None and user.role == "merchant" and user.status == "active"

    @on(Button.Pressed, "#btn-refresh")
    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    @on(NewOrderMessage)
    @work(exclusive=True, group="merchant")
    async def load_dashboard(self) -> None:
        user = self.app_state.user
        status_label = self.query_one("#label-merchant-status", Label)
        if not self._merchant_active:
            status = user.status if user else "signed out"
            status_label.update(
                f"Your merchant account is {status}. "
                "Listings and orders unlock once an admin approves it."
            )
            self.query_one("#tabs-merchant").display = False
            return
        status_label.update(f"Store: {user.username}")
        self.query_one("#tabs-merchant").display = True

        service = self.service
        products = (await service.get_products(merchant_id=user.id)).data or []
        orders = (await service.get_orders(merchant_id=user.id)).data or []
        attractions = (await service.get_attractions()).data or []

        table = self.query_one("#table-my-products", DataTable)
        table.clear()
        for p in products:
            table.add_row(
                p.name, p.attraction_name or "-", format_price(p.price), p.stock, key=p.id
            )

        self.query_one("#select-prod-attr", Select).set_options(
            [(a.title, a.id) for a in attractions]
        )
        self._render_orders(orders)

    def _render_orders(self, orders: List[Order]) -> None:
        self._orders = {o.id: o for o in orders}
        table = self.query_one("#table-merchant-orders", DataTable)
        table.clear()
        for o in orders:
            table.add_row(
                o.id,
                short_date(o.created_at),
                o.user_id,
                o.status,
                o.tracking_number or "-",
                key=o.id,
            )
        self._render_order_detail(orders[0].id if orders else None)

    @on(DataTable.RowHighlighted, "#table-merchant-orders")
    def handle_order_highlight(self, event: DataTable.RowHighlighted) -> None:
        self._render_order_detail(event.row_key.value)

    def _render_order_detail(self, order_id) -> None:
        self.query_one("#md-merchant-order", MarkdownViewer).document.update(
            order_markdown(self._orders.get(order_id))
        )

    @on(Button.Pressed, "#btn-add-product")
    @work(exclusive=True, group="merchant-write")
    async def handle_add_product(self) -> None:
        user = self.app_state.user
        name = self.query_one("#input-prod-name", Input)
        price = self.query_one("#input-prod-price", Input)
        stock = self.query_one("#input-prod-stock", Input)
        descr = self.query_one("#input-prod-descr", Input).value.strip()
        attraction_id = self.query_one("#select-prod-attr", Select).value
        image_path = self.query_one("#input-prod-image", Input).value.strip()

        for field in (name, price, stock):
            if not field.value.strip() or not field.is_valid:
                field.add_class("-invalid")
                field.focus()
                self.notify("Name, price and stock are required.", severity="error")
                return

        image_url = None
        if image_path:
            try:
                image_url = await self.service.upload_file(image_path)
            except UploadError as e:
                self.notify(e.message, severity="error")
                return

        res = await self.service.create_product(
            NewProduct(
                merchant_id=user.id,
                merchant_name=user.username,
                name=name.value.strip(),
                description=descr,
                price=float(price.value),
                stock=int(stock.value),
                attraction_id=attraction_id if isinstance(attraction_id, str) else None,
                image_url=image_url,
            )
        )
        if not res.success:
            self.notify(res.message, severity="error")
            return

        for field_id in ("#input-prod-name", "#input-prod-price", "#input-prod-stock",
                         "#input-prod-descr", "#input-prod-image"):
            self.query_one(field_id, Input).value = ""
        self.notify(f"Listed {res.data.name}.")
        self.load_dashboard()

    @on(Button.Pressed, "#btn-ship")
    @work(exclusive=True, group="merchant-write")
    async def handle_ship(self) -> None:
        table = self.query_one("#table-merchant-orders", DataTable)
        if table.row_count == 0:
            self.notify("No orders yet.", severity="warning")
            return
        order_id = table.coordinate_to_cell_key(table.cursor_coordinate).row_key.value
        order = self._orders.get(order_id)
        if order and order.status != "pending":
            self.notify(f"Order is already {order.status}.", severity="warning")
            return

        tracking = await self.app.push_screen_wait(
            PromptModal("Tracking number", placeholder="SF1234567890")
        )
        if tracking is None:
            return

        res = await self.service.update_order_status(order_id, "shipped", tracking)
        if res.success:
            self.notify(f"Order {order_id} marked as shipped.")
            self.load_dashboard()
        else:
            self.notify(res.message, severity="error")
