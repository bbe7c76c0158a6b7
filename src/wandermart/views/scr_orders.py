from typing import Dict, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, MarkdownViewer

from wandermart.db.models import Order
from wandermart.utils.messages import ModeSwitchedMessage, NewOrderMessage
from wandermart.utils.pure import format_price, generate_markdown_table, short_date
from wandermart.views.base_screen import BaseScreen


def order_markdown(order: Optional[Order]) -> str:
    if order is None:
        return "### Select an order to view its details."
    header = (
        f"### Order {order.id}\n"
        f"Placed: {short_date(order.created_at)}  \n"
        f"Status: **{order.status}**  \n"
        f"Tracking: {order.tracking_number or '-'}\n\n"
    )
    rows = [
        [item.name, item.merchant_name, item.quantity, format_price(item.price),
         format_price(item.line_total)]
        for item in order.items
    ]
    table = generate_markdown_table(
        ["Product", "Merchant", "Qty", "Unit Price", "Line Total"],
        rows,
        ["l", "l", "r", "r", "r"],
    )
    return header + table + f"\n\n**Grand Total:** {format_price(order.total)}"


class OrdersScreen(BaseScreen):
    """
    A traveler's orders, newest first, with the highlighted one shown in full.
    """

    BINDINGS = [
        Binding("enter", "noop", "View Order Detail", show=True, key_display="⏎"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._orders: Dict[str, Order] = {}

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
            yield DataTable(id="table-orders")
        with Horizontal(id="hort-table-control"):
            yield Button("Refresh", id="btn-refresh")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Order", "Date", "Items", "Total", "Status", "Tracking")

    @on(Button.Pressed, "#btn-refresh")
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @on(NewOrderMessage)
    @work(exclusive=True, group="orders")
    async def load_orders(self) -> None:
        user = self.app_state.user
        orders = []
        if user:
            orders = (await self.service.get_orders(user_id=user.id)).data or []
        self._orders = {o.id: o for o in orders}

        table = self.query_one(DataTable)
        table.clear()
        for o in orders:
            table.add_row(
                o.id,
                short_date(o.created_at),
                sum(i.quantity for i in o.items),
                format_price(o.total),
                o.status,
                o.tracking_number or "-",
                key=o.id,
            )
        self._render_detail(orders[0] if orders else None)

    @on(DataTable.RowHighlighted, "#table-orders")
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        self._render_detail(self._orders.get(event.row_key.value))

    def _render_detail(self, order: Optional[Order]) -> None:
        self.query_one("#md-order-detail", MarkdownViewer).document.update(
            order_markdown(order)
        )
