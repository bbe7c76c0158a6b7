from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.events import ScreenResume
from textual.widgets import DataTable, Input

from wandermart.utils.messages import ModeSwitchedMessage, NewOrderMessage
from wandermart.utils.pure import format_price
from wandermart.views.base_screen import BaseScreen
from wandermart.views.modal_product import ProdDetailModal


class MarketplaceScreen(BaseScreen):
    """
    Every listed product. The search box narrows by product name,
    attraction or merchant on the rows already loaded.
    """

    BINDINGS = [
        Binding("enter", "noop", "View Product", show=True, key_display="⏎"),
    ]

    def __init__(self):
        super().__init__()
        self._products = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Input(id="input-search", placeholder="Filter products...")
        yield DataTable(id="table-products")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Product", "Near", "Merchant", "Price", "Stock")

    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    @on(NewOrderMessage)
    @work(exclusive=True)
    async def load_products(self) -> None:
        res = await self.service.get_products()
        self._products = res.data or []
        self._render(self.query_one("#input-search", Input).value)

    @on(Input.Changed, "#input-search")
    def handle_search(self, message: Input.Changed) -> None:
        self._render(message.value)

    def _render(self, needle: str) -> None:
        needle = needle.strip().lower()
        table = self.query_one(DataTable)
        table.clear()
        for p in self._products:
            haystack = f"{p.name} {p.attraction_name or ''} {p.merchant_name}".lower()
            if needle and needle not in haystack:
                continue
            table.add_row(
                p.name,
                p.attraction_name or "-",
                p.merchant_name,
                format_price(p.price),
                p.stock,
                key=p.id,
            )

    @on(DataTable.RowSelected, "#table-products")
    @work()
    async def handle_row_selected(self, event: DataTable.RowSelected) -> None:
        await self.app.push_screen_wait(ProdDetailModal(event.row_key.value))
