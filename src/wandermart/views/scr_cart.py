from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Label, Rule

from wandermart.utils.messages import CartChangedMessage, ModeSwitchedMessage
from wandermart.utils.pure import format_price
from wandermart.views.base_screen import BaseScreen
from wandermart.views.modal_checkout import CheckoutModal
from wandermart.views.modal_dialog import DialogModal


class CartScreen(BaseScreen):
    """
    Cart contents held in AppState; nothing is stored until checkout.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield DataTable(id="table-cart")
        yield Label("Total Cart Value: $0.00", id="label-cart-total")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button("Remove Item", id="btn-remove-item")
            yield Button("Clear Cart", id="btn-clear-cart")
            yield Button("Checkout", id="btn-checkout", variant="primary")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Product", "Merchant", "Unit Price", "Qty", "Line Total")

    @on(CartChangedMessage)
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    def handle_cart_change(self) -> None:
        cart = self.app_state.cart
        table = self.query_one(DataTable)
        table.clear()
        for item in cart:
            table.add_row(
                item.name,
                item.merchant_name,
                format_price(item.price),
                item.quantity,
                format_price(item.line_total),
                key=item.id,
            )
        self.query_one("#label-cart-total", Label).update(
            f"Total Cart Value: {format_price(self.app_state.cart_total)}"
        )
        self.query_one(DataTable).set_class(not cart, "no-items")

    @on(Button.Pressed, "#btn-remove-item")
    @work()
    async def handle_remove_item(self) -> None:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            self.notify("Cart is empty.", severity="warning")
            return
        product_id = table.coordinate_to_cell_key(table.cursor_coordinate).row_key.value
        if await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove this item from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            self.app_state.remove_from_cart(product_id)
            self.post_message(CartChangedMessage())
            self.notify("Item removed from cart.")

    @on(Button.Pressed, "#btn-clear-cart")
    @work()
    async def handle_clear_cart(self) -> None:
        if not self.app_state.cart:
            self.notify("Cart is empty.", severity="warning")
            return
        if await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove all items from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="error",
            )
        ):
            self.app_state.clear_cart()
            self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-checkout")
    @work()
    async def handle_checkout(self) -> None:
        if not self.app_state.cart:
            self.notify("Cart is empty.", severity="warning")
            return
        if self.app_state.user is None:
            self.notify("Please log in to check out.", severity="warning")
            return
        await self.app.push_screen_wait(CheckoutModal())
        self.handle_cart_change()
