from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, MarkdownViewer

from wandermart.db.models import NewOrder
from wandermart.utils.messages import CartChangedMessage, NewOrderMessage
from wandermart.utils.pure import format_price, generate_markdown_table
from wandermart.views.modal_dialog import DialogModal


class CheckoutModal(ModalScreen[bool]):
    """
    Order summary for the current cart. Places the order with the cart
    snapshot and the total computed here. Returns True once placed.
    """

    def compose(self) -> ComposeResult:
        with Vertical():
            yield MarkdownViewer("", show_table_of_contents=False)
            with Horizontal():
                yield Button("Go Back", id="btn-quit")
                yield Button("Place Order", id="btn-submit", variant="primary")

    async def on_mount(self):
        state = self.app.state
        rows = [
            [item.name, item.merchant_name, format_price(item.price), item.quantity,
             format_price(item.line_total)]
            for item in state.cart
        ]
        md = generate_markdown_table(
            ["Product", "Merchant", "Unit Price", "Qty", "Line Total"],
            rows,
            ["l", "l", "r", "c", "r"],
        )
        md += f"\n\n**Total:** {format_price(state.cart_total)}"
        await self.query_one(MarkdownViewer).document.update("### Order Summary\n\n" + md)
        self.query_one("#btn-submit").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        state = self.app.state
        if not await self.app.push_screen_wait(
            DialogModal(
                "Place order? This cannot be undone.",
                primary_text="Yes",
                secondary_text="No",
                tone="positive",
            )
        ):
            return

        res = await state.service.create_order(
            NewOrder(user_id=state.user.id, items=list(state.cart), total=state.cart_total)
        )
        if not res.success:
            self.notify(res.message, severity="error")
            return

        state.clear_cart()
        self.app.post_message(CartChangedMessage())
        self.app.post_message(NewOrderMessage())
        self.notify(f"Order placed. Your order number is {res.data.id}.")
        self.dismiss(True)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)
