from typing import Optional

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label, Markdown

from wandermart.db.models import Product
from wandermart.utils.messages import CartChangedMessage
from wandermart.utils.pure import format_price, generate_markdown_table


class ProdDetailModal(ModalScreen[bool]):
    """
    Product detail plus quantity picker.
    Returns True if the cart changed, False if not.
    """

    order_qty = reactive(1)

    def __init__(self, product_id: str) -> None:
        super().__init__()
        self._product_id = product_id
        self._prod: Optional[Product] = None

    def compose(self) -> ComposeResult:
        with Horizontal(id="hort-prod-detail"):
            yield Markdown("Loading...", id="md-product")
            with Vertical(id="div-order"):
                yield Label("Quantity")
                with Horizontal():
                    yield Button("-", id="btn-sub-qty")
                    yield Input(value="1", id="input-order-qty", type="integer")
                    yield Button("+", id="btn-add-qty")
                with Horizontal():
                    yield Button("Go Back", id="btn-quit")
                    yield Button("Add to Cart", id="btn-addcart", variant="primary")

    async def on_mount(self):
        self.load_product()

    @work(exclusive=True)
    async def load_product(self) -> None:
        res = await self.app.state.service.get_product_by_id(self._product_id)
        if not res.success:
            await self.query_one(Markdown).update(f"**{res.message}**")
            self.query_one("#div-order").display = False
            return
        self._prod = prod = res.data

        rows = [
            ["Price", format_price(prod.price)],
            ["In Stock", prod.stock],
            ["Sold by", prod.merchant_name],
            ["Near", prod.attraction_name or "-"],
        ]
        await self.query_one(Markdown).update(
            f"### {prod.name}\n\n{prod.description}\n\n"
            + generate_markdown_table(["", ""], rows, ["l", "l"])
        )

        can_shop = self.app.state.can_shop
        if prod.stock < 1 or not can_shop:
            order_btn = self.query_one("#btn-addcart", Button)
            order_btn.label = "Out of Stock" if can_shop else "Shoppers only"
            order_btn.disabled = True
            order_btn.variant = "warning"

        self.query_one("#input-order-qty", Input).validators = [
            Number(minimum=1, maximum=max(prod.stock, 1))
        ]
        self._sync_buttons()
        self.query_one("#input-order-qty").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    def on_input_changed(self, message: Input.Changed) -> None:
        if (
            message.input.id == "input-order-qty"
            and message.value
            and message.input.is_valid
            and self.focused == message.input
        ):
            self.order_qty = int(message.value)

    def watch_order_qty(self, qty: int) -> None:
        self._sync_buttons()
        field = self.query_one("#input-order-qty", Input)
        if field.value != str(qty):
            field.value = str(qty)

    def _sync_buttons(self) -> None:
        stock = self._prod.stock if self._prod else 1
        self.query_one("#btn-sub-qty", Button).disabled = self.order_qty <= 1
        self.query_one("#btn-add-qty", Button).disabled = self.order_qty >= stock

    @on(Button.Pressed, "#btn-add-qty")
    def handle_add_qty(self):
        self.order_qty += 1

    @on(Button.Pressed, "#btn-sub-qty")
    def handle_sub_qty(self):
        self.order_qty -= 1

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)

    @on(Button.Pressed, "#btn-addcart")
    def handle_addcart(self):
        self.app.state.add_to_cart(self._prod, self.order_qty)
        self.app.notify(f"Added {self.order_qty} x {self._prod.name} to cart.")
        self.app.post_message(CartChangedMessage())
        self.dismiss(True)
