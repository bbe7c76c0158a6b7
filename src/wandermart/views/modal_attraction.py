from typing import List, Optional

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.validation import Integer
from textual.widgets import Button, DataTable, Input, Label, Markdown, TextArea

from wandermart.db.errors import UploadError
from wandermart.db.models import Attraction, NewPost, Post, Product
from wandermart.utils.messages import CartChangedMessage, ContentChangedMessage
from wandermart.utils.pure import (
    format_price,
    generate_markdown_table,
    join_tags,
    short_date,
    stars,
)
from wandermart.utils.state import AppState
from wandermart.views.modal_dialog import ConfirmModal


def attraction_markdown(a: Attraction) -> str:
    rows = [
        ["Address", a.address],
        ["Region", a.region],
        ["County", a.county or "-"],
        ["Tags", join_tags(a.tags)],
        ["Opening Hours", a.open_hours or "-"],
        ["Getting There", a.driving_tips or "-"],
        ["Photos", 1 + len(a.gallery)],
    ]
    return (
        f"### {a.title}\n\n{a.description}\n\n"
        + generate_markdown_table(["", ""], rows, ["l", "l"])
    )


class AttractionDetailModal(ModalScreen[bool]):
    """
    Attraction info, its active reviews and the products sold around it.
    Travelers can write and report reviews; shoppers can add products to the cart.
    """

    def __init__(self, attraction_id: str) -> None:
        super().__init__()
        self._attraction_id = attraction_id
        self._attraction: Optional[Attraction] = None
        self._products: List[Product] = []

    @property
    def app_state(self) -> AppState:
        return self.app.state

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="div-attraction"):
            yield Markdown("Loading...", id="md-attraction")
            yield Label("Reviews", classes="section-title")
            yield DataTable(id="table-posts")
            yield Label("Local Products", classes="section-title")
            yield DataTable(id="table-products")
            with Vertical(id="div-new-post"):
                yield Label("Write a review", classes="section-title")
                yield TextArea(id="textarea-post")
                with Horizontal():
                    yield Input(
                        "5",
                        placeholder="Rating 1-5",
                        id="input-post-rating",
                        type="integer",
                        validators=[Integer(minimum=1, maximum=5)],
                    )
                    yield Input(placeholder="Photo path (optional)", id="input-post-image")
            with Horizontal(id="hort-buttons"):
                yield Button("Close", id="btn-quit")
                yield Button("Report Review", id="btn-report", variant="warning")
                yield Button("Add to Cart", id="btn-addcart", variant="success")
                yield Button("Post Review", id="btn-post", variant="primary")

    async def on_mount(self) -> None:
        posts = self.query_one("#table-posts", DataTable)
        posts.cursor_type = "row"
        posts.add_columns("Author", "Rating", "Review", "Date")
        products = self.query_one("#table-products", DataTable)
        products.cursor_type = "row"
        products.add_columns("Product", "Merchant", "Price", "Stock")

        is_traveler = self.app_state.role == "traveler"
        self.query_one("#div-new-post").display = is_traveler
        self.query_one("#btn-post").display = is_traveler
        self.query_one("#btn-report").display = self.app_state.user is not None
        self.query_one("#btn-addcart").display = self.app_state.can_shop

        self.load_detail()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    @work(exclusive=True)
    async def load_detail(self) -> None:
        service = self.app_state.service
        res = await service.get_attraction_by_id(self._attraction_id)
        if not res.success:
            await self.query_one("#md-attraction", Markdown).update(f"**{res.message}**")
            return
        self._attraction = res.data
        await self.query_one("#md-attraction", Markdown).update(
            attraction_markdown(res.data)
        )
        self._render_posts((await service.get_posts(self._attraction_id)).data or [])
        self._products = (
            await service.get_products(attraction_id=self._attraction_id)
        ).data or []
        self._render_products(self._products)

    def _render_posts(self, posts: List[Post]) -> None:
        table = self.query_one("#table-posts", DataTable)
        table.clear()
        for p in posts:
            table.add_row(
                p.username, stars(p.rating), p.content, short_date(p.created_at), key=p.id
            )

    def _render_products(self, products: List[Product]) -> None:
        table = self.query_one("#table-products", DataTable)
        table.clear()
        for p in products:
            table.add_row(
                p.name, p.merchant_name, format_price(p.price), p.stock, key=p.id
            )

    @staticmethod
    def _selected_key(table: DataTable) -> Optional[str]:
        if table.row_count == 0:
            return None
        return table.coordinate_to_cell_key(table.cursor_coordinate).row_key.value

    @on(Button.Pressed, "#btn-post")
    @work(exclusive=True, group="post")
    async def handle_post(self) -> None:
        user = self.app_state.user
        content = self.query_one("#textarea-post", TextArea).text.strip()
        rating_input = self.query_one("#input-post-rating", Input)
        image_path = self.query_one("#input-post-image", Input).value.strip()

        if not content:
            self.notify("Write something first.", severity="error")
            return
        if not rating_input.is_valid:
            rating_input.add_class("-invalid")
            self.notify("Rating must be between 1 and 5.", severity="error")
            return

        image_url = None
        if image_path:
            try:
                image_url = await self.app_state.service.upload_file(image_path)
            except UploadError as e:
                self.notify(e.message, severity="error")
                return

        res = await self.app_state.service.create_post(
            NewPost(
                attraction_id=self._attraction_id,
                user_id=user.id,
                username=user.username,
                content=content,
                rating=int(rating_input.value),
                image_url=image_url,
            )
        )
        if not res.success:
            self.notify(res.message, severity="error")
            return

        self.query_one("#textarea-post", TextArea).text = ""
        self.query_one("#input-post-image", Input).value = ""
        self.notify("Review posted.")
        self.app.post_message(ContentChangedMessage())
        self.load_detail()

    @on(Button.Pressed, "#btn-report")
    @work(exclusive=True, group="post")
    async def handle_report(self) -> None:
        post_id = self._selected_key(self.query_one("#table-posts", DataTable))
        if not post_id:
            self.notify("Select a review to report.", severity="warning")
            return
        if not await self.app.push_screen_wait(
            ConfirmModal("Report this review to the moderators?")
        ):
            return

        res = await self.app_state.service.report_post(post_id)
        if res.success:
            self.notify("Review reported. It is hidden until an admin looks at it.")
            self.app.post_message(ContentChangedMessage())
            self.load_detail()
        else:
            self.notify(res.message, severity="error")

    @on(Button.Pressed, "#btn-addcart")
    def handle_addcart(self) -> None:
        product_id = self._selected_key(self.query_one("#table-products", DataTable))
        product = next((p for p in self._products if p.id == product_id), None)
        if not product:
            self.notify("Select a product first.", severity="warning")
            return
        if product.stock < 1:
            self.notify("Out of stock.", severity="warning")
            return
        self.app_state.add_to_cart(product)
        self.app.post_message(CartChangedMessage())
        self.notify(f"Added {product.name} to cart.")

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self) -> None:
        self.dismiss(False)
