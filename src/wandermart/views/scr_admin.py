from typing import Dict, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, TabbedContent, TabPane

from wandermart.db.errors import UploadError
from wandermart.db.models import Attraction, AttractionUpdate, NewAttraction
from wandermart.utils.messages import ContentChangedMessage, ModeSwitchedMessage
from wandermart.utils.pure import join_tags, short_date, split_tags, stars
from wandermart.views.base_screen import BaseScreen
from wandermart.views.modal_attraction_form import AttractionFormModal
from wandermart.views.modal_dialog import ConfirmModal


def _selected_key(table: DataTable) -> Optional[str]:
    if table.row_count == 0:
        return None
    return table.coordinate_to_cell_key(table.cursor_coordinate).row_key.value


class AdminDashboardScreen(BaseScreen):
    """
    Moderation queue, merchant approvals and attraction management.
    """

    def __init__(self) -> None:
        super().__init__()
        self._attractions: Dict[str, Attraction] = {}

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with TabbedContent(id="tabs-admin"):
            with TabPane("Reported Content", id="tab-reports"):
                yield DataTable(id="table-reports")
                with Horizontal():
                    yield Button("Keep (Approve)", id="btn-approve-post", variant="success")
                    yield Button("Delete Post", id="btn-delete-post", variant="error")
            with TabPane("Merchant Approvals", id="tab-merchants"):
                yield DataTable(id="table-merchants")
                with Horizontal():
                    yield Button("Approve", id="btn-approve-merchant", variant="success")
                    yield Button("Reject", id="btn-reject-merchant", variant="error")
            with TabPane("Attractions", id="tab-attractions"):
                yield DataTable(id="table-admin-attractions")
                with Horizontal():
                    yield Button("Add", id="btn-add-attr", variant="primary")
                    yield Button("Edit", id="btn-edit-attr")
                    yield Button("Delete", id="btn-delete-attr", variant="error")

    def on_mount(self) -> None:
        columns = {
            "#table-reports": ("Author", "Attraction", "Rating", "Review", "Date"),
            "#table-merchants": ("Username", "Email", "License"),
            "#table-admin-attractions": ("Title", "Region", "County", "Tags"),
        }
        for table_id, labels in columns.items():
            table = self.query_one(table_id, DataTable)
            table.cursor_type = "row"
            table.zebra_stripes = True
            table.add_columns(*labels)

    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    @on(ContentChangedMessage)
    @work(exclusive=True, group="admin")
    async def load_all(self) -> None:
        service = self.service
        reports = (await service.get_reported_content()).data or []
        merchants = (await service.get_pending_merchants()).data or []
        attractions = (await service.get_attractions()).data or []
        self._attractions = {a.id: a for a in attractions}

        table = self.query_one("#table-reports", DataTable)
        table.clear()
        for p in reports:
            title = self._attractions.get(p.attraction_id)
            table.add_row(
                p.username,
                title.title if title else p.attraction_id,
                stars(p.rating),
                p.content,
                short_date(p.created_at),
                key=p.id,
            )

        table = self.query_one("#table-merchants", DataTable)
        table.clear()
        for u in merchants:
            table.add_row(
                u.username, u.email, "uploaded" if u.qualification_url else "missing", key=u.id
            )

        table = self.query_one("#table-admin-attractions", DataTable)
        table.clear()
        for a in attractions:
            table.add_row(a.title, a.region, a.county or "-", join_tags(a.tags), key=a.id)

    # ---------------------------
    # Moderation
    # ---------------------------

    async def _moderate(self, action: str) -> None:
        post_id = _selected_key(self.query_one("#table-reports", DataTable))
        if not post_id:
            self.notify("Moderation queue is empty.", severity="warning")
            return
        if action == "delete" and not await self.app.push_screen_wait(
            ConfirmModal("Delete this post permanently?", tone="error")
        ):
            return
        res = await self.service.moderate_content(post_id, action)
        if res.success:
            self.notify("Post deleted." if action == "delete" else "Post restored.")
            self.load_all()
        else:
            self.notify(res.message, severity="error")

    @on(Button.Pressed, "#btn-approve-post")
    @work(exclusive=True, group="admin-write")
    async def handle_approve_post(self) -> None:
        await self._moderate("approve")

    @on(Button.Pressed, "#btn-delete-post")
    @work(exclusive=True, group="admin-write")
    async def handle_delete_post(self) -> None:
        await self._moderate("delete")

    # ---------------------------
    # Merchants
    # ---------------------------

    async def _set_merchant_status(self, status: str) -> None:
        user_id = _selected_key(self.query_one("#table-merchants", DataTable))
        if not user_id:
            self.notify("No merchants waiting for approval.", severity="warning")
            return
        res = await self.service.update_user_status(user_id, status)
        if res.success:
            self.notify(f"Merchant {'approved' if status == 'active' else 'rejected'}.")
            self.load_all()
        else:
            self.notify(res.message, severity="error")

    @on(Button.Pressed, "#btn-approve-merchant")
    @work(exclusive=True, group="admin-write")
    async def handle_approve_merchant(self) -> None:
        await self._set_merchant_status("active")

    @on(Button.Pressed, "#btn-reject-merchant")
    @work(exclusive=True, group="admin-write")
    async def handle_reject_merchant(self) -> None:
        await self._set_merchant_status("rejected")

    # ---------------------------
    # Attractions
    # ---------------------------

    async def _cover_image(self, values: Dict[str, str]) -> Optional[str]:
        if not values["image_path"]:
            return None
        return await self.service.upload_file(values["image_path"])

    @on(Button.Pressed, "#btn-add-attr")
    @work(exclusive=True, group="admin-write")
    async def handle_add_attraction(self) -> None:
        values = await self.app.push_screen_wait(AttractionFormModal())
        if values is None:
            return
        try:
            image_url = await self._cover_image(values)
        except UploadError as e:
            self.notify(e.message, severity="error")
            return
        res = await self.service.create_attraction(
            NewAttraction(
                title=values["title"],
                description=values["description"],
                address=values["address"],
                province=values["province"],
                city=values["city"],
                county=values["county"],
                tags=split_tags(values["tags"]),
                image_url=image_url,
                open_hours=values["open_hours"] or None,
                driving_tips=values["driving_tips"] or None,
            )
        )
        self._after_write(res, "Attraction created.")

    @on(Button.Pressed, "#btn-edit-attr")
    @work(exclusive=True, group="admin-write")
    async def handle_edit_attraction(self) -> None:
        attraction = self._attractions.get(
            _selected_key(self.query_one("#table-admin-attractions", DataTable))
        )
        if not attraction:
            self.notify("Select an attraction first.", severity="warning")
            return
        values = await self.app.push_screen_wait(AttractionFormModal(attraction))
        if values is None:
            return
        try:
            image_url = await self._cover_image(values)
        except UploadError as e:
            self.notify(e.message, severity="error")
            return
        res = await self.service.update_attraction(
            attraction.id,
            AttractionUpdate(
                title=values["title"],
                description=values["description"],
                address=values["address"],
                province=values["province"],
                city=values["city"],
                county=values["county"],
                tags=split_tags(values["tags"]),
                image_url=image_url,
                open_hours=values["open_hours"] or None,
                driving_tips=values["driving_tips"] or None,
            ),
        )
        self._after_write(res, "Attraction updated.")

    @on(Button.Pressed, "#btn-delete-attr")
    @work(exclusive=True, group="admin-write")
    async def handle_delete_attraction(self) -> None:
        attraction_id = _selected_key(self.query_one("#table-admin-attractions", DataTable))
        if not attraction_id:
            self.notify("Select an attraction first.", severity="warning")
            return
        if not await self.app.push_screen_wait(
            ConfirmModal(
                "Delete this attraction? Its reviews and products stay as they are.",
                tone="error",
            )
        ):
            return
        res = await self.service.delete_attraction(attraction_id)
        self._after_write(res, "Attraction deleted.")

    def _after_write(self, res, success_text: str) -> None:
        if res.success:
            self.notify(success_text)
            self.post_message(ContentChangedMessage())
        else:
            self.notify(res.message, severity="error")
