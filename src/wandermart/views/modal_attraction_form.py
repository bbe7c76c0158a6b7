from typing import Dict, Optional

from textual import events, on
from textual.app import ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label

from wandermart.db.models import Attraction
from wandermart.utils.pure import join_tags

FIELDS = {
    "title": "Title",
    "description": "Description",
    "address": "Address",
    "province": "Province",
    "city": "City",
    "county": "County",
    "tags": "Tags (comma separated)",
    "open_hours": "Opening hours",
    "driving_tips": "Driving tips",
    "image_path": "Cover image path (optional)",
}
REQUIRED = ("title", "description", "address", "province", "city", "county")


class AttractionFormModal(ModalScreen[Optional[Dict[str, str]]]):
    """
    Create/edit form. Dismisses with the raw field values (stripped), or None.
    """

    def __init__(self, attraction: Optional[Attraction] = None) -> None:
        super().__init__()
        self._attraction = attraction

    def compose(self) -> ComposeResult:
        title = "Edit Attraction" if self._attraction else "New Attraction"
        with VerticalScroll(id="div-attraction-form"):
            yield Label(title, classes="section-title")
            for name, caption in FIELDS.items():
                yield Label(caption)
                yield Input(value=self._initial(name), id=f"input-attr-{name}")
            with Horizontal():
                yield Button("Cancel", id="btn-quit")
                yield Button("Save", id="btn-save", variant="primary")

    def _initial(self, name: str) -> str:
        a = self._attraction
        if a is None or name == "image_path":
            return ""
        if name == "tags":
            return join_tags(a.tags)
        return getattr(a, name) or ""

    def on_mount(self) -> None:
        self.query_one("#input-attr-title").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(None)

    @on(Button.Pressed, "#btn-save")
    def handle_save(self) -> None:
        values = {
            name: self.query_one(f"#input-attr-{name}", Input).value.strip()
            for name in FIELDS
        }
        for name in REQUIRED:
            if not values[name]:
                field = self.query_one(f"#input-attr-{name}", Input)
                field.add_class("-invalid")
                field.focus()
                self.notify(f"{FIELDS[name]} is required.", severity="error")
                return
        self.dismiss(values)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self) -> None:
        self.dismiss(None)
