from typing import List

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.events import ScreenResume
from textual.suggester import SuggestFromList
from textual.widgets import Button, DataTable, Input, Label

from wandermart.db import queries
from wandermart.db.models import Attraction
from wandermart.db.queries import AttractionFilters
from wandermart.utils.messages import ContentChangedMessage, ModeSwitchedMessage
from wandermart.utils.pure import join_tags
from wandermart.views.base_screen import BaseScreen
from wandermart.views.modal_attraction import AttractionDetailModal


class ExploreScreen(BaseScreen):
    """
    Attraction search. Every filter box narrows the list (AND); the keyword
    box matches title or description.
    """

    BINDINGS = [
        Binding("enter", "noop", "View Attraction", show=True, key_display="⏎"),
    ]

    FILTER_INPUTS = {
        "query": "Keyword",
        "province": "Province",
        "city": "City",
        "county": "County",
        "tag": "Tag",
    }

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-filters"):
            for name, placeholder in self.FILTER_INPUTS.items():
                yield Input(placeholder=placeholder, id=f"input-filter-{name}")
            yield Button("Clear", id="btn-clear-filters")
        yield DataTable(id="table-attractions")
        yield Label("", id="label-result-cnt")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Title", "Region", "County", "Tags", "Hours")
        self.query_one("#input-filter-query").focus()

    def _filters(self) -> AttractionFilters:
        values = {
            name: self.query_one(f"#input-filter-{name}", Input).value.strip() or None
            for name in self.FILTER_INPUTS
        }
        return AttractionFilters(**values)

    @on(Input.Changed)
    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    @on(ContentChangedMessage)
    def handle_filters_changed(self) -> None:
        self.load_attractions(self._filters())

    @on(Button.Pressed, "#btn-clear-filters")
    def handle_clear_filters(self) -> None:
        with self.prevent(Input.Changed):
            for name in self.FILTER_INPUTS:
                self.query_one(f"#input-filter-{name}", Input).value = ""
        self.load_attractions(AttractionFilters())

    @on(ScreenResume)
    @on(ContentChangedMessage)
    @work(exclusive=True, group="suggestions")
    async def load_suggestions(self) -> None:
        attractions = (await self.service.get_attractions()).data or []
        self.query_one("#input-filter-province", Input).suggester = SuggestFromList(
            queries.province_options(attractions)
        )
        self.query_one("#input-filter-tag", Input).suggester = SuggestFromList(
            queries.tag_options(attractions), case_sensitive=False
        )

    @work(exclusive=True, group="attractions")
    async def load_attractions(self, filters: AttractionFilters) -> None:
        res = await self.service.get_attractions(filters)
        attractions: List[Attraction] = res.data or []

        table = self.query_one(DataTable)
        table.clear()
        for a in attractions:
            table.add_row(
                a.title, a.region, a.county or "-", join_tags(a.tags), a.open_hours or "-",
                key=a.id,
            )
        self.query_one("#label-result-cnt", Label).update(
            f"{len(attractions)} attraction(s) found"
        )

    @on(DataTable.RowSelected, "#table-attractions")
    @work()
    async def handle_row_selected(self, event: DataTable.RowSelected) -> None:
        await self.app.push_screen_wait(AttractionDetailModal(event.row_key.value))
