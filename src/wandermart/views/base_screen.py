from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import Resize, ScreenResume
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from wandermart.db.service import MarketService
from wandermart.utils.messages import ModeSwitchedMessage, UserLoginMessage, UserLogoutMessage
from wandermart.utils.pure import generate_markdown_table
from wandermart.utils.state import AppState
from wandermart.views.modal_dialog import ConfirmModal, QuitDialogModal
from wandermart.views.modal_resize import ResizeScreenPromptModal

MIN_WIDTH = 80
MIN_HEIGHT = 24


class Sidebar(Container):
    def compose(self) -> ComposeResult:
        yield Label("Account", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Button("Log out", id="btn-logout", variant="error")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    async def refresh_info(self) -> None:
        state: AppState = self.app.state
        user = state.user
        if user:
            rows = [["Name", user.username], ["Email", user.email], ["Role", user.role]]
            if user.status != "active":
                rows.append(["Status", user.status])
        else:
            rows = [["Role", "guest"]]
        rows.append(["Cart", f"{state.cart_count} item(s)"])
        await self.query_one(Markdown).update(
            generate_markdown_table(["", ""], rows, ["l", "l"])
        )
        self.query_one("#btn-logout", Button).label = "Log out" if user else "Log in"

        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [
                ListItem(Label(title), id="list-menu-item-" + mode)
                for mode, title in self.app.modes_for(state.role).items()
            ]
        )
        self.highlight_item(self.app.current_mode)

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        if self.app.current_mode != selected_mode:
            self.app.post_message(ModeSwitchedMessage(self.app.current_mode, selected_mode))
            await self.app.switch_mode(selected_mode)

    @on(Button.Pressed, "#btn-logout")
    @work()
    async def handle_logout(self):
        if self.app.state.user and not await self.app.push_screen_wait(
            ConfirmModal("Are you sure you want to log out?")
        ):
            return
        self.post_message(UserLogoutMessage())

    def highlight_item(self, mode: str):
        list_menu = self.query_one("#list-menu", ListView)
        for i, item in enumerate(list_menu.children):
            if item.id == "list-menu-item-" + mode:
                list_menu.index = i
                return


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=True),
    ]

    def __init__(self, sub_title: str = "", show_sidebar: bool = True):
        super().__init__()
        self.sub_title = sub_title or self.app.MODE_TITLES.get(self._mode_name(), "")
        self._show_sidebar = show_sidebar

    def _mode_name(self) -> str:
        for mode, screen_type in self.app.MODES.items():
            if isinstance(self, screen_type):
                return mode
        return ""

    @property
    def app_state(self) -> AppState:
        return self.app.state

    @property
    def service(self) -> MarketService:
        return self.app.state.service

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    async def on_resize(self, event: Resize) -> None:
        if event.size.width < MIN_WIDTH or event.size.height < MIN_HEIGHT:
            if not isinstance(self.app.screen, ResizeScreenPromptModal):
                self.app.push_screen(ResizeScreenPromptModal(MIN_WIDTH, MIN_HEIGHT))

    @on(UserLoginMessage)
    @on(ScreenResume)
    @work(exclusive=True, group="sidebar")
    async def _refresh_sidebar(self) -> None:
        for sidebar in self.query(Sidebar):
            await sidebar.refresh_info()

    def action_noop(self) -> None:
        """footer hints only"""

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
