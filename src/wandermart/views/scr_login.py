from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.events import Key
from textual.widgets import Button, Input, Label, Select, TabbedContent, TabPane

from wandermart.db.errors import UploadError
from wandermart.db.models import Registration
from wandermart.utils.messages import UserLoginMessage
from wandermart.views.base_screen import BaseScreen
from wandermart.views.modal_dialog import QuitDialogModal, SimpleDialogModal


class LoginScreen(BaseScreen):
    """
    Dismissed once a user logged in, or when they continue as a guest.
    """

    def __init__(self):
        super().__init__(sub_title="Login", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with TabbedContent(id="super-tab-loginscr"):
            with TabPane("Login", id="tab-login"):
                with Vertical(id="div-login"):
                    yield Label("Email")
                    yield Input(placeholder="user@test.com", id="input-login-email")
                    yield Label("Password")
                    yield Input(placeholder="*********", password=True, id="input-login-pwd")
                    with Horizontal(id="div-login-btns"):
                        yield Button("Quit", id="btn-quit")
                        yield Button("Browse as Guest", id="btn-guest")
                        yield Button("Login", id="btn-login", variant="primary")

            with TabPane("Sign up", id="tab-signup"):
                with Vertical(id="div-reg"):
                    yield Label("Username")
                    yield Input(placeholder="Jane Doe", id="input-reg-name")
                    yield Label("Email")
                    yield Input(placeholder="user@example.com", id="input-reg-email")
                    yield Label("Password")
                    yield Input(placeholder="*********", password=True, id="input-reg-pwd")
                    yield Label("I am a")
                    yield Select(
                        [("Traveler", "traveler"), ("Merchant", "merchant")],
                        value="traveler",
                        allow_blank=False,
                        id="select-reg-role",
                    )
                    yield Label("Business license image (merchants)", id="label-reg-file")
                    yield Input(placeholder="/path/to/license.png", id="input-reg-file")
                    with Container(id="div-reg-btns"):
                        yield Button("Register", id="btn-reg", variant="primary")

    def on_mount(self):
        self.query_one("#input-login-email").focus()
        self._toggle_qualification("traveler")

    def on_key(self, event: Key) -> None:
        if event.key == "enter" and self.focused == self.query_one("#input-login-pwd"):
            self.handle_login_submit()

    @on(Select.Changed, "#select-reg-role")
    def handle_role_changed(self, event: Select.Changed) -> None:
        self._toggle_qualification(event.value)

    def _toggle_qualification(self, role) -> None:
        for widget_id in ("#label-reg-file", "#input-reg-file"):
            self.query_one(widget_id).display = role == "merchant"

    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        email = self.query_one("#input-login-email", Input).value.strip()
        pwd = self.query_one("#input-login-pwd", Input).value

        if not email:
            self.notify("Email cannot be empty!", severity="error")
            return

        res = await self.app_state.login(email, pwd)
        if res.success:
            self.notify(f"Welcome back, {res.data.username}!")
            self.app.post_message(UserLoginMessage())
            self.dismiss(res.data)
        else:
            self.notify(res.message, severity="error")
            field = self.query_one("#input-login-email", Input)
            field.add_class("-invalid")
            field.focus()

    @on(Button.Pressed, "#btn-guest")
    def handle_guest(self) -> None:
        self.dismiss(None)

    @on(Button.Pressed, "#btn-reg")
    @work(exclusive=True)
    async def handle_registration_submit(self) -> None:
        name = self.query_one("#input-reg-name", Input).value.strip()
        email = self.query_one("#input-reg-email", Input).value.strip()
        pwd = self.query_one("#input-reg-pwd", Input).value
        role = self.query_one("#select-reg-role", Select).value
        file_path = self.query_one("#input-reg-file", Input).value.strip()

        if not email or not pwd:
            self.notify("Email and password are required.", severity="error")
            return

        qualification_url = None
        if role == "merchant":
            if not file_path:
                self.notify("Merchants must upload a business license.", severity="error")
                return
            try:
                qualification_url = await self.service.upload_file(file_path)
            except UploadError as e:
                self.notify(e.message, severity="error")
                return

        res = await self.service.register(
            Registration(
                email=email,
                username=name or None,
                role=role,
                qualification_url=qualification_url,
            ),
            pwd,
        )
        if not res.success:
            self.notify(res.message, severity="error")
            return

        if res.data.status == "pending":
            caption = "Registration submitted. An admin will review your merchant account."
        else:
            caption = f"Registration successful. Welcome, {res.data.username}!"
        await self.app.push_screen_wait(SimpleDialogModal(caption))

        self.get_child_by_type(TabbedContent).active = "tab-login"
        self.query_one("#input-login-email", Input).value = email
        self.query_one("#input-login-pwd", Input).value = pwd
        self.query_one("#input-login-pwd", Input).focus()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit_(self) -> None:
        self.app.push_screen(QuitDialogModal())
