from typing import Dict, Optional

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from wandermart.db.models import Role
from wandermart.db.service import MarketService, build_service
from wandermart.utils.logger import get_logger
from wandermart.utils.messages import ModeSwitchedMessage, QuitRequestedMessage, UserLogoutMessage
from wandermart.utils.state import AppState
from wandermart.views.scr_admin import AdminDashboardScreen
from wandermart.views.scr_cart import CartScreen
from wandermart.views.scr_explore import ExploreScreen
from wandermart.views.scr_login import LoginScreen
from wandermart.views.scr_marketplace import MarketplaceScreen
from wandermart.views.scr_merchant import MerchantDashboardScreen
from wandermart.views.scr_orders import OrdersScreen

_logger = get_logger(__name__)


class WanderMartApp(App):
    TITLE = "WanderMart"

    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "explore": ExploreScreen,
        "marketplace": MarketplaceScreen,
        "cart": CartScreen,
        "orders": OrdersScreen,
        "merchant": MerchantDashboardScreen,
        "admin": AdminDashboardScreen,
    }

    MODE_TITLES = {
        "explore": "Explore",
        "marketplace": "Marketplace",
        "cart": "Cart",
        "orders": "My Orders",
        "merchant": "Store Dashboard",
        "admin": "Admin Panel",
    }

    # guests and travelers get the shopping screens
    ROLE_MODES: Dict[str, tuple] = {
        "guest": ("explore", "marketplace", "cart"),
        "traveler": ("explore", "marketplace", "cart", "orders"),
        "merchant": ("explore", "marketplace", "merchant"),
        "admin": ("explore", "marketplace", "admin"),
    }

    HOME_MODES = {"merchant": "merchant", "admin": "admin"}

    CSS_PATH = "styles/wandermart.tcss"

    state: AppState

    def __init__(self, service: Optional[MarketService] = None):
        super().__init__()
        self.state = AppState(service or build_service())

    def modes_for(self, role: Role) -> Dict[str, str]:
        return {mode: self.MODE_TITLES[mode] for mode in self.ROLE_MODES[role]}

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        if self.state.user:
            _logger.info(f"User {self.state.user.id} logged out")
        self.state.logout()
        self.notify("Logged out.")
        self.main_flow()

    @on(QuitRequestedMessage)
    def handle_quit(self):
        self.exit()

    @work
    async def main_flow(self):
        await self.push_screen_wait(LoginScreen())
        home = self.HOME_MODES.get(self.state.role, "explore")
        self.post_message(ModeSwitchedMessage(self.current_mode, home))
        await self.switch_mode(home)


def main() -> None:
    WanderMartApp().run()


if __name__ == "__main__":
    main()
