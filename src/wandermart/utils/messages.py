from textual.message import Message


class QuitRequestedMessage(Message):
    """
    posted by the quit dialog; the app exits
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    posted by the sidebar logout button; the app drops user and cart
    """

    bubble = True


class UserLoginMessage(Message):
    """
    Fired after login, screens refresh their sidebar and role-specific menus
    """

    bubble = True


class CartChangedMessage(Message):
    """
    Fired whenever a product is added to or removed from the cart.
    Post it at App level if sent from outside the cart screen.
    """

    bubble = True


class NewOrderMessage(Message):
    """
    Fired after checkout. Listened to by the orders and merchant screens.
    """

    bubble = True


class ContentChangedMessage(Message):
    """
    Fired when a review is written, reported or moderated, or an attraction edited.
    """

    bubble = True


class ModeSwitchedMessage(Message):
    """
    posted right before switch_mode so the target screen can reload
    post it at app level
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
