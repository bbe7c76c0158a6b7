from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional

from wandermart.db.models import ApiResponse, CartItem, Product, Role, User
from wandermart.db.service import MarketService


@dataclass
class AppState:
    """
    Application state shared by screens, passed by reference.

    Fields:
      - service: the market service every screen talks to
      - user: logged-in user (carries the session token), None for guests
      - cart: products the traveler is about to check out, as snapshots
    """

    service: MarketService
    user: Optional[User] = None
    cart: List[CartItem] = field(default_factory=list)

    @property
    def role(self) -> Role:
        return self.user.role if self.user else "guest"

    @property
    def can_shop(self) -> bool:
        """Guests and travelers see shopping features."""
        return self.role in ("guest", "traveler")

    async def login(self, email: str, password: str) -> ApiResponse[User]:
        res = await self.service.login(email, password)
        if res.success:
            self.user = res.data
        return res

    def logout(self) -> None:
        self.user = None
        self.cart = []

    # ---------------------------
    # Cart
    # ---------------------------

    def add_to_cart(self, product: Product, quantity: int = 1) -> None:
        """Add a product; if it is already in the cart bump its quantity."""
        for i, item in enumerate(self.cart):
            if item.id == product.id:
                self.cart[i] = replace(item, quantity=item.quantity + quantity)
                return
        self.cart.append(CartItem.of(product, quantity))

    def remove_from_cart(self, product_id: str) -> None:
        self.cart = [item for item in self.cart if item.id != product_id]

    def clear_cart(self) -> None:
        self.cart = []

    @property
    def cart_count(self) -> int:
        return sum(item.quantity for item in self.cart)

    @property
    def cart_total(self) -> float:
        return round(sum(item.line_total for item in self.cart), 2)
