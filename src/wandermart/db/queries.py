# in-memory filters over full slices; no I/O in here
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, TypeVar

from wandermart.db.models import Attraction, Order, Post, Product, User

T = TypeVar("T")


@dataclass(frozen=True)
class AttractionFilters:
    """
    Fields combine with AND semantics:
      - province/city/county: exact match
      - tag: the attraction's tag list contains it
      - query: case-insensitive substring of title OR description
    Empty strings count as "not given".
    """

    province: Optional[str] = None
    city: Optional[str] = None
    county: Optional[str] = None
    tag: Optional[str] = None
    query: Optional[str] = None


def by_id(items: Iterable[T], entity_id: str) -> Optional[T]:
    return next((item for item in items if item.id == entity_id), None)


def index_of(items: List[T], entity_id: str) -> int:
    """Position of the entity in the slice, or -1."""
    for i, item in enumerate(items):
        if item.id == entity_id:
            return i
    return -1


def find_user_by_email(users: Iterable[User], email: str) -> Optional[User]:
    needle = (email or "").strip().lower()
    return next((u for u in users if u.email.lower() == needle), None)


def pending_merchants(users: Iterable[User]) -> List[User]:
    return [u for u in users if u.role == "merchant" and u.status == "pending"]


def filter_attractions(
    attractions: Iterable[Attraction], filters: Optional[AttractionFilters] = None
) -> List[Attraction]:
    data = list(attractions)
    if filters is None:
        return data

    if filters.province:
        data = [a for a in data if a.province == filters.province]
    if filters.city:
        data = [a for a in data if a.city == filters.city]
    if filters.county:
        data = [a for a in data if a.county == filters.county]
    if filters.tag:
        data = [a for a in data if filters.tag in a.tags]
    if filters.query:
        q = filters.query.lower()
        data = [
            a for a in data if q in a.title.lower() or q in a.description.lower()
        ]
    return data


def visible_posts(posts: Iterable[Post], attraction_id: Optional[str] = None) -> List[Post]:
    """Posts shown to the public: active only, optionally for one attraction."""
    visible = [p for p in posts if p.status == "active"]
    if attraction_id:
        visible = [p for p in visible if p.attraction_id == attraction_id]
    return visible


def reported_posts(posts: Iterable[Post]) -> List[Post]:
    """The moderation queue."""
    return [p for p in posts if p.status == "reported"]


def filter_products(
    products: Iterable[Product],
    merchant_id: Optional[str] = None,
    attraction_id: Optional[str] = None,
) -> List[Product]:
    data = list(products)
    if merchant_id:
        data = [p for p in data if p.merchant_id == merchant_id]
    if attraction_id:
        data = [p for p in data if p.attraction_id == attraction_id]
    return data


def filter_orders(
    orders: Iterable[Order],
    user_id: Optional[str] = None,
    merchant_id: Optional[str] = None,
) -> List[Order]:
    data = list(orders)
    if user_id:
        data = [o for o in data if o.user_id == user_id]
    if merchant_id:
        data = [o for o in data if o.has_merchant(merchant_id)]
    return data


def province_options(attractions: Iterable[Attraction]) -> List[str]:
    """Distinct provinces, sorted, for filter pickers."""
    return sorted({a.province for a in attractions if a.province})


def tag_options(attractions: Iterable[Attraction]) -> List[str]:
    return sorted({t for a in attractions for t in a.tags})
