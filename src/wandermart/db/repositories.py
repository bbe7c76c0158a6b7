"""
Entity repositories.

Each repository owns one key in the injected store and keeps the whole
collection ("slice") of its entity type under it as a JSON array. Reads
decode the full slice, falling back to the seed fixtures when the key has
never been written; writes serialise the full slice and overwrite the key.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Type, TypeVar

from wandermart.db import fixtures
from wandermart.db import queries
from wandermart.db.models import Attraction, Order, Post, Product, User
from wandermart.db.store import KeyValueStore, MemoryStore

T = TypeVar("T", User, Attraction, Post, Product, Order)


class SliceRepository(Generic[T]):
    key: str
    model: Type[T]

    def __init__(
        self, store: KeyValueStore, defaults: Optional[Callable[[], List[T]]] = None
    ) -> None:
        self.store = store
        self._defaults = defaults or list

    async def all(self) -> List[T]:
        blob = await self.store.get(self.key)
        if blob is None:
            return self._defaults()
        return [self.model.from_dict(row) for row in json.loads(blob)]

    async def save(self, items: List[T]) -> None:
        blob = json.dumps([item.to_dict() for item in items], ensure_ascii=False)
        await self.store.set(self.key, blob)

    async def find(self, entity_id: str) -> Optional[T]:
        return queries.by_id(await self.all(), entity_id)


class UserRepository(SliceRepository[User]):
    key = "users"
    model = User

    def __init__(self, store: KeyValueStore) -> None:
        super().__init__(store, fixtures.default_users)


class AttractionRepository(SliceRepository[Attraction]):
    key = "attractions"
    model = Attraction

    def __init__(self, store: KeyValueStore) -> None:
        super().__init__(store, fixtures.default_attractions)


class PostRepository(SliceRepository[Post]):
    key = "posts"
    model = Post

    def __init__(self, store: KeyValueStore) -> None:
        super().__init__(store, fixtures.default_posts)


class ProductRepository(SliceRepository[Product]):
    key = "products"
    model = Product

    def __init__(self, store: KeyValueStore) -> None:
        super().__init__(store, fixtures.default_products)


class OrderRepository(SliceRepository[Order]):
    key = "orders"
    model = Order

    def __init__(self, store: KeyValueStore) -> None:
        super().__init__(store, fixtures.default_orders)


@dataclass
class Repositories:
    users: UserRepository
    attractions: AttractionRepository
    posts: PostRepository
    products: ProductRepository
    orders: OrderRepository

    @classmethod
    def over(cls, store: KeyValueStore) -> Repositories:
        return cls(
            users=UserRepository(store),
            attractions=AttractionRepository(store),
            posts=PostRepository(store),
            products=ProductRepository(store),
            orders=OrderRepository(store),
        )

    @classmethod
    def in_memory(cls) -> Repositories:
        return cls.over(MemoryStore())
