# service facade: one coroutine per use case, each returning an ApiResponse
from __future__ import annotations

import asyncio
import base64
import functools
import mimetypes
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Type, TypeVar, Union

import pydantic

from wandermart.db import queries
from wandermart.db.errors import (
    EmailTakenError,
    NotFoundError,
    UploadError,
    ValidationError,
    WanderMartError,
)
from wandermart.db.models import (
    MODERATION_ACTIONS,
    ORDER_STATUSES,
    USER_STATUSES,
    ApiResponse,
    Attraction,
    AttractionUpdate,
    ModerationAction,
    NewAttraction,
    NewOrder,
    NewPost,
    NewProduct,
    Order,
    OrderStatus,
    Post,
    Product,
    Registration,
    User,
    UserStatus,
    region_label,
)
from wandermart.db.queries import AttractionFilters
from wandermart.db.repositories import Repositories
from wandermart.db.store import MemoryStore, SqliteStore
from wandermart.utils.config import Settings
from wandermart.utils.logger import get_logger

_logger = get_logger(__name__)

C = TypeVar("C")

DEFAULT_MERCHANT_NAME = "My Store"
DEFAULT_ATTRACTION_IMAGE = "https://picsum.photos/800/600?random=99"
LOGIN_HINT = (
    "Invalid credentials. Try user@test.com, merchant@test.com, or admin@test.com"
)


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


def session_token(user_id: str) -> str:
    return f"mock-jwt-{user_id}"


def encode_data_uri(data: bytes, mime_type: Optional[str] = None) -> str:
    """Inline ``data:`` URI usable directly as an image source."""
    mime_type = mime_type or "application/octet-stream"
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def _coerce(command_type: Type[C], data: Union[C, Mapping[str, Any]]) -> C:
    return command_type.model_validate(data)


def describe_invalid(error: pydantic.ValidationError) -> str:
    """'price: Input should be ...; is_admin: Extra inputs ...' in one line."""
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'payload'}: {err['msg']}"
        for err in error.errors()
    )


def operation(fn):
    """Wrap a service coroutine: wait out the simulated latency, then turn its
    return value into a success envelope, and any WanderMartError or
    rejected command into a failure envelope. Other exceptions propagate."""

    @functools.wraps(fn)
    async def wrapper(self: MarketService, *args, **kwargs) -> ApiResponse:
        await asyncio.sleep(self.delay)
        try:
            data = await fn(self, *args, **kwargs)
        except WanderMartError as e:
            _logger.warning(f"{fn.__name__} failed: {e.message}")
            return ApiResponse.fail(e.message)
        except pydantic.ValidationError as e:
            message = describe_invalid(e)
            _logger.warning(f"{fn.__name__} rejected: {message}")
            return ApiResponse.fail(message)
        return ApiResponse.ok(data)

    return wrapper


class MarketService:
    """
    Every operation reads the slice(s) it needs, applies at most one
    insertion or state change, writes the full slice back and returns an
    envelope. Nothing cascades across entity types: deleting an attraction
    leaves its posts and products in place.
    """

    def __init__(
        self,
        repos: Repositories,
        delay: float = 0.0,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.repos = repos
        self.delay = delay
        self._clock = clock

    def _now(self) -> str:
        return self._clock().isoformat()

    # ---------------------------
    # Auth & users
    # ---------------------------

    @operation
    async def login(self, email: str, password: str) -> User:
        # passwords are not checked
        user = queries.find_user_by_email(await self.repos.users.all(), email)
        if not user:
            raise WanderMartError(LOGIN_HINT)
        _logger.info(f"User {user.id} logged in as {user.role}")
        return replace(user, token=session_token(user.id))

    @operation
    async def register(
        self, registration: Union[Registration, Mapping[str, Any]], password: str
    ) -> User:
        reg = _coerce(Registration, registration)
        users = await self.repos.users.all()
        if queries.find_user_by_email(users, reg.email):
            raise EmailTakenError(reg.email)

        user = User(
            id=new_id("u"),
            username=reg.username or reg.email.split("@")[0],
            email=reg.email,
            role=reg.role,
            status="pending" if reg.role == "merchant" else "active",
            qualification_url=reg.qualification_url,
        )
        await self.repos.users.save([*users, user])
        _logger.info(f"Registered {user.role} {user.id} with status {user.status}")
        return replace(user, token=session_token(user.id))

    @operation
    async def get_pending_merchants(self) -> List[User]:
        return queries.pending_merchants(await self.repos.users.all())

    @operation
    async def update_user_status(self, user_id: str, status: UserStatus) -> bool:
        if status not in USER_STATUSES:
            raise ValidationError(f"Unknown user status: {status}")
        users = await self.repos.users.all()
        idx = queries.index_of(users, user_id)
        if idx == -1:
            raise NotFoundError("User", user_id)
        users[idx] = replace(users[idx], status=status)
        await self.repos.users.save(users)
        _logger.info(f"User {user_id} status -> {status}")
        return True

    # ---------------------------
    # Attractions
    # ---------------------------

    @operation
    async def get_attractions(
        self, filters: Optional[AttractionFilters] = None
    ) -> List[Attraction]:
        return queries.filter_attractions(await self.repos.attractions.all(), filters)

    @operation
    async def get_attraction_by_id(self, attraction_id: str) -> Attraction:
        found = await self.repos.attractions.find(attraction_id)
        if not found:
            raise NotFoundError("Attraction", attraction_id)
        return found

    @operation
    async def create_attraction(
        self, data: Union[NewAttraction, Mapping[str, Any]]
    ) -> Attraction:
        cmd = _coerce(NewAttraction, data)
        attraction = Attraction(
            id=new_id("attr"),
            title=cmd.title,
            description=cmd.description,
            address=cmd.address,
            province=cmd.province,
            city=cmd.city,
            county=cmd.county,
            region=region_label(cmd.province, cmd.city),
            tags=list(cmd.tags),
            image_url=cmd.image_url or DEFAULT_ATTRACTION_IMAGE,
            gallery=list(cmd.gallery),
            open_hours=cmd.open_hours,
            driving_tips=cmd.driving_tips,
        )
        attractions = await self.repos.attractions.all()
        await self.repos.attractions.save([attraction, *attractions])
        _logger.info(f"Created attraction {attraction.id} '{attraction.title}'")
        return attraction

    @operation
    async def update_attraction(
        self, attraction_id: str, updates: Union[AttractionUpdate, Mapping[str, Any]]
    ) -> Attraction:
        patch = _coerce(AttractionUpdate, updates).changes()
        attractions = await self.repos.attractions.all()
        idx = queries.index_of(attractions, attraction_id)
        if idx == -1:
            raise NotFoundError("Attraction", attraction_id)

        updated = replace(attractions[idx], **patch)
        if "province" in patch or "city" in patch:
            updated = replace(updated, region=region_label(updated.province, updated.city))
        attractions[idx] = updated
        await self.repos.attractions.save(attractions)
        _logger.info(f"Updated attraction {attraction_id}: {sorted(patch)}")
        return updated

    @operation
    async def delete_attraction(self, attraction_id: str) -> bool:
        attractions = await self.repos.attractions.all()
        remaining = [a for a in attractions if a.id != attraction_id]
        if len(remaining) == len(attractions):
            raise NotFoundError("Attraction", attraction_id)
        await self.repos.attractions.save(remaining)
        _logger.info(f"Deleted attraction {attraction_id}")
        return True

    # ---------------------------
    # Posts (reviews)
    # ---------------------------

    @operation
    async def get_posts(self, attraction_id: Optional[str] = None) -> List[Post]:
        return queries.visible_posts(await self.repos.posts.all(), attraction_id)

    @operation
    async def create_post(self, data: Union[NewPost, Mapping[str, Any]]) -> Post:
        cmd = _coerce(NewPost, data)
        post = Post(
            id=new_id("post"),
            attraction_id=cmd.attraction_id,
            user_id=cmd.user_id,
            username=cmd.username,
            content=cmd.content,
            rating=cmd.rating,
            image_url=cmd.image_url,
            likes=0,
            comments=[],
            created_at=self._now(),
            status="active",
        )
        posts = await self.repos.posts.all()
        await self.repos.posts.save([post, *posts])
        _logger.info(f"User {post.user_id} posted {post.id} on {post.attraction_id}")
        return post

    @operation
    async def report_post(self, post_id: str) -> bool:
        posts = await self.repos.posts.all()
        idx = queries.index_of(posts, post_id)
        if idx == -1:
            raise NotFoundError("Post", post_id)
        posts[idx] = replace(posts[idx], status="reported")
        await self.repos.posts.save(posts)
        _logger.info(f"Post {post_id} reported")
        return True

    # ---------------------------
    # Products
    # ---------------------------

    @operation
    async def get_products(
        self, merchant_id: Optional[str] = None, attraction_id: Optional[str] = None
    ) -> List[Product]:
        return queries.filter_products(
            await self.repos.products.all(), merchant_id, attraction_id
        )

    @operation
    async def get_product_by_id(self, product_id: str) -> Product:
        found = await self.repos.products.find(product_id)
        if not found:
            raise NotFoundError("Product", product_id)
        return found

    @operation
    async def create_product(self, data: Union[NewProduct, Mapping[str, Any]]) -> Product:
        cmd = _coerce(NewProduct, data)

        # snapshot of the attraction title; later renames do not reach it
        attraction_name = None
        if cmd.attraction_id:
            attraction = await self.repos.attractions.find(cmd.attraction_id)
            if attraction:
                attraction_name = attraction.title

        product_id = new_id("prod")
        product = Product(
            id=product_id,
            merchant_id=cmd.merchant_id,
            merchant_name=cmd.merchant_name or DEFAULT_MERCHANT_NAME,
            attraction_id=cmd.attraction_id,
            attraction_name=attraction_name,
            name=cmd.name,
            description=cmd.description,
            price=cmd.price,
            stock=cmd.stock,
            image_url=cmd.image_url or f"https://picsum.photos/400/400?random={product_id}",
        )
        products = await self.repos.products.all()
        await self.repos.products.save([*products, product])
        _logger.info(f"Merchant {product.merchant_id} listed {product.id} '{product.name}'")
        return product

    # ---------------------------
    # Orders
    # ---------------------------

    @operation
    async def create_order(self, data: Union[NewOrder, Mapping[str, Any]]) -> Order:
        cmd = _coerce(NewOrder, data)
        order = Order(
            id=new_id("ord"),
            user_id=cmd.user_id,
            items=list(cmd.items),
            total=cmd.total,
            status="pending",
            created_at=self._now(),
        )
        orders = await self.repos.orders.all()
        await self.repos.orders.save([order, *orders])
        _logger.info(
            f"Order {order.id} placed by {order.user_id}: "
            f"{len(order.items)} line(s), total {order.total:.2f}"
        )
        return order

    @operation
    async def get_orders(
        self, user_id: Optional[str] = None, merchant_id: Optional[str] = None
    ) -> List[Order]:
        return queries.filter_orders(await self.repos.orders.all(), user_id, merchant_id)

    @operation
    async def update_order_status(
        self, order_id: str, status: OrderStatus, tracking_number: Optional[str] = None
    ) -> Order:
        if status not in ORDER_STATUSES:
            raise ValidationError(f"Unknown order status: {status}")
        orders = await self.repos.orders.all()
        idx = queries.index_of(orders, order_id)
        if idx == -1:
            raise NotFoundError("Order", order_id)

        current = orders[idx]
        updated = replace(
            current,
            status=status,
            tracking_number=tracking_number or current.tracking_number,
        )
        orders[idx] = updated
        await self.repos.orders.save(orders)
        _logger.info(f"Order {order_id} -> {status} (tracking {updated.tracking_number})")
        return updated

    # ---------------------------
    # Moderation
    # ---------------------------

    @operation
    async def get_reported_content(self) -> List[Post]:
        return queries.reported_posts(await self.repos.posts.all())

    @operation
    async def moderate_content(self, post_id: str, action: ModerationAction) -> bool:
        if action not in MODERATION_ACTIONS:
            raise ValidationError(f"Unknown moderation action: {action}")
        posts = await self.repos.posts.all()
        idx = queries.index_of(posts, post_id)
        if idx == -1:
            raise NotFoundError("Post", post_id)

        if action == "delete":
            del posts[idx]
        else:
            posts[idx] = replace(posts[idx], status="active")
        await self.repos.posts.save(posts)
        _logger.info(f"Moderated post {post_id}: {action}")
        return True

    # ---------------------------
    # Files
    # ---------------------------

    async def upload_file(self, path: Union[str, Path]) -> str:
        """
        Read a local file and return it as a ``data:`` URI, so images live
        inside the stored records instead of in external object storage.
        Raises UploadError if the file cannot be read.
        """
        path = Path(path)
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise UploadError(f"Could not read {path.name}: {e.strerror or e}") from e
        mime_type, _ = mimetypes.guess_type(path.name)
        _logger.debug(f"Encoded {path.name} ({len(data)} bytes, {mime_type})")
        return encode_data_uri(data, mime_type)


def build_service(settings: Optional[Settings] = None) -> MarketService:
    """Wire store -> repositories -> service from settings."""
    settings = settings or Settings.from_env()
    if settings.in_memory:
        store = MemoryStore()
    else:
        store = SqliteStore(settings.db_path)
    _logger.debug(f"Using {type(store).__name__}, delay {settings.delay_ms}ms")
    return MarketService(Repositories.over(store), delay=settings.delay_seconds)
