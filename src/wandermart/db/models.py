# dataclass entities, the result envelope, and the pydantic write commands

from __future__ import annotations

import functools
from dataclasses import asdict, dataclass, field, is_dataclass
from typing import Annotated, Any, Generic, List, Literal, Mapping, Optional, TypeVar, get_args

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, TypeAdapter

Role = Literal["guest", "traveler", "merchant", "admin"]
UserStatus = Literal["active", "pending", "rejected"]
PostStatus = Literal["active", "reported", "hidden"]
OrderStatus = Literal["pending", "shipped", "delivered", "cancelled"]
ModerationAction = Literal["approve", "delete"]

USER_STATUSES = get_args(UserStatus)
ORDER_STATUSES = get_args(OrderStatus)
MODERATION_ACTIONS = get_args(ModerationAction)

T = TypeVar("T")


def region_label(province: Optional[str], city: Optional[str]) -> str:
    return f"{province or ''} {city or ''}".strip()


@functools.cache
def _adapter(cls: type) -> TypeAdapter:
    return TypeAdapter(cls)


class _Record:
    """Mixin giving entities a plain-dict form for the JSON slices.

    Decoding goes through a pydantic TypeAdapter, so nested records
    (comments, order lines) come back as dataclasses and keys that are not
    fields are dropped.
    """

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        return _adapter(cls).validate_python(data)

    def to_dict(self) -> dict:
        return asdict(self)


# ---------------------------
# Entities
# ---------------------------


@dataclass(frozen=True)
class User(_Record):
    id: str
    username: str
    email: str
    role: Role
    status: UserStatus
    qualification_url: Optional[str] = None
    token: Optional[str] = None  # only set on login/register results


@dataclass(frozen=True)
class Attraction(_Record):
    id: str
    title: str
    description: str
    address: str
    region: str
    province: Optional[str] = None
    city: Optional[str] = None
    county: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    image_url: str = ""
    gallery: List[str] = field(default_factory=list)
    open_hours: Optional[str] = None
    driving_tips: Optional[str] = None


@dataclass(frozen=True)
class Comment(_Record):
    id: str
    user_id: str
    username: str
    content: str
    created_at: str


@dataclass(frozen=True)
class Post(_Record):
    id: str
    attraction_id: str
    user_id: str
    username: str
    content: str
    created_at: str
    status: PostStatus = "active"
    rating: Optional[int] = None  # 1-5, not enforced
    image_url: Optional[str] = None
    likes: int = 0
    comments: List[Comment] = field(default_factory=list)


@dataclass(frozen=True)
class Product(_Record):
    id: str
    merchant_id: str
    merchant_name: str
    name: str
    description: str
    price: float
    stock: int
    image_url: str
    attraction_id: Optional[str] = None
    attraction_name: Optional[str] = None  # copied from the attraction at creation


@dataclass(frozen=True)
class CartItem(Product):
    """Product snapshot taken when it went into the cart."""

    quantity: int = 1

    @classmethod
    def of(cls, product: Product, quantity: int = 1) -> CartItem:
        return cls(**{**vars(product), "quantity": quantity})

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


@dataclass(frozen=True)
class Order(_Record):
    id: str
    user_id: str
    items: List[CartItem]
    total: float  # computed by the client, never checked here
    created_at: str
    status: OrderStatus = "pending"
    tracking_number: Optional[str] = None

    def has_merchant(self, merchant_id: str) -> bool:
        return any(item.merchant_id == merchant_id for item in self.items)


# ---------------------------
# Envelope
# ---------------------------


def _plain(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


@dataclass(frozen=True)
class ApiResponse(Generic[T]):
    success: bool
    data: Optional[T] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: T) -> ApiResponse[T]:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: str) -> ApiResponse[T]:
        return cls(success=False, message=message)

    def to_dict(self) -> dict:
        """{success, data?, message?} with the absent keys left out."""
        out: dict = {"success": self.success}
        if self.data is not None:
            out["data"] = _plain(self.data)
        if self.message is not None:
            out["message"] = self.message
        return out


# ---------------------------
# Commands
# ---------------------------

Text = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Price = Annotated[float, Field(ge=0, strict=True)]
Count = Annotated[int, Field(ge=0, strict=True)]


class _Command(BaseModel):
    """Write payloads. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")


class Registration(_Command):
    email: Text
    username: Optional[Text] = None
    role: Role = "traveler"
    qualification_url: Optional[str] = None


class NewAttraction(_Command):
    title: Text
    description: Text
    address: Text
    province: Text
    city: Text
    county: Text
    tags: List[str] = []
    image_url: Optional[str] = None
    gallery: List[str] = []
    open_hours: Optional[str] = None
    driving_tips: Optional[str] = None


class AttractionUpdate(_Command):
    """Every mutable attraction field; ``None`` means leave it alone."""

    title: Optional[Text] = None
    description: Optional[Text] = None
    address: Optional[Text] = None
    province: Optional[Text] = None
    city: Optional[Text] = None
    county: Optional[Text] = None
    tags: Optional[List[str]] = None
    image_url: Optional[str] = None
    gallery: Optional[List[str]] = None
    open_hours: Optional[str] = None
    driving_tips: Optional[str] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)


class NewPost(_Command):
    attraction_id: Text
    user_id: Text
    username: Text
    content: Text
    rating: Optional[int] = None
    image_url: Optional[str] = None


class NewProduct(_Command):
    merchant_id: Text
    name: Text
    description: str
    price: Price
    stock: Count
    merchant_name: Optional[str] = None
    attraction_id: Optional[str] = None
    image_url: Optional[str] = None


class NewOrder(_Command):
    user_id: Text
    items: List[CartItem] = Field(min_length=1)
    total: Price
