"""Typed views of the backend payloads.

The backend speaks Spanish field names (`nombre`, `precio`, `cantidad`...).
Everything past `from_json` uses the English attribute names below.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _num(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    return float(value)


def _id(data: Dict[str, Any]) -> str:
    return str(data.get("_id") or data.get("id") or "")


def _ref(value: Any) -> str:
    """Id of a reference that may come back populated as an object."""
    if isinstance(value, dict):
        return _id(value)
    return str(value or "")


@dataclass
class Product:
    id: str
    name: str
    price: float
    description: Optional[str] = None
    image_url: Optional[str] = None
    rating: Optional[float] = None
    comments: Optional[str] = None
    stock: Optional[int] = None
    sales: Optional[int] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Product":
        rating = data.get("calificacion")
        return cls(
            id=_id(data),
            name=data.get("nombre") or "",
            price=_num(data.get("precio")),
            description=data.get("descripcion"),
            image_url=data.get("imagenUrl"),
            rating=float(rating) if rating is not None else None,
            comments=data.get("comentarios"),
            stock=data.get("stock"),
            sales=data.get("ventas"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "description": self.description,
            "image_url": self.image_url,
            "rating": self.rating,
            "comments": self.comments,
        }


@dataclass
class NewProduct:
    """Form payload for POST /products/add."""

    name: str
    price: float
    stock: int = 0
    sales: int = 0
    reference_id: str = ""
    rating: int = 5
    comments: str = ""

    def to_json(self) -> Dict[str, Any]:
        return {
            "nombre": self.name.strip(),
            "precio": self.price,
            "stock": self.stock,
            "ventas": self.sales,
            "id": self.reference_id,
            "calificacion": self.rating,
            "comentarios": self.comments,
        }


@dataclass
class CartItem:
    item_id: str
    product: Product
    quantity: int
    subtotal: float

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "CartItem":
        raw_product = data.get("product") or {}
        if not isinstance(raw_product, dict):
            # unpopulated reference: the backend sent only the product id
            raw_product = {"_id": raw_product}
        return cls(
            item_id=_id(data),
            product=Product.from_json(raw_product),
            quantity=int(data.get("cantidad") or 0),
            subtotal=_num(data.get("subtotal")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_id": self.item_id,
            "product": {"id": self.product.id, "name": self.product.name, "price": self.product.price},
            "quantity": self.quantity,
            "subtotal": self.subtotal,
        }


@dataclass
class Cart:
    id: str
    user_id: str
    items: List[CartItem] = field(default_factory=list)
    total: float = 0.0

    @classmethod
    def empty(cls, user_id: str) -> "Cart":
        """The value a user without a backend cart record gets."""
        return cls(id="", user_id=user_id, items=[], total=0.0)

    @classmethod
    def from_json(cls, data: Dict[str, Any], user_id: str = "") -> "Cart":
        return cls(
            id=_id(data),
            user_id=_ref(data.get("user")) or user_id,
            items=[CartItem.from_json(i) for i in data.get("items") or []],
            total=_num(data.get("total")),
        )

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def item_count(self) -> int:
        return sum(i.quantity for i in self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "items": [i.to_dict() for i in self.items],
            "item_count": self.item_count,
            "total": self.total,
        }


@dataclass
class Comment:
    id: str
    content: str
    rating: int
    author_id: Optional[str]
    product_id: str
    created_at: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Comment":
        return cls(
            id=_id(data),
            content=data.get("content") or data.get("text") or "",
            rating=int(data.get("rating") or 0),
            author_id=data.get("user") or data.get("userId"),
            product_id=str(data.get("productId") or ""),
            created_at=data.get("createdAt") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "rating": self.rating,
            "author_id": self.author_id,
            "product_id": self.product_id,
            "created_at": self.created_at,
        }


def render_stars(rating: Optional[float]) -> str:
    """One star per whole rating point, clamped to 0..5."""
    if rating is None:
        return ""
    return "⭐" * max(0, min(5, int(rating)))


def short_id(value: Optional[str], length: int = 8) -> str:
    value = value or ""
    if len(value) <= length:
        return value
    return f"{value[:length]}..."
