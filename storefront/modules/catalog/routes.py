from __future__ import annotations

from typing import Any, Mapping

from flask import Blueprint

from storefront.app.common.auth import get_backend
from storefront.app.common.errors import abort_json
from storefront.app.common.validation import get_json, require_fields, to_float, to_int
from storefront.app.models import NewProduct
from storefront.backend.errors import ValidationError

bp = Blueprint("catalog", __name__)


def _field(data: Mapping[str, Any], key: str, default: Any) -> Any:
    value = data.get(key)
    return default if value is None or value == "" else value


def parse_new_product(data: Mapping[str, Any]) -> NewProduct:
    """Build and check the create-product payload before it is sent."""
    product = NewProduct(
        name=str(data.get("name") or "").strip(),
        price=to_float(_field(data, "price", 0), "Price"),
        stock=to_int(_field(data, "stock", 0), "Stock"),
        sales=to_int(_field(data, "sales", 0), "Sales"),
        reference_id=str(data.get("reference_id") or "").strip(),
        rating=to_int(_field(data, "rating", 5), "Rating"),
        comments=str(data.get("comments") or ""),
    )
    if not product.name or product.price <= 0 or product.stock < 0 or product.sales < 0:
        raise ValidationError(
            "Please enter a valid name, a price above zero, and non-negative stock and sales."
        )
    if product.rating < 1 or product.rating > 5:
        raise ValidationError("Rating must be between 1 and 5.")
    return product


@bp.get("/products")
def list_products():
    """GET /api/products - Retrieve all products (empty when the backend is down)."""
    items = get_backend().list_products()
    return {"items": [p.to_dict() for p in items], "count": len(items)}, 200


@bp.get("/products/<product_id>")
def get_product(product_id: str):
    """GET /api/products/<id> - Retrieve product details."""
    p = get_backend().get_product(product_id)
    if p is None:
        abort_json(404, "not_found", "Product not found")
    return p.to_dict(), 200


@bp.post("/products")
def create_product():
    """POST /api/products - Publish a new product."""
    data = get_json()
    require_fields(data, ["name", "price"])
    created = get_backend().create_product(parse_new_product(data))
    return created.to_dict(), 201
