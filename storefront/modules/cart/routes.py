from __future__ import annotations

from flask import Blueprint

from storefront.app.common.auth import current_session, get_backend, login_required
from storefront.app.common.errors import abort_json, api_error_from
from storefront.app.common.validation import get_json, require_fields, to_int
from storefront.app.extensions import cart_guard
from storefront.modules.cart.workflow import CartView, add_to_cart

bp = Blueprint("cart", __name__)


def _cart_view() -> CartView:
    return CartView(get_backend(), current_session().user_id, cart_guard)


def _fail(view: CartView, default_code: str):
    if view.failure is not None:
        raise api_error_from(view.failure)
    abort_json(400, default_code, view.error or "Cart unavailable")


def _cart_response(view: CartView, status: int = 200):
    if view.cart is None:
        _fail(view, "cart_unavailable")
    payload = view.cart.to_dict()
    payload["purchase_completed"] = view.purchase_completed
    return payload, status


@bp.get("/cart")
@login_required
def get_cart():
    view = _cart_view()
    view.load()
    return _cart_response(view)


@bp.post("/cart/items")
@login_required
def add_item():
    data = get_json()
    require_fields(data, ["product_id"])

    quantity = to_int(data.get("quantity", 1), "Quantity")
    cart = add_to_cart(
        get_backend(),
        current_session().user_id,
        str(data["product_id"]),
        quantity,
        cart_guard,
    )
    return cart.to_dict(), 201


@bp.delete("/cart/items/<item_id>")
@login_required
def remove_item(item_id: str):
    view = _cart_view()
    if not view.remove_item(item_id):
        _fail(view, "remove_failed")
    return _cart_response(view)


@bp.delete("/cart/clear")
@login_required
def checkout():
    """Checkout: clearing the cart is the purchase step."""
    view = _cart_view()
    if not view.checkout():
        _fail(view, "checkout_failed")
    return _cart_response(view)
