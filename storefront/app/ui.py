"""Server-rendered storefront pages.

Each page talks to the backend through the shared client and keeps its
own state (loading/error/success) for the duration of the request only.
"""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for

from storefront.app.common.auth import current_session, get_backend, login_required_page
from storefront.app.common.validation import to_int
from storefront.app.extensions import cart_guard
from storefront.backend.errors import StorefrontError
from storefront.modules.auth.routes import login_with_id
from storefront.modules.cart.workflow import CartView, add_to_cart
from storefront.modules.catalog.routes import parse_new_product
from storefront.modules.comments.widget import CommentWidget, RetryPolicy

logger = logging.getLogger(__name__)

ui_bp = Blueprint("ui", __name__)


@ui_bp.app_context_processor
def inject_nav():
    """Navbar data (session user) for all templates."""
    store = current_session()
    return {"nav_user_id": store.user_id, "nav_authenticated": store.is_authenticated}


@ui_bp.get("/")
def home():
    products = get_backend().list_products()
    return render_template("catalog.html", products=products)


def _render_product(product_id: str, widget: CommentWidget | None = None, status: int = 200):
    try:
        product = get_backend().get_product(product_id)
    except StorefrontError as err:
        logger.warning("Product %s unavailable: %s", product_id, err)
        return render_template("error.html", message=str(err)), 502
    if product is None:
        return render_template("404.html"), 404

    widget = widget or CommentWidget(product_id)
    return render_template("product_detail.html", product=product, widget=widget), status


@ui_bp.get("/products/<product_id>")
def product_detail(product_id: str):
    return _render_product(product_id)


@ui_bp.post("/products/<product_id>/cart")
def product_add_to_cart(product_id: str):
    store = current_session()
    try:
        quantity = to_int(request.form.get("quantity") or 1, "Quantity")
        add_to_cart(get_backend(), store.user_id, product_id, quantity, cart_guard)
    except StorefrontError as err:
        flash(str(err), "error")
    else:
        name = request.form.get("product_name") or "the product"
        flash(f"{quantity} unit(s) of \"{name}\" added to the cart!", "success")
    return redirect(url_for("ui.product_detail", product_id=product_id))


@ui_bp.post("/products/<product_id>/comments")
def product_comment(product_id: str):
    # The comment list is page-local: render in place instead of redirecting.
    widget = CommentWidget(product_id)
    widget.submit(
        get_backend(),
        request.form.get("content") or "",
        request.form.get("rating"),
        author_id=current_session().user_id,
        policy=RetryPolicy.from_config(current_app.config),
    )
    return _render_product(product_id, widget, 400 if widget.error else 201)


@ui_bp.route("/products/new", methods=["GET", "POST"])
def product_new():
    if request.method == "GET":
        return render_template("product_new.html", form={})

    try:
        product = get_backend().create_product(parse_new_product(request.form))
    except StorefrontError as err:
        return render_template("product_new.html", form=request.form, error=str(err)), 400

    flash(f"Product \"{product.name}\" created! ID: {product.id or 'N/A'}", "success")
    return redirect(url_for("ui.product_new"))


def _render_cart(view: CartView):
    return render_template("cart.html", view=view, cart=view.cart)


@ui_bp.get("/cart")
@login_required_page
def cart_page():
    view = CartView(get_backend(), current_session().user_id, cart_guard)
    view.load()
    return _render_cart(view)


@ui_bp.post("/cart/items/<item_id>/remove")
@login_required_page
def cart_remove(item_id: str):
    view = CartView(get_backend(), current_session().user_id, cart_guard)
    if not view.remove_item(item_id) and view.cart is None:
        # keep the failure message but still show what is in the cart
        message = view.error
        view.load()
        view.error = message
    return _render_cart(view)


@ui_bp.post("/cart/checkout")
@login_required_page
def cart_checkout():
    view = CartView(get_backend(), current_session().user_id, cart_guard)
    view.checkout()
    return _render_cart(view)


@ui_bp.route("/login", methods=["GET", "POST"])
def login_page():
    if request.method == "GET":
        return render_template("login.html", demo_user_id=current_app.config.get("DEMO_USER_ID"))

    try:
        ok = login_with_id(request.form.get("user_id"))
    except StorefrontError as err:
        flash(str(err), "error")
        return redirect(url_for("ui.login_page"))

    if not ok:
        flash("User id not found or invalid. Check your id.", "error")
        return redirect(url_for("ui.login_page"))

    flash("Logged in.", "success")
    return redirect(url_for("ui.home"))


@ui_bp.post("/logout")
def logout():
    current_session().logout()
    flash("Logged out.", "success")
    return redirect(url_for("ui.home"))
