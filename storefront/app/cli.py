"""`flask shop ...` commands.

Each invocation is a fresh process: the session is restored from a JSON
file slot at startup and, unless SESSION_REVALIDATE_ON_RESTORE is off,
checked against the backend again.
"""

from __future__ import annotations

import os

import click
from flask import Blueprint, current_app

from storefront.app.common.auth import get_backend
from storefront.app.models import render_stars, short_id
from storefront.backend.errors import StorefrontError
from storefront.modules.auth.routes import resolve_login_id
from storefront.modules.auth.session import FileSlot, SessionStore
from storefront.modules.cart.workflow import CartView, add_to_cart
from storefront.modules.catalog.routes import parse_new_product
from storefront.modules.comments.widget import RetryPolicy, submit_comment

cli_bp = Blueprint("shop", __name__)


def session_file() -> str:
    return current_app.config.get("SESSION_FILE") or os.path.join(current_app.instance_path, "session.json")


def restored_session() -> SessionStore:
    store = SessionStore(FileSlot(session_file()))
    validate = get_backend().user_exists if current_app.config.get("SESSION_REVALIDATE_ON_RESTORE") else None
    store.restore(validate)
    return store


def require_user(store: SessionStore) -> str:
    if not store.is_authenticated:
        raise click.ClickException("Not logged in. Run `flask shop login <user-id>` first.")
    return store.user_id


def _echo_cart(view: CartView) -> None:
    cart = view.cart
    if cart is None:
        raise click.ClickException(view.error or "Cart unavailable.")
    if cart.is_empty:
        click.echo("Shopping cart (empty)")
        return
    click.echo(f"Shopping cart - {view.item_count} item(s)")
    for item in cart.items:
        click.echo(
            f"  [{item.item_id}] {item.product.name}: "
            f"{item.quantity} x ${item.product.price:.2f} = ${item.subtotal:.2f}"
        )
    click.echo(f"TOTAL: ${cart.total:.2f}")


@cli_bp.cli.command("login")
@click.argument("user_id", required=False, default="")
def login(user_id: str) -> None:
    """Log in with a user id (blank uses DEMO_USER_ID)."""
    store = SessionStore(FileSlot(session_file()))
    try:
        user_id = resolve_login_id(user_id)
    except StorefrontError as err:
        raise click.ClickException(str(err))

    if not store.login(user_id, get_backend().user_exists):
        raise click.ClickException("User id not found or invalid. Check your id.")
    click.echo(f"Logged in as {user_id}")


@cli_bp.cli.command("logout")
def logout() -> None:
    """Forget the stored session."""
    SessionStore(FileSlot(session_file())).logout()
    click.echo("Logged out.")


@cli_bp.cli.command("whoami")
def whoami() -> None:
    store = restored_session()
    if store.is_authenticated:
        click.echo(f"Session: {store.user_id}")
    else:
        click.echo("Not logged in.")


@cli_bp.cli.command("products")
def products() -> None:
    """List the catalog."""
    items = get_backend().list_products()
    if not items:
        click.echo("Catalog is empty (or the backend is unreachable).")
        return
    for p in items:
        click.echo(f"{short_id(p.id)}  {p.name}  ${p.price:.2f}  ({p.id})")


@cli_bp.cli.command("product")
@click.argument("product_id")
def product(product_id: str) -> None:
    """Show one product."""
    try:
        p = get_backend().get_product(product_id)
    except StorefrontError as err:
        raise click.ClickException(str(err))
    if p is None:
        raise click.ClickException(f"Product {product_id} not found.")

    click.echo(f"{p.name} - ${p.price:.2f}")
    if p.rating is not None:
        click.echo(f"Rating: {render_stars(p.rating)} ({int(p.rating)} / 5)")
    click.echo(p.description or "No detailed description available.")
    click.echo(f"Featured comment: {p.comments or 'No comments yet.'}")


@cli_bp.cli.command("add")
@click.argument("product_id")
@click.option("--quantity", "-q", default=1, show_default=True, type=int)
def add(product_id: str, quantity: int) -> None:
    """Add a product to the cart."""
    store = restored_session()
    try:
        add_to_cart(get_backend(), require_user(store), product_id, quantity)
    except StorefrontError as err:
        raise click.ClickException(str(err))
    click.echo(f"{quantity} unit(s) of {product_id} added to the cart.")


@cli_bp.cli.command("cart")
def cart() -> None:
    """Show the cart."""
    view = CartView(get_backend(), require_user(restored_session()))
    view.load()
    _echo_cart(view)


@cli_bp.cli.command("remove")
@click.argument("item_id")
def remove(item_id: str) -> None:
    """Remove one cart item, then show the refreshed cart."""
    view = CartView(get_backend(), require_user(restored_session()))
    if not view.remove_item(item_id):
        raise click.ClickException(view.error or "Could not remove the item.")
    _echo_cart(view)


@cli_bp.cli.command("checkout")
def checkout() -> None:
    """Complete the purchase (empties the cart)."""
    view = CartView(get_backend(), require_user(restored_session()))
    if not view.checkout():
        raise click.ClickException(view.error or "Checkout failed.")
    click.echo("Purchase completed! The cart has been emptied.")
    if view.cart is not None:
        _echo_cart(view)


@cli_bp.cli.command("comment")
@click.argument("product_id")
@click.option("--rating", "-r", required=True, type=int)
@click.option("--content", "-c", required=True)
def comment(product_id: str, rating: int, content: str) -> None:
    """Post a review for a product."""
    store = restored_session()
    try:
        created = submit_comment(
            get_backend(),
            product_id,
            content,
            rating,
            author_id=store.user_id,
            policy=RetryPolicy.from_config(current_app.config),
        )
    except StorefrontError as err:
        raise click.ClickException(str(err))
    click.echo(f"Comment {created.id} saved {render_stars(created.rating)}")


@cli_bp.cli.command("create-product")
@click.option("--name", required=True)
@click.option("--price", required=True, type=float)
@click.option("--stock", default=0, type=int)
@click.option("--sales", default=0, type=int)
@click.option("--rating", default=5, type=int)
@click.option("--reference-id", default="")
@click.option("--comments", default="")
def create_product(name, price, stock, sales, rating, reference_id, comments) -> None:
    """Publish a new product."""
    try:
        new_product = parse_new_product(
            {
                "name": name,
                "price": price,
                "stock": stock,
                "sales": sales,
                "rating": rating,
                "reference_id": reference_id,
                "comments": comments,
            }
        )
        created = get_backend().create_product(new_product)
    except StorefrontError as err:
        raise click.ClickException(str(err))
    click.echo(f"Product \"{created.name}\" created! ID: {created.id or 'N/A'}")
