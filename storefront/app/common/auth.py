"""ID-only auth helpers.

There are no passwords or tokens: a user is "logged in" once the backend
confirmed their id exists. The id lives in the signed Flask session cookie
through `FlaskSessionSlot`.
"""

from functools import wraps
from typing import Callable, TypeVar, Any

from flask import current_app, flash, g, redirect, url_for

from storefront.app.common.errors import abort_json
from storefront.backend.client import BackendClient
from storefront.modules.auth.session import FlaskSessionSlot, SessionStore

F = TypeVar("F", bound=Callable[..., Any])


def get_backend() -> BackendClient:
    return current_app.extensions["storefront_backend"]


def current_session() -> SessionStore:
    """Session store for this request, restored from the cookie on first use."""
    store = g.get("session_store")
    if store is None:
        # The cookie is signed and only ever written after a checked login,
        # so it is read back without another round trip to /users.
        store = SessionStore(FlaskSessionSlot())
        store.restore()
        g.session_store = store
    return store


def login_required(fn: F) -> F:
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_session().is_authenticated:
            abort_json(401, "unauthorized", "Authentication required")
        return fn(*args, **kwargs)

    return wrapper  # type: ignore


def login_required_page(fn: F) -> F:
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_session().is_authenticated:
            flash("Please log in first.", "info")
            return redirect(url_for("ui.login_page"))
        return fn(*args, **kwargs)

    return wrapper  # type: ignore
