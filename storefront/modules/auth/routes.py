from __future__ import annotations

from flask import Blueprint, current_app

from storefront.app.common.auth import current_session, get_backend
from storefront.app.common.errors import abort_json
from storefront.app.common.validation import get_json
from storefront.backend.errors import ValidationError

bp = Blueprint("auth", __name__)


def resolve_login_id(raw: str | None) -> str:
    """Trimmed id from the form, or the configured demo id when left blank."""
    if raw is not None and not isinstance(raw, str):
        raise ValidationError("Please enter a valid user id.")
    user_id = (raw or "").strip() or (current_app.config.get("DEMO_USER_ID") or "")
    if not user_id:
        raise ValidationError("Please enter a valid user id.")
    return user_id


def login_with_id(raw: str | None) -> bool:
    user_id = resolve_login_id(raw)
    return current_session().login(user_id, get_backend().user_exists)


@bp.post("/auth/login")
def login():
    """POST /api/auth/login - Check the id against the backend and start a session."""
    data = get_json()
    if not login_with_id(data.get("user_id")):
        abort_json(401, "unauthorized", "User id not found or invalid")

    return {"message": "logged_in", "user_id": current_session().user_id}, 200


@bp.post("/auth/logout")
def logout():
    """POST /api/auth/logout - Terminate session."""
    current_session().logout()
    return {"message": "logged_out"}, 200


@bp.get("/session")
def me():
    """GET /api/session - Current session state."""
    store = current_session()
    return {"user_id": store.user_id, "is_authenticated": store.is_authenticated}, 200
