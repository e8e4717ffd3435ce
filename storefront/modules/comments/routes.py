from __future__ import annotations

from flask import Blueprint, current_app

from storefront.app.common.auth import current_session, get_backend
from storefront.app.common.validation import get_json
from storefront.modules.comments.widget import RetryPolicy, seed_comments, submit_comment

bp = Blueprint("comments", __name__)


@bp.get("/products/<product_id>/comments")
def list_comments(product_id: str):
    """GET placeholder comments; submitted ones are not stored by this app."""
    return {"product_id": product_id, "comments": [c.to_dict() for c in seed_comments(product_id)]}, 200


@bp.post("/products/<product_id>/comments")
def post_comment(product_id: str):
    data = get_json()
    comment = submit_comment(
        get_backend(),
        product_id,
        str(data.get("content") or ""),
        data.get("rating"),
        author_id=current_session().user_id,
        policy=RetryPolicy.from_config(current_app.config),
    )
    return comment.to_dict(), 201
