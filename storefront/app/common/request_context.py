import uuid
from typing import Optional

from flask import g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"


def init_request_id() -> str:
    rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    g.request_id = rid
    return rid


def current_request_id() -> Optional[str]:
    """Request id to forward to the backend, if we are serving a request."""
    if not has_request_context():
        return None
    return getattr(g, "request_id", None)
