from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from storefront.app.models import Comment
from storefront.backend.client import BackendClient
from storefront.backend.errors import BackendError, StorefrontError, TransportError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0

    @classmethod
    def from_config(cls, config) -> "RetryPolicy":
        return cls(
            max_attempts=int(config.get("COMMENT_MAX_ATTEMPTS", 3)),
            base_delay=float(config.get("COMMENT_RETRY_BASE_DELAY", 1.0)),
        )

    def delay(self, attempt: int) -> float:
        """Pause after the failed 0-based `attempt`."""
        return self.base_delay * 2 ** attempt


def seed_comments(product_id: str) -> List[Comment]:
    """Placeholder comments shown until real ones are submitted."""
    return [
        Comment(
            id="1",
            content="Excellent quality and a perfect fit. Fully recommended.",
            rating=5,
            author_id="DemoUser1",
            product_id=product_id,
            created_at="2025-11-20T10:00:00Z",
        ),
        Comment(
            id="2",
            content="Took a while to arrive, but the product is good and durable.",
            rating=3,
            author_id="DemoUser2",
            product_id=product_id,
            created_at="2025-11-21T15:30:00Z",
        ),
        Comment(
            id="3",
            content="A bit pricey, but worth it. Very comfortable.",
            rating=4,
            author_id="DemoUser3",
            product_id=product_id,
            created_at="2025-11-22T08:10:00Z",
        ),
    ]


def validate_comment(content: str, rating) -> None:
    if isinstance(rating, bool) or (isinstance(rating, float) and not rating.is_integer()):
        rating = 0
    try:
        rating = int(rating)
    except (TypeError, ValueError):
        rating = 0
    if rating < 1 or rating > 5 or not (content or "").strip():
        raise ValidationError("Please pick a rating from 1 to 5 and write a comment.")


def submit_comment(
    client: BackendClient,
    product_id: str,
    content: str,
    rating: int,
    author_id: Optional[str] = None,
    policy: RetryPolicy = RetryPolicy(),
    sleep: Callable[[float], None] = time.sleep,
) -> Comment:
    validate_comment(content, rating)

    payload = {
        "text": content.strip(),
        "rating": int(rating),
        "productId": product_id,
        "userId": author_id,
    }

    for attempt in range(policy.max_attempts):
        try:
            return client.post_comment(product_id, payload)
        except (BackendError, TransportError) as exc:
            # a 2xx with an unreadable body was already stored
            if isinstance(exc, BackendError) and 200 <= exc.status_code < 300:
                raise
            if attempt == policy.max_attempts - 1:
                raise
            wait = policy.delay(attempt)
            logger.warning(
                "Comment attempt %d/%d failed (%s), retrying in %.1fs",
                attempt + 1, policy.max_attempts, exc, wait,
            )
            sleep(wait)

    raise ValidationError("Comment retry policy allows no attempts.")


class CommentWidget:
    """Comment list for one product page.

    Starts from the placeholder comments and only ever grows by prepending
    what the backend confirmed. Nothing here is persisted.
    """

    def __init__(self, product_id: str, seed: Optional[List[Comment]] = None) -> None:
        self.product_id = product_id
        self.comments: List[Comment] = list(seed if seed is not None else seed_comments(product_id))
        self.error: Optional[str] = None
        self.busy = False

    def submit(self, client: BackendClient, content: str, rating: int, **kwargs) -> Optional[Comment]:
        if self.busy:
            return None
        self.busy = True
        self.error = None
        try:
            comment = submit_comment(client, self.product_id, content, rating, **kwargs)
        except StorefrontError as exc:
            logger.info("Comment not saved: %s", exc)
            self.error = str(exc) or "Unknown error while sending the comment. Try again."
            return None
        finally:
            self.busy = False

        self.comments.insert(0, comment)
        return comment
