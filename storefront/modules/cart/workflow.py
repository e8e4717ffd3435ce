from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional, Set

from storefront.app.models import Cart
from storefront.backend.client import BackendClient
from storefront.backend.errors import CartBusy, StorefrontError, ValidationError

logger = logging.getLogger(__name__)


class MutationGuard:
    """Keeps one cart mutation in flight per key (user id)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._busy: Set[str] = set()

    def is_busy(self, key: str) -> bool:
        with self._lock:
            return key in self._busy

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._lock:
            if key in self._busy:
                raise CartBusy("Another cart update is still in progress.")
            self._busy.add(key)
        try:
            yield
        finally:
            with self._lock:
                self._busy.discard(key)


def add_to_cart(
    client: BackendClient,
    user_id: Optional[str],
    product_id: str,
    quantity: int,
    guard: Optional[MutationGuard] = None,
) -> Cart:
    if not user_id:
        raise ValidationError("You must log in to add products to the cart.")
    if not product_id:
        raise ValidationError("Missing product id.")
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1.")

    guard = guard or MutationGuard()
    with guard.hold(user_id):
        return client.add_to_cart(user_id, product_id, quantity)


class CartView:
    """State behind the cart page.

    Every mutation is followed by a full refetch; nothing is patched
    locally, so the total shown is always the backend's.
    """

    def __init__(self, client: BackendClient, user_id: Optional[str], guard: Optional[MutationGuard] = None) -> None:
        self.client = client
        self.user_id = user_id
        self.guard = guard or MutationGuard()
        self.cart: Optional[Cart] = None
        self.error: Optional[str] = None
        self.failure: Optional[StorefrontError] = None
        self.purchase_completed = False

    @property
    def busy(self) -> bool:
        return bool(self.user_id) and self.guard.is_busy(self.user_id)

    @property
    def item_count(self) -> int:
        return self.cart.item_count if self.cart else 0

    def load(self) -> Optional[Cart]:
        if not self.user_id:
            self.error = "No user id available. Please log in."
            return None

        self.error = None
        self.failure = None
        try:
            self.cart = self.client.fetch_cart(self.user_id)
        except StorefrontError as exc:
            logger.warning("Cart load failed for %s: %s", self.user_id, exc)
            self.cart = None
            self.error = str(exc)
            self.failure = exc
        return self.cart

    def remove_item(self, item_id: str) -> bool:
        if not self.user_id:
            self.error = "No user id available. Please log in."
            return False

        self.error = None
        try:
            with self.guard.hold(self.user_id):
                self.client.remove_item(self.user_id, item_id)
                self.load()
        except StorefrontError as exc:
            logger.warning("Remove of %s failed: %s", item_id, exc)
            self.error = str(exc) or "Could not remove the item."
            self.failure = exc
            return False
        return self.error is None

    def checkout(self) -> bool:
        """Clear the cart as the purchase step, then refetch to confirm."""
        try:
            if not self.user_id:
                raise ValidationError("No active user session.")
            if self.cart is None and self.load() is None:
                return False
            if self.cart.is_empty:
                raise ValidationError("The cart is already empty.")

            self.error = None
            with self.guard.hold(self.user_id):
                self.client.clear_cart(self.user_id)
                self.purchase_completed = True
                self.load()
        except StorefrontError as exc:
            logger.warning("Checkout failed for %s: %s", self.user_id, exc)
            self.error = str(exc) or "Unknown error while processing the purchase."
            self.failure = exc
            return False
        return True
