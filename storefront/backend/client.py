"""HTTP client for the storefront backend.

One method per backend endpoint. Absence (404 on product/cart lookups) comes
back as a value; every other non-2xx becomes a `BackendError` and every
`requests` transport failure a `TransportError`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar

import requests

from storefront.app.models import Cart, Comment, NewProduct, Product
from storefront.backend.errors import BackendError, TransportError, ValidationError

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

T = TypeVar("T")


def _path(*segments: Any) -> str:
    """Join path segments, percent-encoding each one (`/` and `?` included)."""
    return "".join("/" + requests.utils.quote(str(s), safe="") for s in segments)


class BackendClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        http: Optional[requests.Session] = None,
        request_id: Optional[Callable[[], Optional[str]]] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http or requests.Session()
        self._request_id = request_id

    @classmethod
    def from_config(cls, config: Mapping[str, Any], **kwargs: Any) -> "BackendClient":
        return cls(
            base_url=config["BACKEND_URL"],
            timeout=float(config.get("BACKEND_TIMEOUT", 10)),
            **kwargs,
        )

    # --- plumbing ---

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> requests.Response:
        headers = {"Content-Type": "application/json"}
        rid = self._request_id() if self._request_id else None
        if rid:
            headers[REQUEST_ID_HEADER] = rid

        url = f"{self.base_url}{path}"
        try:
            resp = self.http.request(method, url, json=json, headers=headers, timeout=self.timeout)
        except requests.Timeout as exc:
            raise TransportError(f"Backend did not answer within {self.timeout:g}s ({method} {path})", exc)
        except requests.RequestException as exc:
            raise TransportError(f"Could not reach the backend ({method} {path}): {exc}", exc)

        logger.debug("%s %s -> %s", method, path, resp.status_code)
        return resp

    @staticmethod
    def _body_message(resp: requests.Response) -> Optional[str]:
        try:
            data = resp.json()
        except ValueError:
            return None
        if isinstance(data, dict) and data.get("message"):
            message = data["message"]
            # validation pipes on the backend answer with a list of messages
            if isinstance(message, list):
                return "; ".join(str(m) for m in message)
            return str(message)
        return None

    @staticmethod
    def _parse(resp: requests.Response, parse: Callable[[Any], T]) -> T:
        try:
            return parse(resp.json())
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            raise BackendError(
                resp.status_code,
                f"Malformed backend response (status {resp.status_code}): {exc}",
            )

    # --- users ---

    def user_exists(self, user_id: str) -> bool:
        """True iff GET /users/<id> answers 2xx. Never raises."""
        try:
            resp = self._request("GET", _path("users", user_id))
        except TransportError as exc:
            logger.warning("User check failed: %s", exc)
            return False
        return resp.ok

    # --- catalog ---

    def list_products(self) -> List[Product]:
        """All products; an empty list on any failure."""
        try:
            resp = self._request("GET", "/Products/all")
            if not resp.ok:
                raise BackendError(resp.status_code, f"Failed to load products: {resp.status_code}")
            return self._parse(resp, lambda data: [Product.from_json(p) for p in data])
        except (BackendError, TransportError, ValueError, TypeError, AttributeError) as exc:
            logger.warning("Product list unavailable: %s", exc)
            return []

    def get_product(self, product_id: str) -> Optional[Product]:
        resp = self._request("GET", _path("products", "id", product_id))
        if resp.status_code == 404:
            return None
        if not resp.ok:
            raise BackendError(resp.status_code, f"Failed to load product: {resp.status_code}")
        return self._parse(resp, Product.from_json)

    def create_product(self, new_product: NewProduct) -> Product:
        resp = self._request("POST", "/products/add", json=new_product.to_json())
        if not resp.ok:
            message = self._body_message(resp) or resp.text or resp.reason
            raise BackendError(resp.status_code, f"Failed to create product (status {resp.status_code}): {message}")
        return self._parse(resp, Product.from_json)

    # --- cart ---

    def fetch_cart(self, user_id: str) -> Cart:
        if not user_id:
            raise ValidationError("No user id available. Please log in.")

        resp = self._request("GET", _path("carrito", user_id))
        if resp.status_code == 404:
            return Cart.empty(user_id)
        if not resp.ok:
            raise BackendError(resp.status_code, f"HTTP error {resp.status_code} - {resp.reason}")
        return self._parse(resp, lambda data: Cart.from_json(data, user_id=user_id))

    def add_to_cart(self, user_id: str, product_id: str, quantity: int) -> Cart:
        resp = self._request(
            "POST",
            "/carrito/post",
            json={"userId": user_id, "productId": product_id, "cantidad": quantity},
        )
        if not resp.ok:
            message = self._body_message(resp) or resp.text
            raise BackendError(resp.status_code, message or f"Failed to add product (status {resp.status_code})")
        return self._parse(resp, lambda data: Cart.from_json(data, user_id=user_id))

    def remove_item(self, user_id: str, item_id: str) -> None:
        if not item_id:
            raise ValidationError("Item id cannot be empty.")

        resp = self._request("DELETE", _path("carrito", item_id), json={"userId": user_id})
        if not resp.ok:
            message = self._body_message(resp) or resp.text
            raise BackendError(resp.status_code, f"Failed to remove item (status {resp.status_code}): {message}")

    def clear_cart(self, user_id: str) -> None:
        resp = self._request("DELETE", _path("carrito", "clear", user_id))
        if not resp.ok:
            message = self._body_message(resp) or "Unknown error while clearing the cart"
            raise BackendError(resp.status_code, f"Failed to complete purchase (status {resp.status_code}): {message}")

    # --- comments ---

    def post_comment(self, product_id: str, payload: Dict[str, Any]) -> Comment:
        """Single attempt; retries live in `storefront.modules.comments.widget`."""
        resp = self._request("POST", _path("comments", product_id), json=payload)
        if not resp.ok:
            message = self._body_message(resp) or f"Failed to send comment: {resp.status_code}"
            raise BackendError(resp.status_code, message)
        return self._parse(resp, Comment.from_json)
