from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class StorefrontError(Exception):
    """Base class for everything a view may need to show the user."""

    code = "storefront_error"


class ValidationError(StorefrontError):
    """A client-side precondition failed; no request was sent."""

    code = "validation_error"


@dataclass
class BackendError(StorefrontError):
    """The backend answered with a non-2xx status that is not an absence."""

    status_code: int
    message: str
    code = "backend_error"

    def __str__(self) -> str:
        return self.message


@dataclass
class TransportError(StorefrontError):
    """Connection refused, DNS failure, timeout."""

    message: str
    cause: Optional[BaseException] = None
    code = "transport_error"

    def __str__(self) -> str:
        return self.message


class CartBusy(StorefrontError):
    """A mutation for the same cart is already in flight."""

    code = "busy"
