from __future__ import annotations

from typing import Any, Mapping, Optional


class CatalogError(Exception):
    """Base class for catalog failures the web layer knows how to present."""


class ProductNotFoundError(CatalogError):
    def __init__(self, product_id: Any):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found.")


class ProductValidationError(CatalogError):
    """Input was rejected; nothing was written.

    ``errors`` maps a form field name to a message, ``values`` holds the raw
    submitted input so the form can be shown again unchanged.
    """

    def __init__(
        self,
        errors: Mapping[str, str],
        message: str = "Product input is invalid.",
        *,
        values: Optional[Mapping[str, Any]] = None,
    ):
        self.errors = dict(errors)
        self.values = dict(values or {})
        super().__init__(message)


class ProductDeleteConflictError(CatalogError):
    def __init__(self, product_id: int, message: str, order_count: int = 0):
        self.product_id = product_id
        self.order_count = order_count
        self.message = message
        super().__init__(message)


__all__ = [
    "CatalogError",
    "ProductDeleteConflictError",
    "ProductNotFoundError",
    "ProductValidationError",
]
