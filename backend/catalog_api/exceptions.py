"""
Catalog Exception Hierarchy

Closed set of error categories surfaced by the API, and the single function
that maps any exception raised while handling a request to an HTTP status
and JSON body.
"""
from typing import Any, Dict, List, Optional, Tuple

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError


class CatalogError(Exception):
    """
    Base exception for all catalog API errors.

    Every subclass carries the HTTP status it maps to, a short `error`
    label, and optionally an itemized `details` list.
    """

    status_code: int = 400

    def __init__(
        self,
        error: str,
        details: Optional[List[str]] = None,
        message: Optional[str] = None
    ):
        self.error = error
        self.details = details
        self.message = message
        super().__init__(message or error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API error response format."""
        body: Dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        if self.message is not None:
            body["message"] = self.message
        return body


class ValidationFailedError(CatalogError):
    """
    Required product fields missing or malformed.

    Examples:
    - name is empty after trimming
    - price is negative or not a number
    """

    def __init__(self, details: List[str]):
        super().__init__("Validation failed", details)


class SchemaValidationError(CatalogError):
    """
    Product violates a schema constraint.

    Examples:
    - name longer than 100 characters
    - inStock is not a boolean
    """

    def __init__(self, details: List[str]):
        super().__init__("Validation Error", details)


class ProductNotFoundError(CatalogError):
    """No product stored under the requested ID."""

    status_code = 404

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("Product not found")


class InvalidProductIdError(CatalogError):
    """ID cannot address any product (not a well-formed identifier)."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("Invalid product ID format")


class DuplicateProductError(CatalogError):
    """Write rejected by a uniqueness constraint in the store."""

    def __init__(self):
        super().__init__("Duplicate field value entered")


class MissingSearchQueryError(CatalogError):
    """Name search called without the `q` parameter."""

    def __init__(self):
        super().__init__('Search query parameter "q" is required')


class AuthenticationRequiredError(CatalogError):
    """API key configured but no x-api-key header sent."""

    status_code = 401

    def __init__(self):
        super().__init__(
            "Authentication required. Please provide API key in x-api-key header."
        )


class InvalidApiKeyError(CatalogError):
    """x-api-key header does not match the configured key."""

    status_code = 403

    def __init__(self):
        super().__init__("Invalid API key. Access denied.")


def validation_messages(errors: List[Dict[str, Any]]) -> List[str]:
    messages = []
    for err in errors:
        # Our own field validators already name the field in the message
        if err.get("type") == "value_error" and "error" in err.get("ctx", {}):
            messages.append(str(err["ctx"]["error"]))
            continue
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        msg = err.get("msg", "Invalid value")
        messages.append(f"{loc}: {msg}" if loc else msg)
    return messages


def _is_unique_violation(exc: IntegrityError) -> bool:
    text = str(exc.orig).lower()
    return "unique" in text or "duplicate key" in text


def classify_error(exc: Exception, production: bool = False) -> Tuple[int, Dict[str, Any]]:
    """
    Map an exception to an HTTP status code and response body.

    Args:
        exc: Exception raised while handling a request
        production: Hide internal error messages when True

    Returns:
        (status_code, body) where body always has an `error` field
    """
    if isinstance(exc, CatalogError):
        return exc.status_code, exc.to_dict()

    if isinstance(exc, (ValidationError, RequestValidationError)):
        details = validation_messages(list(exc.errors()))
        return 400, SchemaValidationError(details).to_dict()

    if isinstance(exc, IntegrityError):
        if _is_unique_violation(exc):
            return 400, DuplicateProductError().to_dict()
        return 400, SchemaValidationError([str(exc.orig)]).to_dict()

    return 500, {
        "error": "Internal server error",
        "message": "Something went wrong" if production else str(exc)
    }
