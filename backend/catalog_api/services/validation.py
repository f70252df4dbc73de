"""
Product Field Validation

Runs on the raw JSON body of create/update requests before anything
touches the store. Every violated field is reported, not just the first.
"""
import logging
import math
from typing import Any, List

from pydantic import ValidationError

from ..exceptions import SchemaValidationError, ValidationFailedError, validation_messages
from ..models.products import ProductWrite

logger = logging.getLogger(__name__)


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def _is_non_negative_number(value: Any) -> bool:
    # bool is an int subclass but not a price
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value) and value >= 0
    except OverflowError:
        # int too large for a float column
        return False


def collect_violations(payload: Any) -> List[str]:
    """
    List every required-field violation in a product payload.

    Args:
        payload: Decoded JSON request body

    Returns:
        Human-readable messages, empty when the payload passes
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return ["Request body must be a JSON object"]

    errors = []

    if not _is_non_empty_string(payload.get("name")):
        errors.append("Name is required and must be a non-empty string")

    if not _is_non_empty_string(payload.get("description")):
        errors.append("Description is required and must be a non-empty string")

    if not _is_non_negative_number(payload.get("price")):
        errors.append("Price is required and must be a non-negative number")

    if not _is_non_empty_string(payload.get("category")):
        errors.append("Category is required and must be a non-empty string")

    return errors


def validate_product_payload(payload: Any) -> ProductWrite:
    """
    Validate a create/update body and return the writable fields.

    Raises:
        ValidationFailedError: Required fields missing or malformed
        SchemaValidationError: Length or type constraints violated
    """
    errors = collect_violations(payload)
    if errors:
        logger.warning(f"Product payload rejected: {errors}")
        raise ValidationFailedError(errors)

    try:
        return ProductWrite.model_validate(payload)
    except ValidationError as e:
        details = validation_messages(list(e.errors()))
        logger.warning(f"Product payload violates schema: {details}")
        raise SchemaValidationError(details) from e
