"""
app/services/cart_service.py

Purpose: Per-user cart management

- List, add, remove and update-quantity on the embedded cart
- Every mutation is one conditional update scoped by email and entry id
- Entry ids match whether stored as text or as ObjectId
"""

from typing import Any, Dict, List, Optional

import bson
from bson.errors import InvalidDocument
from pymongo import ReturnDocument

from app.core.exceptions import ValidationError, NotFoundError, ConflictError
from app.core.logging import get_logger, LogContext, mask_email
from app.models.user import (
    build_cart_entry,
    cart_entry_match,
    serialize_cart,
)
from utils.validation_utils import MAX_QUANTITY, parse_quantity, validate_product_id

logger = get_logger(__name__)


async def get_cart(users, email: str) -> List[Dict[str, Any]]:
    """
    Returns the user's cart.

    Raises:
        NotFoundError: No record for this email
    """
    user = await users.find_one({"email": email}, {"cart": 1})
    if not user:
        raise NotFoundError("User not found")

    return serialize_cart(user.get("cart"))


async def add_to_cart(users, email: str, product: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Appends a product with quantity 1, unless it is already in the cart.

    Args:
        users: Users collection
        email: Authenticated email
        product: Product payload; "id" required, other fields stored verbatim

    Raises:
        ValidationError: Missing product or id, or fields the store cannot hold
        ConflictError: Product already in cart
        NotFoundError: No record for this email
    """
    if not product or not isinstance(product, dict):
        raise ValidationError("Product data required")

    product_id = product.get("id")
    if not validate_product_id(product_id):
        raise ValidationError("Product ID required")

    masked = mask_email(email)
    entry = build_cart_entry(product)

    try:
        bson.encode({"entry": entry})
    except (OverflowError, InvalidDocument):
        raise ValidationError("Product data cannot be stored", details={"id": str(product_id)})

    with LogContext(email=masked, product_id=str(product_id)):
        # Insert only if no entry with this id exists, in a single update
        result = await users.update_one(
            {
                "email": email,
                "cart": {"$not": {"$elemMatch": cart_entry_match(entry["id"])}},
            },
            {"$push": {"cart": entry}}
        )

        if result.matched_count == 0:
            existing = await users.find_one({"email": email}, {"_id": 1})
            if not existing:
                raise NotFoundError("User not found")

            logger.info("Duplicate cart add rejected")
            raise ConflictError(details={"id": str(product_id)})

        logger.info("Product added to cart")
        return {"success": True, "message": "Product added to cart"}


async def remove_from_cart(users, email: str, product_id: str) -> Dict[str, Any]:
    """
    Removes the entry for a product.

    Returns:
        {"message", "cart"} with the cart after removal

    Raises:
        ValidationError: Empty product id
        NotFoundError: No such entry (the cart is left untouched)
    """
    if not validate_product_id(product_id):
        raise ValidationError("Product ID required")

    masked = mask_email(email)

    with LogContext(email=masked, product_id=product_id):
        match = cart_entry_match(product_id)
        updated = await users.find_one_and_update(
            {"email": email, "cart": {"$elemMatch": match}},
            {"$pull": {"cart": match}},
            projection={"cart": 1},
            return_document=ReturnDocument.AFTER,
        )

        if updated is None:
            logger.info("Cart entry to remove not found")
            raise NotFoundError("Product not found in cart")

        logger.info("Product removed from cart")
        return {
            "message": "Product removed from cart",
            "cart": serialize_cart(updated.get("cart")),
        }


async def update_quantity(users, email: str, product_id: str, quantity: Any) -> Dict[str, Any]:
    """
    Sets the quantity of one cart entry; other entries and fields are untouched.

    Returns:
        {"message", "cart"} with the cart after the update

    Raises:
        ValidationError: Empty product id or quantity not an integer >= 1
        NotFoundError: No such entry
    """
    if not validate_product_id(product_id):
        raise ValidationError("Product ID required")

    parsed = parse_quantity(quantity)
    if parsed is None:
        raise ValidationError(
            f"Quantity must be an integer between 1 and {MAX_QUANTITY}",
            details={"quantity": quantity if isinstance(quantity, (int, float, str)) else None}
        )

    masked = mask_email(email)

    with LogContext(email=masked, product_id=product_id):
        updated = await users.find_one_and_update(
            {"email": email, "cart": {"$elemMatch": cart_entry_match(product_id)}},
            {"$set": {"cart.$.quantity": parsed}},
            projection={"cart": 1},
            return_document=ReturnDocument.AFTER,
        )

        if updated is None:
            logger.info("Cart entry to update not found")
            raise NotFoundError("Product not found in cart")

        logger.info(f"Cart quantity set to {parsed}")
        return {
            "message": "Cart updated",
            "cart": serialize_cart(updated.get("cart")),
        }