"""
app/models/user.py

Purpose: User document model

- Email-keyed user record with embedded cart
- Login code and its expiry
- Cart-line entries and identifier matching
- Conversion of stored documents to JSON-safe dicts
"""

import re

from bson import ObjectId
from datetime import datetime
from typing import Any, Dict, List, Optional

from utils.time_utils import utcnow
from utils.validation_utils import fits_int64


# Fields never returned to clients
PRIVATE_FIELDS = ("_id", "otp", "otp_expires_at")

INTEGER_ID_PATTERN = re.compile(r"^-?[0-9]+$")


def new_user_fields(now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Fields written only when a record is created for an unseen email.
    """
    return {
        "cart": [],
        "created_at": now or utcnow(),
    }


def product_id_candidates(product_id: Any) -> List[Any]:
    """
    Every stored representation a product identifier may take.

    A 24-hex identifier matches both the string and the equivalent ObjectId;
    an ObjectId matches itself and its hex string. Path parameters arrive as
    text, so canonical digit strings ("42", not "042") that fit in 64 bits
    also match integer ids.
    """
    if isinstance(product_id, ObjectId):
        return [product_id, str(product_id)]

    candidates = [product_id]
    if isinstance(product_id, str):
        text = product_id.strip()
        if text != product_id:
            candidates.append(text)
        if ObjectId.is_valid(text):
            candidates.append(ObjectId(text))
        elif INTEGER_ID_PATTERN.match(text):
            number = int(text)
            if str(number) == text and fits_int64(number):
                candidates.append(number)
    elif isinstance(product_id, int) and not isinstance(product_id, bool):
        candidates.append(str(product_id))
    return candidates


def cart_entry_match(product_id: Any) -> Dict[str, Any]:
    """
    Predicate selecting the cart entry for a product, by "id" or a legacy
    "_id" field, in either representation.
    """
    candidates = product_id_candidates(product_id)
    return {
        "$or": [
            {"id": {"$in": candidates}},
            {"_id": {"$in": candidates}},
        ]
    }


def build_cart_entry(product: Dict[str, Any]) -> Dict[str, Any]:
    """
    New cart line: the client's fields verbatim, quantity reset to 1.
    """
    entry = dict(product)
    if isinstance(entry.get("id"), str):
        entry["id"] = entry["id"].strip()
    entry["quantity"] = 1
    return entry


def to_jsonable(value: Any) -> Any:
    """
    Converts BSON values (ObjectId, datetime) nested in a document to JSON types.
    """
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


def serialize_cart(cart: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return to_jsonable(list(cart or []))


def sanitize_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """
    Strips the login code and internal id before a record leaves the service.
    """
    public = {key: value for key, value in user.items() if key not in PRIVATE_FIELDS}
    public.setdefault("cart", [])
    return to_jsonable(public)
