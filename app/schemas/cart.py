"""
app/schemas/cart.py

Purpose: Cart request payloads

- Product payload is free-form apart from its identifier
- Quantity validated by the cart service so bad values return 400
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any


class AddToCartRequest(BaseModel):
    product: Optional[Dict[str, Any]] = Field(
        None,
        description="Product fields stored verbatim; 'id' is required"
    )

    model_config = ConfigDict(
        json_schema_extra={"example": {"product": {"id": "p1", "name": "Mug", "price": 12.5}}}
    )


class UpdateQuantityRequest(BaseModel):
    quantity: Optional[Any] = Field(None, description="New quantity, integer >= 1")

    model_config = ConfigDict(
        json_schema_extra={"example": {"quantity": 3}}
    )
