"""
app/api/cart.py

Purpose: Cart endpoints

- All routes require a session token
- The token's email selects the cart; clients never name another user
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from app.core.security import get_current_email
from app.db.mongo import get_users_collection
from app.schemas.cart import AddToCartRequest, UpdateQuantityRequest
from app.schemas.response import MessageResponse, CartResponse
from app.services import cart_service

router = APIRouter(prefix="/cart")


@router.get("", response_model=List[Dict[str, Any]])
async def get_cart(
    email: str = Depends(get_current_email),
    users=Depends(get_users_collection),
):
    return await cart_service.get_cart(users, email)


@router.post("/add", response_model=MessageResponse)
async def add_to_cart(
    body: AddToCartRequest,
    email: str = Depends(get_current_email),
    users=Depends(get_users_collection),
):
    """
    Adds a product with quantity 1. Adding a product twice is rejected.
    """
    return await cart_service.add_to_cart(users, email, body.product)


@router.delete("/remove/{product_id}", response_model=CartResponse)
async def remove_from_cart(
    product_id: str,
    email: str = Depends(get_current_email),
    users=Depends(get_users_collection),
):
    return await cart_service.remove_from_cart(users, email, product_id)


@router.patch("/update/{product_id}", response_model=CartResponse)
async def update_quantity(
    product_id: str,
    body: UpdateQuantityRequest,
    email: str = Depends(get_current_email),
    users=Depends(get_users_collection),
):
    """
    Sets the quantity of one cart entry.
    """
    return await cart_service.update_quantity(users, email, product_id, body.quantity)
