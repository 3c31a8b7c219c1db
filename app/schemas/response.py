from pydantic import BaseModel
from typing import Optional, Any, Dict, List

class ErrorResponse(BaseModel):
    """
    Standard error response structure.
    """
    error: str
    code: str
    details: Optional[Any] = None

class MessageResponse(BaseModel):
    """
    Plain acknowledgment.
    """
    success: bool = True
    message: str

class CartResponse(BaseModel):
    """
    Acknowledgment carrying the cart after a mutation.
    """
    message: str
    cart: List[Dict[str, Any]]
