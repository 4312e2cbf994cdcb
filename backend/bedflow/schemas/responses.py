"""
Common response schemas.
"""
from pydantic import BaseModel
from typing import Optional


class MessageResponse(BaseModel):
    """Generic response with a message."""
    success: bool
    message: str
    data: Optional[dict] = None


class ErrorResponse(BaseModel):
    """Error body returned by the exception handlers."""
    error: str
    code: str
    detail: Optional[str] = None
