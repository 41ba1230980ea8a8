from pydantic import BaseModel
from typing import Optional


class MessageResponse(BaseModel):
    """Standard success response"""
    message: str
    data: Optional[dict] = None
