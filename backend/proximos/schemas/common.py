"""
Shared response shapes: error envelope and page metadata.
"""
from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: Any = None


class PageFields(BaseModel):
    """Pagination block carried by every list response (data holds the rows)."""
    page_number: int
    page_size: int
    total_items: int
    total_pages: int
