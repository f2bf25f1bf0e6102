"""
Menu admin request schemas
"""

from typing import Optional

from pydantic import BaseModel, Field


class CategoryUpdateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Category name")
    icon: Optional[str] = Field(None, description="Display icon")
