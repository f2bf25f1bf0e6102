"""
Base data models
Shared model bases and money helpers
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class TimestampMixin(BaseModel):
    """Timestamp mixin"""
    created_at: Optional[datetime] = None


class BaseEntity(BaseModel):
    """Base entity model"""

    model_config = {"from_attributes": True, "populate_by_name": True}


def cents_to_mxn(cents: int) -> float:
    """Cents to pesos"""
    return cents / 100
