"""
Sale lifecycle request schemas
"""

from pydantic import BaseModel, Field

from ..models.sale import PaymentBreakdown


class CloseSaleRequest(BaseModel):
    """Payment for an active sale"""
    payment_breakdown: PaymentBreakdown = Field(..., description="Tender per payment method (cents)")
    tip_cents: int = Field(0, ge=0, description="Tip on top of the total (cents)")

    model_config = {
        "json_schema_extra": {
            "example": {
                "payment_breakdown": {"Cash": 12000, "Transfer": 10000, "Other": 0},
                "tip_cents": 2000
            }
        }
    }
