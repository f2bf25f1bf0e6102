from typing import Any, Dict
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error envelope"""
    success: bool = Field(False, description="Request failed")
    error_code: str = Field(description="Machine readable error code")
    message: str = Field(description="Human readable message")
    details: Dict[str, Any] = Field(default_factory=dict, description="Error context")

    model_config = {
        "json_schema_extra": {
            "example": {
                "success": False,
                "error_code": "PAYMENT_MISMATCH",
                "message": "Payment is short by $5.00",
                "details": {"remaining_cents": 500, "required_cents": 22000, "tendered_cents": 21500}
            }
        }
    }
