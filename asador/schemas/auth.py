"""
Auth request / response schemas
"""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    password: str = Field(..., description="Shared register password")

    model_config = {"json_schema_extra": {"example": {"password": "s3cret"}}}


class SessionInfo(BaseModel):
    authenticated: bool = Field(..., description="Caller holds a valid session")
    auth_enabled: bool = Field(..., description="Password protection is configured")
