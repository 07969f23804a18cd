"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=64, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class ApiKeyResponse(BaseModel):
    """Bearer token returned after a successful login."""

    api_key: str = Field(..., description="API key to send as Authorization: Bearer <api_key>")
    token_type: str = Field(default="bearer", description="Token type")


class CurrentUser(BaseModel):
    """Authenticated account (id, username, admin flag) for dependency injection."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    is_admin: bool
