"""Auth Schemas — login request and token response.

Invariants:
    - username: 1-100 chars, stripped, non-empty
    - password: 1-100 chars, never echoed back
"""

from pydantic import BaseModel, Field, field_validator


class AuthRequest(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=100)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("username cannot be empty or whitespace")
        return v


class AuthResponse(BaseModel):
    token: str
