"""
Caller identity model.

Dependencies: pydantic
System role: Authenticated user passed from the API layer to services
"""

from pydantic import BaseModel


class AuthenticatedUser(BaseModel):
    """Identity resolved from a verified bearer token."""

    id: int
    email: str | None = None
