"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for API payloads.

    The web dashboard and the browser extension speak camelCase JSON,
    so fields are aliased on the way in and out. Python code keeps
    snake_case attribute names.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class AuthenticatedUser(BaseModel):
    """
    Represents an authenticated user in the system.

    Built by the auth service after the session token has been verified
    and the account has been confirmed active. Made available to route
    handlers via dependency injection.
    """

    id: str = Field(..., description="User ID")
    email: EmailStr = Field(..., description="User's email address")
    name: str = Field(..., description="Display name")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",
    }
