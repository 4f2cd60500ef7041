"""
Usage tracking module data models.

These models define the data structures used by the usage module
and exposed to other modules through the interface.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from shared.models import CamelModel


class UsageAction(str, Enum):
    """The text transformations a user can run."""

    REWRITE = "rewrite"
    GRAMMARIZE = "grammarize"
    FORMAT_EMAIL = "format-email"


class UsageRecord(BaseModel):
    """
    A single transformation attempt.

    Append-only. Successful and failed attempts are both recorded.
    Records are history only; entitlement decisions never read them.
    """

    id: str = Field(..., description="Record ID (UUID)")
    user_id: str = Field(..., description="User who made the request")
    action: UsageAction = Field(..., description="Transformation that ran")
    input_length: int = Field(default=0, ge=0, description="Characters sent")
    output_length: int = Field(default=0, ge=0, description="Characters returned")
    model: Optional[str] = Field(None, description="Model identifier")
    tokens_used: int = Field(default=0, ge=0, description="Total tokens consumed")
    success: bool = Field(default=True)
    error: Optional[str] = Field(None, description="Failure message for failed attempts")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ActionStats(CamelModel):
    """Aggregated usage for one action."""

    action: UsageAction
    count: int = 0
    total_tokens: int = 0
    total_input_length: int = 0
    total_output_length: int = 0
