"""
Text transformation module data models.
"""

from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field

from shared.models import CamelModel


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must be a non-empty string")
    return value


NonBlankText = Annotated[str, AfterValidator(_require_text)]


class TransformOutput(BaseModel):
    """What a transformer returns for one call."""

    text: str = Field(..., description="Cleaned model output")
    model: str = Field(..., description="Model that produced it")
    tokens_used: int = Field(default=0, ge=0)


class RewriteRequest(CamelModel):
    """Request body for POST /rewrite-prompt."""

    prompt: NonBlankText
    format: Optional[str] = None


class TextRequest(CamelModel):
    """Request body for POST /grammarize and POST /format-email."""

    text: NonBlankText


class RewriteResponse(CamelModel):
    success: bool = True
    original_prompt: str
    rewritten_prompt: str
    format: str = "default"


class GrammarizeResponse(CamelModel):
    success: bool = True
    original_text: str
    grammarized_text: str


class FormatEmailResponse(CamelModel):
    success: bool = True
    original_text: str
    formatted_email: str
