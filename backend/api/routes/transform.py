"""
Text transformation endpoints.

Each endpoint is gated: the request must carry a valid token for a user
with a subscription or free trials left. An admitted attempt consumes a
trial (for non-subscribers) even if the model call fails.
"""

from fastapi import APIRouter, Depends

from modules.entitlements.gate import GateContext
from modules.transform.models import (
    FormatEmailResponse,
    GrammarizeResponse,
    RewriteRequest,
    RewriteResponse,
    TextRequest,
)
from modules.transform.service import TransformationService
from modules.usage.models import UsageAction

from ..dependencies import get_transformation_service
from ..middleware.auth import require_entitlement
from ..middleware.rate_limit import rate_limit

router = APIRouter(dependencies=[Depends(rate_limit("api"))])


@router.post("/rewrite-prompt", response_model=RewriteResponse)
async def rewrite_prompt(
    request: RewriteRequest,
    context: GateContext = Depends(require_entitlement),
    service: TransformationService = Depends(get_transformation_service),
) -> RewriteResponse:
    """Rewrite a prompt into a structured, more effective one."""
    output = await service.execute(context, UsageAction.REWRITE, request.prompt, request.format)
    return RewriteResponse(
        original_prompt=request.prompt,
        rewritten_prompt=output.text,
        format=request.format or "default",
    )


@router.post("/grammarize", response_model=GrammarizeResponse)
async def grammarize(
    request: TextRequest,
    context: GateContext = Depends(require_entitlement),
    service: TransformationService = Depends(get_transformation_service),
) -> GrammarizeResponse:
    """Correct grammar, spelling and punctuation."""
    output = await service.execute(context, UsageAction.GRAMMARIZE, request.text)
    return GrammarizeResponse(original_text=request.text, grammarized_text=output.text)


@router.post("/format-email", response_model=FormatEmailResponse)
async def format_email(
    request: TextRequest,
    context: GateContext = Depends(require_entitlement),
    service: TransformationService = Depends(get_transformation_service),
) -> FormatEmailResponse:
    """Turn rough content into a well-formed email."""
    output = await service.execute(context, UsageAction.FORMAT_EMAIL, request.text)
    return FormatEmailResponse(original_text=request.text, formatted_email=output.text)
