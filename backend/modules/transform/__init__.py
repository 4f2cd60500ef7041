"""
Text transformation module.

Prompt rewriting, grammar correction and email formatting through an
OpenAI chat model.

Public API:
- ITextTransformer / LangChainTextTransformer
- TransformationService: run an admitted request and charge the attempt
- Request/response models and TextTransformationError
"""

from .interfaces import ITextTransformer
from .models import (
    TransformOutput,
    RewriteRequest,
    TextRequest,
    RewriteResponse,
    GrammarizeResponse,
    FormatEmailResponse,
)
from .exceptions import TextTransformationError
from .service import LangChainTextTransformer, TransformationService
from .text_cleaner import remove_prefixes

__all__ = [
    "ITextTransformer",
    "TransformOutput",
    "RewriteRequest",
    "TextRequest",
    "RewriteResponse",
    "GrammarizeResponse",
    "FormatEmailResponse",
    "TextTransformationError",
    "LangChainTextTransformer",
    "TransformationService",
    "remove_prefixes",
]
