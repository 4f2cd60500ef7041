"""
Text transformation module interface.
"""

from typing import Optional, Protocol, runtime_checkable

from modules.usage.models import UsageAction

from .models import TransformOutput


@runtime_checkable
class ITextTransformer(Protocol):
    """The text-completion collaborator."""

    async def transform(
        self,
        action: UsageAction,
        text: str,
        format: Optional[str] = None,
    ) -> TransformOutput:
        """
        Run one transformation.

        Raises:
            TextTransformationError: If the completion call fails
        """
        ...
