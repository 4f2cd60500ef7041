"""
Text transformation module exceptions.
"""

from shared.exceptions import ExternalServiceError


class TextTransformationError(ExternalServiceError):
    """Raised when the text-completion service fails or is unreachable."""

    def __init__(self, action: str):
        super().__init__(
            "Text transformation service is unavailable. Please try again later.",
            service="openai",
            code="TRANSFORMATION_FAILED",
            details={"action": action},
        )
