"""
Strips labels models like to prepend to their output.
"""

import re

from modules.usage.models import UsageAction


def _labels(*names: str) -> list[re.Pattern[str]]:
    # Each label may appear bold (**Label:**) or plain (Label:)
    patterns = []
    for name in names:
        escaped = re.escape(name)
        patterns.append(re.compile(rf"^\*\*{escaped}:\*\*\s*", re.IGNORECASE))
        patterns.append(re.compile(rf"^{escaped}:\s*", re.IGNORECASE))
    return patterns


REWRITE_PREFIXES = _labels("Improved Prompt", "Rewritten Prompt", "Rewritten", "Enhanced Prompt")
GRAMMAR_PREFIXES = _labels("Corrected Text", "Grammarized", "Corrected")
EMAIL_PREFIXES = _labels("Formatted Email", "Email", "Formatted")

PREFIXES: dict[UsageAction, list[re.Pattern[str]]] = {
    UsageAction.REWRITE: REWRITE_PREFIXES,
    UsageAction.GRAMMARIZE: GRAMMAR_PREFIXES,
    UsageAction.FORMAT_EMAIL: EMAIL_PREFIXES,
}


def remove_prefixes(text: str, prefixes: list[re.Pattern[str]]) -> str:
    """Remove any leading label in ``prefixes`` and trim whitespace."""
    cleaned = text.strip()
    for prefix in prefixes:
        cleaned = prefix.sub("", cleaned)
    return cleaned.strip()
