"""
System prompts for the text transformations.

Kept deliberately short; each ends by asking for bare output because
anything the model prepends is stripped by text_cleaner anyway.
"""

from modules.usage.models import UsageAction

REWRITE_PROMPT = """You are a professional prompt rewriting assistant. Rewrite the user's prompt into this structure:

You are a [ROLE].

Task:
[TASK]

Context:
[BACKGROUND / INPUT / CONSTRAINTS]

Objective:
[WHAT A GOOD ANSWER SHOULD ACHIEVE]

Format:
[OUTPUT STRUCTURE]

Rules:
- [RULE 1]
- [RULE 2]
- [RULE 3]

Keep the original intent. Infer reasonable values for sections the prompt leaves out.
Return ONLY the rewritten prompt, with no label such as "Rewritten Prompt:"."""

GRAMMAR_PROMPT = """You are a professional grammar and spelling correction assistant.
Fix grammar, spelling and punctuation, and improve clarity where needed.
Keep the original meaning, tone and structure.
Return ONLY the corrected text, with no label such as "Corrected:"."""

EMAIL_FORMAT_PROMPT = """You are a professional email formatting assistant. Turn the user's content into a well-formed email:

Subject: [Clear and concise subject line]

Dear [Recipient Name/Title],

[Opening paragraph]

[Body paragraph(s)]

[Closing paragraph]

Best regards,
[Your Name]

Fix grammar and punctuation, use a professional tone, and keep the original intent.
Return ONLY the formatted email, with no label such as "Formatted Email:"."""

SYSTEM_PROMPTS: dict[UsageAction, str] = {
    UsageAction.REWRITE: REWRITE_PROMPT,
    UsageAction.GRAMMARIZE: GRAMMAR_PROMPT,
    UsageAction.FORMAT_EMAIL: EMAIL_FORMAT_PROMPT,
}

# Rewriting benefits from some variety; corrections should be conservative
TEMPERATURES: dict[UsageAction, float] = {
    UsageAction.REWRITE: 0.7,
    UsageAction.GRAMMARIZE: 0.3,
    UsageAction.FORMAT_EMAIL: 0.3,
}


def build_user_message(action: UsageAction, text: str, format: str | None = None) -> str:
    """User message for an action; rewrite may carry a target format."""
    if action is UsageAction.REWRITE and format and format != "default":
        return f"{text}\n\nPreferred output format: {format}"
    return text
