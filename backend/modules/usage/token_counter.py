"""
Token counting utilities.

Fallback token estimates for when the model response carries no usage
metadata. Uses tiktoken (via LangChain's transitive dependency).
"""

import tiktoken

# Cache encoders to avoid repeated initialization
_encoders: dict[str, tiktoken.Encoding] = {}

# Every chat message carries role markers; every reply is primed
MESSAGE_OVERHEAD = 4
REPLY_PRIMING = 2


def get_encoder(model: str) -> tiktoken.Encoding:
    """
    Get the tokenizer for a model.

    Newer OpenAI models (gpt-4o family) use o200k_base; everything else
    is approximated with cl100k_base.
    """
    encoding_name = "o200k_base" if model.startswith("gpt-4o") else "cl100k_base"

    if encoding_name not in _encoders:
        _encoders[encoding_name] = tiktoken.get_encoding(encoding_name)

    return _encoders[encoding_name]


def count_tokens(text: str, model: str = "gpt-4o-mini") -> int:
    """Count tokens in a text string."""
    if not text:
        return 0
    return len(get_encoder(model).encode(text))


def estimate_exchange_tokens(
    system_prompt: str,
    user_text: str,
    output_text: str,
    model: str = "gpt-4o-mini",
) -> int:
    """
    Estimate total tokens for one system + user -> assistant exchange.

    Args:
        system_prompt: System message content
        user_text: User message content
        output_text: Generated content
        model: Model name for tokenizer selection

    Returns:
        Estimated input plus output token count
    """
    total = 2 * MESSAGE_OVERHEAD + REPLY_PRIMING
    total += count_tokens(system_prompt, model)
    total += count_tokens(user_text, model)
    total += count_tokens(output_text, model)
    return total


def reset_encoder_cache() -> None:
    """Reset the encoder cache (for testing)."""
    global _encoders
    _encoders = {}
