"""
Text transformation services.

LangChainTextTransformer calls the chat model. TransformationService
wraps a call with the post-gate bookkeeping: record the attempt, then
consume a free trial for non-subscribers whether or not the call worked.
"""

import logging
from typing import Callable, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from modules.entitlements.gate import GateContext
from modules.entitlements.ledger import EntitlementLedger
from modules.usage.interfaces import IUsageRecorder
from modules.usage.models import UsageAction
from modules.usage.token_counter import estimate_exchange_tokens

from .exceptions import TextTransformationError
from .interfaces import ITextTransformer
from .models import TransformOutput
from .prompts import SYSTEM_PROMPTS, TEMPERATURES, build_user_message
from .text_cleaner import PREFIXES, remove_prefixes

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"

# temperature -> chat model
LLMFactory = Callable[[float], BaseChatModel]


class LangChainTextTransformer:
    """
    Transformer backed by an OpenAI chat model through LangChain.

    Args:
        api_key: OpenAI API key
        model: Model identifier
        max_tokens: Completion token cap
        max_retries: Retries done by the client on transient errors
        timeout: Request timeout in seconds
        llm_factory: Build the chat model for a temperature (tests pass a fake)
    """

    def __init__(
        self,
        api_key: str = "",
        model: str = DEFAULT_MODEL,
        max_tokens: int = 2000,
        max_retries: int = 2,
        timeout: float = 60.0,
        llm_factory: Optional[LLMFactory] = None,
    ):
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens
        self._max_retries = max_retries
        self._timeout = timeout
        self._llm_factory = llm_factory or self._create_llm

    @property
    def model(self) -> str:
        return self._model

    def _create_llm(self, temperature: float) -> BaseChatModel:
        if not self._api_key:
            raise ValueError("OpenAI API key is required. Set OPENAI_API_KEY.")

        return ChatOpenAI(
            model=self._model,
            api_key=self._api_key,
            temperature=temperature,
            max_tokens=self._max_tokens,
            max_retries=self._max_retries,
            timeout=self._timeout,
        )

    async def transform(
        self,
        action: UsageAction,
        text: str,
        format: Optional[str] = None,
    ) -> TransformOutput:
        system_prompt = SYSTEM_PROMPTS[action]
        user_message = build_user_message(action, text, format)

        try:
            llm = self._llm_factory(TEMPERATURES[action])
            response = await llm.ainvoke([
                SystemMessage(content=system_prompt),
                HumanMessage(content=user_message),
            ])
        except Exception as e:
            logger.error(f"{action.value} call to {self._model} failed: {e}")
            raise TextTransformationError(action.value) from e

        content = response.content if isinstance(response.content, str) else str(response.content)
        cleaned = remove_prefixes(content, PREFIXES[action])

        usage = getattr(response, "usage_metadata", None)
        if usage and usage.get("total_tokens"):
            tokens_used = usage["total_tokens"]
        else:
            tokens_used = estimate_exchange_tokens(
                system_prompt, user_message, content, model=self._model
            )

        return TransformOutput(text=cleaned, model=self._model, tokens_used=tokens_used)


class TransformationService:
    """
    Runs an admitted transformation and its bookkeeping.

    The caller must have passed the request gate; this service never
    re-checks entitlement.
    """

    def __init__(
        self,
        transformer: ITextTransformer,
        recorder: IUsageRecorder,
        ledger: EntitlementLedger,
    ):
        self._transformer = transformer
        self._recorder = recorder
        self._ledger = ledger

    async def execute(
        self,
        context: GateContext,
        action: UsageAction,
        text: str,
        format: Optional[str] = None,
    ) -> TransformOutput:
        """
        Transform text for an admitted request.

        Raises:
            TextTransformationError: If the completion call failed; the
                attempt has still been recorded and charged
        """
        user_id = context.user.id

        try:
            output = await self._transformer.transform(action, text, format)
        except TextTransformationError as e:
            await self._recorder.record(
                user_id,
                action,
                input_length=len(text),
                success=False,
                error=e.message,
            )
            await self._charge_attempt(context)
            raise

        await self._recorder.record(
            user_id,
            action,
            input_length=len(text),
            output_length=len(output.text),
            model=output.model,
            tokens_used=output.tokens_used,
        )
        await self._charge_attempt(context)
        return output

    async def _charge_attempt(self, context: GateContext) -> None:
        if not context.is_subscribed:
            await self._ledger.increment_free_trial_usage(context.user.id)
