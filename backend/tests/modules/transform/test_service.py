"""Tests for text transformation."""

from datetime import timedelta

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from modules.entitlements.gate import RequestGate
from modules.transform.exceptions import TextTransformationError
from modules.transform.prompts import SYSTEM_PROMPTS, TEMPERATURES
from modules.transform.service import LangChainTextTransformer, TransformationService
from modules.usage.models import UsageAction

from tests.conftest import create_user
from tests.fakes import FakeTextTransformer


class StubChatModel:
    """Returns a fixed message and remembers what it was sent."""

    def __init__(self, content: str, total_tokens: int = 0, error: Exception = None):
        self.content = content
        self.total_tokens = total_tokens
        self.error = error
        self.messages = None

    async def ainvoke(self, messages):
        self.messages = messages
        if self.error is not None:
            raise self.error
        usage = None
        if self.total_tokens:
            usage = {"input_tokens": 10, "output_tokens": self.total_tokens - 10, "total_tokens": self.total_tokens}
        return AIMessage(content=self.content, usage_metadata=usage)


class TestLangChainTextTransformer:
    @pytest.mark.asyncio
    async def test_sends_system_and_user_messages(self):
        stub = StubChatModel("Fixed text.", total_tokens=57)
        temperatures = []

        def factory(temperature):
            temperatures.append(temperature)
            return stub

        transformer = LangChainTextTransformer(model="gpt-4o-mini", llm_factory=factory)
        output = await transformer.transform(UsageAction.GRAMMARIZE, "fix  this")

        assert output.text == "Fixed text."
        assert output.model == "gpt-4o-mini"
        assert output.tokens_used == 57
        assert temperatures == [TEMPERATURES[UsageAction.GRAMMARIZE]]

        system, human = stub.messages
        assert isinstance(system, SystemMessage)
        assert system.content == SYSTEM_PROMPTS[UsageAction.GRAMMARIZE]
        assert isinstance(human, HumanMessage)
        assert human.content == "fix  this"

    @pytest.mark.asyncio
    async def test_rewrite_uses_higher_temperature_and_format(self):
        stub = StubChatModel("You are a chef.", total_tokens=20)
        temperatures = []

        def factory(temperature):
            temperatures.append(temperature)
            return stub

        transformer = LangChainTextTransformer(llm_factory=factory)
        await transformer.transform(UsageAction.REWRITE, "make a cake", format="markdown")

        assert temperatures == [0.7]
        assert stub.messages[1].content.endswith("Preferred output format: markdown")

    @pytest.mark.asyncio
    async def test_strips_preamble(self):
        stub = StubChatModel("**Formatted Email:**\n\nSubject: Hello", total_tokens=20)
        transformer = LangChainTextTransformer(llm_factory=lambda t: stub)
        output = await transformer.transform(UsageAction.FORMAT_EMAIL, "say hello")
        assert output.text == "Subject: Hello"

    @pytest.mark.asyncio
    async def test_estimates_tokens_without_usage_metadata(self, monkeypatch):
        monkeypatch.setattr(
            "modules.transform.service.estimate_exchange_tokens",
            lambda system, user, output, model: 99,
        )
        model = FakeListChatModel(responses=["Corrected: All good."])
        transformer = LangChainTextTransformer(llm_factory=lambda t: model)

        output = await transformer.transform(UsageAction.GRAMMARIZE, "al good")

        assert output.text == "All good."
        assert output.tokens_used == 99

    @pytest.mark.asyncio
    async def test_model_failure(self):
        stub = StubChatModel("", error=TimeoutError("read timed out"))
        transformer = LangChainTextTransformer(llm_factory=lambda t: stub)
        with pytest.raises(TextTransformationError) as exc_info:
            await transformer.transform(UsageAction.REWRITE, "anything")
        assert exc_info.value.details["action"] == "rewrite"
        assert exc_info.value.code == "TRANSFORMATION_FAILED"

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        """Without a key the default model cannot be built; that is a service failure."""
        transformer = LangChainTextTransformer(api_key="")
        with pytest.raises(TextTransformationError):
            await transformer.transform(UsageAction.GRAMMARIZE, "anything")


class TestTransformationService:
    @pytest.fixture
    def gate(self, auth_service, ledger):
        return RequestGate(auth_service, ledger)

    @pytest.fixture
    def service(self, transformer, recorder, ledger):
        return TransformationService(transformer, recorder, ledger)

    async def admitted(self, gate, issuer, user):
        return await gate.admit(issuer.issue(user.id, user.email))

    @pytest.mark.asyncio
    async def test_success_records_and_charges(self, service, gate, issuer, users, recorder):
        user = await create_user(users, trials_used=2)
        context = await self.admitted(gate, issuer, user)

        output = await service.execute(context, UsageAction.GRAMMARIZE, "hello there")

        assert output.text == "GRAMMARIZE: HELLO THERE"
        assert (await users.get_by_id(user.id)).free_trials_used == 3
        [stats] = await recorder.get_stats(user.id)
        assert stats.count == 1
        assert stats.total_tokens == 42
        assert stats.total_input_length == len("hello there")

    @pytest.mark.asyncio
    async def test_failure_still_records_and_charges(self, service, gate, issuer, users, recorder, transformer):
        """The attempt is the billable unit, even when the model call fails."""
        transformer.fail = True
        user = await create_user(users, trials_used=2)
        context = await self.admitted(gate, issuer, user)

        with pytest.raises(TextTransformationError):
            await service.execute(context, UsageAction.REWRITE, "hello")

        assert (await users.get_by_id(user.id)).free_trials_used == 3
        [stats] = await recorder.get_stats(user.id)
        assert stats.count == 1
        assert stats.total_output_length == 0

    @pytest.mark.asyncio
    async def test_subscribers_are_not_charged(self, service, gate, issuer, users, ledger, clock):
        user = await create_user(users, trials_used=10)
        await ledger.activate_subscription(user.id, clock() + timedelta(days=30))
        context = await self.admitted(gate, issuer, user)

        await service.execute(context, UsageAction.FORMAT_EMAIL, "hello")

        assert (await users.get_by_id(user.id)).free_trials_used == 10

    @pytest.mark.asyncio
    async def test_last_trial_then_exhausted(self, service, gate, issuer, users):
        """9 used + one admitted attempt -> 10, and the gate then denies."""
        from modules.entitlements.exceptions import EntitlementExceededError

        user = await create_user(users, trials_used=9)
        context = await self.admitted(gate, issuer, user)
        assert context.remaining_trials == 1

        await service.execute(context, UsageAction.GRAMMARIZE, "last one")

        assert (await users.get_by_id(user.id)).free_trials_used == 10
        with pytest.raises(EntitlementExceededError):
            await self.admitted(gate, issuer, user)

    @pytest.mark.asyncio
    async def test_passes_format_through(self, gate, issuer, users, recorder, ledger):
        transformer = FakeTextTransformer()
        service = TransformationService(transformer, recorder, ledger)
        user = await create_user(users)
        context = await self.admitted(gate, issuer, user)

        await service.execute(context, UsageAction.REWRITE, "a prompt", format="json")

        assert transformer.calls == [(UsageAction.REWRITE, "a prompt", "json")]
