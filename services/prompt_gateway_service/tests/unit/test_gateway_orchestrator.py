"""Tests for the gateway orchestrator state machine and failure mapping."""

from __future__ import annotations

import json
from typing import Any
from uuid import UUID

import pytest

from services.prompt_gateway_service.config import Settings
from services.prompt_gateway_service.enums import ActionKind, ProcessingStage, ProviderName
from services.prompt_gateway_service.error_handling import (
    raise_parsing_error,
    raise_provider_call_error,
)
from services.prompt_gateway_service.error_types import ErrorCode, ProviderFailureKind
from services.prompt_gateway_service.implementations.chat_completions_provider_impl import (
    ChatCompletionsProviderImpl,
)
from services.prompt_gateway_service.implementations.gateway_orchestrator_impl import (
    GatewayOrchestratorImpl,
)
from services.prompt_gateway_service.internal_models import (
    NormalizedError,
    NormalizedSuccess,
    ProcessingRequest,
    ProviderTextResponse,
)
from services.prompt_gateway_service.prompt_resolver import (
    CHAT_INSTRUCTION,
    CODE_TRIPLE_INSTRUCTION,
)
from services.prompt_gateway_service.tests.provider_fakes import (
    FakeResponse,
    FakeSession,
    RecordingProgressReporter,
    StubProvider,
    chat_completion_envelope,
    make_settings,
)


def _failing(stub: StubProvider, failure_kind: ProviderFailureKind, **kwargs: Any) -> None:
    async def fail(**call_kwargs: Any) -> ProviderTextResponse:
        raise_provider_call_error(
            provider=stub.provider.value,
            operation="stub_request",
            failure_kind=failure_kind,
            message="stub failure",
            correlation_id=call_kwargs["correlation_id"],
            **kwargs,
        )

    stub.send.side_effect = fail


def _orchestrator(
    settings: Settings, *stubs: StubProvider
) -> tuple[GatewayOrchestratorImpl, RecordingProgressReporter]:
    reporter = RecordingProgressReporter()
    providers = {stub.provider: stub for stub in stubs}
    orchestrator = GatewayOrchestratorImpl(providers, reporter, settings)  # type: ignore[arg-type]
    return orchestrator, reporter


class TestValidation:
    @pytest.mark.parametrize(
        ("content", "action"),
        [("", "chat"), ("   ", "chat"), (None, "chat"), ("hello", None), ("hello", "")],
    )
    async def test_missing_fields_fail_without_upstream_call(
        self,
        settings: Settings,
        correlation_id: UUID,
        content: str | None,
        action: str | None,
    ) -> None:
        """Missing text or action stops at RECEIVED with a 400 and no upstream call."""
        stub = StubProvider(ProviderName.GROQ, settings)
        orchestrator, reporter = _orchestrator(settings, stub)

        result = await orchestrator.handle(
            ProcessingRequest(content=content, action=action), ProviderName.GROQ, correlation_id
        )

        assert isinstance(result, NormalizedError)
        assert result.status_code == 400
        assert result.error == "Text and action are required"
        assert result.error_code == ErrorCode.VALIDATION_ERROR
        stub.send.assert_not_called()
        assert reporter.stages[correlation_id] == [
            ProcessingStage.RECEIVED,
            ProcessingStage.NORMALIZED_ERROR,
        ]

    async def test_empty_code_prompt_is_rejected(
        self, settings: Settings, correlation_id: UUID
    ) -> None:
        """The code path has its own missing-prompt message."""
        stub = StubProvider(ProviderName.ANTHROPIC, settings)
        orchestrator, _ = _orchestrator(settings, stub)

        result = await orchestrator.generate_code_triple("", correlation_id)

        assert isinstance(result, NormalizedError)
        assert result.status_code == 400
        assert result.error == "Prompt is required"
        stub.send.assert_not_called()


class TestCredentialCheck:
    @pytest.mark.parametrize(
        ("provider", "override", "expected_message"),
        [
            (
                ProviderName.GROQ,
                {"GROQ_API_KEY": ""},
                "Groq API key not configured. "
                "Please add GROQ_API_KEY to your environment variables.",
            ),
            (
                ProviderName.ANTHROPIC,
                {"ANTHROPIC_API_KEY": ""},
                "Claude API key not configured. "
                "Please add CLAUDE_API_KEY to your environment variables.",
            ),
            (
                ProviderName.GOOGLE,
                {"GOOGLE_API_KEY": ""},
                "Gemini API key not configured. "
                "Please add GEMINI_API_KEY to your environment variables.",
            ),
            (
                ProviderName.AZURE_OPENAI,
                {"AZURE_OPENAI_ENDPOINT": None},
                "Azure OpenAI credentials not configured. Please add AZURE_OPENAI_API_KEY "
                "and AZURE_OPENAI_ENDPOINT to your environment variables.",
            ),
        ],
    )
    async def test_missing_credential_is_reported_without_upstream_call(
        self,
        correlation_id: UUID,
        provider: ProviderName,
        override: dict[str, Any],
        expected_message: str,
    ) -> None:
        """Each provider names its own missing keys, and dispatch never happens."""
        settings = make_settings(**override)
        stub = StubProvider(provider, settings)
        orchestrator, reporter = _orchestrator(settings, stub)

        result = await orchestrator.handle(
            ProcessingRequest(content="hello", action="chat"), provider, correlation_id
        )

        assert isinstance(result, NormalizedError)
        assert result.status_code == 500
        assert result.error == expected_message
        assert result.error_code == ErrorCode.CONFIGURATION_ERROR
        stub.send.assert_not_called()
        assert ProcessingStage.CREDENTIAL_CHECKED not in reporter.stages[correlation_id]

    async def test_unregistered_provider_is_configuration_error(
        self, settings: Settings, correlation_id: UUID
    ) -> None:
        """A provider without an adapter fails as a configuration error."""
        orchestrator, _ = _orchestrator(settings, StubProvider(ProviderName.GROQ, settings))

        result = await orchestrator.handle(
            ProcessingRequest(content="hello", action="chat"), ProviderName.GOOGLE, correlation_id
        )

        assert isinstance(result, NormalizedError)
        assert result.error_code == ErrorCode.CONFIGURATION_ERROR


class TestDispatch:
    async def test_success_walks_every_stage_in_order(
        self, settings: Settings, correlation_id: UUID
    ) -> None:
        """A successful request reports every stage exactly once, in order."""
        orchestrator, reporter = _orchestrator(settings, StubProvider(ProviderName.GROQ, settings))

        result = await orchestrator.handle(
            ProcessingRequest(content="hello", action="chat"), ProviderName.GROQ, correlation_id
        )

        assert isinstance(result, NormalizedSuccess)
        assert result.processed_text == "stub response"
        assert reporter.stages[correlation_id] == [
            ProcessingStage.RECEIVED,
            ProcessingStage.VALIDATED,
            ProcessingStage.CREDENTIAL_CHECKED,
            ProcessingStage.DISPATCHED,
            ProcessingStage.NORMALIZED_SUCCESS,
        ]

    async def test_resolved_instruction_and_params_are_sent(
        self, settings: Settings, correlation_id: UUID
    ) -> None:
        """Content, instruction, model and correlation ID all reach the adapter."""
        stub = StubProvider(ProviderName.GOOGLE, settings)
        orchestrator, _ = _orchestrator(settings, stub)

        await orchestrator.handle(
            ProcessingRequest(content="notes", action=ActionKind.SUMMARIZE),
            ProviderName.GOOGLE,
            correlation_id,
        )

        kwargs = stub.send.call_args.kwargs
        assert kwargs["content"] == "notes"
        assert kwargs["system_instruction"].strip()
        assert kwargs["model_params"].model == settings.GOOGLE_DEFAULT_MODEL
        assert kwargs["correlation_id"] == correlation_id

    async def test_repeated_request_yields_identical_result(
        self, settings: Settings, correlation_id: UUID
    ) -> None:
        """Degraded fallbacks are deterministic for identical input."""
        orchestrator, _ = _orchestrator(
            settings, StubProvider(ProviderName.GOOGLE, settings, text="not json at all")
        )
        request = ProcessingRequest(content="a todo app", action="generate")

        first = await orchestrator.handle(request, ProviderName.GOOGLE, correlation_id)
        second = await orchestrator.handle(request, ProviderName.GOOGLE, correlation_id)

        assert first == second

    async def test_code_triple_uses_configured_provider(self, correlation_id: UUID) -> None:
        """Code generation goes to CODE_GENERATION_PROVIDER, not the default Claude adapter."""
        settings = make_settings(CODE_GENERATION_PROVIDER=ProviderName.GROQ)
        triple = {"html": "<p>hi</p>", "css": "p{}", "js": "console.log(1)"}
        groq = StubProvider(ProviderName.GROQ, settings, text=json.dumps(triple))
        anthropic = StubProvider(ProviderName.ANTHROPIC, settings)
        orchestrator, _ = _orchestrator(settings, groq, anthropic)

        result = await orchestrator.generate_code_triple("a button", correlation_id)

        assert isinstance(result, NormalizedSuccess)
        assert result.payload == triple
        anthropic.send.assert_not_called()
        assert groq.send.call_args.kwargs["system_instruction"] == CODE_TRIPLE_INSTRUCTION

    async def test_code_triple_action_on_processor_gets_generic_instruction(
        self, settings: Settings, correlation_id: UUID
    ) -> None:
        """The processor treats "code_triple" like any other unrecognized action."""
        triple = {"html": "<p>hi</p>", "css": "p{}", "js": "console.log(1)"}
        stub = StubProvider(ProviderName.GROQ, settings, text=json.dumps(triple))
        orchestrator, _ = _orchestrator(settings, stub)

        result = await orchestrator.handle(
            ProcessingRequest(content="hi", action="code_triple"),
            ProviderName.GROQ,
            correlation_id,
        )

        assert stub.send.call_args.kwargs["system_instruction"] == CHAT_INSTRUCTION
        assert isinstance(result, NormalizedSuccess)
        assert result.processed_text == json.dumps(triple)
        assert result.payload is None


class TestFailureMapping:
    @pytest.mark.parametrize(
        ("failure_kind", "status_code", "expected_message", "expected_status"),
        [
            (
                ProviderFailureKind.INVALID_CREDENTIAL,
                401,
                "Invalid Groq API key. Please check your configuration.",
                401,
            ),
            (
                ProviderFailureKind.RATE_LIMITED,
                429,
                "Groq API quota exceeded. Please try again later.",
                429,
            ),
            (
                ProviderFailureKind.CONTENT_BLOCKED,
                None,
                "Content was blocked by Groq safety filters. Please modify your request.",
                400,
            ),
            (
                ProviderFailureKind.NETWORK_FAILURE,
                None,
                "Unable to connect to Groq API. "
                "Please check your internet connection and try again.",
                503,
            ),
            (
                ProviderFailureKind.MODEL_UNAVAILABLE,
                404,
                "The requested model is not available. Please contact support.",
                404,
            ),
            (ProviderFailureKind.UNKNOWN, 500, "Groq API request failed", 500),
            (ProviderFailureKind.UNKNOWN, None, "Internal server error", 500),
        ],
    )
    async def test_failure_kind_maps_to_message_and_status(
        self,
        settings: Settings,
        correlation_id: UUID,
        failure_kind: ProviderFailureKind,
        status_code: int | None,
        expected_message: str,
        expected_status: int,
    ) -> None:
        """Each failure kind maps to its user-facing message and HTTP status."""
        stub = StubProvider(ProviderName.GROQ, settings)
        _failing(stub, failure_kind, status_code=status_code, upstream_error={"raw": True})
        orchestrator, reporter = _orchestrator(settings, stub)

        result = await orchestrator.handle(
            ProcessingRequest(content="hello", action="chat"), ProviderName.GROQ, correlation_id
        )

        assert isinstance(result, NormalizedError)
        assert result.error == expected_message
        assert result.status_code == expected_status
        assert reporter.stages[correlation_id][-1] == ProcessingStage.NORMALIZED_ERROR

    async def test_upstream_envelope_is_passed_through_as_details(
        self, settings: Settings, correlation_id: UUID
    ) -> None:
        """The upstream error body reaches the client unchanged as details."""
        envelope = {"error": {"type": "invalid_request_error", "message": "bad"}}
        stub = StubProvider(ProviderName.GROQ, settings)
        _failing(stub, ProviderFailureKind.UNKNOWN, status_code=400, upstream_error=envelope)
        orchestrator, _ = _orchestrator(settings, stub)

        result = await orchestrator.handle(
            ProcessingRequest(content="hello", action="chat"), ProviderName.GROQ, correlation_id
        )

        assert isinstance(result, NormalizedError)
        assert result.details == envelope
        assert result.to_response_body() == {
            "success": False,
            "error": "Groq API request failed",
            "details": envelope,
        }

    async def test_parse_failure_is_internal_error(
        self, settings: Settings, correlation_id: UUID
    ) -> None:
        """An unreadable upstream body surfaces as a 500 with the parse message as details."""
        stub = StubProvider(ProviderName.GROQ, settings)

        async def unreadable(**kwargs: Any) -> ProviderTextResponse:
            raise_parsing_error(
                operation="stub_request",
                parse_target="upstream_response",
                message="Failed to parse Groq response",
                correlation_id=kwargs["correlation_id"],
            )

        stub.send.side_effect = unreadable
        orchestrator, _ = _orchestrator(settings, stub)

        result = await orchestrator.handle(
            ProcessingRequest(content="hello", action="chat"), ProviderName.GROQ, correlation_id
        )

        assert isinstance(result, NormalizedError)
        assert result.error == "Internal server error"
        assert result.status_code == 500
        assert result.details == "Failed to parse Groq response"

    async def test_unexpected_exception_is_contained(
        self, settings: Settings, correlation_id: UUID
    ) -> None:
        """Unexpected adapter exceptions become a 500 instead of propagating."""
        stub = StubProvider(ProviderName.GROQ, settings)
        stub.send.side_effect = RuntimeError("boom")
        orchestrator, _ = _orchestrator(settings, stub)

        result = await orchestrator.handle(
            ProcessingRequest(content="hello", action="chat"), ProviderName.GROQ, correlation_id
        )

        assert isinstance(result, NormalizedError)
        assert result.error == "Internal server error"
        assert result.status_code == 500


class TestEndToEndWithHttpAdapter:
    """Orchestrator driving the real chat-completions adapter over a fake session."""

    async def _handle(
        self, session: FakeSession, settings: Settings, correlation_id: UUID, **request: Any
    ) -> Any:
        adapter = ChatCompletionsProviderImpl(
            session, settings, ProviderName.GROQ  # type: ignore[arg-type]
        )
        orchestrator, _ = _orchestrator(settings, adapter)  # type: ignore[arg-type]
        return await orchestrator.handle(
            ProcessingRequest(**request), ProviderName.GROQ, correlation_id
        )

    async def test_generate_returns_fenced_code_unchanged(
        self, settings: Settings, correlation_id: UUID
    ) -> None:
        """Markdown generate output is returned verbatim."""
        text = "```js\nconsole.log(1)\n```"
        session = FakeSession(FakeResponse(200, {"choices": [{"message": {"content": text}}]}))

        result = await self._handle(
            session, settings, correlation_id, content="build a form", action="generate"
        )

        assert result.to_response_body() == {"success": True, "processedText": text}

    async def test_rate_limit_keeps_upstream_status(
        self, settings: Settings, correlation_id: UUID
    ) -> None:
        """A 429 keeps its status and exposes the upstream body as details."""
        body = {"error": {"message": "Rate limit reached", "type": "tokens"}}
        session = FakeSession(FakeResponse(429, body))

        result = await self._handle(
            session, settings, correlation_id, content="hello", action="chat"
        )

        assert isinstance(result, NormalizedError)
        assert result.status_code == 429
        assert "quota exceeded" in result.error
        assert result.details == body

    async def test_empty_text_never_reaches_network(
        self, settings: Settings, correlation_id: UUID
    ) -> None:
        """Empty text is rejected before the adapter opens a request."""
        session = FakeSession(FakeResponse(200, chat_completion_envelope("unused")))

        result = await self._handle(session, settings, correlation_id, content="", action="chat")

        assert result.status_code == 400
        assert session.calls == []

    async def test_null_usage_counts_do_not_discard_the_reply(
        self, settings: Settings, correlation_id: UUID
    ) -> None:
        """Token counts are optional metadata; a null usage block still yields the text."""
        body = {
            "choices": [{"message": {"content": "real answer"}}],
            "usage": {"prompt_tokens": None, "completion_tokens": None},
        }
        session = FakeSession(FakeResponse(200, body))

        result = await self._handle(
            session, settings, correlation_id, content="hello", action="chat"
        )

        assert result.to_response_body() == {"success": True, "processedText": "real answer"}
