"""Tests for ai_service.py - function-calling request and response handling."""
import asyncio
import json
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from boomerang.services.action_schemas import ACTION_NAMES, ACTION_TOOLS
from boomerang.services.ai_service import AIService, build_system_prompt
from boomerang.services.errors import AIUnavailable, NoActionableIntent
from boomerang.services.scheduling import LOCAL_TZ


def tool_call(name, args, call_id="call_1"):
    tc = MagicMock()
    tc.id = call_id
    tc.function.name = name
    tc.function.arguments = json.dumps(args)
    return tc


def response_with(*tool_calls):
    message = MagicMock()
    message.tool_calls = list(tool_calls)
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


@pytest.fixture
def service():
    svc = AIService()
    svc.client = MagicMock()
    svc.client.chat.completions.create = AsyncMock()
    return svc


class TestActionSchemas:
    """The model is offered exactly six strict functions."""

    def test_six_functions(self):
        assert set(ACTION_NAMES) == {
            "create_contact", "send_sms", "send_email", "create_reminder", "make_phone_call", "create_note",
        }

    def test_strict_schemas_require_every_property(self):
        for tool in ACTION_TOOLS:
            fn = tool["function"]
            assert fn["strict"] is True
            assert set(fn["parameters"]["required"]) == set(fn["parameters"]["properties"])
            assert fn["parameters"]["additionalProperties"] is False


class TestProposeActions:
    """Test model call handling."""

    @pytest.mark.asyncio
    async def test_returns_all_calls(self, service):
        service.client.chat.completions.create.return_value = response_with(
            tool_call("send_sms", {"contact_name": "Sarah"}, "call_1"),
            tool_call("create_reminder", {"message": "Order drywall"}, "call_2"),
        )

        calls = await service.propose_actions("Text Sarah and remind me to order drywall")

        assert [c.name for c in calls] == ["send_sms", "create_reminder"]
        assert calls[1].call_id == "call_2"
        kwargs = service.client.chat.completions.create.call_args.kwargs
        assert kwargs["tool_choice"] == "required"
        assert kwargs["tools"] is ACTION_TOOLS

    @pytest.mark.asyncio
    async def test_no_client(self):
        svc = AIService()
        svc.client = None
        with pytest.raises(AIUnavailable):
            await svc.propose_actions("anything")

    @pytest.mark.asyncio
    async def test_timeout(self, service):
        async def slow(**kwargs):
            await asyncio.sleep(1)

        service.client.chat.completions.create = slow
        with pytest.raises(AIUnavailable) as exc_info:
            await service.propose_actions("Text Sarah", timeout=0.01)
        assert exc_info.value.kind == "AIUnavailable"

    @pytest.mark.asyncio
    async def test_no_tool_calls(self, service):
        service.client.chat.completions.create.return_value = response_with()
        with pytest.raises(NoActionableIntent):
            await service.propose_actions("Nice weather today")

    @pytest.mark.asyncio
    async def test_no_choices(self, service):
        response = MagicMock()
        response.choices = []
        service.client.chat.completions.create.return_value = response
        with pytest.raises(NoActionableIntent):
            await service.propose_actions("Nice weather today")


class TestSystemPrompt:
    def test_includes_context_and_date(self):
        prompt = build_system_prompt("Mike's Construction", datetime(2025, 6, 2, 10, 0, tzinfo=LOCAL_TZ))
        assert "Mike's Construction" in prompt
        assert "2025-06-02" in prompt
