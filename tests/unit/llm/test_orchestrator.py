"""
Unit tests for the LLM orchestrator.

Tests cover:
- Request construction (messages, JSON mode, sampling settings)
- Reply parsing: plain JSON, fenced JSON, surrounding chatter
- Error handling: missing key, empty query, API failure, empty reply,
  non-object reply, schema mismatch
- Response model structure (usage, model, raw text)
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from npcgen.config.settings import LLMSettings
from npcgen.llm.models import LLMError, LLMResponse
from npcgen.llm.orchestrator import LLMOrchestrator, parse_json_object


# ---------------------------------------------------------------------------
# Helpers for building mock LiteLLM responses
# ---------------------------------------------------------------------------

NPC_JSON = {
    "name": "Brannoc Ashdown",
    "spells": [],
    "items": ["Warhammer", {"name": "Chain Mail"}],
    "appearance": "Broad shoulders, soot in his beard.",
    "background": "Forged blades for the border garrison.",
    "roleplaying": "Answers every question with a grunt.",
    "readaloud": "The clang of a hammer stops as you enter.",
    "uniqueMagicalWeapon": {
        "name": "Emberfall",
        "description": "A warhammer that glows when struck.",
        "damageBonus": "+1",
        "damageType": "fire",
        "properties": ["ver"],
        "rarity": "rare",
        "scaling": "none",
        "effects": [],
    },
    "strength": 17,
}


def _make_text_response(text: str | None, model: str = "openai/gpt-4o-mini") -> MagicMock:
    """Build a mock LiteLLM response that contains only text."""
    choice = MagicMock()
    choice.message.content = text

    response = MagicMock()
    response.choices = [choice]
    response.model = model
    response.usage.prompt_tokens = 300
    response.usage.completion_tokens = 450
    return response


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings():
    """Default LLM settings for tests."""
    return LLMSettings(
        model="openai/gpt-4o-mini",
        max_tokens=1500,
        temperature=0.8,
        api_key="test-api-key",
    )


@pytest.fixture
def orchestrator(settings):
    return LLMOrchestrator(settings=settings, system_prompt="You write D&D NPCs as JSON.")


# ---------------------------------------------------------------------------
# parse_json_object
# ---------------------------------------------------------------------------

class TestParseJsonObject:
    def test_plain_json(self):
        assert parse_json_object('{"name": "Ada"}') == {"name": "Ada"}

    def test_fenced_json(self):
        content = '```json\n{"name": "Ada"}\n```'
        assert parse_json_object(content) == {"name": "Ada"}

    def test_chatter_around_object(self):
        content = 'Here is your NPC:\n{"name": "Ada", "items": []}\nEnjoy!'
        assert parse_json_object(content) == {"name": "Ada", "items": []}

    def test_not_json_raises(self):
        with pytest.raises(LLMError, match="not JSON"):
            parse_json_object("I cannot help with that.")

    def test_array_raises(self):
        with pytest.raises(LLMError, match="JSON object"):
            parse_json_object('["Ada", "Bob"]')


# ---------------------------------------------------------------------------
# generate_npc_data
# ---------------------------------------------------------------------------

class TestGenerateNpcData:
    @pytest.mark.asyncio
    async def test_returns_parsed_response(self, orchestrator):
        mock_response = _make_text_response(json.dumps(NPC_JSON))

        with patch("npcgen.llm.orchestrator.acompletion", new=AsyncMock(return_value=mock_response)):
            result = await orchestrator.generate_npc_data("Male, Dwarf, Blacksmith, Lawful Good")

        assert isinstance(result, LLMResponse)
        assert result.data.name == "Brannoc Ashdown"
        assert result.data.items == ["Warhammer", "Chain Mail"]
        assert result.data.strength == 17
        assert result.data.unique_magical_weapon.damage_bonus == 1
        assert result.data.unique_magical_weapon.damage_type == "fire"
        assert result.model == "openai/gpt-4o-mini"
        assert result.usage.total_tokens == 750
        assert result.raw_text == json.dumps(NPC_JSON)

    @pytest.mark.asyncio
    async def test_request_contents(self, orchestrator):
        mock_acompletion = AsyncMock(return_value=_make_text_response(json.dumps(NPC_JSON)))

        with patch("npcgen.llm.orchestrator.acompletion", new=mock_acompletion):
            await orchestrator.generate_npc_data("  Female, Elf, Wizard  ")

        kwargs = mock_acompletion.call_args.kwargs
        assert kwargs["model"] == "openai/gpt-4o-mini"
        assert kwargs["temperature"] == 0.8
        assert kwargs["max_tokens"] == 1500
        assert kwargs["api_key"] == "test-api-key"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"] == [
            {"role": "system", "content": "You write D&D NPCs as JSON."},
            {"role": "user", "content": "Female, Elf, Wizard"},
        ]

    @pytest.mark.asyncio
    async def test_json_mode_disabled(self, settings):
        settings.json_mode = False
        orchestrator = LLMOrchestrator(settings=settings, system_prompt="sys")
        mock_acompletion = AsyncMock(return_value=_make_text_response(json.dumps(NPC_JSON)))

        with patch("npcgen.llm.orchestrator.acompletion", new=mock_acompletion):
            await orchestrator.generate_npc_data("query")

        assert "response_format" not in mock_acompletion.call_args.kwargs

    @pytest.mark.asyncio
    async def test_empty_query_raises(self, orchestrator):
        with pytest.raises(ValueError):
            await orchestrator.generate_npc_data("   ")

    @pytest.mark.asyncio
    async def test_missing_api_key_raises_before_call(self, settings):
        settings.api_key = ""
        orchestrator = LLMOrchestrator(settings=settings, system_prompt="sys")
        mock_acompletion = AsyncMock()

        with patch("npcgen.llm.orchestrator.acompletion", new=mock_acompletion):
            with pytest.raises(LLMError, match="API key"):
                await orchestrator.generate_npc_data("query")

        mock_acompletion.assert_not_called()

    @pytest.mark.asyncio
    async def test_api_failure_wrapped(self, orchestrator):
        failure = ConnectionError("connection reset")

        with patch("npcgen.llm.orchestrator.acompletion", new=AsyncMock(side_effect=failure)):
            with pytest.raises(LLMError) as exc_info:
                await orchestrator.generate_npc_data("query")

        assert exc_info.value.cause is failure

    @pytest.mark.asyncio
    async def test_empty_reply_raises(self, orchestrator):
        with patch("npcgen.llm.orchestrator.acompletion",
                   new=AsyncMock(return_value=_make_text_response(None))):
            with pytest.raises(LLMError, match="empty"):
                await orchestrator.generate_npc_data("query")

    @pytest.mark.asyncio
    async def test_schema_mismatch_raises(self, orchestrator):
        bad = dict(NPC_JSON, items="Warhammer")

        with patch("npcgen.llm.orchestrator.acompletion",
                   new=AsyncMock(return_value=_make_text_response(json.dumps(bad)))):
            with pytest.raises(LLMError, match="schema"):
                await orchestrator.generate_npc_data("query")

    @pytest.mark.asyncio
    async def test_fenced_reply_accepted(self, orchestrator):
        fenced = "```json\n" + json.dumps(NPC_JSON) + "\n```"

        with patch("npcgen.llm.orchestrator.acompletion",
                   new=AsyncMock(return_value=_make_text_response(fenced))):
            result = await orchestrator.generate_npc_data("query")

        assert result.data.readaloud.startswith("The clang")

    @pytest.mark.asyncio
    async def test_loose_reply_still_produces_npc(self, orchestrator):
        loose = dict(
            NPC_JSON,
            appearance=None,
            strength=14.5,
            uniqueMagicalWeapon=dict(NPC_JSON["uniqueMagicalWeapon"], damageBonus="+1d6"),
        )

        with patch("npcgen.llm.orchestrator.acompletion",
                   new=AsyncMock(return_value=_make_text_response(json.dumps(loose)))):
            result = await orchestrator.generate_npc_data("query")

        assert result.data.appearance == ""
        assert result.data.strength == 15
        assert result.data.unique_magical_weapon.damage_bonus == "1d6"
