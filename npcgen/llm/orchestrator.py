"""
LLM Orchestrator - NPC text generation.

Sends the composed NPC query to a language model and turns the reply into
``GptNpcData``.

Data flow:
    NPCGenerator.init_query() → query string
                                      ↓
    LLMOrchestrator.generate_npc_data(query)
                                      ↓
                              LiteLLM acompletion()
                                      ↓
                 JSON text → GptNpcData → LLMResponse → NPCGenerator.merge_gpt_data()

Design decisions:
- Uses LiteLLM for provider abstraction, so OpenAI, Anthropic or a local
  Ollama model are one config string apart.
- JSON mode is requested when enabled in settings; the parser still strips
  markdown fences because not every provider honours it.
- Any failure (missing key, API error, bad JSON, schema mismatch) surfaces
  as ``LLMError``. The caller decides how to present it; there is no retry.
"""

from __future__ import annotations

import json
import re
from typing import Any

from litellm import acompletion
from pydantic import ValidationError

from npcgen.config.logging import get_logger
from npcgen.config.settings import LLMSettings
from npcgen.generator.models import GptNpcData
from npcgen.llm.models import LLMError, LLMResponse, TokenUsage

logger = get_logger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def parse_json_object(content: str) -> dict[str, Any]:
    """
    Parse the model's reply into a JSON object.

    Tolerates markdown code fences and leading/trailing chatter around the
    outermost ``{...}``.

    Raises:
        LLMError: If no JSON object can be decoded
    """
    text = _FENCE_RE.sub("", content.strip())
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            raise LLMError(f"Response is not JSON: {content[:200]!r}")
        try:
            parsed = json.loads(text[start:end + 1])
        except json.JSONDecodeError as e:
            raise LLMError(f"Response is not valid JSON: {e}", cause=e)

    if not isinstance(parsed, dict):
        raise LLMError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


class LLMOrchestrator:
    """
    Calls the configured language model for NPC data.

    Each call is stateless: the system prompt and the query are sent fresh.

    Args:
        settings: LLM configuration (model, temperature, max_tokens, api_key, json_mode)
        system_prompt: System message sent ahead of every query
    """

    def __init__(self, settings: LLMSettings, system_prompt: str):
        self._settings = settings
        self._system_prompt = system_prompt

    async def generate_npc_data(self, query: str) -> LLMResponse:
        """
        Ask the model for an NPC and validate the reply.

        Args:
            query: User prompt from ``init_query`` (non-empty)

        Returns:
            LLMResponse with the parsed ``GptNpcData``, raw text, model and usage

        Raises:
            ValueError: If query is empty or whitespace-only
            LLMError: If the API key is missing, the call fails or the reply is unusable
        """
        query = query.strip()
        if not query:
            raise ValueError("Query cannot be empty")

        # Validate API key early - better error message than a cryptic 401
        if not self._settings.api_key:
            raise LLMError("API key not configured. Set LLM__API_KEY in your environment.")

        call_kwargs: dict[str, Any] = {
            "model": self._settings.model,
            "messages": [
                {"role": "system", "content": self._system_prompt},
                {"role": "user", "content": query},
            ],
            "temperature": self._settings.temperature,
            "max_tokens": self._settings.max_tokens,
            "api_key": self._settings.api_key,
        }
        if self._settings.json_mode:
            call_kwargs["response_format"] = {"type": "json_object"}

        logger.debug(f"Requesting NPC data from {self._settings.model}")
        try:
            response = await acompletion(**call_kwargs)
        except Exception as e:
            raise LLMError(f"LLM API call failed: {e}", cause=e)

        content = response.choices[0].message.content or ""
        if not content.strip():
            raise LLMError("LLM returned an empty response")

        payload = parse_json_object(content)
        try:
            data = GptNpcData.model_validate(payload)
        except ValidationError as e:
            raise LLMError(f"LLM response does not match the NPC schema: {e}", cause=e)

        usage = TokenUsage(
            prompt_tokens=response.usage.prompt_tokens,
            completion_tokens=response.usage.completion_tokens,
        )
        logger.info(
            f"Received NPC data for {data.name or '(unnamed)'} "
            f"({usage.total_tokens} tokens, {response.model})"
        )
        return LLMResponse(data=data, raw_text=content, model=response.model, usage=usage)
