"""
Response and error types for the LLM layer.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from npcgen.generator.models import GptNpcData


class LLMError(Exception):
    """
    Raised when the language model cannot produce usable NPC data.

    Covers configuration problems (missing API key), transport failures and
    responses that are not the JSON object the prompt asked for. The
    underlying exception, if any, is kept on ``cause``.
    """

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class TokenUsage(BaseModel):
    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class LLMResponse(BaseModel):
    """Parsed NPC data plus the raw text and call metadata."""

    data: GptNpcData
    raw_text: str
    model: str = ""
    usage: TokenUsage = Field(default_factory=TokenUsage)
