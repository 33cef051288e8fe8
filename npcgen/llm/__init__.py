"""
LLM Layer.

Sends the NPC query to a language model (via LiteLLM, so any supported
provider works) and validates the JSON reply:

    NPCGenerator.init_query()  →  query string
                                        ↓
    LLMOrchestrator.generate_npc_data(query)
                                        ↓
                                   LLMResponse  →  NPCGenerator.merge_gpt_data()
"""

from npcgen.llm.models import LLMError, LLMResponse, TokenUsage
from npcgen.llm.orchestrator import LLMOrchestrator

__all__ = [
    "LLMOrchestrator",
    "LLMResponse",
    "LLMError",
    "TokenUsage",
]
