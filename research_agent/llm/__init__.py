"""LLM client utilities.

Wraps the completion service behind the TextGenerator protocol, used by the
phase pipeline and by the proxy gateway route.
"""

from research_agent.llm.backends import (
    AnthropicBackend,
    GatewayBackend,
    LLMCallResult,
    TextGenerator,
    generate_request,
)
from research_agent.llm.factory import get_backend

__all__ = [
    "AnthropicBackend",
    "GatewayBackend",
    "LLMCallResult",
    "TextGenerator",
    "generate_request",
    "get_backend",
]
