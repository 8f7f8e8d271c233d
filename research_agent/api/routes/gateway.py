"""Proxy gateway for completion calls.

Clients send a prompt and generation options; the credential is injected
here from the environment and never leaves the server.

    POST /api/claude
    {"prompt": "...", "options": {"model": ..., "maxTokens": ..., "temperature": ...}}

Responses:
    200 {"success": true, "content": str, "usage": {"input_tokens", "output_tokens"}}
    400 {"error": "Prompt is required"}
    500 {"error": "Claude API key not configured in environment"}
    <upstream status> {"error": <upstream message>}
    502 {"error": <transport failure>}
"""

import logging
import os
from typing import Callable, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from research_agent.config import DEFAULT_MODEL
from research_agent.errors import TransportError, UpstreamError
from research_agent.llm.backends import AnthropicBackend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["gateway"])

DEFAULT_MAX_TOKENS = 4000
DEFAULT_TEMPERATURE = 0.3

BackendFactory = Callable[[str], AnthropicBackend]


class GatewayOptions(BaseModel):
    model: Optional[str] = None
    maxTokens: Optional[int] = Field(default=None, gt=0)
    temperature: Optional[float] = None


class GatewayRequest(BaseModel):
    prompt: Optional[str] = None
    options: GatewayOptions = Field(default_factory=GatewayOptions)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def get_backend_factory() -> Optional[BackendFactory]:
    """Backend factory bound to the server-side key, or None without one."""
    api_key = os.environ.get("CLAUDE_API_KEY") or os.environ.get("ANTHROPIC_API_KEY")
    if not api_key:
        return None
    return lambda model: AnthropicBackend(api_key=api_key, model_id=model)


@router.post("/claude")
def proxy_completion(
    request: GatewayRequest,
    backend_factory: Optional[BackendFactory] = Depends(get_backend_factory),
):
    """Forward one prompt to the completion service."""
    if not request.prompt or not request.prompt.strip():
        return _error(400, "Prompt is required")

    if backend_factory is None:
        logger.error("Gateway called but no API key is configured")
        return _error(500, "Claude API key not configured in environment")

    options = request.options
    model = options.model or DEFAULT_MODEL
    max_tokens = options.maxTokens or DEFAULT_MAX_TOKENS
    temperature = DEFAULT_TEMPERATURE if options.temperature is None else options.temperature

    backend = backend_factory(model)
    try:
        result = backend.execute(
            request.prompt,
            max_output_tokens=max_tokens,
            temperature=temperature,
            label="gateway",
        )
    except UpstreamError as e:
        return _error(e.status_code, e.upstream_message)
    except TransportError as e:
        logger.error(f"Gateway transport failure: {e.message}")
        return _error(502, e.message)

    return {
        "success": True,
        "content": result.content,
        "usage": {
            "input_tokens": result.input_tokens,
            "output_tokens": result.output_tokens,
        },
    }
