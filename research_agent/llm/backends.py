"""Text-generation backends for the research workflow.

Every backend exposes the same contract:

    generate(prompt_text, *, max_output_tokens, temperature, label) -> str

and raises only the typed errors from research_agent.errors:
- UpstreamError: the service answered with a non-success status
- TransportError: the call could not be completed (network, timeout,
  malformed envelope)

Backends make exactly one outbound call per invocation. Retries are
disabled, including the Anthropic SDK's built-in ones, so a single failure
reaches the pipeline immediately.

Two integrations are provided:
- AnthropicBackend: direct call with the anthropic SDK
- GatewayBackend: POST to the proxy gateway, which injects the credential
  server-side (see research_agent.api.routes.gateway)
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from research_agent.errors import TransportError, UpstreamError
from research_agent.executor.schemas import PhaseRequest

logger = logging.getLogger(__name__)


@dataclass
class LLMCallResult:
    """Normalized response from any backend."""

    content: str
    model_id: str
    input_tokens: int
    output_tokens: int
    duration_ms: int


@runtime_checkable
class TextGenerator(Protocol):
    """Anything the pipeline can ask for text."""

    def generate(
        self,
        prompt_text: str,
        *,
        max_output_tokens: int,
        temperature: float,
        label: str = "",
    ) -> str: ...


def generate_request(generator: TextGenerator, request: PhaseRequest, label: str = "") -> str:
    """Run a PhaseRequest through any TextGenerator."""
    return generator.generate(
        request.prompt_text,
        max_output_tokens=request.max_output_tokens,
        temperature=request.temperature,
        label=label,
    )


def _connect_timeout(timeout_seconds: float) -> float:
    # A hung read is the common failure; connect gets a shorter budget.
    return min(30.0, timeout_seconds)


def _build_timeout(timeout_seconds: float) -> httpx.Timeout:
    return httpx.Timeout(timeout_seconds, connect=_connect_timeout(timeout_seconds))


def _upstream_message(body: Any, fallback: str) -> str:
    """Dig the human-readable message out of an Anthropic error body."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if body.get("message"):
            return str(body["message"])
    return fallback


class AnthropicBackend:
    """Direct Anthropic Messages API backend.

    The SDK client is created lazily so that constructing the backend never
    touches the network or requires the package to be configured.
    """

    def __init__(
        self,
        api_key: str,
        model_id: str,
        timeout_seconds: float = 120.0,
        client: Optional[Any] = None,
    ):
        self._api_key = api_key
        self._model_id = model_id
        self._timeout_seconds = timeout_seconds
        self._client = client

    @property
    def model_id(self) -> str:
        return self._model_id

    def _get_client(self):
        if self._client is None:
            from anthropic import Anthropic, Timeout

            # The SDK only accepts its own Timeout type
            self._client = Anthropic(
                api_key=self._api_key,
                timeout=Timeout(
                    self._timeout_seconds,
                    connect=_connect_timeout(self._timeout_seconds),
                ),
                max_retries=0,
            )
        return self._client

    def close(self) -> None:
        if self._client is not None and hasattr(self._client, "close"):
            self._client.close()
        self._client = None

    def execute(
        self,
        prompt_text: str,
        *,
        max_output_tokens: int,
        temperature: float,
        label: str = "",
    ) -> LLMCallResult:
        """Execute one synchronous Messages call and normalize the result."""
        import anthropic

        start_time = time.time()

        logger.info(
            f"[{label}] Anthropic call: model={self._model_id}, "
            f"~{len(prompt_text) // 4:,} input tokens, "
            f"max_tokens={max_output_tokens}, temperature={temperature}"
        )

        try:
            response = self._get_client().messages.create(
                model=self._model_id,
                max_tokens=max_output_tokens,
                temperature=temperature,
                messages=[{"role": "user", "content": prompt_text}],
            )
        except anthropic.APIStatusError as e:
            message = _upstream_message(e.body, e.message)
            logger.error(f"[{label}] Anthropic returned {e.status_code}: {message}")
            raise UpstreamError(e.status_code, message) from e
        except anthropic.APITimeoutError as e:
            raise TransportError(
                f"[{label}] Claude API call timed out after {self._timeout_seconds}s"
            ) from e
        except anthropic.APIConnectionError as e:
            raise TransportError(f"[{label}] Could not reach Claude API: {e}") from e
        except anthropic.APIError as e:
            raise TransportError(f"[{label}] Invalid response from Claude API: {e}") from e

        duration_ms = int((time.time() - start_time) * 1000)

        try:
            text = "".join(
                block.text for block in response.content if getattr(block, "type", "") == "text"
            )
            input_tokens = response.usage.input_tokens
            output_tokens = response.usage.output_tokens
        except (AttributeError, TypeError) as e:
            raise TransportError(f"[{label}] Malformed response envelope: {e}") from e

        if not response.content:
            raise TransportError(f"[{label}] Response contained no content blocks")

        logger.info(
            f"[{label}] Completed: {input_tokens}+{output_tokens} tokens, "
            f"{duration_ms}ms, {len(text):,} chars"
        )

        return LLMCallResult(
            content=text,
            model_id=self._model_id,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            duration_ms=duration_ms,
        )

    def generate(
        self,
        prompt_text: str,
        *,
        max_output_tokens: int,
        temperature: float,
        label: str = "",
    ) -> str:
        return self.execute(
            prompt_text,
            max_output_tokens=max_output_tokens,
            temperature=temperature,
            label=label,
        ).content


class GatewayBackend:
    """Backend that forwards prompts through the proxy gateway.

    Request:  {"prompt": str, "options": {"model", "maxTokens", "temperature"}}
    Response: {"success": true, "content": str, "usage": {...}}
              or {"error": str} with a non-2xx status
    """

    def __init__(
        self,
        gateway_url: str,
        model_id: str,
        timeout_seconds: float = 120.0,
        client: Optional[httpx.Client] = None,
    ):
        self._gateway_url = gateway_url
        self._model_id = model_id
        self._timeout_seconds = timeout_seconds
        self._client = client

    @property
    def model_id(self) -> str:
        return self._model_id

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=_build_timeout(self._timeout_seconds))
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
        self._client = None

    def execute(
        self,
        prompt_text: str,
        *,
        max_output_tokens: int,
        temperature: float,
        label: str = "",
    ) -> LLMCallResult:
        client = self._get_client()
        start_time = time.time()
        payload = {
            "prompt": prompt_text,
            "options": {
                "model": self._model_id,
                "maxTokens": max_output_tokens,
                "temperature": temperature,
            },
        }

        logger.info(
            f"[{label}] Gateway call: {self._gateway_url}, "
            f"max_tokens={max_output_tokens}, temperature={temperature}"
        )

        try:
            response = client.post(self._gateway_url, json=payload)
        except httpx.TimeoutException as e:
            raise TransportError(
                f"[{label}] Gateway call timed out after {self._timeout_seconds}s"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"[{label}] Could not reach gateway: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            message = _upstream_message(data, f"Gateway error: {response.status_code}")
            logger.error(f"[{label}] Gateway returned {response.status_code}: {message}")
            raise UpstreamError(response.status_code, message)

        if not isinstance(data, dict) or not isinstance(data.get("content"), str):
            raise TransportError(f"[{label}] Malformed gateway response envelope")

        usage = data.get("usage") or {}
        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(f"[{label}] Gateway completed: {duration_ms}ms, {len(data['content']):,} chars")

        return LLMCallResult(
            content=data["content"],
            model_id=self._model_id,
            input_tokens=int(usage.get("input_tokens", 0)),
            output_tokens=int(usage.get("output_tokens", 0)),
            duration_ms=duration_ms,
        )

    def generate(
        self,
        prompt_text: str,
        *,
        max_output_tokens: int,
        temperature: float,
        label: str = "",
    ) -> str:
        return self.execute(
            prompt_text,
            max_output_tokens=max_output_tokens,
            temperature=temperature,
            label=label,
        ).content
