"""Backend factory.

Resolves a ResearchConfig to the backend that should serve completion calls.
"""

import logging
from typing import Union

from research_agent.config import ResearchConfig
from research_agent.llm.backends import AnthropicBackend, GatewayBackend

logger = logging.getLogger(__name__)


def get_backend(config: ResearchConfig) -> Union[AnthropicBackend, GatewayBackend]:
    """Get the backend for a configuration.

    A configured gateway takes precedence: the gateway holds the credential
    server-side, so the client never needs the key.

    Raises:
        ConfigurationError: If neither a gateway nor an API key is configured.
    """
    config.require_credentials()

    if config.gateway_url:
        logger.info(f"Using proxy gateway at {config.gateway_url} (model={config.model})")
        return GatewayBackend(
            gateway_url=config.gateway_url,
            model_id=config.model,
            timeout_seconds=config.request_timeout_seconds,
        )

    logger.info(f"Using direct Anthropic backend (model={config.model})")
    return AnthropicBackend(
        api_key=config.api_key,
        model_id=config.model,
        timeout_seconds=config.request_timeout_seconds,
    )
