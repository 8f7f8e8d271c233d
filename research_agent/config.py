"""Runtime configuration for the research agent.

Configuration is resolved once and passed explicitly into the pipeline and the
client factory. Sources, lowest to highest priority:

1. Defaults on ResearchConfig
2. YAML settings file (RESEARCH_SETTINGS_FILE, or an explicit path)
3. Settings saved in the session store (organization name, model)
4. Environment variables
"""

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from research_agent.errors import ConfigurationError

if TYPE_CHECKING:
    from research_agent.executor.history_store import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_ORGANIZATION = "Your Organization"

# Environment variable -> config field
ENV_MAPPING = {
    "RESEARCH_MODEL": "model",
    "RESEARCH_ORGANIZATION": "organization_name",
    "RESEARCH_GATEWAY_URL": "gateway_url",
    "RESEARCH_REQUEST_TIMEOUT": "request_timeout_seconds",
    "RESEARCH_DATABASE_URL": "database_url",
    "RESEARCH_DB_PATH": "sqlite_path",
    "RESEARCH_OUTPUT_DIR": "output_dir",
}

# Settings keys the store is allowed to override
STORED_SETTING_FIELDS = ("organization_name", "model")


class ResearchConfig(BaseModel):
    """Resolved configuration for one process."""

    api_key: Optional[str] = Field(default=None, repr=False)
    model: str = DEFAULT_MODEL
    organization_name: Optional[str] = None
    gateway_url: Optional[str] = Field(
        default=None,
        description="When set, completion calls go through the proxy gateway "
        "instead of calling Anthropic directly",
    )
    request_timeout_seconds: float = Field(default=120.0, gt=0)
    database_url: str = ""
    sqlite_path: Optional[str] = None
    output_dir: str = "research_output"
    history_limit: int = Field(default=50, gt=0)

    @property
    def effective_organization(self) -> str:
        name = (self.organization_name or "").strip()
        return name or DEFAULT_ORGANIZATION

    def require_credentials(self) -> None:
        """Fail fast when no way of reaching the completion service exists."""
        if not self.api_key and not self.gateway_url:
            raise ConfigurationError(
                "Claude API key not configured. Set ANTHROPIC_API_KEY "
                "or RESEARCH_GATEWAY_URL."
            )


def _load_yaml_settings(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid settings file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Settings file {path} must contain a mapping, got {type(data).__name__}"
        )
    logger.info(f"Loaded settings from {path}")
    return data


def load_config(
    settings_path: Optional[Path] = None,
    store: Optional["SessionStore"] = None,
) -> ResearchConfig:
    """Build a ResearchConfig from file, store and environment.

    Args:
        settings_path: Explicit YAML settings file. Falls back to
            RESEARCH_SETTINGS_FILE when not given. A missing file is ignored.
        store: Session store whose saved settings override the file.

    Raises:
        ConfigurationError: If the file or a value cannot be parsed.
    """
    values: dict[str, Any] = {}

    if settings_path is None and os.environ.get("RESEARCH_SETTINGS_FILE"):
        settings_path = Path(os.environ["RESEARCH_SETTINGS_FILE"])
    if settings_path is not None and settings_path.exists():
        values.update(_load_yaml_settings(settings_path))

    if store is not None:
        stored = store.get_settings()
        for key in STORED_SETTING_FIELDS:
            if stored.get(key):
                values[key] = stored[key]

    api_key = os.environ.get("ANTHROPIC_API_KEY") or os.environ.get("CLAUDE_API_KEY")
    if api_key:
        values["api_key"] = api_key
    for env_name, field_name in ENV_MAPPING.items():
        raw = os.environ.get(env_name)
        if raw:
            values[field_name] = raw

    try:
        return ResearchConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
