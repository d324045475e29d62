"""Configuration and token-usage accounting for vibecode."""

import os
import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import tomli
import tomli_w
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .models import TokenUsage, TokenUsageEntry

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "vibecode.toml"
HOME_CONFIG_FILENAME = ".vibecode.toml"

DEFAULT_PROVIDER = "openai"
DEFAULT_MODEL = "gpt-4"
DEFAULT_MAX_TOKENS = 4096
DEFAULT_TEMPERATURE = 0.7

PROVIDER_BASE_URLS = {
  "openai": "https://api.openai.com/v1",
  "anthropic": "https://api.anthropic.com/v1/",
}
PROVIDER_DEFAULT_MODELS = {
  "openai": "gpt-4",
  "anthropic": "claude-3-5-sonnet-latest",
}
# Checked in order; the first variable that is set selects the provider.
API_KEY_ENV_VARS = [
  ("OPENAI_API_KEY", "openai"),
  ("ANTHROPIC_API_KEY", "anthropic"),
]
MODEL_ENV_VAR = "VIBECODE_MODEL"

# USD per million tokens (input, output).
PROVIDER_PRICING = {
  "openai": (30.0, 60.0),
  "anthropic": (3.0, 15.0),
}
INPUT_TOKEN_SHARE = 0.7
HISTORY_LIMIT = 100


class ConfigError(Exception):
  """Raised when the configuration cannot be used to reach a provider."""


class VibeConfig(BaseModel):
  provider: str = DEFAULT_PROVIDER
  model: str = DEFAULT_MODEL
  api_key: Optional[str] = None
  api_base_url: Optional[str] = None
  max_tokens: int = DEFAULT_MAX_TOKENS
  temperature: float = DEFAULT_TEMPERATURE
  token_usage: TokenUsage = Field(default_factory=TokenUsage)

  def base_url(self) -> str:
    return self.api_base_url or PROVIDER_BASE_URLS.get(self.provider, PROVIDER_BASE_URLS[DEFAULT_PROVIDER])


def _now() -> str:
  return datetime.now(timezone.utc).isoformat()


def estimate_cost(tokens: int, provider: str) -> float:
  """Estimate the cost of a call assuming a 70/30 input/output split."""
  pricing = PROVIDER_PRICING.get(provider)
  if not pricing:
    return 0.0
  input_price, output_price = pricing
  input_tokens = tokens * INPUT_TOKEN_SHARE
  output_tokens = tokens - input_tokens
  return input_tokens / 1_000_000 * input_price + output_tokens / 1_000_000 * output_price


class ConfigStore:
  """Loads vibecode.toml, applies environment overrides and records token usage."""

  def __init__(self, project_root: str = ".", home_dir: Optional[str] = None):
    self.project_root = Path(project_root).resolve()
    self.home_dir = Path(home_dir) if home_dir else Path.home()
    self.config_path: Optional[Path] = None
    self.config: Optional[VibeConfig] = None

  def _candidate_paths(self):
    return [self.project_root / CONFIG_FILENAME, self.home_dir / HOME_CONFIG_FILENAME]

  def _read_file(self, path: Path) -> Dict[str, Any]:
    with open(path, "rb") as f:
      return tomli.load(f)

  def load(self) -> VibeConfig:
    """Load configuration, always re-reading the file."""
    load_dotenv()

    data: Dict[str, Any] = {}
    self.config_path = None
    for path in self._candidate_paths():
      if path.exists():
        try:
          data = self._read_file(path)
        except (OSError, tomli.TOMLDecodeError) as e:
          logger.warning("Ignoring unreadable config %s: %s", path, e)
          continue
        self.config_path = path
        break

    try:
      config = VibeConfig(**data)
    except ValidationError as e:
      raise ConfigError(f"Invalid configuration in {self.config_path}: {e}") from e
    if not config.token_usage.last_reset:
      config.token_usage.last_reset = _now()

    for env_var, provider in API_KEY_ENV_VARS:
      api_key = os.getenv(env_var)
      if api_key:
        if provider != config.provider and "model" not in data:
          config.model = PROVIDER_DEFAULT_MODELS[provider]
        config.api_key = api_key
        config.provider = provider
        break

    env_model = os.getenv(MODEL_ENV_VAR)
    if env_model:
      config.model = env_model

    self.config = config
    logger.debug("Loaded config %s from %s", self.sanitize_for_log(config), self.config_path)
    return config

  def get(self) -> VibeConfig:
    if self.config is None:
      return self.load()
    return self.config

  def require_api_key(self) -> str:
    config = self.get()
    if not config.api_key:
      names = " or ".join(name for name, _ in API_KEY_ENV_VARS)
      raise ConfigError(f"No API key found. Set {names}, or add api_key to {CONFIG_FILENAME}.")
    return config.api_key

  def save(self, updates: Dict[str, Any]) -> None:
    """Merge updates into the config file. The API key is never written."""
    path = self.config_path or self.project_root / CONFIG_FILENAME

    existing: Dict[str, Any] = {}
    if path.exists():
      existing = self._read_file(path)

    existing.update({key: value for key, value in updates.items() if key != "api_key" and value is not None})
    with open(path, "wb") as f:
      tomli_w.dump(existing, f)
    self.config_path = path

  def track_token_usage(self, tokens: int, command: str) -> TokenUsageEntry:
    """Record one AI call and persist the accumulator."""
    config = self.get()
    usage = config.token_usage

    cost = estimate_cost(tokens, config.provider)
    entry = TokenUsageEntry(timestamp=_now(), tokens=tokens, cost=cost, command=command)
    usage.total_tokens += tokens
    usage.total_cost += cost
    usage.history.append(entry)
    if len(usage.history) > HISTORY_LIMIT:
      usage.history = usage.history[-HISTORY_LIMIT:]

    self.save({"token_usage": usage.model_dump()})
    return entry

  def reset_token_usage(self) -> None:
    config = self.get()
    config.token_usage = TokenUsage(last_reset=_now())
    self.save({"token_usage": config.token_usage.model_dump()})

  def get_token_usage(self) -> TokenUsage:
    return self.get().token_usage

  def sanitize_for_log(self, config: Optional[VibeConfig] = None) -> Dict[str, Any]:
    config = config or self.get()
    api_key = config.api_key
    if api_key:
      api_key = "****" if len(api_key) < 8 else "****" + api_key[-4:]
    return {
      "provider": config.provider,
      "model": config.model,
      "api_key": api_key,
      "max_tokens": config.max_tokens,
      "temperature": config.temperature,
    }
