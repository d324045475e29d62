"""LLM client tool."""

from typing import Any, Dict, List, Callable, Optional

from openai import OpenAI, OpenAIError

from .base import Tool
from ..config import ConfigStore, VibeConfig


class AIProviderError(Exception):
  """The AI provider call failed (network, authentication, rate limit...)."""


class LLMClient(Tool):
  """Chat-completion client for OpenAI-compatible providers."""

  def __init__(
    self,
    config_store: ConfigStore,
    ui_callback: Optional[Callable[..., None]] = None,
    client: Optional[Any] = None,
  ):
    super().__init__(ui_callback)

    api_key = config_store.require_api_key()
    self.config: VibeConfig = config_store.get()
    self.model = self.config.model
    self.client = client or OpenAI(api_key=api_key, base_url=self.config.base_url())

  async def ask(self, prompt: str, system_prompt: Optional[str] = None) -> str:
    messages = []
    if system_prompt:
      messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})
    return await self.execute(messages)

  async def chat(self, messages: List[Dict[str, str]]) -> str:
    return await self.execute(messages)

  async def execute(self, messages: List[Dict[str, Any]], max_tokens: Optional[int] = None) -> str:
    """Send messages and return the text answer. Raises AIProviderError."""
    self._notify_ui("start_loading", f"Asking {self.model}")

    try:
      response = self.client.chat.completions.create(
        model=self.model,
        messages=messages,
        max_tokens=max_tokens or self.config.max_tokens,
        temperature=self.config.temperature,
      )
    except OpenAIError as e:
      raise AIProviderError(f"{self.config.provider} request failed: {e}") from e
    finally:
      self._notify_ui("stop_loading")

    content = self._extract_response_text(response)
    if not content.strip():
      raise AIProviderError(f"Empty response from {self.config.provider} ({self.model})")
    return content

  def _extract_response_text(self, response: Any) -> str:
    """Extract text content from a chat completion result."""
    choices = getattr(response, "choices", None)
    if not choices:
      return ""

    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    if isinstance(content, str):
      return content.strip()
    if isinstance(content, list):
      return "\n".join(part.get("text", "") for part in content if isinstance(part, dict)).strip()
    return ""
