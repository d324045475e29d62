"""Prompt invocation with token accounting."""

import logging
from typing import Callable, Optional

from .base import Tool
from .llm_client import LLMClient
from ..config import ConfigStore
from ..utils import estimate_tokens

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_LABEL = "vibe"


class AIInvoker(Tool):
  """Sends a prompt to the AI client and records the estimated usage."""

  def __init__(self, client: LLMClient, config_store: ConfigStore, ui_callback: Optional[Callable[..., None]] = None):
    super().__init__(ui_callback)
    self.client = client
    self.config_store = config_store

  async def execute(self, prompt: str, system_prompt: Optional[str] = None, command_label: str = DEFAULT_COMMAND_LABEL) -> str:
    return await self.invoke(prompt, system_prompt, command_label)

  async def invoke(self, prompt: str, system_prompt: Optional[str] = None, command_label: str = DEFAULT_COMMAND_LABEL) -> str:
    """
    Ask the model and return its raw answer.

    AIProviderError from the client propagates without retry. Usage is
    recorded as soon as the answer arrives, before any confirmation, so a
    declined command still counts (and may create vibecode.toml). Tracking
    is best-effort: a failure there is logged and the answer is still returned.
    """
    response = await self.client.ask(prompt, system_prompt)

    tokens = estimate_tokens(prompt + response)
    try:
      self.config_store.track_token_usage(tokens, command_label)
    except Exception as e:
      logger.warning("Could not record token usage: %s", e)
    else:
      self._notify_ui("show_token_usage", tokens)

    return response
