"""Tools for the vibecode agent."""

from .base import Tool
from .invoker import AIInvoker
from .llm_client import AIProviderError, LLMClient

__all__ = [
  "Tool",
  "AIInvoker",
  "AIProviderError",
  "LLMClient",
]
