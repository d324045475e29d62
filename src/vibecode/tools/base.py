"""Base class for pipeline tools that report progress to the UI."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional


class Tool(ABC):
  """A pipeline stage that may notify the terminal UI of events."""

  def __init__(self, ui_callback: Optional[Callable[..., None]] = None):
    self.ui_callback = ui_callback

  @abstractmethod
  async def execute(self, *args: Any, **kwargs: Any) -> Any:
    """Run the tool."""

  def _notify_ui(self, event: str, *args, **kwargs) -> None:
    """Notify the UI of an event."""
    if self.ui_callback:
      self.ui_callback(event, *args, **kwargs)
