import difflib
import logging
from pathlib import Path
from typing import Callable, List, Optional

from .models import CodeBlock, CommandIntent, ExecutionResult
from .utils import normalize_path

logger = logging.getLogger(__name__)

CONFIRM_QUESTION = "Apply these changes to your files?"


class FileApplier:
  """Writes accepted code blocks to disk after the user confirms."""

  def __init__(
    self,
    project_root: str = ".",
    confirm: Optional[Callable[[str], bool]] = None,
    ui_callback: Optional[Callable[..., None]] = None,
  ):
    self.project_root = Path(project_root).resolve()
    self.confirm = confirm
    self.ui_callback = ui_callback

  def _notify_ui(self, event: str, *args) -> None:
    if self.ui_callback:
      self.ui_callback(event, *args)

  def resolve_target(self, block: CodeBlock, intent: CommandIntent) -> Optional[str]:
    return normalize_path(block.path) or normalize_path(intent.target_file)

  def _full_path(self, relative_path: str) -> Optional[Path]:
    full_path = (self.project_root / relative_path).resolve()
    if full_path != self.project_root and self.project_root not in full_path.parents:
      return None
    return full_path

  def preview(self, block: CodeBlock, intent: CommandIntent) -> str:
    """Unified diff of the block against the current file ("" for new files)."""
    relative_path = self.resolve_target(block, intent)
    if not relative_path:
      return ""
    full_path = self._full_path(relative_path)
    if full_path is None or not full_path.is_file():
      return ""

    try:
      current = full_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
      return ""

    diff = difflib.unified_diff(
      current.splitlines(),
      block.code.splitlines(),
      fromfile=f"a/{relative_path}",
      tofile=f"b/{relative_path}",
      lineterm="",
    )
    return "\n".join(diff)

  def apply(self, blocks: List[CodeBlock], intent: CommandIntent) -> Optional[ExecutionResult]:
    """
    Write every block, in order, after one confirmation.

    Returns None when the user declines; nothing is touched in that case.
    Errors on one block are recorded and the remaining blocks are still
    written. Blocks sharing a path are written in sequence, the last wins.
    """
    if not blocks:
      return ExecutionResult()

    if self.confirm is None or not self.confirm(CONFIRM_QUESTION):
      return None

    result = ExecutionResult()
    for index, block in enumerate(blocks, start=1):
      relative_path = self.resolve_target(block, intent)
      if not relative_path:
        result.errors.append(f"Block {index} ({block.language}): no file path given, skipped")
        continue

      full_path = self._full_path(relative_path)
      if full_path is None:
        result.errors.append(f"{relative_path}: path is outside the project root, skipped")
        continue

      try:
        existed = full_path.exists()
        if not full_path.parent.exists():
          full_path.parent.mkdir(parents=True, exist_ok=True)
          self._notify_ui("show_directory_created", full_path.parent.relative_to(self.project_root).as_posix())

        with open(full_path, "w", encoding="utf-8") as f:
          f.write(block.code)
      except OSError as e:
        logger.debug("Write failed for %s", full_path, exc_info=True)
        result.errors.append(f"{relative_path}: {e}")
        continue

      # A path is classified once, by its state before the first write.
      if relative_path not in result.files_written:
        if existed:
          result.files_modified.append(relative_path)
        else:
          result.files_created.append(relative_path)
      self._notify_ui("show_file_written", relative_path, existed)

    result.success = not result.errors
    return result
