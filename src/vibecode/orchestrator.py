import os
import logging
from typing import Callable, Optional

from .ui import TerminalUI
from .config import ConfigStore
from .intent import IntentAnalyzer
from .models import CommandIntent, ExecutionResult, ProjectContext
from .parser import ResponseParser
from .applier import FileApplier
from .context import ProjectScanner
from .prompts import SYSTEM_PROMPT, MAX_FILE_CONTENT_CHARS, PromptBuilder
from .validator import CodeValidator
from .tools import AIInvoker, AIProviderError, LLMClient

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"quit", "exit", "q", "/exit", "/quit"}
COMMAND_LABEL = "vibe"


class AgentOrchestrator:
  """Runs the command pipeline: intent, scan, prompt, AI call, parse, validate, confirm, apply."""

  def __init__(
    self,
    project_root: str = ".",
    config_store: Optional[ConfigStore] = None,
    llm_client: Optional[LLMClient] = None,
    ui: Optional[TerminalUI] = None,
    confirm: Optional[Callable[[str], bool]] = None,
    model: Optional[str] = None,
  ):
    self.project_root = os.path.abspath(project_root)
    self.ui = ui or TerminalUI()
    self.config_store = config_store or ConfigStore(project_root=self.project_root)
    self.config = self.config_store.load()
    if model:
      self.config.model = model

    self.last_error: Optional[str] = None

    self.intent_analyzer = IntentAnalyzer()
    self.scanner = ProjectScanner(project_root=self.project_root)
    self.prompt_builder = PromptBuilder()
    self.parser = ResponseParser()
    self.validator = CodeValidator()

    self.llm_client = llm_client or LLMClient(self.config_store, ui_callback=self._ui_callback)
    self.invoker = AIInvoker(self.llm_client, self.config_store, ui_callback=self._ui_callback)
    self.applier = FileApplier(
      project_root=self.project_root,
      confirm=confirm or self.ui.confirm,
      ui_callback=self._ui_callback,
    )

  def _ui_callback(self, action: str, *args):
    """Callback for tools to show UI messages"""
    if action == "start_loading":
      self.ui.start_loading(*args)
    elif action == "stop_loading":
      self.ui.stop_loading()
    elif action == "show_token_usage":
      self.ui.show_token_usage(*args)
    elif action == "show_directory_created":
      self.ui.show_directory_created(*args)
    elif action == "show_file_written":
      self.ui.show_file_written(*args)

  def _read_target_file(self, intent: CommandIntent) -> Optional[str]:
    if not intent.target_file:
      return None

    candidates = [intent.target_file]
    if intent.target_folder:
      candidates.append(os.path.join(intent.target_folder, intent.target_file))
    for candidate in candidates:
      content = self.scanner.read_file(candidate, max_chars=MAX_FILE_CONTENT_CHARS)
      if content is not None:
        return content
    return None

  def build_prompt(self, intent: CommandIntent, context: ProjectContext) -> str:
    folder_listing = self.scanner.list_folder(intent.target_folder) if intent.target_folder else None
    return self.prompt_builder.build(intent, context, self._read_target_file(intent), folder_listing)

  async def process_command(self, command: str) -> Optional[ExecutionResult]:
    """
    Run one command end to end.

    Returns the ExecutionResult, or None when nothing was applied: the AI
    call failed, the user declined, or an unexpected error occurred.
    Failures also set last_error; a declined command leaves it None.
    """
    self.last_error = None
    try:
      intent = self.intent_analyzer.analyze(command)
      self.ui.show_intent(intent)

      context = self.scanner.scan()
      self.ui.show_project_scan(context)

      prompt = self.build_prompt(intent, context)
      logger.debug("Prompt is %d characters", len(prompt))

      self.ui.show_step(f"Asking {self.config.provider} ({self.config.model})")
      try:
        response = await self.invoker.invoke(prompt, SYSTEM_PROMPT, COMMAND_LABEL)
      except AIProviderError as e:
        self.last_error = str(e)
        self.ui.show_error(self.last_error)
        return None

      self.ui.show_sections(self.parser.extract_sections(response))

      blocks = self.parser.extract_code_blocks(response)
      if not blocks:
        self.ui.show_no_code()
        return ExecutionResult()

      for block in blocks:
        self.ui.show_code_block(block, self.validator.validate(block.code, block.language))
        self.ui.show_diff_content(self.applier.preview(block, intent))

      result = self.applier.apply(blocks, intent)
      if result is None:
        self.ui.show_cancelled()
        return None

      self.ui.show_execution_summary(result)
      return result

    except Exception as e:
      logger.debug("Command failed", exc_info=True)
      self.last_error = str(e)
      self.ui.show_error(self.last_error)
      return None

  async def run_interactive_session(self):
    self.ui.show_welcome(self.config.provider, self.config.model, self.project_root)

    while True:
      try:
        user_request = self.ui.get_user_request()
      except KeyboardInterrupt:
        break

      if user_request is None or user_request.strip().lower() in EXIT_COMMANDS:
        break

      user_request = user_request.strip()
      if not user_request:
        continue

      if user_request == "/help":
        self.ui.show_help()
      elif user_request == "/usage":
        self.ui.show_usage_report(self.config_store.get_token_usage())
      elif user_request == "/clear":
        self.ui.clear_screen()
      else:
        await self.process_command(user_request)

    self.ui.show_goodbye()

  async def run_single_request(self, command: str) -> Optional[ExecutionResult]:
    return await self.process_command(command)
