"""End-to-end tests for the command pipeline."""

import asyncio
from pathlib import Path

import pytest
from click.testing import CliRunner

from vibecode import main
from vibecode.config import ConfigStore
from vibecode.orchestrator import AgentOrchestrator
from vibecode.prompts import SYSTEM_PROMPT
from vibecode.tools import AIProviderError
from vibecode.ui import TerminalUI

from conftest import AUTH_TS, AUTH_TS_V2, FakeLLMClient, ScriptedConfirm, get_output, make_answer

BROKEN_AUTH = "export const broken = (;\n"


def make_orchestrator(project_dir: Path, config_store: ConfigStore, ui: TerminalUI, client: FakeLLMClient, confirm: ScriptedConfirm):
  return AgentOrchestrator(
    project_root=str(project_dir),
    config_store=config_store,
    llm_client=client,
    ui=ui,
    confirm=confirm,
  )


class TestProcessCommand:
  def test_fix_bug_modifies_target_file(self, project_dir, config_store, ui):
    client = FakeLLMClient(make_answer(("auth.ts", "typescript", AUTH_TS)))
    confirm = ScriptedConfirm(True)
    orchestrator = make_orchestrator(project_dir, config_store, ui, client, confirm)

    result = asyncio.run(orchestrator.process_command("fix the bug in auth.ts"))

    assert result is not None
    assert result.success
    assert result.files_modified == ["auth.ts"]
    assert result.files_created == []
    assert (project_dir / "auth.ts").read_text() == AUTH_TS
    assert len(confirm.questions) == 1

    prompt = client.prompts[0]
    assert "COMMAND: fix the bug in auth.ts" in prompt
    assert BROKEN_AUTH.strip() in prompt
    assert "Express, TypeScript" in prompt
    assert client.system_prompts == [SYSTEM_PROMPT]
    assert config_store.get_token_usage().total_tokens > 0

  def test_declined_changes_leave_files_untouched(self, project_dir, config_store, ui):
    client = FakeLLMClient(make_answer(("auth.ts", "typescript", AUTH_TS)))
    orchestrator = make_orchestrator(project_dir, config_store, ui, client, ScriptedConfirm(False))

    result = asyncio.run(orchestrator.process_command("fix the bug in auth.ts"))

    assert result is None
    assert (project_dir / "auth.ts").read_text() == BROKEN_AUTH
    assert "Cancelled, no files were changed" in get_output(ui)
    assert orchestrator.last_error is None
    # Usage is recorded as soon as the answer arrives.
    assert config_store.get_token_usage().total_tokens > 0

  def test_blocks_with_same_path_are_applied_in_order(self, project_dir, config_store, ui):
    answer = make_answer(("auth.ts", "typescript", AUTH_TS), ("auth.ts", "typescript", AUTH_TS_V2))
    orchestrator = make_orchestrator(project_dir, config_store, ui, FakeLLMClient(answer), ScriptedConfirm(True))

    result = asyncio.run(orchestrator.process_command("fix the bug in auth.ts"))

    assert result.files_modified == ["auth.ts"]
    assert (project_dir / "auth.ts").read_text() == AUTH_TS_V2

  def test_new_file_in_new_folder(self, project_dir, config_store, ui):
    answer = make_answer(("src/routes/login.ts", "typescript", AUTH_TS))
    orchestrator = make_orchestrator(project_dir, config_store, ui, FakeLLMClient(answer), ScriptedConfirm(True))

    result = asyncio.run(orchestrator.process_command("create a login route in the folder src/routes"))

    assert result.files_created == ["src/routes/login.ts"]
    assert (project_dir / "src" / "routes" / "login.ts").read_text() == AUTH_TS
    assert "Created directory: src/routes" in get_output(ui)

  def test_provider_error_writes_nothing(self, project_dir, config_store, ui, provider_error):
    confirm = ScriptedConfirm(True)
    orchestrator = make_orchestrator(project_dir, config_store, ui, FakeLLMClient(error=provider_error), confirm)

    result = asyncio.run(orchestrator.process_command("fix the bug in auth.ts"))

    assert result is None
    assert confirm.questions == []
    assert (project_dir / "auth.ts").read_text() == BROKEN_AUTH
    assert "Error: openai request failed: rate limit exceeded" in get_output(ui)
    assert orchestrator.last_error == "openai request failed: rate limit exceeded"

  def test_answer_without_code_writes_nothing(self, project_dir, config_store, ui):
    confirm = ScriptedConfirm(True)
    client = FakeLLMClient("## Analysis\nThe code already looks right.\n\n## Next Steps\n- Nothing to do")
    orchestrator = make_orchestrator(project_dir, config_store, ui, client, confirm)

    result = asyncio.run(orchestrator.process_command("analyze auth.ts"))

    assert result is not None
    assert result.success
    assert result.files_written == []
    assert confirm.questions == []
    assert (project_dir / "auth.ts").read_text() == BROKEN_AUTH
    output = get_output(ui)
    assert "ANALYSIS" in output
    assert "No executable code found in the response" in output

  def test_model_override(self, project_dir, config_store, ui):
    orchestrator = AgentOrchestrator(
      project_root=str(project_dir),
      config_store=config_store,
      llm_client=FakeLLMClient(""),
      ui=ui,
      model="gpt-4o-mini",
    )
    assert orchestrator.config.model == "gpt-4o-mini"


class TestInteractiveSession:
  def run_session(self, orchestrator: AgentOrchestrator, inputs, monkeypatch):
    answers = iter(inputs)

    def next_request():
      value = next(answers)
      if isinstance(value, BaseException):
        raise value
      return value

    monkeypatch.setattr(orchestrator.ui, "get_user_request", next_request)
    asyncio.run(orchestrator.run_interactive_session())

  def test_slash_commands_and_exit(self, project_dir, config_store, ui, monkeypatch):
    client = FakeLLMClient("")
    orchestrator = make_orchestrator(project_dir, config_store, ui, client, ScriptedConfirm(False))

    self.run_session(orchestrator, ["/help", "", "/usage", "exit"], monkeypatch)

    output = get_output(ui)
    assert "Welcome to vibecode" in output
    assert "Available Commands" in output
    assert "Token usage" in output
    assert "Goodbye!" in output
    assert client.prompts == []

  def test_commands_are_processed_until_eof(self, project_dir, config_store, ui, monkeypatch):
    client = FakeLLMClient("## Analysis\nNothing to change.")
    orchestrator = make_orchestrator(project_dir, config_store, ui, client, ScriptedConfirm(False))

    self.run_session(orchestrator, ["analyze the project", None], monkeypatch)

    assert len(client.prompts) == 1
    assert "Goodbye!" in get_output(ui)

  def test_keyboard_interrupt_ends_session(self, project_dir, config_store, ui, monkeypatch):
    orchestrator = make_orchestrator(project_dir, config_store, ui, FakeLLMClient(""), ScriptedConfirm(False))
    self.run_session(orchestrator, [KeyboardInterrupt()], monkeypatch)
    assert "Goodbye!" in get_output(ui)


class TestCLI:
  @pytest.fixture
  def isolated_home(self, home_dir, monkeypatch):
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir

  def test_missing_api_key_exits_with_error(self, project_dir, isolated_home):
    result = CliRunner().invoke(main, ["--project-root", str(project_dir), "fix", "the", "bug"])
    assert result.exit_code == 1
    assert "No API key found" in result.output

  def test_single_command_without_code_exits_cleanly(self, project_dir, isolated_home, monkeypatch):
    client = FakeLLMClient("## Analysis\nNothing to change.")
    monkeypatch.setattr("vibecode.orchestrator.LLMClient", lambda *args, **kwargs: client)

    result = CliRunner().invoke(main, ["--project-root", str(project_dir), "analyze", "auth.ts"])

    assert result.exit_code == 0
    assert client.prompts[0].startswith("You are an expert developer")
    assert "COMMAND: analyze auth.ts" in client.prompts[0]

  def test_provider_error_exits_with_error(self, project_dir, isolated_home, monkeypatch):
    client = FakeLLMClient(error=AIProviderError("openai request failed: 401 unauthorized"))
    monkeypatch.setattr("vibecode.orchestrator.LLMClient", lambda *args, **kwargs: client)

    result = CliRunner().invoke(main, ["--project-root", str(project_dir), "fix", "auth.ts"])

    assert result.exit_code == 1
    assert "401 unauthorized" in result.output
    assert (project_dir / "auth.ts").read_text() == BROKEN_AUTH
