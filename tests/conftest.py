"""Shared fixtures for all tests."""

import io
import json
import tempfile
from pathlib import Path
from typing import Generator, List, Optional

import pytest
from rich.console import Console

from vibecode.config import ConfigStore
from vibecode.tools import AIProviderError
from vibecode.ui import TerminalUI

AUTH_TS = """import { Request, Response } from "express";

export interface User {
  id: string;
  email: string;
}

export function authenticate(req: Request, res: Response): User | null {
  const header = req.headers["authorization"];
  if (!header || !header.startsWith("Bearer ")) {
    res.status(401).send("missing token");
    return null;
  }
  return { id: header.slice(7), email: "user@test.dev" };
}

export const isAdmin = (user: User): boolean => user.email.endsWith("@admin.dev");"""

AUTH_TS_V2 = AUTH_TS.replace("missing token", "invalid or missing bearer token")


def make_answer(*files, analysis: str = "The token check was wrong.") -> str:
  """Build an answer that follows the response template."""
  code_parts = []
  for path, language, code in files:
    code_parts.append(f"File: {path}\n```{language}\n{code}\n```")
  code_section = "\n\n".join(code_parts)
  return (
    f"## Analysis\n{analysis}\n\n"
    "## Changes Made\n- Fixed the bearer token check\n\n"
    f"## Code\n{code_section}\n\n"
    "## Next Steps\n- Run the test suite\n"
  )


class FakeLLMClient:
  """Stands in for LLMClient; returns a canned answer or raises."""

  def __init__(self, response: str = "", error: Optional[Exception] = None):
    self.model = "fake-model"
    self.response = response
    self.error = error
    self.prompts: List[str] = []
    self.system_prompts: List[Optional[str]] = []

  async def ask(self, prompt: str, system_prompt: Optional[str] = None) -> str:
    self.prompts.append(prompt)
    self.system_prompts.append(system_prompt)
    if self.error:
      raise self.error
    return self.response

  async def chat(self, messages) -> str:
    return await self.ask(messages[-1]["content"])


class ScriptedConfirm:
  """Confirmation capability that answers from a fixed script."""

  def __init__(self, answer: bool):
    self.answer = answer
    self.questions: List[str] = []

  def __call__(self, question: str) -> bool:
    self.questions.append(question)
    return self.answer


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
  """Keep real provider settings out of the tests."""
  for name in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "VIBECODE_MODEL"):
    monkeypatch.delenv(name, raising=False)
  monkeypatch.setattr("vibecode.config.load_dotenv", lambda *args, **kwargs: False)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
  """Create a temporary directory for testing."""
  with tempfile.TemporaryDirectory() as temp_dir:
    yield Path(temp_dir)


@pytest.fixture
def home_dir(temp_dir: Path) -> Path:
  home = temp_dir / "home"
  home.mkdir()
  return home


@pytest.fixture
def project_dir(temp_dir: Path) -> Path:
  """A small TypeScript project with an auth module."""
  project = temp_dir / "project"
  (project / "src").mkdir(parents=True)
  (project / "package.json").write_text(
    json.dumps({"dependencies": {"express": "^4.0.0", "left-pad": "1.0.0"}, "devDependencies": {"typescript": "^5.0.0"}})
  )
  (project / "auth.ts").write_text("export const broken = (;\n")
  (project / "src" / "index.ts").write_text("import './auth';\n")
  return project


@pytest.fixture
def config_store(project_dir: Path, home_dir: Path) -> ConfigStore:
  store = ConfigStore(project_root=str(project_dir), home_dir=str(home_dir))
  store.load()
  return store


@pytest.fixture
def ui() -> TerminalUI:
  """A TerminalUI whose console writes to a buffer."""
  return TerminalUI(console=Console(file=io.StringIO(), force_terminal=True, highlight=False, width=100))


def get_output(ui: TerminalUI) -> str:
  file = ui.console.file
  if isinstance(file, io.StringIO):
    return file.getvalue()
  return ""


@pytest.fixture
def provider_error() -> AIProviderError:
  return AIProviderError("openai request failed: rate limit exceeded")
