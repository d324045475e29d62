"""Shared data models for the vibecode agent."""

from typing import List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProjectMetadata(BaseModel):
  """Counters gathered while scanning the project."""

  file_count: int = 0
  code_file_count: int = 0
  total_size: int = 0


class ProjectContext(BaseModel):
  """Lightweight inventory of the working directory."""

  root: str
  files: List[str] = []
  technologies: Set[str] = set()
  metadata: ProjectMetadata = Field(default_factory=ProjectMetadata)
  git_branch: Optional[str] = None


class ActionFlags(BaseModel):
  """One flag per action the assistant knows how to perform."""

  model_config = ConfigDict(frozen=True)

  develop: bool = False
  debug: bool = False
  optimize: bool = False
  refactor: bool = False
  test: bool = False
  document: bool = False
  analyze: bool = False

  def active(self) -> List[str]:
    return [name for name, enabled in self.model_dump().items() if enabled]


class CommandIntent(BaseModel):
  """Structured interpretation of a free-form command."""

  model_config = ConfigDict(frozen=True)

  target_folder: Optional[str] = None
  target_file: Optional[str] = None
  actions: ActionFlags = Field(default_factory=ActionFlags)
  full_command: str = ""
  confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class Section(BaseModel):
  """A titled section of the model's answer."""

  title: str
  content: str = ""


class CodeBlockMetadata(BaseModel):
  line_count: int = 0
  char_count: int = 0
  has_imports: bool = False
  has_functions: bool = False


class CodeBlock(BaseModel):
  """A fenced code block extracted from the model's answer."""

  code: str
  language: str
  path: Optional[str] = None
  metadata: CodeBlockMetadata = Field(default_factory=CodeBlockMetadata)


class ValidationResult(BaseModel):
  """Advisory diagnostics for a code block."""

  is_valid: bool = True
  is_complete: bool = True
  warnings: List[str] = []
  errors: List[str] = []
  suggestions: List[str] = []


class ExecutionResult(BaseModel):
  """Outcome of applying code blocks to the filesystem."""

  success: bool = True
  files_created: List[str] = []
  files_modified: List[str] = []
  errors: List[str] = []

  @property
  def files_written(self) -> List[str]:
    return self.files_created + self.files_modified


class TokenUsageEntry(BaseModel):
  """One recorded AI call."""

  timestamp: str
  tokens: int
  cost: float
  command: str


class TokenUsage(BaseModel):
  """Accumulated token usage, persisted in the configuration file."""

  total_tokens: int = 0
  total_cost: float = 0.0
  last_reset: str = ""
  history: List[TokenUsageEntry] = []

  @field_validator("history", mode="before")
  @classmethod
  def validate_history(cls, v):
    if v is None:
      return []
    if not isinstance(v, list):
      return []
    return [entry for entry in v if isinstance(entry, (dict, TokenUsageEntry))]
