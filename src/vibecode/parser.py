"""Extraction of sections and writable code blocks from model answers."""

import re
from typing import List, Optional

from .models import CodeBlock, CodeBlockMetadata, Section
from .prompts import PATH_LABELS, SECTION_MARKER
from .utils import file_extension, normalize_path

MIN_CODE_LENGTH = 200
PATH_LOOKBACK_CHARS = 300

WRITABLE_EXTENSIONS = {
  "ts", "js", "tsx", "jsx", "json", "md", "txt", "html", "css", "scss", "yaml", "yml", "py", "vue",
}

COMMAND_PREFIXES = ("npm ", "npx ", "yarn ", "pnpm ", "pip ", "git ", "cd ", "mkdir ", "$ ")
EXAMPLE_MARKERS = ("# example", "// example", "# exemplo", "// exemplo")

# Bare single-word names the model sometimes invents instead of real paths.
SUSPICIOUS_NAMES = {"heap", "stack", "memory", "buffer", "cache"}

CODE_FENCE_PATTERN = re.compile(r"```([\w+#.-]+)[ \t]*\r?\n(.*?)```", re.DOTALL)
PATH_LABEL_PATTERN = re.compile(
  r"\b(?:" + "|".join(PATH_LABELS) + r")\s*(?:\*\*)?\s*:\s*(?:\*\*)?\s*`?([^\n`]+?\.[A-Za-z0-9]+)`?\s*(?:\*\*)?\s*$",
  re.IGNORECASE | re.MULTILINE,
)

IMPORT_PATTERN = re.compile(r"^\s*(?:import\s|from\s+\S+\s+import\s|#include\s|use\s)|\brequire\(", re.MULTILINE)
FUNCTION_PATTERN = re.compile(r"\bfunction\b|=>|\bclass\s|\bdef\s|\bfunc\s|\bfn\s")


def looks_like_command_example(code: str) -> bool:
  lower_code = code.lower()
  if lower_code.startswith(COMMAND_PREFIXES):
    return True
  return any(marker in lower_code for marker in EXAMPLE_MARKERS)


def is_suspicious_path(path: str) -> bool:
  if "/" in path:
    return False
  stem = path.split(".", 1)[0].lower()
  return stem in SUSPICIOUS_NAMES


def build_metadata(code: str) -> CodeBlockMetadata:
  return CodeBlockMetadata(
    line_count=len(code.splitlines()),
    char_count=len(code),
    has_imports=bool(IMPORT_PATTERN.search(code)),
    has_functions=bool(FUNCTION_PATTERN.search(code)),
  )


class ResponseParser:
  """Parses the model's answer. Never raises; no match means no result."""

  def extract_sections(self, response: str) -> List[Section]:
    sections = []
    for chunk in (response or "").split(SECTION_MARKER):
      chunk = chunk.strip()
      if not chunk:
        continue
      lines = chunk.split("\n")
      sections.append(Section(title=lines[0].strip(), content="\n".join(lines[1:]).strip()))
    return sections

  def find_path_before(self, text: str) -> Optional[str]:
    """Return the path of the label closest to the end of text, if any."""
    matches = PATH_LABEL_PATTERN.findall(text)
    if not matches:
      return None
    return normalize_path(matches[-1])

  def resolve_path(self, raw_path: Optional[str]) -> Optional[str]:
    path = normalize_path(raw_path)
    if not path:
      return None
    if file_extension(path) not in WRITABLE_EXTENSIONS:
      return None
    if is_suspicious_path(path):
      return None
    return path

  def extract_code_blocks(self, response: str) -> List[CodeBlock]:
    blocks = []
    previous_end = 0

    for match in CODE_FENCE_PATTERN.finditer(response or ""):
      window_start = max(previous_end, match.start() - PATH_LOOKBACK_CHARS)
      preceding = response[window_start : match.start()]
      previous_end = match.end()

      language = match.group(1).lower()
      code = match.group(2).strip()

      if len(code) < MIN_CODE_LENGTH:
        continue
      if looks_like_command_example(code):
        continue

      path = self.resolve_path(self.find_path_before(preceding))
      if not path:
        continue

      blocks.append(CodeBlock(code=code, language=language, path=path, metadata=build_metadata(code)))

    return blocks
