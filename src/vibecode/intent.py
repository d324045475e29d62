"""Heuristic interpretation of free-form commands."""

import re
from typing import List, Optional, Pattern, Tuple

from .models import ActionFlags, CommandIntent

SOURCE_FILE_EXTENSIONS = [
  "ts", "tsx", "js", "jsx", "mjs", "cjs", "vue", "py", "java", "go", "rs",
  "json", "md", "txt", "html", "css", "scss", "yaml", "yml",
]

_PATH_TOKEN = r"[`'\"]?([^\s`'\"]+)"

FOLDER_PATTERNS: List[Pattern] = [
  re.compile(r"\b(?:folder|directory|dir|pasta|diret[oó]rio)\s+" + _PATH_TOKEN, re.IGNORECASE),
  re.compile(r"\b(?:in|inside|under|into|em|na|no)\s+[`'\"]?([\w.\-/]+/)(?=[\s`'\".,;:!?]|$)", re.IGNORECASE),
]

FILE_PATTERNS: List[Pattern] = [
  re.compile(r"\b(?:file|arquivo)\s+[`'\"]?([^\s`'\"]*[./\\][^\s`'\"]*)", re.IGNORECASE),
  re.compile(
    r"(?<![\w/.\\-])([\w.\-/\\]+\.(?:" + "|".join(SOURCE_FILE_EXTENSIONS) + r"))(?![\w/\\-])",
    re.IGNORECASE,
  ),
]

# Each action is matched independently; several may be set at once.
ACTION_PATTERNS: List[Tuple[str, List[Pattern]]] = [
  ("develop", [
    re.compile(r"\b(?:develop\w*|creat\w*|implement\w*|build|write|add|make|generat\w*|code)\b", re.IGNORECASE),
    re.compile(r"\b(?:desenvolv\w*|cri[ae]\w*|fa[zç]\w*|codific\w*)", re.IGNORECASE),
  ]),
  ("debug", [
    re.compile(r"\b(?:debug\w*|fix\w*|bugs?|errors?|broken|crash\w*)\b", re.IGNORECASE),
    re.compile(r"\b(?:corrig\w*|consert\w*|erros?)\b", re.IGNORECASE),
  ]),
  ("optimize", [
    re.compile(r"\b(?:optimi[sz]\w*|improv\w*|performance|faster|speed\s+up)\b", re.IGNORECASE),
    re.compile(r"\b(?:otimiz\w*|melhor\w*|r[aá]pid\w*)", re.IGNORECASE),
  ]),
  ("refactor", [
    re.compile(r"\b(?:refactor\w*|clean\s*up|reorgani[sz]\w*|restructur\w*|organi[sz]\w*)\b", re.IGNORECASE),
    re.compile(r"\b(?:refator\w*|limp\w*|estrutur\w*)", re.IGNORECASE),
  ]),
  ("test", [
    re.compile(r"\b(?:tests?|testing|specs?)\b", re.IGNORECASE),
    re.compile(r"\btest[ae]\w*", re.IGNORECASE),
  ]),
  ("document", [
    re.compile(r"\b(?:document\w*|docs?|docstrings?|comments?|readme|jsdoc)\b", re.IGNORECASE),
    re.compile(r"\b(?:coment\w*|documenta\w*)", re.IGNORECASE),
  ]),
  ("analyze", [
    re.compile(r"\b(?:analy[sz]\w*|review\w*|check\w*|inspect\w*|audit\w*|verify)\b", re.IGNORECASE),
    re.compile(r"\b(?:analis\w*|revis\w*|verific\w*)", re.IGNORECASE),
  ]),
]

ACTION_DESCRIPTIONS = {
  "develop": "Develop/implement the requested code",
  "debug": "Debug and fix errors",
  "optimize": "Optimize performance",
  "refactor": "Refactor and clean up the code",
  "test": "Write tests",
  "document": "Document the code",
  "analyze": "Analyze and review the code",
}
DEFAULT_TASK_DESCRIPTION = "Improve the code in general"

ACTIONS_FOR_FULL_CONFIDENCE = 3

_TRAILING_PUNCTUATION = ".,;:!?)\"'`"


def _clean_match(value: str) -> Optional[str]:
  value = value.strip().strip("`'\"").rstrip(_TRAILING_PUNCTUATION)
  return value or None


def _first_match(patterns: List[Pattern], command: str) -> Optional[str]:
  for pattern in patterns:
    match = pattern.search(command)
    if match:
      value = _clean_match(match.group(1))
      if value:
        return value
  return None


class IntentAnalyzer:
  """Extracts target paths and action flags from a command string."""

  def analyze(self, command: str) -> CommandIntent:
    command = command or ""

    flags = {}
    for action, patterns in ACTION_PATTERNS:
      flags[action] = any(pattern.search(command) for pattern in patterns)
    actions = ActionFlags(**flags)

    matched = len(actions.active())
    confidence = min(1.0, matched / ACTIONS_FOR_FULL_CONFIDENCE)

    return CommandIntent(
      target_folder=_first_match(FOLDER_PATTERNS, command),
      target_file=_first_match(FILE_PATTERNS, command),
      actions=actions,
      full_command=command,
      confidence=confidence,
    )


def describe_actions(actions: ActionFlags) -> str:
  tasks = [ACTION_DESCRIPTIONS[name] for name in actions.active()]
  return ", ".join(tasks) if tasks else DEFAULT_TASK_DESCRIPTION
