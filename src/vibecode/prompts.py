"""Prompt construction and the response template shared with the parser.

The section titles and the ``File:`` label below are the contract between
the prompt and ResponseParser. The parser imports these constants, so a
change here changes what it looks for.
"""

from pathlib import Path
from typing import List, Optional

from .intent import describe_actions
from .models import CommandIntent, ProjectContext

SECTION_MARKER = "##"
SECTION_ANALYSIS = "Analysis"
SECTION_CHANGES = "Changes Made"
SECTION_CODE = "Code"
SECTION_NEXT_STEPS = "Next Steps"
TEMPLATE_SECTIONS = [SECTION_ANALYSIS, SECTION_CHANGES, SECTION_CODE, SECTION_NEXT_STEPS]

FILE_LABEL = "File"
# Labels accepted in front of a code block, including the ones the
# Portuguese prompt of earlier versions produced.
PATH_LABELS = [FILE_LABEL, "Path", "Arquivo", "Caminho"]

MAX_FILE_CONTENT_CHARS = 3000
MAX_LISTED_FILES = 15

SYSTEM_PROMPT = (
  "You are an expert software developer working inside the user's project. "
  "You return complete, working files that can be written to disk as-is, "
  "and you always follow the response format you are given."
)


def response_template() -> str:
  return f"""{SECTION_MARKER} {SECTION_ANALYSIS}
[your analysis of the problem or task]

{SECTION_MARKER} {SECTION_CHANGES}
[detailed list of the changes you made]

{SECTION_MARKER} {SECTION_CODE}
{FILE_LABEL}: [relative/path/to/file.ext]
```[language]
[COMPLETE FILE CONTENT]
```

{SECTION_MARKER} {SECTION_NEXT_STEPS}
[what the user should do next]"""


class PromptBuilder:
  """Builds the single prompt sent to the model for a command."""

  def __init__(self, max_file_chars: int = MAX_FILE_CONTENT_CHARS, max_listed_files: int = MAX_LISTED_FILES):
    self.max_file_chars = max_file_chars
    self.max_listed_files = max_listed_files

  def _context_block(self, intent: CommandIntent, context: ProjectContext, folder_listing: Optional[List[str]]) -> str:
    technologies = ", ".join(sorted(context.technologies)) or "none detected"
    lines = [
      f"- Project: {Path(context.root).name}",
      f"- Technologies: {technologies}",
      f"- Files: {len(context.files)} source files",
    ]
    if context.git_branch:
      lines.append(f"- Git branch: {context.git_branch}")
    if intent.target_folder:
      lines.append(f"- Target folder: {intent.target_folder}")
    if intent.target_file:
      lines.append(f"- Target file: {intent.target_file}")

    if folder_listing:
      lines.append(f"\nFiles in {intent.target_folder}:")
      lines.extend(f"- {name}" for name in folder_listing)

    listed = context.files[: self.max_listed_files]
    if listed:
      lines.append("\nRELEVANT FILES:")
      lines.extend(f"- {path}" for path in listed)

    return "\n".join(lines)

  def build(
    self,
    intent: CommandIntent,
    context: ProjectContext,
    target_file_content: Optional[str] = None,
    folder_listing: Optional[List[str]] = None,
  ) -> str:
    parts = [
      "You are an expert developer. Carry out this task:",
      "",
      f"COMMAND: {intent.full_command}",
      "",
      "PROJECT:",
      self._context_block(intent, context, folder_listing),
      "",
      "TASK:",
      describe_actions(intent.actions),
    ]

    if target_file_content:
      content = target_file_content[: self.max_file_chars]
      parts.extend(["", f"CURRENT CONTENT OF {intent.target_file}:", "```", content, "```"])

    parts.extend(
      [
        "",
        "CRITICAL INSTRUCTIONS:",
        "1. Analyze the existing code",
        "2. Identify problems and improvements",
        "3. Implement the necessary changes",
        "4. Return COMPLETE, WORKING code",
        "5. Explain what was done",
        "",
        "IMPORTANT:",
        "- Return the COMPLETE file content, not just fragments",
        "- Include ALL required imports",
        "- Preserve the existing structure and formatting",
        f"- Put a '{FILE_LABEL}: <relative path>' line right before every code block",
        "- The code must be ready to be written to disk",
        "",
        "MANDATORY RESPONSE FORMAT:",
        response_template(),
      ]
    )
    return "\n".join(parts)
