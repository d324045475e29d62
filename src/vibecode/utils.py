"""Utility functions for the vibecode agent."""

import math
import re
from typing import Optional

CHARS_PER_TOKEN = 4

_INVALID_PATH_CHARS = re.compile(r'[<>:"|?*]')


def estimate_tokens(text: str) -> int:
  """Estimate the token count of text at roughly four characters per token."""
  if not text:
    return 0
  return math.ceil(len(text) / CHARS_PER_TOKEN)


def normalize_path(raw_path: Optional[str]) -> Optional[str]:
  """
  Clean a file path coming from model output or user input.

  Strips backticks and quotes, converts backslashes to forward slashes,
  removes characters that are invalid in file names and drops a leading "./".
  Returns None when nothing usable is left.
  """
  if not raw_path:
    return None

  path = raw_path.strip().replace("`", "").strip("'\"")
  path = path.replace("\\", "/")
  path = _INVALID_PATH_CHARS.sub("", path).strip()
  while path.startswith("./"):
    path = path[2:]

  return path or None


def file_extension(path: str) -> str:
  """Lowercase extension without the dot, or "" when there is none."""
  name = path.rsplit("/", 1)[-1]
  if "." not in name.strip("."):
    return ""
  return name.rsplit(".", 1)[-1].lower()
