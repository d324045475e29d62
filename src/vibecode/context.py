import os
import json
import logging
from typing import Dict, List, Optional
from pathlib import Path

import git

from .models import ProjectContext

logger = logging.getLogger(__name__)

MANIFEST_FILE = "package.json"

# Dependency name -> technology label. Unlisted dependencies are ignored.
TECHNOLOGY_MAP = {
  "react": "React",
  "next": "Next.js",
  "vue": "Vue",
  "nuxt": "Nuxt",
  "svelte": "Svelte",
  "@angular/core": "Angular",
  "express": "Express",
  "fastify": "Fastify",
  "@nestjs/core": "NestJS",
  "typescript": "TypeScript",
  "vite": "Vite",
  "webpack": "Webpack",
  "jest": "Jest",
  "vitest": "Vitest",
  "tailwindcss": "Tailwind CSS",
  "prisma": "Prisma",
  "electron": "Electron",
}

IGNORED_DIRS = {
  "node_modules",
  ".git",
  "dist",
  "build",
  "out",
  ".next",
  "coverage",
  "vscode",
  "__pycache__",
  ".pytest_cache",
  "venv",
  ".venv",
  "target",
}

SOURCE_EXTENSIONS = {".ts", ".tsx", ".js", ".jsx", ".vue", ".py", ".java", ".go", ".rs"}

MAX_DEPTH = 4
MAX_FILES = 50


class ProjectScanner:
  def __init__(self, project_root: str = ".", max_depth: int = MAX_DEPTH, max_files: int = MAX_FILES):
    self.project_root = Path(project_root).resolve()
    self.max_depth = max_depth
    self.max_files = max_files

  def _should_ignore(self, name: str) -> bool:
    return name in IGNORED_DIRS or name.startswith(".")

  def _is_source_file(self, name: str) -> bool:
    return Path(name).suffix.lower() in SOURCE_EXTENSIONS

  def detect_technologies(self, root: Path) -> set:
    manifest = root / MANIFEST_FILE
    if not manifest.is_file():
      return set()

    try:
      with open(manifest, "r", encoding="utf-8") as f:
        package = json.load(f)
    except (OSError, ValueError) as e:
      logger.debug("Could not read %s: %s", manifest, e)
      return set()

    if not isinstance(package, dict):
      return set()

    dependencies = {}
    for key in ("dependencies", "devDependencies"):
      section = package.get(key)
      if isinstance(section, dict):
        dependencies.update(section)

    return {TECHNOLOGY_MAP[name] for name in dependencies if name in TECHNOLOGY_MAP}

  def scan(self, root: Optional[str] = None) -> ProjectContext:
    """Build a fresh inventory of the project. Never raises on IO errors."""
    root_path = Path(root).resolve() if root else self.project_root
    context = ProjectContext(root=str(root_path))
    context.technologies = self.detect_technologies(root_path)
    self._scan_directory(root_path, root_path, 0, context)
    context.metadata.code_file_count = len(context.files)
    context.git_branch = self.git_context(root_path).get("branch")
    return context

  def _scan_directory(self, root: Path, directory: Path, depth: int, context: ProjectContext) -> None:
    if depth >= self.max_depth or len(context.files) >= self.max_files:
      return

    try:
      entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
    except OSError as e:
      logger.debug("Skipping unreadable directory %s: %s", directory, e)
      return

    for entry in entries:
      if len(context.files) >= self.max_files:
        return
      if self._should_ignore(entry.name):
        continue

      try:
        if entry.is_dir(follow_symlinks=False):
          self._scan_directory(root, Path(entry.path), depth + 1, context)
        elif entry.is_file():
          context.metadata.file_count += 1
          if self._is_source_file(entry.name):
            context.files.append(Path(entry.path).relative_to(root).as_posix())
            context.metadata.total_size += entry.stat().st_size
      except OSError as e:
        logger.debug("Skipping %s: %s", entry.path, e)

  def list_folder(self, folder: str, limit: int = 5) -> List[str]:
    """List the first non-ignored entries of a folder inside the project."""
    folder_path = self.project_root / folder
    if not folder_path.is_dir():
      return []

    try:
      names = sorted(name for name in os.listdir(folder_path) if not self._should_ignore(name))
    except OSError:
      return []
    return names[:limit]

  def read_file(self, relative_path: str, max_chars: Optional[int] = None) -> Optional[str]:
    """Read a project file, or None when it is missing or unreadable."""
    file_path = self.project_root / relative_path
    if not file_path.is_file():
      return None

    try:
      with open(file_path, "r", encoding="utf-8") as f:
        return f.read(max_chars) if max_chars else f.read()
    except (OSError, UnicodeDecodeError) as e:
      logger.debug("Could not read %s: %s", file_path, e)
      return None

  def git_context(self, root: Optional[Path] = None) -> Dict[str, str]:
    try:
      repo = git.Repo(root or self.project_root)
    except (git.InvalidGitRepositoryError, git.NoSuchPathError):
      return {}

    try:
      branch = repo.active_branch.name
    except TypeError:
      # Detached HEAD
      try:
        branch = repo.head.commit.hexsha[:8]
      except ValueError:
        return {}

    try:
      dirty = repo.is_dirty()
    except git.GitCommandError:
      dirty = False

    return {"branch": branch, "dirty": str(dirty)}
