import sys
import asyncio
import logging

import click
from rich.logging import RichHandler

from .config import ConfigError
from .orchestrator import AgentOrchestrator


def _configure_logging(verbose: bool) -> None:
  logging.basicConfig(
    level=logging.DEBUG if verbose else logging.WARNING,
    format="%(name)s: %(message)s",
    handlers=[RichHandler(show_time=False, show_path=False)],
  )


@click.command()
@click.argument("command", nargs=-1)
@click.option("--project-root", default=".", help="Project root directory (default: current directory)")
@click.option("--model", default=None, help="Model to use for this run (overrides vibecode.toml)")
@click.option("--verbose", is_flag=True, help="Show debug logging")
def main(command, project_root: str, model: str, verbose: bool):
  """
  vibecode - turn one natural-language instruction into file changes.

  Pass the instruction as arguments to run it once, e.g.
  vibe "fix the bug in src/auth.ts", or run without arguments for an
  interactive session. Every change is shown and confirmed before any
  file is written.
  """
  _configure_logging(verbose)

  try:
    orchestrator = AgentOrchestrator(project_root=project_root, model=model)
  except ConfigError as e:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)

  if command:
    result = asyncio.run(orchestrator.run_single_request(" ".join(command)))
    if orchestrator.last_error or (result is not None and not result.success):
      sys.exit(1)
    sys.exit(0)

  asyncio.run(orchestrator.run_interactive_session())
