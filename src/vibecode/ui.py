from typing import List, Optional

from rich.text import Text
from rich.prompt import Prompt
from rich.console import Console

from .models import CodeBlock, CommandIntent, ExecutionResult, ProjectContext, Section, TokenUsage, ValidationResult

AFFIRMATIVE_ANSWERS = {"y", "yes", "s", "sim"}

# Title keyword -> (icon, style) used when rendering the answer sections.
SECTION_STYLES = [
  (("analysis", "análise", "analise"), "📊", "bold #FFD700"),
  (("change", "mudanças", "mudancas"), "✨", "bold #00FF00"),
  (("code", "file", "código", "codigo", "arquivo"), "💻", "bold #00D9FF"),
  (("next", "próximos", "proximos"), "🚀", "bold #FF00FF"),
]

SLASH_COMMANDS = [
  ("/help", "Show this help message"),
  ("/usage", "Show accumulated token usage"),
  ("/clear", "Clear the screen"),
  ("/exit", "Exit vibecode"),
]


class TerminalUI:
  def __init__(self, console: Optional[Console] = None):
    self.console = console or Console()
    self.loading_status = None
    self.loading_active = False

  def _add_spacing(self):
    """Add a blank line for consistent spacing between blocks."""
    self.console.print()

  def show_welcome(self, provider: str, model: str, directory: str):
    box_width = 65
    lines = [
      (" ✻ Welcome to vibecode!", "#EB999A"),
      ("", "#EB999A"),
      (f"   Provider: {provider}", "#666666"),
      (f"   Model: {model}", "#666666"),
      (f"   Directory: {directory}", "#666666"),
    ]

    welcome_text = Text()
    welcome_text.append("╭" + "─" * box_width + "╮\n", style="#EB999A")
    for content, style in lines:
      content = content[:box_width]
      welcome_text.append("│", style="#EB999A")
      welcome_text.append(content, style=style)
      welcome_text.append(" " * (box_width - len(content)), style="#EB999A")
      welcome_text.append("│\n", style="#EB999A")
    welcome_text.append("╰" + "─" * box_width + "╯", style="#EB999A")

    self.console.print(welcome_text)
    self.console.print("[#666666]Describe what you want, e.g. \"fix the bug in src/auth.ts\". Type /help for commands.[/#666666]")
    self._add_spacing()

  def get_user_request(self) -> Optional[str]:
    """Read one command line. Returns None on EOF."""
    try:
      return self.console.input("[bright_white]> [/bright_white]")
    except EOFError:
      return None

  def show_help(self):
    self._add_spacing()
    self.console.print("[bold bright_white]Available Commands:[/bold bright_white]")
    for cmd, description in SLASH_COMMANDS:
      self.console.print(f"  [bright_white]{cmd:<16}[/bright_white] [white]{description}[/white]")
    self.console.print("  [white]Anything else is sent to the assistant as an instruction.[/white]")

  def clear_screen(self):
    self.console.clear()

  def show_step(self, step_text: str, is_final: bool = False):
    """Show a pipeline step. Adds blank line before."""
    self._add_spacing()
    color = "bright_green" if is_final else "bright_white"
    self.console.print(f"[{color}]⏺[/{color}] [bright_white]{step_text}[/bright_white]")

  def show_detail(self, text: str):
    self.console.print(f"  [bright_white]⎿[/bright_white]  [white]{text}[/white]")

  def show_intent(self, intent: CommandIntent):
    self.show_step("Understanding command")
    actions = ", ".join(intent.actions.active()) or "general improvement"
    self.show_detail(f"Actions: {actions} (confidence {intent.confidence:.0%})")
    if intent.target_file:
      self.console.print(f"     [white]Target file: {intent.target_file}[/white]")
    if intent.target_folder:
      self.console.print(f"     [white]Target folder: {intent.target_folder}[/white]")

  def show_project_scan(self, context: ProjectContext):
    self.show_step("Analyzing project")
    technologies = ", ".join(sorted(context.technologies)) or "none detected"
    self.show_detail(f"{context.metadata.code_file_count} source files, technologies: {technologies}")

  def show_sections(self, sections: List[Section]):
    """Render the answer section by section."""
    self.show_step("Result", is_final=True)
    for section in sections:
      icon, style = "", "bold #FFD700"
      title = section.title.lower()
      for keywords, section_icon, section_style in SECTION_STYLES:
        if any(keyword in title for keyword in keywords):
          icon, style = section_icon, section_style
          break

      self._add_spacing()
      heading = f"{icon} {section.title.upper()}" if icon else section.title.upper()
      self.console.print(Text(heading, style=style))

      if "```" in section.content:
        for line in section.content.split("\n"):
          self.console.print(Text("  " + line, style="#00D9FF"))
        continue

      for line in section.content.split("\n"):
        stripped = line.strip()
        if stripped.startswith("-") or stripped.startswith("•"):
          self.console.print(Text("  " + stripped, style="#00D9FF"))
        else:
          self.console.print(Text("  " + line, style="grey62"))

  def show_no_code(self):
    self.show_step("No executable code found in the response")

  def show_code_block(self, block: CodeBlock, validation: ValidationResult):
    self._add_spacing()
    self.console.print(
      f"[bright_white]⏺[/bright_white] [bold bright_white]Write[/bold bright_white]([bright_cyan]{block.path}[/bright_cyan])"
    )
    meta = block.metadata
    self.show_detail(f"{block.language}, {meta.line_count} line{'s' if meta.line_count != 1 else ''}, {meta.char_count} chars")

    if not validation.is_complete:
      self.console.print("  [yellow]⚠ The code looks incomplete:[/yellow]")
    elif validation.warnings:
      self.console.print("  [yellow]⚠ Warnings:[/yellow]")
    for message in validation.errors + validation.warnings:
      self.console.print(f"     [yellow]- {message}[/yellow]")
    for suggestion in validation.suggestions:
      self.console.print(f"     [white]→ {suggestion}[/white]")

  def show_diff_content(self, diff_text: str, max_lines: int = 40):
    if not diff_text:
      return

    lines = diff_text.split("\n")
    for line in lines[:max_lines]:
      text = Text("     " + line)
      if line.startswith("+") and not line.startswith("+++"):
        text.stylize("bright_green")
      elif line.startswith("-") and not line.startswith("---"):
        text.stylize("bright_red")
      elif line.startswith("@@"):
        text.stylize("cyan")
      else:
        text.stylize("white")
      self.console.print(text, overflow="ellipsis", no_wrap=True)
    if len(lines) > max_lines:
      self.console.print(f"     [dim]... {len(lines) - max_lines} more lines[/dim]")

  def confirm(self, question: str) -> bool:
    """Ask a yes/no question. Anything but an explicit yes declines."""
    self._add_spacing()
    answer = Prompt.ask(f"[yellow]⚠ {question} (y/n)[/yellow]", console=self.console, default="n", show_default=False)
    return (answer or "").strip().lower() in AFFIRMATIVE_ANSWERS

  def show_cancelled(self):
    self.show_step("Cancelled, no files were changed")

  def show_directory_created(self, directory: str):
    self.console.print(f"  [grey62]📁 Created directory: {directory}[/grey62]")

  def show_file_written(self, path: str, existed: bool):
    action = "Modified" if existed else "Created"
    self.console.print(f"  [green]✓ {action}: {path}[/green]")

  def show_execution_summary(self, result: ExecutionResult):
    written = len(result.files_written)
    self.show_step(f"Applied changes to {written} file{'s' if written != 1 else ''}", is_final=result.success)
    for path in result.files_created:
      self.console.print(f"  [green]+ created  {path}[/green]")
    for path in result.files_modified:
      self.console.print(f"  [cyan]~ modified {path}[/cyan]")
    for error in result.errors:
      self.console.print(f"  [bright_red]✗ {error}[/bright_red]")

  def show_token_usage(self, tokens: int):
    self.console.print(f"  [dim]~{tokens} tokens used[/dim]")

  def show_usage_report(self, usage: TokenUsage):
    self.show_step("Token usage")
    self.show_detail(f"{usage.total_tokens} tokens, ~${usage.total_cost:.4f} since {usage.last_reset}")
    for entry in usage.history[-5:]:
      self.console.print(f"     [white]{entry.timestamp}  {entry.command:<10} {entry.tokens:>7} tokens[/white]")

  def show_error(self, error: str):
    self._add_spacing()
    self.console.print(f"[bright_red]⏺[/bright_red] [bright_red]Error: {error}[/bright_red]")

  def show_goodbye(self):
    self._add_spacing()
    self.console.print("[bright_white]Goodbye![/bright_white]")

  def start_loading(self, message: str = "Thinking"):
    """Show a transient spinner until stop_loading is called."""
    if self.loading_active:
      return

    self.loading_status = self.console.status(f"[dim white]{message}...[/dim white]", spinner="dots")
    self.loading_status.start()
    self.loading_active = True

  def stop_loading(self):
    if not self.loading_active:
      return

    self.loading_active = False
    if self.loading_status:
      self.loading_status.stop()
      self.loading_status = None
