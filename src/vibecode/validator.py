"""Syntactic completeness heuristics for generated code.

The checks only flag code that looks truncated; they never stop a write.
"""

from .models import ValidationResult

SCRIPT_LANGUAGES = {"typescript", "ts", "tsx", "javascript", "js", "jsx", "mjs", "cjs"}

MIN_DEFINITION_CHECK_LENGTH = 50
MIN_MODULE_LENGTH = 200
TRAILING_LINES_CHECKED = 3


class CodeValidator:
  def validate(self, code: str, language: str) -> ValidationResult:
    result = ValidationResult()
    if (language or "").lower() not in SCRIPT_LANGUAGES:
      return result

    open_braces, close_braces = code.count("{"), code.count("}")
    if open_braces != close_braces:
      result.errors.append(f"Unbalanced braces: {open_braces} opening, {close_braces} closing")

    open_parens, close_parens = code.count("("), code.count(")")
    if open_parens != close_parens:
      result.errors.append(f"Unbalanced parentheses: {open_parens} opening, {close_parens} closing")

    has_definition = "function" in code or "=>" in code or "class" in code
    if not has_definition and len(code) > MIN_DEFINITION_CHECK_LENGTH:
      result.warnings.append("No function, class or arrow function found")

    if len(code) < MIN_MODULE_LENGTH and "export" not in code and "import" not in code:
      result.warnings.append(f"Code is very short (< {MIN_MODULE_LENGTH} characters) and has no imports or exports")

    last_lines = "\n".join(code.rstrip().split("\n")[-TRAILING_LINES_CHECKED:])
    if "/**" in last_lines and "*/" not in last_lines:
      result.errors.append("Unterminated JSDoc comment at the end of the file")
    elif "/*" in last_lines and "*/" not in last_lines:
      result.errors.append("Unterminated block comment at the end of the file")

    if result.errors:
      result.is_valid = False
      result.is_complete = False
      result.suggestions.extend(
        [
          'Ask again for the missing part, e.g. vibe "complete the file <path>"',
          "Or review and complete the code manually",
        ]
      )
    elif result.warnings:
      result.suggestions.append("Review the generated code before relying on it")

    return result
