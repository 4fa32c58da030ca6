"""Output normalization: blank-line stripping and prettier formatting."""
import shlex
import subprocess
from pathlib import Path
from typing import List

TYPESCRIPT_EXTENSIONS = {'.ts', '.mts', '.cts', '.tsx'}


class FormatterError(RuntimeError):
    """The external formatter is missing or rejected the input."""


def strip_blank_lines(text: str) -> str:
    """Drop every line that is empty or whitespace-only."""
    return '\n'.join(line for line in text.split('\n') if line.strip() != '')


class PrettierFormatter:
    """Runs prettier on rendered source over stdin/stdout.

    Options are fixed to the house style: single quotes, semicolons
    always, no trailing commas.
    """

    def __init__(self, command: str = "npx --yes prettier", timeout: float = 60):
        """Initialize formatter.

        Args:
            command: Command line that starts prettier
            timeout: Seconds before the formatter is abandoned
        """
        self.command = shlex.split(command)
        self.timeout = timeout

    def build_command(self, file_path: str | Path) -> List[str]:
        parser = 'typescript' if Path(file_path).suffix.lower() in TYPESCRIPT_EXTENSIONS else 'babel'
        return [
            *self.command,
            "--parser", parser,
            "--single-quote",
            "--trailing-comma", "none",
        ]

    def format(self, source: str, file_path: str | Path = "input.js") -> str:
        """Format ``source`` and return prettier's output.

        Args:
            source: JavaScript/TypeScript text
            file_path: Used only to choose the prettier parser

        Raises:
            FormatterError: If prettier cannot be started, times out, or
                exits non-zero
        """
        command = self.build_command(file_path)
        try:
            result = subprocess.run(
                command,
                input=source,
                capture_output=True,
                text=True,
                encoding='utf-8',
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise FormatterError(f"formatter not found: {command[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise FormatterError(f"formatter timed out after {self.timeout}s") from e

        if result.returncode != 0:
            detail = (result.stderr or result.stdout).strip()
            raise FormatterError(f"formatter exited with code {result.returncode}: {detail}")

        return result.stdout
