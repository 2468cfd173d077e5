"""Terminal output and input for gitremote."""

import getpass
import shutil
import sys
from typing import Dict, Optional, TextIO

from .config import Config

# ANSI colors per output label
LABEL_COLORS: Dict[str, str] = {
    "branch": "\x1b[35m",
    "warning": "\x1b[1;33m",
    "hint": "\x1b[36m",
    "error": "\x1b[1;31m",
}
RESET = "\x1b[0m"


class LabeledWriter:
    """Write-only view of a Formatter that styles everything written through it."""

    def __init__(self, formatter: "Formatter", label: str):
        self._formatter = formatter
        self._label = label

    def write(self, text: str) -> None:
        color = LABEL_COLORS.get(self._label) if self._formatter.color else None
        if color and text:
            self._formatter.write(f"{color}{text}{RESET}")
        else:
            self._formatter.write(text)


class Formatter:
    """Writes text to a stream, optionally colorizing labeled segments."""

    def __init__(self, stream: TextIO, color: bool = False):
        self.stream = stream
        self.color = color

    def write(self, text: str) -> None:
        self.stream.write(text)

    def writeln(self, text: str = "") -> None:
        self.write(text + "\n")

    def labeled(self, label: str) -> LabeledWriter:
        return LabeledWriter(self, label)

    def flush(self) -> None:
        self.stream.flush()


class ProgressOutput:
    """Terminal stream that progress bars may redraw in place."""

    def __init__(self, stream: TextIO):
        self.stream = stream

    def term_width(self) -> Optional[int]:
        columns = shutil.get_terminal_size(fallback=(0, 0)).columns
        return columns or None

    def write(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()


def _isatty(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty())
    except ValueError:
        # closed stream
        return False


class Ui:
    """
    Output/input handle shared by prompts and reports.

    Prompts read from ``stdin``; reports and prompts are written to ``stderr``
    so that ``stdout`` stays clean for machine-readable output.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ):
        self.config = config or Config()
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.stderr_stream = stderr or sys.stderr
        self.color = self._use_color()

    def _use_color(self) -> bool:
        if self.config.color == "always":
            return True
        if self.config.color == "never":
            return False
        return _isatty(self.stderr_stream)

    def use_prompt(self) -> bool:
        return _isatty(self.stdin)

    def prompt(self, text: str) -> str:
        """
        Ask the operator for a line of visible input.

        Raises:
            OSError: If there is no interactive terminal to prompt on
            EOFError: If input is closed before a line is read
        """
        if not self.use_prompt():
            raise OSError("Cannot prompt for input since the output is not connected to a terminal")
        self.stderr_stream.write(f"{text}: ")
        self.stderr_stream.flush()
        line = self.stdin.readline()
        if not line:
            raise EOFError("Unexpected end of input while prompting")
        return line.rstrip("\r\n")

    def prompt_password(self, text: str) -> str:
        """Ask the operator for a secret with terminal echo suppressed."""
        if not self.use_prompt():
            raise OSError("Cannot prompt for input since the output is not connected to a terminal")
        return getpass.getpass(text, stream=self.stderr_stream)

    def stdout_formatter(self) -> Formatter:
        return Formatter(self.stdout, color=self.color)

    def stderr_formatter(self) -> Formatter:
        return Formatter(self.stderr_stream, color=self.color)

    def stderr(self) -> Formatter:
        return Formatter(self.stderr_stream, color=False)

    def warning(self) -> LabeledWriter:
        return self.stderr_formatter().labeled("warning")

    def hint(self) -> LabeledWriter:
        return self.stderr_formatter().labeled("hint")

    def progress_output(self) -> Optional[ProgressOutput]:
        """Progress output is only available when stderr is a terminal."""
        if _isatty(self.stderr_stream):
            return ProgressOutput(self.stderr_stream)
        return None
