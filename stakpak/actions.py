"""Running the shell commands an agent asks for and preparing their output."""

from __future__ import annotations

import re
import subprocess
from collections.abc import Callable
from dataclasses import dataclass

MAX_OUTPUT_LENGTH = 4000
TRUNCATION_MARKER = "\n...truncated...\n"
_ANSI_ESCAPE = re.compile(r"\x1B\[[0-9;]*[mK]")


class ActionError(Exception):
    """Raised when an action cannot be carried out."""


@dataclass(frozen=True)
class CommandResult:
    """The exit code and the collected (possibly truncated) output of a command."""

    exit_code: int
    output: str

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


def truncate_output(output: str) -> str:
    """Keep the start and end of output longer than the limit, marking the cut."""
    if len(output.encode("utf-8")) <= MAX_OUTPUT_LENGTH:
        return output
    offset = MAX_OUTPUT_LENGTH // 2
    head = output[:offset]
    tail = output[-(offset + 1):]
    return f"{head}{TRUNCATION_MARKER}{tail}"


def strip_ansi(line: str) -> str:
    """Remove colour and erase-line escape sequences from a line."""
    return _ANSI_ESCAPE.sub("", line)


def _strip_newline(line: str) -> str:
    return line.removesuffix("\n").removesuffix("\r")


def run_shell_command(
    command: str,
    emit: Callable[[str], object] | None = None,
    clean: bool = False,
) -> CommandResult:
    """Run ``command`` with ``sh -c``, passing each output line to ``emit``.

    Standard output and standard error are merged. With ``clean`` set, escape
    sequences are removed from every line before it is emitted and kept.
    """
    sink = print if emit is None else emit
    try:
        process = subprocess.Popen(
            ["sh", "-c", command],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as exc:
        raise ActionError(f"Failed to create process stream: {exc}") from exc

    lines: list[str] = []
    with process:
        assert process.stdout is not None
        for raw_line in process.stdout:
            line = _strip_newline(raw_line)
            if clean:
                line = strip_ansi(line)
            sink(line)
            lines.append(line)
        returncode = process.wait()

    exit_code = returncode if returncode >= 0 else -1
    return CommandResult(exit_code=exit_code, output=truncate_output("\n".join(lines)))