import pytest

from stakpak.actions import (
    MAX_OUTPUT_LENGTH,
    TRUNCATION_MARKER,
    ActionError,
    CommandResult,
    run_shell_command,
    strip_ansi,
    truncate_output,
)


def test_short_output_is_unchanged():
    text = "line one\nline two"
    assert truncate_output(text) == text


def test_output_at_limit_is_unchanged():
    text = "a" * MAX_OUTPUT_LENGTH
    assert truncate_output(text) == text


def test_long_output_keeps_head_and_tail():
    text = "".join(str(i % 10) for i in range(10000))
    result = truncate_output(text)
    half = MAX_OUTPUT_LENGTH // 2
    assert result.startswith(text[:half])
    assert result.endswith(text[-(half + 1):])
    assert result == text[:half] + TRUNCATION_MARKER + text[-(half + 1):]


def test_length_limit_counts_bytes():
    text = "é" * 2001
    result = truncate_output(text)
    assert TRUNCATION_MARKER in result
    assert len(result) < len(text) + len(TRUNCATION_MARKER) + 1


def test_strip_ansi_removes_colours():
    assert strip_ansi("\x1b[31mred\x1b[0m text") == "red text"


def test_strip_ansi_removes_erase_line():
    assert strip_ansi("abc\x1b[K") == "abc"


def test_strip_ansi_leaves_plain_text():
    assert strip_ansi("plain [text]") == "plain [text]"


def test_run_shell_command_collects_output():
    emitted = []
    result = run_shell_command("echo hello; echo world", emitted.append)
    assert result.exit_code == 0
    assert result.succeeded
    assert result.output == "hello\nworld"
    assert emitted == ["hello", "world"]


def test_run_shell_command_reports_failure():
    result = run_shell_command("exit 3", lambda line: None)
    assert result.exit_code == 3
    assert not result.succeeded
    assert result.output == ""


def test_run_shell_command_merges_stderr():
    emitted = []
    result = run_shell_command("echo oops 1>&2", emitted.append)
    assert result.output == "oops"
    assert emitted == ["oops"]


def test_run_shell_command_cleans_escape_sequences():
    emitted = []
    result = run_shell_command(
        "printf '\\033[32mgreen\\033[0m\\n'", emitted.append, clean=True
    )
    assert result.output == "green"
    assert emitted == ["green"]


def test_run_shell_command_keeps_escapes_without_clean():
    result = run_shell_command("printf '\\033[32mgreen\\033[0m\\n'", lambda line: None)
    assert result.output == "\x1b[32mgreen\x1b[0m"


def test_run_shell_command_truncates_long_output():
    emitted = []
    result = run_shell_command("seq 1 5000", emitted.append)
    full = "\n".join(emitted)
    assert len(emitted) == 5000
    assert result.output == truncate_output(full)
    assert TRUNCATION_MARKER in result.output


def test_command_result_success_property():
    assert CommandResult(0, "").succeeded
    assert not CommandResult(-1, "").succeeded


def test_missing_shell_raises(monkeypatch):
    monkeypatch.setenv("PATH", "")
    with pytest.raises(ActionError):
        run_shell_command("echo hi", lambda line: None)