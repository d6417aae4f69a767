import pytest

from stakpak.local_context import FileInfo, GitInfo, LocalContext
from stakpak.prompting import add_local_context


@pytest.fixture
def context():
    return LocalContext(
        operating_system="Linux",
        shell_type="bash",
        is_container=False,
        working_directory="/work",
        file_structure={"main.tf": FileInfo(False, 10)},
        git_info=GitInfo(is_git_repo=False),
    )


def test_first_message_gets_context(context):
    text, attached = add_local_context([], "deploy it", context)
    assert attached is context
    assert text.startswith("deploy it\n\n<local_context>\n")
    assert text.endswith("\n</local_context>")
    assert str(context) in text


def test_context_section_wraps_rendered_context(context):
    text, _ = add_local_context([], "hello", context)
    inner = text.removeprefix("hello\n\n<local_context>\n").removesuffix("\n</local_context>")
    assert inner == str(context)


def test_later_messages_are_left_alone(context):
    text, attached = add_local_context([{"role": "user"}], "again", context)
    assert text == "again"
    assert attached is None


def test_missing_context_leaves_input_unchanged():
    text, attached = add_local_context([], "plain", None)
    assert text == "plain"
    assert attached is None