"""Preparing the user's prompt before it is sent to the agent."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from stakpak.local_context import LocalContext


def add_local_context(
    messages: Sequence[Any],
    user_input: str,
    local_context: LocalContext | None,
) -> tuple[str, LocalContext | None]:
    """Attach the local context to the first message of a conversation.

    Returns the text to send and the context that was attached, or ``None``
    when the conversation already has messages or no context is known.
    """
    if local_context is None or messages:
        return user_input, None
    formatted = f"{user_input}\n\n<local_context>\n{local_context}\n</local_context>"
    return formatted, local_context