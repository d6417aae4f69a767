"""Computing the edits that bring a flow's documents in line with a directory."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TextIO

URI_PREFIX = "file:///"
_SUPPORTED_SUFFIXES = (".tf", ".yaml", ".yml")


class FlowError(Exception):
    """Raised when local flow files cannot be read or written."""


@dataclass
class Document:
    """One configuration file stored in a flow."""

    content: str
    uri: str
    provisioner: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Document":
        try:
            return cls(
                content=str(data["content"]),
                uri=str(data["uri"]),
                provisioner=str(data.get("provisioner", "")),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"invalid document: {exc}") from exc

    def to_dict(self) -> dict[str, str]:
        return {"content": self.content, "uri": self.uri, "provisioner": self.provisioner}


@dataclass
class Edit:
    """A whole-document insert or delete sent to the flow."""

    document_uri: str
    content: str
    operation: str
    start_byte: int = 0
    start_row: int = 0
    start_column: int = 0
    end_byte: int = 0
    end_row: int = 0
    end_column: int = 0
    language: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "document_uri": self.document_uri,
            "start_byte": self.start_byte,
            "start_row": self.start_row,
            "start_column": self.start_column,
            "end_byte": self.end_byte,
            "end_row": self.end_row,
            "end_column": self.end_column,
            "content": self.content,
            "language": self.language,
            "operation": self.operation,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class EditPlan:
    """The edits for a directory together with how many files they touch."""

    edits: list[Edit] = field(default_factory=list)
    files_synced: int = 0
    files_deleted: int = 0

    @property
    def has_changes(self) -> bool:
        return self.files_synced + self.files_deleted > 0


def is_supported_file(file_name: str | None, is_file: bool) -> bool:
    """Tell whether a walked entry should be kept: no hidden names, only known files."""
    if file_name is None:
        return False
    if file_name.startswith(".") and len(file_name) > 1:
        return False
    if not is_file:
        return True
    return file_name.endswith(_SUPPORTED_SUFFIXES) or "dockerfile" in file_name.lower()


def _lines(content: str) -> list[str]:
    if not content:
        return []
    parts = content.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


def create_edit(document_uri: str, content: str, operation: str) -> Edit:
    """Build an edit covering the whole of ``content``."""
    lines = _lines(content)
    return Edit(
        document_uri=document_uri,
        content=content,
        operation=operation,
        end_byte=len(content.encode("utf-8")),
        end_row=len(lines),
        end_column=len(lines[-1].encode("utf-8")) if lines else 0,
    )


def document_uri(base_dir: str | os.PathLike[str], path: str | os.PathLike[str]) -> str:
    """Return the ``file:///`` URI of ``path`` relative to ``base_dir``."""
    relative = Path(path).relative_to(Path(base_dir)).as_posix()
    if relative == ".":
        relative = ""
    return URI_PREFIX + relative.replace("\\", "/")


def _walk_directory(directory: str | os.PathLike[str]) -> Iterator[Path]:
    try:
        with os.scandir(directory) as scanner:
            entries = sorted(scanner, key=lambda entry: entry.name)
    except OSError:
        return
    for entry in entries:
        is_file = entry.is_file(follow_symlinks=False)
        if not is_supported_file(entry.name, is_file):
            continue
        if is_file:
            yield Path(entry.path)
        elif entry.is_dir(follow_symlinks=False):
            yield from _walk_directory(entry.path)


def _supported_files(base_dir: Path) -> Iterator[Path]:
    is_file = base_dir.is_file() and not base_dir.is_symlink()
    if not is_supported_file(base_dir.name or str(base_dir), is_file):
        return
    if is_file:
        yield base_dir
    else:
        yield from _walk_directory(base_dir)


def collect_edits(
    base_dir: str | os.PathLike[str],
    documents: Iterable[Document],
    ignore_delete: bool = False,
) -> EditPlan:
    """Compare supported files under ``base_dir`` with the flow's documents."""
    base = Path(base_dir)
    remote = {doc.uri: doc for doc in documents}
    plan = EditPlan()
    seen: set[str] = set()

    for path in _supported_files(base):
        try:
            content = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise FlowError("Failed to read file") from exc
        uri = document_uri(base, path)
        seen.add(uri)
        existing = remote.get(uri)
        if existing is None:
            plan.edits.append(create_edit(uri, content, "insert"))
            plan.files_synced += 1
        elif content != existing.content:
            plan.edits.append(create_edit(uri, existing.content, "delete"))
            plan.edits.append(create_edit(uri, content, "insert"))
            plan.files_synced += 1

    if not ignore_delete:
        for uri, doc in remote.items():
            if uri not in seen:
                plan.edits.append(create_edit(uri, doc.content, "delete"))
                plan.files_deleted += 1

    return plan


def confirm_action(stream: TextIO | None = None) -> bool:
    """Ask for confirmation and return whether the answer was exactly ``yes``."""
    print("\nDo you want to continue? Type 'yes' to confirm: ")
    source = sys.stdin if stream is None else stream
    try:
        answer = source.readline()
    except OSError as exc:
        raise FlowError(f"Failed to read input: {exc}") from exc
    return answer.strip() == "yes"