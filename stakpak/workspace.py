"""Keeping a local directory and a flow's documents in step."""

from __future__ import annotations

import hashlib
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from stakpak.edits import URI_PREFIX, Document, Edit, FlowError, create_edit, document_uri
from stakpak.edits import is_supported_file


@dataclass
class DocumentBuffer:
    """The last known content of a watched file."""

    content: str
    uri: str
    hash: int


@dataclass
class DocumentsChange:
    """A change to a flow's documents announced by the server."""

    flow_ref: str
    documents: list[Document] = field(default_factory=list)
    touched_document_uris: set[str] = field(default_factory=set)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DocumentsChange":
        try:
            return cls(
                flow_ref=str(data["flow_ref"]),
                documents=[Document.from_dict(doc) for doc in data["documents"]],
                touched_document_uris=set(data["touched_document_uris"]),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"invalid documents change: {exc}") from exc


def hash_content(content: str) -> int:
    """Return a stable 64-bit hash of a file's text."""
    digest = hashlib.blake2b(content.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big")


def uri_to_path(base_dir: str | os.PathLike[str], uri: str) -> Path:
    """Map a ``file:///`` URI onto a path below ``base_dir``."""
    return Path(base_dir) / uri.removeprefix(URI_PREFIX)


def _read_text(path: Path) -> str | None:
    try:
        return path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def write_documents(
    base_dir: str | os.PathLike[str], documents: Iterable[Document]
) -> dict[str, list[Path]]:
    """Write documents below ``base_dir`` and group their paths by provisioner."""
    path_map: dict[str, list[Path]] = {}
    for doc in documents:
        full_path = uri_to_path(base_dir, doc.uri)
        path_map.setdefault(doc.provisioner, []).append(full_path)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FlowError(
                f"Failed to create directory {full_path.parent}: {exc}"
            ) from exc
        try:
            full_path.write_bytes(doc.content.encode("utf-8"))
        except OSError as exc:
            raise FlowError(f"Failed to write file {full_path}: {exc}") from exc
    return path_map


class Workspace:
    """Tracks the supported files of a directory and the edits their changes imply."""

    def __init__(self, base_dir: str | os.PathLike[str]) -> None:
        self.base_dir = Path(base_dir)
        self.watched_files: dict[str, DocumentBuffer] = {}

    def scan(self) -> dict[str, DocumentBuffer]:
        """Record every readable supported file below the base directory."""
        watched: dict[str, DocumentBuffer] = {}
        for dirpath, dirnames, filenames in os.walk(self.base_dir):
            dirnames.sort()
            for name in sorted(filenames):
                path = Path(dirpath) / name
                if not path.is_file() or not is_supported_file(name, True):
                    continue
                content = _read_text(path)
                if content is None:
                    continue
                uri = document_uri(self.base_dir, path)
                watched[uri] = DocumentBuffer(content, uri, hash_content(content))
        self.watched_files = watched
        return watched

    def process_deleted(self) -> list[Edit]:
        """Forget watched files that can no longer be read, returning delete edits."""
        edits: list[Edit] = []
        for uri in list(self.watched_files):
            if _read_text(uri_to_path(self.base_dir, uri)) is None:
                buffer = self.watched_files.pop(uri)
                edits.append(create_edit(buffer.uri, buffer.content, "delete"))
        return edits

    def process_modified(self, paths: Iterable[str | os.PathLike[str]]) -> list[Edit]:
        """Return replace edits for watched files whose content changed."""
        edits: list[Edit] = []
        for raw_path in paths:
            path = Path(raw_path)
            content = _read_text(path)
            if content is None:
                continue
            digest = hash_content(content)
            uri = document_uri(self.base_dir, path)
            buffer = self.watched_files.get(uri)
            if buffer is None or buffer.hash == digest:
                continue
            edits.append(create_edit(uri, buffer.content, "delete"))
            edits.append(create_edit(uri, content, "insert"))
            self.watched_files[uri] = DocumentBuffer(content, uri, digest)
        return edits

    def apply_remote_change(self, change: DocumentsChange) -> None:
        """Bring the directory in line with a change made on the server."""
        kept = {doc.uri for doc in change.documents}
        for uri in change.touched_document_uris:
            if uri in kept:
                continue
            self.watched_files.pop(uri, None)
            try:
                uri_to_path(self.base_dir, uri).unlink()
            except OSError:
                pass
        for doc in change.documents:
            path = uri_to_path(self.base_dir, doc.uri)
            path.write_bytes(doc.content.encode("utf-8"))
            content = _read_text(path)
            if content is not None:
                self.watched_files[doc.uri] = DocumentBuffer(
                    doc.content, doc.uri, hash_content(content)
                )