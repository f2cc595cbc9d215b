"""Pure helpers turning raw listing entries into folder paths.

A listing entry is either a directory marker (``"Maths/"``) or a file path
(``"Maths/Chapter-1/intro.md"``). Both imply folders: the marker itself, or
the parent directory of the file, plus every ancestor of those.
"""

from __future__ import annotations

import re
import unicodedata
from typing import MutableMapping

from .models import Folder

_SLASH_RUNS = re.compile(r"/+")


def clean_path(raw: str) -> str:
    """Collapse runs of ``/`` and strip leading and trailing slashes."""
    return _SLASH_RUNS.sub("/", raw).strip("/")


def ancestor_paths(path: str) -> list[str]:
    """Return every prefix of ``path``, shortest first: ``a``, ``a/b``, ``a/b/c``."""
    prefixes: list[str] = []
    current = ""
    for part in path.split("/"):
        current = f"{current}/{part}" if current else part
        prefixes.append(current)
    return prefixes


def add_folder_and_parents(path: str, folders: MutableMapping[str, Folder]) -> None:
    """Register ``path`` and all of its ancestors in ``folders``.

    Existing keys are left untouched, so registering twice is a no-op.
    """
    path = clean_path(path)
    if not path:
        return
    for prefix in ancestor_paths(path):
        if prefix not in folders:
            folders[prefix] = Folder.from_path(prefix)


def is_directory_entry(entry: str) -> bool:
    return entry.endswith("/")


def _under(entry: str, parent: str) -> str:
    """Prefix ``entry`` with ``parent`` unless it already is."""
    if not parent or entry.startswith(parent + "/"):
        return entry
    return f"{parent}/{entry}"


def resolve_directory_entry(entry: str, parent: str = "") -> str:
    """Absolute folder path of a directory entry listed under ``parent``.

    Entries arrive either as bare child names (``"Sub/"``) or already
    prefixed with the parent (``"Maths/Sub/"``); both resolve to the same path.
    """
    name = entry.strip("/")
    return clean_path(_under(name, parent))


def resolve_file_parent(entry: str, parent: str = "") -> str | None:
    """Folder implied by a file entry listed under ``parent``.

    A file entry without any ``/`` implies no folder and yields None.
    """
    if "/" not in entry:
        return None
    full = _under(entry, parent)
    return clean_path(full.rsplit("/", 1)[0]) or None


def collation_key(path: str) -> tuple:
    """Sort key comparing paths the way a locale-aware collator does.

    Levels, most significant first: letters without accents and case,
    accents, case (lowercase first). The raw string breaks remaining ties.
    Independent of the process locale; any character, NUL included, is accepted.
    """
    decomposed = unicodedata.normalize("NFKD", path)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return (
        base.casefold(),
        decomposed.casefold(),
        tuple(c.isupper() for c in base),
        path,
    )


__all__ = [
    "add_folder_and_parents",
    "ancestor_paths",
    "clean_path",
    "collation_key",
    "is_directory_entry",
    "resolve_directory_entry",
    "resolve_file_parent",
]
