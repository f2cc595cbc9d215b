"""In-memory tree structure used to display discovered folders."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .models import Folder


@dataclass
class FolderTree:
    """Tree node containing subfolders, keyed by their last path segment."""

    name: str
    parent: FolderTree | None = None
    subfolders: dict[str, FolderTree] = field(default_factory=dict)

    def path(self) -> str:
        if self.parent is None:
            return ""
        base = self.parent.path()
        return f"{base}/{self.name}" if base else self.name

    def child(self, name: str) -> FolderTree:
        node = self.subfolders.get(name)
        if node is None:
            node = FolderTree(name=name, parent=self)
            self.subfolders[name] = node
        return node

    def walk(self) -> Iterable[FolderTree]:
        """Depth-first iteration over descendants, children in insertion order."""
        for node in self.subfolders.values():
            yield node
            yield from node.walk()

    @classmethod
    def from_folders(cls, folders: Iterable[Folder], root_name: str = "/") -> FolderTree:
        root = cls(name=root_name)
        for folder in folders:
            node = root
            for part in folder.path.split("/"):
                node = node.child(part)
        return root


__all__ = ["FolderTree"]
