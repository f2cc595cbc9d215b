"""Vault folder discovery: path normalization, crawling and domain models."""

from .crawler import MAX_DEPTH, CrawlContext, discover_folders
from .models import Folder, VaultApiSettings, load_settings
from .tree import FolderTree

__all__ = [
    "CrawlContext",
    "Folder",
    "FolderTree",
    "MAX_DEPTH",
    "VaultApiSettings",
    "discover_folders",
    "load_settings",
]
