"""
discovery.crawler
-----------------
Walks the vault one directory listing at a time and collects every folder.

The listing endpoint only returns the immediate children of a directory,
so the crawler fetches the root, then descends into each directory marker
depth-first. Requests are strictly sequential: the folder map and the
visited ledger held by CrawlContext are shared by the whole walk and are
not synchronized.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from connectors.connections_manager import get_session
from connectors.vault_error import MalformedListingError, VaultListingError
from connectors.vault_interface import VaultSessionProtocol

from .models import Folder, VaultApiSettings
from .paths import (
    add_folder_and_parents,
    collation_key,
    is_directory_entry,
    resolve_directory_entry,
    resolve_file_parent,
)

logger = logging.getLogger(__name__)

MAX_DEPTH = 15


@dataclass
class CrawlContext:
    """State of one discovery run: folders found so far and paths already requested."""

    folders: dict[str, Folder] = field(default_factory=dict)
    visited: set[str] = field(default_factory=set)
    requests: int = 0


def discover_folders(settings: VaultApiSettings, session: VaultSessionProtocol | None = None) -> list[Folder]:
    """
    Return every folder of the vault, sorted by path.

    Returns an empty list without any request when the API is disabled or has no key.
    A failing root listing raises VaultListingError; a root listing without a
    'files' array yields an empty list. Failures below the root only drop
    the affected subtree.
    """
    if not settings.is_configured:
        logger.debug("Vault API disabled or no API key configured, skipping discovery")
        return []

    if session is None:
        session = get_session(settings.base_url, settings.api_key, verify=settings.verify)

    context = CrawlContext()
    try:
        context.requests += 1
        entries = session.list_directory("")
    except MalformedListingError as e:
        logger.warning(f"Root listing ignored: {e}")
        return []
    except VaultListingError as e:
        logger.error(f"Error fetching folders from {session.base_url}: {e}")
        raise

    seeds = collect_entries(entries, "", context)
    for path in seeds:
        if path and path not in context.visited:
            crawl_directory(session, path, 1, context)

    logger.info(f"Discovered {len(context.folders)} folders with {context.requests} listing requests")
    return sorted_folders(context.folders)


def crawl_directory(session: VaultSessionProtocol, path: str, depth: int, context: CrawlContext) -> None:
    """Fetch the listing of ``path`` and descend into its subdirectories."""
    if depth > MAX_DEPTH or path in context.visited:
        return
    context.visited.add(path)

    try:
        context.requests += 1
        entries = session.list_directory(path)
    except VaultListingError as e:
        logger.debug(f"Skipping subtree {path!r}: {e}")
        return

    for subpath in collect_entries(entries, path, context):
        if subpath and subpath not in context.visited:
            crawl_directory(session, subpath, depth + 1, context)


def collect_entries(entries: Iterable[Any], parent: str, context: CrawlContext) -> list[str]:
    """
    Register the folders implied by the entries of one listing.
    Returns the directory markers, resolved to absolute paths, in listing order.
    """
    subdirectories: list[str] = []
    for entry in entries:
        if not isinstance(entry, str):
            continue
        if is_directory_entry(entry):
            folder_path = resolve_directory_entry(entry, parent)
            add_folder_and_parents(folder_path, context.folders)
            subdirectories.append(folder_path)
        else:
            folder_path = resolve_file_parent(entry, parent)
            if folder_path:
                add_folder_and_parents(folder_path, context.folders)
    return subdirectories


def sorted_folders(folders: Mapping[str, Folder]) -> list[Folder]:
    """Folders sorted ascending by path, case and accent insensitive first."""
    return sorted(folders.values(), key=lambda f: collation_key(f.path))


__all__ = [
    "CrawlContext",
    "MAX_DEPTH",
    "collect_entries",
    "crawl_directory",
    "discover_folders",
    "sorted_folders",
]
