"""
This file is the entry point for the 'vaultfolders' command-line tool.
Run 'vaultfolders --help' in your shell to use the CLI.

Settings come from a YAML/JSON file (--config or VAULT_API_CONFIG),
overridden by options or their VAULT_API_* environment variables.
"""
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich import print as rich_print
from rich.markup import escape
from rich.tree import Tree

from common.app_setup import setup_logging, print_and_log, print_error
from connectors.connections_manager import close_sessions, get_session
from connectors.vault_error import VaultListingError
from discovery.crawler import discover_folders
from discovery.models import Folder, VaultApiSettings, load_settings
from discovery.tree import FolderTree

app = typer.Typer(add_completion=False, help="Discover the folder hierarchy of a vault through its Local REST API.")


@app.callback()
def main(
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Log file (default ~/.vaultfolders/log.txt)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log listing requests at debug level"),
):
    setup_logging(app_name="vaultfolders", loglevel=logging.DEBUG if verbose else logging.INFO, logfile=log_file)


def _resolve_settings(
    config: Optional[Path],
    host: Optional[str],
    port: Optional[int],
    api_key: Optional[str],
    enabled: Optional[bool],
    insecure: bool = False,
    ca_cert: Optional[Path] = None,
) -> VaultApiSettings:
    verify: bool | str | None = None
    if insecure:
        verify = False
    elif ca_cert:
        verify = str(ca_cert)
    try:
        settings = load_settings(config) if config else VaultApiSettings()
        return settings.merge({"host": host, "port": port, "api_key": api_key, "enabled": enabled, "verify": verify})
    except (OSError, ValueError) as e:
        print_error(escape(f"Invalid vault settings: {e}"))
        raise typer.Exit(2)


# Shared options, also readable from the environment
ConfigOption = typer.Option(None, "--config", "-c", envvar="VAULT_API_CONFIG", help="YAML or JSON settings file")
HostOption = typer.Option(None, envvar="VAULT_API_HOST", help="API host, optionally with http:// or https://")
PortOption = typer.Option(None, envvar="VAULT_API_PORT", help="API port")
ApiKeyOption = typer.Option(None, "--api-key", envvar="VAULT_API_KEY", help="Bearer token")
EnabledOption = typer.Option(None, "--enabled/--disabled", envvar="VAULT_API_ENABLED", help="Enable discovery")
InsecureOption = typer.Option(False, "--insecure", help="Do not verify the TLS certificate of the API")
CaCertOption = typer.Option(None, "--ca-cert", envvar="VAULT_API_CA_CERT", help="CA bundle or certificate published by the API")


def _render_tree(folders: list[Folder]) -> Tree:
    root = FolderTree.from_folders(folders)
    rendered = Tree(escape(root.name))
    branches = {"": rendered}
    for node in root.walk():
        parent = node.parent.path() if node.parent else ""
        branches[node.path()] = branches[parent].add(escape(node.name))
    return rendered


@app.command("list")
def list_folders(
    config: Optional[Path] = ConfigOption,
    host: Optional[str] = HostOption,
    port: Optional[int] = PortOption,
    api_key: Optional[str] = ApiKeyOption,
    enabled: Optional[bool] = EnabledOption,
    insecure: bool = InsecureOption,
    ca_cert: Optional[Path] = CaCertOption,
    as_json: bool = typer.Option(False, "--json", help="Print a JSON array of {path, name}"),
    as_tree: bool = typer.Option(False, "--tree", help="Print the folders as a tree"),
):
    """List every folder of the vault, sorted by path."""
    settings = _resolve_settings(config, host, port, api_key, enabled, insecure, ca_cert)
    try:
        folders = discover_folders(settings)
    except VaultListingError as e:
        print_error(escape(f"Failed to list vault folders: {e}"))
        raise typer.Exit(1)
    except OSError as e:
        print_error(escape(f"Invalid TLS settings: {e}"))
        raise typer.Exit(2)
    finally:
        close_sessions()

    if as_json:
        typer.echo(json.dumps([f.model_dump() for f in folders], indent=2, ensure_ascii=False))
    elif as_tree:
        rich_print(_render_tree(folders))
    else:
        for folder in folders:
            typer.echo(folder.path)


@app.command()
def info(
    config: Optional[Path] = ConfigOption,
    host: Optional[str] = HostOption,
    port: Optional[int] = PortOption,
    api_key: Optional[str] = ApiKeyOption,
    enabled: Optional[bool] = EnabledOption,
    insecure: bool = InsecureOption,
    ca_cert: Optional[Path] = CaCertOption,
):
    """Show the session that discovery would use, and whether it would run."""
    settings = _resolve_settings(config, host, port, api_key, enabled, insecure, ca_cert)
    try:
        session = get_session(settings.base_url, settings.api_key, verify=settings.verify)
        for key, value in session.info.items():
            print_and_log(escape(f"{key}: {value}"))
    except OSError as e:
        print_error(escape(f"Invalid TLS settings: {e}"))
        raise typer.Exit(2)
    finally:
        close_sessions()
    print_and_log(f"Enabled: {settings.enabled}")
    print_and_log(f"API key: {'set' if settings.api_key else 'missing'}")


if __name__ == "__main__":
    app()
