"""
mock_vault.daemon
-----------------
This module implements a mock of the vault Local REST API listing
endpoint using FastAPI. It serves per-directory listings from an
in-memory mapping, or from a directory on disk, behind a bearer token.
Intended for local development, testing, and demonstration purposes.
"""
import json
import logging
import os
import socket
import sys
from pathlib import Path
from typing import Mapping, Optional

import typer
import uvicorn
from fastapi import FastAPI, Header, HTTPException
from pydantic import BaseModel, Field

from common.app_setup import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_API_KEY = "mock-api-key"


class ListingModel(BaseModel):
    files: list[str] = Field(default_factory=list)


# Sample vault, keyed by directory path ("" is the root)
SAMPLE_LISTINGS: dict[str, list[str]] = {
    "": ["Maths/", "Notes/todo.md", "Welcome.md"],
    "Maths/": ["Chapter-1/", "Maths/Chapter-2/", "index.md"],
    "Maths/Chapter-1/": ["Exercises/", "intro.md"],
    "Maths/Chapter-1/Exercises/": ["01.md", "02.md"],
    "Maths/Chapter-2/": ["Proofs/lemma.md"],
}


def listings_from_directory(root: Path) -> dict[str, list[str]]:
    """Build listings for every directory under ``root``, skipping dot entries."""
    listings: dict[str, list[str]] = {}
    for current, dirs, files in os.walk(root):
        dirs[:] = sorted(d for d in dirs if not d.startswith("."))
        rel = Path(current).relative_to(root).as_posix()
        key = "" if rel == "." else f"{rel}/"
        listings[key] = [f"{d}/" for d in dirs] + sorted(f for f in files if not f.startswith("."))
    return listings


def create_app(listings: Optional[Mapping[str, list[str]]] = None, api_key: str = DEFAULT_API_KEY) -> FastAPI:
    """
    Create the mock API.
    ``listings`` maps a directory path ending with "/" (or "" for the root) to its entries.
    """
    store = {_key(path): list(entries) for path, entries in (listings if listings is not None else SAMPLE_LISTINGS).items()}
    app = FastAPI()
    app.state.requests = []

    def check_auth(authorization: Optional[str]):
        if authorization != f"Bearer {api_key}":
            logger.warning("Rejected listing request with missing or wrong bearer token")
            raise HTTPException(status_code=401, detail="Authorization required")

    @app.get("/status")
    def status():
        """Health/status endpoint for the mock vault."""
        return {"status": "OK", "directories": len(store)}

    @app.get("/vault/{path:path}", response_model=ListingModel)
    def list_directory(path: str, authorization: Optional[str] = Header(None)) -> ListingModel:
        """List the immediate children of a vault directory."""
        check_auth(authorization)
        key = _key(path)
        app.state.requests.append(key)
        logger.info(f"Listing requested: {key or '/'}")
        if key not in store:
            raise HTTPException(status_code=404, detail="Not Found")
        return ListingModel(files=store[key])

    return app


def _key(path: str) -> str:
    stripped = path.strip("/")
    return f"{stripped}/" if stripped else ""


app_cli = typer.Typer(add_completion=False)


@app_cli.command()
def run(
    port: int = typer.Option(None, help="Port to run the server on (auto if not set)"),
    vault_dir: Optional[Path] = typer.Option(None, exists=True, file_okay=False, help="Serve this directory instead of the sample vault"),
    api_key: str = typer.Option(DEFAULT_API_KEY, envvar="VAULT_API_KEY", help="Bearer token clients must send"),
):
    """Run the mock API using Uvicorn on localhost, reporting the actual port used."""
    setup_logging(app_name="mock_vault", daemon=True)
    listings = listings_from_directory(vault_dir) if vault_dir else SAMPLE_LISTINGS
    if port is None or port == 0:
        # Bind to port 0 to get a free port, then close and reuse
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind(('127.0.0.1', 0))
            port = s.getsockname()[1]
        logger.info(f"Selected port: {port}")
        print(json.dumps({"event": "port_selected", "port": port}), flush=True)
    else:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            try:
                s.bind(('127.0.0.1', port))
            except OSError:
                logger.error(f"ERROR: Port {port} is already in use.")
                sys.exit(98)  # 98 = EADDRINUSE
        logger.info(f"Using port: {port}")
        print(json.dumps({"event": "port_used", "port": port}), flush=True)
    config = uvicorn.Config(create_app(listings, api_key), host="127.0.0.1", port=port, log_level="info")
    server = uvicorn.Server(config)
    logger.info(f"Starting Uvicorn server on port {port}")
    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt in main thread")
    logger.info("Server stopped")


if __name__ == "__main__":
    app_cli()
