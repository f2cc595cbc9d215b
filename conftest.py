"""
Pytest configuration and shared fixtures.
"""

import logging

import httpx
import pytest

from common.app_setup import set_print_logger
from connectors import connections_manager
from connectors.rest_vault_connector import RestVaultSession
from discovery.models import VaultApiSettings

BASE_URL = "https://127.0.0.1:27124/vault/"
API_KEY = "secret-key"


class FakeVault:
    """
    Serves listings from a dict through httpx.MockTransport.

    ``listings`` maps a decoded directory path ("" for the root) to either
    an entry list, an int status code to answer with, a raw dict body,
    or an exception instance to raise.
    """

    def __init__(self, listings):
        self.listings = listings
        self.requests: list[str] = []
        self.headers: list[httpx.Headers] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        raw = request.url.path
        assert raw.startswith("/vault/")
        path = raw[len("/vault/"):].strip("/")
        self.requests.append(path)
        self.headers.append(request.headers)
        listing = self.listings.get(path, 404)
        if isinstance(listing, Exception):
            raise listing
        if isinstance(listing, int):
            return httpx.Response(listing, json={"message": "error"})
        if isinstance(listing, dict):
            return httpx.Response(200, json=listing)
        return httpx.Response(200, json={"files": listing})

    def session(self) -> RestVaultSession:
        client = httpx.Client(transport=httpx.MockTransport(self.handler))
        return RestVaultSession(BASE_URL, API_KEY, client=client)


@pytest.fixture
def fake_vault():
    """Factory building a FakeVault from a listings dict."""
    return FakeVault


@pytest.fixture
def settings():
    return VaultApiSettings(enabled=True, api_key=API_KEY, host="127.0.0.1", port=27124)


@pytest.fixture(autouse=True)
def _isolate_state():
    yield
    connections_manager.close_sessions()
    set_print_logger(None)
    root = logging.getLogger()
    for h in root.handlers[:]:
        if isinstance(h, logging.FileHandler):
            root.removeHandler(h)
            h.close()
