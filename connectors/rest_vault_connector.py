from typing import Any
from urllib.parse import quote
import logging
import ssl
import uuid
import httpx

from box import Box
from connectors.vault_interface import VaultSessionProtocol
from connectors.vault_error import VaultListingError, MalformedListingError

logger = logging.getLogger(__name__)


##### Sessions #####
class RestVaultSession(VaultSessionProtocol):
    """
    A vault session over the Local REST API.
    Every request carries the bearer token and asks for JSON.

    Args:
        base_url (str): The vault listing root, ending with "/vault/".
            Must include scheme and port.
            Example: "https://127.0.0.1:27124/vault/"
        api_key (str): The bearer token for authorization.
        client (httpx.Client, optional): A preconfigured client (tests inject
            one bound to a mock transport). Created when not given.
        timeout (float): Request timeout in seconds for the created client.
        verify (bool | str): TLS verification of the created client. True checks
            against the system CAs, a string is the path of a CA bundle (the
            certificate published by the API), False disables checks.
    """
    def __init__(self, base_url: str, api_key: str, client: httpx.Client | None = None, timeout: float = 10.0, verify: bool | str = True):
        self._base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.api_key = api_key
        self.session_id = str(uuid.uuid4())
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }
        self.verify = verify
        if client is None:
            if verify is False:
                logger.warning(f"TLS certificate verification disabled for {self._base_url}")
            tls = ssl.create_default_context(cafile=verify) if isinstance(verify, str) else verify
            client = httpx.Client(timeout=timeout, verify=tls)
        self._client = client

    @property
    def base_url(self) -> str:
        return self._base_url

    def listing_url(self, path: str) -> str:
        """
        Build the listing URL of a directory.
        Each segment is percent-encoded on its own and segments are rejoined with "/".
        The root ("") maps to the base URL itself.
        """
        segments = [s for s in path.split("/") if s]
        if not segments:
            return self._base_url
        encoded = "/".join(quote(s, safe="") for s in segments)
        return f"{self._base_url}{encoded}/"

    def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """
        Make an authenticated HTTP request to the vault.
        raise_for_status() is called on the response.

        Returns:
            httpx.Response: The HTTP response object.
        """
        response = self._client.request(method, url, headers=self._headers, **kwargs)
        response.raise_for_status()
        return response

    def list_directory(self, path: str) -> list[Any]:
        url = self.listing_url(path)
        logger.debug(f"GET {url}")
        try:
            r = self.request("GET", url)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise VaultListingError(
                f"Listing of {path or '/'!r} failed: {status} {e.response.reason_phrase}",
                status_code=status,
            ) from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise VaultListingError(f"Listing of {path or '/'!r} failed: {e}") from e

        try:
            data = r.json()
        except ValueError as e:
            raise VaultListingError(f"Listing of {path or '/'!r} is not JSON", status_code=r.status_code) from e
        if not isinstance(data, dict) or not isinstance(data.get("files"), list):
            raise MalformedListingError(f"Listing of {path or '/'!r} has no 'files' array", status_code=r.status_code)
        return data["files"]

    @property
    def info(self) -> Box:
        """ Returns information about the session, never the key."""
        return Box({
            "type": "rest_vault",
            "baseURL": self._base_url,
            "verify": self.verify,
            "session_id": self.session_id,
        })

    def close(self) -> None:
        self._client.close()
