from typing import Protocol, Any, List
from box import Box


class VaultSessionProtocol(Protocol):
    """Interface Protocol for vault listing sessions.
    To be implemented by actual transports (REST, mocks in tests...).
    """
    @property
    def base_url(self) -> str: ...

    def list_directory(self, path: str) -> List[Any]:
        """
        List the immediate children of one vault directory.
        :param path: Slash separated directory path, "" for the vault root.
        :return: The raw entries of the listing. Directories end with "/".
        :raises VaultListingError: on transport failure, bad status or malformed payload.
        """
        ...

    @property
    def info(self) -> Box:
        """
        Returns information about the session,
          such as type and base URL, as a Box.
        """
        ...

    def close(self) -> None: ...
