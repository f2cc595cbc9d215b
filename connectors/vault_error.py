"""Custom exceptions raised by vault connectors"""

from typing import Optional


class VaultListingError(Exception):
    """A directory listing could not be obtained from the vault."""
    def __init__(self, message="A vault listing error occurred", status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class MalformedListingError(VaultListingError):
    """The listing response was received but does not carry a 'files' array."""
