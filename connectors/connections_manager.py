# connections_manager.py
"""
connections_manager.py
----------------------
Manages vault sessions

Holds in-memory sessions to the vaults reached by this process.
Reuses an existing session when the (base URL, api key, TLS verify) triple matches,
so repeated discoveries share one HTTP connection pool.
Listing results are never cached here.

"""

import logging

from connectors.vault_interface import VaultSessionProtocol
from connectors.rest_vault_connector import RestVaultSession

logger = logging.getLogger(__name__)

# key: (base_url, api_key, verify) tuple
# value: VaultSessionProtocol instance
_active_sessions: dict[tuple[str, str, bool | str], VaultSessionProtocol] = {}


def get_session(base_url: str, api_key: str, verify: bool | str = True) -> VaultSessionProtocol:
    """
    Get or create a vault session for the given parameters.
    Reuses existing sessions if one matches the (base_url, api_key, verify) triple.
    """
    key = (base_url, api_key, verify)
    if key in _active_sessions:
        return _active_sessions[key]

    session = RestVaultSession(base_url, api_key, verify=verify)
    logger.debug(f"Opened vault session {session.session_id} for {base_url}")
    _active_sessions[key] = session
    return session


def close_sessions() -> None:
    """Close and forget every active session."""
    for session in _active_sessions.values():
        session.close()
    _active_sessions.clear()
