"""Pydantic models that capture vault discovery concepts."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import json
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError


class Folder(BaseModel):
    """A discovered vault folder, identified by its full slash separated path."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="Full path, no leading or trailing slash")
    name: str = Field(..., min_length=1, description="Display name, equal to the path")

    @classmethod
    def from_path(cls, path: str) -> Folder:
        return cls(path=path, name=path)


class VaultApiSettings(BaseModel):
    """Connection settings of the vault Local REST API."""

    model_config = ConfigDict(populate_by_name=True)

    enabled: bool = Field(default=False, description="Discovery is skipped when off")
    api_key: str = Field(default="", alias="apiKey", description="Bearer token")
    host: str = Field(default="127.0.0.1", description="Host, optionally prefixed with http:// or https://")
    port: int = Field(default=27124, ge=1, le=65535)
    verify: bool | str = Field(
        default=True,
        description="Verify the TLS certificate: True, False, or the path of a CA bundle such as the certificate the API publishes",
    )

    @property
    def is_configured(self) -> bool:
        return self.enabled and bool(self.api_key)

    @property
    def scheme(self) -> str:
        if self.host.startswith("http://"):
            return "http"
        return "https"

    @property
    def bare_host(self) -> str:
        for prefix in ("http://", "https://"):
            if self.host.startswith(prefix):
                return self.host[len(prefix):]
        return self.host

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.bare_host}:{self.port}/vault/"

    def merge(self, patch: Mapping[str, Any]) -> VaultApiSettings:
        """Return new settings with the non-None values of ``patch`` applied."""
        payload = self.model_dump(mode="python")
        payload.update({k: v for k, v in patch.items() if v is not None})
        return VaultApiSettings.model_validate(payload)
# ---------------------------------------------------------------------------
# helpers


def load_settings(value: Any) -> VaultApiSettings:
    """Normalize supported inputs into a VaultApiSettings instance."""
    if isinstance(value, VaultApiSettings):
        return value
    payload: Mapping[str, Any]
    if isinstance(value, Mapping):
        payload = value
    elif isinstance(value, Path):
        payload = _load_text_payload(value.read_text())
    elif isinstance(value, (str, bytes)):
        payload = _load_text_payload(value)
    else:
        raise TypeError("Unsupported value for vault settings")
    try:
        return VaultApiSettings.model_validate(payload)
    except ValidationError as exc:
        raise ValueError("Invalid vault settings payload") from exc


def _load_text_payload(raw: str | bytes) -> dict[str, Any]:
    """Interpret raw text as YAML first, falling back to JSON."""
    text = raw.decode() if isinstance(raw, bytes) else raw
    try:
        payload = yaml.safe_load(text) or {}
    except yaml.YAMLError:
        payload = json.loads(text)
    if not isinstance(payload, dict):
        raise ValueError("Vault settings must be a mapping")
    # General settings files nest the block under "obsidianApi"
    return payload.get("obsidianApi", payload)


__all__ = [
    "Folder",
    "VaultApiSettings",
    "load_settings",
]
