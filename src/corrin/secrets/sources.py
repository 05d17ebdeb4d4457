# src/corrin/secrets/sources.py

from __future__ import annotations
from typing import Protocol, Optional, Dict, Iterable, List, Union
import logging
import os
import re

import keyring

logger = logging.getLogger(__name__)

KEYRING_SERVICE = "corrin"


def _env_name(provider: str) -> str:
    return re.sub(r"[^A-Z0-9]+", "_", provider.upper()).strip("_")


class SecretSource(Protocol):
    def get(self, provider: str, key: str) -> Optional[str]: ...


class EnvSource:
    def get(self, provider: str, key: str) -> Optional[str]:
        # 1) exact env var name from the mapping, 2) <PROVIDER>_API_KEY
        for name in (key, f"{_env_name(provider)}_API_KEY"):
            val = os.getenv(name)
            if val and val.strip():
                return val.strip()
        return None


class SystemKeyringSource:
    """Credentials stored under service 'corrin', one account per provider id."""

    def __init__(self, service: str = KEYRING_SERVICE):
        self.service = service

    def get(self, provider: str, key: str) -> Optional[str]:
        try:
            val = keyring.get_password(self.service, provider)
        except Exception as e:
            # Backend failures (no D-Bus, locked collection) fall through to the next source.
            logger.debug("keyring lookup failed for %s: %s", provider, e)
            return None
        return val.strip() if val and val.strip() else None

    def set(self, provider: str, value: str) -> None:
        keyring.set_password(self.service, provider, value)


_ALLOWED_METHODS = {"env", "keyring"}


def _normalise_methods(method: Union[str, Iterable[str]]) -> List[str]:
    methods = [method] if isinstance(method, str) else list(method)
    norm = []
    for m in methods:
        key = str(m).strip().lower()
        if key not in _ALLOWED_METHODS:
            raise ValueError(f"Unknown secrets method '{m}'. Allowed: {sorted(_ALLOWED_METHODS)}")
        if key not in norm:
            norm.append(key)
    return norm


def build_secret_sources(method: Union[str, Iterable[str]]) -> List[SecretSource]:
    sources: List[SecretSource] = []
    for name in _normalise_methods(method):
        if name == "env":
            sources.append(EnvSource())
        elif name == "keyring":
            sources.append(SystemKeyringSource())
    return sources


class SecretsResolver:
    """
    Resolve provider credentials using one or more methods in order.
    mapping: per-provider map of names -> env var
      e.g. { "groq": { "api_key": "GROQ_API_KEY" } }
    """
    def __init__(self, method: Union[str, Iterable[str]], mapping: Optional[Dict[str, Dict[str, str]]] = None):
        self._sources = build_secret_sources(method)
        self._map = mapping or {}

    def secret(self, provider: str, name: str = "api_key") -> Optional[str]:
        key = (self._map.get(provider) or {}).get(name, f"{_env_name(provider)}_API_KEY")
        for src in self._sources:
            val = src.get(provider, key)
            if val:
                return val
        return None

    def store(self, provider: str, value: str) -> bool:
        """Persist a credential in the first writable source. Returns False if none can hold it."""
        for src in self._sources:
            if isinstance(src, SystemKeyringSource):
                try:
                    src.set(provider, value)
                    return True
                except Exception as e:
                    logger.warning("Could not store credential for %s in keyring: %s", provider, e)
                    return False
        return False
