# src/corrin/config_loader.py

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional
import copy
import yaml

from .providers.types import ProviderConfig


class ConfigError(ValueError):
    pass


_DEFAULTS: Dict[str, Any] = {
    "model": {"default": "moonshotai/kimi-k2-instruct"},
    "runtime": {"temperature": 1.0, "max_tokens": None, "retries": 2},
    "storage": {"backend": "file", "root": ".corrin", "log_retention_days": 30},
    "secrets": {
        "method": ["keyring", "env"],
        "mapping": {"groq": {"api_key": "GROQ_API_KEY"}},
    },
    "providers": {},
}


def _require(d: Dict[str, Any], dotted: str, typ: type) -> Any:
    cur: Any = d
    for k in dotted.split("."):
        if not isinstance(cur, dict) or k not in cur:
            raise ConfigError(f"Missing config key: {dotted}")
        cur = cur[k]
    if typ is bool and not isinstance(cur, bool):
        raise ConfigError(f"'{dotted}' must be a boolean")
    if typ is str and not isinstance(cur, str):
        raise ConfigError(f"'{dotted}' must be a string")
    if typ is float and (isinstance(cur, bool) or not isinstance(cur, (int, float))):
        raise ConfigError(f"'{dotted}' must be a number")
    if typ is dict and not isinstance(cur, dict):
        raise ConfigError(f"'{dotted}' must be a mapping")
    return cur


def default_config() -> Dict[str, Any]:
    return copy.deepcopy(_DEFAULTS)


def load_config(path: Optional[Path]) -> Dict[str, Any]:
    """
    Read and validate the YAML config. Sections left out of the file fall back to
    default_config(); keys that are present must have the right type.
    """
    if path is None:
        return default_config()
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict) or not raw:
        raise ConfigError(f"Config is empty or invalid YAML: {path}")

    cfg = default_config()
    for section, value in raw.items():
        if isinstance(value, dict) and isinstance(cfg.get(section), dict):
            cfg[section].update(value)
        else:
            cfg[section] = value

    _require(cfg, "model.default", str)
    _require(cfg, "runtime.temperature", float)
    _require(cfg, "storage.backend", str)
    _require(cfg, "storage.root", str)
    providers = _require(cfg, "providers", dict)

    backend = str(cfg["storage"]["backend"]).lower()
    if backend not in ("file", "none"):
        raise ConfigError(f"Unknown storage.backend '{backend}' (expected 'file' or 'none').")
    cfg["storage"]["backend"] = backend

    retries = cfg["runtime"].get("retries", 0)
    if isinstance(retries, bool) or not isinstance(retries, int) or retries < 0:
        raise ConfigError("'runtime.retries' must be a non-negative integer")

    for pid, entry in providers.items():
        if not isinstance(entry, dict):
            raise ConfigError(f"providers.{pid} must be a mapping")
        if "type" not in entry and "kind" not in entry:
            raise ConfigError(f"Missing config key: providers.{pid}.type")

    # Leave paths as provided; resolve them later in bootstrap/composition
    return cfg


def provider_configs(cfg: Dict[str, Any]) -> Dict[str, ProviderConfig]:
    """Parse the providers section, keeping file order."""
    out: Dict[str, ProviderConfig] = {}
    for pid, entry in (cfg.get("providers") or {}).items():
        try:
            out[str(pid)] = ProviderConfig.from_dict(entry)
        except ValueError as e:
            raise ConfigError(f"providers.{pid}: {e}") from e
    return out
