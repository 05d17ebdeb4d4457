from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from dotenv import load_dotenv

from .config_loader import load_config, provider_configs
from .core.chat_session import ChatSession
from .core.errors import UnknownBackendKindError
from .logging_setup import configure_logging
from .providers.manager import ProviderManager
from .providers.types import ProviderState
from .resilience.retry import ResiliencePolicy
from .secrets.sources import SecretsResolver
from .storage.settings import LocalSettings
from .storage.transcript import Transcript, new_session_id
from .storage.workspace import WorkspaceDirectory

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are Corrin, a helpful coding assistant running in the user's terminal. "
    "Be concise and prefer concrete, working answers."
)


def build_app(
    config_path: Optional[Path] = None,
    project_root: Optional[Path] = None,
    *,
    system_prompt: Optional[str] = None,
    temperature: Optional[float] = None,
    log_level: int = logging.INFO,
    logs_enabled: bool = True,
) -> Dict[str, Any]:
    """
    Composition root: load YAML, set up .corrin/ and logging, register providers,
    resolve credentials, and create the Transcript and ChatSession.
    Returns: dict with cfg, paths, manager, secrets, settings, transcript, session, warnings.
    """
    load_dotenv()
    cfg = load_config(config_path)
    warnings: List[str] = []

    # ----- Workspace + logging -----
    storage = cfg["storage"]
    file_backed = storage["backend"] == "file"
    workspace = WorkspaceDirectory(project_root, storage["root"])
    paths = workspace.ensure() if file_backed else workspace.paths

    session_id = new_session_id()
    configure_logging(
        paths.agent_log if file_backed else None,
        level=log_level,
        session_id=session_id,
        enabled=logs_enabled and file_backed,
    )
    if file_backed:
        removed = workspace.cleanup_old_logs(int(storage.get("log_retention_days", 30)))
        logger.info("CLI started (workspace=%s, size=%s, pruned=%d)", paths.root, workspace.size_formatted(), removed)

    # ----- Providers -----
    manager = ProviderManager()
    configs = provider_configs(cfg) or ProviderManager.default_configs()
    for pid, pcfg in configs.items():
        try:
            manager.register_provider(pid, pcfg)
        except UnknownBackendKindError as e:
            logger.error("Skipping provider %s: %s", pid, e)
            warnings.append(f"Provider '{pid}' skipped: {e}")

    # ----- Credentials -----
    secrets_cfg = cfg.get("secrets") or {}
    resolver = SecretsResolver(method=secrets_cfg.get("method", "env"), mapping=secrets_cfg.get("mapping", {}))
    for provider in manager.get_all_providers():
        if provider.state is ProviderState.UNAUTHENTICATED:
            manager.set_credential_for_provider(provider.provider_id, resolver.secret(provider.provider_id))
        logger.debug("Provider %s is %s", provider.provider_id, provider.state.value)

    # ----- Model selection -----
    settings = LocalSettings(paths.local_settings) if file_backed else None
    model = (settings.get_default_model() if settings else None) or cfg["model"]["default"]
    if manager.find_provider_for_model(model) is None:
        available = manager.list_all_models()
        if available:
            fallback = available[0].model.id
            warnings.append(f"Model '{model}' is not offered by any provider; using '{fallback}'.")
            model = fallback

    # ----- Transcript + session -----
    runtime = cfg["runtime"]
    transcript = Transcript(
        system_prompt=system_prompt or DEFAULT_SYSTEM_PROMPT,
        session_id=session_id,
        root_dir=(paths.sessions if file_backed else None),
        header_meta={
            "config_path": str(config_path) if config_path else None,
            "model": model,
            "providers": manager.get_provider_ids(),
        },
    )
    session = ChatSession(
        manager,
        transcript,
        model,
        temperature=temperature if temperature is not None else runtime.get("temperature"),
        max_tokens=runtime.get("max_tokens"),
        policy=ResiliencePolicy(max_retries=int(runtime.get("retries", 0))),
    )

    return {
        "cfg": cfg,
        "paths": paths,
        "workspace": workspace,
        "manager": manager,
        "secrets": resolver,
        "settings": settings,
        "transcript": transcript,
        "session": session,
        "warnings": warnings,
    }
