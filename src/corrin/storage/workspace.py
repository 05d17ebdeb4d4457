from __future__ import annotations
import datetime as dt
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

_GITIGNORE = """# Corrin CLI local files
*
!.gitignore
# Feel free to commit specific files by adding them with !filename
"""


@dataclass(frozen=True)
class WorkspacePaths:
    root: Path
    logs: Path
    sessions: Path
    cache: Path
    config: Path
    agent_log: Path
    local_settings: Path


class WorkspaceDirectory:
    """
    Per-project `.corrin/` directory: logs, session transcripts, cache and local settings.
    """

    def __init__(self, project_root: Optional[Path] = None, dirname: str = ".corrin"):
        self.project_root = Path(project_root) if project_root else Path.cwd()
        root = Path(dirname)
        self.root = root if root.is_absolute() else self.project_root / root

    @property
    def paths(self) -> WorkspacePaths:
        today = dt.date.today().isoformat()
        logs = self.root / "logs"
        return WorkspacePaths(
            root=self.root,
            logs=logs,
            sessions=logs / "sessions",
            cache=self.root / "cache",
            config=self.root / "config",
            agent_log=logs / f"agent-{today}.log",
            local_settings=self.root / "config" / "local-settings.json",
        )

    def exists(self) -> bool:
        return self.root.is_dir()

    def ensure(self) -> WorkspacePaths:
        p = self.paths
        for d in (p.root, p.logs, p.sessions, p.cache, p.config):
            d.mkdir(parents=True, exist_ok=True)
        gitignore = p.root / ".gitignore"
        if not gitignore.exists():
            gitignore.write_text(_GITIGNORE, encoding="utf-8")
        return p

    def cleanup_old_logs(self, retention_days: int = 30) -> int:
        """Delete agent and session logs older than retention_days. Returns how many were removed."""
        p = self.paths
        cutoff = time.time() - retention_days * 86400
        removed = 0
        for folder, pattern in ((p.logs, "agent-*.log"), (p.sessions, "session-*.jsonl")):
            if not folder.is_dir():
                continue
            for f in folder.glob(pattern):
                if f.is_file() and f.stat().st_mtime < cutoff:
                    f.unlink()
                    removed += 1
        return removed

    def size_bytes(self) -> int:
        if not self.exists():
            return 0
        return sum(f.stat().st_size for f in self.root.rglob("*") if f.is_file())

    def size_formatted(self) -> str:
        size = float(self.size_bytes())
        units = ["B", "KB", "MB", "GB"]
        i = 0
        while size >= 1024 and i < len(units) - 1:
            size /= 1024
            i += 1
        return f"{size:.1f} {units[i]}"
