from __future__ import annotations
import json
import datetime as dt
import logging
import secrets
from pathlib import Path
from typing import Any, Dict, List, Optional

from corrin.providers.types import ChatMessage, Role

logger = logging.getLogger(__name__)

_ROLES = ("system", "user", "assistant", "tool")


def _now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


def new_session_id() -> str:
    # Unique within one second: microseconds plus random bits.
    stamp = dt.datetime.now(dt.timezone.utc).strftime("%Y%m%d-%H%M%S-%f")
    return f"{stamp}-{secrets.token_hex(2)}"


class Transcript:
    """
    Conversation history plus its session log.
    - If root_dir is provided: JSONL at <root_dir>/session-<session_id>.jsonl
    - If root_dir is None: in-memory only
    - A file that already exists for session_id is resumed
    """

    def __init__(
        self,
        system_prompt: str,
        session_id: Optional[str] = None,
        root_dir: Optional[Path] = None,
        header_meta: Optional[Dict[str, Any]] = None,
    ):
        self._system_prompt = system_prompt
        self._root_dir = Path(root_dir) if root_dir else None
        self._session_id = session_id or new_session_id()
        self._header_meta = header_meta or {}
        self._messages: List[ChatMessage] = []
        self._records: List[Dict[str, Any]] = []
        self._path: Optional[Path] = None

        if self._root_dir:
            self._root_dir.mkdir(parents=True, exist_ok=True)
            self._path = self._root_dir / f"session-{self._session_id}.jsonl"
            if self._path.exists() and self._path.stat().st_size > 0:
                self._load_from_file()
                if not self._messages or self._messages[0].role != "system":
                    self._messages.insert(0, ChatMessage("system", system_prompt))
                return

        self._write({"type": "header", "ts": _now(), "meta": self._header_meta})
        self.append(ChatMessage("system", system_prompt))

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    @property
    def records(self) -> List[Dict[str, Any]]:
        """Log records written so far (in-memory transcripts only)."""
        return list(self._records)

    def append(self, message: ChatMessage, *, reasoning: Optional[str] = None, model: Optional[str] = None) -> None:
        rec: Dict[str, Any] = {"type": "message", "ts": _now(), **message.to_dict()}
        if reasoning:
            rec["reasoning"] = reasoning
        if model:
            rec["model"] = model
        self._write(rec)
        self._messages.append(message)

    def append_message(self, role: Role, content: str) -> None:
        self.append(ChatMessage(role, content))

    def reset(self) -> None:
        """Drop the conversation (keeps the system prompt); the log keeps a marker."""
        self._write({"type": "reset", "ts": _now()})
        self._messages = [m for m in self._messages[:1] if m.role == "system"] or [ChatMessage("system", self._system_prompt)]

    # Internal helpers

    def _write(self, rec: Dict[str, Any]) -> None:
        if self._path is None:
            self._records.append(rec)
            return
        with self._path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")

    def _load_from_file(self) -> None:
        self._messages = []
        with self._path.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    obj = json.loads(line)
                except ValueError:
                    logger.warning("Skipping unreadable line in %s", self._path)
                    continue
                if obj.get("type") == "reset":
                    self._messages = self._messages[:1]
                elif obj.get("type") == "message" and obj.get("role") in _ROLES:
                    self._messages.append(ChatMessage(
                        role=obj["role"],
                        content=obj.get("content") or "",
                        tool_calls=obj.get("tool_calls"),
                        tool_call_id=obj.get("tool_call_id"),
                    ))
