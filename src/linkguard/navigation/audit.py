# LinkGuard
# Copyright (C) 2025 Phoenix Link (Pty) Ltd. All Rights Reserved.
#
# This file is part of LinkGuard.
#
# LinkGuard is dual-licensed:
#
# 1. Open Source: GNU Affero General Public License v3.0 (AGPL-3.0)
#    You may use, modify, and distribute this file under AGPL-3.0.
#    See LICENSE for the full text.
#
# 2. Commercial: Available from Phoenix Link (Pty) Ltd
#    For proprietary use, SaaS deployment, or enterprise licensing.
#    See LICENSE-ENTERPRISE.md or contact info@phoenixlink.co.za
#
# Contributions require a signed CLA. See COPYRIGHT.md and CLA.md.
"""Navigation decision audit trail.

Every policy decision is kept in a bounded in-memory ring and, when a
path is configured, appended to a JSON Lines file (one object per line).
"""

from __future__ import annotations

import json
import logging
import threading
import time
from collections import deque
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TextIO

logger = logging.getLogger("linkguard.navigation.audit")

MAX_RECENT_ENTRIES = 1000


@dataclass
class AuditEntry:
    """A single navigation decision."""

    timestamp: float
    event_type: str  # "allowed", "confirmed", "denied", "malformed"
    url: str
    host: str = ""
    scheme: str = ""
    main_frame: bool = True
    classification: str = ""  # "allow" / "confirm"
    outcome: str = ""  # "allow" / "deny"
    rule_matched: str = ""  # e.g. "restricted_pattern:*all.app.link"
    decided_by: str = ""  # "policy", "user", "timeout", "system"
    reason: str = ""

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(asdict(self), separators=(",", ":"))

    @classmethod
    def decision(
        cls,
        url: str,
        host: str,
        scheme: str,
        main_frame: bool,
        classification: str,
        outcome: str,
        rule_matched: str,
        decided_by: str = "policy",
        reason: str = "",
    ) -> AuditEntry:
        """Create an entry for a classified navigation."""
        if outcome == "deny":
            event_type = "denied"
        elif classification == "confirm":
            event_type = "confirmed"
        else:
            event_type = "allowed"
        return cls(
            timestamp=time.time(),
            event_type=event_type,
            url=url,
            host=host,
            scheme=scheme,
            main_frame=main_frame,
            classification=classification,
            outcome=outcome,
            rule_matched=rule_matched,
            decided_by=decided_by,
            reason=reason,
        )

    @classmethod
    def malformed(cls, raw: object, main_frame: bool, reason: str) -> AuditEntry:
        """Create an entry for a target that could not be parsed."""
        return cls(
            timestamp=time.time(),
            event_type="malformed",
            url="" if raw is None else str(raw),
            main_frame=main_frame,
            classification="allow",
            outcome="allow",
            rule_matched="MALFORMED",
            decided_by="policy",
            reason=reason,
        )


class AuditLogger:
    """Thread-safe decision log, optionally mirrored to a JSON Lines file."""

    def __init__(self, log_path: str | Path | None = None, max_recent: int = MAX_RECENT_ENTRIES) -> None:
        self._path = Path(log_path) if log_path else None
        if self._path is not None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._file: TextIO | None = None
        self._recent: deque[AuditEntry] = deque(maxlen=max_recent)
        self._entry_count = 0

    def _ensure_open(self) -> TextIO:
        """Lazily open the log file."""
        if self._file is None or self._file.closed:
            self._file = open(self._path, "a", encoding="utf-8")
        return self._file

    def log(self, entry: AuditEntry) -> None:
        """Record an entry (thread-safe)."""
        with self._lock:
            self._recent.append(entry)
            self._entry_count += 1
            if self._path is None:
                return
            try:
                f = self._ensure_open()
                f.write(entry.to_json() + "\n")
                f.flush()
            except OSError as exc:
                logger.error("Failed to write audit entry: %s", exc)

    def close(self) -> None:
        """Close the log file."""
        with self._lock:
            if self._file and not self._file.closed:
                self._file.close()
                self._file = None

    @property
    def entry_count(self) -> int:
        """Number of entries recorded in this session."""
        return self._entry_count

    @property
    def path(self) -> Path | None:
        return self._path

    def read_recent(self, n: int = 50) -> list[AuditEntry]:
        """Most recent entries, oldest first."""
        with self._lock:
            entries = list(self._recent)
        return entries[-n:] if n > 0 else []

    def read_file(self, n: int = 50) -> list[AuditEntry]:
        """Last ``n`` entries persisted to the log file, oldest first.

        Covers earlier sessions too. Unreadable lines are skipped.
        """
        if self._path is None or n <= 0 or not self._path.exists():
            return []

        tail: deque[AuditEntry] = deque(maxlen=n)
        try:
            with open(self._path, encoding="utf-8") as f:
                for line in f:
                    if not line.strip():
                        continue
                    try:
                        tail.append(AuditEntry(**json.loads(line)))
                    except (json.JSONDecodeError, TypeError):
                        logger.debug("Skipping unreadable audit line: %.80s", line)
        except OSError as exc:
            logger.error("Failed to read audit log %s: %s", self._path, exc)
        return list(tail)

    def history(self, n: int = 50) -> list[AuditEntry]:
        """Last ``n`` entries: from the file when one is configured."""
        if self._path is not None:
            return self.read_file(n)
        return self.read_recent(n)

    def get_stats(self) -> dict[str, int]:
        """Summary counts over the in-memory entries."""
        entries = self.read_recent(MAX_RECENT_ENTRIES)
        return {
            "total": len(entries),
            "allowed": sum(1 for e in entries if e.event_type == "allowed"),
            "confirmed": sum(1 for e in entries if e.event_type == "confirmed"),
            "denied": sum(1 for e in entries if e.event_type == "denied"),
            "malformed": sum(1 for e in entries if e.event_type == "malformed"),
            "unique_hosts": len({e.host for e in entries if e.host}),
        }

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
