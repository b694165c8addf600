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
"""Visited-URL log for a browsing session.

In memory only. Entries keep first-seen order and are never removed
except by clearing the whole session.
"""

from __future__ import annotations

import logging
import threading

from .url import NavigationURL

logger = logging.getLogger("linkguard.navigation.history")


class NavigationLog:
    """Thread-safe, ordered, deduplicated record of main-frame navigations."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: list[NavigationURL] = []
        self._seen: set[str] = set()

    def record(self, url: NavigationURL) -> bool:
        """Append ``url`` unless it is the blank page or already present.

        Returns:
            True if the URL was appended.
        """
        if url.is_blank:
            return False
        with self._lock:
            if url.raw in self._seen:
                return False
            self._seen.add(url.raw)
            self._entries.append(url)
        logger.debug("Recorded navigation: %s", url.raw)
        return True

    def snapshot(self) -> list[NavigationURL]:
        """Copy of the log in first-seen order."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        """Drop every entry (session reset only)."""
        with self._lock:
            self._entries.clear()
            self._seen.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, url: object) -> bool:
        raw = url.raw if isinstance(url, NavigationURL) else url
        with self._lock:
            return raw in self._seen
