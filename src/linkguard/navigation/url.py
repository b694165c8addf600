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
"""Navigation target value type."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from .errors import MalformedURLError

# The empty-page marker a web view navigates to before real content
BLANK_PAGE = "about:blank"


@dataclass(frozen=True)
class NavigationURL:
    """A parsed navigation target.

    ``scheme`` and ``host`` are lower-case and empty when absent.
    Equality follows the full textual form.
    """

    raw: str
    scheme: str = ""
    host: str = ""

    @property
    def is_blank(self) -> bool:
        return self.raw == BLANK_PAGE

    @property
    def host_label(self) -> str:
        """Host name for prompts, or a generic label when there is none."""
        return self.host or "this site"

    def __str__(self) -> str:
        return self.raw


def parse_url(raw: str | NavigationURL | None) -> NavigationURL:
    """Parse a navigation target.

    Raises:
        MalformedURLError: If ``raw`` is empty, not a string, or rejected
            by the URL parser.
    """
    if isinstance(raw, NavigationURL):
        return raw
    if not isinstance(raw, str):
        raise MalformedURLError(raw, "not a string")
    text = raw.strip()
    if not text:
        raise MalformedURLError(raw, "empty")

    try:
        parts = urlsplit(text)
        host = parts.hostname or ""
    except ValueError as exc:
        raise MalformedURLError(raw, str(exc)) from exc

    return NavigationURL(raw=text, scheme=parts.scheme.lower(), host=host.lower())
