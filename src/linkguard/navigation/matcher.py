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
"""Host pattern matching.

Two pattern forms are supported:

  "*all.example.com"  -- exactly one label in front of example.com
                         ("sub.example.com" yes, "example.com" and
                         "a.b.example.com" no)
  "example"           -- substring of the host ("shop.example.com" yes)
"""

from __future__ import annotations

import re
from functools import lru_cache

from .url import NavigationURL

WILDCARD_PREFIX = "*all."


def is_wildcard(pattern: str) -> bool:
    return pattern.startswith(WILDCARD_PREFIX)


@lru_cache(maxsize=512)
def _wildcard_regex(domain: str) -> re.Pattern[str]:
    return re.compile(r"[^.]+\." + re.escape(domain))


def matches(url: NavigationURL, pattern: str) -> bool:
    """Check whether the URL's host matches ``pattern``.

    Total: an empty host or an empty pattern never matches. Both sides
    are compared lower-case.
    """
    host = url.host.lower()
    if not host or not pattern:
        return False
    pattern = pattern.lower()

    if is_wildcard(pattern):
        domain = pattern[len(WILDCARD_PREFIX):]
        if not domain:
            return False
        return _wildcard_regex(domain).fullmatch(host) is not None

    return pattern in host
