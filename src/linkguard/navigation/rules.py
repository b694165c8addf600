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
"""Navigation rule lists.

A RuleSet is built once at startup and never changes afterwards, so a
single instance can be shared by every browsing surface.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .matcher import WILDCARD_PREFIX

logger = logging.getLogger("linkguard.navigation.rules")

_FIELDS = ("whitelist_patterns", "whitelist_schemes", "restricted_patterns", "restricted_schemes")


@dataclass(frozen=True)
class RuleSet:
    """Whitelist and restricted pattern/scheme lists, in configured order."""

    whitelist_patterns: tuple[str, ...] = ()
    whitelist_schemes: tuple[str, ...] = ()
    restricted_patterns: tuple[str, ...] = ()
    restricted_schemes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Hosts are compared lower-case, so the rule side is folded too
        for name in _FIELDS:
            object.__setattr__(self, name, tuple(v.lower() for v in getattr(self, name)))

    @classmethod
    def build(
        cls,
        whitelist_patterns: Iterable[str] = (),
        whitelist_schemes: Iterable[str] = (),
        restricted_patterns: Iterable[str] = (),
        restricted_schemes: Iterable[str] = (),
    ) -> RuleSet:
        """Normalize raw configuration lists into a RuleSet.

        Entries are stripped and lower-cased. Empty entries (and a bare
        "*all." with no domain) are dropped with a warning, since they
        could never match anything.
        """
        return cls(
            whitelist_patterns=_clean(whitelist_patterns, "whitelist pattern", patterns=True),
            whitelist_schemes=_clean(whitelist_schemes, "whitelist scheme"),
            restricted_patterns=_clean(restricted_patterns, "restricted pattern", patterns=True),
            restricted_schemes=_clean(restricted_schemes, "restricted scheme"),
        )

    @property
    def is_empty(self) -> bool:
        return not (
            self.whitelist_patterns
            or self.whitelist_schemes
            or self.restricted_patterns
            or self.restricted_schemes
        )

    def counts(self) -> dict[str, int]:
        return {
            "whitelist_patterns": len(self.whitelist_patterns),
            "whitelist_schemes": len(self.whitelist_schemes),
            "restricted_patterns": len(self.restricted_patterns),
            "restricted_schemes": len(self.restricted_schemes),
        }


def _clean(values: Iterable[str], label: str, patterns: bool = False) -> tuple[str, ...]:
    cleaned = []
    for value in values:
        if not isinstance(value, str):
            logger.warning("Ignoring non-string %s: %r", label, value)
            continue
        entry = value.strip().lower()
        if not entry or (patterns and entry == WILDCARD_PREFIX):
            logger.warning("Ignoring empty %s: %r", label, value)
            continue
        cleaned.append(entry)
    return tuple(cleaned)
