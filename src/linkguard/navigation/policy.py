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
"""Navigation policy evaluation.

Precedence is an ordered rule list, not an if-chain per list:

  1. whitelist scheme    -> ALLOW
  2. whitelist pattern   -> ALLOW
  3. restricted scheme   -> CONFIRM
  4. restricted pattern  -> CONFIRM
  5. default             -> ALLOW

The whitelist is fully evaluated before anything restricted is looked at.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .matcher import matches
from .rules import RuleSet
from .url import NavigationURL


class Classification(str, Enum):
    """Result of classifying a navigation target."""

    ALLOW = "allow"
    CONFIRM = "confirm"


class RuleKind(str, Enum):
    """Which list produced a verdict."""

    WHITELIST_SCHEME = "whitelist_scheme"
    WHITELIST_PATTERN = "whitelist_pattern"
    RESTRICTED_SCHEME = "restricted_scheme"
    RESTRICTED_PATTERN = "restricted_pattern"
    DEFAULT = "default"


@dataclass(frozen=True)
class Verdict:
    """A classification and the rule entry that decided it."""

    classification: Classification
    kind: RuleKind
    value: str = ""

    @property
    def rule_matched(self) -> str:
        if self.kind is RuleKind.DEFAULT:
            return self.kind.value
        return f"{self.kind.value}:{self.value}"


DEFAULT_VERDICT = Verdict(Classification.ALLOW, RuleKind.DEFAULT)


def _scheme_hit(url: NavigationURL, scheme: str) -> bool:
    return url.scheme.lower() == scheme.lower()


_Matcher = Callable[[NavigationURL, str], bool]


class PolicyEvaluator:
    """Classifies navigation targets against a RuleSet."""

    def __init__(self, rules: RuleSet) -> None:
        self._rules = rules
        self._ordered: tuple[tuple[RuleKind, Classification, tuple[str, ...], _Matcher], ...] = (
            (RuleKind.WHITELIST_SCHEME, Classification.ALLOW, rules.whitelist_schemes, _scheme_hit),
            (RuleKind.WHITELIST_PATTERN, Classification.ALLOW, rules.whitelist_patterns, matches),
            (RuleKind.RESTRICTED_SCHEME, Classification.CONFIRM, rules.restricted_schemes, _scheme_hit),
            (RuleKind.RESTRICTED_PATTERN, Classification.CONFIRM, rules.restricted_patterns, matches),
        )

    @property
    def rules(self) -> RuleSet:
        return self._rules

    def evaluate(self, url: NavigationURL) -> Verdict:
        """Return the first verdict in precedence order."""
        for kind, classification, values, hit in self._ordered:
            for value in values:
                if hit(url, value):
                    return Verdict(classification, kind, value)
        return DEFAULT_VERDICT

    def classify(self, url: NavigationURL) -> Classification:
        return self.evaluate(url).classification
