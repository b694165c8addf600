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
"""LinkGuard navigation policy -- The Exit Check.

Sits between a browsing surface and the pages it loads. Every outbound
navigation is classified against host-side rule lists:

  Browsing surface --attempt--> NavigationGuard --Allow/Confirm--> DecisionGate --> User

Policy properties:
  - Default ALLOW: anything not on a restricted list loads silently
  - Whitelist wins: whitelist schemes/patterns override restricted entries
  - Restricted links (deep links, app-store hops) wait for the user
  - Every confirmation resolves exactly once, to Deny when nobody answers
  - Main-frame navigations are recorded in an ordered, deduplicated log
"""

from .errors import (
    ConfigurationError,
    MalformedURLError,
    NavigationPolicyError,
    NoPresentationSurface,
)
from .gate import ConfirmationPrompt, DecisionGate, Outcome, PendingDecision
from .guard import NavigationGuard
from .history import NavigationLog
from .matcher import matches
from .policy import Classification, PolicyEvaluator, Verdict
from .rules import RuleSet
from .url import NavigationURL, parse_url

__all__ = [
    "Classification",
    "ConfigurationError",
    "ConfirmationPrompt",
    "DecisionGate",
    "MalformedURLError",
    "NavigationGuard",
    "NavigationLog",
    "NavigationPolicyError",
    "NavigationURL",
    "NoPresentationSurface",
    "Outcome",
    "PendingDecision",
    "PolicyEvaluator",
    "RuleSet",
    "Verdict",
    "matches",
    "parse_url",
]
