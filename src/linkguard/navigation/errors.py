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
"""Navigation policy errors.

Only ConfigurationError is meant to reach callers. The others are raised
internally and recovered where the policy defines a safe default.
"""

from __future__ import annotations


class NavigationPolicyError(Exception):
    """Base class for navigation policy errors."""


class MalformedURLError(NavigationPolicyError, ValueError):
    """A navigation target could not be parsed into scheme and host."""

    def __init__(self, raw: object, reason: str = "") -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(f"Malformed navigation URL {raw!r}: {reason or 'unparseable'}")


class NoPresentationSurface(NavigationPolicyError):
    """No UI is available to show a confirmation prompt."""


class ConfigurationError(NavigationPolicyError):
    """The guard was used before configuration, or configured twice."""
