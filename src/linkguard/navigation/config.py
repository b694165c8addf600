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
"""Navigation guard configuration schema.

Read once when a browsing surface starts; the rule lists cannot be
changed while it runs.

Config location: ~/.linkguard/navigation.yaml
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .gate import PromptText
from .rules import RuleSet

logger = logging.getLogger("linkguard.navigation.config")

# ---------------------------------------------------------------------------
# Default paths
# ---------------------------------------------------------------------------
_LINKGUARD_HOME = Path(os.environ.get("LINKGUARD_HOME", Path.home() / ".linkguard"))
DEFAULT_CONFIG_PATH = _LINKGUARD_HOME / "navigation.yaml"

DEFAULT_INITIAL_URL = "https://www.google.com"
DEFAULT_CONFIRMATION_TIMEOUT_S = 120.0

# ---------------------------------------------------------------------------
# Deep-link and app-store hosts that take the user out of the app.
# Wildcard entries cover the per-campaign subdomains these services hand out.
# ---------------------------------------------------------------------------
DEFAULT_RESTRICTED_PATTERNS: tuple[str, ...] = (
    "*all.onelink.me",
    "*all.app.link",
    "*all.smart.link",
    "*all.branch.link",
    "*all.deeplink.me",
    "*all.page.link",
    "onelink.me",
    "app.link",
    "smart.link",
    "branch.link",
    "deeplink.me",
    "page.link",
    "app.temu.com",
    "apps.apple.com",
    "itunes.apple.com",
)

DEFAULT_RESTRICTED_SCHEMES: tuple[str, ...] = ("itms-appss",)


@dataclass
class GuardConfig:
    """Full navigation guard configuration."""

    rules: RuleSet = field(
        default_factory=lambda: RuleSet.build(
            restricted_patterns=DEFAULT_RESTRICTED_PATTERNS,
            restricted_schemes=DEFAULT_RESTRICTED_SCHEMES,
        )
    )

    # First page the browsing surface loads
    initial_url: str = DEFAULT_INITIAL_URL

    prompt: PromptText = field(default_factory=PromptText)

    # Unanswered confirmations are denied after this many seconds (None = wait forever)
    confirmation_timeout_s: float | None = DEFAULT_CONFIRMATION_TIMEOUT_S

    # Stylesheets the presentation layer injects into loaded pages.
    # Carried through unchanged; the policy never reads them.
    cosmetic_css: list[str] = field(default_factory=list)

    # Decision audit file (None = in-memory only)
    audit_log_path: str | None = None


def load_config(path: Path | str | None = None) -> GuardConfig:
    """Load guard configuration from a YAML file.

    If the file does not exist or cannot be parsed, returns the default
    config (built-in restricted deep-link hosts, empty whitelist).
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.info("No navigation config at %s -- using defaults", config_path)
        return GuardConfig()

    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            logger.warning("Invalid navigation config (not a dict) -- using defaults")
            return GuardConfig()
        return _parse_config(raw)
    except Exception as exc:
        logger.error("Failed to load navigation config: %s -- using defaults", exc)
        return GuardConfig()


def save_config(config: GuardConfig, path: Path | str | None = None) -> Path:
    """Save guard configuration to a YAML file."""
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {
        "initial_url": config.initial_url,
        "whitelist": {
            "patterns": list(config.rules.whitelist_patterns),
            "schemes": list(config.rules.whitelist_schemes),
        },
        "restricted": {
            "patterns": list(config.rules.restricted_patterns),
            "schemes": list(config.rules.restricted_schemes),
        },
        "prompt": {
            "title": config.prompt.title,
            "message": config.prompt.message,
            "stay_label": config.prompt.stay_label,
            "leave_label": config.prompt.leave_label,
        },
        "confirmation_timeout_s": config.confirmation_timeout_s,
        "cosmetic_css": list(config.cosmetic_css),
        "audit_log_path": config.audit_log_path,
    }
    config_path.write_text(
        yaml.dump(data, default_flow_style=False, sort_keys=False), encoding="utf-8"
    )
    logger.info("Saved navigation config to %s", config_path)
    return config_path


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str)]


def _parse_config(raw: dict) -> GuardConfig:
    """Parse raw YAML dict into GuardConfig."""
    defaults = GuardConfig()

    whitelist = raw.get("whitelist") or {}
    restricted = raw.get("restricted")
    if not isinstance(whitelist, dict):
        whitelist = {}

    if isinstance(restricted, dict):
        restricted_patterns = _string_list(restricted.get("patterns"))
        restricted_schemes = _string_list(restricted.get("schemes"))
    else:
        # Section absent: keep the built-in deep-link hosts
        restricted_patterns = list(DEFAULT_RESTRICTED_PATTERNS)
        restricted_schemes = list(DEFAULT_RESTRICTED_SCHEMES)

    rules = RuleSet.build(
        whitelist_patterns=_string_list(whitelist.get("patterns")),
        whitelist_schemes=_string_list(whitelist.get("schemes")),
        restricted_patterns=restricted_patterns,
        restricted_schemes=restricted_schemes,
    )

    prompt_raw = raw.get("prompt") or {}
    if not isinstance(prompt_raw, dict):
        prompt_raw = {}
    prompt = PromptText(
        title=str(prompt_raw.get("title", defaults.prompt.title)),
        message=str(prompt_raw.get("message", defaults.prompt.message)),
        stay_label=str(prompt_raw.get("stay_label", defaults.prompt.stay_label)),
        leave_label=str(prompt_raw.get("leave_label", defaults.prompt.leave_label)),
    )

    timeout = raw.get("confirmation_timeout_s", DEFAULT_CONFIRMATION_TIMEOUT_S)
    if timeout is not None:
        try:
            timeout = float(timeout)
        except (TypeError, ValueError):
            logger.warning("Invalid confirmation_timeout_s %r -- using default", timeout)
            timeout = DEFAULT_CONFIRMATION_TIMEOUT_S
        if timeout <= 0:
            timeout = None

    audit_log_path = raw.get("audit_log_path")

    return GuardConfig(
        rules=rules,
        initial_url=str(raw.get("initial_url", DEFAULT_INITIAL_URL)),
        prompt=prompt,
        confirmation_timeout_s=timeout,
        cosmetic_css=_string_list(raw.get("cosmetic_css")),
        audit_log_path=str(audit_log_path) if audit_log_path else None,
    )
