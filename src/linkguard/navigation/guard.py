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
"""Navigation guard -- the single entry point for a browsing surface.

One guard per browsing surface. Each guard owns its decision gate and
navigation log; the RuleSet is immutable and may be shared between
guards.

Pipeline for every navigation attempt:
  1. Parse the URL (unparseable -> ALLOW, nothing recorded)
  2. Record main-frame attempts in the navigation log
  3. Classify against the RuleSet
  4. CONFIRM -> wait on the decision gate; ALLOW -> proceed
  5. Write the decision to the audit trail
"""

from __future__ import annotations

import logging
from typing import Optional

from .audit import AuditEntry, AuditLogger
from .config import GuardConfig
from .errors import ConfigurationError, MalformedURLError
from .gate import DecisionGate, Outcome, PendingDecision, Presenter
from .history import NavigationLog
from .policy import DEFAULT_VERDICT, Classification, PolicyEvaluator, Verdict
from .rules import RuleSet
from .url import NavigationURL, parse_url

logger = logging.getLogger("linkguard.navigation.guard")


class NavigationGuard:
    """Decides whether a browsing surface may load a URL.

    Usage:
        guard = NavigationGuard(load_config(), presenter=ConsolePresenter())
        outcome = await guard.on_navigation_attempt("https://promo.app.link/x")
        if outcome is Outcome.ALLOW:
            web_view.load(url)
    """

    def __init__(
        self,
        config: GuardConfig | RuleSet | None = None,
        presenter: Optional[Presenter] = None,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._presenter = presenter
        self._audit = audit_logger
        self._log = NavigationLog()
        self._config: GuardConfig | None = None
        self._evaluator: PolicyEvaluator | None = None
        self._gate: DecisionGate | None = None
        self._closed = False
        if config is not None:
            self.configure(config)

    # ---------------------------------------------------------------
    # Configuration
    # ---------------------------------------------------------------

    def configure(self, config: GuardConfig | RuleSet) -> None:
        """Install the rule lists. Allowed exactly once.

        Raises:
            ConfigurationError: If the guard is already configured.
        """
        if self._config is not None:
            raise ConfigurationError("Navigation guard is already configured")
        if isinstance(config, RuleSet):
            config = GuardConfig(rules=config)

        self._config = config
        self._evaluator = PolicyEvaluator(config.rules)
        self._gate = DecisionGate(
            presenter=self._presenter,
            prompt_text=config.prompt,
            timeout_s=config.confirmation_timeout_s,
        )
        if self._audit is None:
            self._audit = AuditLogger(config.audit_log_path)

        logger.info(
            "Navigation guard configured: %s (timeout %s)",
            ", ".join(f"{k}={v}" for k, v in config.rules.counts().items()),
            config.confirmation_timeout_s,
        )

    @property
    def configured(self) -> bool:
        return self._config is not None

    @property
    def config(self) -> GuardConfig:
        return self._require_config()

    @property
    def rules(self) -> RuleSet:
        return self._require_config().rules

    @property
    def initial_url(self) -> str:
        return self._require_config().initial_url

    @property
    def cosmetic_css(self) -> list[str]:
        """Stylesheets for the presentation layer (not used by the policy)."""
        return list(self._require_config().cosmetic_css)

    @property
    def gate(self) -> DecisionGate:
        self._require_config()
        assert self._gate is not None
        return self._gate

    @property
    def audit(self) -> AuditLogger:
        self._require_config()
        assert self._audit is not None
        return self._audit

    # ---------------------------------------------------------------
    # Policy
    # ---------------------------------------------------------------

    def evaluate(self, url: str | NavigationURL | None) -> Verdict:
        """Verdict for ``url`` without side effects. Malformed -> ALLOW."""
        self._require_config()
        assert self._evaluator is not None
        try:
            return self._evaluator.evaluate(parse_url(url))
        except MalformedURLError:
            return DEFAULT_VERDICT

    def classify(self, url: str | NavigationURL | None) -> Classification:
        return self.evaluate(url).classification

    async def on_navigation_attempt(
        self, url: str | NavigationURL | None, is_main_frame: bool = True
    ) -> Outcome:
        """Decide a navigation attempt.

        Main-frame attempts are logged before the decision is known, so
        a denied URL still shows up in the navigation log. Internal
        failures resolve to DENY; only cancellation propagates.
        """
        _, outcome = await self.decide_navigation(url, is_main_frame)
        return outcome

    async def decide_navigation(
        self, url: str | NavigationURL | None, is_main_frame: bool = True
    ) -> tuple[Verdict | None, Outcome]:
        """Like ``on_navigation_attempt`` but also returns the verdict.

        The verdict is None when policy evaluation itself failed.
        """
        self._require_config()
        assert self._evaluator is not None and self._gate is not None
        assert self._audit is not None

        try:
            target = parse_url(url)
        except MalformedURLError as exc:
            logger.warning("%s -- allowing", exc)
            self._audit.log(AuditEntry.malformed(url, is_main_frame, exc.reason))
            return DEFAULT_VERDICT, Outcome.ALLOW

        if is_main_frame:
            self._log.record(target)

        try:
            verdict = self._evaluator.evaluate(target)
        except Exception as exc:
            logger.error("Policy evaluation failed for %s: %s -- denying", target.raw, exc)
            self._audit_decision(target, is_main_frame, None, Outcome.DENY, "system", str(exc))
            return None, Outcome.DENY

        if verdict.classification is Classification.ALLOW:
            logger.debug("Allowed %s (%s)", target.raw, verdict.rule_matched)
            self._audit_decision(target, is_main_frame, verdict, Outcome.ALLOW, "policy", "")
            return verdict, Outcome.ALLOW

        try:
            decision: PendingDecision = await self._gate.decide(target)
        except Exception as exc:
            logger.error("Confirmation failed for %s: %s -- denying", target.raw, exc)
            self._audit_decision(target, is_main_frame, verdict, Outcome.DENY, "system", str(exc))
            return verdict, Outcome.DENY

        outcome = decision.outcome or Outcome.DENY
        self._audit_decision(
            target, is_main_frame, verdict, outcome, decision.decided_by, decision.decision_reason
        )
        return verdict, outcome

    # ---------------------------------------------------------------
    # Presentation-side accessors
    # ---------------------------------------------------------------

    def log_snapshot(self) -> list[NavigationURL]:
        """Visited main-frame URLs in first-seen order."""
        return self._log.snapshot()

    def pending_decisions(self) -> list[PendingDecision]:
        return self.gate.pending()

    def answer(self, decision_id: str, outcome: Outcome | str, reason: str = "") -> bool:
        """Answer a pending confirmation. False if unknown or already answered."""
        return self.gate.resolve(decision_id, outcome, reason)

    def reset(self) -> None:
        """Start a fresh session: deny pending prompts and clear the log."""
        if self._gate is not None:
            self._gate.cancel_all("Session reset")
        self._log.clear()
        logger.info("Navigation session reset")

    def close(self) -> None:
        """Tear down: deny pending prompts and refuse to present new ones."""
        if self._closed:
            return
        self._closed = True
        if self._gate is not None:
            self._gate.cancel_all("Browsing surface closed")
            self._gate.set_presenter(None)
        if self._audit is not None:
            self._audit.close()
        logger.info("Navigation guard closed")

    @property
    def closed(self) -> bool:
        return self._closed

    # ---------------------------------------------------------------
    # Internal methods
    # ---------------------------------------------------------------

    def _require_config(self) -> GuardConfig:
        if self._config is None:
            raise ConfigurationError("Navigation guard is not configured")
        return self._config

    def _audit_decision(
        self,
        target: NavigationURL,
        main_frame: bool,
        verdict: Verdict | None,
        outcome: Outcome,
        decided_by: str,
        reason: str,
    ) -> None:
        assert self._audit is not None
        self._audit.log(
            AuditEntry.decision(
                url=target.raw,
                host=target.host,
                scheme=target.scheme,
                main_frame=main_frame,
                classification=verdict.classification.value if verdict else "",
                outcome=outcome.value,
                rule_matched=verdict.rule_matched if verdict else "ERROR",
                decided_by=decided_by,
                reason=reason,
            )
        )
