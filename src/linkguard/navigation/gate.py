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
"""Decision gate -- human confirmation for restricted navigations.

When the policy classifies a URL as CONFIRM, the navigation is parked
here until the user answers a two-choice prompt ("stay" or "leave").

Architecture:
  NavigationGuard --> DecisionGate --> Presenter (UI) --> User

Guarantees:
  - Each navigation attempt gets its own PendingDecision
  - A PendingDecision resolves exactly once; later answers are no-ops
  - Nothing stays pending forever: no UI, a failing UI, a timeout,
    a cancelled caller, or surface teardown all resolve to DENY
  - The caller gets the URL captured when the decision was created

All methods must be called from the event loop that runs
``request_confirmation``.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from .errors import NoPresentationSurface
from .url import NavigationURL

logger = logging.getLogger("linkguard.navigation.gate")


class Outcome(str, Enum):
    """Final verdict handed back to the browsing surface."""

    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True)
class PromptText:
    """Wording of the confirmation prompt. ``{host}`` is substituted."""

    title: str = "Leaving this page?"
    message: str = "Do you really want to visit {host}?"
    stay_label: str = "Stay"
    leave_label: str = "Leave"

    def render_message(self, host_label: str) -> str:
        return self.message.replace("{host}", host_label)


@dataclass(frozen=True)
class ConfirmationPrompt:
    """What a presenter shows the user."""

    decision_id: str
    url: NavigationURL
    host_label: str
    title: str
    message: str
    stay_label: str
    leave_label: str

    def to_dict(self) -> dict[str, str]:
        return {
            "decision_id": self.decision_id,
            "url": self.url.raw,
            "host_label": self.host_label,
            "title": self.title,
            "message": self.message,
            "stay_label": self.stay_label,
            "leave_label": self.leave_label,
        }


# A presenter answers with an Outcome (or bool: True = leave), or returns
# None when the answer will arrive later through DecisionGate.resolve().
Answer = Union[Outcome, bool, None]
Presenter = Callable[[ConfirmationPrompt], Awaitable[Answer]]


class PendingDecision:
    """A single-use resolution slot for one navigation attempt."""

    def __init__(self, decision_id: str, url: NavigationURL) -> None:
        self.id = decision_id
        self.url = url
        self.created_at = time.time()
        self.outcome: Outcome | None = None
        self.decided_at = 0.0
        self.decided_by = ""
        self.decision_reason = ""
        self._resolved = asyncio.Event()

    @property
    def resolved(self) -> bool:
        return self.outcome is not None

    def resolve(self, outcome: Outcome | str, decided_by: str = "user", reason: str = "") -> bool:
        """Resolve the decision.

        Returns:
            True if this call resolved it, False if it was already resolved.
        """
        if self.outcome is not None:
            logger.debug(
                "Ignoring duplicate resolution of [%s] (%s by %s)",
                self.id[:8],
                self.outcome.value,
                self.decided_by,
            )
            return False

        self.outcome = Outcome(outcome)
        self.decided_at = time.time()
        self.decided_by = decided_by
        self.decision_reason = reason
        self._resolved.set()
        return True

    async def wait(self) -> Outcome:
        await self._resolved.wait()
        assert self.outcome is not None
        return self.outcome

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "url": self.url.raw,
            "host": self.url.host,
            "created_at": self.created_at,
            "age_seconds": round(time.time() - self.created_at, 1),
            "outcome": self.outcome.value if self.outcome else None,
            "decided_by": self.decided_by,
            "decision_reason": self.decision_reason,
        }


class DecisionGate:
    """Turns CONFIRM classifications into user decisions.

    Usage:
        gate = DecisionGate(presenter=show_alert, timeout_s=120)
        outcome = await gate.request_confirmation(url)

        # Or, for a presenter that answers out of band (web UI):
        gate.resolve(decision_id, Outcome.ALLOW)
    """

    def __init__(
        self,
        presenter: Optional[Presenter] = None,
        prompt_text: PromptText | None = None,
        timeout_s: float | None = 120.0,
        max_pending: int = 100,
    ) -> None:
        self._presenter = presenter
        self._prompt_text = prompt_text or PromptText()
        self._timeout_s = timeout_s
        self._max_pending = max_pending
        self._pending: dict[str, PendingDecision] = {}
        self._stats = {"requested": 0, "allowed": 0, "denied": 0, "timeouts": 0}

    @property
    def timeout_s(self) -> float | None:
        return self._timeout_s

    @property
    def prompt_text(self) -> PromptText:
        return self._prompt_text

    def set_presenter(self, presenter: Optional[Presenter]) -> None:
        self._presenter = presenter

    async def request_confirmation(self, url: NavigationURL) -> Outcome:
        """Ask the user about ``url`` and wait for the answer."""
        decision = await self.decide(url)
        assert decision.outcome is not None
        return decision.outcome

    async def decide(self, url: NavigationURL) -> PendingDecision:
        """Like ``request_confirmation`` but returns the resolved decision."""
        decision = PendingDecision(uuid.uuid4().hex, url)
        self._stats["requested"] += 1

        if len(self._pending) >= self._max_pending:
            logger.warning(
                "Confirmation queue full (%d pending) -- denying %s",
                len(self._pending),
                url.raw,
            )
            decision.resolve(Outcome.DENY, "system", "Confirmation queue full")
            self._count(decision)
            return decision

        self._pending[decision.id] = decision
        logger.info("Confirmation requested: [%s] %s", decision.id[:8], url.raw)

        presentation = asyncio.ensure_future(self._present(decision))
        try:
            await asyncio.wait_for(decision.wait(), timeout=self._timeout_s)
        except asyncio.TimeoutError:
            decision.resolve(
                Outcome.DENY, "timeout", f"No answer within {self._timeout_s:g}s"
            )
        except asyncio.CancelledError:
            decision.resolve(Outcome.DENY, "system", "Navigation cancelled")
            raise
        finally:
            if not presentation.done():
                presentation.cancel()
            self._pending.pop(decision.id, None)
            self._count(decision)
            logger.info(
                "Confirmation %s: [%s] %s (by %s: %s)",
                decision.outcome.value if decision.outcome else "unresolved",
                decision.id[:8],
                url.raw,
                decision.decided_by,
                decision.decision_reason or "no reason",
            )

        return decision

    def resolve(self, decision_id: str, outcome: Outcome | str, reason: str = "") -> bool:
        """Answer a pending decision from outside the presenter.

        Returns:
            True if resolved, False if unknown or already resolved.
        """
        decision = self._pending.get(decision_id)
        if decision is None:
            return False
        return decision.resolve(outcome, "user", reason)

    def cancel_all(self, reason: str = "Browsing surface closed") -> int:
        """Deny every pending decision.

        Returns:
            Number of decisions this call resolved.
        """
        resolved = 0
        for decision in list(self._pending.values()):
            if decision.resolve(Outcome.DENY, "system", reason):
                resolved += 1
        if resolved:
            logger.info("Denied %d pending confirmation(s): %s", resolved, reason)
        return resolved

    def pending(self) -> list[PendingDecision]:
        return sorted(
            (d for d in self._pending.values() if not d.resolved),
            key=lambda d: d.created_at,
        )

    def get_pending(self, decision_id: str) -> PendingDecision | None:
        return self._pending.get(decision_id)

    def get_stats(self) -> dict[str, int]:
        return {"pending": len(self.pending()), **self._stats}

    # ---------------------------------------------------------------
    # Internal methods
    # ---------------------------------------------------------------

    def _build_prompt(self, decision: PendingDecision) -> ConfirmationPrompt:
        text = self._prompt_text
        host_label = decision.url.host_label
        return ConfirmationPrompt(
            decision_id=decision.id,
            url=decision.url,
            host_label=host_label,
            title=text.title,
            message=text.render_message(host_label),
            stay_label=text.stay_label,
            leave_label=text.leave_label,
        )

    async def _present(self, decision: PendingDecision) -> None:
        """Show the prompt and apply the presenter's answer, if any."""
        if self._presenter is None:
            logger.warning("No presentation surface for [%s] -- denying", decision.id[:8])
            decision.resolve(Outcome.DENY, "system", "No presentation surface")
            return

        try:
            answer = await self._presenter(self._build_prompt(decision))
        except NoPresentationSurface as exc:
            logger.warning("No presentation surface for [%s]: %s -- denying", decision.id[:8], exc)
            decision.resolve(Outcome.DENY, "system", "No presentation surface")
            return
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("Presenter failed for [%s]: %s -- denying", decision.id[:8], exc)
            decision.resolve(Outcome.DENY, "system", f"Presenter error: {exc}")
            return

        if answer is None:
            return
        if isinstance(answer, bool):
            answer = Outcome.ALLOW if answer else Outcome.DENY
        try:
            outcome = Outcome(answer)
        except ValueError:
            logger.error("Presenter returned %r for [%s] -- denying", answer, decision.id[:8])
            decision.resolve(Outcome.DENY, "system", f"Invalid answer: {answer!r}")
            return
        decision.resolve(outcome, "user")

    def _count(self, decision: PendingDecision) -> None:
        if decision.outcome is Outcome.ALLOW:
            self._stats["allowed"] += 1
        elif decision.outcome is Outcome.DENY:
            self._stats["denied"] += 1
        if decision.decided_by == "timeout":
            self._stats["timeouts"] += 1
