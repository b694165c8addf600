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
"""Navigation guard API routes.

Provides endpoints for:
  - Submitting navigation attempts from a browsing surface
  - Classifying URLs without side effects
  - Listing and answering pending confirmation prompts
  - Reading the visited-URL log and the decision audit trail
"""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from linkguard.navigation.gate import Outcome
from linkguard.navigation.guard import NavigationGuard

logger = logging.getLogger("linkguard.api.routes.navigation")

router = APIRouter(prefix="/api/navigation", tags=["navigation"])


def get_guard(request: Request) -> NavigationGuard:
    """The guard bound to this app (see ``linkguard.api.server.create_app``)."""
    guard = getattr(request.app.state, "guard", None)
    if guard is None:
        raise HTTPException(status_code=503, detail="Navigation guard not configured")
    return guard


# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------


class NavigationAttemptRequest(BaseModel):
    url: str
    main_frame: bool = True


class ClassifyRequest(BaseModel):
    url: str


class DecisionResponse(BaseModel):
    allow: bool
    reason: str = ""


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/attempt")
async def navigation_attempt(
    request: NavigationAttemptRequest, guard: NavigationGuard = Depends(get_guard)
) -> dict:
    """Decide a navigation attempt. Waits while a confirmation is pending."""
    verdict, outcome = await guard.decide_navigation(request.url, is_main_frame=request.main_frame)
    return {
        "url": request.url,
        "classification": verdict.classification.value if verdict else None,
        "outcome": outcome.value,
    }


@router.post("/classify")
async def classify_url(
    request: ClassifyRequest, guard: NavigationGuard = Depends(get_guard)
) -> dict:
    """Classify a URL without recording or prompting."""
    verdict = guard.evaluate(request.url)
    return {
        "url": request.url,
        "classification": verdict.classification.value,
        "rule_kind": verdict.kind.value,
        "rule_value": verdict.value,
    }


@router.get("/log")
async def get_navigation_log(guard: NavigationGuard = Depends(get_guard)) -> dict:
    """Visited main-frame URLs in first-seen order."""
    urls = [u.raw for u in guard.log_snapshot()]
    return {"urls": urls, "count": len(urls)}


@router.get("/pending")
async def get_pending(guard: NavigationGuard = Depends(get_guard)) -> dict:
    """Confirmation prompts waiting for an answer.

    The frontend polls this endpoint to find prompts to show.
    """
    text = guard.gate.prompt_text
    pending = []
    for decision in guard.pending_decisions():
        entry = decision.to_dict()
        entry.update(
            title=text.title,
            message=text.render_message(decision.url.host_label),
            stay_label=text.stay_label,
            leave_label=text.leave_label,
        )
        pending.append(entry)
    return {"pending": pending, "count": len(pending)}


@router.post("/pending/{decision_id}")
async def answer_pending(
    decision_id: str, response: DecisionResponse, guard: NavigationGuard = Depends(get_guard)
) -> dict:
    """Answer a confirmation prompt: allow=true leaves, allow=false stays."""
    decision = guard.gate.get_pending(decision_id)
    if decision is None:
        raise HTTPException(status_code=404, detail=f"No pending decision with id '{decision_id}'")

    outcome = Outcome.ALLOW if response.allow else Outcome.DENY
    if not guard.answer(decision_id, outcome, response.reason):
        raise HTTPException(status_code=409, detail=f"Decision '{decision_id}' already resolved")

    logger.info("Decision %s answered via web UI: %s", decision_id[:8], outcome.value)
    return {"id": decision_id, "outcome": outcome.value}


@router.get("/status")
async def get_status(guard: NavigationGuard = Depends(get_guard)) -> dict:
    """Rule counts, prompt timeout and decision statistics."""
    return {
        "initial_url": guard.initial_url,
        "rules": guard.rules.counts(),
        "confirmation_timeout_s": guard.gate.timeout_s,
        "gate": guard.gate.get_stats(),
        "audit": guard.audit.get_stats(),
        "log_size": len(guard.log_snapshot()),
    }


@router.get("/audit")
async def get_audit_log(limit: int = 50, guard: NavigationGuard = Depends(get_guard)) -> dict:
    """Recent navigation decisions, read back from the audit file when one is set."""
    audit = guard.audit
    entries = audit.history(max(1, min(limit, 200)))
    return {
        "source": "file" if audit.path else "memory",
        "stats": audit.get_stats(),
        "entries": [asdict(e) for e in entries],
        "count": len(entries),
    }


@router.post("/reset")
async def reset_session(guard: NavigationGuard = Depends(get_guard)) -> dict:
    """Clear the navigation log and deny every pending prompt."""
    denied = len(guard.pending_decisions())
    guard.reset()
    return {"reset": True, "denied_pending": denied}
