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
"""
LinkGuard API server.

Hosts one NavigationGuard behind a REST API. A browsing surface posts
its navigation attempts; a web frontend polls /api/navigation/pending
and answers the confirmation prompts.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from linkguard import __version__
from linkguard.api.routes.navigation import router as navigation_router
from linkguard.navigation.config import GuardConfig, load_config
from linkguard.navigation.guard import NavigationGuard
from linkguard.navigation.presenters import WebPresenter

logger = logging.getLogger("linkguard.api.server")


def create_app(
    config: GuardConfig | None = None,
    guard: NavigationGuard | None = None,
) -> FastAPI:
    """Build the API app around ``guard`` (or a new guard for ``config``).

    Without an explicit guard, prompts are published through a
    WebPresenter and answered via ``POST /api/navigation/pending/{id}``.
    """
    if guard is None:
        guard = NavigationGuard(config or load_config(), presenter=WebPresenter())

    app = FastAPI(
        title="LinkGuard API",
        description="Navigation policy decisions for embedded browsing surfaces",
        version=__version__,
    )

    # CORS for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"http://(localhost|127\.0\.0\.1):\d+",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.guard = guard
    app.include_router(navigation_router)

    @app.get("/api/health")
    async def health() -> dict:
        return {"status": "ok", "version": __version__}

    @app.on_event("shutdown")
    async def _on_shutdown() -> None:
        guard.close()
        logger.info("LinkGuard API stopped")

    return app
