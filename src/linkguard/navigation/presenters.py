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
"""Presentation surfaces for confirmation prompts."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from .errors import NoPresentationSurface
from .gate import ConfirmationPrompt, Outcome

logger = logging.getLogger("linkguard.navigation.presenters")

_LEAVE_REPLIES = frozenset({"l", "leave", "y", "yes"})


class ConsoleReader:
    """Single line source for everything read from the console.

    At most one ``input_fn`` call runs at a time, in an executor thread.
    A reader whose await is cancelled (e.g., a prompt that timed out)
    leaves that call running, and the line it returns goes to the next
    ``read`` instead of being lost.
    """

    def __init__(self, input_fn: Callable[[str], str] = input) -> None:
        self._input = input_fn
        self._inflight: asyncio.Future[str] | None = None

    async def read(self, prompt: str) -> str:
        """Next console line. Raises EOFError when input is closed."""
        if self._inflight is None:
            loop = asyncio.get_running_loop()
            self._inflight = loop.run_in_executor(None, self._input, prompt)
        line = self._inflight
        try:
            return await asyncio.shield(line)
        finally:
            if line.done():
                self._inflight = None


class ConsolePresenter:
    """Asks on the terminal. Anything but an explicit "leave" stays."""

    def __init__(
        self,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
        reader: ConsoleReader | None = None,
    ) -> None:
        self._reader = reader or ConsoleReader(input_fn)
        self._output = output_fn

    async def __call__(self, prompt: ConfirmationPrompt) -> Outcome:
        self._output(prompt.title)
        self._output(prompt.message)
        self._output(f"  [s] {prompt.stay_label}")
        self._output(f"  [l] {prompt.leave_label}")

        try:
            reply = await self._reader.read("Choice [s]: ")
        except EOFError as exc:
            raise NoPresentationSurface("console input closed") from exc

        if reply.strip().lower() in _LEAVE_REPLIES:
            return Outcome.ALLOW
        return Outcome.DENY


class WebPresenter:
    """Publishes prompts for a web client to answer.

    The prompt is considered shown once listeners are notified; the
    client's answer reaches the gate through ``DecisionGate.resolve``.
    While detached (no client), prompts fail with NoPresentationSurface.
    """

    def __init__(self, attached: bool = True) -> None:
        self._attached = attached
        self._callbacks: list[Callable[[ConfirmationPrompt], None]] = []

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        self._attached = True

    def detach(self) -> None:
        self._attached = False

    def on_prompt(self, callback: Callable[[ConfirmationPrompt], None]) -> None:
        """Register a callback for new prompts (e.g., WebSocket push)."""
        self._callbacks.append(callback)

    async def __call__(self, prompt: ConfirmationPrompt) -> None:
        if not self._attached:
            raise NoPresentationSurface("no web client attached")
        for cb in self._callbacks:
            try:
                cb(prompt)
            except Exception as exc:
                logger.error("Prompt callback error: %s", exc)
        return None
