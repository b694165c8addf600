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
LinkGuard CLI -- Main entry point.

Usage:
    linkguard check URL [URL ...]     # Classify URLs against the rules
    linkguard browse                  # Type URLs, answer prompts on the console
    linkguard serve [--port 8700]     # Run the REST API
    linkguard init-config [--path P]  # Write the default config file
    linkguard --version               # Version info
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from linkguard import __version__
from linkguard.navigation.config import DEFAULT_CONFIG_PATH, GuardConfig, load_config, save_config
from linkguard.navigation.gate import Outcome
from linkguard.navigation.guard import NavigationGuard
from linkguard.navigation.presenters import ConsolePresenter, ConsoleReader

logger = logging.getLogger("linkguard.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkguard",
        description="LinkGuard -- navigation policy for embedded browsers",
    )
    parser.add_argument("--version", action="version", version=f"linkguard {__version__}")
    parser.add_argument(
        "--config",
        default=None,
        help=f"Path to navigation.yaml (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command")

    check = sub.add_parser("check", help="Classify URLs without prompting")
    check.add_argument("urls", nargs="+", help="URLs to classify")

    sub.add_parser("browse", help="Simulate navigations typed on stdin")

    serve = sub.add_parser("serve", help="Run the REST API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8700)

    init = sub.add_parser("init-config", help="Write the default configuration")
    init.add_argument("--path", default=None, help="Destination (default: --config or the default path)")
    init.add_argument("--force", action="store_true", help="Overwrite an existing file")

    return parser


def _cmd_check(config: GuardConfig, urls: list[str]) -> int:
    guard = NavigationGuard(config)
    for url in urls:
        verdict = guard.evaluate(url)
        print(f"{verdict.classification.value:<8} {url}  ({verdict.rule_matched})")
    return 0


async def _browse(guard: NavigationGuard, reader: ConsoleReader) -> None:
    while True:
        try:
            url = await reader.read("url> ")
        except EOFError:
            break
        url = url.strip()
        if not url:
            continue
        if url in ("quit", "exit"):
            break
        outcome = await guard.on_navigation_attempt(url, is_main_frame=True)
        print("loading" if outcome is Outcome.ALLOW else "blocked", url)


def _cmd_browse(config: GuardConfig) -> int:
    # URLs and prompt answers share one reader so no typed line is lost
    reader = ConsoleReader(input)
    guard = NavigationGuard(config, presenter=ConsolePresenter(output_fn=print, reader=reader))
    print(f"Initial page: {guard.initial_url}")
    try:
        asyncio.run(_browse(guard, reader))
    finally:
        guard.close()

    print("Loaded URLs:")
    for url in guard.log_snapshot():
        print(f"  {url.raw}")
    return 0


def _cmd_serve(config: GuardConfig, host: str, port: int) -> int:
    import uvicorn

    from linkguard.api.server import create_app

    uvicorn.run(create_app(config), host=host, port=port)
    return 0


def _cmd_init_config(path: str | None, force: bool) -> int:
    from pathlib import Path

    target = Path(path) if path else DEFAULT_CONFIG_PATH
    if target.exists() and not force:
        print(f"Config already exists at {target} (use --force to overwrite)", file=sys.stderr)
        return 1
    save_config(GuardConfig(), target)
    print(f"Wrote {target}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if args.command is None:
        parser.print_help()
        return 0
    if args.command == "init-config":
        return _cmd_init_config(args.path or args.config, args.force)

    config = load_config(args.config)
    if args.command == "check":
        return _cmd_check(config, args.urls)
    if args.command == "browse":
        return _cmd_browse(config)
    if args.command == "serve":
        return _cmd_serve(config, args.host, args.port)

    parser.error(f"unknown command {args.command!r}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
