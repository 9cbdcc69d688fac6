from __future__ import annotations

import argparse
import asyncio
import json
from collections.abc import Sequence

from .config import ConfigError, load_config
from .diagnostics import build_report, report_to_text, run_auth_diagnostic
from .exceptions import ApiError, StorageUnavailable
from .session import FarmMarketSession, build_session


def cmd_status(session: FarmMarketSession, args: argparse.Namespace) -> int:
    async def _run() -> dict:
        try:
            diagnostic = await run_auth_diagnostic(session.tokens, session.verifier)
        finally:
            await session.aclose()
        return build_report(diagnostic, environment=session.config.env_name)

    report = asyncio.run(_run())
    print(json.dumps(report, indent=2) if args.json else report_to_text(report))
    return 0 if report["status"] == "authenticated" else 2


def cmd_login(session: FarmMarketSession, args: argparse.Namespace) -> int:
    try:
        response = session.auth_client.login(args.email, args.password, args.remember)
        session.tokens.store(response.token, args.ttl_hours)
    finally:
        asyncio.run(session.aclose())
    user = response.user.model_dump() if response.user else None
    print(json.dumps({"user": user, "expires_at": session.tokens.expires_at()}, indent=2))
    return 0


def cmd_logout(session: FarmMarketSession, args: argparse.Namespace) -> int:
    try:
        session.manager.authenticated = session.tokens.get() is not None
        session.manager.logout()
    finally:
        asyncio.run(session.aclose())
    print(json.dumps({"logged_out": True}))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="farm-market-auth", description="Farm Market session token tool")
    parser.add_argument("--env-file", default=None)
    parser.add_argument("--debug-auth", action="store_true", help="trace auth requests to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    status_parser = subparsers.add_parser("status", help="inspect and verify the stored token")
    status_parser.add_argument("--json", action="store_true")
    status_parser.set_defaults(func=cmd_status)

    login_parser = subparsers.add_parser("login")
    login_parser.add_argument("--email", required=True)
    login_parser.add_argument("--password", required=True)
    login_parser.add_argument("--remember", action="store_true")
    login_parser.add_argument("--ttl-hours", type=float, default=None)
    login_parser.set_defaults(func=cmd_login)

    logout_parser = subparsers.add_parser("logout")
    logout_parser.set_defaults(func=cmd_logout)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = load_config(args.env_file)
        session = build_session(config)
        if args.debug_auth:
            session.debugger.enable()
        return args.func(session, args)
    except ConfigError as exc:
        print(json.dumps({"error": "CONFIG_ERROR", "message": str(exc)}, indent=2))
        return 1
    except StorageUnavailable as exc:
        print(json.dumps({"error": "STORAGE_UNAVAILABLE", "message": str(exc)}, indent=2))
        return 1
    except ApiError as exc:
        print(json.dumps({"error": exc.code, "message": exc.message, "trace_id": exc.trace_id}, indent=2))
        return 1
