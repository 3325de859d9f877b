#!/usr/bin/env python3
"""
Access Code Generator CLI

Generate time-limited access codes for Chordsmith.
Codes are signed JWTs carrying the holder's e-mail address. An address listed
in CHORDSMITH_ADMIN_EMAILS may force-regenerate and delete cached charts.

Usage:
    python scripts/generate_access_code.py --email me@example.com --days 7
    python scripts/generate_access_code.py --email me@example.com --hours 1 -q

Environment:
    CHORDSMITH_ACCESS_TOKEN_SECRET must be set (generate with: openssl rand -hex 32)
"""
from __future__ import annotations

import argparse
import logging
import sys

from chordsmith.auth.tokens import AccessCodeError, generate_access_code, get_token_expiration
from chordsmith.config import settings

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate time-limited access codes for Chordsmith",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --email me@example.com --hours 1      # 1 hour (quick test)
    %(prog)s --email me@example.com --days 30      # 1 month
    %(prog)s --email me@example.com --minutes 5 -q # token only, for scripting
        """,
    )
    parser.add_argument("--email", required=True, help="E-mail address the token identifies")
    parser.add_argument("--user-id", default=None, help="Optional opaque user id (JWT sub)")
    parser.add_argument("--hours", type=int, default=0, help="Token validity in hours")
    parser.add_argument("--days", type=int, default=0, help="Token validity in days")
    parser.add_argument("--minutes", type=int, default=0, help="Token validity in minutes (for testing)")
    parser.add_argument("--quiet", "-q", action="store_true", help="Only output the token (for scripting)")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.hours <= 0 and args.days <= 0 and args.minutes <= 0:
        parser.error("At least one of --hours, --days, or --minutes must be specified")
    if "@" not in args.email:
        parser.error(f"Invalid e-mail address: {args.email}")

    try:
        token = generate_access_code(
            email=args.email,
            user_id=args.user_id,
            duration_hours=args.hours or None,
            duration_days=args.days or None,
            duration_minutes=args.minutes or None,
        )
    except AccessCodeError as e:
        logger.error("Error: %s", e)
        return 1

    if args.quiet:
        print(token)
        return 0

    expiration = get_token_expiration(token)
    is_admin = args.email.lower() in {e.lower() for e in settings.admin_emails}

    logger.info("\n" + "=" * 60)
    logger.info("CHORDSMITH ACCESS CODE")
    logger.info("=" * 60)
    logger.info("\nE-mail:   %s", args.email)
    logger.info("Expires:  %s", expiration.strftime("%Y-%m-%d %H:%M:%S UTC"))
    if is_admin:
        logger.info("Role:     ADMIN (listed in CHORDSMITH_ADMIN_EMAILS)")
    logger.info("\nAccess Code:")
    logger.info("-" * 60)
    logger.info(token)
    logger.info("-" * 60)
    if is_admin:
        logger.warning("\nWARNING: This token can force-regenerate and delete cached charts.")
    logger.info("=" * 60 + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
