#!/usr/bin/env python
"""
Run the distributor portal API server.

Usage:
    uv run python run_api.py
    uv run python run_api.py --reload            # Development mode
    uv run python run_api.py --log-level debug   # Trace auth callbacks

SUPABASE_URL and SUPABASE_ANON_KEY must be set (environment or .env);
the server refuses to start without them.
"""

import argparse
import sys

import uvicorn

from shared.config import get_settings
from shared.exceptions import ConfigurationError


def main():
    parser = argparse.ArgumentParser(description="Run the distributor portal API server")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument("--host", type=str, help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        help="Override LOG_LEVEL",
    )
    args = parser.parse_args()

    settings = get_settings()
    try:
        settings.require_supabase()
    except ConfigurationError as e:
        print(f"Cannot start: {e.message}", file=sys.stderr)
        sys.exit(1)

    uvicorn.run(
        "api:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload or settings.reload,
        log_level=(args.log_level or settings.log_level).lower(),
    )


if __name__ == "__main__":
    main()
