#!/usr/bin/env python3
"""
Start the check-in API under Uvicorn.

Usage:
    python scripts/run.py                      # APP_HOST / APP_PORT / APP_RELOAD from .env
    python scripts/run.py --port 9000 --no-reload
    python scripts/run.py --seed               # insert the sample team first
"""

import argparse
import logging
import os
import sys

import uvicorn

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Project packages live at the repo root, one level above scripts/
sys.path.insert(0, PROJECT_ROOT)

from core.config import DATABASE_URL, LOG_LEVEL  # noqa: E402

logger = logging.getLogger("checkin.run")


def _env_flag(name, default):
    return os.getenv(name, default).lower() in ("true", "1", "t")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run the field check-in API")
    parser.add_argument("--host", default=os.getenv("APP_HOST", "127.0.0.1"), help="Interface to bind")
    parser.add_argument("--port", type=int, default=int(os.getenv("APP_PORT", "8000")), help="Port to listen on")
    parser.add_argument(
        "--reload",
        action=argparse.BooleanOptionalAction,
        default=_env_flag("APP_RELOAD", "True"),
        help="Restart on source changes",
    )
    parser.add_argument("--seed", action="store_true", help="Insert the sample team before starting")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.seed:
        from db.seed import seed_sample_data

        seed_sample_data()

    # Never log credentials embedded in the URL
    backend = DATABASE_URL.split(":", 1)[0]
    logger.info("Starting check-in API on %s:%s (%s, reload=%s)", args.host, args.port, backend, args.reload)

    uvicorn.run(
        "main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=LOG_LEVEL.lower(),
        app_dir=PROJECT_ROOT,
        reload_dirs=[PROJECT_ROOT] if args.reload else None,
    )


if __name__ == "__main__":
    main()
