#!/usr/bin/env python3
"""
MultitaskOS - State Sync Server
===============================

Bootstraps the state core: loads the saved model from local storage,
migrates it, follows the signed-in user's remote document and serves the
HTTP surface the UI runtime talks to.

Usage:
    python app_server.py

Configuration:
    - .env: Environment variables (paths, user, tie policy)

Environment Variables:
    MULTITASKOS_DATA_DIR     - Directory for the SQLite files (default: "./data")
    MULTITASKOS_STORAGE_KEY  - Local storage key (default: "MultitaskOS-Model")
    MULTITASKOS_LOCAL_DB     - Local storage database path
    MULTITASKOS_REMOTE_DB    - Remote document database path
    MULTITASKOS_USER_ID      - Sign in as this user on startup
    MULTITASKOS_TIE_POLICY   - "local" or "remote" on equal timestamps (default: "local")
    MULTITASKOS_HOST         - Bind address (default: "127.0.0.1")
    MULTITASKOS_PORT         - Bind port (default: 8765)
    MULTITASKOS_LOG_LEVEL    - Log level (default: "INFO")
"""

from __future__ import annotations

import logging
import os
import sys

# Add src directory to path for local development
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

from dotenv import load_dotenv

# Load environment variables from .env
_script_dir = os.path.dirname(os.path.abspath(__file__))
load_dotenv(os.path.join(_script_dir, ".env"))

import uvicorn

from multitaskos import webhooks
from multitaskos.schemas import versions
from multitaskos.settings import load_settings

logger = logging.getLogger("multitaskos-server")

# Suppress verbose logs from dependencies
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings["log_level"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("multitaskos").setLevel(settings["log_level"])

    ctx = webhooks.build_context(settings)
    webhooks.set_context(ctx)

    logger.info("=" * 60)
    logger.info("STARTING MULTITASKOS STATE SYNC")
    logger.info("=" * 60)
    logger.info(f"  Schema version: {versions.STATE_VERSION}")
    logger.info(f"  Storage key: {settings['storage_key']}")
    logger.info(f"  Saved model: {'loaded' if ctx.state is not None else 'none'}")
    logger.info(f"  User: {ctx.user_id or 'signed out'}")
    logger.info(f"  Tie policy: {ctx.tie_policy.value}")
    logger.info("=" * 60)

    uvicorn.run(webhooks.app, host=settings["host"], port=settings["port"], log_level="info")


if __name__ == "__main__":
    main()
