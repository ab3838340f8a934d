# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for DeployReady."""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


def resolve_log_level(level: str | None = None) -> int:
    """Map a level name (or ``DEPLOYREADY_LOG_LEVEL``) to a logging level; unknown names mean INFO."""
    name = (level or os.getenv("DEPLOYREADY_LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: str | None = None) -> None:
    """Configure standard logging for CLI/library use."""
    effective_level = resolve_log_level(level)
    logging.basicConfig(level=effective_level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    # The poller reports each probe; httpx would log every request again at INFO.
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(max(effective_level, logging.WARNING))


__all__ = ["resolve_log_level", "setup_logging"]
