"""Logging setup for the AskTaaza service."""

from __future__ import annotations

import logging
from logging import Logger
from typing import Optional


def configure_logging(level: Optional[str] = None) -> Logger:
    """Configure root logging once and return the package logger."""
    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("asktaaza")
