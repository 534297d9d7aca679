"""Small logging helpers shared by the runner and the driver."""
from __future__ import annotations

import logging


def format_exception_short(exc: BaseException) -> str:
    """Return a concise exception string."""

    name = exc.__class__.__name__
    return f"{name}: {exc}"


def log_stage(logger_obj: logging.Logger | None, label: str, *, extra: dict | None = None) -> None:
    """Lightweight stage logger wrapper."""

    if logger_obj is None:
        return
    if extra:
        logger_obj.info("stage=%s %s", label, extra)
    else:
        logger_obj.info("stage=%s", label)


__all__ = [
    "format_exception_short",
    "log_stage",
]
