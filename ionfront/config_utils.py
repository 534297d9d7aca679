"""Helper utilities for normalising configuration inputs."""
from __future__ import annotations

import logging
import warnings
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def parse_override_value(raw: str) -> Any:
    """Parse a CLI override value into a Python object."""

    text = raw.strip()
    lower = text.lower()
    if lower in {"true", "false"}:
        return lower == "true"
    if lower in {"none", "null"}:
        return None
    if lower in {"nan"}:
        return float("nan")
    if lower in {"inf", "+inf", "+infinity", "infinity"}:
        return float("inf")
    if lower in {"-inf", "-infinity"}:
        return float("-inf")
    try:
        return int(text)
    except ValueError:
        try:
            return float(text)
        except ValueError:
            pass
    if (text.startswith('"') and text.endswith('"')) or (text.startswith("'") and text.endswith("'")):
        return text[1:-1]
    return text


def apply_overrides_dict(payload: Dict[str, Any], overrides: Sequence[str]) -> Dict[str, Any]:
    """Apply dotted-path overrides such as ``times.dt_years=1e5`` to a mapping."""

    if not overrides:
        return payload
    for item in overrides:
        key, sep, value_str = item.partition("=")
        if not sep:
            raise ConfigurationError(f"Invalid override '{item}'; expected path=value")
        parts = [segment for segment in key.strip().split(".") if segment]
        if not parts:
            raise ConfigurationError(f"Invalid override '{item}'; empty path")
        target: Any = payload
        for segment in parts[:-1]:
            if not isinstance(target, dict):
                raise ConfigurationError(
                    f"Cannot traverse into non-mapping for override '{item}' at '{segment}'"
                )
            if segment not in target or target[segment] is None:
                target[segment] = {}
            target = target[segment]
        if not isinstance(target, dict):
            raise ConfigurationError(f"Cannot set override '{item}'; target is not a mapping")
        target[parts[-1]] = parse_override_value(value_str)
        logger.debug("override applied: %s", item)
    return payload


def read_overrides_file(path: Path) -> List[str]:
    """Return ``PATH=VALUE`` lines from ``path``, skipping blanks and ``#`` comments."""

    lines: List[str] = []
    with Path(path).open("r", encoding="utf-8") as fh:
        for raw in fh:
            text = raw.strip()
            if not text or text.startswith("#"):
                continue
            lines.append(text)
    return lines


def configure_logging(level: int, suppress_warnings: bool = False) -> None:
    """Configure root logging and optionally silence Python warnings."""

    logging.basicConfig(level=level)
    root = logging.getLogger()
    root.setLevel(level)
    if suppress_warnings:
        warnings.filterwarnings("ignore")
    logging.captureWarnings(True)


__all__ = [
    "parse_override_value",
    "apply_overrides_dict",
    "read_overrides_file",
    "configure_logging",
]
