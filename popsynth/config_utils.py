"""Helper utilities for loading and normalising configuration inputs."""
from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from .errors import ConfigurationError
from .schema import Config

logger = logging.getLogger(__name__)


def parse_override_value(raw: str) -> Any:
    """Convert a ``path=value`` right-hand side into a YAML-like scalar.

    Booleans and ``none`` are recognised case-insensitively, integers stay
    integers so seeds and counts validate, and quotes force a string (e.g.
    ``grid.filename="001.txt"``).  Non-finite numbers are kept as text and
    left for the configuration model to reject.
    """

    text = raw.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {"'", '"'}:
        return text[1:-1]
    lower = text.lower()
    if lower in {"true", "false"}:
        return lower == "true"
    if lower in {"none", "null", ""}:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return text
    return value if math.isfinite(value) else text


def apply_overrides_dict(payload: Dict[str, Any], overrides: Sequence[str]) -> Dict[str, Any]:
    """Apply dotted-path overrides to a configuration dictionary."""

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
                raise ConfigurationError(f"Cannot traverse into non-mapping for override '{item}' at '{segment}'")
            if segment not in target or target[segment] is None:
                target[segment] = {}
            target = target[segment]
        if not isinstance(target, dict):
            raise ConfigurationError(f"Cannot set override '{item}'; target is not a mapping")
        target[parts[-1]] = parse_override_value(value_str)
    return payload


def read_overrides_file(path: Path) -> List[str]:
    """Return ``path=value`` lines from an overrides file, skipping comments."""

    lines: List[str] = []
    for raw in Path(path).read_text(encoding="utf-8").splitlines():
        text = raw.split("#", 1)[0].strip()
        if text:
            lines.append(text)
    return lines


def load_config(path: Optional[Path] = None, overrides: Optional[Sequence[str]] = None) -> Config:
    """Load a YAML configuration file into a :class:`Config` instance.

    ``path`` may be ``None`` to start from the built-in defaults; overrides
    are applied on top in either case.
    """

    from ruamel.yaml import YAML

    data: Any = {}
    if path is not None:
        yaml = YAML(typ="safe")
        source_path = Path(path).resolve()
        try:
            with source_path.open("r", encoding="utf-8") as fh:
                data = yaml.load(fh)
        except OSError as exc:
            raise ConfigurationError(f"cannot read configuration file {source_path}: {exc}") from exc
        if data is None:
            data = {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration root must be a mapping")
    data = apply_overrides_dict(data, list(overrides or ()))
    try:
        cfg = Config(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid configuration: {exc}") from exc
    logger.debug("load_config: source=%s overrides=%d", path, len(overrides or ()))
    return cfg


def configure_logging(level: int) -> None:
    """Configure root logging and route Python warnings through it."""

    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    root = logging.getLogger()
    root.setLevel(level)
    logging.captureWarnings(True)


__all__ = [
    "parse_override_value",
    "apply_overrides_dict",
    "read_overrides_file",
    "load_config",
    "configure_logging",
]
