"""Per-object diagnostic catalog.

Warnings raised while one object evolves are shown at most once each; the
catalog is cleared between objects so nothing leaks into the next one.
"""
from __future__ import annotations

import logging
import warnings
from typing import Dict, Type

from ..warnings import PopSynthWarning

logger = logging.getLogger(__name__)


class DiagnosticCatalog:
    def __init__(self) -> None:
        self._seen: Dict[str, int] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def show_warning_once(self, key: str, message: str, category: Type[Warning] = PopSynthWarning) -> bool:
        """Issue ``message`` unless ``key`` was already shown; return True if issued."""

        count = self._seen.get(key, 0)
        self._seen[key] = count + 1
        if count:
            return False
        warnings.warn(message, category, stacklevel=2)
        return True

    def clean(self) -> None:
        if self._seen:
            logger.debug("diagnostic catalog cleared (%d keys)", len(self._seen))
        self._seen.clear()


__all__ = ["DiagnosticCatalog"]
