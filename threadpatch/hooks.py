"""Hook registry for the thread aggregation lifecycle."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class HookName(str, Enum):
    BEFORE_EXTRACT = "before_extract"
    AFTER_EXTRACT = "after_extract"
    BEFORE_MERGE = "before_merge"
    AFTER_MERGE = "after_merge"
    ON_ERROR = "on_error"


HookCallback = Callable[[dict[str, Any], dict[str, Any]], dict[str, Any] | None]


class HookManager:
    """Ordered in-process callbacks around extraction and merging.

    A callback receives the run context and a copy of the envelope; a returned
    mapping is folded into the envelope passed to the next callback. A failing
    callback is reported through ``on_error`` and skipped.
    """

    def __init__(self) -> None:
        self._callbacks: dict[HookName, list[HookCallback]] = defaultdict(list)

    def register(self, name: HookName, callback: HookCallback) -> None:
        self._callbacks[name].append(callback)

    def emit(self, name: HookName, context: dict[str, Any], envelope: dict[str, Any]) -> dict[str, Any]:
        result = dict(envelope)
        for callback in self._callbacks[name]:
            try:
                update = callback(context, dict(result))
            except Exception as exc:
                logger.warning("Hook %s failed: %s", name.value, exc)
                self._report_error(exc, {"hook": name.value, **context})
                continue
            if update:
                result.update(update)
        return result

    def _report_error(self, exc: Exception, context: dict[str, Any]) -> None:
        for callback in self._callbacks[HookName.ON_ERROR]:
            callback({"exception": exc, **context}, {})
