from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Optional, Set, Tuple


@dataclass
class WarningTracker:
    """
    Remembers which (calendar id, key) warnings were already emitted.

    Owned by whoever evaluates calendars (an engine, a CLI run, a test), so
    separate consumers never silence each other.
    """
    _seen: Set[Tuple[str, str]] = field(default_factory=set)

    def warn_once(self, log: logging.Logger, calendar_id: str, key: str, msg: str, *args) -> bool:
        token = (calendar_id, key)
        if token in self._seen:
            return False
        self._seen.add(token)
        log.warning(msg, *args)
        return True

    def already_warned(self, calendar_id: str, key: str) -> bool:
        return (calendar_id, key) in self._seen

    def reset(self, calendar_id: Optional[str] = None) -> None:
        if calendar_id is None:
            self._seen.clear()
        else:
            self._seen = {t for t in self._seen if t[0] != calendar_id}
