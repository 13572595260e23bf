"""
logroute.routing.rules

Target rules and the write-once rule-set cache.

Responsibilities:
- Parse the serialized target map into an ordered tuple of `TargetRule`.
- Cache the parsed rule set once per owner, safely under concurrent first use.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from logroute.observability.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class TargetRule:
    # `pattern` is matched against the whole filename.
    pattern: str
    target: str
    backtrace: bool = False
    stop_on_match: bool = False


def _flag(value: Any) -> bool:
    # Accepts JSON booleans as well as "0"/"1" style values from admin forms.
    if isinstance(value, str):
        value = value.strip()
        if value.lstrip("-").isdigit():
            return int(value) != 0
        return value.lower() in ("true", "yes", "on")
    return bool(value)


def parse_target_map(raw: str | None) -> tuple[TargetRule, ...] | None:
    """
    Returns None when no map is configured or the payload is malformed.
    """

    if not raw or not raw.strip():
        return None
    try:
        records = json.loads(raw)
    except ValueError:
        log.debug("target_map_unparseable")
        return None
    if not isinstance(records, list):
        log.debug("target_map_not_a_list", kind=type(records).__name__)
        return None

    rules: list[TargetRule] = []
    for record in records:
        if not isinstance(record, dict) or "pattern" not in record or "target" not in record:
            log.debug("target_map_invalid_record")
            return None
        rules.append(
            TargetRule(
                pattern=str(record["pattern"]),
                target=str(record["target"]),
                backtrace=_flag(record.get("backtrace", False)),
                stop_on_match=_flag(record.get("stop_on_match", False)),
            )
        )
    return tuple(rules)


_UNSET: Any = object()


class RuleSetCache:
    """
    Lazily parses the rule set at most once; later reads are lock-free.
    A missing/malformed map is cached as None as well.
    """

    def __init__(self, load: Callable[[], str | None]) -> None:
        self._load = load
        self._lock = threading.Lock()
        self._rules: tuple[TargetRule, ...] | None = _UNSET

    def get(self) -> tuple[TargetRule, ...] | None:
        rules = self._rules
        if rules is _UNSET:
            with self._lock:
                if self._rules is _UNSET:
                    self._rules = parse_target_map(self._load())
                rules = self._rules
        return rules


# --- Module Notes -----------------------------------------------------------
# The cache lives for the owner's lifetime (normally the process); there is no
# invalidation because configuration is read once at startup.
