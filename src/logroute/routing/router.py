"""
logroute.routing.router

Filename-based target routing.

Responsibilities:
- Evaluate ordered rules against a source filename (anchored regex match).
- Honour stop-on-match rules and report which targets want a backtrace.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from functools import lru_cache

from logroute.routing.rules import RuleSetCache, TargetRule
from logroute.settings import Settings


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern)
    except re.error:
        return None


def match_targets(filename: str, rules: Iterable[TargetRule]) -> dict[str, bool]:
    """
    Map target name -> backtrace flag for every rule matching `filename`.
    Later matches overwrite earlier flags; a matching stop rule ends evaluation.
    """

    targets: dict[str, bool] = {}
    for rule in rules:
        compiled = _compile(rule.pattern)
        # Invalid patterns never match.
        if compiled is None or compiled.fullmatch(filename) is None:
            continue
        targets[rule.target] = rule.backtrace
        if rule.stop_on_match:
            break
    return targets


class Router:
    def __init__(self, *, settings: Settings) -> None:
        self._rules = RuleSetCache(lambda: settings.target_map)

    @property
    def rules(self) -> tuple[TargetRule, ...] | None:
        return self._rules.get()

    def route(self, filename: str | None) -> dict[str, bool] | None:
        # None means "no rule set configured"; an empty dict means "nothing matched".
        rules = self.rules
        if not rules:
            return None
        return match_targets(filename or "", rules)


# --- Module Notes -----------------------------------------------------------
# Compiled patterns are memoized separately from the rule set so `match_targets`
# stays usable with ad-hoc rule lists.
