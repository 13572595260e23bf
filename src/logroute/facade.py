"""
logroute.facade

Static logging entry points.

Responsibilities:
- Offer `Log.log(...)` and `Log.log_exception(...)` to application code.
- Forward calls to the configured `Dispatcher`.

The backtrace walker recognises static `Log.log*` frames as the boundary between
logging internals and the caller, so these must stay static methods.
"""

from __future__ import annotations

import traceback
from typing import Any

from logroute.core.severity import Severity
from logroute.dispatch import Dispatcher


class Log:
    _dispatcher: Dispatcher | None = None

    @staticmethod
    def configure(dispatcher: Dispatcher | None) -> None:
        Log._dispatcher = dispatcher

    @staticmethod
    def log(message: Any, severity: Any = Severity.DEBUG) -> None:
        dispatcher = Log._dispatcher
        if dispatcher is None:
            return
        dispatcher.dispatch(message, severity)

    @staticmethod
    def log_exception(exc: BaseException) -> None:
        # The call site resolves to whoever called log_exception; no caller backtrace.
        Log.log("\n" + "".join(traceback.format_exception(exc)), Severity.ERR)


# --- Module Notes -----------------------------------------------------------
# Renaming the class requires the same change to `Settings.facade_class`.
