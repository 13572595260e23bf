"""
logroute.enrichment.backtrace

Call-site discovery and bounded backtrace capture.

Responsibilities:
- Describe the live call stack as a sequence of `BacktraceFrame` descriptors.
- Find the boundary frame (the logging façade entry) and the call site it was invoked from.
- Record and format a bounded list of caller frames above the boundary.
"""

from __future__ import annotations

import enum
import functools
import inspect
from collections.abc import Callable, Mapping, Sequence, Set
import dataclasses
from dataclasses import dataclass, field
from types import FrameType
from typing import Any

from logroute.observability.logging import get_logger

log = get_logger(__name__)

EXCEPTION_HELPER = "log_exception"
UNKNOWN_FILE = "unknown_file"
MAX_TEXT_LENGTH = 28
TEXT_PREVIEW_LENGTH = 25
# Frames inspected beyond `max_frames`, enough to reach the façade boundary.
STACK_SLACK = 10


class CallType(enum.StrEnum):
    # Static covers staticmethods and classmethods; instance covers bound methods.
    static = "static"
    instance = "instance"


class ArgKind(enum.StrEnum):
    composite = "composite"
    collection = "collection"
    text = "text"
    scalar = "scalar"


@dataclass(frozen=True, slots=True)
class ArgValue:
    """
    Tagged argument summary. The payload shape depends on `kind`:
    composite -> class name, collection -> item count, text -> the string,
    scalar -> (type name, value).
    """

    kind: ArgKind
    payload: Any

    @classmethod
    def of(cls, value: Any) -> ArgValue:
        try:
            return cls._classify(value)
        except Exception:
            # A hostile __len__ (or similar) degrades to the class name.
            return cls(ArgKind.composite, type(value).__name__)

    @classmethod
    def _classify(cls, value: Any) -> ArgValue:
        if isinstance(value, str):
            return cls(ArgKind.text, value)
        if isinstance(value, (bool, int, float, complex)) or value is None:
            return cls(ArgKind.scalar, (type(value).__name__, value))
        if isinstance(value, (Mapping, Sequence, Set)):
            return cls(ArgKind.collection, len(value))
        return cls(ArgKind.composite, type(value).__name__)


@dataclass(frozen=True, slots=True)
class BacktraceFrame:
    # `file`/`line` locate the call; `function`/`class_name`/`args` describe the callee.
    function: str
    file: str | None = None
    line: int | None = None
    class_name: str | None = None
    call_type: CallType | None = None
    args: tuple[ArgValue, ...] = ()
    # Deferred argument reader; only frames that end up recorded are resolved.
    arg_loader: Callable[[], tuple[ArgValue, ...]] | None = field(
        default=None, repr=False, compare=False
    )

    def resolve_args(self) -> BacktraceFrame:
        if self.arg_loader is None:
            return self
        try:
            args = self.arg_loader()
        except Exception:
            log.debug("argument_inspection_failed", function=self.function, exc_info=True)
            args = ()
        return dataclasses.replace(self, args=args, arg_loader=None)


@dataclass(frozen=True, slots=True)
class CallSite:
    file: str
    line: int


@dataclass(frozen=True, slots=True)
class Capture:
    call_site: CallSite | None = None
    frames: tuple[BacktraceFrame, ...] = ()
    backtrace: str | None = None


# (include_args, limit) -> descriptors, most recent first; limit=None walks the whole stack.
StackProvider = Callable[[bool, int | None], Sequence[BacktraceFrame]]


# --- Stack provider ---------------------------------------------------------


def _callee_owner(frame: FrameType) -> tuple[str | None, CallType | None, int]:
    # Returns (class name, call type, number of leading implicit args to skip).
    code = frame.f_code
    parts = getattr(code, "co_qualname", code.co_name).split(".")
    declared = parts[-2] if len(parts) > 1 and parts[-2] != "<locals>" else None

    if code.co_argcount:
        first = code.co_varnames[0]
        bound = frame.f_locals.get(first)
        if first == "self" and bound is not None:
            return declared or type(bound).__name__, CallType.instance, 1
        if first == "cls" and isinstance(bound, type):
            return declared or bound.__name__, CallType.static, 1

    if declared is not None:
        return declared, CallType.static, 0
    return None, None, 0


def _callee_args(frame: FrameType, skip: int) -> tuple[ArgValue, ...]:
    info = inspect.getargvalues(frame)
    values: list[Any] = [info.locals.get(name) for name in info.args[skip:]]
    if info.varargs:
        values.extend(info.locals.get(info.varargs) or ())
    if info.keywords:
        values.extend((info.locals.get(info.keywords) or {}).values())
    return tuple(ArgValue.of(v) for v in values)


def current_stack(include_args: bool, limit: int | None = None) -> list[BacktraceFrame]:
    """
    Describe the live stack, most recent call first (this function excluded),
    stopping after `limit` frames. Argument values are not read here: with
    `include_args` each descriptor carries a loader for `resolve_args`.
    """

    frames: list[BacktraceFrame] = []
    current = inspect.currentframe()
    frame = current.f_back if current is not None else None
    try:
        while frame is not None and (limit is None or len(frames) < limit):
            caller = frame.f_back
            class_name, call_type, skip = _callee_owner(frame)
            frames.append(
                BacktraceFrame(
                    function=frame.f_code.co_name,
                    file=caller.f_code.co_filename if caller is not None else None,
                    line=caller.f_lineno if caller is not None else None,
                    class_name=class_name,
                    call_type=call_type,
                    arg_loader=(
                        functools.partial(_callee_args, frame, skip) if include_args else None
                    ),
                )
            )
            frame = caller
    finally:
        # Break frame reference cycles eagerly.
        del current, frame
    return frames


# --- Boundary scan ----------------------------------------------------------


def is_facade_entry(frame: BacktraceFrame, facade_class: str) -> bool:
    return (
        frame.call_type is CallType.static
        and frame.class_name == facade_class
        and frame.function.startswith("log")
    )


def scan_frames(
    frames: Sequence[BacktraceFrame],
    max_frames: int,
    *,
    facade_class: str = "Log",
) -> tuple[CallSite | None, tuple[BacktraceFrame, ...]]:
    """
    Locate the call site of the outermost façade entry and record up to
    `max_frames` frames above it.

    When the façade delegates to `log_exception`, the helper's own call site
    wins and no frames are recorded. When a later boundary frame moves the call
    site while frames are being recorded, the recording restarts from there.
    """

    call_site: CallSite | None = None
    recorded: list[BacktraceFrame] = []
    next_is_first = False
    recording = False

    for frame in frames:
        if (next_is_first and frame.function == EXCEPTION_HELPER) or is_facade_entry(
            frame, facade_class
        ):
            if frame.file and frame.line is not None:
                call_site = CallSite(file=frame.file, line=frame.line)
                if max_frames:
                    recorded = []
                elif next_is_first:
                    break
                else:
                    continue

            if frame.function == EXCEPTION_HELPER:
                break

            next_is_first = True
            recording = True
            continue

        if recording:
            if len(recorded) >= max_frames:
                break
            recorded.append(frame)

    return call_site, tuple(recorded)


# --- Formatting -------------------------------------------------------------


def _render_composite(payload: str) -> str:
    return payload


def _render_collection(payload: int) -> str:
    return f"array({payload})"


def _render_text(payload: str) -> str:
    if len(payload) > MAX_TEXT_LENGTH:
        return f"'{payload[:TEXT_PREVIEW_LENGTH]}...'"
    return f"'{payload}'"


def _render_scalar(payload: tuple[str, Any]) -> str:
    type_name, value = payload
    return f"{type_name}({value})"


_RENDERERS: dict[ArgKind, Callable[[Any], str]] = {
    ArgKind.composite: _render_composite,
    ArgKind.collection: _render_collection,
    ArgKind.text: _render_text,
    ArgKind.scalar: _render_scalar,
}


def render_arg(arg: ArgValue) -> str:
    return _RENDERERS[arg.kind](arg.payload)


def relative_path(path: str, base_dir: str) -> str:
    if base_dir and path.startswith(base_dir):
        return path[len(base_dir) :]
    return path


def format_frame(index: int, frame: BacktraceFrame, base_dir: str = "") -> str:
    file = relative_path(frame.file, base_dir) if frame.file else UNKNOWN_FILE
    line = frame.line or 0
    function = f"{frame.class_name}.{frame.function}" if frame.class_name else frame.function
    args = ", ".join(render_arg(a) for a in frame.args)
    return f"#{index} {file}:{line} {function}({args})"


def format_backtrace(frames: Sequence[BacktraceFrame], base_dir: str = "") -> str:
    return "\n".join(format_frame(i, f, base_dir) for i, f in enumerate(frames))


# --- Walker -----------------------------------------------------------------


class BacktraceWalker:
    def __init__(
        self,
        *,
        base_dir: str = "",
        facade_class: str = "Log",
        stack_provider: StackProvider = current_stack,
    ) -> None:
        self._base_dir = base_dir
        self._facade_class = facade_class
        self._stack_provider = stack_provider

    def capture(self, max_frames: int) -> Capture:
        max_frames = max(max_frames, 0)
        frames: Sequence[BacktraceFrame] = ()
        try:
            # Argument loaders are only attached when a backtrace will be rendered.
            frames = self._stack_provider(max_frames > 0, max_frames + STACK_SLACK)
            call_site, recorded = scan_frames(
                frames, max_frames, facade_class=self._facade_class
            )
        except Exception:
            log.debug("stack_inspection_failed", exc_info=True)
            return Capture()
        finally:
            # Loaders keep live frames (this one included) reachable.
            del frames

        recorded = tuple(frame.resolve_args() for frame in recorded)
        if call_site is not None:
            call_site = CallSite(
                file=relative_path(call_site.file, self._base_dir), line=call_site.line
            )
        backtrace = format_backtrace(recorded, self._base_dir) if recorded else None
        return Capture(call_site=call_site, frames=recorded, backtrace=backtrace)


# --- Module Notes -----------------------------------------------------------
# Descriptors name the *called* function but carry the file/line it was called from,
# so the façade's own frame points straight at the caller's log statement.
