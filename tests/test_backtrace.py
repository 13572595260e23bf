"""
tests.test_backtrace

Call-site discovery and backtrace formatting.

Responsibilities:
- Exercise the boundary scan over synthetic frame sequences.
- Check argument rendering and frame formatting rules.
- Check the live stack provider against real frames.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence

import pytest

from conftest import RecordingSink, make_settings
from logroute.core.severity import Severity
from logroute.dispatch import Dispatcher
from logroute.enrichment.backtrace import (
    STACK_SLACK,
    ArgKind,
    ArgValue,
    BacktraceFrame,
    BacktraceWalker,
    CallSite,
    CallType,
    current_stack,
    format_backtrace,
    format_frame,
    render_arg,
    scan_frames,
)
from logroute.facade import Log

FRAME_LINE = re.compile(r"^#\d+ \S+:\d+ [\w.<>]+\(.*\)$")


def _internal(name: str = "dispatch") -> BacktraceFrame:
    return BacktraceFrame(
        function=name,
        file="/srv/app/logroute/dispatch.py",
        line=10,
        class_name="Dispatcher",
        call_type=CallType.instance,
    )


def _facade(function: str = "log", file: str | None = "/srv/app/shop/cart.py", line: int | None = 42):
    return BacktraceFrame(
        function=function,
        file=file,
        line=line,
        class_name="Log",
        call_type=CallType.static,
    )


def _caller(index: int) -> BacktraceFrame:
    return BacktraceFrame(
        function=f"caller_{index}",
        file=f"/srv/app/shop/module_{index}.py",
        line=100 + index,
        args=(ArgValue.of(index),),
    )


# --- Argument rendering -----------------------------------------------------


def test_long_text_is_truncated_to_25_chars() -> None:
    value = "x" * 40
    assert render_arg(ArgValue.of(value)) == "'" + "x" * 25 + "...'"


def test_text_at_limit_is_kept_whole() -> None:
    value = "y" * 28
    assert render_arg(ArgValue.of(value)) == f"'{value}'"


@pytest.mark.parametrize(
    "value,expected",
    [
        (3, "int(3)"),
        (1.5, "float(1.5)"),
        (True, "bool(True)"),
        (None, "NoneType(None)"),
        ([1, 2, 3], "array(3)"),
        ({"a": 1}, "array(1)"),
        ((), "array(0)"),
    ],
)
def test_scalar_and_collection_rendering(value, expected) -> None:
    assert render_arg(ArgValue.of(value)) == expected


def test_objects_render_as_class_name() -> None:
    class Basket:
        pass

    arg = ArgValue.of(Basket())
    assert arg.kind is ArgKind.composite
    assert render_arg(arg) == "Basket"


# --- Frame formatting -------------------------------------------------------


def test_format_frame_with_class_and_relative_path() -> None:
    frame = BacktraceFrame(
        function="add",
        file="/srv/app/shop/cart.py",
        line=7,
        class_name="Cart",
        call_type=CallType.instance,
        args=(ArgValue.of("sku-1"), ArgValue.of(2)),
    )
    assert format_frame(0, frame, "/srv/") == "#0 app/shop/cart.py:7 Cart.add('sku-1', int(2))"


def test_format_frame_defaults_unknown_file_and_line() -> None:
    frame = BacktraceFrame(function="run")
    assert format_frame(3, frame) == "#3 unknown_file:0 run()"


def test_format_backtrace_joins_lines() -> None:
    text = format_backtrace([_caller(1), _caller(2)])
    lines = text.split("\n")
    assert len(lines) == 2
    assert lines[0].startswith("#0 ")
    assert lines[1].startswith("#1 ")


# --- Boundary scan ----------------------------------------------------------


def test_scan_finds_call_site_and_records_callers() -> None:
    frames = [_internal(), _facade(), _caller(1), _caller(2)]
    call_site, recorded = scan_frames(frames, 5)
    assert call_site == CallSite(file="/srv/app/shop/cart.py", line=42)
    assert [f.function for f in recorded] == ["caller_1", "caller_2"]


def test_scan_with_zero_frames_returns_only_call_site() -> None:
    frames = [_internal(), _facade(), _caller(1), _caller(2)]
    call_site, recorded = scan_frames(frames, 0)
    assert call_site is not None
    assert recorded == ()


def test_scan_caps_recorded_frames() -> None:
    frames = [_internal(), _facade(), *[_caller(i) for i in range(10)]]
    _, recorded = scan_frames(frames, 3)
    assert len(recorded) == 3
    assert recorded[-1].function == "caller_2"


def test_scan_without_boundary_returns_nothing() -> None:
    call_site, recorded = scan_frames([_internal(), _caller(1)], 5)
    assert call_site is None
    assert recorded == ()


def test_scan_ignores_instance_calls_named_log() -> None:
    frame = BacktraceFrame(
        function="log", file="/srv/x.py", line=1, class_name="Log", call_type=CallType.instance
    )
    assert scan_frames([frame, _caller(1)], 5) == (None, ())


def test_log_exception_uses_helper_call_site_without_backtrace() -> None:
    # log_exception delegates to log: the inner frame points into the façade module.
    frames = [
        _internal(),
        _facade("log", file="/srv/app/logroute/facade.py", line=40),
        _facade("log_exception", file="/srv/app/shop/checkout.py", line=88),
        _caller(1),
    ]
    for max_frames in (0, 5):
        call_site, recorded = scan_frames(frames, max_frames)
        assert call_site == CallSite(file="/srv/app/shop/checkout.py", line=88)
        assert recorded == ()


def test_outer_boundary_restarts_recording() -> None:
    # Known quirk: a later façade frame moves the call site and discards frames
    # recorded since the first boundary.
    frames = [
        _facade("log", file="/srv/app/shop/inner.py", line=1),
        _caller(1),
        _facade("log_custom", file="/srv/app/shop/outer.py", line=2),
        _caller(2),
        _caller(3),
    ]
    call_site, recorded = scan_frames(frames, 5)
    assert call_site == CallSite(file="/srv/app/shop/outer.py", line=2)
    assert [f.function for f in recorded] == ["caller_2", "caller_3"]


def test_boundary_without_location_still_starts_recording() -> None:
    frames = [_facade(file=None, line=None), _caller(1)]
    call_site, recorded = scan_frames(frames, 5)
    assert call_site is None
    assert [f.function for f in recorded] == ["caller_1"]


# --- Walker -----------------------------------------------------------------


def test_walker_formats_capture_relative_to_base_dir() -> None:
    frames = [_internal(), _facade(), _caller(1), _caller(2)]
    walker = BacktraceWalker(base_dir="/srv/", stack_provider=lambda include_args, limit: frames)

    capture = walker.capture(2)

    assert capture.call_site == CallSite(file="app/shop/cart.py", line=42)
    lines = capture.backtrace.split("\n")
    assert lines == [
        "#0 app/shop/module_1.py:101 caller_1(int(1))",
        "#1 app/shop/module_2.py:102 caller_2(int(2))",
    ]
    assert all(FRAME_LINE.match(line) for line in lines)


def test_walker_zero_frames_has_no_backtrace() -> None:
    frames = [_internal(), _facade(), _caller(1)]
    capture = BacktraceWalker(stack_provider=lambda include_args, limit: frames).capture(0)
    assert capture.frames == ()
    assert capture.backtrace is None
    assert capture.call_site is not None


def test_walker_swallows_provider_errors() -> None:
    def broken(include_args: bool, limit: int | None):
        raise RuntimeError("no frames for you")

    capture = BacktraceWalker(stack_provider=broken).capture(5)
    assert capture.call_site is None
    assert capture.backtrace is None


def test_walker_asks_for_args_only_when_recording() -> None:
    seen: list[tuple[bool, int | None]] = []

    def provider(include_args: bool, limit: int | None):
        seen.append((include_args, limit))
        return []

    walker = BacktraceWalker(stack_provider=provider)
    walker.capture(0)
    walker.capture(3)
    assert seen == [(False, STACK_SLACK), (True, 3 + STACK_SLACK)]


def test_walker_resolves_args_only_for_recorded_frames() -> None:
    resolved: list[str] = []

    def loader(name: str):
        def load():
            resolved.append(name)
            return (ArgValue.of(name),)

        return load

    frames = [
        _internal(),
        _facade(),
        BacktraceFrame(function="kept", file="/srv/a.py", line=1, arg_loader=loader("kept")),
        BacktraceFrame(function="beyond", file="/srv/b.py", line=2, arg_loader=loader("beyond")),
    ]
    capture = BacktraceWalker(stack_provider=lambda include_args, limit: frames).capture(1)

    assert resolved == ["kept"]
    assert capture.backtrace == "#0 /srv/a.py:1 kept('kept')"


def test_failing_arg_loader_keeps_call_site() -> None:
    def explode():
        raise RuntimeError("locals unavailable")

    frames = [
        _facade(),
        BacktraceFrame(function="handler", file="/srv/a.py", line=3, arg_loader=explode),
    ]
    capture = BacktraceWalker(stack_provider=lambda include_args, limit: frames).capture(2)

    assert capture.call_site == CallSite(file="/srv/app/shop/cart.py", line=42)
    assert capture.backtrace == "#0 /srv/a.py:3 handler()"


# --- Live stack provider ----------------------------------------------------


class Widget:
    def describe(self, label):
        return current_stack(True)

    @staticmethod
    def build(size):
        return current_stack(True)


def test_current_stack_describes_instance_call() -> None:
    frames = Widget().describe("blue")
    top = frames[0]
    assert top.function == "describe"
    assert top.class_name == "Widget"
    assert top.call_type is CallType.instance
    assert [render_arg(a) for a in top.resolve_args().args] == ["'blue'"]
    assert top.file.endswith("test_backtrace.py")


def test_current_stack_describes_static_call() -> None:
    frames = Widget.build(3)
    top = frames[0]
    assert top.class_name == "Widget"
    assert top.call_type is CallType.static
    assert [render_arg(a) for a in top.resolve_args().args] == ["int(3)"]


def test_current_stack_plain_function_has_no_class() -> None:
    frames = current_stack(False)
    top = frames[0]
    assert top.function == "test_current_stack_plain_function_has_no_class"
    assert top.class_name is None
    assert top.args == ()


def _nested(depth: int):
    if depth:
        return _nested(depth - 1)
    return current_stack(False, limit=3)


def test_current_stack_stops_at_limit() -> None:
    frames = _nested(10)
    assert [f.function for f in frames] == ["_nested"] * 3


class BrokenRows(Sequence):
    # Lazy result set whose length cannot be computed once the cursor is gone.
    def __getitem__(self, index):
        raise IndexError(index)

    def __len__(self):
        raise RuntimeError("cursor closed")


def _load(rows):
    return current_stack(True)


def test_argument_with_broken_len_renders_as_class_name() -> None:
    top = _load(BrokenRows())[0].resolve_args()
    assert [render_arg(a) for a in top.args] == ["BrokenRows"]


def _outer_handler(rows) -> None:
    _inner_handler()


def _inner_handler() -> None:
    Log.log("rows loaded", Severity.INFO)


def _configure_traced(sink: RecordingSink, max_lines: int) -> None:
    rules = json.dumps([{"pattern": ".*", "target": sink.name, "backtrace": True}])
    settings = make_settings(max_backtrace_lines=max_lines, target_map=rules)
    Log.configure(Dispatcher(settings=settings, sinks=[sink]))


def test_hostile_argument_beyond_window_keeps_call_site(memory_sink: RecordingSink) -> None:
    _configure_traced(memory_sink, max_lines=1)

    _outer_handler(BrokenRows())

    (event,) = memory_sink.events
    assert event.source_file == "test_backtrace.py"
    assert re.fullmatch(r"#0 test_backtrace\.py:\d+ _inner_handler\(\)", event.backtrace)


def test_hostile_argument_inside_window_renders_class_name(memory_sink: RecordingSink) -> None:
    _configure_traced(memory_sink, max_lines=2)

    _outer_handler(BrokenRows())

    (event,) = memory_sink.events
    assert event.source_file == "test_backtrace.py"
    lines = event.backtrace.split("\n")
    assert lines[1].endswith(" _outer_handler(BrokenRows)")


# --- Module Notes -----------------------------------------------------------
# Synthetic frames keep the scan tests independent of pytest's own call stack.
