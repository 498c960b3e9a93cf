from __future__ import annotations

import threading
import time
from typing import Iterable

import pytest

from boardwise.core.config import ResolvedConfiguration
from boardwise.core.exceptions import ComponentFailure, UnknownComponentError
from boardwise.core.overlays import ComposedDescription, HardwareDescription, OverlayManifest
from boardwise.core.validation import (
    CANCELLED,
    NOT_ATTEMPTED,
    CancellationToken,
    ComponentValidator,
    Metric,
    RunMode,
    Status,
    ValidationContext,
    ValidatorPipeline,
    ValidatorRegistry,
)


class StubValidator(ComponentValidator):
    """Configurable validator that records each call."""

    def __init__(self, name: str, outcome: str = "pass", *, resources: Iterable[str] = (), action=None) -> None:
        self.name = name
        self.outcome = outcome
        self.resource_names = tuple(resources)
        self.action = action
        self.calls = 0

    def check(self, context: ValidationContext):
        self.calls += 1
        if self.action is not None:
            self.action(context)
        if self.outcome == "fail":
            raise ComponentFailure(f"{self.name} broken", metric=Metric("errors", 1))
        if self.outcome == "crash":
            raise RuntimeError("kaboom")
        return f"{self.name} ok", None


def _composed() -> ComposedDescription:
    return ComposedDescription(description=HardwareDescription(), manifest=OverlayManifest())


def _config(*capabilities: str) -> ResolvedConfiguration:
    return ResolvedConfiguration(values={"capabilities": {c: True for c in capabilities}})


def _pipeline(*validators: ComponentValidator, **kwargs) -> ValidatorPipeline:
    return ValidatorPipeline(ValidatorRegistry(validators), **kwargs)


def _statuses(report) -> list[tuple[str, Status]]:
    return [(r.component, r.status) for r in report.results]


def test_collect_all_runs_everything_in_selection_order() -> None:
    pipeline = _pipeline(StubValidator("a"), StubValidator("b", "fail"), StubValidator("c"), max_workers=4)
    report = pipeline.run(_composed(), _config("a", "b", "c"), ["c", "b", "a"], RunMode.COLLECT_ALL)
    assert _statuses(report) == [("c", Status.PASS), ("b", Status.FAIL), ("a", Status.PASS)]
    assert report.verdict is Status.FAIL
    assert report.result_for("b").metric == Metric("errors", 1)
    assert report.result_for("b").diagnostic == "b broken"


def test_collect_all_sequential_when_parallel_disabled() -> None:
    pipeline = _pipeline(StubValidator("a"), StubValidator("b"), parallel=False)
    report = pipeline.run(_composed(), _config("a", "b"), ["a", "b"])
    assert report.passed
    assert report.components == ["a", "b"]


def test_fail_fast_marks_remaining_not_attempted() -> None:
    c = StubValidator("c")
    pipeline = _pipeline(StubValidator("a"), StubValidator("b", "fail"), c)
    report = pipeline.run(_composed(), _config("a", "b", "c"), ["a", "b", "c"], "fail-fast")
    assert _statuses(report) == [("a", Status.PASS), ("b", Status.FAIL), ("c", Status.SKIP)]
    assert report.result_for("c").diagnostic == NOT_ATTEMPTED
    assert c.calls == 0
    assert report.mode is RunMode.FAIL_FAST


def test_unknown_component_is_fatal_before_anything_runs() -> None:
    a = StubValidator("a")
    pipeline = _pipeline(a)
    with pytest.raises(UnknownComponentError) as exc:
        pipeline.run(_composed(), _config("a"), ["a", "fan"])
    assert exc.value.context["components"] == ["fan"]
    assert a.calls == 0


def test_duplicate_selection_runs_once() -> None:
    a = StubValidator("a")
    pipeline = _pipeline(a, StubValidator("b"), parallel=False)
    report = pipeline.run(_composed(), _config("a", "b"), ["a", "b", "a"])
    assert report.components == ["a", "b"]
    assert a.calls == 1


def test_missing_capability_is_skip_and_verdict_neutral() -> None:
    pipeline = _pipeline(StubValidator("a"), StubValidator("b"))
    report = pipeline.run(_composed(), _config("a"), ["a", "b"])
    assert _statuses(report) == [("a", Status.PASS), ("b", Status.SKIP)]
    assert report.result_for("b").diagnostic == "capability 'b' not present"
    assert report.verdict is Status.PASS


def test_empty_selection_passes() -> None:
    report = _pipeline(StubValidator("a")).run(_composed(), _config(), [])
    assert report.results == []
    assert report.verdict is Status.PASS


def test_timeout_becomes_failure_without_blocking() -> None:
    release = threading.Event()
    hung = StubValidator("hung", action=lambda ctx: release.wait(5))
    pipeline = _pipeline(hung, StubValidator("ok"), timeout=0.2)
    try:
        started = time.monotonic()
        report = pipeline.run(_composed(), _config("hung", "ok"), ["hung", "ok"])
        elapsed = time.monotonic() - started
    finally:
        release.set()
    assert _statuses(report) == [("hung", Status.FAIL), ("ok", Status.PASS)]
    assert report.result_for("hung").diagnostic == "timed out after 0.2s"
    assert elapsed < 4


def test_per_component_timeout_override() -> None:
    pipeline = _pipeline(StubValidator("a"), timeout=10, timeouts={"a": 1.5})
    assert pipeline.timeout_for("a") == 1.5
    assert pipeline.timeout_for("b") == 10.0


def test_unexpected_exception_is_captured_as_failure() -> None:
    pipeline = _pipeline(StubValidator("a", "crash"), StubValidator("b"))
    report = pipeline.run(_composed(), _config("a", "b"), ["a", "b"])
    assert _statuses(report) == [("a", Status.FAIL), ("b", Status.PASS)]
    assert report.result_for("a").diagnostic == "RuntimeError: kaboom"


def test_cancel_before_run_skips_everything() -> None:
    token = CancellationToken()
    token.cancel()
    a = StubValidator("a")
    report = _pipeline(a).run(_composed(), _config("a"), ["a"], cancel=token)
    assert _statuses(report) == [("a", Status.SKIP)]
    assert report.result_for("a").diagnostic == CANCELLED
    assert a.calls == 0


def test_cancel_mid_run_keeps_finished_results() -> None:
    token = CancellationToken()
    first = StubValidator("first", action=lambda ctx: token.cancel())
    pipeline = _pipeline(first, StubValidator("second"), parallel=False)
    report = pipeline.run(_composed(), _config("first", "second"), ["first", "second"], cancel=token)
    assert _statuses(report) == [("first", Status.PASS), ("second", Status.SKIP)]
    assert report.result_for("second").diagnostic == CANCELLED


def test_shared_resource_serializes_validators() -> None:
    guard = threading.Lock()
    state = {"active": 0, "peak": 0}

    def probe_bus(ctx) -> None:
        with guard:
            state["active"] += 1
            state["peak"] = max(state["peak"], state["active"])
        time.sleep(0.05)
        with guard:
            state["active"] -= 1

    validators = [StubValidator(f"v{i}", resources=["bus:i2c-1"], action=probe_bus) for i in range(4)]
    pipeline = _pipeline(*validators, max_workers=4)
    report = pipeline.run(_composed(), _config(*(v.name for v in validators)), [v.name for v in validators])
    assert report.passed
    assert state["peak"] == 1


def test_timed_out_validator_keeps_its_resource_until_it_returns() -> None:
    guard = threading.Lock()
    state = {"active": 0, "peak": 0}
    release = threading.Event()

    def on_bus(wait) -> None:
        with guard:
            state["active"] += 1
            state["peak"] = max(state["peak"], state["active"])
        try:
            wait()
        finally:
            with guard:
                state["active"] -= 1

    slow = StubValidator("slow", resources=["bus:i2c-1"], action=lambda ctx: on_bus(lambda: release.wait(5)))
    fast = StubValidator("fast", resources=["bus:i2c-1"], action=lambda ctx: on_bus(lambda: time.sleep(0.05)))
    pipeline = _pipeline(slow, fast, timeout=0.2, parallel=False)
    try:
        report = pipeline.run(_composed(), _config("slow", "fast"), ["slow", "fast"])
    finally:
        release.set()

    assert report.result_for("slow").diagnostic == "timed out after 0.2s"
    assert report.result_for("fast").status is Status.FAIL
    assert "could not acquire resource 'bus:i2c-1'" in report.result_for("fast").diagnostic
    assert fast.calls == 0
    assert state["peak"] == 1

    # Once the abandoned thread returns, the bus is free again.
    lock = pipeline._lock_for("bus:i2c-1")
    assert lock.acquire(timeout=5)
    lock.release()
    rerun = pipeline.run(_composed(), _config("fast"), ["fast"])
    assert rerun.passed


def test_unavailable_resource_fails_component() -> None:
    pipeline = _pipeline(StubValidator("a", resources=["drm"]), timeout=0.1)
    held = pipeline._lock_for("drm")
    held.acquire()
    try:
        report = pipeline.run(_composed(), _config("a"), ["a"])
    finally:
        held.release()
    assert report.result_for("a").status is Status.FAIL
    assert "could not acquire resource 'drm'" in report.result_for("a").diagnostic


def test_results_carry_durations() -> None:
    report = _pipeline(StubValidator("a")).run(_composed(), _config("a"), ["a"])
    assert report.result_for("a").duration >= 0.0
