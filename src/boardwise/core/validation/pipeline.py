"""Validator pipeline: run selected component validators into one report.

This module provides the ValidatorPipeline class which handles:
- Selection normalization (unknown names are fatal, duplicates collapse)
- Capability gating (missing capability -> skip)
- fail-fast (sequential) and collect-all (optionally parallel) modes
- Per-invocation timeouts and per-resource serialization
- Cooperative cancellation
"""
from __future__ import annotations

import concurrent.futures
import dataclasses
import logging
import threading
import time
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from boardwise.core.exceptions import ComponentFailure, ValidationTimeout

from .base import ComponentValidator, ValidationContext, ValidationResult, failed, skipped
from .probe import Probe
from .registry import ValidatorRegistry
from .report import RunMode, ValidationReport, parse_run_mode

if TYPE_CHECKING:
    from boardwise.core.config.resolver import ResolvedConfiguration
    from boardwise.core.overlays.models import ComposedDescription

logger = logging.getLogger(__name__)

NOT_ATTEMPTED = "not attempted"
CANCELLED = "cancelled"


class CancellationToken:
    """Stops the pipeline from starting further validators.

    Validators already running finish and keep their report slot.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class ValidatorPipeline:
    """Run component validators against a composed description.

    Example:
        pipeline = ValidatorPipeline(timeout=5.0, max_workers=4)
        report = pipeline.run(composed, resolved, ["cpu", "gpu"], mode=RunMode.COLLECT_ALL)
        report.verdict  # Status.PASS

    Each probe runs on a daemon thread and is abandoned, not killed, when it
    exceeds its timeout; a hung probe therefore never blocks the report or
    process exit. The probe thread owns its resource locks and releases them
    only when it returns, so validators that declare the same resource never
    overlap, even after one of them has been abandoned. A validator waiting
    behind an abandoned probe fails naming the resource.
    """

    def __init__(
        self,
        registry: ValidatorRegistry | None = None,
        *,
        timeout: float = 10.0,
        timeouts: Mapping[str, float] | None = None,
        max_workers: int = 4,
        parallel: bool = True,
        probe: Probe | None = None,
    ) -> None:
        self.registry = registry or ValidatorRegistry.default()
        self.timeout = float(timeout)
        self.timeouts = {str(k): float(v) for k, v in (timeouts or {}).items()}
        self.max_workers = max(1, int(max_workers))
        self.parallel = parallel
        self.probe = probe or Probe("/")
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def timeout_for(self, component: str) -> float:
        return self.timeouts.get(component, self.timeout)

    def run(
        self,
        composed: "ComposedDescription",
        config: "ResolvedConfiguration",
        components: Iterable[str],
        mode: RunMode | str = RunMode.COLLECT_ALL,
        cancel: CancellationToken | None = None,
    ) -> ValidationReport:
        """Run the selected components.

        Raises:
            UnknownComponentError: a selected name has no validator (nothing runs).
        """
        run_mode = parse_run_mode(mode)
        selected = self.registry.select(components)
        logger.info("Validating %s (%s)", ", ".join(selected) or "nothing", run_mode.value)

        if run_mode is RunMode.FAIL_FAST:
            results = self._run_fail_fast(selected, composed, config, cancel)
        elif self.parallel and self.max_workers > 1 and len(selected) > 1:
            results = self._run_parallel(selected, composed, config, cancel)
        else:
            results = [self._run_component(n, composed, config, cancel) for n in selected]

        report = ValidationReport(results=results, mode=run_mode)
        logger.info("Validation verdict: %s", report.verdict.value)
        return report

    # ---------------------------------------------------------------- modes

    def _run_fail_fast(
        self,
        selected: list[str],
        composed: "ComposedDescription",
        config: "ResolvedConfiguration",
        cancel: CancellationToken | None,
    ) -> list[ValidationResult]:
        results: list[ValidationResult] = []
        stopped = False
        for name in selected:
            if stopped:
                results.append(skipped(name, NOT_ATTEMPTED))
                continue
            result = self._run_component(name, composed, config, cancel)
            results.append(result)
            if result.failed:
                logger.warning("Component '%s' failed; remaining components not attempted", name)
                stopped = True
        return results

    def _run_parallel(
        self,
        selected: list[str],
        composed: "ComposedDescription",
        config: "ResolvedConfiguration",
        cancel: CancellationToken | None,
    ) -> list[ValidationResult]:
        slots: list[ValidationResult | None] = [None] * len(selected)
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(selected)),
            thread_name_prefix="boardwise-validate",
        ) as executor:
            futures = {
                executor.submit(self._run_component, name, composed, config, cancel): index
                for index, name in enumerate(selected)
            }
            for future in concurrent.futures.as_completed(futures):
                index = futures[future]
                try:
                    slots[index] = future.result()
                except Exception as e:
                    logger.error("Validator '%s' crashed: %s", selected[index], e)
                    slots[index] = failed(selected[index], f"Execution failed: {e}")
        return [r for r in slots if r is not None]

    # ------------------------------------------------------------ execution

    def _lock_for(self, resource: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(resource, threading.Lock())

    def _run_component(
        self,
        name: str,
        composed: "ComposedDescription",
        config: "ResolvedConfiguration",
        cancel: CancellationToken | None,
    ) -> ValidationResult:
        if cancel is not None and cancel.cancelled:
            return skipped(name, CANCELLED)

        validator = self.registry.require(name)
        if not config.has_capability(validator.capability):
            return skipped(name, f"capability '{validator.capability}' not present")

        timeout = self.timeout_for(name)
        context = ValidationContext(
            component=name, composed=composed, config=config, probe=self.probe, timeout=timeout
        )
        started = time.monotonic()
        try:
            resources = sorted(set(validator.resources(context)))
        except Exception as e:
            return failed(name, f"Execution failed: {e}")

        held: list[threading.Lock] = []
        for resource in resources:
            lock = self._lock_for(resource)
            if not lock.acquire(timeout=timeout):
                _release(held)
                result = failed(name, f"could not acquire resource '{resource}' within {timeout:g}s")
                break
            held.append(lock)
        else:
            result = self._invoke(validator, context, timeout, held)

        result = dataclasses.replace(result, component=name, duration=time.monotonic() - started)
        logger.info("Validator '%s' completed: %s", name, result.status.value)
        return result

    def _invoke(
        self,
        validator: ComponentValidator,
        context: ValidationContext,
        timeout: float,
        held: list[threading.Lock],
    ) -> ValidationResult:
        """Run the probe on its own thread; the thread releases ``held`` when it returns."""
        outcome: dict[str, Any] = {}

        def target() -> None:
            try:
                outcome["result"] = validator.validate(context)
            except ComponentFailure as exc:
                outcome["failure"] = exc
            except Exception as exc:
                outcome["error"] = exc
            finally:
                _release(held)

        thread = threading.Thread(target=target, name=f"boardwise-probe-{validator.name}", daemon=True)
        try:
            thread.start()
        except RuntimeError:
            _release(held)
            raise
        thread.join(timeout)

        if thread.is_alive():
            exc = ValidationTimeout(validator.name, timeout)
            logger.warning("Validator '%s' %s", validator.name, exc)
            return failed(validator.name, str(exc))
        if "failure" in outcome:
            failure = outcome["failure"]
            return failed(validator.name, str(failure), failure.metric)
        if "error" in outcome:
            error = outcome["error"]
            logger.error("Validator '%s' raised %s: %s", validator.name, type(error).__name__, error)
            return failed(validator.name, f"{type(error).__name__}: {error}")

        result = outcome.get("result")
        if not isinstance(result, ValidationResult):
            return failed(validator.name, f"validator returned {type(result).__name__}, not a result")
        return result


def _release(held: list[threading.Lock]) -> None:
    for lock in reversed(held):
        lock.release()


def run_validation(
    composed: "ComposedDescription",
    config: "ResolvedConfiguration",
    components: Iterable[str],
    mode: RunMode | str = RunMode.COLLECT_ALL,
    **pipeline_kwargs: Any,
) -> ValidationReport:
    return ValidatorPipeline(**pipeline_kwargs).run(composed, config, components, mode)


__all__ = [
    "CancellationToken",
    "ValidatorPipeline",
    "run_validation",
    "NOT_ATTEMPTED",
    "CANCELLED",
]
