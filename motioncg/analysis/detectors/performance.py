from __future__ import annotations
import math
from typing import Any, Iterable, Iterator

from motioncg.analysis.severity import Finding
from motioncg.parsing.ir import Expr, Guarded, MotionElement, STATE_PHASES
from motioncg.parsing.vocab import LAYOUT_PROPS

# framer-motion's tween default when no duration is given
DEFAULT_DURATION = 0.3


def states_of(el: MotionElement) -> Iterator[tuple[str, dict]]:
    """(path, values) for every state phase and declared variant."""
    for phase in STATE_PHASES:
        value = el.props.get(phase)
        if isinstance(value, dict):
            yield phase, value
    variants = el.props.get("variants")
    if isinstance(variants, dict):
        for name, value in variants.items():
            if isinstance(value, dict):
                yield f"variants.{name}", value


def transitions_of(el: MotionElement) -> Iterator[dict]:
    t = el.props.get("transition")
    if isinstance(t, Guarded):
        t = t.value
    if isinstance(t, dict):
        yield t
    for _, values in states_of(el):
        nested = values.get("transition")
        if isinstance(nested, dict):
            yield nested


def is_infinite(v: Any) -> bool:
    if isinstance(v, float) and math.isinf(v):
        return True
    return isinstance(v, Expr) and v.source.strip() == "Infinity"


def duration_of(t: dict) -> float | None:
    d = t.get("duration", DEFAULT_DURATION)
    if isinstance(d, (int, float)) and not isinstance(d, bool):
        return float(d)
    return None


class _PerfChecker:
    def __init__(self, thresholds: dict):
        self.long_duration = float(thresholds.get("long_duration", 2.0))
        self.findings: list[Finding] = []

    def _mark(self, rule: str, el: MotionElement, msg: str, hint: str):
        self.findings.append(Finding(rule=rule, category="performance", level="warning",
                                     message=msg, location=el.location, hint=hint))

    def element(self, el: MotionElement) -> None:
        seen: set[str] = set()
        for path, values in states_of(el):
            for key in values:
                if key in LAYOUT_PROPS and key not in seen:
                    seen.add(key)
                    self._mark("layout-property", el,
                               f"Animating '{key}' in {path} triggers layout on every frame",
                               f"Animate transform (scaleX/scaleY or x/y) instead of {key}")
        for t in transitions_of(el):
            d = duration_of(t)
            if is_infinite(t.get("repeat")) and d is not None and d >= self.long_duration:
                self._mark("unbounded-long-animation", el,
                           f"Infinite repeat of a {d:g}s animation never lets the page idle",
                           "Bound repeat or pause the animation when it is off screen")
                break


def detect_performance(elements: Iterable[MotionElement], thresholds: dict | None = None) -> list[Finding]:
    checker = _PerfChecker(thresholds or {})
    for root in elements:
        for el in root.walk():
            checker.element(el)
    return checker.findings
