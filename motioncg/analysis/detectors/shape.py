from __future__ import annotations
from typing import Any, Iterable

from motioncg.analysis.severity import Finding
from motioncg.parsing.ir import Expr, Guarded, MotionElement, PHASES
from motioncg.parsing.vocab import (
    ANIMATABLE_PROPS, NUMERIC_PROPS, NUMERIC_TRANSITION_KEYS, TRANSITION_KEYS,
)


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _describe(v: Any) -> str:
    if isinstance(v, str):
        return f"string {v!r}"
    if isinstance(v, bool):
        return f"boolean {str(v).lower()}"
    if v is None:
        return "null"
    return type(v).__name__


class _ShapeChecker:
    def __init__(self, thresholds: dict):
        self.max_duration = float(thresholds.get("max_duration", 10.0))
        self.findings: list[Finding] = []

    def _mark(self, rule: str, level: str, message: str, el: MotionElement, hint: str | None = None):
        self.findings.append(Finding(rule=rule, category="shape", level=level, message=message,
                                     location=el.location, hint=hint))

    def transition(self, t: Any, path: str, el: MotionElement) -> None:
        if isinstance(t, Guarded):
            t = t.value
        if isinstance(t, Expr):
            return
        if not isinstance(t, dict):
            self._mark("invalid-value-type", "error", f"{path} must be an object, got {_describe(t)}", el)
            return
        for key, v in t.items():
            if key in ANIMATABLE_PROPS and isinstance(v, dict):
                self.transition(v, f"{path}.{key}", el)
                continue
            if key not in TRANSITION_KEYS:
                self._mark("unknown-property", "warning", f"Unknown transition option '{path}.{key}'", el)
                continue
            if key in NUMERIC_TRANSITION_KEYS and not _is_number(v) and not isinstance(v, Expr):
                self._mark("invalid-value-type", "error",
                           f"{path}.{key} must be a number, got {_describe(v)}", el,
                           hint=f"Use a number of seconds for {key}, e.g. {key}: 0.3")
                continue
            if key in ("duration", "delay") and _is_number(v) and not (0 <= v <= self.max_duration):
                self._mark("duration-range", "warning",
                           f"{path}.{key} of {v}s is outside 0..{self.max_duration:g}s", el)

    def state(self, values: Any, path: str, el: MotionElement) -> None:
        if not isinstance(values, dict):
            return
        for key, v in values.items():
            if key == "transition":
                self.transition(v, f"{path}.transition", el)
                continue
            if key not in ANIMATABLE_PROPS and not key.startswith("--"):
                self._mark("unknown-property", "warning", f"Unknown animatable property '{key}' in {path}", el)
                continue
            if key in NUMERIC_PROPS:
                frames = v if isinstance(v, list) else [v]
                if not all(_is_number(f) or f is None or isinstance(f, Expr) for f in frames):
                    self._mark("invalid-value-type", "error",
                               f"{path}.{key} must be numeric, got {_describe(v)}", el)

    def labels(self, value: Any, phase: str, el: MotionElement, declared: set[str] | None) -> None:
        if declared is None:
            return
        names = [value] if isinstance(value, str) else value if isinstance(value, list) else []
        for name in names:
            if isinstance(name, str) and name not in declared:
                self._mark("unknown-variant", "warning",
                           f"{phase} references variant '{name}' that is not declared", el)

    def element(self, el: MotionElement, inherited: set[str] | None) -> None:
        declared = inherited
        variants = el.props.get("variants")
        if isinstance(variants, dict):
            declared = set(inherited or ()) | set(variants)
        elif variants is not None:
            declared = None  # opaque variants: labels cannot be checked
        for phase, value in el.props.items():
            if phase not in PHASES:
                self._mark("unknown-phase", "warning", f"Unknown animation phase '{phase}'", el)
                continue
            if phase == "transition":
                self.transition(value, "transition", el)
            elif phase == "variants":
                if isinstance(value, dict):
                    for name, state in value.items():
                        self.state(state, f"variants.{name}", el)
            elif isinstance(value, dict):
                self.state(value, phase, el)
            else:
                self.labels(value, phase, el, declared)
        for child in el.children:
            self.element(child, declared)


def detect_shape(elements: Iterable[MotionElement], thresholds: dict | None = None) -> list[Finding]:
    checker = _ShapeChecker(thresholds or {})
    for el in elements:
        checker.element(el, None)
    return checker.findings
