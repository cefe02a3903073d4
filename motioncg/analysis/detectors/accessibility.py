from __future__ import annotations
from typing import Iterable

from motioncg.analysis.detectors.performance import duration_of, is_infinite, states_of, transitions_of
from motioncg.analysis.severity import Finding
from motioncg.parsing.ir import MotionElement
from motioncg.parsing.vocab import COLOR_PROPS

OSCILLATING_PROPS = COLOR_PROPS | {"scale", "scaleX", "scaleY", "opacity"}
LABEL_ATTRS = ("aria-label", "aria-labelledby", "title")
INTERACTIVE_ATTRS = ("onClick", "onTap", "onPointerDown")


def _rapid_oscillation(el: MotionElement, short: float) -> bool:
    if el.reduced_motion:
        return False
    fast = any(
        is_infinite(t.get("repeat")) and (duration_of(t) is not None and duration_of(t) <= short)
        for t in transitions_of(el)
    )
    if not fast:
        return False
    return any(key in OSCILLATING_PROPS for _, values in states_of(el) for key in values)


def _interactive(el: MotionElement) -> bool:
    return "hover" in el.props or "tap" in el.props or any(a in el.attrs for a in INTERACTIVE_ATTRS)


def detect_accessibility(elements: Iterable[MotionElement], thresholds: dict | None = None) -> list[Finding]:
    short = float((thresholds or {}).get("short_duration", 0.5))
    out: list[Finding] = []
    for root in elements:
        for el in root.walk():
            if _rapid_oscillation(el, short):
                out.append(Finding(
                    rule="rapid-oscillation", category="accessibility", level="warning",
                    message="Fast infinite oscillation of color or scale can trigger vestibular discomfort",
                    location=el.location,
                    hint="Respect prefers-reduced-motion or slow the oscillation down",
                ))
            if _interactive(el) and not (el.content or "").strip() and not any(a in el.attrs for a in LABEL_ATTRS):
                out.append(Finding(
                    rule="missing-accessible-label", category="accessibility", level="suggestion",
                    message=f"Interactive <{el.tag}> has no text or aria-label",
                    location=el.location,
                    hint=f"Add an aria-label to the interactive <{el.tag}>",
                ))
    return out
