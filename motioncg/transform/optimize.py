from __future__ import annotations
import logging
import re
from typing import Any, Optional

from motioncg.analysis.detectors.performance import duration_of, is_infinite, states_of, transitions_of
from motioncg.parsing.imports import unused_specifiers
from motioncg.parsing.ir import MotionElement, TransformedUnit, add_unique
from motioncg.parsing.ts_parser import MOTION_SOURCES

logger = logging.getLogger(__name__)

_PX_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*px\s*$")
POSITION_TO_TRANSLATE = {"top": "y", "left": "x"}
SIZE_TO_SCALE = {"width": ("scaleX", "left center"), "height": ("scaleY", "center top")}


def _px(v: Any) -> Optional[float]:
    if isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return float(v)
    if isinstance(v, str):
        m = _PX_RE.match(v)
        if m:
            return float(m.group(1))
    return None


def _frames(v: Any) -> Optional[list[float]]:
    """Numeric frames of a px-compatible value, or None when any frame is not."""
    items = v if isinstance(v, list) else [v]
    out = [_px(i) for i in items]
    if not items or any(x is None for x in out):
        return None
    return out  # type: ignore[return-value]


def _number(x: float) -> Any:
    return int(x) if float(x).is_integer() else x


def _rename(values: dict, old: str, new: str, value: Any) -> None:
    items = [(new if k == old else k, value if k == old else v) for k, v in values.items()]
    values.clear()
    values.update(items)


def _position(el: MotionElement, unit: TransformedUnit) -> None:
    # Every state of an element animates the same property, so all holders move or none do.
    for old, new in POSITION_TO_TRANSLATE.items():
        holders = [(path, values) for path, values in states_of(el) if old in values]
        if not holders:
            continue
        frames = [_frames(values[old]) for _, values in holders]
        if any(fs is None for fs in frames) or any(new in values for _, values in holders):
            add_unique(unit.suggestions, f"Animate transform: {new} instead of {old} to avoid layout on every frame")
            continue
        for (path, values), fs in zip(holders, frames):
            value = [_number(f) for f in fs] if isinstance(values[old], list) else _number(fs[0])
            _rename(values, old, new, value)
            logger.debug("Rewrote %s.%s to %s on <%s>", path, old, new, el.tag)
        add_unique(unit.suggestions, f"Replaced {old} animation with transform: {new}")


def _size(el: MotionElement, unit: TransformedUnit) -> None:
    for prop, (scale, origin) in SIZE_TO_SCALE.items():
        holders = [(path, values) for path, values in states_of(el) if prop in values]
        if not holders:
            continue
        frames = [_frames(values[prop]) for _, values in holders]
        peak = max((f for fs in frames if fs for f in fs), default=0.0)
        style = el.attrs.get("style")
        safe = (
            all(fs is not None for fs in frames)
            and peak > 0
            and not any(scale in values for _, values in holders)
            and (style is None or isinstance(style, dict))
        )
        if not safe:
            add_unique(unit.suggestions, f"Animate transform: {scale} instead of {prop} to avoid layout on every frame")
            continue
        for (path, values), fs in zip(holders, frames):
            scaled = [_number(round(f / peak, 4)) for f in fs]
            _rename(values, prop, scale, scaled if isinstance(values[prop], list) else scaled[0])
        pinned = dict(style or {})
        pinned.setdefault(prop, f"{peak:g}px")
        pinned.setdefault("transformOrigin", origin)
        el.attrs["style"] = pinned
        logger.debug("Rewrote %s to %s on <%s> (pinned at %gpx)", prop, scale, el.tag, peak)
        add_unique(unit.suggestions, f"Replaced {prop} animation with transform: {scale}")


def optimize_performance(unit: TransformedUnit) -> None:
    for root in unit.elements:
        for el in root.walk():
            _position(el, unit)
            _size(el, unit)


def optimize_accessibility(unit: TransformedUnit, short_duration: float = 0.5) -> None:
    for root in unit.elements:
        for el in root.walk():
            if el.reduced_motion:
                continue
            for t in transitions_of(el):
                d = duration_of(t)
                if d is not None and d <= short_duration and is_infinite(t.get("repeat")):
                    el.reduced_motion = True
                    logger.debug("Guarded infinite %gs animation on <%s>", d, el.tag)
                    add_unique(unit.suggestions,
                               f"Guarded the infinite {d:g}s animation on <{el.tag}> with prefers-reduced-motion")
                    break


def optimize_bundle(unit: TransformedUnit) -> None:
    if not unit.source:
        return
    for name in unused_specifiers(unit.source, sources=set(MOTION_SOURCES)):
        add_unique(unit.removed_imports, name)
