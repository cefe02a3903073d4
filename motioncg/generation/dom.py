from __future__ import annotations
from typing import Any, Optional

from motioncg.generation.context import GenerationContext
from motioncg.generation.jsfmt import INDENT, quote, to_js
from motioncg.generation.react import REDUCED_MOTION_DECL
from motioncg.parsing.dom_parser import ROOT_TARGET
from motioncg.parsing.ir import Guarded, MotionElement

# Values a property returns to when a pointer gesture ends and no resting value is known.
NEUTRAL = {
    "opacity": 1, "scale": 1, "scaleX": 1, "scaleY": 1,
    "x": 0, "y": 0, "rotate": 0, "rotateX": 0, "rotateY": 0, "skewX": 0, "skewY": 0,
}
LISTENERS = {"hover": ("pointerenter", "pointerleave"), "tap": ("pointerdown", "pointerup")}
CALL_PHASES = ("initial", "animate", "hover", "tap", "inView")


def function_name(component: str) -> str:
    return "animate" + component[:1].upper() + component[1:]


def restore_values(el: MotionElement, phase: str) -> dict:
    gesture = el.props.get(phase)
    if not isinstance(gesture, dict):
        return {}
    animate = el.props.get("animate") if isinstance(el.props.get("animate"), dict) else {}
    initial = el.props.get("initial") if isinstance(el.props.get("initial"), dict) else {}
    out = {}
    for key in gesture:
        if key in animate:
            out[key] = animate[key]
        elif key in initial:
            out[key] = initial[key]
        elif key in NEUTRAL:
            out[key] = NEUTRAL[key]
    return out


def options_of(el: MotionElement) -> Optional[Any]:
    transition = el.props.get("transition")
    if transition is None or transition == {}:
        return None
    return Guarded(transition) if el.reduced_motion else transition


def call(target: str, keyframes: Any, options: Optional[Any]) -> str:
    args = [target, to_js(keyframes)]
    if options is not None:
        args.append(to_js(options))
    return f"animate({', '.join(args)})"


def site_call(el: MotionElement, phase: str, target: str) -> Optional[str]:
    """Re-render one imperative call site, or None when the phase is gone.

    The initial state is an `animate()` finished at once with `.complete()`. It carries
    the transition itself only when no other call on the element would.
    """
    if phase.startswith("restore:"):
        gesture = phase.split(":", 1)[1]
        if gesture not in el.props:
            return None
        return call(target, restore_values(el, gesture), options_of(el))
    value = el.props.get(phase)
    if not isinstance(value, dict):
        return None
    if phase == "initial":
        carried = any(isinstance(el.props.get(p), dict) for p in CALL_PHASES if p != "initial")
        return call(target, value, None if carried else options_of(el)) + ".complete()"
    return call(target, value, options_of(el))


def element_statements(el: MotionElement, target: str) -> list[str]:
    lines: list[str] = []
    for phase in CALL_PHASES:
        value = el.props.get(phase)
        if not isinstance(value, dict):
            continue
        if phase in ("initial", "animate"):
            lines.append(site_call(el, phase, target) + ";")
        elif phase in LISTENERS:
            enter, leave = LISTENERS[phase]
            for event, kind in ((enter, phase), (leave, f"restore:{phase}")):
                lines.append(f"{target}.addEventListener({quote(event)}, () => {{")
                lines.append(f"{INDENT}{site_call(el, kind, target)};")
                lines.append("});")
        else:
            lines.append(f"inView({target}, () => {{")
            lines.append(f"{INDENT}{site_call(el, phase, target)};")
            lines.append("});")
    for phase, value in el.props.items():
        if phase in CALL_PHASES and isinstance(value, dict) or phase == "transition":
            continue
        lines.append(f"// PLACEHOLDER: {phase} {' '.join(to_js(value).split())} has no imperative equivalent")
    return lines


def _flatten(elements: list[MotionElement]) -> list[MotionElement]:
    return [e for el in elements for e in el.walk()]


def render_dom(elements: list[MotionElement], ctx: GenerationContext, placeholders: list[str]) -> str:
    flat = _flatten(elements)
    if flat:
        ctx.use("motion", "animate")
    if any(isinstance(e.props.get("inView"), dict) for e in flat):
        ctx.use("motion", "inView")
    reduced = any(e.reduced_motion for e in flat)

    body: list[str] = [f"// PLACEHOLDER: {marker}" for marker in placeholders]
    for i, el in enumerate(flat):
        selector = el.attrs.get("selector")
        if i == 0 and not selector:
            body.extend(element_statements(el, ROOT_TARGET))
            continue
        target = f"el{i}"
        body.append(f"const {target} = {ROOT_TARGET}.querySelector({quote(selector or el.tag)});")
        body.append(f"if ({target}) {{")
        body.extend(INDENT + line for line in element_statements(el, target))
        body.append("}")

    out = ctx.import_set.render()
    if out:
        out.append("")
    if reduced:
        out.extend([REDUCED_MOTION_DECL, ""])
    param = f"{ROOT_TARGET}: HTMLElement" if ctx.typescript else ROOT_TARGET
    ret = ": void" if ctx.typescript else ""
    out.append(f"export function {function_name(ctx.component_name)}({param}){ret} {{")
    out.extend(INDENT + line for line in body)
    out.append("}")
    return "\n".join(out) + "\n"
