from __future__ import annotations
from typing import Any, Optional

from motioncg.generation.context import GenerationContext
from motioncg.generation.jsfmt import INDENT, attr_escape, quote, to_js
from motioncg.generation.react import REDUCED_MOTION_DECL, ordered_phases
from motioncg.parsing.ir import Guarded, MotionElement
from motioncg.parsing.vocab import phase_attribute
from motioncg.parsing.vue_parser import seconds_to_ms

_TRANSITION_HOSTS = ("animate", "inView", "hover", "tap", "exit", "initial")
_SKIPPED_ATTRS = frozenset({"selector", "viewport"})


def _bound(name: str, value: Any) -> str:
    return f':{name}="{attr_escape(to_js(value))}"'


def _phase_name(phase: str, el: MotionElement) -> str:
    if phase == "inView":
        viewport = el.attrs.get("viewport")
        if isinstance(viewport, dict) and viewport.get("once") is False:
            return "visible"
    if phase == "drag":
        return "whileDrag"
    return phase_attribute(phase, "vue")


def vue_attributes(el: MotionElement) -> list[str]:
    items = ["v-motion"]
    transition = el.props.get("transition")
    if transition is not None:
        transition = seconds_to_ms(transition)
        if el.reduced_motion:
            transition = Guarded(transition)
    host = next((p for p in _TRANSITION_HOSTS if isinstance(el.props.get(p), dict)), None)
    if transition is not None and host is None:
        items.append(_bound("enter", {"transition": transition}))
    for phase in ordered_phases(el):
        if phase == "transition":
            continue
        value = el.props[phase]
        if phase == "variants" and isinstance(value, dict):
            value = {k: ({**v, "transition": seconds_to_ms(v["transition"])}
                         if isinstance(v, dict) and "transition" in v else v)
                     for k, v in value.items()}
        if phase == host and transition is not None:
            value = {**value, "transition": transition}
        items.append(_bound(_phase_name(phase, el), value))
    return items + _plain_attributes(el)


def _plain_attributes(el: MotionElement) -> list[str]:
    items = []
    for name, value in el.attrs.items():
        if name in _SKIPPED_ATTRS or name.startswith("{"):
            continue
        if name == "className":
            name = "class"
        if name.startswith("on") and name[2:3].isupper():
            items.append(f'@{name[2].lower()}{name[3:]}="{attr_escape(to_js(value))}"')
        elif value is True:
            items.append(name)
        elif isinstance(value, str):
            items.append(f'{name}="{attr_escape(value)}"')
        else:
            items.append(_bound(name, value))
    return items


def component_attributes(el: MotionElement) -> list[str]:
    """Bound props of a motion-v component; its timings stay in seconds."""
    items = []
    for phase in ordered_phases(el):
        value = el.props[phase]
        if phase == "transition" and el.reduced_motion:
            value = Guarded(value)
        items.append(_bound(phase_attribute(phase, "motion-v"), value))
    viewport = el.attrs.get("viewport")
    if isinstance(viewport, dict):
        items.append(_bound("in-view-options", viewport))
    return items + _plain_attributes(el)


def opening_tag(el: MotionElement, base: str = "", self_closing: bool = False,
                name: Optional[str] = None) -> str:
    """Opening tag; a motion-v component `name` gets bound props instead of v-motion."""
    items = component_attributes(el) if name else vue_attributes(el)
    tag = name or el.tag
    end = " />" if self_closing else ">"
    if len(items) <= 1:
        return f"<{tag}" + "".join(" " + i for i in items) + end
    body = "\n".join(f"{base}{INDENT}{i}" for i in items)
    return f"<{tag}\n{body}\n{base}{end.strip()}"


def _element_lines(el: MotionElement, depth: int, placeholder: str | None) -> list[str]:
    base = INDENT * depth
    inner: list[str] = []
    if el.children:
        for child in el.children:
            inner.extend(_element_lines(child, depth + 1, None))
    elif el.content:
        inner.append(f"{base}{INDENT}{el.content}")
    elif placeholder:
        inner.append(f"{base}{INDENT}{placeholder}")
    if not inner:
        return [base + opening_tag(el, base, self_closing=True)]
    return [base + opening_tag(el, base), *inner, f"{base}</{el.tag}>"]


def script_block(ctx: GenerationContext, reduced: bool, placeholders: list[str], directive: bool) -> list[str]:
    lang = ' lang="ts"' if ctx.typescript else ""
    out = [f"<script setup{lang}>"]
    imports = ctx.import_set.render()
    if imports:
        out.extend(imports)
        out.append("")
    out.append(f"defineOptions({{ name: {quote(ctx.component_name)} }});")
    if directive:
        out.extend(["", "const vMotion = MotionDirective();"])
    if reduced:
        decl = REDUCED_MOTION_DECL
        if ctx.typescript:
            decl = decl.replace("const prefersReducedMotion =", "const prefersReducedMotion: boolean =")
        out.extend(["", decl])
    for marker in placeholders:
        out.append(f"// PLACEHOLDER: {marker}")
    out.append("</script>")
    return out


def render_vue(elements: list[MotionElement], ctx: GenerationContext, placeholders: list[str]) -> str:
    if elements:
        ctx.use("@vueuse/motion", "MotionDirective")
    reduced = any(e.reduced_motion for el in elements for e in el.walk())
    needs_slot = len(elements) == 1 and not elements[0].children and not elements[0].content
    out = ["<template>"]
    for el in elements:
        out.extend(_element_lines(el, 1, "<slot />" if needs_slot else None))
    if not elements:
        out.append(f"{INDENT}<slot />")
    out.extend(["</template>", ""])
    out.extend(script_block(ctx, reduced, placeholders, directive=bool(elements)))
    return "\n".join(out) + "\n"
