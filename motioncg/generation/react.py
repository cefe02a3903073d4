from __future__ import annotations
from typing import Any

from motioncg.generation.context import GenerationContext
from motioncg.generation.jsfmt import INDENT, to_js
from motioncg.parsing.ir import Guarded, MotionElement, PHASES
from motioncg.parsing.vocab import phase_attribute

REDUCED_MOTION_DECL = (
    "const prefersReducedMotion = typeof window !== 'undefined' && "
    "window.matchMedia('(prefers-reduced-motion: reduce)').matches;"
)


def ordered_phases(el: MotionElement) -> list[str]:
    known = [p for p in PHASES if p in el.props]
    return known + [p for p in el.props if p not in PHASES]


def _jsx_value(value: Any) -> str:
    if isinstance(value, str) and '"' not in value and "\n" not in value:
        return f'"{value}"'
    return "{" + to_js(value) + "}"


def jsx_attributes(el: MotionElement) -> list[str]:
    items: list[str] = []
    for phase in ordered_phases(el):
        value = el.props[phase]
        if phase == "transition" and el.reduced_motion:
            value = Guarded(value)
        items.append(f"{phase_attribute(phase, 'react')}={_jsx_value(value)}")
    for name, value in el.attrs.items():
        if name.startswith("{"):
            items.append(name)
        elif name == "selector" or name.startswith("v-"):
            continue
        elif value is True:
            items.append(name)
        else:
            items.append(f"{name}={_jsx_value(value)}")
    return items


def opening_tag(el: MotionElement, base: str = "", self_closing: bool = False, ns: str = "motion.") -> str:
    items = jsx_attributes(el)
    end = " />" if self_closing else ">"
    head = f"<{ns}{el.tag}"
    if len(items) <= 1:
        return head + "".join(" " + i for i in items) + end
    body = "\n".join(f"{base}{INDENT}{i}" for i in items)
    return f"{head}\n{body}\n{base}{end.strip()}"


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
    return [base + opening_tag(el, base), *inner, f"{base}</motion.{el.tag}>"]


def render_react(elements: list[MotionElement], ctx: GenerationContext, placeholders: list[str]) -> str:
    name = ctx.component_name
    needs_children = len(elements) == 1 and not elements[0].children and not elements[0].content
    if elements:
        ctx.use("framer-motion", "motion")
    presence = any("exit" in e.props for el in elements for e in el.walk())
    if presence:
        ctx.use("framer-motion", "AnimatePresence")
    reduced = any(e.reduced_motion for el in elements for e in el.walk())
    if needs_children and ctx.typescript:
        ctx.use("react", "ReactNode", "type")

    depth = 2 + (1 if presence else 0) + (1 if len(elements) > 1 else 0)
    tree: list[str] = []
    for el in elements:
        tree.extend(_element_lines(el, depth, "{children}" if needs_children else None))
    if len(elements) > 1:
        pad = INDENT * (depth - 1)
        tree = [f"{pad}<>", *tree, f"{pad}</>"]
    if presence:
        pad = INDENT * 2
        tree = [f"{pad}<AnimatePresence>", *tree, f"{pad}</AnimatePresence>"]

    out: list[str] = ctx.import_set.render()
    if out:
        out.append("")
    if reduced:
        out.extend([REDUCED_MOTION_DECL, ""])
    params = ""
    if needs_children:
        if ctx.typescript:
            out.extend([f"interface {name}Props {{", f"{INDENT}children?: ReactNode;", "}", ""])
            params = f"{{ children }}: {name}Props"
        else:
            params = "{ children }"
    out.append(f"export default function {name}({params}) {{")
    for marker in placeholders:
        out.append(f"{INDENT}// PLACEHOLDER: {marker}")
    if tree:
        out.append(f"{INDENT}return (")
        out.extend(tree)
        out.append(f"{INDENT});")
    else:
        out.append(f"{INDENT}return null;")
    out.append("}")
    return "\n".join(out) + "\n"
