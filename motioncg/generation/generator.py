"""Code generation entry points: fresh rendering, in-place splicing and the textual post-pass."""
from __future__ import annotations
import logging
import re
from typing import Any, Callable, Iterable, Optional

from motioncg.analysis.detectors.accessibility import detect_accessibility
from motioncg.analysis.detectors.performance import detect_performance
from motioncg.analysis.severity import score
from motioncg.generation import dom, react, vue
from motioncg.generation.context import PACKAGES, GenerationContext, OptimizationFlags
from motioncg.generation.jsfmt import INDENT
from motioncg.generation.react import REDUCED_MOTION_DECL
from motioncg.parsing.imports import (
    add_import, read_import_lines, rewrite_imports, split_imports, unused_specifiers,
)
from motioncg.parsing.ir import MotionElement, ParsedUnit
from motioncg.parsing.ts_parser import MOTION_SOURCES
from motioncg.reporting.schema import ArtifactMetadata, GeneratedArtifact

logger = logging.getLogger(__name__)

RENDERERS: dict[str, Callable[[list[MotionElement], GenerationContext, list[str]], str]] = {
    "react": react.render_react,
    "vue": vue.render_vue,
    "js": dom.render_dom,
}

_NS_RE = re.compile(r"<\s*([\w$]+\.)")
_V_MOTION_RE = re.compile(r"\sv-motion(?=[\s>/=])")
_COMPONENT_RE = re.compile(r"<\s*(Motion|[Mm]otion\.[\w-]+)(?=[\s>/])")
_DECL_RE = re.compile(r"\bprefersReducedMotion\s*(?::\s*\w+\s*)?=(?!=)")
_SCRIPT_SETUP_RE = re.compile(r"<script\b[^>]*\bsetup\b[^>]*>", re.I)
_POSITION_RE = re.compile(
    r"(?<![\w$.-])(top|left)(\s*:\s*)(-?\d+(?:\.\d+)?(?![\w.%])|'(-?\d+(?:\.\d+)?)px'|\"(-?\d+(?:\.\d+)?)px\")"
)
_SIZE_RE = re.compile(r"(?<![\w$.-])(width|height)\s*:")
_REPEAT_RE = re.compile(r"(?<![\w$.])repeat(\s*:\s*)Infinity\b")
_SIZE_TRANSFORM = {"width": "scaleX", "height": "scaleY"}


def _flat(elements: Iterable[MotionElement]) -> list[MotionElement]:
    return [e for el in elements for e in el.walk()]


def _line_indent(text: str, offset: int) -> str:
    start = text.rfind("\n", 0, offset) + 1
    return re.match(r"[ \t]*", text[start:]).group()


def _apply(text: str, edits: list[tuple[int, int, str]]) -> str:
    for start, end, new in sorted(edits, key=lambda e: e[0], reverse=True):
        text = text[:start] + new + text[end:]
    return text


def _after_imports(text: str, block: str) -> str:
    """Insert `block` after the import statements of `text`, or at its top."""
    lines = read_import_lines(text)
    if lines:
        end = lines[-1].end
        return text[:end] + "\n\n" + block + text[end:]
    lead = len(text) - len(text.lstrip("\n"))
    return text[:lead] + block + "\n\n" + text[lead:]


def ensure_reduced_motion_decl(code: str, framework: str, typescript: bool) -> str:
    if _DECL_RE.search(code):
        return code
    decl = REDUCED_MOTION_DECL
    if framework != "vue":
        return _after_imports(code, decl)
    if typescript:
        decl = decl.replace("const prefersReducedMotion =", "const prefersReducedMotion: boolean =")
    m = _SCRIPT_SETUP_RE.search(code)
    if m is None:
        lang = ' lang="ts"' if typescript else ""
        return code.rstrip("\n") + f"\n\n<script setup{lang}>\n{decl}\n</script>\n"
    close = code.find("</script>", m.end())
    close = len(code) if close < 0 else close
    body = code[m.end():close]
    return code[:m.end()] + "\n" + _after_imports(body.strip("\n"), decl) + "\n" + code[close:]


# ---------- splicing ----------

def _react_edit(el: MotionElement, source: str) -> Optional[str]:
    site = el.sites[0]
    original = source[site.start:site.end]
    m = _NS_RE.match(original)
    ns = m.group(1) if m else "motion."
    return react.opening_tag(el, _line_indent(source, site.start), original.rstrip().endswith("/>"), ns=ns)


def _vue_edit(el: MotionElement, source: str) -> Optional[str]:
    site = el.sites[0]
    original = source[site.start:site.end]
    closing = original.rstrip().endswith("/>")
    if _V_MOTION_RE.search(original):
        return vue.opening_tag(el, _line_indent(source, site.start), closing)
    m = _COMPONENT_RE.match(original)
    if m is None:
        return None
    return vue.opening_tag(el, _line_indent(source, site.start), closing, name=m.group(1))


def _splice(unit: ParsedUnit) -> str:
    source = unit.source
    edits: list[tuple[int, int, str]] = []
    for el in _flat(unit.elements):
        if not el.sites:
            continue
        if unit.framework == "js":
            for site in el.sites:
                new = dom.site_call(el, site.phase, site.target)
                if new is not None:
                    edits.append((site.start, site.end, new))
            continue
        new = _react_edit(el, source) if unit.framework == "react" else _vue_edit(el, source)
        if new is not None:
            edits.append((el.sites[0].start, el.sites[0].end, new))
    logger.debug("Spliced %d construct(s) into %s source", len(edits), unit.framework)
    return _apply(source, edits)


def _indent_block(text: str, pad: str) -> list[str]:
    return [pad + line if line.strip() else "" for line in text.split("\n")]


def _add_shell(code: str, unit: ParsedUnit, ctx: GenerationContext) -> str:
    pad = INDENT
    if unit.framework == "vue":
        ctx.use("@vueuse/motion", "MotionDirective")
        reduced = any(e.reduced_motion for e in _flat(unit.elements))
        out = ["<template>", *_indent_block(code.strip("\n"), pad), "</template>", ""]
        out.extend(vue.script_block(ctx, reduced, [], directive=True))
        return "\n".join(out) + "\n"
    head, rest = split_imports(code)
    body = rest.strip("\n")
    if unit.framework == "react":
        if not body.lstrip().startswith("<"):
            return code
        expr = body.rstrip().rstrip(";")
        if unit.syntax_tree is not None and unit.syntax_tree.wrapped:
            inner = [f"{pad * 2}<>", *_indent_block(expr, pad * 3), f"{pad * 2}</>"]
        else:
            inner = _indent_block(expr, pad * 2)
        lines = [f"export default function {ctx.component_name}() {{", f"{pad}return (", *inner, f"{pad});", "}"]
    else:
        param = f"{dom.ROOT_TARGET}: HTMLElement" if ctx.typescript else dom.ROOT_TARGET
        ret = ": void" if ctx.typescript else ""
        lines = [f"export function {dom.function_name(ctx.component_name)}({param}){ret} {{",
                 *_indent_block(body, pad), "}"]
    shell = "\n".join(lines) + "\n"
    return f"{head}\n\n{shell}" if head else shell


def _required_imports(unit: ParsedUnit) -> list[tuple[str, str]]:
    flat = _flat(unit.elements)
    if not flat or unit.framework == "vue":
        return []
    if unit.framework == "react":
        return [("framer-motion", "motion")]
    needed = [("motion", "animate")]
    if any("inView" in e.props for e in flat):
        needed.append(("motion", "inView"))
    return needed


def _fix_imports(code: str, unit: ParsedUnit) -> str:
    removed = set(getattr(unit, "removed_imports", []) or [])
    if removed:
        code = rewrite_imports(code, remove=removed)
    present = {n for d in unit.imports if d.source in MOTION_SOURCES for n in d.local_names()}
    if unit.framework == "react" and "m" in present:
        present.add("motion")
    for source, name in _required_imports(unit):
        if name not in present:
            code = add_import(code, source, name)
    return code


def _rewrite_in_place(unit: ParsedUnit, ctx: GenerationContext) -> str:
    code = _splice(unit)
    code = _fix_imports(code, unit)
    if not unit.has_shell:
        code = _add_shell(code, unit, ctx)
    if any(e.reduced_motion for e in _flat(unit.elements)):
        code = ensure_reduced_motion_decl(code, unit.framework, ctx.typescript)
    return code


# ---------- textual post-pass ----------

def _position_to_translate(m: re.Match) -> str:
    value = m.group(4) or m.group(5) or m.group(3)
    return ("y" if m.group(1) == "top" else "x") + m.group(2) + value


def optimize_code(code: str, context: GenerationContext, focus_areas: Iterable[str]) -> tuple[str, list[str]]:
    flags = OptimizationFlags.from_focus_areas(focus_areas)
    suggestions: list[str] = []
    if flags.performance:
        code, n = _POSITION_RE.subn(_position_to_translate, code)
        if n:
            suggestions.append("Replaced top/left animation with transform: x/y")
        for prop in dict.fromkeys(m.group(1) for m in _SIZE_RE.finditer(code)):
            suggestions.append(
                f"Animate transform: {_SIZE_TRANSFORM[prop]} instead of {prop} to avoid layout on every frame"
            )
    if flags.accessibility:
        code, n = _REPEAT_RE.subn(r"repeat\1prefersReducedMotion ? 0 : Infinity", code)
        if n:
            code = ensure_reduced_motion_decl(code, context.framework, context.typescript)
            suggestions.append("Infinite repeat now stops when the user prefers reduced motion")
    if flags.bundle_size:
        sources = {line.source for line in read_import_lines(code)}
        unused = unused_specifiers(code, sources=set(MOTION_SOURCES) | {"react", "vue"})
        code = rewrite_imports(code, remove=set(unused), tidy_sources=sources)
        for name in unused:
            suggestions.append(f"Removed unused import {name}")
    return code, suggestions


# ---------- artifact ----------

def derive_complexity(elements: list[MotionElement]) -> str:
    flat = _flat(elements)
    phases = {p for e in flat for p in e.props}
    if phases & {"drag", "variants"} or any("layout" in e.attrs for e in flat) or len(flat) > 3:
        return "advanced"
    if phases & {"exit", "hover", "tap", "inView"} or len(flat) > 1:
        return "intermediate"
    return "basic"


def _package(source: str) -> Optional[str]:
    if source.startswith((".", "/")):
        return None
    if source in PACKAGES:
        return PACKAGES[source]
    parts = source.split("/")
    return "/".join(parts[:2]) if source.startswith("@") else parts[0]


def _dedupe(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(i for i in items if i))


def generate(unit: ParsedUnit, context: GenerationContext, options: Optional[dict[str, Any]] = None) -> GeneratedArtifact:
    options = options or {}
    ctx = context.fresh()
    placeholders = list(getattr(unit, "placeholders", []) or [])
    in_place = bool(unit.source) and unit.syntax_tree is not None and unit.framework == ctx.framework
    if in_place:
        code = _rewrite_in_place(unit, ctx)
    else:
        code = RENDERERS[ctx.framework](unit.elements, ctx, placeholders)

    suggestions = list(getattr(unit, "suggestions", []) or [])
    focus = options.get("focus_areas") or []
    if focus:
        code, extra = optimize_code(code, ctx, focus)
        suggestions.extend(extra)

    findings = detect_performance(unit.elements) + detect_accessibility(unit.elements)
    suggestions.extend(f.hint for f in findings if f.hint)
    lines = read_import_lines(code)
    metadata = ArtifactMetadata(
        complexity=options.get("complexity") or derive_complexity(unit.elements),
        patterns_used=list(options.get("patterns_used") or []),
        performance_score=score(findings),
        suggestions=_dedupe(suggestions),
    )
    return GeneratedArtifact(
        code=code,
        imports=[code[line.start:line.end].strip() for line in lines],
        dependencies=_dedupe(_package(line.source) for line in lines),
        typescript=ctx.typescript,
        source_map=None,
        metadata=metadata,
    )
