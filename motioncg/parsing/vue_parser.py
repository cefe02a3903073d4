from __future__ import annotations
import bisect
import html
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from motioncg.core.errors import ParseError
from motioncg.parsing.ir import Expr, Guarded, Location, MotionElement, Site, STATE_PHASES
from motioncg.parsing.ts_parser import evaluate_expression
from motioncg.parsing.vocab import canonical_phase

logger = logging.getLogger(__name__)

_TEMPLATE_OPEN_RE = re.compile(r"<template(\s[^>]*)?>", re.I)
_TEMPLATE_CLOSE_RE = re.compile(r"</template\s*>", re.I)
_SCRIPT_RE = re.compile(r"<script(\s[^>]*)?>(.*?)</script\s*>", re.I | re.S)
_STYLE_RE = re.compile(r"<style(\s[^>]*)?>.*?</style\s*>", re.I | re.S)
_LANG_TS_RE = re.compile(r"""lang\s*=\s*["'](ts|tsx)["']""")
_TOKEN_RE = re.compile(
    r"<!--.*?-->"
    r"|<(/?)([A-Za-z][\w.:-]*)((?:\s+[^\s=>/\"']+(?:\s*=\s*(?:\"[^\"]*\"|'[^']*'|[^\s>\"']+))?)*)\s*(/?)>",
    re.S,
)
_ATTR_RE = re.compile(r"([^\s=>/\"']+)(?:\s*=\s*(\"[^\"]*\"|'[^']*'|[^\s>\"']+))?")
_NAME_RES = (
    re.compile(r"defineOptions\(\s*\{[^}]*?\bname\s*:\s*['\"]([\w-]+)['\"]", re.S),
    re.compile(r"export\s+default\s*(?:defineComponent\(\s*)?\{[^}]*?\bname\s*:\s*['\"]([\w-]+)['\"]", re.S),
)
VOID_TAGS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr",
})
# @vueuse/motion transition timings are milliseconds
MS_KEYS = ("duration", "delay", "repeatDelay")
_LIFT_ORDER = ("animate", "inView", "hover", "tap", "exit", "initial")


@dataclass
class TemplateNode:
    tag: str
    attrs: list[tuple[str, Optional[str]]] = field(default_factory=list)
    start: int = 0
    end: int = 0
    children: list[TemplateNode] = field(default_factory=list)
    text: list[str] = field(default_factory=list)


@dataclass
class ScriptBlock:
    code: str
    offset: int
    typescript: bool
    setup: bool


@dataclass
class SfcBlocks:
    template: Optional[str]
    template_offset: int
    scripts: list[ScriptBlock]
    has_template: bool


def split_sfc(source: str) -> SfcBlocks:
    scripts = [
        ScriptBlock(
            code=m.group(2),
            offset=m.start(2),
            typescript=bool(_LANG_TS_RE.search(m.group(1) or "")),
            setup="setup" in (m.group(1) or ""),
        )
        for m in _SCRIPT_RE.finditer(source)
    ]
    opening = _TEMPLATE_OPEN_RE.search(source)
    if opening is None:
        if scripts:
            return SfcBlocks(template=None, template_offset=0, scripts=scripts, has_template=False)
        return SfcBlocks(template=source, template_offset=0, scripts=[], has_template=False)
    closes = list(_TEMPLATE_CLOSE_RE.finditer(source, opening.end()))
    if not closes:
        raise ParseError("Unclosed <template> block", line=source.count("\n", 0, opening.start()) + 1)
    close = closes[-1]
    return SfcBlocks(
        template=source[opening.end():close.start()],
        template_offset=opening.end(),
        scripts=scripts,
        has_template=True,
    )


class _Lines:
    def __init__(self, text: str):
        self.starts = [0] + [i + 1 for i, ch in enumerate(text) if ch == "\n"]

    def location(self, offset: int) -> Location:
        row = bisect.bisect_right(self.starts, offset) - 1
        return Location(line=row + 1, column=offset - self.starts[row] + 1)


def scan_template(markup: str, offset: int, source: str) -> TemplateNode:
    """Tokenize template markup into a tree; offsets are absolute in `source`."""
    lines = _Lines(source)
    root = TemplateNode(tag="#root", start=offset, end=offset)
    stack = [root]
    pos = 0
    for m in _TOKEN_RE.finditer(markup):
        stack[-1].text.append(markup[pos:m.start()])
        pos = m.end()
        if m.group(2) is None:
            continue
        closing, tag, attr_text, self_closing = m.group(1), m.group(2), m.group(3) or "", m.group(4)
        if closing:
            if len(stack) == 1 or stack[-1].tag.lower() != tag.lower():
                loc = lines.location(offset + m.start())
                raise ParseError(f"Unexpected closing tag </{tag}>", line=loc.line, column=loc.column)
            stack.pop()
            continue
        node = TemplateNode(tag=tag, start=offset + m.start(), end=offset + m.end())
        for am in _ATTR_RE.finditer(attr_text):
            raw = am.group(2)
            if raw is not None and raw[:1] in ("'", '"'):
                raw = raw[1:-1]
            node.attrs.append((am.group(1), raw))
        stack[-1].children.append(node)
        if not self_closing and tag.lower() not in VOID_TAGS:
            stack.append(node)
    stack[-1].text.append(markup[pos:])
    if len(stack) > 1:
        loc = lines.location(stack[-1].start)
        raise ParseError(f"Unclosed tag <{stack[-1].tag}>", line=loc.line, column=loc.column)
    return root


def component_name(scripts: list[ScriptBlock]) -> Optional[str]:
    for block in scripts:
        for pattern in _NAME_RES:
            m = pattern.search(block.code)
            if m:
                return m.group(1)
    return None


def _scale_timing(transition: Any, factor: float) -> Any:
    if isinstance(transition, Guarded):
        return Guarded(_scale_timing(transition.value, factor))
    if not isinstance(transition, dict):
        return transition
    out = {}
    for key, value in transition.items():
        if key in MS_KEYS and isinstance(value, (int, float)) and not isinstance(value, bool):
            value = round(value * factor, 6)
            if isinstance(value, float) and value.is_integer():
                value = int(value)
        elif isinstance(value, dict):
            value = _scale_timing(value, factor)
        out[key] = value
    return out


def seconds_to_ms(transition: Any) -> Any:
    return _scale_timing(transition, 1000)


def ms_to_seconds(transition: Any) -> Any:
    return _scale_timing(transition, 0.001)


def _is_motion(node: TemplateNode) -> tuple[bool, bool]:
    """(animatable, uses @vueuse/motion directive)"""
    if any(name == "v-motion" or name.startswith("v-motion-") for name, _ in node.attrs):
        return True, True
    if node.tag == "Motion" or node.tag.lower().startswith("motion."):
        return True, False
    return False, False


class _TemplateExtractor:
    def __init__(self, source: str, warnings: list[str]):
        self.lines = _Lines(source)
        self.warnings = warnings

    def collect(self, node: TemplateNode) -> tuple[list[MotionElement], int]:
        found: list[MotionElement] = []
        opaque = 0
        for child in node.children:
            el = self.element(child)
            if el is not None:
                found.append(el)
                continue
            opaque += 1
            sub, n = self.collect(child)
            found.extend(sub)
            opaque += n
        return found, opaque

    def _bound(self, raw: Optional[str], where: Location) -> Any:
        text = html.unescape(raw or "")
        try:
            return evaluate_expression(text)
        except ParseError as exc:
            raise ParseError(f"Invalid binding expression {text.strip()[:40]!r}: {exc}",
                             line=where.line, column=where.column) from exc

    def element(self, node: TemplateNode) -> Optional[MotionElement]:
        animatable, vueuse = _is_motion(node)
        if not animatable:
            return None
        loc = self.lines.location(node.start)
        tag = node.tag.split(".", 1)[1] if "." in node.tag else ("div" if node.tag == "Motion" else node.tag)
        el = MotionElement(tag=tag, location=loc)
        for name, raw in node.attrs:
            if name == "v-motion":
                continue
            if name.startswith(":") or name.startswith("v-bind:"):
                bound = name.split(":", 1)[1]
                value = self._bound(raw, loc)
                phase, known = canonical_phase(bound, "vue")
                if phase is None and not vueuse and bound in ("in-view-options", "inViewOptions"):
                    el.attrs["viewport"] = value
                    continue
                if phase is None:
                    el.attrs[bound] = value
                    continue
                if not known:
                    msg = f"Unknown animation phase '{bound}' kept verbatim"
                    logger.warning(msg)
                    self.warnings.append(msg)
                if bound in ("visible-once", "visibleOnce"):
                    el.attrs.setdefault("viewport", {"once": True})
                elif bound == "visible":
                    el.attrs.setdefault("viewport", {"once": False})
                el.props[phase] = value
            elif name.startswith("@") or name.startswith("v-on:"):
                event = name[1:] if name.startswith("@") else name[5:]
                el.attrs["on" + event[:1].upper() + event[1:]] = Expr(html.unescape(raw or ""))
            elif name == "class":
                el.attrs["className"] = html.unescape(raw) if raw is not None else True
            else:
                el.attrs[name] = html.unescape(raw) if raw is not None else True
        self._lift_transition(el, vueuse)
        if not el.props:
            return None
        el.sites.append(Site(start=node.start, end=node.end))
        el.children, el.opaque = self.collect(node)
        text = " ".join(" ".join(node.text).split())
        if text and not node.children:
            el.content = text
        return el

    def _lift_transition(self, el: MotionElement, vueuse: bool) -> None:
        transition = el.props.get("transition")
        for phase in _LIFT_ORDER:
            state = el.props.get(phase)
            if not isinstance(state, dict) or "transition" not in state:
                continue
            nested = state.pop("transition")
            if transition is None:
                transition = nested
            if not state:
                del el.props[phase]
        if isinstance(transition, Guarded):
            el.reduced_motion = True
            transition = transition.value
        if vueuse:
            transition = ms_to_seconds(transition)
            if isinstance(el.props.get("variants"), dict):
                el.props["variants"] = {
                    k: ({**v, "transition": ms_to_seconds(v["transition"])}
                        if isinstance(v, dict) and "transition" in v else v)
                    for k, v in el.props["variants"].items()
                }
        if transition is not None:
            el.props["transition"] = transition
        for phase in list(el.props):
            if phase in STATE_PHASES and el.props[phase] == {}:
                del el.props[phase]


def extract_template(root: TemplateNode, source: str, warnings: list[str]) -> tuple[list[MotionElement], int]:
    return _TemplateExtractor(source, warnings).collect(root)


def strip_styles(source: str) -> str:
    return _STYLE_RE.sub(lambda m: " " * len(m.group(0)), source)
