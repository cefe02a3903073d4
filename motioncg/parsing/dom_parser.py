from __future__ import annotations
import logging
import re
from typing import Any, Optional

from tree_sitter import Node

from motioncg.parsing.ir import Guarded, MotionElement, Site, SyntaxTree
from motioncg.parsing.ts_parser import char_offset, evaluate, location_of, text_of, unquote, walk

logger = logging.getLogger(__name__)

ROOT_TARGET = "element"
_LISTENER_PHASES = {
    "pointerenter": "hover", "mouseenter": "hover",
    "pointerdown": "tap", "mousedown": "tap",
    "pointerleave": "restore:hover", "mouseleave": "restore:hover",
    "pointerup": "restore:tap", "mouseup": "restore:tap",
}
_TAG_RE = re.compile(r"^[a-z][a-z0-9]*$")


def _callee(call: Node, src: bytes) -> str:
    fn = call.child_by_field_name("function")
    return text_of(fn, src) if fn is not None else ""


def _args(call: Node) -> list[Node]:
    args = call.child_by_field_name("arguments")
    if args is None:
        return []
    return [a for a in args.named_children if a.type != "comment"]


def _enclosing_phase(call: Node, src: bytes) -> Optional[str]:
    node = call.parent
    while node is not None:
        if node.type == "call_expression":
            callee = _callee(node, src)
            args = _args(node)
            if callee.endswith(".addEventListener") and args and args[0].type == "string":
                return _LISTENER_PHASES.get(unquote(text_of(args[0], src)), "other")
            if callee == "inView":
                return "inView"
        node = node.parent
    return None


def _completed(call: Node, src: bytes) -> Optional[Node]:
    """The `animate(...).complete()` call wrapping `call`, if there is one."""
    member = call.parent
    if member is None or member.type != "member_expression":
        return None
    obj = member.child_by_field_name("object")
    prop = member.child_by_field_name("property")
    outer = member.parent
    if obj is None or obj.id != call.id or prop is None or text_of(prop, src) != "complete":
        return None
    if outer is None or outer.type != "call_expression" or _args(outer):
        return None
    return outer


def _selectors(root: Node, src: bytes) -> dict[str, str]:
    out: dict[str, str] = {}
    for node in walk(root):
        if node.type != "variable_declarator":
            continue
        name = node.child_by_field_name("name")
        value = node.child_by_field_name("value")
        sel = _query_selector(value, src) if value is not None else None
        if name is not None and sel is not None:
            out[text_of(name, src)] = sel
    return out


def _query_selector(node: Node, src: bytes) -> Optional[str]:
    if node.type != "call_expression" or not _callee(node, src).endswith(".querySelector"):
        return None
    args = _args(node)
    if args and args[0].type == "string":
        return unquote(text_of(args[0], src))
    return None


def extract_calls(tree: SyntaxTree, warnings: list[str]) -> list[MotionElement]:
    src = tree.script_bytes
    root = tree.script.root_node
    selectors = _selectors(root, src)
    groups: dict[str, MotionElement] = {}
    # Per target, options seen on each kind of call; animate() options win over the rest.
    options_by: dict[str, dict[str, Any]] = {}
    for node in walk(root):
        if node.type != "call_expression" or _callee(node, src) != "animate":
            continue
        args = _args(node)
        if len(args) < 2:
            continue
        keyframes = evaluate(args[1], src)
        if not isinstance(keyframes, dict):
            continue
        options = evaluate(args[2], src) if len(args) > 2 else None
        target = text_of(args[0], src)
        phase = _enclosing_phase(node, src)
        if phase == "other":
            msg = f"animate() inside an unsupported event listener on '{target}' left as passthrough"
            logger.warning(msg)
            warnings.append(msg)
            continue
        el = groups.get(target)
        if el is None:
            el = MotionElement(tag="div", location=location_of(node))
            sel = selectors.get(target) or _query_selector(args[0], src)
            if sel is not None:
                if _TAG_RE.match(sel):
                    el.tag = sel
                else:
                    el.attrs["selector"] = sel
            groups[target] = el
        span = node
        if phase is None:
            outer = _completed(node, src)
            phase = "initial" if outer is not None else "animate"
            span = outer or node
        start = char_offset(src, span.start_byte) - tree.wrapped
        end = char_offset(src, span.end_byte) - tree.wrapped
        if isinstance(options, Guarded):
            el.reduced_motion = True
            options = options.value
        if isinstance(options, dict) and options and not phase.startswith("restore:"):
            kind = phase if phase in ("initial", "animate") else "listener"
            options_by.setdefault(target, {}).setdefault(kind, options)
        el.sites.append(Site(start=start, end=end, phase=phase, target=target))
        if phase.startswith("restore:"):
            continue
        if isinstance(el.props.get(phase), dict):
            el.props[phase].update(keyframes)
        else:
            el.props[phase] = keyframes
    for target, seen in options_by.items():
        for kind in ("animate", "listener", "initial"):
            if kind in seen:
                groups[target].props["transition"] = seen[kind]
                break
    return [el for el in groups.values() if el.props]
