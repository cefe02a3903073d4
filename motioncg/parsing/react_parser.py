from __future__ import annotations
import logging
from typing import Any, Optional

from tree_sitter import Node

from motioncg.parsing.ir import Expr, Guarded, MotionElement, Site, SyntaxTree
from motioncg.parsing.ts_parser import char_offset, evaluate, location_of, text_of, unquote
from motioncg.parsing.vocab import canonical_phase

logger = logging.getLogger(__name__)

MOTION_NAMESPACES = ("motion.", "m.")
_JSX_ELEMENTS = ("jsx_element", "jsx_self_closing_element")


class _JsxExtractor:
    def __init__(self, tree: SyntaxTree, warnings: list[str]):
        self.tree = tree
        self.src = tree.script_bytes
        self.warnings = warnings

    def _offset(self, byte_offset: int) -> int:
        return char_offset(self.src, byte_offset) - self.tree.wrapped

    def collect(self, node: Node) -> tuple[list[MotionElement], int]:
        found: list[MotionElement] = []
        opaque = 0
        for child in node.named_children:
            if child.type in ("jsx_opening_element", "jsx_closing_element"):
                continue
            if child.type in _JSX_ELEMENTS:
                el = self.element(child)
                if el is not None:
                    found.append(el)
                    continue
                if not self._fragment(child):
                    opaque += 1
            sub, n = self.collect(child)
            found.extend(sub)
            opaque += n
        return found, opaque

    @staticmethod
    def _fragment(node: Node) -> bool:
        opening = node.child_by_field_name("open_tag") if node.type == "jsx_element" else None
        return opening is not None and opening.child_by_field_name("name") is None

    def element(self, node: Node) -> Optional[MotionElement]:
        opening = node if node.type == "jsx_self_closing_element" else node.child_by_field_name("open_tag")
        if opening is None:
            return None
        name_node = opening.child_by_field_name("name")
        if name_node is None:
            return None
        name = text_of(name_node, self.src)
        ns = next((p for p in MOTION_NAMESPACES if name.startswith(p)), None)
        if ns is None:
            return None
        loc = location_of(opening, column_offset=-self.tree.wrapped)
        el = MotionElement(tag=name[len(ns):], location=loc)
        for attr in opening.named_children:
            if attr.type == "jsx_attribute":
                self._attribute(el, attr)
            elif attr.type == "jsx_expression":
                raw = text_of(attr, self.src)
                el.attrs[raw] = Expr(raw)
        if not el.props:
            return None
        el.sites.append(Site(start=self._offset(opening.start_byte), end=self._offset(opening.end_byte)))
        if node.type == "jsx_element":
            el.children, el.opaque = self.collect(node)
            texts = [c for c in node.named_children if c.type == "jsx_text"]
            others = [c for c in node.named_children
                      if c.type not in ("jsx_text", "jsx_opening_element", "jsx_closing_element")]
            if texts and not others:
                joined = " ".join(" ".join(text_of(t, self.src).split()) for t in texts).strip()
                el.content = joined or None
        return el

    def _value(self, node: Optional[Node]) -> Any:
        if node is None:
            return True
        if node.type == "string":
            return unquote(text_of(node, self.src))
        if node.type == "jsx_expression":
            inner = [c for c in node.named_children if c.type != "comment"]
            if len(inner) != 1:
                return Expr(text_of(node, self.src)[1:-1].strip())
            return evaluate(inner[0], self.src)
        return Expr(text_of(node, self.src))

    def _attribute(self, el: MotionElement, attr: Node) -> None:
        parts = attr.named_children
        if not parts:
            return
        name = text_of(parts[0], self.src)
        value = self._value(parts[1] if len(parts) > 1 else None)
        phase, known = canonical_phase(name, "react")
        if phase is None:
            el.attrs[name] = value
            return
        if not known:
            msg = f"Unknown animation phase '{name}' kept verbatim"
            logger.warning(msg)
            self.warnings.append(msg)
        if phase == "transition" and isinstance(value, Guarded):
            el.reduced_motion = True
            value = value.value
        el.props[phase] = value


def extract_jsx(tree: SyntaxTree, warnings: list[str]) -> tuple[list[MotionElement], int]:
    """Motion elements of the script, and the count of plain JSX elements outside them."""
    return _JsxExtractor(tree, warnings).collect(tree.script.root_node)
