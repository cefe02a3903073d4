from __future__ import annotations
import logging
import re
from typing import Any, Iterator, Optional

import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser, Tree

from motioncg.core.errors import ParseError
from motioncg.parsing.ir import Expr, Guarded, HookUsage, ImportDecl, Location

logger = logging.getLogger(__name__)

# Languages are immutable and shared; parsers are created per call.
JAVASCRIPT = Language(tsjavascript.language())
TYPESCRIPT = Language(tstypescript.language_typescript())
TSX = Language(tstypescript.language_tsx())

_PASCAL_RE = re.compile(r"^[A-Z][A-Za-z0-9_]*$")
_HOOK_RE = re.compile(r"^use[A-Z]\w*$")
DOM_HELPERS = frozenset({"scroll", "timeline", "stagger", "spring", "inView", "glide", "mix", "transform"})
MOTION_SOURCES = frozenset({"framer-motion", "motion", "motion/react", "@vueuse/motion", "motion-v"})


def parse_script(text: str, typescript: bool, jsx: bool = True) -> tuple[Tree, bytes]:
    if typescript:
        language = TSX if jsx else TYPESCRIPT
    else:
        language = JAVASCRIPT
    src = text.encode("utf-8")
    tree = Parser(language).parse(src)
    return tree, src


def first_error(root: Node) -> Optional[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            for i in range(len(node.children) - 1, -1, -1):
                stack.append(node.children[i])
    return None


def ensure_valid(tree: Tree, what: str, line_offset: int = 0) -> None:
    if not tree.root_node.has_error:
        return
    bad = first_error(tree.root_node)
    if bad is None:
        raise ParseError(f"Invalid {what} syntax")
    row, col = bad.start_point
    raise ParseError(f"Invalid {what} syntax", line=row + 1 + line_offset, column=col + 1)


def walk(node: Node) -> Iterator[Node]:
    stack = [node]
    while stack:
        cur = stack.pop()
        yield cur
        for i in range(len(cur.children) - 1, -1, -1):
            stack.append(cur.children[i])


def text_of(node: Node, src: bytes) -> str:
    return src[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def char_offset(src: bytes, byte_offset: int) -> int:
    return len(src[:byte_offset].decode("utf-8", errors="ignore"))


def location_of(node: Node, line_offset: int = 0, column_offset: int = 0) -> Location:
    row, col = node.start_point
    return Location(line=row + 1 + line_offset, column=col + 1 + (column_offset if row == 0 else 0))


# ---- literal evaluation ----

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0", "\n": ""}
_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|.)", re.S)


def _unescape(m: re.Match) -> str:
    s = m.group(1)
    if s.startswith("u{"):
        return chr(int(s[2:-1], 16))
    if len(s) > 1:
        return chr(int(s[1:], 16))
    return _ESCAPES.get(s, s)


def unquote(text: str) -> str:
    return _ESCAPE_RE.sub(_unescape, text[1:-1])


def parse_number(text: str) -> Any:
    t = text.replace("_", "")
    try:
        if t[:2].lower() in ("0x", "0o", "0b"):
            return int(t, 0)
        if t.isdigit():
            return int(t)
        return float(t)
    except ValueError:
        return Expr(text)


def _key(node: Node, src: bytes) -> Optional[str]:
    if node.type in ("property_identifier", "identifier"):
        return text_of(node, src)
    if node.type == "string":
        return unquote(text_of(node, src))
    if node.type == "number":
        return text_of(node, src)
    return None


def evaluate(node: Node, src: bytes) -> Any:
    """Evaluate a literal expression; anything non-literal becomes an Expr."""
    t = node.type
    raw = text_of(node, src)
    if t == "parenthesized_expression":
        inner = [c for c in node.named_children if c.type != "comment"]
        return evaluate(inner[0], src) if len(inner) == 1 else Expr(raw)
    if t in ("as_expression", "satisfies_expression"):
        return evaluate(node.named_children[0], src)
    if t == "object":
        out: dict[str, Any] = {}
        for child in node.named_children:
            if child.type == "comment":
                continue
            if child.type != "pair":
                return Expr(raw)
            key = _key(child.child_by_field_name("key"), src)
            if key is None:
                return Expr(raw)
            out[key] = evaluate(child.child_by_field_name("value"), src)
        return out
    if t == "array":
        return [evaluate(c, src) for c in node.named_children if c.type != "comment"]
    if t == "string":
        return unquote(raw)
    if t == "template_string":
        if any(c.type == "template_substitution" for c in node.named_children):
            return Expr(raw)
        return unquote(raw)
    if t == "number":
        return parse_number(raw)
    if t == "true":
        return True
    if t == "false":
        return False
    if t == "null":
        return None
    if t == "identifier" and raw == "Infinity":
        return float("inf")
    if t == "unary_expression":
        op = node.child_by_field_name("operator")
        arg = evaluate(node.child_by_field_name("argument"), src)
        if op is not None and isinstance(arg, (int, float)) and not isinstance(arg, bool):
            sign = text_of(op, src)
            if sign == "-":
                return -arg
            if sign == "+":
                return arg
        return Expr(raw)
    if t == "ternary_expression":
        cond = node.child_by_field_name("condition")
        if cond is not None and text_of(cond, src).strip() == "prefersReducedMotion":
            if evaluate(node.child_by_field_name("consequence"), src) == {"duration": 0}:
                return Guarded(evaluate(node.child_by_field_name("alternative"), src))
        return Expr(raw)
    return Expr(raw)


def evaluate_expression(text: str) -> Any:
    """Evaluate a standalone expression, e.g. a template directive value."""
    tree, src = parse_script(f"({text}\n)", typescript=False)
    if tree.root_node.has_error:
        raise ParseError(f"Invalid expression: {text.strip()[:60]}")
    stmt = tree.root_node.named_children[0]
    return evaluate(stmt.named_children[0], src)


# ---- declarations ----

def read_imports(root: Node, src: bytes) -> list[ImportDecl]:
    out: list[ImportDecl] = []
    for node in root.named_children:
        if node.type != "import_statement":
            continue
        source_node = node.child_by_field_name("source")
        if source_node is None:
            continue
        default = namespace = None
        names: list[str] = []
        type_only = any(c.type == "type" for c in node.children)
        for clause in node.named_children:
            if clause.type != "import_clause":
                continue
            for part in clause.named_children:
                if part.type == "identifier":
                    default = text_of(part, src)
                elif part.type == "namespace_import":
                    ids = [c for c in part.named_children if c.type == "identifier"]
                    if ids:
                        namespace = text_of(ids[-1], src)
                elif part.type == "named_imports":
                    for spec in part.named_children:
                        if spec.type == "import_specifier":
                            names.append(" ".join(text_of(spec, src).split()))
        out.append(ImportDecl(
            source=unquote(text_of(source_node, src)),
            names=tuple(names),
            default=default,
            namespace=namespace,
            type_only=type_only,
        ))
    return out


def _declared_name(node: Node, src: bytes) -> Optional[str]:
    if node.type in ("function_declaration", "class_declaration", "generator_function_declaration"):
        name = node.child_by_field_name("name")
        return text_of(name, src) if name is not None else None
    if node.type in ("lexical_declaration", "variable_declaration"):
        for decl in node.named_children:
            if decl.type == "variable_declarator":
                name = decl.child_by_field_name("name")
                if name is not None:
                    return text_of(name, src)
    return None


def read_exports(root: Node, src: bytes) -> list[str]:
    out: list[str] = []
    for node in root.named_children:
        if node.type != "export_statement":
            continue
        is_default = any(c.type == "default" for c in node.children)
        decl = node.child_by_field_name("declaration")
        value = node.child_by_field_name("value")
        name = None
        if decl is not None:
            name = _declared_name(decl, src)
        elif value is not None and value.type == "identifier":
            name = text_of(value, src)
        else:
            for clause in node.named_children:
                if clause.type == "export_clause":
                    for spec in clause.named_children:
                        alias = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                        if alias is not None:
                            out.append(text_of(alias, src))
        if is_default:
            out.append("default")
        if name:
            out.append(name)
    return out


def top_level_declarations(root: Node, src: bytes) -> list[str]:
    out: list[str] = []
    for node in root.named_children:
        target = node
        if node.type == "export_statement":
            target = node.child_by_field_name("declaration")
            if target is None:
                continue
        if target.type in ("function_declaration", "class_declaration"):
            out.append(_declared_name(target, src) or "")
        elif target.type in ("lexical_declaration", "variable_declaration"):
            for decl in target.named_children:
                value = decl.child_by_field_name("value") if decl.type == "variable_declarator" else None
                if value is not None and value.type in ("arrow_function", "function_expression", "function"):
                    name = decl.child_by_field_name("name")
                    out.append(text_of(name, src) if name is not None else "")
    return [n for n in out if n]


def has_shell(root: Node, src: bytes) -> bool:
    if any(n.type == "export_statement" for n in root.named_children):
        return True
    return bool(top_level_declarations(root, src))


def component_name(root: Node, src: bytes, framework: str) -> Optional[str]:
    exports = read_exports(root, src)
    named = [n for n in exports if n != "default"]
    if framework == "js":
        for name in named + top_level_declarations(root, src):
            if name.startswith("animate") and name[7:8].isupper():
                return name[7:]
        candidates = named + top_level_declarations(root, src)
        return candidates[0] if candidates else None
    for name in named + top_level_declarations(root, src):
        if _PASCAL_RE.match(name):
            return name
    return None


def read_hooks(root: Node, src: bytes, imports: list[ImportDecl], framework: str,
               line_offset: int = 0) -> list[HookUsage]:
    origin: dict[str, str] = {}
    for imp in imports:
        for local in imp.local_names():
            origin[local] = imp.source
    out: list[HookUsage] = []
    seen: set[str] = set()
    for node in walk(root):
        if node.type != "call_expression":
            continue
        fn = node.child_by_field_name("function")
        if fn is None or fn.type != "identifier":
            continue
        name = text_of(fn, src)
        if framework == "js":
            hit = name in DOM_HELPERS and origin.get(name) in MOTION_SOURCES
        else:
            hit = bool(_HOOK_RE.match(name))
        if hit and name not in seen:
            seen.add(name)
            out.append(HookUsage(name=name, source=origin.get(name), location=location_of(node, line_offset)))
    return out


# ---------- component logic ----------

# Names and calls the generators emit themselves, so they survive any conversion.
REGENERATED_NAMES = frozenset({"prefersReducedMotion", "vMotion"})
_REGENERATED_CALLS = frozenset({
    "defineOptions", "defineProps", "defineEmits", "defineExpose", "withDefaults", "MotionDirective",
})
_INERT = frozenset({
    "comment", "import_statement", "empty_statement", "return_statement",
    "interface_declaration", "type_alias_declaration",
})
_JSX = ("jsx_element", "jsx_self_closing_element")
_FUNCTIONS = ("arrow_function", "function_expression", "function")


def _pattern_names(node: Node, src: bytes) -> list[str]:
    if node.type in ("identifier", "shorthand_property_identifier_pattern"):
        return [text_of(node, src)]
    if node.type in ("assignment_pattern", "object_assignment_pattern"):
        left = node.child_by_field_name("left")
        return _pattern_names(left, src) if left is not None else []
    if node.type == "pair_pattern":
        value = node.child_by_field_name("value")
        return _pattern_names(value, src) if value is not None else []
    return [n for child in node.named_children for n in _pattern_names(child, src)]


def bound_names(root: Node, src: bytes) -> list[str]:
    """Every variable, function and class name declared anywhere in the script."""
    out: list[str] = []
    for node in walk(root):
        if node.type == "variable_declarator":
            name = node.child_by_field_name("name")
            if name is not None:
                out.extend(_pattern_names(name, src))
        elif node.type in ("function_declaration", "class_declaration", "generator_function_declaration"):
            name = node.child_by_field_name("name")
            if name is not None:
                out.append(text_of(name, src))
    return [n for n in dict.fromkeys(out) if n not in REGENERATED_NAMES]


def _callee_name(node: Node, src: bytes) -> str:
    fn = node.child_by_field_name("function")
    return text_of(fn, src) if fn is not None else ""


def _is_kept_call(node: Optional[Node], src: bytes, framework: str) -> bool:
    while node is not None and node.type in ("await_expression", "parenthesized_expression"):
        node = node.named_children[0] if node.named_children else None
    if node is None or node.type != "call_expression":
        return False
    name = _callee_name(node, src)
    if _HOOK_RE.match(name) or name in _REGENERATED_CALLS:
        return True
    return framework == "js" and name.endswith(".querySelector")


def _is_kept(stmt: Node, src: bytes, framework: str) -> bool:
    if stmt.type in _INERT:
        return True
    if framework == "js" and any(
        n.type == "call_expression" and _callee_name(n, src) in ("animate", "inView") for n in walk(stmt)
    ):
        return True
    if stmt.type == "expression_statement":
        expr = stmt.named_children[0] if stmt.named_children else None
        while expr is not None and expr.type == "parenthesized_expression" and expr.named_children:
            expr = expr.named_children[0]
        return expr is None or expr.type in _JSX or _is_kept_call(expr, src, framework)
    if stmt.type in ("lexical_declaration", "variable_declaration"):
        for decl in stmt.named_children:
            if decl.type != "variable_declarator":
                continue
            name = decl.child_by_field_name("name")
            if name is not None and text_of(name, src) in REGENERATED_NAMES:
                continue
            if not _is_kept_call(decl.child_by_field_name("value"), src, framework):
                return False
        return True
    return False


def _component_body(node: Node, src: bytes, names: set[str]) -> Optional[Node]:
    fn = None
    if node.type in _FUNCTIONS:
        fn = node
    elif node.type in ("function_declaration", "class_declaration"):
        name = node.child_by_field_name("name")
        if name is not None and text_of(name, src) in names:
            fn = node
    elif node.type in ("lexical_declaration", "variable_declaration"):
        for decl in node.named_children:
            name = decl.child_by_field_name("name") if decl.type == "variable_declarator" else None
            value = decl.child_by_field_name("value") if name is not None else None
            if value is not None and value.type in _FUNCTIONS and text_of(name, src) in names:
                fn = value
    body = fn.child_by_field_name("body") if fn is not None else None
    if fn is not None and (body is None or body.type != "statement_block"):
        return fn
    return body


def _snippet(node: Node, src: bytes, width: int = 60) -> str:
    line = text_of(node, src).strip().split("\n", 1)[0].strip()
    return line if len(line) <= width else line[:width - 3].rstrip() + "..."


def logic_statements(root: Node, src: bytes, framework: str, component: Optional[str] = None) -> list[str]:
    """Script statements no generator re-creates: state, handlers, helpers and side effects.

    Statements inside the component function count too. Hook calls are left out; they are
    recorded by `read_hooks`.
    """
    names = {component, f"animate{component}"} if component else set()
    out: list[str] = []
    for node in root.named_children:
        target = node
        if node.type == "export_statement":
            target = node.child_by_field_name("declaration") or node.child_by_field_name("value")
            if target is None:
                continue
        body = _component_body(target, src, names)
        if body is not None:
            if body.type == "statement_block":
                out.extend(_snippet(s, src) for s in body.named_children if not _is_kept(s, src, framework))
            continue
        if not _is_kept(target, src, framework):
            out.append(_snippet(target, src))
    return out
