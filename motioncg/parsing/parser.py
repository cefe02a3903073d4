"""Parser entry points: framework inference, parsing, motion element extraction."""
from __future__ import annotations
import logging
import re
from typing import Optional

from motioncg.core.errors import ParseError
from motioncg.parsing import ts_parser, vue_parser
from motioncg.parsing.dom_parser import extract_calls
from motioncg.parsing.ir import ImportDecl, MotionElement, ParsedUnit, SourceUnit, SyntaxTree, normalize_framework
from motioncg.parsing.react_parser import extract_jsx

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "AnimatedComponent"

_DIRECTIVE_RES = (
    re.compile(r"<template[\s>]"),
    re.compile(r"<[A-Za-z][\w.-]*\s[^<>]*\bv-(?:motion|if|else|for|show|bind|on|model|html|text)\b"),
    re.compile(r"<[A-Za-z][\w.-]*(?:\s[^<>]*)?\s[:@][\w.-]+\s*=\s*\""),
)
_MARKUP_RES = (
    re.compile(r"<motion\.[a-zA-Z]"),
    re.compile(r"\breturn\s*\(?\s*<[A-Za-z>]"),
    re.compile(r"</[A-Za-z][\w.]*>|<[A-Za-z][\w.]*\s*/>"),
    re.compile(r"""from\s+['"](?:react|framer-motion|motion/react)['"]"""),
    re.compile(r"^\s*<[A-Za-z]", re.M),
)


def infer_framework(code: str) -> str:
    """Always returns exactly one of 'vue', 'react', 'js'."""
    if any(p.search(code) for p in _DIRECTIVE_RES):
        return "vue"
    if any(p.search(code) for p in _MARKUP_RES):
        return "react"
    return "js"


def _parse_script_unit(unit: SourceUnit, framework: str) -> tuple[SyntaxTree, Optional[ParseError]]:
    code = unit.code
    jsx = framework == "react"
    candidates = [unit.typescript] if unit.typescript is not None else [False, True]
    error: Optional[ParseError] = None
    for ts in candidates:
        attempts = [(code, 0)]
        if framework == "react":
            attempts.append((f"<>{code}\n</>", 2))
        for text, wrapped in attempts:
            tree, src = ts_parser.parse_script(text, typescript=bool(ts), jsx=jsx)
            try:
                ts_parser.ensure_valid(tree, "TypeScript" if ts else "JavaScript")
            except ParseError as exc:
                error = error or exc
                continue
            return SyntaxTree(
                framework=framework, source=code, typescript=bool(ts),
                script=tree, script_bytes=src, wrapped=wrapped,
            ), None
    return None, error  # type: ignore[return-value]


def _imported_names(imports: list[ImportDecl]) -> list[str]:
    return [n for d in imports if d.source not in ts_parser.MOTION_SOURCES for n in d.local_names()]


def _parse_vue(unit: SourceUnit, warnings: list[str]) -> ParsedUnit:
    source = unit.code
    blocks = vue_parser.split_sfc(vue_parser.strip_styles(source))
    template = None
    if blocks.template is not None:
        template = vue_parser.scan_template(blocks.template, blocks.template_offset, source)
    imports, exports, hooks, bindings, logic = [], [], [], [], []
    tree = SyntaxTree(framework="vue", source=source, typescript=False, template=template,
                      template_offset=blocks.template_offset)
    inferred_ts = False
    for block in blocks.scripts:
        ts = block.typescript or bool(unit.typescript)
        inferred_ts = inferred_ts or block.typescript
        script, src = ts_parser.parse_script(block.code, typescript=ts, jsx=False)
        line_offset = source.count("\n", 0, block.offset)
        ts_parser.ensure_valid(script, "Vue script", line_offset=line_offset)
        root = script.root_node
        block_imports = ts_parser.read_imports(root, src)
        imports.extend(block_imports)
        exports.extend(ts_parser.read_exports(root, src))
        hooks.extend(ts_parser.read_hooks(root, src, block_imports, "vue", line_offset=line_offset))
        bindings.extend(_imported_names(block_imports) + ts_parser.bound_names(root, src))
        logic.extend(ts_parser.logic_statements(root, src, "vue"))
        if tree.script is None or block.setup:
            tree.script, tree.script_bytes, tree.script_offset = script, src, block.offset
    tree.typescript = unit.typescript if unit.typescript is not None else inferred_ts
    name = vue_parser.component_name(blocks.scripts) or unit.component_name_hint or PLACEHOLDER_NAME
    elements, opaque = _extract(tree, warnings)
    return ParsedUnit(
        framework="vue",
        typescript=tree.typescript,
        component_name=name,
        source=source,
        imports=imports,
        exports=exports,
        elements=elements,
        hooks=hooks,
        has_shell=blocks.has_template,
        warnings=warnings,
        opaque_markup=opaque,
        bindings=list(dict.fromkeys(bindings)),
        logic=logic,
        syntax_tree=tree,
    )


def parse(unit: SourceUnit) -> ParsedUnit:
    if not isinstance(unit.code, str) or not unit.code.strip():
        raise ParseError("Source is empty")
    framework = normalize_framework(unit.framework) if unit.framework else infer_framework(unit.code)
    if framework is None:
        raise ParseError(f"Unsupported framework '{unit.framework}'")
    warnings: list[str] = []
    if framework == "vue":
        return _parse_vue(unit, warnings)

    tree, error = _parse_script_unit(unit, framework)
    if tree is None:
        raise error or ParseError("Invalid syntax")
    root, src = tree.script.root_node, tree.script_bytes
    imports = ts_parser.read_imports(root, src)
    name = ts_parser.component_name(root, src, framework) or unit.component_name_hint or PLACEHOLDER_NAME
    elements, opaque = _extract(tree, warnings)
    logger.debug("Parsed %s source (typescript=%s, wrapped=%s)", framework, tree.typescript, bool(tree.wrapped))
    return ParsedUnit(
        framework=framework,
        typescript=tree.typescript,
        component_name=name,
        source=unit.code,
        imports=imports,
        exports=ts_parser.read_exports(root, src),
        elements=elements,
        hooks=ts_parser.read_hooks(root, src, imports, framework),
        has_shell=ts_parser.has_shell(root, src),
        warnings=warnings,
        opaque_markup=opaque,
        bindings=list(dict.fromkeys(_imported_names(imports) + ts_parser.bound_names(root, src))),
        logic=ts_parser.logic_statements(root, src, framework, name),
        syntax_tree=tree,
    )


def _extract(tree: SyntaxTree, warnings: list[str]) -> tuple[list[MotionElement], int]:
    if tree.framework == "vue":
        if tree.template is None:
            return [], 0
        return vue_parser.extract_template(tree.template, tree.source, warnings)
    if tree.framework == "react":
        return extract_jsx(tree, warnings)
    return extract_calls(tree, warnings), 0


def extract_motion_elements(tree: SyntaxTree, warnings: Optional[list[str]] = None) -> list[MotionElement]:
    elements, _ = _extract(tree, warnings if warnings is not None else [])
    return elements
