from __future__ import annotations
import math
import re
from typing import Any

from motioncg.parsing.ir import Expr, Guarded

INDENT = "  "
_IDENT_RE = re.compile(r"^[A-Za-z_$][\w$]*$")


def quote(s: str) -> str:
    body = s.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n").replace("\r", "\\r")
    return f"'{body}'"


def _number(v: float) -> str:
    if math.isinf(v):
        return "Infinity" if v > 0 else "-Infinity"
    if math.isnan(v):
        return "NaN"
    if v.is_integer():
        return str(int(v))
    return repr(v)


def _key(k: str) -> str:
    return k if _IDENT_RE.match(k) else quote(k)


def to_js(value: Any) -> str:
    """Render a Python value as a single-line JavaScript literal."""
    if isinstance(value, Expr):
        return value.source
    if isinstance(value, Guarded):
        return f"prefersReducedMotion ? {{ duration: 0 }} : {to_js(value.value)}"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _number(value)
    if isinstance(value, str):
        return quote(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(to_js(v) for v in value) + "]"
    if isinstance(value, dict):
        if not value:
            return "{}"
        return "{ " + ", ".join(f"{_key(str(k))}: {to_js(v)}" for k, v in value.items()) + " }"
    return quote(str(value))


def attr_escape(js: str) -> str:
    """Make a JS expression safe inside a double-quoted HTML attribute."""
    return js.replace("&", "&amp;").replace('"', "&quot;")
