from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Literal, Optional

Framework = Literal["react", "vue", "js"]

FRAMEWORKS: tuple[str, ...] = ("react", "vue", "js")

FRAMEWORK_ALIASES = {
    "react": "react", "component-declarative": "react", "jsx": "react", "framer-motion": "react",
    "vue": "vue", "template-directive": "vue", "sfc": "vue",
    "js": "js", "imperative-dom": "js", "javascript": "js", "dom": "js", "vanilla": "js",
}

# Canonical animation phases, in rendering order.
PHASES: tuple[str, ...] = (
    "initial", "animate", "exit", "hover", "tap", "inView", "drag", "variants", "transition",
)
STATE_PHASES = frozenset(PHASES) - {"variants", "transition"}


def normalize_framework(value: str | None) -> Optional[str]:
    if value is None:
        return None
    return FRAMEWORK_ALIASES.get(str(value).strip().lower())


@dataclass
class SourceUnit:
    code: str
    framework: Optional[str] = None      # None: infer from the code
    typescript: Optional[bool] = None    # None: infer from the code
    component_name_hint: Optional[str] = None


@dataclass(frozen=True)
class Location:
    line: int    # 1-based
    column: int  # 1-based


@dataclass(frozen=True)
class Expr:
    """Opaque JavaScript expression, kept as source text."""
    source: str


@dataclass(frozen=True)
class Guarded:
    """Value wrapped as `prefersReducedMotion ? { duration: 0 } : value`."""
    value: Any


@dataclass(frozen=True)
class Site:
    """Source range of an animated construct; `phase` is set for imperative calls."""
    start: int
    end: int
    phase: str = ""
    target: str = ""


@dataclass
class MotionElement:
    tag: str
    props: dict[str, Any] = field(default_factory=dict)
    children: list[MotionElement] = field(default_factory=list)
    location: Optional[Location] = None
    attrs: dict[str, Any] = field(default_factory=dict)
    content: Optional[str] = None
    reduced_motion: bool = False
    opaque: int = 0  # non-animated markup children left as passthrough
    sites: list[Site] = field(default_factory=list, compare=False, repr=False)

    def walk(self):
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(frozen=True)
class ImportDecl:
    source: str
    names: tuple[str, ...] = ()
    default: Optional[str] = None
    namespace: Optional[str] = None
    type_only: bool = False

    def local_names(self) -> list[str]:
        out = [n.split(" as ")[-1].strip() for n in self.names]
        if self.default:
            out.append(self.default)
        if self.namespace:
            out.append(self.namespace)
        return out


@dataclass(frozen=True)
class HookUsage:
    name: str
    source: Optional[str] = None
    location: Optional[Location] = None


@dataclass
class SyntaxTree:
    framework: str
    source: str
    typescript: bool
    script: Any = None           # tree_sitter.Tree of the script part
    script_bytes: bytes = b""
    script_offset: int = 0       # char offset of the script part inside `source`
    template: Any = None         # root TemplateNode for Vue templates
    template_offset: int = 0
    wrapped: int = 0             # chars of synthetic prefix added to parse a fragment


@dataclass
class ParsedUnit:
    framework: str
    typescript: bool
    component_name: str
    source: str = ""
    imports: list[ImportDecl] = field(default_factory=list)
    exports: list[str] = field(default_factory=list)
    elements: list[MotionElement] = field(default_factory=list)
    hooks: list[HookUsage] = field(default_factory=list)
    has_shell: bool = False
    warnings: list[str] = field(default_factory=list)
    opaque_markup: int = 0  # non-animated markup outside every motion element
    bindings: list[str] = field(default_factory=list)  # names the script declares or imports
    logic: list[str] = field(default_factory=list)  # script statements no generator re-creates
    syntax_tree: Optional[SyntaxTree] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ConversionLimitation:
    construct: str
    message: str
    location: Optional[Location] = None


@dataclass
class TransformedUnit(ParsedUnit):
    source_framework: str = ""
    placeholders: list[str] = field(default_factory=list)
    limitations: list[ConversionLimitation] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    removed_imports: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


def add_unique(items: list, item) -> None:
    if item not in items:
        items.append(item)
