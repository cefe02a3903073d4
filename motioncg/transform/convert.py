from __future__ import annotations
import logging
import re
from typing import Any, Optional

from motioncg.parsing.ir import (
    ConversionLimitation, Expr, Guarded, MotionElement, PHASES, TransformedUnit, add_unique,
)
from motioncg.parsing.vocab import remap_unknown_phase

logger = logging.getLogger(__name__)

# Counterpart of a hook or helper in each target framework
HOOK_COUNTERPARTS: dict[str, dict[str, str]] = {
    "useInView": {"js": "inView", "vue": "useElementVisibility"},
    "useScroll": {"js": "scroll", "vue": "useScroll"},
    "useSpring": {"js": "spring", "vue": "useSpring"},
    "useAnimation": {"vue": "useMotion"},
    "useAnimationControls": {"vue": "useMotion"},
    "useAnimate": {"js": "animate", "vue": "useMotion"},
    "useReducedMotion": {"js": "prefersReducedMotion", "vue": "usePreferredReducedMotion"},
    "useState": {"vue": "ref"},
    "useRef": {"vue": "ref", "js": "element"},
    "useEffect": {"vue": "onMounted"},
    "useMotion": {"react": "useAnimation"},
    "useMotionProperties": {"react": "useMotionValue"},
    "useElementVisibility": {"react": "useInView", "js": "inView"},
    "usePreferredReducedMotion": {"react": "useReducedMotion", "js": "prefersReducedMotion"},
    "ref": {"react": "useRef"},
    "onMounted": {"react": "useEffect"},
    "inView": {"react": "useInView", "vue": "useElementVisibility"},
    "scroll": {"react": "useScroll", "vue": "useScroll"},
    "spring": {"react": "useSpring", "vue": "useSpring"},
    "stagger": {"react": "staggerChildren", "vue": "delay"},
}

REACT_ONLY_ATTRS = frozenset({
    "layout", "layoutId", "layoutScroll", "layoutDependency", "custom", "drag",
    "dragConstraints", "dragElastic", "dragMomentum", "dragSnapToOrigin", "dragListener",
    "onAnimationStart", "onAnimationComplete", "onUpdate", "onHoverStart", "onHoverEnd",
    "onTap", "onTapStart", "onTapCancel", "onDragStart", "onDrag", "onDragEnd",
    "onViewportEnter", "onViewportLeave", "onPan", "onPanStart", "onPanEnd",
})
_CLASS_SELECTOR_RE = re.compile(r"^\.([A-Za-z_][\w-]*)$")
_STRING_RE = re.compile(r"""'(?:\\.|[^'\\])*'|"(?:\\.|[^"\\])*"|`(?:\\.|[^`\\])*`""")
_IDENT_RE = re.compile(r"(?<![\w$.])[A-Za-z_$][\w$]*")
_LABEL_PHASES = ("initial", "animate", "exit", "hover", "tap", "inView", "drag")


def _expressions(value: Any) -> list[str]:
    if isinstance(value, Expr):
        return [value.source]
    if isinstance(value, Guarded):
        return _expressions(value.value)
    if isinstance(value, dict):
        return [s for v in value.values() for s in _expressions(v)]
    if isinstance(value, list):
        return [s for v in value for s in _expressions(v)]
    return []


class _Converter:
    def __init__(self, unit: TransformedUnit, target: str):
        self.unit = unit
        self.target = target

    def limit(self, construct: str, message: str, el: Optional[MotionElement] = None) -> None:
        item = ConversionLimitation(construct=construct, message=message, location=el.location if el else None)
        add_unique(self.unit.limitations, item)

    def note(self, message: str) -> None:
        add_unique(self.unit.notes, message)

    # ---- phases ----

    def phases(self, el: MotionElement) -> None:
        for name in list(el.props):
            if name in PHASES:
                continue
            alias = remap_unknown_phase(name, self.target)
            if alias and alias != name:
                el.props = {alias if k == name else k: v for k, v in el.props.items()}
                self.note(f"Phase '{name}' renamed to '{alias}' for {self.target}")
            elif not alias:
                self.limit(name, f"Phase '{name}' has no {self.target} equivalent and was kept verbatim", el)
        if "drag" in el.props and self.target != "react":
            self.limit("drag", f"Drag gestures are not supported in {self.target}; the drag phase is kept verbatim", el)
        if "exit" in el.props and self.target == "js":
            self.limit("exit", "Exit animations need a removal hook in imperative code; left as a placeholder", el)
        if self.target == "js" and ("hover" in el.props or "tap" in el.props):
            self.note("hover and tap phases became pointer event listeners")

    def labels(self, el: MotionElement, parent_labels: dict[str, Any]) -> None:
        """Resolve variant labels into concrete values; imperative code has no variants."""
        declared = el.props.get("variants")
        variants = declared if isinstance(declared, dict) else {}
        own = {p: el.props[p] for p in _LABEL_PHASES if p in el.props}
        labels = dict(parent_labels)
        labels.update({p: v for p, v in own.items() if not isinstance(v, dict)})
        if "variants" in el.props:
            for phase, label in labels.items():
                if phase in own and isinstance(own[phase], dict):
                    continue
                names = [label] if isinstance(label, str) else label if isinstance(label, list) else []
                resolved: dict = {}
                for name in names:
                    value = variants.get(name) if isinstance(name, str) else None
                    if not isinstance(value, dict):
                        self.limit("variants", f"Variant label {name!r} could not be resolved", el)
                        continue
                    resolved.update(value)
                if resolved:
                    transition = resolved.pop("transition", None)
                    if isinstance(transition, dict) and "transition" not in el.props:
                        el.props["transition"] = transition
                    el.props[phase] = resolved
            del el.props["variants"]
            self.note("Variant labels were resolved into explicit keyframes")
        elif any(not isinstance(v, dict) for v in own.values()):
            self.limit("variants", "Variant labels without declared variants cannot be resolved", el)
            for phase, value in own.items():
                if not isinstance(value, dict):
                    del el.props[phase]
        for child in el.children:
            self.labels(child, labels)

    # ---- timing ----

    def stagger(self, el: MotionElement) -> None:
        t = el.props.get("transition")
        raw = t.value if isinstance(t, Guarded) else t
        if isinstance(raw, dict) and el.children and ("staggerChildren" in raw or "delayChildren" in raw):
            step = raw.get("staggerChildren", 0)
            first = raw.get("delayChildren", 0)
            if all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in (step, first)):
                order = list(range(len(el.children)))
                if raw.get("staggerDirection") == -1:
                    order.reverse()
                for i, child in zip(order, el.children):
                    ct = child.props.get("transition")
                    ct = dict(ct) if isinstance(ct, dict) else {}
                    base = ct.get("delay", 0) if isinstance(ct.get("delay", 0), (int, float)) else 0
                    ct["delay"] = round(base + first + i * step, 6)
                    child.props["transition"] = ct
                rest = {k: v for k, v in raw.items()
                        if k not in ("staggerChildren", "delayChildren", "staggerDirection", "when")}
                if rest:
                    el.props["transition"] = rest
                else:
                    del el.props["transition"]
                logger.debug("Expanded stagger on <%s> into %d child delays", el.tag, len(el.children))
                self.note("staggerChildren was expanded into explicit per-child delays")
        for child in el.children:
            self.stagger(child)

    # ---- attributes ----

    def attrs(self, el: MotionElement) -> None:
        viewport = el.attrs.get("viewport")
        if isinstance(viewport, dict) and self.target != "react":
            extra = sorted(k for k in viewport if k != "once")
            if extra:
                self.limit("viewport", f"Viewport options {', '.join(extra)} are not supported in {self.target}", el)
        selector = el.attrs.get("selector")
        if selector is not None and self.target != "js":
            m = _CLASS_SELECTOR_RE.match(str(selector))
            if m and "className" not in el.attrs:
                el.attrs["className"] = m.group(1)
            else:
                self.limit("selector", f"Selector {selector!r} has no markup equivalent", el)
            del el.attrs["selector"]
        if self.target == "js":
            cls = el.attrs.get("className")
            if "selector" not in el.attrs and isinstance(cls, str) and cls.split():
                el.attrs["selector"] = "." + cls.split()[0]
        for name in list(el.attrs):
            if name in ("selector", "viewport") or self._portable(name):
                continue
            self.limit(name, f"Attribute '{name}' is not portable to {self.target} and was dropped", el)
            del el.attrs[name]

    def _portable(self, name: str) -> bool:
        if name.startswith("{"):
            return False
        if self.target == "js":
            return False
        if self.target == "vue":
            return name not in REACT_ONLY_ATTRS
        return not name.startswith("v-")

    # ---- structure ----

    def structure(self, el: MotionElement) -> None:
        if el.opaque:
            self.limit("markup", f"{el.opaque} non-animated child element(s) of <{el.tag}> were not carried over", el)

    def references(self, el: MotionElement) -> None:
        """Expressions that still name state, handlers or imports of the dropped script."""
        bound = set(self.unit.bindings)
        if not bound:
            return
        for name, value in [*el.attrs.items(), *el.props.items()]:
            names = [n for source in _expressions(value)
                     for n in _IDENT_RE.findall(_STRING_RE.sub("''", source)) if n in bound]
            names = list(dict.fromkeys(names))
            if names:
                listed = ", ".join(f"'{n}'" for n in names)
                verb = "is" if len(names) == 1 else "are"
                self.limit(name, f"'{name}' references {listed}, which {verb} not carried over to {self.target}", el)

    def script(self) -> None:
        if self.unit.opaque_markup:
            self.limit("markup", f"{self.unit.opaque_markup} non-animated element(s) around the motion elements "
                                 f"were not carried over")
        for statement in self.unit.logic:
            self.limit("script", f"Statement `{statement}` was not carried over to {self.target}")

    def hooks(self) -> None:
        for hook in self.unit.hooks:
            counterpart = HOOK_COUNTERPARTS.get(hook.name, {}).get(self.target)
            if counterpart:
                add_unique(self.unit.placeholders, f"{hook.name} -> {counterpart}")
                self.limit(hook.name, f"Hook '{hook.name}' needs a manual port to {counterpart} in {self.target}",
                           None)
            else:
                add_unique(self.unit.placeholders, f"{hook.name} has no {self.target} equivalent")
                self.limit(hook.name, f"Hook '{hook.name}' has no {self.target} equivalent", None)

    def run(self) -> None:
        flat = [e for root in self.unit.elements for e in root.walk()]
        for el in flat:
            self.phases(el)
        if self.target == "js":
            for root in self.unit.elements:
                self.labels(root, {})
        if self.target in ("vue", "js"):
            for root in self.unit.elements:
                self.stagger(root)
        for el in flat:
            self.attrs(el)
            self.structure(el)
            self.references(el)
        if self.target == "js" and any(el.children for el in flat):
            self.limit("nesting", "Nested motion elements were flattened into selector lookups")
        self.script()
        self.hooks()


def convert(unit: TransformedUnit, target: str) -> None:
    """Convert `unit` in place to the `target` framework."""
    logger.debug("Converting %s unit to %s", unit.framework, target)
    _Converter(unit, target).run()
    unit.framework = target
    unit.source = ""
    unit.syntax_tree = None
    unit.has_shell = False
    unit.imports = []
    unit.exports = []
    unit.opaque_markup = 0
    unit.bindings = []
    unit.logic = []
