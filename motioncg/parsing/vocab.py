from __future__ import annotations
import re
from typing import Optional


# canonical phase -> attribute name emitted by each backend
REACT_NAMES = {
    "initial": "initial", "animate": "animate", "exit": "exit",
    "hover": "whileHover", "tap": "whileTap", "inView": "whileInView", "drag": "whileDrag",
    "variants": "variants", "transition": "transition",
}
VUE_NAMES = {
    "initial": "initial", "animate": "enter", "exit": "leave",
    "hover": "hovered", "tap": "tapped", "inView": "visible-once", "variants": "variants",
}
# Prop names of the motion-v `<Motion>` and `<motion.x>` components
MOTION_V_NAMES = {
    "initial": "initial", "animate": "animate", "exit": "exit",
    "hover": "while-hover", "tap": "while-press", "inView": "while-in-view", "drag": "while-drag",
    "variants": "variants", "transition": "transition",
}

_REACT_INPUT = {v: k for k, v in REACT_NAMES.items()}
_VUE_INPUT = {
    "initial": "initial", "enter": "animate", "animate": "animate", "leave": "exit", "exit": "exit",
    "hovered": "hover", "whileHover": "hover", "while-hover": "hover",
    "tapped": "tap", "whileTap": "tap", "while-tap": "tap", "whilePress": "tap", "while-press": "tap",
    "visible": "inView", "visible-once": "inView", "visibleOnce": "inView",
    "whileInView": "inView", "while-in-view": "inView",
    "whileDrag": "drag", "while-drag": "drag",
    "variants": "variants", "transition": "transition",
}

_REACT_UNKNOWN_RE = re.compile(r"^while[A-Z]\w*$")
_VUE_UNKNOWN_RE = re.compile(r"^(while[A-Z-]\w*|focused|while-[a-z][\w-]*)$")

# Known non-canonical phases and their spelling per framework.
PHASE_ALIASES = {
    "focus": {"react": "whileFocus", "vue": "focused"},
}
_ALIAS_BY_NAME = {name: key for key, names in PHASE_ALIASES.items() for name in names.values()}

# Animatable properties understood by all three libraries.
TRANSFORM_PROPS = frozenset({
    "x", "y", "z", "translateX", "translateY", "translateZ",
    "scale", "scaleX", "scaleY", "scaleZ",
    "rotate", "rotateX", "rotateY", "rotateZ",
    "skew", "skewX", "skewY", "originX", "originY", "originZ",
    "perspective", "transformPerspective", "transform", "transformOrigin",
})
LAYOUT_PROPS = frozenset({
    "width", "height", "top", "left", "right", "bottom",
    "minWidth", "minHeight", "maxWidth", "maxHeight",
    "margin", "marginTop", "marginRight", "marginBottom", "marginLeft",
    "padding", "paddingTop", "paddingRight", "paddingBottom", "paddingLeft",
})
COLOR_PROPS = frozenset({
    "color", "backgroundColor", "borderColor", "fill", "stroke", "outlineColor",
})
STYLE_PROPS = frozenset({
    "opacity", "borderRadius", "boxShadow", "filter", "backdropFilter", "clipPath",
    "background", "backgroundPosition", "display", "visibility", "zIndex",
    "pathLength", "pathOffset", "pathSpacing", "strokeDasharray", "strokeDashoffset",
    "fontSize", "letterSpacing", "lineHeight", "d", "cx", "cy", "r",
})
ANIMATABLE_PROPS = TRANSFORM_PROPS | LAYOUT_PROPS | COLOR_PROPS | STYLE_PROPS

TRANSITION_KEYS = frozenset({
    "duration", "delay", "ease", "easing", "type", "stiffness", "damping", "mass",
    "bounce", "velocity", "restDelta", "restSpeed", "repeat", "repeatType", "repeatDelay",
    "staggerChildren", "delayChildren", "staggerDirection", "when", "times",
    "visualDuration", "layout", "default", "direction", "endDelay", "autoplay",
})
NUMERIC_TRANSITION_KEYS = frozenset({
    "duration", "delay", "stiffness", "damping", "mass", "bounce", "velocity",
    "restDelta", "restSpeed", "repeat", "repeatDelay", "staggerChildren", "delayChildren",
    "visualDuration", "endDelay",
})
NUMERIC_PROPS = frozenset({"opacity", "scale", "scaleX", "scaleY", "scaleZ", "pathLength", "pathOffset"})


def canonical_phase(name: str, framework: str) -> tuple[Optional[str], bool]:
    """Return (phase, known). phase is None when the name is not a phase at all."""
    table = _REACT_INPUT if framework == "react" else _VUE_INPUT
    if name in table:
        return table[name], True
    pattern = _REACT_UNKNOWN_RE if framework == "react" else _VUE_UNKNOWN_RE
    if pattern.match(name):
        return name, False
    return None, False


def phase_attribute(phase: str, framework: str) -> str:
    names = {"react": REACT_NAMES, "motion-v": MOTION_V_NAMES}.get(framework, VUE_NAMES)
    if phase in names:
        return names[phase]
    return phase


def remap_unknown_phase(name: str, target: str) -> Optional[str]:
    """Spelling of a non-canonical phase in the target framework, if one exists."""
    key = _ALIAS_BY_NAME.get(name)
    if key is None:
        return None
    return PHASE_ALIASES[key].get(target)
