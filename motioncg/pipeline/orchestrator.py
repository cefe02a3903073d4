"""The five public operations. None of them raises; failures come back as responses."""
from __future__ import annotations
import logging
import re
import time
from typing import Any, Callable, Iterable, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError

from motioncg.analysis.detectors.performance import DEFAULT_DURATION
from motioncg.analysis.validator import parse_error_report, validate_unit
from motioncg.core.config import CoreConfig
from motioncg.core.errors import (
    ErrorCategory, MotionCodegenError, ParameterError, ParseError, SourceTooLargeError, make_tool_error,
)
from motioncg.generation.context import GenerationContext, OptimizationFlags
from motioncg.generation.generator import generate
from motioncg.parsing.ir import (
    MotionElement, ParsedUnit, SourceUnit, TransformedUnit, normalize_framework,
)
from motioncg.parsing.parser import PLACEHOLDER_NAME, parse
from motioncg.patterns.library import PatternLibrary
from motioncg.reporting.schema import (
    CodeResponse, LimitationJSON, LocationJSON, OperationResponse, TimelineEntry, ValidationResponse,
)
from motioncg.transform.transformer import transform

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=OperationResponse)

FOCUS_AREAS = ("performance", "accessibility", "bundle-size")
_COMPLEXITY_RANK = {"basic": 0, "intermediate": 1, "advanced": 2}
_NAME_RE = re.compile(r"^[A-Za-z_$][\w$]*$")
_TAG_RE = re.compile(r"^[a-z][a-z0-9-]*$")
_CLASS_RE = re.compile(r"^\.([A-Za-z_][\w-]*)$")


class SequenceStep(BaseModel):
    element: str = "div"
    animate: dict[str, Any] = Field(default_factory=lambda: {"opacity": 1})
    initial: Optional[dict[str, Any]] = None
    delay: float = Field(0.0, ge=0.0)
    duration: Optional[float] = Field(None, ge=0.0)
    easing: Optional[str] = None


def _require_framework(value: Any, name: str = "framework") -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ParameterError(f"Missing required parameter '{name}'", category=ErrorCategory.PARAMETER_MISSING)
    fw = normalize_framework(value) if isinstance(value, str) else None
    if fw is None:
        raise ParameterError(f"Invalid {name} {value!r}; expected react, vue or js")
    return fw


def _require_name(value: Any) -> str:
    if value is None or value == "":
        return PLACEHOLDER_NAME
    if not isinstance(value, str) or not _NAME_RE.match(value):
        raise ParameterError(f"Invalid component name {value!r}")
    return value


def _require_list(value: Any, name: str, allow_empty: bool = False) -> list[str]:
    if value is None:
        if allow_empty:
            return []
        raise ParameterError(f"Missing required parameter '{name}'", category=ErrorCategory.PARAMETER_MISSING)
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ParameterError(f"'{name}' must be a list of strings")
    if not all(isinstance(v, str) and v for v in value):
        raise ParameterError(f"'{name}' must be a list of non-empty strings")
    if not value and not allow_empty:
        raise ParameterError(f"'{name}' must not be empty", category=ErrorCategory.PARAMETER_MISSING)
    return list(value)


def _focus_areas(value: Any) -> list[str]:
    areas = _require_list(value, "focus_areas", allow_empty=True)
    if not areas:
        return list(FOCUS_AREAS)
    out = []
    for area in areas:
        norm = area.strip().lower().replace("_", "-")
        if norm not in FOCUS_AREAS:
            raise ParameterError(f"Unknown focus area {area!r}; expected one of {', '.join(FOCUS_AREAS)}")
        out.append(norm)
    return out


def _limitations(unit: TransformedUnit) -> list[LimitationJSON]:
    return [
        LimitationJSON(
            construct=item.construct,
            message=item.message,
            location=LocationJSON(line=item.location.line, column=item.location.column) if item.location else None,
        )
        for item in unit.limitations
    ]


def _step_element(step: SequenceStep, delay: float) -> MotionElement:
    el = MotionElement(tag="div")
    if _TAG_RE.match(step.element):
        el.tag = step.element
    elif _CLASS_RE.match(step.element):
        el.attrs["className"] = _CLASS_RE.match(step.element).group(1)
        el.attrs["selector"] = step.element
    else:
        el.attrs["selector"] = step.element
    initial = step.initial if step.initial is not None else ({"opacity": 0} if "opacity" in step.animate else None)
    if initial:
        el.props["initial"] = dict(initial)
    el.props["animate"] = dict(step.animate)
    transition: dict[str, Any] = {}
    if step.duration is not None:
        transition["duration"] = step.duration
    transition["delay"] = delay
    if step.easing:
        transition["ease"] = step.easing
    el.props["transition"] = transition
    return el


class Orchestrator:
    def __init__(self, library: PatternLibrary, config: Optional[CoreConfig] = None):
        self.library = library
        self.config = config or CoreConfig()

    # ---------- plumbing ----------

    def _run(self, op: str, response: Type[R], body: Callable[[], dict],
             on_error: Optional[Callable[[Exception], dict]] = None) -> R:
        start = time.perf_counter()
        try:
            payload = body()
        except MotionCodegenError as exc:
            logger.warning("%s failed: %s", op, exc)
            return self._failure(response, exc, start, on_error)
        except Exception as exc:
            logger.exception("%s failed unexpectedly", op)
            return self._failure(response, exc, start, on_error)
        elapsed = (time.perf_counter() - start) * 1000
        logger.debug("%s finished in %.1f ms", op, elapsed)
        return response(success=True, elapsed_ms=elapsed, **payload)

    @staticmethod
    def _failure(response: Type[R], exc: Exception, start: float,
                 on_error: Optional[Callable[[Exception], dict]]) -> R:
        extra = on_error(exc) if on_error is not None else {}
        elapsed = (time.perf_counter() - start) * 1000
        return response(success=False, elapsed_ms=elapsed, **make_tool_error(exc), **extra)

    def _check_code(self, code: Any) -> str:
        if code is None or not isinstance(code, str) or not code.strip():
            raise ParameterError("Missing required parameter 'code'", category=ErrorCategory.PARAMETER_MISSING)
        limit = self.config.max_source_length
        if len(code) > limit:
            raise SourceTooLargeError(f"Source is {len(code)} characters; the limit is {limit}")
        return code

    def _typescript(self, options: dict) -> bool:
        value = options.get("typescript", self.config.default_typescript)
        if not isinstance(value, bool):
            raise ParameterError("'typescript' must be a boolean")
        return value

    def _emit(self, unit: ParsedUnit, ctx: GenerationContext, options: dict) -> dict:
        transformed = transform(unit, ctx, self.config.thresholds())
        artifact = generate(transformed, ctx, options)
        return {
            "framework": ctx.framework,
            "code": artifact.code,
            "artifact": artifact,
            "warnings": list(unit.warnings),
            "limitations": _limitations(transformed),
            "notes": list(transformed.notes),
        }

    # ---------- operations ----------

    def generate_component(self, pattern_ids: Any, framework: Any, name: Any = None,
                           options: Optional[dict] = None) -> CodeResponse:
        def body() -> dict:
            fw = _require_framework(framework)
            ids = _require_list(pattern_ids, "pattern_ids")
            component = _require_name(name)
            opts = dict(options or {})
            ts = self._typescript(opts)
            focus = _focus_areas(opts["focus_areas"]) if opts.get("focus_areas") else []
            patterns = [self.library.require(pid, fw) for pid in ids]
            element = self.library.element_for(ids, fw)
            unit = ParsedUnit(framework=fw, typescript=ts, component_name=component, elements=[element])
            ctx = GenerationContext(
                framework=fw, typescript=ts, component_name=component,
                optimization=OptimizationFlags.from_focus_areas(focus),
                style_system=opts.get("style_system"),
            )
            complexity = max((p.complexity for p in patterns), key=_COMPLEXITY_RANK.__getitem__)
            payload = self._emit(unit, ctx, {"complexity": complexity, "patterns_used": ids, "focus_areas": focus})
            payload["notes"].extend(n for p in patterns for n in p.usage.notes if n not in payload["notes"])
            return payload

        return self._run("generate_component", CodeResponse, body)

    def create_sequence(self, steps: Any, framework: Any, stagger: bool = False, stagger_interval: float = 0.1,
                        timeline: bool = False, name: Any = None, typescript: Optional[bool] = None) -> CodeResponse:
        def body() -> dict:
            fw = _require_framework(framework)
            component = _require_name(name or "AnimationSequence")
            if steps is None:
                raise ParameterError("Missing required parameter 'steps'", category=ErrorCategory.PARAMETER_MISSING)
            if not isinstance(steps, (list, tuple)) or not steps:
                raise ParameterError("'steps' must be a non-empty list")
            if isinstance(stagger_interval, bool) or not isinstance(stagger_interval, (int, float)) or stagger_interval < 0:
                raise ParameterError("'stagger_interval' must be a non-negative number")
            try:
                parsed = [SequenceStep.model_validate(s) for s in steps]
            except ValidationError as exc:
                raise ParameterError(f"Invalid sequence step: {exc}") from exc
            ts = self._typescript({} if typescript is None else {"typescript": typescript})

            children: list[MotionElement] = []
            entries: list[TimelineEntry] = []
            elapsed = 0.0
            for i, step in enumerate(parsed):
                delay = step.delay + (i * stagger_interval if stagger else 0.0)
                if timeline:
                    delay += elapsed
                    elapsed += step.duration if step.duration is not None else DEFAULT_DURATION
                delay = round(delay, 6)
                children.append(_step_element(step, delay))
                entries.append(TimelineEntry(element=step.element, delay=delay, duration=step.duration))
            container = MotionElement(tag="div", children=children)
            unit = ParsedUnit(framework=fw, typescript=ts, component_name=component, elements=[container])
            ctx = GenerationContext(framework=fw, typescript=ts, component_name=component)
            payload = self._emit(unit, ctx, {"patterns_used": ["sequence", "timeline"] if timeline else ["sequence"]})
            payload["timeline"] = entries
            return payload

        return self._run("create_sequence", CodeResponse, body)

    def optimize_code(self, code: Any, framework: Any, focus_areas: Optional[Iterable[str]] = None) -> CodeResponse:
        def body() -> dict:
            fw = _require_framework(framework)
            source = self._check_code(code)
            focus = _focus_areas(focus_areas)
            unit = parse(SourceUnit(code=source, framework=fw))
            ctx = GenerationContext(
                framework=fw, typescript=unit.typescript, component_name=unit.component_name,
                optimization=OptimizationFlags.from_focus_areas(focus),
            )
            return self._emit(unit, ctx, {"focus_areas": focus})

        return self._run("optimize_code", CodeResponse, body)

    def convert_framework(self, code: Any, from_framework: Any, to_framework: Any,
                          typescript: Optional[bool] = None) -> CodeResponse:
        def body() -> dict:
            source_fw = _require_framework(from_framework, "from_framework")
            target_fw = _require_framework(to_framework, "to_framework")
            source = self._check_code(code)
            if typescript is not None and not isinstance(typescript, bool):
                raise ParameterError("'typescript' must be a boolean")
            unit = parse(SourceUnit(code=source, framework=source_fw))
            ts = unit.typescript if typescript is None else typescript
            ctx = GenerationContext(framework=target_fw, typescript=ts, component_name=unit.component_name)
            return self._emit(unit, ctx, {})

        return self._run("convert_framework", CodeResponse, body)

    def validate_syntax(self, code: Any, framework: Any, strict: bool = False,
                        rules: Optional[Iterable[str]] = None) -> ValidationResponse:
        def body() -> dict:
            fw = _require_framework(framework)
            source = self._check_code(code)
            names = _require_list(list(rules) if isinstance(rules, (set, frozenset)) else rules,
                                  "rules", allow_empty=True)
            unit = parse(SourceUnit(code=source, framework=fw))
            report = validate_unit(unit, names, bool(strict), self.config.thresholds(), self.config.weights())
            return {"framework": fw, "report": report}

        def on_error(exc: Exception) -> dict:
            return {"report": parse_error_report(exc)} if isinstance(exc, ParseError) else {}

        return self._run("validate_syntax", ValidationResponse, body, on_error)
