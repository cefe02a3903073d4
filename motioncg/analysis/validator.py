"""Shape, performance and accessibility checks over parsed motion code."""
from __future__ import annotations
import logging
from typing import Iterable, Mapping, Optional

from motioncg.analysis.detectors.accessibility import detect_accessibility
from motioncg.analysis.detectors.performance import detect_performance
from motioncg.analysis.detectors.shape import detect_shape
from motioncg.analysis.severity import Finding, merged_weights, score, to_priority
from motioncg.core.errors import ParseError
from motioncg.parsing.ir import MotionElement, ParsedUnit, SourceUnit
from motioncg.parsing.parser import parse
from motioncg.parsing.ts_parser import MOTION_SOURCES
from motioncg.reporting.schema import LocationJSON, SuggestionJSON, ValidationIssue, ValidationReport

logger = logging.getLogger(__name__)

_RECOMMENDED_IMPORT = {"react": "motion from 'framer-motion'", "js": "animate from 'motion'"}


def check_elements(elements: list[MotionElement], thresholds: Optional[dict] = None) -> list[Finding]:
    return (
        detect_shape(elements, thresholds)
        + detect_performance(elements, thresholds)
        + detect_accessibility(elements, thresholds)
    )


def _best_practice(unit: ParsedUnit) -> list[Finding]:
    if not unit.elements or unit.framework not in _RECOMMENDED_IMPORT:
        return []
    if any(decl.source in MOTION_SOURCES for decl in unit.imports):
        return []
    return [Finding(
        rule="missing-motion-import", category="best-practice", level="suggestion",
        message="Animated code does not import the animation library",
        hint=f"Import {_RECOMMENDED_IMPORT[unit.framework]}",
    )]


def _escalate(findings: list[Finding], rules: Iterable[str]) -> list[Finding]:
    names = set(rules)
    return [
        f.escalated() if f.level == "warning" and (not names or f.rule in names) else f
        for f in findings
    ]


def _location(f: Finding) -> Optional[LocationJSON]:
    if f.location is None:
        return None
    return LocationJSON(line=f.location.line, column=f.location.column)


def build_report(
    findings: list[Finding],
    weights: Optional[Mapping[str, float]] = None,
) -> ValidationReport:
    w = merged_weights(weights)
    issues: list[ValidationIssue] = []
    suggestions: list[SuggestionJSON] = []
    seen: set[str] = set()
    for f in findings:
        if f.level in ("error", "warning"):
            issues.append(ValidationIssue(severity=f.level, message=f.message, rule=f.rule, location=_location(f)))
        text = f.hint if f.hint and f.level != "error" else (f.message if f.level == "suggestion" else None)
        if text and text not in seen:
            seen.add(text)
            suggestions.append(SuggestionJSON(type=f.category, message=text, priority=to_priority(f.category, w)))
    return ValidationReport(
        valid=not any(i.severity == "error" for i in issues),
        errors=issues,
        suggestions=suggestions,
        score=score(findings, w),
    )


def validate_unit(
    unit: ParsedUnit,
    rules: Iterable[str] = (),
    strict: bool = False,
    thresholds: Optional[dict] = None,
    weights: Optional[Mapping[str, float]] = None,
) -> ValidationReport:
    findings = check_elements(unit.elements, thresholds) + _best_practice(unit)
    if strict:
        findings = _escalate(findings, rules)
    logger.debug("Validated %d element(s): %d finding(s)", len(unit.elements), len(findings))
    return build_report(findings, weights)


def validate(
    source: SourceUnit,
    rules: Iterable[str] = (),
    strict: bool = False,
    thresholds: Optional[dict] = None,
    weights: Optional[Mapping[str, float]] = None,
) -> ValidationReport:
    """Parse and check `source`; raises ParseError when it does not parse.

    In strict mode warnings become errors: all of them when `rules` is empty,
    otherwise only those whose rule id is listed.
    """
    return validate_unit(parse(source), rules, strict, thresholds, weights)


def parse_error_report(exc: ParseError) -> ValidationReport:
    location = None
    if exc.line is not None:
        location = LocationJSON(line=exc.line, column=exc.column or 1)
    return ValidationReport(
        valid=False,
        errors=[ValidationIssue(severity="error", message=str(exc), rule="parse-error", location=location)],
        suggestions=[],
        score=0,
    )
