"""Tests for shape, performance and accessibility validation."""

from __future__ import annotations

import pytest

from motioncg.analysis.severity import Finding, score, to_priority
from motioncg.analysis.validator import build_report, parse_error_report, validate, validate_unit
from motioncg.core.errors import ParseError
from motioncg.parsing.ir import MotionElement, ParsedUnit, SourceUnit


def _unit(*elements: MotionElement, framework: str = "react") -> ParsedUnit:
    return ParsedUnit(framework=framework, typescript=True, component_name="Box", elements=list(elements))


def _rules(report) -> list[str]:
    return [issue.rule for issue in report.errors]


class TestShape:
    def test_string_duration_is_single_error(self):
        code = "import { motion } from 'framer-motion';\n\n<motion.div animate={{ x: 100 }} transition={{ duration: \"fast\" }} />\n"
        report = validate(SourceUnit(code=code, framework="react"))
        assert report.valid is False
        assert len(report.errors) == 1
        assert report.errors[0].rule == "invalid-value-type"
        assert report.errors[0].severity == "error"
        assert "duration" in report.errors[0].message

    def test_clean_code_is_valid(self, react_fade):
        report = validate(SourceUnit(code=react_fade, framework="react"))
        assert report.valid is True
        assert report.errors == []
        assert report.score == 100

    def test_non_numeric_opacity(self):
        report = validate_unit(_unit(MotionElement(tag="div", props={"animate": {"opacity": "full"}})))
        assert _rules(report) == ["invalid-value-type"]

    def test_unknown_property_warns(self):
        report = validate_unit(_unit(MotionElement(tag="div", props={"animate": {"wobble": 1}})))
        assert report.valid is True
        assert _rules(report) == ["unknown-property"]
        assert report.errors[0].severity == "warning"

    def test_css_variables_allowed(self):
        report = validate_unit(_unit(MotionElement(tag="div", props={"animate": {"--accent": "#fff"}})))
        assert report.errors == []

    def test_unknown_variant_label(self):
        el = MotionElement(tag="div", props={"animate": "open", "variants": {"closed": {"opacity": 0}}})
        assert "unknown-variant" in _rules(validate_unit(_unit(el)))

    def test_negative_duration(self):
        el = MotionElement(tag="div", props={"animate": {"x": 1}, "transition": {"duration": -1}})
        assert "duration-range" in _rules(validate_unit(_unit(el)))


class TestPerformanceRules:
    def test_layout_property(self):
        el = MotionElement(tag="div", props={"animate": {"width": 200}})
        report = validate_unit(_unit(el))
        assert _rules(report) == ["layout-property"]
        assert any("scaleX" in s.message for s in report.suggestions)
        assert report.score < 100

    def test_long_infinite_animation(self):
        el = MotionElement(tag="div", props={
            "animate": {"rotate": 360},
            "transition": {"duration": 3, "repeat": float("inf")},
        })
        assert "unbounded-long-animation" in _rules(validate_unit(_unit(el)))


class TestAccessibilityRules:
    def test_rapid_oscillation(self):
        el = MotionElement(tag="div", props={
            "animate": {"opacity": [1, 0, 1]},
            "transition": {"duration": 0.2, "repeat": float("inf")},
        })
        assert "rapid-oscillation" in _rules(validate_unit(_unit(el)))

    def test_guarded_oscillation_is_fine(self):
        el = MotionElement(tag="div", reduced_motion=True, props={
            "animate": {"opacity": [1, 0, 1]},
            "transition": {"duration": 0.2, "repeat": float("inf")},
        })
        assert "rapid-oscillation" not in _rules(validate_unit(_unit(el)))

    def test_unlabelled_interactive_element(self):
        el = MotionElement(tag="button", props={"hover": {"scale": 1.1}})
        report = validate_unit(_unit(el))
        assert report.errors == []
        assert any(s.type == "accessibility" for s in report.suggestions)

    def test_labelled_interactive_element(self):
        el = MotionElement(tag="button", props={"hover": {"scale": 1.1}}, attrs={"aria-label": "Open"})
        report = validate_unit(_unit(el))
        assert not any(s.type == "accessibility" for s in report.suggestions)


class TestStrictMode:
    def _warning_unit(self) -> ParsedUnit:
        return _unit(MotionElement(tag="div", props={"animate": {"width": 200, "wobble": 1}}))

    def test_strict_without_rules_escalates_everything(self):
        report = validate_unit(self._warning_unit(), strict=True)
        assert report.valid is False
        assert {i.severity for i in report.errors} == {"error"}

    def test_strict_with_rules_escalates_named_only(self):
        report = validate_unit(self._warning_unit(), rules=["layout-property"], strict=True)
        severities = {i.rule: i.severity for i in report.errors}
        assert severities == {"layout-property": "error", "unknown-property": "warning"}

    def test_rules_ignored_when_not_strict(self):
        report = validate_unit(self._warning_unit(), rules=["layout-property"])
        assert report.valid is True


class TestScoring:
    def test_one_shape_error(self):
        assert score([Finding(rule="x", category="shape", level="error", message="m")]) == 75

    def test_no_findings(self):
        assert score([]) == 100

    def test_priority_follows_weight(self):
        assert to_priority("shape") == "high"
        assert to_priority("accessibility") == "medium"
        assert to_priority("best-practice") == "low"

    def test_missing_import_suggestion(self):
        report = validate_unit(_unit(MotionElement(tag="div", props={"animate": {"x": 1}})))
        assert [s.message for s in report.suggestions] == ["Import motion from 'framer-motion'"]

    def test_report_dedupes_suggestions(self):
        findings = [
            Finding(rule="a", category="performance", level="warning", message="one", hint="same"),
            Finding(rule="b", category="performance", level="warning", message="two", hint="same"),
        ]
        assert len(build_report(findings).suggestions) == 1


class TestParseErrors:
    def test_validate_raises(self):
        with pytest.raises(ParseError):
            validate(SourceUnit(code="<motion.div animate={{ opacity: 1 }\n", framework="react"))

    def test_parse_error_report(self):
        report = parse_error_report(ParseError("Unexpected token", line=3, column=7))
        assert report.valid is False
        assert report.score == 0
        assert report.errors[0].rule == "parse-error"
        assert report.errors[0].location.line == 3
