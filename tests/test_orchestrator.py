"""Tests for the five public operations and their failure responses."""

from __future__ import annotations

import pytest

from motioncg.core.config import CoreConfig
from motioncg.core.errors import ErrorCategory
from motioncg.pipeline.orchestrator import Orchestrator
from motioncg.reporting.schema import LimitationJSON


class TestGenerateComponent:
    def test_fade_in_react(self, orchestrator):
        resp = orchestrator.generate_component(["fade-in"], "react", "FadeBox")
        assert resp.success is True
        assert resp.error is None
        assert resp.framework == "react"
        assert "initial={{ opacity: 0 }}" in resp.code
        assert "animate={{ opacity: 1 }}" in resp.code
        assert resp.artifact.metadata.patterns_used == ["fade-in"]
        assert resp.artifact.metadata.complexity == "basic"
        assert resp.elapsed_ms >= 0

    def test_combined_patterns(self, orchestrator):
        resp = orchestrator.generate_component(["fade-in", "hover-scale"], "react", "FadeBox")
        assert resp.success is True
        assert "initial={{ opacity: 0 }}" in resp.code
        assert "whileHover={{ scale: 1.05 }}" in resp.code

    def test_vue_and_js(self, orchestrator):
        vue = orchestrator.generate_component(["slide-up"], "vue", "SlideIn")
        js = orchestrator.generate_component(["slide-up"], "js", "SlideIn")
        assert vue.success and js.success
        assert "v-motion" in vue.code
        assert "export function animateSlideIn" in js.code

    def test_complexity_is_max_of_patterns(self, orchestrator):
        resp = orchestrator.generate_component(["fade-in", "drag-elastic"], "react")
        assert resp.artifact.metadata.complexity == "advanced"

    def test_usage_notes_are_carried(self, orchestrator):
        resp = orchestrator.generate_component(["shared-layout"], "react")
        assert "Requires layoutId for shared layout animations" in resp.notes

    def test_unknown_pattern(self, orchestrator):
        resp = orchestrator.generate_component(["fade-in", "does-not-exist"], "react")
        assert resp.success is False
        assert resp.code is None
        assert resp.category == ErrorCategory.PATTERN_NOT_FOUND.value
        assert "does-not-exist" in resp.error

    def test_unsupported_framework_for_pattern(self, orchestrator):
        resp = orchestrator.generate_component(["shared-layout"], "vue")
        assert resp.success is False
        assert resp.category == ErrorCategory.PATTERN_UNSUPPORTED.value

    @pytest.mark.parametrize("framework", [None, "", "svelte"])
    def test_bad_framework(self, orchestrator, framework):
        resp = orchestrator.generate_component(["fade-in"], framework)
        assert resp.success is False
        assert resp.category in (ErrorCategory.PARAMETER_MISSING.value, ErrorCategory.PARAMETER_INVALID.value)

    def test_empty_pattern_list(self, orchestrator):
        resp = orchestrator.generate_component([], "react")
        assert resp.success is False
        assert resp.category == ErrorCategory.PARAMETER_MISSING.value

    def test_bad_component_name(self, orchestrator):
        resp = orchestrator.generate_component(["fade-in"], "react", "not a name")
        assert resp.success is False
        assert resp.category == ErrorCategory.PARAMETER_INVALID.value

    def test_focus_areas_accepted(self, orchestrator):
        resp = orchestrator.generate_component(["fade-in"], "react", options={"focus_areas": ["bundle_size"]})
        assert resp.success is True
        assert resp.artifact.imports[0] == "import { motion } from 'framer-motion';"


class TestCreateSequence:
    def test_timeline_delays(self, orchestrator):
        steps = [
            {"element": "h1", "animate": {"opacity": 1}, "duration": 0.1},
            {"element": "p", "animate": {"opacity": 1}, "duration": 0.1},
            {"element": "button", "animate": {"opacity": 1}, "duration": 0.1},
        ]
        resp = orchestrator.create_sequence(steps, "react", timeline=True)
        assert resp.success is True
        assert [entry.delay for entry in resp.timeline] == [0, 0.1, 0.2]
        assert "export default function AnimationSequence" in resp.code
        assert "<motion.h1" in resp.code

    def test_stagger_delays(self, orchestrator):
        steps = [{"element": "li"}, {"element": "li"}, {"element": "li"}]
        resp = orchestrator.create_sequence(steps, "js", stagger=True, stagger_interval=0.25)
        assert resp.success is True
        assert [entry.delay for entry in resp.timeline] == [0, 0.25, 0.5]
        assert "delay: 0.5" in resp.code

    def test_empty_steps(self, orchestrator):
        resp = orchestrator.create_sequence([], "react")
        assert resp.success is False
        assert resp.category == ErrorCategory.PARAMETER_INVALID.value

    def test_negative_delay_rejected(self, orchestrator):
        resp = orchestrator.create_sequence([{"delay": -1}], "react")
        assert resp.success is False
        assert resp.category == ErrorCategory.PARAMETER_INVALID.value


class TestOptimizeCode:
    def test_width_rewritten(self, orchestrator, react_width):
        resp = orchestrator.optimize_code(react_width, "react", ["performance"])
        assert resp.success is True
        assert "scaleX" in resp.code
        assert "width: 200" not in resp.code
        assert "Replaced width animation with transform: scaleX" in resp.artifact.metadata.suggestions

    def test_default_focus_is_all(self, orchestrator):
        code = """import { motion, AnimatePresence } from 'framer-motion';

export default function Pulse() {
  return <motion.div animate={{ opacity: [1, 0.4, 1] }} transition={{ duration: 0.4, repeat: Infinity }} />;
}
"""
        resp = orchestrator.optimize_code(code, "react")
        assert resp.success is True
        assert "AnimatePresence" not in resp.code
        assert "prefersReducedMotion" in resp.code

    def test_vue_motion_component_rewritten(self, orchestrator):
        code = '<template>\n  <Motion :initial="{ width: 0 }" :animate="{ width: 200 }" />\n</template>\n'
        resp = orchestrator.optimize_code(code, "vue", ["performance"])
        assert resp.success is True
        assert "<Motion" in resp.code
        assert "v-motion" not in resp.code
        assert ':initial="{ scaleX: 0 }"' in resp.code
        assert ':animate="{ scaleX: 1 }"' in resp.code
        assert ":animate=\"{ width: 200 }\"" not in resp.code
        assert "Replaced width animation with transform: scaleX" in resp.artifact.metadata.suggestions

    def test_vue_motion_component_keeps_seconds(self, orchestrator):
        code = ('<template>\n  <motion.div :animate="{ opacity: [1, 0.2, 1] }" '
                ':transition="{ duration: 0.3, repeat: Infinity }" :while-press="{ scale: 0.9 }" />\n'
                '</template>\n')
        resp = orchestrator.optimize_code(code, "vue", ["accessibility"])
        assert resp.success is True
        assert "<motion.div" in resp.code
        assert ':while-press="{ scale: 0.9 }"' in resp.code
        assert ':transition="prefersReducedMotion ? { duration: 0 } : { duration: 0.3, repeat: ' in resp.code
        assert "duration: 300" not in resp.code
        assert "const prefersReducedMotion" in resp.code

    def test_unknown_focus_area(self, orchestrator, react_width):
        resp = orchestrator.optimize_code(react_width, "react", ["speed"])
        assert resp.success is False
        assert resp.category == ErrorCategory.PARAMETER_INVALID.value

    def test_parse_failure(self, orchestrator):
        resp = orchestrator.optimize_code("<motion.div animate={{ \n", "react")
        assert resp.success is False
        assert resp.category == ErrorCategory.PARSE_FAILED.value

    def test_source_too_large(self, library):
        small = Orchestrator(library, CoreConfig(max_source_length=20))
        resp = small.optimize_code("<motion.div animate={{ opacity: 1 }} />", "react")
        assert resp.success is False
        assert resp.category == ErrorCategory.SOURCE_TOO_LARGE.value

    def test_missing_code(self, orchestrator):
        resp = orchestrator.optimize_code(None, "react")
        assert resp.success is False
        assert resp.category == ErrorCategory.PARAMETER_MISSING.value


class TestConvertFramework:
    def test_react_to_vue(self, orchestrator, react_fade):
        resp = orchestrator.convert_framework(react_fade, "react", "vue")
        assert resp.success is True
        assert resp.framework == "vue"
        assert ':initial="{ opacity: 0 }"' in resp.code
        assert "duration: 300" in resp.code
        assert "defineOptions({ name: 'FadeBox' });" in resp.code

    def test_vue_to_react(self, orchestrator, vue_fade):
        resp = orchestrator.convert_framework(vue_fade, "vue", "react")
        assert resp.success is True
        assert "transition={{ duration: 0.3 }}" in resp.code

    def test_react_to_js(self, orchestrator, react_fade):
        resp = orchestrator.convert_framework(react_fade, "react", "js")
        assert resp.success is True
        assert "animate(element, { opacity: 1 }, { duration: 0.3 });" in resp.code

    def test_hook_limitation(self, orchestrator):
        code = """import { motion, useMotionValue } from 'framer-motion';

export default function Knob() {
  const x = useMotionValue(0);
  return <motion.div animate={{ opacity: 1 }} />;
}
"""
        resp = orchestrator.convert_framework(code, "react", "vue")
        assert resp.success is True
        assert "useMotionValue" in [item.name for item in resp.limitations]
        assert "// PLACEHOLDER: useMotionValue has no vue equivalent" in resp.code

    def test_vue_handler_state_is_reported(self, orchestrator):
        code = """<template>
  <section>
    <div v-motion :enter="{ opacity: 1 }" @click="toggle" />
  </section>
</template>

<script setup>
import { ref } from 'vue';

const open = ref(false);
function toggle() {
  open.value = !open.value;
}
</script>
"""
        resp = orchestrator.convert_framework(code, "vue", "react")
        assert resp.success is True
        messages = {item.name: item.message for item in resp.limitations}
        assert messages["markup"] == "1 non-animated element(s) around the motion elements were not carried over"
        assert messages["onClick"] == "'onClick' references 'toggle', which is not carried over to react"
        assert messages["script"].startswith("Statement `")

    def test_limitations_serialize_with_construct_key(self, orchestrator):
        code = """import { motion, useMotionValue } from 'framer-motion';

export default function Knob() {
  const x = useMotionValue(0);
  return <motion.div animate={{ opacity: 1 }} />;
}
"""
        resp = orchestrator.convert_framework(code, "react", "vue")
        dumped = resp.model_dump(by_alias=True)["limitations"][0]
        assert dumped["construct"] == "useMotionValue"
        assert LimitationJSON(name="x", message="m") == LimitationJSON(construct="x", message="m")

    def test_same_framework_keeps_code(self, orchestrator, js_fade):
        resp = orchestrator.convert_framework(js_fade, "js", "js")
        assert resp.success is True
        assert resp.code == js_fade

    def test_bad_target(self, orchestrator, react_fade):
        resp = orchestrator.convert_framework(react_fade, "react", "angular")
        assert resp.success is False
        assert "to_framework" in resp.error


class TestValidateSyntax:
    def test_invalid_value_type(self, orchestrator):
        code = "<motion.div animate={{ x: 100 }} transition={{ duration: \"fast\" }} />"
        resp = orchestrator.validate_syntax(code, "react")
        assert resp.success is True
        assert resp.report.valid is False
        assert [issue.rule for issue in resp.report.errors] == ["invalid-value-type"]

    def test_strict_escalates(self, orchestrator):
        code = "<motion.div animate={{ width: 200 }} />"
        loose = orchestrator.validate_syntax(code, "react")
        strict = orchestrator.validate_syntax(code, "react", strict=True)
        assert loose.report.valid is True
        assert strict.report.valid is False

    def test_parse_error_report(self, orchestrator):
        resp = orchestrator.validate_syntax("<motion.div animate={{ \n", "react")
        assert resp.success is False
        assert resp.category == ErrorCategory.PARSE_FAILED.value
        assert resp.report is not None
        assert resp.report.valid is False
        assert resp.report.errors[0].rule == "parse-error"

    def test_rules_must_be_list(self, orchestrator):
        resp = orchestrator.validate_syntax("<motion.div animate={{ x: 1 }} />", "react", rules="layout-property")
        assert resp.success is False
        assert resp.report is None

    def test_never_raises(self, orchestrator):
        resp = orchestrator.validate_syntax(12345, "react")
        assert resp.success is False
        assert resp.hint
