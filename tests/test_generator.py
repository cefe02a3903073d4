"""Tests for code generation: rendering, in-place rewriting and artifact metadata."""

from __future__ import annotations

from motioncg.generation.context import GenerationContext, ImportSet
from motioncg.generation.generator import derive_complexity, ensure_reduced_motion_decl, generate, optimize_code
from motioncg.generation.jsfmt import to_js
from motioncg.generation.react import REDUCED_MOTION_DECL
from motioncg.parsing.imports import add_import, rewrite_imports, unused_specifiers
from motioncg.parsing.ir import Expr, Guarded, MotionElement, ParsedUnit, SourceUnit
from motioncg.parsing.parser import parse


def _fade() -> MotionElement:
    return MotionElement(tag="div", props={
        "initial": {"opacity": 0},
        "animate": {"opacity": 1},
        "transition": {"duration": 0.3},
    })


def _unit(framework: str, *elements: MotionElement, typescript: bool = True) -> ParsedUnit:
    return ParsedUnit(framework=framework, typescript=typescript, component_name="FadeBox", elements=list(elements))


def _ctx(framework: str, typescript: bool = True) -> GenerationContext:
    return GenerationContext(framework=framework, typescript=typescript, component_name="FadeBox")


class TestJsLiterals:
    def test_nested_values(self):
        value = {"opacity": [0, 1], "transition": {"repeat": float("inf"), "ease": "easeOut"}}
        assert to_js(value) == "{ opacity: [0, 1], transition: { repeat: Infinity, ease: 'easeOut' } }"

    def test_quoted_keys_and_expressions(self):
        assert to_js({"--accent": Expr("color")}) == "{ '--accent': color }"

    def test_guarded_transition(self):
        assert to_js(Guarded({"duration": 1})) == "prefersReducedMotion ? { duration: 0 } : { duration: 1 }"


class TestImportSet:
    def test_dedupes_and_groups(self):
        imports = ImportSet()
        imports.add("framer-motion", "motion")
        imports.add("framer-motion", "AnimatePresence")
        imports.add("framer-motion", "motion")
        imports.add("react", "ReactNode", "type")
        assert imports.render() == [
            "import { motion, AnimatePresence } from 'framer-motion';",
            "import type { ReactNode } from 'react';",
        ]


class TestRendering:
    def test_react_component(self):
        artifact = generate(_unit("react", _fade()), _ctx("react"))
        code = artifact.code
        assert code.startswith("import { motion } from 'framer-motion';\n")
        assert "interface FadeBoxProps {" in code
        assert "export default function FadeBox({ children }: FadeBoxProps) {" in code
        assert "initial={{ opacity: 0 }}" in code
        assert "animate={{ opacity: 1 }}" in code
        assert "transition={{ duration: 0.3 }}" in code
        assert "{children}" in code
        assert artifact.dependencies == ["framer-motion", "react"]

    def test_react_exit_wraps_presence(self):
        el = MotionElement(tag="div", props={"exit": {"opacity": 0}})
        code = generate(_unit("react", el, typescript=False), _ctx("react", typescript=False)).code
        assert "import { motion, AnimatePresence } from 'framer-motion';" in code
        assert "<AnimatePresence>" in code
        assert "interface" not in code

    def test_vue_component_uses_milliseconds(self):
        code = generate(_unit("vue", _fade()), _ctx("vue")).code
        assert code.startswith("<template>\n")
        assert ':enter="{ opacity: 1, transition: { duration: 300 } }"' in code
        assert "<slot />" in code
        assert '<script setup lang="ts">' in code
        assert "import { MotionDirective } from '@vueuse/motion';" in code
        assert "defineOptions({ name: 'FadeBox' });" in code

    def test_js_function(self):
        code = generate(_unit("js", _fade(), typescript=False), _ctx("js", typescript=False)).code
        assert "export function animateFadeBox(element) {" in code
        assert "animate(element, { opacity: 0 }).complete();" in code

    def test_js_hover_listeners(self):
        el = MotionElement(tag="div", props={"animate": {"scale": 1}, "hover": {"scale": 1.1}})
        code = generate(_unit("js", el), _ctx("js")).code
        assert "element.addEventListener('pointerenter', () => {" in code
        assert "animate(element, { scale: 1 });" in code

    def test_reduced_motion_declaration(self):
        el = _fade()
        el.reduced_motion = True
        code = generate(_unit("react", el), _ctx("react")).code
        assert REDUCED_MOTION_DECL in code
        assert "prefersReducedMotion ? { duration: 0 } : { duration: 0.3 }" in code

    def test_deterministic(self):
        first = generate(_unit("react", _fade()), _ctx("react"))
        second = generate(_unit("react", _fade()), _ctx("react"))
        assert first == second

    def test_context_not_mutated(self):
        ctx = _ctx("react")
        generate(_unit("react", _fade()), ctx)
        assert ctx.import_set.entries == []


class TestInPlace:
    def test_unchanged_unit_round_trips(self, react_fade):
        unit = parse(SourceUnit(code=react_fade, framework="react"))
        code = generate(unit, _ctx("react")).code
        again = parse(SourceUnit(code=code, framework="react"))
        assert [e.props for e in again.elements] == [e.props for e in unit.elements]
        assert again.elements[0].content == "Hello"

    def test_snippet_gets_shell(self):
        unit = parse(SourceUnit(code="<motion.div animate={{ x: 100 }} />", framework="react"))
        ctx = GenerationContext(framework="react", component_name=unit.component_name)
        code = generate(unit, ctx).code
        assert "import { motion } from 'framer-motion';" in code
        assert "export default function AnimatedComponent() {" in code
        assert "<motion.div animate={{ x: 100 }} />" in code

    def test_vue_round_trip(self, vue_fade):
        unit = parse(SourceUnit(code=vue_fade, framework="vue"))
        code = generate(unit, _ctx("vue")).code
        again = parse(SourceUnit(code=code, framework="vue"))
        assert again.elements[0].props == unit.elements[0].props

    def test_js_round_trip(self, js_fade):
        unit = parse(SourceUnit(code=js_fade, framework="js"))
        code = generate(unit, _ctx("js")).code
        assert code == js_fade

    def test_js_initial_only_keeps_transition(self):
        el = MotionElement(tag="div", props={"initial": {"opacity": 0}, "transition": {"duration": 0.5}})
        code = generate(_unit("js", el, typescript=False), _ctx("js", typescript=False)).code
        assert "animate(element, { opacity: 0 }, { duration: 0.5 }).complete();" in code
        again = parse(SourceUnit(code=code, framework="js"))
        assert again.elements[0].props == {"initial": {"opacity": 0}, "transition": {"duration": 0.5}}

    def test_js_zero_duration_animate_stays_animate(self):
        el = MotionElement(tag="div", props={"animate": {"opacity": 1}, "transition": {"duration": 0}})
        code = generate(_unit("js", el, typescript=False), _ctx("js", typescript=False)).code
        assert "animate(element, { opacity: 1 }, { duration: 0 });" in code
        again = parse(SourceUnit(code=code, framework="js"))
        assert again.elements[0].props == {"animate": {"opacity": 1}, "transition": {"duration": 0}}


class TestPostPass:
    def test_position_rewrite(self):
        code, suggestions = optimize_code("animate(el, { top: 10 });", _ctx("js"), ["performance"])
        assert code == "animate(el, { y: 10 });"
        assert suggestions == ["Replaced top/left animation with transform: x/y"]

    def test_infinite_repeat_guarded(self):
        src = "import { animate } from 'motion';\n\nanimate(el, { opacity: 0 }, { repeat: Infinity });\n"
        code, _ = optimize_code(src, _ctx("js"), ["accessibility"])
        assert "repeat: prefersReducedMotion ? 0 : Infinity" in code
        assert REDUCED_MOTION_DECL in code

    def test_unused_imports_removed(self):
        src = "import { animate, stagger } from 'motion';\n\nanimate(el, { x: 1 });\n"
        code, suggestions = optimize_code(src, _ctx("js"), ["bundle-size"])
        assert code.startswith("import { animate } from 'motion';")
        assert suggestions == ["Removed unused import stagger"]


class TestHelpers:
    def test_declaration_inserted_once(self):
        code = ensure_reduced_motion_decl("import { animate } from 'motion';\n\nx();\n", "js", False)
        assert code.count("prefersReducedMotion") == 1
        assert ensure_reduced_motion_decl(code, "js", False) == code

    def test_vue_declaration_without_script(self):
        code = ensure_reduced_motion_decl("<template><div /></template>\n", "vue", True)
        assert '<script setup lang="ts">' in code
        assert "const prefersReducedMotion: boolean =" in code

    def test_complexity(self):
        assert derive_complexity([_fade()]) == "basic"
        assert derive_complexity([MotionElement(tag="div", props={"hover": {"scale": 1.1}})]) == "intermediate"
        assert derive_complexity([MotionElement(tag="div", props={"drag": {}})]) == "advanced"

    def test_import_helpers(self):
        text = "import { motion, AnimatePresence } from 'framer-motion';\n\n<motion.div />;\n"
        assert unused_specifiers(text) == ["AnimatePresence"]
        assert rewrite_imports(text, remove={"AnimatePresence"}).startswith(
            "import { motion } from 'framer-motion';"
        )
        assert add_import(text, "framer-motion", "motion") == text
        added = add_import("x();\n", "motion", "animate")
        assert added.startswith("import { animate } from 'motion';\n")
