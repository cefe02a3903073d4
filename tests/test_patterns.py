"""Tests for the pattern library and config merging."""

from __future__ import annotations

import pytest

from motioncg.core.errors import ErrorCategory, PatternError
from motioncg.patterns.library import PatternLibrary, merge_configs

SEED_IDS = [
    "fade-in", "slide-up", "scale-bounce", "fade-out", "slide-down-exit", "hover-scale",
    "drag-elastic", "shared-layout", "scroll-reveal", "parallax-scroll", "stagger-children",
    "morphing-button", "card-flip",
]


def _pattern(pid: str, **overrides) -> dict:
    data = {
        "id": pid,
        "name": pid.title(),
        "description": "test pattern",
        "category": "entrance",
        "complexity": "basic",
        "frameworks": ["react"],
        "config": {"animate": {"opacity": 1}},
    }
    data.update(overrides)
    return data


class TestSeed:
    def test_all_seed_patterns_load(self, library):
        assert len(library) == 13
        assert library.ids() == SEED_IDS

    def test_duplicate_ids_rejected(self):
        with pytest.raises(PatternError) as info:
            PatternLibrary.from_dict({"patterns": [_pattern("a"), _pattern("a")]})
        assert info.value.category == ErrorCategory.PATTERN_SEED_INVALID

    def test_unknown_phase_rejected(self):
        with pytest.raises(PatternError):
            PatternLibrary.from_dict({"patterns": [_pattern("a", config={"whileWobble": {"x": 1}})]})

    @pytest.mark.parametrize("config", [
        {"animate": 5},
        {"animate": None},
        {"hover": [1, 2]},
        {"animate": "visible"},
        {"animate": "visible", "variants": {"hidden": {"opacity": 0}}},
    ])
    def test_malformed_state_phase_rejected(self, config):
        with pytest.raises(PatternError) as info:
            PatternLibrary.from_dict({"patterns": [_pattern("a", config=config)]})
        assert info.value.category == ErrorCategory.PATTERN_SEED_INVALID

    def test_variant_labels_accepted(self):
        config = {"initial": "hidden", "animate": ["visible"],
                  "variants": {"hidden": {"opacity": 0}, "visible": {"opacity": 1}}}
        library = PatternLibrary.from_dict({"patterns": [_pattern("a", config=config)]})
        assert library.require("a").config["animate"] == ["visible"]

    def test_unknown_framework_rejected(self):
        with pytest.raises(PatternError):
            PatternLibrary.from_dict({"patterns": [_pattern("a", frameworks=["svelte"])]})

    def test_missing_file(self, tmp_path):
        with pytest.raises(PatternError):
            PatternLibrary.from_yaml(tmp_path / "missing.yaml")


class TestLookup:
    def test_get_pattern_returns_copy(self, library):
        first = library.get_pattern("fade-in")
        first.config["initial"]["opacity"] = 0.5
        assert library.get_pattern("fade-in").config["initial"] == {"opacity": 0}

    def test_get_unknown_pattern(self, library):
        assert library.get_pattern("nope") is None
        assert "nope" not in library

    def test_require_unknown(self, library):
        with pytest.raises(PatternError) as info:
            library.require("nope")
        assert info.value.category == ErrorCategory.PATTERN_NOT_FOUND

    def test_require_unsupported_framework(self, library):
        with pytest.raises(PatternError) as info:
            library.require("shared-layout", "vue")
        assert info.value.category == ErrorCategory.PATTERN_UNSUPPORTED

    def test_by_category(self, library):
        ids = [p.id for p in library.get_patterns_by_category("exit")]
        assert ids == ["fade-out", "slide-down-exit"]

    def test_by_framework(self, library):
        ids = {p.id for p in library.get_patterns_by_framework("vue")}
        assert "fade-in" in ids
        assert "shared-layout" not in ids
        assert "card-flip" not in ids

    def test_by_complexity(self, library):
        assert all(p.complexity == "advanced" for p in library.get_patterns_by_complexity("advanced"))

    def test_search_matches_tags(self, library):
        ids = [p.id for p in library.search("SPRING")]
        assert ids == ["scale-bounce"]

    def test_similar_patterns(self, library):
        similar = [p.id for p in library.get_similar_patterns("fade-in")]
        assert "fade-in" not in similar
        assert "slide-up" in similar
        assert library.get_similar_patterns("nope") == []


class TestMerge:
    def test_state_phases_last_wins(self):
        merged = merge_configs([
            {"initial": {"opacity": 0}, "animate": {"opacity": 1}},
            {"initial": {"y": 20}},
        ])
        assert merged["initial"] == {"y": 20}
        assert merged["animate"] == {"opacity": 1}

    def test_transition_deep_merges(self):
        merged = merge_configs([
            {"transition": {"duration": 0.3, "ease": "easeOut"}},
            {"transition": {"duration": 0.5}},
        ])
        assert merged["transition"] == {"duration": 0.5, "ease": "easeOut"}

    def test_three_configs_fold_left_to_right(self):
        merged = merge_configs([
            {"variants": {"a": {"x": 1}}},
            {"variants": {"b": {"x": 2}}},
            {"variants": {"a": {"y": 3}}},
        ])
        assert merged["variants"] == {"a": {"x": 1, "y": 3}, "b": {"x": 2}}

    def test_inputs_untouched(self):
        first = {"transition": {"duration": 0.3}}
        merge_configs([first, {"transition": {"delay": 1}}])
        assert first == {"transition": {"duration": 0.3}}

    def test_element_for_merges_attributes(self, library):
        el = library.element_for(["fade-in", "hover-scale"], "react")
        assert el.props["initial"] == {"opacity": 0}
        assert el.props["hover"] == {"scale": 1.05}
        assert el.props["transition"] == {"duration": 0.3, "type": "spring", "stiffness": 400, "damping": 17}


class TestPatternCode:
    def test_react_code(self, library):
        code = library.get_pattern_code("fade-in", "react", "FadeBox")
        assert "import { motion } from 'framer-motion';" in code
        assert "initial={{ opacity: 0 }}" in code
        assert "export default function FadeBox" in code

    def test_vue_code(self, library):
        code = library.get_pattern_code("fade-in", "vue", "FadeBox")
        assert "v-motion" in code
        assert ':initial="{ opacity: 0 }"' in code
        assert "duration: 300" in code

    def test_js_code(self, library):
        code = library.get_pattern_code("fade-in", "js", "FadeBox")
        assert "export function animateFadeBox(element: HTMLElement): void {" in code
        assert "animate(element, { opacity: 1 }, { duration: 0.3 });" in code


class TestPerformanceScore:
    def test_transform_pattern(self, library):
        result = library.performance_score("slide-up")
        assert result["score"] == 100
        assert result["factors"]["transforms"] == 20

    def test_layout_pattern_is_penalized(self, library):
        result = library.performance_score("shared-layout")
        assert result["score"] == 60
        assert result["factors"]["layout"] == -30
        assert result["recommendations"]

    def test_unknown_pattern(self, library):
        assert library.performance_score("nope")["score"] == 0
