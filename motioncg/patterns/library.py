"""Read-only library of animation patterns, loaded from a validated YAML seed."""
from __future__ import annotations
import copy
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, List, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from motioncg.core.errors import ErrorCategory, PatternError
from motioncg.generation.context import GenerationContext
from motioncg.generation.generator import generate
from motioncg.parsing.ir import FRAMEWORKS, PHASES, STATE_PHASES, MotionElement, ParsedUnit, normalize_framework

logger = logging.getLogger(__name__)

DEFAULT_SEED_PATH = Path(__file__).with_name("seed.yaml")

Category = Literal["entrance", "exit", "gesture", "layout", "scroll", "stagger", "complex"]
Complexity = Literal["basic", "intermediate", "advanced"]

DEEP_MERGED = ("transition", "variants")
_TRANSFORM_KEYS = {"x", "y", "scale"}
_LAYOUT_KEYS = {"width", "height"}


class PatternUsage(BaseModel):
    model_config = ConfigDict(frozen=True)

    props: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)


class AnimationPattern(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    category: Category
    complexity: Complexity
    frameworks: List[str]
    tags: List[str] = Field(default_factory=list)
    config: dict[str, Any]
    attributes: dict[str, Any] = Field(default_factory=dict)
    usage: PatternUsage = Field(default_factory=PatternUsage)

    @field_validator("frameworks")
    @classmethod
    def _known_frameworks(cls, value: list[str]) -> list[str]:
        out = []
        for name in value:
            fw = normalize_framework(name)
            if fw is None:
                raise ValueError(f"unsupported framework {name!r}, expected one of {', '.join(FRAMEWORKS)}")
            out.append(fw)
        return out

    @field_validator("config")
    @classmethod
    def _known_phases(cls, value: dict[str, Any]) -> dict[str, Any]:
        for key, phase_value in value.items():
            if key not in PHASES:
                raise ValueError(f"unknown phase {key!r}")
            if key in DEEP_MERGED and not isinstance(phase_value, dict):
                raise ValueError(f"{key} must be a mapping")
        variants = value.get("variants") or {}
        for key in (k for k in PHASES if k in STATE_PHASES):
            if key not in value or isinstance(value[key], dict):
                continue
            labels = value[key] if isinstance(value[key], list) else [value[key]]
            if not labels or not all(isinstance(label, str) for label in labels):
                raise ValueError(f"{key} must be a keyframe mapping or variant label(s)")
            unknown = [label for label in labels if label not in variants]
            if unknown:
                raise ValueError(f"{key} names unknown variant(s) {', '.join(map(repr, unknown))}")
        return value


class PatternSeed(BaseModel):
    version: int = 1
    patterns: List[AnimationPattern]

    @model_validator(mode="after")
    def _unique_ids(self) -> PatternSeed:
        seen: set[str] = set()
        for p in self.patterns:
            if p.id in seen:
                raise ValueError(f"duplicate pattern id {p.id!r}")
            seen.add(p.id)
        return self


def _deep_merge(base: dict, extra: dict) -> dict:
    out = dict(base)
    for key, value in extra.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _deep_merge(out[key], value)
        else:
            out[key] = copy.deepcopy(value)
    return out


def merge_configs(configs: Iterable[dict]) -> dict:
    """Fold configs left to right.

    State phases are replaced by the last config defining them; `transition`
    and `variants` merge recursively with the last config winning on leaves.
    """
    merged: dict[str, Any] = {}
    for config in configs:
        for key, value in config.items():
            if key in DEEP_MERGED and isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = copy.deepcopy(value)
    return merged


def _keys(value: Any) -> set[str]:
    if isinstance(value, dict):
        return set(value) | {k for v in value.values() for k in _keys(v)}
    if isinstance(value, list):
        return {k for v in value for k in _keys(v)}
    return set()


class PatternLibrary:
    def __init__(self, patterns: Iterable[AnimationPattern], version: int = 1):
        self._patterns = MappingProxyType({p.id: p for p in patterns})
        self.version = version

    @classmethod
    def from_dict(cls, data: Any) -> PatternLibrary:
        try:
            seed = PatternSeed.model_validate(data)
        except ValidationError as exc:
            raise PatternError(f"Invalid pattern seed: {exc}", category=ErrorCategory.PATTERN_SEED_INVALID) from exc
        logger.debug("Loaded %d animation patterns (seed v%d)", len(seed.patterns), seed.version)
        return cls(seed.patterns, version=seed.version)

    @classmethod
    def from_yaml(cls, path: Optional[Path] = None) -> PatternLibrary:
        path = Path(path) if path else DEFAULT_SEED_PATH
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise PatternError(f"Cannot read pattern seed {path}: {exc}",
                               category=ErrorCategory.PATTERN_SEED_INVALID) from exc
        return cls.from_dict(data)

    def __len__(self) -> int:
        return len(self._patterns)

    def __contains__(self, pattern_id: str) -> bool:
        return pattern_id in self._patterns

    def ids(self) -> list[str]:
        return list(self._patterns)

    def get_pattern(self, pattern_id: str) -> Optional[AnimationPattern]:
        p = self._patterns.get(pattern_id)
        return p.model_copy(deep=True) if p is not None else None

    def require(self, pattern_id: str, framework: Optional[str] = None) -> AnimationPattern:
        p = self._patterns.get(pattern_id)
        if p is None:
            raise PatternError(f"Pattern '{pattern_id}' not found")
        if framework is not None and framework not in p.frameworks:
            raise PatternError(f"Pattern '{pattern_id}' not supported for {framework}",
                               category=ErrorCategory.PATTERN_UNSUPPORTED)
        return p.model_copy(deep=True)

    def all_patterns(self) -> list[AnimationPattern]:
        return [p.model_copy(deep=True) for p in self._patterns.values()]

    def get_patterns_by_category(self, category: str) -> list[AnimationPattern]:
        return [p for p in self.all_patterns() if p.category == category]

    def get_patterns_by_framework(self, framework: str) -> list[AnimationPattern]:
        fw = normalize_framework(framework)
        return [p for p in self.all_patterns() if fw in p.frameworks]

    def get_patterns_by_complexity(self, complexity: str) -> list[AnimationPattern]:
        return [p for p in self.all_patterns() if p.complexity == complexity]

    def search(self, text: str) -> list[AnimationPattern]:
        needle = (text or "").lower()
        return [
            p for p in self.all_patterns()
            if needle in p.name.lower()
            or needle in p.description.lower()
            or any(needle in tag.lower() for tag in p.tags)
        ]

    def element_for(self, pattern_ids: Iterable[str], framework: Optional[str] = None, tag: str = "div") -> MotionElement:
        """One element carrying the merged config and attributes of the given patterns."""
        patterns = [self.require(pid, framework) for pid in pattern_ids]
        attrs: dict[str, Any] = {}
        for p in patterns:
            attrs.update(copy.deepcopy(p.attributes))
        return MotionElement(tag=tag, props=merge_configs(p.config for p in patterns), attrs=attrs)

    def get_pattern_code(self, pattern_id: str, framework: str, name: str = "AnimatedComponent",
                         typescript: bool = True) -> str:
        fw = normalize_framework(framework)
        if fw is None:
            raise PatternError(f"Framework '{framework}' not supported", category=ErrorCategory.PATTERN_UNSUPPORTED)
        element = self.element_for([pattern_id], fw)
        unit = ParsedUnit(framework=fw, typescript=typescript, component_name=name, elements=[element])
        ctx = GenerationContext(framework=fw, typescript=typescript, component_name=name)
        return generate(unit, ctx).code

    def get_similar_patterns(self, pattern_id: str, limit: int = 3) -> list[AnimationPattern]:
        p = self._patterns.get(pattern_id)
        if p is None:
            return []
        similar = [
            other for other in self.all_patterns()
            if other.id != pattern_id and (other.category == p.category or set(other.tags) & set(p.tags))
        ]
        return similar[:max(0, limit)]

    def performance_score(self, pattern_id: str) -> dict:
        p = self._patterns.get(pattern_id)
        factors = {"transforms": 0, "layout": 0, "complexity": 0}
        if p is None:
            return {"score": 0, "factors": factors, "recommendations": []}
        score = 100
        recommendations: list[str] = []
        keys = _keys(p.config)
        if keys & _TRANSFORM_KEYS:
            factors["transforms"] = 20
        if keys & _LAYOUT_KEYS:
            factors["layout"] = -30
            score -= 30
            recommendations.append("Consider using transform properties instead of width/height")
        if p.complexity == "advanced":
            factors["complexity"] = -10
            score -= 10
        return {"score": max(0, min(100, score)), "factors": factors, "recommendations": recommendations}
