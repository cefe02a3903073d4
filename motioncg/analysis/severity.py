from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Literal, Mapping, Optional

from motioncg.parsing.ir import Location

Level = Literal["error", "warning", "suggestion"]
Priority = Literal["high", "medium", "low"]


@dataclass(frozen=True)
class Finding:
    rule: str
    category: str
    level: Level
    message: str
    location: Optional[Location] = None
    hint: Optional[str] = None

    def escalated(self) -> Finding:
        return Finding(self.rule, self.category, "error", self.message, self.location, self.hint)


DEFAULT_WEIGHTS: Mapping[str, float] = {
    "shape": 1.0,
    "performance": 0.6,
    "accessibility": 0.7,
    "best-practice": 0.3,
}

# Base penalty per finding before category weighting
LEVEL_BASE: Mapping[str, float] = {
    "error": 0.25,
    "warning": 0.08,
    "suggestion": 0.02,
}


def _clamp01(x: float) -> float:
    return 0.0 if x < 0 else 1.0 if x > 1 else x


def merged_weights(new_weights: Mapping[str, float] | None) -> dict[str, float]:
    w = dict(DEFAULT_WEIGHTS)
    for k, v in (new_weights or {}).items():
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            w[k] = float(v)
    return w


def penalty(finding: Finding, weights: Mapping[str, float] | None = None) -> float:
    w = (weights or DEFAULT_WEIGHTS).get(finding.category, 0.5)
    return _clamp01(LEVEL_BASE.get(finding.level, 0.0) * w)


def score(findings: Iterable[Finding], weights: Mapping[str, float] | None = None) -> int:
    # penalties combine like independent probabilities, so the score never goes negative
    keep = 1.0
    for f in findings:
        keep *= 1.0 - penalty(f, weights)
    return int(round(100 * _clamp01(keep)))


def to_priority(category: str, weights: Mapping[str, float] | None = None) -> Priority:
    x = (weights or DEFAULT_WEIGHTS).get(category, 0.5)
    if x >= 0.80:
        return "high"
    if x >= 0.50:
        return "medium"
    return "low"
