from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path

from motioncg.presets import load_rules


@dataclass
class CoreConfig:
    max_source_length: int = 100_000
    default_typescript: bool = True
    rules_path: Path | None = None
    rules: dict = field(default_factory=dict)

    def __post_init__(self):
        if not self.rules:
            self.rules = load_rules(self.rules_path)

    def thresholds(self) -> dict:
        return dict(self.rules.get("thresholds") or {})

    def weights(self) -> dict:
        return dict(self.rules.get("weights") or {})
