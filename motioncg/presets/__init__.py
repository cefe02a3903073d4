from __future__ import annotations
import copy
import logging
from pathlib import Path
import yaml

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).with_name("rules.yaml")

DEFAULT_RULES = {
    "thresholds": {
        "short_duration": 0.5,   # seconds; at or below counts as "short"
        "long_duration": 2.0,
        "max_duration": 10.0,
    },
    "weights": {
        "shape": 1.0, "performance": 0.6, "accessibility": 0.7, "best-practice": 0.3,
    },
}


def _merged(loaded: dict) -> dict:
    out = copy.deepcopy(DEFAULT_RULES)
    for section, values in (loaded or {}).items():
        if isinstance(values, dict) and isinstance(out.get(section), dict):
            out[section].update(values)
        else:
            out[section] = values
    return out


def load_rules(rules_path: Path | None) -> dict:
    p = rules_path or DEFAULT_RULES_PATH
    if p.exists():
        try:
            return _merged(yaml.safe_load(p.read_text(encoding="utf-8")) or {})
        except yaml.YAMLError as exc:
            logger.warning("Ignoring unreadable rules file %s: %s", p, exc)
            return copy.deepcopy(DEFAULT_RULES)
    return copy.deepcopy(DEFAULT_RULES)


def save_rules(rules: dict, rules_path: Path | None) -> Path:
    p = rules_path or DEFAULT_RULES_PATH
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(yaml.safe_dump(rules, sort_keys=False), encoding="utf-8")
    return p
