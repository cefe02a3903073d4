from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Literal, Optional

ImportKind = Literal["named", "default", "type"]

# npm package each import source belongs to
PACKAGES = {
    "framer-motion": "framer-motion",
    "motion": "motion",
    "motion/react": "motion",
    "motion-v": "motion-v",
    "@vueuse/motion": "@vueuse/motion",
    "react": "react",
    "vue": "vue",
}


@dataclass
class ImportSet:
    """Append-only, deduplicated by (source, name)."""
    entries: list[tuple[str, str, str]] = field(default_factory=list)

    def add(self, source: str, name: str, kind: ImportKind = "named") -> None:
        if any(s == source and n == name for s, n, _ in self.entries):
            return
        self.entries.append((source, name, kind))

    def sources(self) -> list[str]:
        out: list[str] = []
        for s, _, _ in self.entries:
            if s not in out:
                out.append(s)
        return out

    def render(self) -> list[str]:
        lines: list[str] = []
        for source in self.sources():
            for type_only in (True, False):
                default = [n for s, n, k in self.entries if s == source and k == "default" and not type_only]
                named = [n for s, n, k in self.entries
                         if s == source and k == ("type" if type_only else "named")]
                if not default and not named:
                    continue
                head = "import type " if type_only else "import "
                parts = list(default)
                if named:
                    parts.append("{ " + ", ".join(named) + " }")
                lines.append(f"{head}{', '.join(parts)} from '{source}';")
        return lines


@dataclass(frozen=True)
class OptimizationFlags:
    performance: bool = False
    accessibility: bool = False
    bundle_size: bool = False

    @classmethod
    def from_focus_areas(cls, areas) -> OptimizationFlags:
        norm = {str(a).strip().lower().replace("_", "-") for a in (areas or [])}
        return cls(
            performance="performance" in norm,
            accessibility="accessibility" in norm,
            bundle_size=bool(norm & {"bundle-size", "bundle", "bundlesize"}),
        )


@dataclass
class GenerationContext:
    framework: str
    typescript: bool = True
    component_name: str = "AnimatedComponent"
    import_set: ImportSet = field(default_factory=ImportSet)
    dependency_set: list[str] = field(default_factory=list)
    optimization: OptimizationFlags = field(default_factory=OptimizationFlags)
    style_system: Optional[str] = None

    def fresh(self) -> GenerationContext:
        return replace(self, import_set=ImportSet(), dependency_set=[])

    def use(self, source: str, name: str, kind: ImportKind = "named") -> None:
        self.import_set.add(source, name, kind)
        package = PACKAGES.get(source, source)
        if package not in self.dependency_set:
            self.dependency_set.append(package)
