"""IR transformation: optimization rewrites and cross-framework conversion."""
from __future__ import annotations
import copy
import logging
from dataclasses import fields
from typing import Optional

from motioncg.generation.context import GenerationContext
from motioncg.parsing.ir import ParsedUnit, TransformedUnit
from motioncg.transform.convert import convert
from motioncg.transform.optimize import optimize_accessibility, optimize_bundle, optimize_performance

logger = logging.getLogger(__name__)


def _copy(unit: ParsedUnit) -> TransformedUnit:
    # the syntax tree is read-only and shared; everything else is copied
    values = {f.name: copy.deepcopy(getattr(unit, f.name)) for f in fields(unit) if f.name != "syntax_tree"}
    values["syntax_tree"] = unit.syntax_tree
    if isinstance(unit, TransformedUnit):
        return TransformedUnit(**values)
    return TransformedUnit(**values, source_framework=unit.framework)


def transform(unit: ParsedUnit, context: GenerationContext, thresholds: Optional[dict] = None) -> TransformedUnit:
    """Return a transformed copy of `unit`; the input is never mutated.

    When `context.framework` equals the unit's framework only the optimization
    rewrites selected by `context.optimization` run, and applying them twice
    gives the same result as applying them once.
    """
    out = _copy(unit)
    flags = context.optimization
    if flags.performance:
        optimize_performance(out)
    if flags.accessibility:
        optimize_accessibility(out, float((thresholds or {}).get("short_duration", 0.5)))
    if context.framework != unit.framework:
        convert(out, context.framework)
        out.typescript = context.typescript
    elif flags.bundle_size:
        optimize_bundle(out)
    logger.debug(
        "Transformed %s -> %s: %d suggestion(s), %d limitation(s)",
        out.source_framework, out.framework, len(out.suggestions), len(out.limitations),
    )
    return out
