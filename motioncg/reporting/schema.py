from __future__ import annotations
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

# Severities used across the validation report
Severity = Literal["error", "warning"]
Priority = Literal["high", "medium", "low"]
Complexity = Literal["basic", "intermediate", "advanced"]


class LocationJSON(BaseModel):
    line: int = Field(..., ge=1, description="1-based line")
    column: int = Field(1, ge=1, description="1-based column")


class ValidationIssue(BaseModel):
    severity: Severity = Field(..., description="error|warning")
    message: str = Field(..., description="One-line summary")
    rule: str = Field(..., description="Rule id, e.g. invalid-value-type, layout-property")
    location: Optional[LocationJSON] = Field(None, description="Location of the animated element")


class SuggestionJSON(BaseModel):
    type: str = Field(..., description="Category: shape|performance|accessibility|best-practice")
    message: str
    priority: Priority


class ValidationReport(BaseModel):
    valid: bool = Field(..., description="False iff any error-severity issue is present")
    errors: List[ValidationIssue] = Field(default_factory=list, description="Errors and warnings")
    suggestions: List[SuggestionJSON] = Field(default_factory=list)
    score: int = Field(..., ge=0, le=100, description="Severity-weighted quality score")


class ArtifactMetadata(BaseModel):
    complexity: Complexity
    patterns_used: List[str] = Field(default_factory=list)
    performance_score: int = Field(..., ge=0, le=100)
    suggestions: List[str] = Field(default_factory=list)


class GeneratedArtifact(BaseModel):
    code: str
    imports: List[str] = Field(default_factory=list, description="Import statements present in the code")
    dependencies: List[str] = Field(default_factory=list, description="npm packages the code needs")
    typescript: bool
    source_map: Optional[str] = None
    metadata: ArtifactMetadata


class LimitationJSON(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., alias="construct", description="Construct that lost fidelity, e.g. a hook name")
    message: str
    location: Optional[LocationJSON] = None


class TimelineEntry(BaseModel):
    element: str
    delay: float = Field(..., ge=0.0)
    duration: Optional[float] = None


class OperationResponse(BaseModel):
    success: bool
    elapsed_ms: float = Field(..., ge=0.0)
    framework: Optional[str] = None
    error: Optional[str] = None
    category: Optional[str] = None
    hint: Optional[str] = None


class CodeResponse(OperationResponse):
    code: Optional[str] = None
    artifact: Optional[GeneratedArtifact] = None
    warnings: List[str] = Field(default_factory=list)
    limitations: List[LimitationJSON] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)
    timeline: List[TimelineEntry] = Field(default_factory=list)


class ValidationResponse(OperationResponse):
    report: Optional[ValidationReport] = None
