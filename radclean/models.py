"""Result types produced by the organ rule modules."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from radclean.store import FindingStore


class Likelihood(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        return _LIKELIHOOD_RANK[self]


_LIKELIHOOD_RANK = {Likelihood.HIGH: 3, Likelihood.MEDIUM: 2, Likelihood.LOW: 1}


class Urgency(str, Enum):
    EMERGENT = "Emergent"
    PRIORITY = "Priority"
    ROUTINE = "Routine"

    @property
    def rank(self) -> int:
        return _URGENCY_RANK[self]


# Lower = more urgent
_URGENCY_RANK = {Urgency.EMERGENT: 0, Urgency.PRIORITY: 1, Urgency.ROUTINE: 2}


class OutputStyle(str, Enum):
    BRIEF = "Brief"
    DETAILED = "Detailed"


class OutputOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    style: OutputStyle = OutputStyle.DETAILED
    include_probability_language: bool = False
    include_recommendations_language: bool = False

    @property
    def detailed(self) -> bool:
        return self.style == OutputStyle.DETAILED


class DdxItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    likelihood: Likelihood
    rationale: list[str] = Field(default_factory=list)
    score: int | None = None


class Recommendation(BaseModel):
    """An advisory line, optionally carrying a state patch the user can apply.

    The patch is data, not a side effect: deriving recommendations never
    touches the store. ``apply`` pushes the patch through the store setters
    so normalizers run as for any other edit.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    urgency: Urgency | None = None
    details: list[str] = Field(default_factory=list)
    patch: dict[str, Any] | None = None

    @property
    def has_action(self) -> bool:
        return bool(self.patch)

    def apply(self, store: FindingStore) -> bool:
        if not self.patch:
            return False
        return store.update(self.patch)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "urgency": self.urgency.value if self.urgency else None,
            "details": list(self.details),
            "action": dict(self.patch) if self.patch else None,
        }


class Feature(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    weight: int


class PatternHint(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    high: bool
    score: int
    bullets: list[str] = Field(default_factory=list)

    @property
    def tag(self) -> str:
        return "High likelihood" if self.high else "Hint"


class DerivedResult(BaseModel):
    """Pure projection of one finding-state snapshot."""

    model_config = ConfigDict(frozen=True)

    module: str
    protocol_summary: str
    context_tags: list[str] = Field(default_factory=list)
    differentials: list[DdxItem] = Field(default_factory=list)
    recommendations: list[Recommendation] = Field(default_factory=list)
    narrative: str
    features: list[Feature] = Field(default_factory=list)
    patterns: list[PatternHint] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "module": self.module,
            "protocol_summary": self.protocol_summary,
            "context_tags": list(self.context_tags),
            "differentials": [
                {
                    "name": d.name,
                    "likelihood": d.likelihood.value,
                    "rationale": list(d.rationale),
                    "score": d.score,
                }
                for d in self.differentials
            ],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "narrative": self.narrative,
            "features": [{"key": f.key, "label": f.label, "weight": f.weight} for f in self.features],
            "patterns": [
                {"title": p.title, "tag": p.tag, "score": p.score, "bullets": list(p.bullets)}
                for p in self.patterns
            ],
        }
