"""
evaluation.py (schemas)
- Purpose: Audit scores and the evaluation result attached to a page.
- Design: average_score is derived from whatever dimensions EvaluationScores defines,
  so adding or removing a criterion changes the divisor with it.
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field

Score = float


class EvaluationScores(BaseModel):
    model_config = ConfigDict(frozen=True)

    accuracy: Score = Field(ge=0, le=10)
    fluency: Score = Field(ge=0, le=10)
    consistency: Score = Field(ge=0, le=10)
    terminology: Score = Field(ge=0, le=10)
    completeness: Score = Field(ge=0, le=10)
    format_preservation: Score = Field(ge=0, le=10)
    spelling: Score = Field(ge=0, le=10)
    trademark_protection: Score = Field(ge=0, le=10)
    redundancy_removal: Score = Field(ge=0, le=10)

    @classmethod
    def dimensions(cls) -> list[str]:
        return list(cls.model_fields)

    @classmethod
    def zero(cls) -> "EvaluationScores":
        return cls(**{name: 0.0 for name in cls.dimensions()})

    def values(self) -> list[float]:
        return [float(getattr(self, name)) for name in self.dimensions()]


def average_score(scores: EvaluationScores) -> float:
    values = scores.values()
    return round(sum(values) / len(values), 1)


class EvaluationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    scores: EvaluationScores
    reason: str = ""
    suggestions: str = ""
    evaluator_available: bool = True

    @computed_field  # type: ignore[prop-decorator]
    @property
    def average_score(self) -> float:
        return average_score(self.scores)

    @classmethod
    def unavailable(cls, detail: str | None = None) -> "EvaluationResult":
        reason = "Evaluator unavailable"
        if detail:
            reason = f"{reason}: {detail}"
        return cls(scores=EvaluationScores.zero(), reason=reason, suggestions="", evaluator_available=False)

    @property
    def needs_rerun(self) -> bool:
        return self.average_score == 0
