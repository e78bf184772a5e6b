# influencer_iq/schemas/analysis.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Any, Optional

from influencer_iq.tools.scores import validate_score


class CategoryAssessment(BaseModel):
    score: Optional[float] = None
    analysis: str = ""

    @field_validator("score", mode="before")
    @classmethod
    def _clamp(cls, v: Any):
        return validate_score(v)

    @field_validator("analysis", mode="before")
    @classmethod
    def _text(cls, v: Any):
        return "" if v is None else str(v)


class StructuredAnalysis(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    credibility_score: Optional[float] = None
    audience_authenticity: CategoryAssessment = Field(default_factory=CategoryAssessment)
    content_quality: CategoryAssessment = Field(default_factory=CategoryAssessment)
    brand_alignment_potential: CategoryAssessment = Field(default_factory=CategoryAssessment)
    engagement_metrics: CategoryAssessment = Field(default_factory=CategoryAssessment)
    overall_analysis: str = ""

    @field_validator("credibility_score", mode="before")
    @classmethod
    def _clamp(cls, v: Any):
        return validate_score(v)

    @field_validator("overall_analysis", mode="before")
    @classmethod
    def _text(cls, v: Any):
        return "" if v is None else str(v)

    def categories(self) -> dict:
        return {
            "Audience Authenticity": self.audience_authenticity,
            "Content Quality": self.content_quality,
            "Brand Alignment Potential": self.brand_alignment_potential,
            "Engagement Metrics": self.engagement_metrics,
        }

    def has_scores(self) -> bool:
        return self.credibility_score is not None or any(
            c.score is not None for c in self.categories().values()
        )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)
