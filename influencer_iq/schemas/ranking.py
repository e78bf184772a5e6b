# influencer_iq/schemas/ranking.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Any, List, Optional

from influencer_iq.tools.scores import validate_score

SCORE_FIELDS = (
    "credibility_score",
    "audience_authenticity_score",
    "content_quality_score",
    "brand_alignment_score",
    "engagement_score",
)


class TrendSeries(BaseModel):
    dates: List[str] = Field(default_factory=list)
    scores: List[float] = Field(default_factory=list)


class RankingSubmission(BaseModel):
    """Partial record as posted by a client. Only name and platform are required (checked by the store)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    platform: Optional[str] = None
    credibility_score: Optional[float] = None
    audience_authenticity_score: Optional[float] = None
    content_quality_score: Optional[float] = None
    brand_alignment_score: Optional[float] = None
    engagement_score: Optional[float] = None
    overall_analysis: Optional[str] = None
    niche: Optional[str] = None
    audience: Optional[str] = None
    consistency_score: Optional[float] = None
    career_length: Optional[str] = None
    trends_over_time: Optional[TrendSeries] = None

    @field_validator(*SCORE_FIELDS, "consistency_score", mode="before")
    @classmethod
    def _clamp(cls, v: Any):
        return validate_score(v)


class AnalysisRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    platform: str
    timestamp: int                      # last update, epoch ms
    first_appearance_date: str          # first seen, ISO-8601 UTC
    credibility_score: Optional[float] = None
    audience_authenticity_score: Optional[float] = None
    content_quality_score: Optional[float] = None
    brand_alignment_score: Optional[float] = None
    engagement_score: Optional[float] = None
    overall_analysis: str = ""
    niche: str = "General"
    audience: str = "Unknown"
    consistency_score: Optional[float] = None
    career_length: str = ""
    trends_over_time: TrendSeries = Field(default_factory=TrendSeries)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)
