# influencer_iq/pipeline/analyze_influencer.py
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from influencer_iq.pipeline.enrich import ALL_PLATFORMS, build_ranking_submission
from influencer_iq.pipeline.relay import (
    RelayDegraded,
    RelayInputError,
    RelayResult,
    unstructured_analysis,
)
from influencer_iq.schemas.analysis import StructuredAnalysis
from influencer_iq.schemas.ranking import AnalysisRecord, RankingSubmission
from influencer_iq.store.rankings import RankingsStore, UpsertResult
from influencer_iq.tools.logger import make_logger

log = make_logger("analyze")

ANALYSIS_PROMPT = """Analyze the social media influencer "{name}" across major platforms like Instagram, YouTube, TikTok, and Twitter.
If you don't have specific information about this influencer, please state that clearly and provide general information about what makes influencers credible in their niche.

For influencers you do have information about, please provide:
1. Credibility score (1-10)
2. Audience authenticity assessment
3. Content quality evaluation
4. Brand alignment potential
5. Engagement metrics analysis

Also estimate their niche category, primary platform, and audience size based on your analysis."""

RelayFn = Callable[[str, bool], RelayResult]


@dataclass
class InfluencerReport:
    name: str
    analysis: StructuredAnalysis
    status: str                         # "ok" | "degraded"
    submission: RankingSubmission
    saved: Optional[UpsertResult] = None
    save_error: Optional[str] = None
    rankings: List[AnalysisRecord] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return self.status == "degraded"


def build_analysis_prompt(name: str) -> str:
    return ANALYSIS_PROMPT.format(name=name.strip())


def analyze_influencer(
    name: str,
    relay: RelayFn,
    store: RankingsStore,
    platform: Optional[str] = ALL_PLATFORMS,
) -> InfluencerReport:
    """
    Search flow: prompt the model for a structured assessment, derive
    platform/niche/audience from its text, save the result and re-read rankings.
    """
    if not isinstance(name, str) or not name.strip():
        raise ValueError("Influencer name is required")
    name = name.strip()

    result = relay(build_analysis_prompt(name), True)
    if isinstance(result, RelayInputError):
        raise ValueError(result.reason)

    analysis = result.analysis or unstructured_analysis(result.content)
    status = "degraded" if isinstance(result, RelayDegraded) else "ok"
    if status == "degraded":
        log.warning(f"Analysis for {name!r} degraded to fallback ({len(result.failures)} model failures)")

    submission = build_ranking_submission(name, analysis, platform)
    report = InfluencerReport(name=name, analysis=analysis, status=status, submission=submission)

    try:
        report.saved = store.upsert(submission)
    except Exception as e:
        # Rankings are re-read below whether or not the write went through
        report.save_error = f"{type(e).__name__}: {e}"
        log.error(f"Failed to save analysis for {name!r}: {report.save_error}")

    report.rankings = store.read_all().results
    return report
