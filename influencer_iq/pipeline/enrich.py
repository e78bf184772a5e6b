# influencer_iq/pipeline/enrich.py
import re
from collections import Counter
from typing import Optional, Tuple

from influencer_iq.schemas.analysis import StructuredAnalysis
from influencer_iq.schemas.ranking import RankingSubmission
from influencer_iq.tools.scores import validate_score

ALL_PLATFORMS = "All Platforms"
PLATFORMS = ["YouTube", "Instagram", "TikTok", "Twitter"]
DEFAULT_PLATFORM = "YouTube"

PLATFORM_NICHES = {
    "Instagram": "Lifestyle",
    "YouTube": "Entertainment",
    "TikTok": "Entertainment",
    "Twitter": "Commentary",
}

# A label runs until the next sentence/clause break
_LABEL = r"([^.,:;\n]+)"

NICHE_PATTERNS = [
    re.compile(r"niche:?\s*" + _LABEL, re.I),
    re.compile(r"category:?\s*" + _LABEL, re.I),
    re.compile(r"content\s*(?:type|category):?\s*" + _LABEL, re.I),
    re.compile(r"primarily\s*(?:in|focuses\s*on):?\s*" + _LABEL, re.I),
]

_SIZE = r"([0-9.]+\s*[mk])"

AUDIENCE_PATTERNS = [
    re.compile(_SIZE + r"\s*followers", re.I),
    re.compile(r"followers:?\s*" + _SIZE, re.I),
    re.compile(r"audience\s*(?:size|of):?\s*" + _SIZE, re.I),
    re.compile(r"subscribers?\s*(?:base|count):?\s*" + _SIZE, re.I),
]

_PLATFORM_RE = re.compile(r"(" + "|".join(PLATFORMS) + r")", re.I)
_CANONICAL = {p.lower(): p for p in PLATFORMS}


def detect_platform(text: str, selected: Optional[str] = None) -> str:
    """
    Platform the analysis is mostly about.
    A platform the user picked wins; otherwise the most mentioned one
    (first mentioned on a tie), otherwise DEFAULT_PLATFORM.
    """
    if selected and selected.strip() and selected.strip() != ALL_PLATFORMS:
        return selected.strip()
    mentions = [_CANONICAL[m.lower()] for m in _PLATFORM_RE.findall(text or "")]
    if not mentions:
        return DEFAULT_PLATFORM
    # Counter.most_common keeps first-seen order among equal counts
    return Counter(mentions).most_common(1)[0][0]


def extract_niche(text: str, platform: Optional[str] = None) -> str:
    for pattern in NICHE_PATTERNS:
        m = pattern.search(text or "")
        if m and m.group(1).strip():
            return m.group(1).strip()
    return PLATFORM_NICHES.get(platform or "", "General")


def extract_audience(text: str) -> str:
    for pattern in AUDIENCE_PATTERNS:
        m = pattern.search(text or "")
        if m and m.group(1).strip():
            return m.group(1).strip().upper()
    return "Unknown"


def longevity_metrics(credibility: Optional[float]) -> Tuple[Optional[float], str]:
    """(consistency_score, career_length) until real history exists."""
    consistency = round(credibility * 0.9, 1) if credibility is not None else None
    return consistency, "New"


def build_ranking_submission(
    name: str,
    analysis: StructuredAnalysis,
    selected_platform: Optional[str] = None,
) -> RankingSubmission:
    text = analysis.overall_analysis or ""
    platform = detect_platform(text, selected_platform)
    credibility = validate_score(analysis.credibility_score)
    consistency, career_length = longevity_metrics(credibility)

    return RankingSubmission(
        name=name.strip(),
        platform=platform,
        credibility_score=credibility,
        audience_authenticity_score=validate_score(analysis.audience_authenticity.score),
        content_quality_score=validate_score(analysis.content_quality.score),
        brand_alignment_score=validate_score(analysis.brand_alignment_potential.score),
        engagement_score=validate_score(analysis.engagement_metrics.score),
        overall_analysis=text or "No detailed analysis available",
        niche=extract_niche(text, platform),
        audience=extract_audience(text),
        consistency_score=consistency,
        career_length=career_length,
    )
