"""
Tests for the text heuristics that enrich an analysis before it is ranked.
"""

from __future__ import annotations

import math

import pytest

from influencer_iq.pipeline.enrich import (
    build_ranking_submission,
    detect_platform,
    extract_audience,
    extract_niche,
    longevity_metrics,
)
from influencer_iq.schemas.analysis import CategoryAssessment, StructuredAnalysis
from influencer_iq.tools.scores import validate_score


def test_selected_platform_wins():
    text = "Huge on Instagram, Instagram, Instagram."
    assert detect_platform(text, "TikTok") == "TikTok"


def test_most_mentioned_platform_is_detected():
    text = "Started on youtube, grew on TIKTOK, and TikTok is now her main channel. tiktok!"
    assert detect_platform(text, "All Platforms") == "TikTok"
    assert detect_platform(text, None) == "TikTok"


def test_platform_tie_goes_to_first_mention():
    assert detect_platform("Twitter threads and Instagram stories.") == "Twitter"


def test_platform_defaults_to_youtube():
    assert detect_platform("No platform is named here.") == "YouTube"
    assert detect_platform("") == "YouTube"


@pytest.mark.parametrize("text,niche", [
    ("Niche: Gaming and tech. Big audience.", "Gaming and tech"),
    ("Her content category: Beauty, with tutorials.", "Beauty"),
    ("Content type: Comedy sketches; mostly short.", "Comedy sketches"),
    ("He primarily focuses on fitness content.", "fitness content"),
    ("She works primarily in fashion\nand travel.", "fashion"),
])
def test_niche_from_cue_words(text, niche):
    assert extract_niche(text, "YouTube") == niche


def test_niche_first_pattern_wins():
    text = "Category: Music. Niche: Hip hop."
    assert extract_niche(text) == "Hip hop"


@pytest.mark.parametrize("platform,niche", [
    ("Instagram", "Lifestyle"),
    ("YouTube", "Entertainment"),
    ("TikTok", "Entertainment"),
    ("Twitter", "Commentary"),
    ("Twitch", "General"),
    (None, "General"),
])
def test_niche_falls_back_to_platform_default(platform, niche):
    assert extract_niche("Nothing useful in here.", platform) == niche


@pytest.mark.parametrize("text,audience", [
    ("She has 12.5M followers worldwide.", "12.5M"),
    ("Followers: 300k and growing.", "300K"),
    ("Audience size: 2m across platforms.", "2M"),
    ("Subscriber count: 45K.", "45K"),
    ("Subscribers base 1.1m", "1.1M"),
])
def test_audience_from_text(text, audience):
    assert extract_audience(text) == audience


def test_audience_unknown_without_number_and_unit():
    assert extract_audience("A large and loyal audience.") == "Unknown"
    assert extract_audience("") == "Unknown"


@pytest.mark.parametrize("given,expected", [
    (7, 7.0),
    ("9.5", 9.5),
    (" 3 ", 3.0),
    (11, 10.0),
    (-1, 0.0),
    (0, 0.0),
    (None, None),
    ("", None),
    ("high", None),
    (False, None),
    ([8], None),
    (math.nan, None),
])
def test_validate_score(given, expected):
    assert validate_score(given) == expected


def test_longevity_metrics():
    assert longevity_metrics(8.0) == (7.2, "New")
    assert longevity_metrics(None) == (None, "New")


def test_build_ranking_submission_derives_fields():
    analysis = StructuredAnalysis(
        credibility_score=8,
        audience_authenticity=CategoryAssessment(score=7, analysis="ok"),
        content_quality=CategoryAssessment(score=12, analysis="great"),
        overall_analysis="Instagram lifestyle creator. Niche: Travel. 3.4M followers on Instagram.",
    )
    sub = build_ranking_submission("  Jane Doe ", analysis, "All Platforms")

    assert sub.name == "Jane Doe"
    assert sub.platform == "Instagram"
    assert sub.credibility_score == 8.0
    assert sub.audience_authenticity_score == 7.0
    assert sub.content_quality_score == 10.0
    assert sub.brand_alignment_score is None
    assert sub.engagement_score is None
    assert sub.niche == "Travel"
    assert sub.audience == "3.4M"
    assert sub.consistency_score == 7.2
    assert sub.career_length == "New"


def test_build_ranking_submission_without_analysis_text():
    sub = build_ranking_submission("Nobody", StructuredAnalysis(), "Twitter")
    assert sub.platform == "Twitter"
    assert sub.credibility_score is None
    assert sub.consistency_score is None
    assert sub.overall_analysis == "No detailed analysis available"
    assert sub.niche == "Commentary"
    assert sub.audience == "Unknown"
