"""
Pytest fixtures for InfluencerIQ tests.

The completion API is never called: a FakeChat stands in for groq_chat and is
injected into the relay, the orchestrator and the web app.
"""

from __future__ import annotations

import copy
import itertools
import json

import pytest

from influencer_iq.main import DEFAULT_CONFIG
from influencer_iq.store.rankings import InMemoryRankingsStore
from influencer_iq.tools.groq_client import UpstreamError

MODELS = ["model-a", "model-b", "model-c"]


class FakeChat:
    """Records every call; answers per model, failing with HTTP 503 by default."""

    def __init__(self):
        self.outcomes = {}
        self.calls = []

    def answer(self, model: str, content: str) -> None:
        self.outcomes[model] = {
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "model": model,
            "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
        }

    def fail(self, model: str, exc: Exception) -> None:
        self.outcomes[model] = exc

    def raw(self, model: str, body: dict) -> None:
        self.outcomes[model] = body

    @property
    def models_called(self) -> list:
        return [c["model"] for c in self.calls]

    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.get(kwargs["model"])
        if outcome is None:
            raise UpstreamError("HTTP 503 Service Unavailable", status=503, body="over capacity")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def app_cfg():
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    cfg["groq"]["base_url"] = "http://groq.test/openai/v1"
    cfg["groq"]["models"] = list(MODELS)
    cfg["groq"]["api_key"] = "test-key"
    cfg["rankings"]["seed_examples"] = False
    return cfg


@pytest.fixture
def groq_cfg(app_cfg):
    return app_cfg["groq"]


@pytest.fixture
def fake_chat():
    return FakeChat()


@pytest.fixture
def ticking_clock():
    """Epoch-ms clock that advances one second per reading."""
    counter = itertools.count(start=1_700_000_000_000, step=1000)
    return lambda: next(counter)


@pytest.fixture
def store(ticking_clock):
    return InMemoryRankingsStore(clock=ticking_clock)


@pytest.fixture
def analysis_json():
    return json.dumps({
        "credibilityScore": 8.5,
        "audienceAuthenticity": {"score": 8, "analysis": "Mostly genuine followers."},
        "contentQuality": {"score": 9, "analysis": "High production value."},
        "brandAlignmentPotential": {"score": 7, "analysis": "Family friendly."},
        "engagementMetrics": {"score": 9, "analysis": "Very active comments."},
        "overallAnalysis": (
            "A fitness creator on Instagram. Niche: Fitness. Instagram reels drive growth, "
            "with 2.5M followers. Also posts on TikTok."
        ),
    })


@pytest.fixture
def client(app_cfg, fake_chat):
    """FastAPI TestClient around a fresh in-memory store and the fake completion client."""
    from fastapi.testclient import TestClient

    from influencer_iq.web.server import create_app

    app = create_app(app_cfg, store=InMemoryRankingsStore(), chat=fake_chat)
    return TestClient(app)
