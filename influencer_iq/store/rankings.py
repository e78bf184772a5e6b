# influencer_iq/store/rankings.py
"""
Rankings store: latest analysis per (name, platform).

RankingsStore is the seam the web handlers and the orchestrator depend on;
InMemoryRankingsStore is the process-local table shipped with the app. Data
lives for the lifetime of the process only.
"""
import re
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, List

from influencer_iq.schemas.ranking import AnalysisRecord, RankingSubmission, TrendSeries
from influencer_iq.tools.logger import make_logger

log = make_logger("rankings")


class MissingFieldsError(ValueError):
    """Submission lacks a name or platform."""


@dataclass
class RankingsSnapshot:
    results: List[AnalysisRecord]
    timestamp: int                      # epoch ms


@dataclass
class UpsertResult:
    id: str
    created: bool
    timestamp: int
    count: int

    @property
    def message(self) -> str:
        return "Added new influencer" if self.created else "Updated existing influencer"


def make_record_id(name: str, platform: str) -> str:
    """
    Stable key for a (name, platform) pair:
    'Test  User', 'youtube' -> 'test-user-youtube'
    """
    name_part = re.sub(r"\s+", "-", (name or "").strip().lower())
    platform_part = (platform or "").strip().lower()
    return f"{name_part}-{platform_part}"


def _now_ms() -> int:
    return int(time.time() * 1000)


def _iso_from_ms(ms: int) -> str:
    dt = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return dt.replace(microsecond=0).isoformat().replace("+00:00", "Z")


class RankingsStore(ABC):
    @abstractmethod
    def read_all(self) -> RankingsSnapshot:
        """Records with a known credibility score, highest first."""

    @abstractmethod
    def upsert(self, submission: RankingSubmission) -> UpsertResult:
        """Insert or replace the record for the submission's (name, platform)."""


class InMemoryRankingsStore(RankingsStore):
    def __init__(self, seed: Iterable[AnalysisRecord] = (), clock: Callable[[], int] = _now_ms):
        self._clock = clock
        self._lock = threading.Lock()
        self._records: List[AnalysisRecord] = []
        self._index: dict[str, int] = {}
        for rec in seed:
            self._put(rec)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _put(self, rec: AnalysisRecord) -> bool:
        pos = self._index.get(rec.id)
        if pos is None:
            self._index[rec.id] = len(self._records)
            self._records.append(rec)
            return True
        # Replace in place so ties keep their original order
        self._records[pos] = rec
        return False

    def get(self, record_id: str) -> AnalysisRecord | None:
        with self._lock:
            pos = self._index.get(record_id)
            return self._records[pos] if pos is not None else None

    def read_all(self) -> RankingsSnapshot:
        with self._lock:
            scored = [r for r in self._records if r.credibility_score is not None]
            now = self._clock()
        # sorted() is stable: equal scores stay in insertion order
        ranked = sorted(scored, key=lambda r: r.credibility_score, reverse=True)
        return RankingsSnapshot(results=ranked, timestamp=now)

    def upsert(self, submission: RankingSubmission) -> UpsertResult:
        name = (submission.name or "").strip()
        platform = (submission.platform or "").strip()
        if not name or not platform:
            raise MissingFieldsError("Missing required fields")

        record_id = make_record_id(name, platform)
        with self._lock:
            now = self._clock()
            pos = self._index.get(record_id)
            first_seen = self._records[pos].first_appearance_date if pos is not None else _iso_from_ms(now)

            rec = AnalysisRecord(
                id=record_id,
                name=name,
                platform=platform,
                timestamp=now,
                first_appearance_date=first_seen,
                credibility_score=submission.credibility_score,
                audience_authenticity_score=submission.audience_authenticity_score,
                content_quality_score=submission.content_quality_score,
                brand_alignment_score=submission.brand_alignment_score,
                engagement_score=submission.engagement_score,
                overall_analysis=submission.overall_analysis or "",
                niche=submission.niche or "General",
                audience=submission.audience or "Unknown",
                consistency_score=submission.consistency_score,
                career_length=submission.career_length or "",
                trends_over_time=submission.trends_over_time or TrendSeries(),
            )
            created = self._put(rec)
            count = len(self._records)

        log.info(f"{'Added' if created else 'Updated'} {record_id} credibility={rec.credibility_score} total={count}")
        return UpsertResult(id=record_id, created=created, timestamp=now, count=count)


def seed_records(now_ms: int | None = None) -> List[AnalysisRecord]:
    """Two well-known creators so a fresh leaderboard has something to show."""
    now = now_ms if now_ms is not None else _now_ms()
    return [
        AnalysisRecord(
            id=make_record_id("MrBeast", "YouTube"),
            name="MrBeast",
            platform="YouTube",
            timestamp=now,
            first_appearance_date=_iso_from_ms(now),
            credibility_score=8.0,
            audience_authenticity_score=9.0,
            content_quality_score=9.0,
            brand_alignment_score=7.0,
            engagement_score=9.0,
            overall_analysis=(
                "MrBeast is a social media phenomenon, with a massive following across multiple platforms. "
                "His unique content style, generosity, and philanthropic efforts have earned him a highly "
                "engaged and authentic audience."
            ),
            niche="Entertainment",
            audience="100M+",
            consistency_score=8.5,
            career_length="Established",
        ),
        AnalysisRecord(
            id=make_record_id("Charli D'Amelio", "TikTok"),
            name="Charli D'Amelio",
            platform="TikTok",
            timestamp=now - 100_000,
            first_appearance_date=_iso_from_ms(now - 1_000_000),
            credibility_score=7.0,
            audience_authenticity_score=7.0,
            content_quality_score=7.0,
            brand_alignment_score=8.0,
            engagement_score=8.0,
            overall_analysis=(
                "Charli D'Amelio is one of TikTok's biggest stars known for dance videos and engaging content. "
                "She has built a strong following primarily among Gen Z users."
            ),
            niche="Dance",
            audience="50M+",
            consistency_score=7.5,
            career_length="Rising Star",
        ),
    ]


def make_rankings_store(cfg: dict) -> InMemoryRankingsStore:
    seed = seed_records() if cfg.get("rankings", {}).get("seed_examples", True) else ()
    return InMemoryRankingsStore(seed=seed)
