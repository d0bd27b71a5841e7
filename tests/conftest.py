from dataclasses import dataclass, field
from datetime import UTC, datetime

import numpy as np
import pytest

from mentor_match.auth.verify import auth_dependency
from mentor_match.features.mentorship.domain import (
    EmbeddingSet,
    MatchRecord,
    MatchStatus,
    Mentee,
    Mentor,
    MentorStatus,
    RecommendationCacheEntry,
    UserRole,
)
from mentor_match.features.mentorship.pipeline.candidates import CandidateSetBuilder
from mentor_match.features.mentorship.pipeline.recommendation import RecommendationService
from mentor_match.features.mentorship.pipeline.scoring import ScoringEngine

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
MENTEE_ID = "mentee-1"


@pytest.fixture
def auth_override():
    def _override():
        return {"sub": MENTEE_ID}

    return _override


@pytest.fixture
def apply_auth_override(auth_override):
    def _apply(app):
        app.dependency_overrides[auth_dependency] = auth_override

    return _apply


def make_mentor(user_id: str, **overrides) -> Mentor:
    values = {
        "status": MentorStatus.ACTIVE,
        "preferred_meeting_format": None,
        "hours_per_month": None,
    }
    values.update(overrides)
    return Mentor(user_id=user_id, **values)


def make_mentee(user_id: str = MENTEE_ID, **overrides) -> Mentee:
    return Mentee(user_id=user_id, **overrides)


def unit_vector(degrees: float) -> np.ndarray:
    radians = np.deg2rad(degrees)
    return np.array([np.cos(radians), np.sin(radians)])


class FakeMentorDirectory:
    def __init__(self):
        self.mentors: dict[str, Mentor] = {}
        self.mentees: dict[str, Mentee] = {}
        self.calls: list[str] = []

    def add_mentor(self, mentor: Mentor) -> Mentor:
        self.mentors[mentor.user_id] = mentor
        return mentor

    def add_mentee(self, mentee: Mentee) -> Mentee:
        self.mentees[mentee.user_id] = mentee
        return mentee

    async def active_mentors(self) -> list[Mentor]:
        self.calls.append("active_mentors")
        return [
            mentor
            for _, mentor in sorted(self.mentors.items())
            if mentor.status == MentorStatus.ACTIVE
        ]

    async def get_mentor(self, user_id: str) -> Mentor | None:
        self.calls.append("get_mentor")
        return self.mentors.get(user_id)

    async def get_mentee(self, user_id: str) -> Mentee | None:
        self.calls.append("get_mentee")
        return self.mentees.get(user_id)


class FakeMatchStore:
    def __init__(self):
        self.records: list[MatchRecord] = []
        self.calls: list[str] = []

    def add(self, mentee_id: str, mentor_id: str, status: MatchStatus) -> MatchRecord:
        record = MatchRecord(
            match_id=len(self.records) + 1,
            requestor_user_id=mentee_id,
            mentor_user_id=mentor_id,
            status=status,
        )
        self.records.append(record)
        return record

    async def matches_for(self, mentee_id: str) -> list[MatchRecord]:
        self.calls.append("matches_for")
        return [r for r in self.records if r.requestor_user_id == mentee_id]

    async def pending_for_mentor(self, mentor_id: str) -> list[MatchRecord]:
        return self._for_mentor(mentor_id, MatchStatus.PENDING)

    async def accepted_for_mentor(self, mentor_id: str) -> list[MatchRecord]:
        return self._for_mentor(mentor_id, MatchStatus.ACCEPTED)

    def _for_mentor(self, mentor_id: str, status: MatchStatus) -> list[MatchRecord]:
        return [r for r in self.records if r.mentor_user_id == mentor_id and r.status == status]

    async def accepted_counts_by_mentor(self) -> dict[str, int]:
        self.calls.append("accepted_counts_by_mentor")
        counts: dict[str, int] = {}
        for record in self.records:
            if record.status == MatchStatus.ACCEPTED:
                counts[record.mentor_user_id] = counts.get(record.mentor_user_id, 0) + 1
        return counts

    async def create_request(self, mentee_id: str, mentor_id: str, message=None) -> int | None:
        for record in self.records:
            if record.requestor_user_id == mentee_id and record.mentor_user_id == mentor_id:
                return None
        record = self.add(mentee_id, mentor_id, MatchStatus.PENDING)
        record.message = message
        return record.match_id

    async def resolve_pending(self, match_id: int, mentor_id: str, status: MatchStatus) -> bool:
        for record in self.records:
            if (
                record.match_id == match_id
                and record.mentor_user_id == mentor_id
                and record.status == MatchStatus.PENDING
            ):
                record.status = status
                return True
        return False


class FakeEmbeddingStore:
    def __init__(self):
        self.sets: dict[tuple[str, UserRole], EmbeddingSet] = {}
        self.get_many_calls = 0

    async def get(self, user_id: str, role: UserRole) -> EmbeddingSet | None:
        return self.sets.get((user_id, role))

    async def get_many(self, user_ids, role: UserRole) -> dict[str, EmbeddingSet]:
        self.get_many_calls += 1
        return {
            user_id: self.sets[(user_id, role)]
            for user_id in user_ids
            if (user_id, role) in self.sets
        }

    async def upsert(self, embeddings: EmbeddingSet) -> None:
        self.sets[(embeddings.user_id, embeddings.role)] = embeddings


class FakeRecommendationCache:
    def __init__(self):
        self.entries: dict[str, RecommendationCacheEntry] = {}
        self.upserts: list[tuple[str, list[str], datetime | None]] = []
        self.fail_writes = False
        self.calls: list[str] = []

    def seed(self, mentee_id: str, mentor_ids: list[str], expires_at: datetime | None):
        self.entries[mentee_id] = RecommendationCacheEntry(mentee_id, list(mentor_ids), expires_at)

    async def read(self, mentee_id: str, now: datetime | None = None):
        self.calls.append("read")
        entry = self.entries.get(mentee_id)
        if entry is None or not entry.is_valid(now or datetime.now(UTC)):
            return [], False
        return list(entry.mentor_ids), True

    async def upsert(self, mentee_id: str, mentor_ids, expires_at) -> None:
        self.calls.append("upsert")
        if self.fail_writes:
            raise RuntimeError("cache unavailable")
        self.upserts.append((mentee_id, list(mentor_ids), expires_at))
        self.seed(mentee_id, mentor_ids, expires_at)


class FakeLockClient:
    def __init__(self, available: bool = True):
        self.available = available
        self.acquired: list[str] = []
        self.released: list[object] = []

    async def acquire_lock(self, key: str, timeout_s: float, wait_s: float):
        if not self.available:
            return None
        self.acquired.append(key)
        return object()

    async def release_lock(self, lock) -> None:
        self.released.append(lock)


@dataclass
class Stores:
    directory: FakeMentorDirectory = field(default_factory=FakeMentorDirectory)
    matches: FakeMatchStore = field(default_factory=FakeMatchStore)
    embeddings: FakeEmbeddingStore = field(default_factory=FakeEmbeddingStore)
    cache: FakeRecommendationCache = field(default_factory=FakeRecommendationCache)
    lock: FakeLockClient = field(default_factory=FakeLockClient)


@pytest.fixture
def stores():
    return Stores()


@pytest.fixture
def candidate_builder(stores):
    return CandidateSetBuilder(
        engine=ScoringEngine(),
        mentors=stores.directory,
        matches=stores.matches,
        embeddings=stores.embeddings,
    )


@pytest.fixture
def recommendation_service(stores, candidate_builder):
    return RecommendationService(
        candidate_builder=candidate_builder,
        mentors=stores.directory,
        matches=stores.matches,
        cache=stores.cache,
        lock_client=stores.lock,
        clock=lambda: NOW,
    )
