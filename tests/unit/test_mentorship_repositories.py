from datetime import timedelta

import numpy as np
import pytest

from mentor_match.features.mentorship.domain import EmbeddingSet, MatchStatus, MeetingFormat, UserRole
from mentor_match.features.mentorship.repository import (
    EmbeddingRepository,
    MatchStateRepository,
    MentorDirectoryRepository,
    RecommendationCacheRepository,
)
from mentor_match.features.mentorship.repository.embedding_repository import (
    format_vector,
    parse_vector,
)
from tests.conftest import NOW

RECO_MODULE = "mentor_match.features.mentorship.repository.recommendation_repository"
MATCH_MODULE = "mentor_match.features.mentorship.repository.match_repository"
MENTOR_MODULE = "mentor_match.features.mentorship.repository.mentor_repository"
EMBEDDING_MODULE = "mentor_match.features.mentorship.repository.embedding_repository"


def _fake_fetch_one(row):
    async def _fetch_one(query, params=None):
        return row

    return _fetch_one


@pytest.mark.asyncio
async def test_cache_read_valid_entry(monkeypatch):
    row = {
        "user_id": "mentee-1",
        "recommended_mentor_ids": ["m1", "m2"],
        "expires_at": NOW + timedelta(seconds=1),
    }
    monkeypatch.setattr(f"{RECO_MODULE}.fetch_one", _fake_fetch_one(row))

    assert await RecommendationCacheRepository.read("mentee-1", now=NOW) == (["m1", "m2"], True)


@pytest.mark.asyncio
async def test_cache_read_expired_at_boundary(monkeypatch):
    row = {"user_id": "mentee-1", "recommended_mentor_ids": ["m1"], "expires_at": NOW}
    monkeypatch.setattr(f"{RECO_MODULE}.fetch_one", _fake_fetch_one(row))

    assert await RecommendationCacheRepository.read("mentee-1", now=NOW) == ([], False)


@pytest.mark.asyncio
async def test_cache_read_null_expiry_is_valid(monkeypatch):
    row = {"user_id": "mentee-1", "recommended_mentor_ids": ["m1"], "expires_at": None}
    monkeypatch.setattr(f"{RECO_MODULE}.fetch_one", _fake_fetch_one(row))

    assert await RecommendationCacheRepository.read("mentee-1", now=NOW) == (["m1"], True)


@pytest.mark.asyncio
async def test_cache_read_missing_row(monkeypatch):
    monkeypatch.setattr(f"{RECO_MODULE}.fetch_one", _fake_fetch_one(None))

    assert await RecommendationCacheRepository.read("mentee-1", now=NOW) == ([], False)


@pytest.mark.asyncio
async def test_cache_upsert_is_single_conflict_statement(monkeypatch):
    captured = {}

    async def fake_execute(query, params=None):
        captured["query"] = query
        captured["params"] = params
        return 1

    monkeypatch.setattr(f"{RECO_MODULE}.execute_query", fake_execute)

    await RecommendationCacheRepository.upsert("mentee-1", ("m2", "m1"), NOW)

    assert "ON CONFLICT (user_id)" in captured["query"]
    assert "DO UPDATE" in captured["query"]
    assert "updated_at" not in captured["query"]
    assert captured["params"] == ("mentee-1", ["m2", "m1"], NOW)


@pytest.mark.asyncio
async def test_accepted_counts_by_mentor(monkeypatch):
    async def fake_fetch_all(query, params=None):
        assert "GROUP BY mentor_user_id" in query
        return [
            {"mentor_user_id": "m1", "accepted_count": 2},
            {"mentor_user_id": "m2", "accepted_count": 1},
        ]

    monkeypatch.setattr(f"{MATCH_MODULE}.fetch_all", fake_fetch_all)

    assert await MatchStateRepository.accepted_counts_by_mentor() == {"m1": 2, "m2": 1}


@pytest.mark.asyncio
async def test_pending_for_mentor_filters_by_status(monkeypatch):
    captured = {}

    async def fake_fetch_all(query, params=None):
        captured["params"] = params
        return [
            {
                "match_id": 4,
                "requestor_user_id": "mentee-1",
                "mentor_user_id": "m1",
                "status": "pending",
                "matched_at": None,
                "message": "hello",
            }
        ]

    monkeypatch.setattr(f"{MATCH_MODULE}.fetch_all", fake_fetch_all)

    records = await MatchStateRepository.pending_for_mentor("m1")

    assert captured["params"] == ("m1", "pending")
    assert records[0].match_id == 4
    assert records[0].status == MatchStatus.PENDING
    assert records[0].message == "hello"


@pytest.mark.asyncio
async def test_create_request_returns_none_on_duplicate(monkeypatch):
    monkeypatch.setattr(f"{MATCH_MODULE}.fetch_one", _fake_fetch_one(None))

    assert await MatchStateRepository.create_request("mentee-1", "m1") is None


@pytest.mark.asyncio
async def test_resolve_pending_reports_missing_match(monkeypatch):
    async def fake_execute(query, params=None):
        return 0

    monkeypatch.setattr(f"{MATCH_MODULE}.execute_query", fake_execute)

    assert await MatchStateRepository.resolve_pending(7, "m1", MatchStatus.DECLINED) is False


@pytest.mark.asyncio
async def test_get_mentee_maps_row(monkeypatch):
    row = {
        "user_id": "mentee-1",
        "status": "active",
        "preferred_meeting_format": "virtual",
        "hours_per_month_commitment": 6,
        "learning_goals": "grow",
        "personal_interests": None,
        "role_model_inspiration": None,
        "hope_to_gain_responses": None,
        "mentor_qualities": ["patient"],
    }
    monkeypatch.setattr(f"{MENTOR_MODULE}.fetch_one", _fake_fetch_one(row))

    mentee = await MentorDirectoryRepository.get_mentee("mentee-1")

    assert mentee.preferred_meeting_format == MeetingFormat.VIRTUAL
    assert mentee.hours_per_month == 6
    assert mentee.hope_to_gain_responses == []
    assert mentee.mentor_qualities == ["patient"]


@pytest.mark.asyncio
async def test_get_mentor_unknown_format_treated_as_unset(monkeypatch):
    row = {
        "user_id": "m1",
        "status": "active",
        "preferred_meeting_format": "carrier-pigeon",
        "hours_per_month_commitment": None,
    }
    monkeypatch.setattr(f"{MENTOR_MODULE}.fetch_one", _fake_fetch_one(row))

    mentor = await MentorDirectoryRepository.get_mentor("m1")

    assert mentor.is_active
    assert mentor.preferred_meeting_format is None


@pytest.mark.asyncio
async def test_embedding_get_many_parses_vectors(monkeypatch):
    async def fake_fetch_all(query, params=None):
        assert params == (["m1", "m2"], "mentor")
        return [
            {
                "user_id": "m1",
                "user_type": "mentor",
                "profile_embedding": "[1,0,0]",
                "why_interested_embedding": None,
                "hope_to_gain_embedding": None,
            }
        ]

    monkeypatch.setattr(f"{EMBEDDING_MODULE}.fetch_all", fake_fetch_all)

    result = await EmbeddingRepository.get_many(["m1", "m2"], UserRole.MENTOR)

    assert list(result) == ["m1"]
    np.testing.assert_array_equal(result["m1"].profile, np.array([1.0, 0.0, 0.0]))
    assert result["m1"].why_interested is None


@pytest.mark.asyncio
async def test_embedding_get_many_skips_query_for_no_ids(monkeypatch):
    async def fail_fetch_all(query, params=None):
        raise AssertionError("should not query")

    monkeypatch.setattr(f"{EMBEDDING_MODULE}.fetch_all", fail_fetch_all)

    assert await EmbeddingRepository.get_many([], UserRole.MENTOR) == {}


@pytest.mark.asyncio
async def test_embedding_upsert_sends_vector_literals(monkeypatch):
    captured = {}

    async def fake_execute(query, params=None):
        captured["params"] = params
        return 1

    monkeypatch.setattr(f"{EMBEDDING_MODULE}.execute_query", fake_execute)

    await EmbeddingRepository.upsert(
        EmbeddingSet(user_id="m1", role=UserRole.MENTOR, profile=np.array([0.5, 1.0]))
    )

    assert captured["params"] == ("m1", "mentor", "[0.5,1.0]", None, None)


def test_vector_text_helpers():
    assert parse_vector(None) is None
    assert parse_vector("[]") is None
    np.testing.assert_array_equal(parse_vector("[1.5,2]"), np.array([1.5, 2.0]))
    assert format_vector([1, 2.5]) == "[1.0,2.5]"
    assert format_vector(None) is None
