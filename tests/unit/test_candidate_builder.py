import pytest

from mentor_match.features.mentorship.domain import (
    EmbeddingSet,
    MatchStatus,
    MentorStatus,
    UserRole,
)
from mentor_match.features.mentorship.pipeline.candidates import (
    eligible_pool,
    rank_candidates,
    requested_mentor_ids,
)
from tests.conftest import MENTEE_ID, make_mentee, make_mentor, unit_vector


@pytest.mark.asyncio
async def test_build_excludes_self_and_requested_mentors(stores, candidate_builder):
    mentee = stores.directory.add_mentee(make_mentee())
    for mentor_id in ("m1", "m2", "m3", "m4", MENTEE_ID):
        stores.directory.add_mentor(make_mentor(mentor_id))
    stores.directory.add_mentor(make_mentor("m5", status=MentorStatus.APPROVED))
    stores.matches.add(MENTEE_ID, "m1", MatchStatus.PENDING)
    stores.matches.add(MENTEE_ID, "m2", MatchStatus.ACCEPTED)
    stores.matches.add(MENTEE_ID, "m3", MatchStatus.DECLINED)

    candidates = await candidate_builder.build(mentee)

    # Declined mentors may be suggested again; inactive ones never
    assert [c.mentor_id for c in candidates] == ["m3", "m4"]


@pytest.mark.asyncio
async def test_build_uses_accepted_load_across_all_mentees(stores, candidate_builder):
    mentee = stores.directory.add_mentee(make_mentee())
    stores.directory.add_mentor(make_mentor("busy"))
    stores.directory.add_mentor(make_mentor("idle"))
    for other in ("a", "b", "c"):
        stores.matches.add(other, "busy", MatchStatus.ACCEPTED)

    candidates = {c.mentor_id: c for c in await candidate_builder.build(mentee)}

    assert candidates["busy"].active_load == 3
    assert candidates["busy"].component_scores["load"] == pytest.approx(0.5)
    assert candidates["idle"].active_load == 0
    assert candidates["idle"].score > candidates["busy"].score


@pytest.mark.asyncio
async def test_build_fetches_mentor_embeddings_in_one_batch(stores, candidate_builder):
    mentee = stores.directory.add_mentee(make_mentee())
    for i in range(5):
        stores.directory.add_mentor(make_mentor(f"m{i}"))
        stores.embeddings.sets[(f"m{i}", UserRole.MENTOR)] = EmbeddingSet(
            user_id=f"m{i}",
            role=UserRole.MENTOR,
            profile=unit_vector(i * 10),
            why_interested=unit_vector(i * 10),
        )
    stores.embeddings.sets[(MENTEE_ID, UserRole.MENTEE)] = EmbeddingSet(
        user_id=MENTEE_ID,
        role=UserRole.MENTEE,
        profile=unit_vector(0),
        why_interested=unit_vector(0),
        hope_to_gain=unit_vector(0),
    )

    candidates = await candidate_builder.build(mentee)

    assert stores.embeddings.get_many_calls == 1
    assert stores.matches.calls.count("accepted_counts_by_mentor") == 1
    assert all(c.component_scores["semantic"] > 0.7 for c in candidates)
    assert [c.mentor_id for c in rank_candidates(candidates)] == ["m0", "m1", "m2", "m3", "m4"]


@pytest.mark.asyncio
async def test_build_with_empty_pool_returns_nothing(stores, candidate_builder):
    mentee = stores.directory.add_mentee(make_mentee())

    assert await candidate_builder.build(mentee) == []
    assert stores.embeddings.get_many_calls == 0


@pytest.mark.asyncio
async def test_build_honours_extra_exclusions(stores, candidate_builder):
    mentee = stores.directory.add_mentee(make_mentee())
    stores.directory.add_mentor(make_mentor("m1"))
    stores.directory.add_mentor(make_mentor("m2"))

    candidates = await candidate_builder.build(mentee, excluded_ids=["m1"])

    assert [c.mentor_id for c in candidates] == ["m2"]


def test_requested_mentor_ids_keeps_first_occurrence(stores):
    stores.matches.add(MENTEE_ID, "m2", MatchStatus.PENDING)
    stores.matches.add(MENTEE_ID, "m1", MatchStatus.DECLINED)
    stores.matches.add(MENTEE_ID, "m1", MatchStatus.ACCEPTED)
    stores.matches.add(MENTEE_ID, "m2", MatchStatus.ACCEPTED)

    assert requested_mentor_ids(stores.matches.records) == ["m2", "m1"]


def test_eligible_pool_preserves_order():
    mentors = [make_mentor("c"), make_mentor("a"), make_mentor("b")]

    pool = eligible_pool("a", mentors, ["b"])

    assert [m.user_id for m in pool] == ["c"]
