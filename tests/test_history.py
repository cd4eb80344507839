import asyncio

import pytest

from resume_screener.api.schemas import JobScreeningResultIn
from resume_screener.modules.history import ScreeningHistoryStore


def result_for(user_id, job_id, candidates=()):
    return JobScreeningResultIn(
        user_id=user_id,
        job_description_id=job_id,
        job_description_name=f"Role {job_id}",
        job_description_data_uri="data:text/plain;base64,",
        candidates=list(candidates),
    )


def test_oldest_results_evicted_beyond_limit():
    store = ScreeningHistoryStore(limit=3)

    async def scenario():
        saved = [await store.save(result_for("u1", "jd-1")) for _ in range(5)]
        return saved, await store.list_for_user("u1")

    saved, listed = asyncio.run(scenario())

    assert {r.id for r in listed} == {r.id for r in saved[2:]}


def test_limit_applies_per_job_role_and_user():
    store = ScreeningHistoryStore(limit=2)

    async def scenario():
        for job in ("jd-1", "jd-2"):
            for _ in range(3):
                await store.save(result_for("u1", job))
        await store.save(result_for("u2", "jd-1"))
        return await store.list_for_user("u1"), await store.list_for_user("u2"), await store.list_for_user("nobody")

    u1, u2, nobody = asyncio.run(scenario())

    assert sorted(r.job_description_id for r in u1) == ["jd-1", "jd-1", "jd-2", "jd-2"]
    assert len(u2) == 1
    assert nobody == []


def test_saved_result_keeps_candidates(make_resumes, candidate_factory):
    store = ScreeningHistoryStore(limit=5)
    candidates = [candidate_factory(r, score=s) for r, s in zip(make_resumes(2), (90, 40))]

    result = asyncio.run(store.save(result_for("u1", "jd-1", candidates)))

    assert [c.score for c in result.candidates] == [90, 40]
    assert result.created_at.tzinfo is not None


def test_invalid_limit():
    with pytest.raises(ValueError):
        ScreeningHistoryStore(limit=0)
