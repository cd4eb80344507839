"""
Shared fixtures: resume/JD factories and a scriptable stand-in for the Gemini ranker.
"""
import asyncio

import pytest

from resume_screener.api.schemas import JobDescriptionInput, RankedCandidate, ResumeInput
from resume_screener.modules.documents import text_to_data_uri


def candidate_for(resume: ResumeInput, score: float = 50) -> RankedCandidate:
    return RankedCandidate(
        id=resume.id,
        name=f"Candidate {resume.id}",
        score=score,
        ats_score=70,
        key_skills="Python, FastAPI",
        feedback="Solid backend experience.",
        original_resume_name=resume.name,
        resume_data_uri=resume.data_uri,
    )


class FakeRanker:
    """
    RankingInvoker double. `behaviour(resumes)` returns candidates or raises;
    `delay(resumes)` sets how long the call takes.
    """

    def __init__(self, behaviour=None, delay=None):
        self.behaviour = behaviour or (lambda resumes: [candidate_for(r) for r in resumes])
        self.delay = delay or (lambda resumes: 0)
        self.calls = []
        self.cancelled = 0

    async def rank(self, job_description, resumes):
        self.calls.append([r.id for r in resumes])
        try:
            await asyncio.sleep(self.delay(resumes))
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        return self.behaviour(resumes)


@pytest.fixture
def job_description():
    return JobDescriptionInput(
        name="Backend Engineer",
        data_uri=text_to_data_uri("We need a Python backend engineer with FastAPI experience."),
    )


@pytest.fixture
def make_resumes():
    def _make(count: int):
        return [
            ResumeInput(id=f"r{i}", name=f"resume_{i}.txt", data_uri=text_to_data_uri(f"Resume number {i}"))
            for i in range(count)
        ]
    return _make


@pytest.fixture
def fake_ranker():
    return FakeRanker


@pytest.fixture
def candidate_factory():
    return candidate_for
