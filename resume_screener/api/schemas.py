import uuid
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional

from resume_screener.modules.documents import parse_data_uri


class WireModel(BaseModel):
    """Base for every payload crossing the HTTP boundary (camelCase on the wire)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentInput(WireModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="File name or identifier of the document")
    data_uri: str = Field(..., description="data:<mimetype>;base64,<encoded_data>")

    @field_validator("data_uri")
    @classmethod
    def _check_data_uri(cls, value: str) -> str:
        parse_data_uri(value)
        return value


class JobDescriptionInput(DocumentInput):
    pass


class ResumeInput(DocumentInput):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))


class RankResumesRequest(WireModel):
    job_description: JobDescriptionInput
    resumes: List[ResumeInput]


class RankedCandidate(WireModel):
    id: str
    name: str
    score: float = Field(..., ge=0, le=100, description="Match score against the job description")
    ats_score: float = Field(..., ge=0, le=100)
    key_skills: str
    feedback: str
    original_resume_name: str
    resume_data_uri: str


class ErrorResponse(BaseModel):
    error: str
    details: str


# ── Job roles ──────────────────────────────────────────────────────────

class ExtractJobRolesRequest(WireModel):
    job_description_documents: List[DocumentInput]


class ExtractedJobRole(WireModel):
    id: str
    name: str
    content_data_uri: str
    original_document_name: str


# ── ATS scoring ────────────────────────────────────────────────────────

class AtsScoreRequest(WireModel):
    resumes: List[ResumeInput]


class AtsScoreResult(WireModel):
    resume_id: str
    resume_name: str
    candidate_name: Optional[str] = None
    ats_score: float = Field(..., ge=0, le=100)
    ats_feedback: str


# ── Feedback & interview questions ─────────────────────────────────────

class CandidateFeedbackRequest(WireModel):
    job_description: JobDescriptionInput
    resume: ResumeInput
    candidate_name: str
    match_score: float = Field(..., ge=0, le=100)


class CandidateFeedbackResponse(WireModel):
    feedback: str


class InterviewQuestionsRequest(WireModel):
    job_description: JobDescriptionInput
    resume: ResumeInput
    candidate_name: str
    key_skills: str = ""


class InterviewQuestionsResponse(WireModel):
    interview_questions: List[str]


class JDInterviewQuestionsRequest(WireModel):
    job_description: JobDescriptionInput
    role_title: Optional[str] = None
    focus_areas: Optional[str] = None


class JDInterviewQuestionsResponse(WireModel):
    technical_questions: List[str] = Field(default_factory=list)
    behavioral_questions: List[str] = Field(default_factory=list)
    situational_questions: List[str] = Field(default_factory=list)
    role_specific_questions: List[str] = Field(default_factory=list)


# ── Screening history ──────────────────────────────────────────────────

class JobScreeningResultIn(WireModel):
    user_id: str
    job_description_id: str
    job_description_name: str
    job_description_data_uri: str
    candidates: List[RankedCandidate]


class JobScreeningResult(JobScreeningResultIn):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
