from typing import List
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse
from resume_screener.api.schemas import (
    AtsScoreRequest,
    AtsScoreResult,
    CandidateFeedbackRequest,
    CandidateFeedbackResponse,
    ErrorResponse,
    ExtractedJobRole,
    ExtractJobRolesRequest,
    InterviewQuestionsRequest,
    InterviewQuestionsResponse,
    JDInterviewQuestionsRequest,
    JDInterviewQuestionsResponse,
    JobScreeningResult,
    JobScreeningResultIn,
    RankResumesRequest,
)
from resume_screener.core.config import settings
from resume_screener.core.logger import app_logger
from resume_screener.modules.analysis import RankingError, gemini_screener
from resume_screener.modules.history import screening_history
from resume_screener.modules.orchestrator import ParallelBatchOrchestrator

router = APIRouter()

NDJSON_MEDIA_TYPE = "application/json; charset=utf-8"


def error_response(status_code: int, error: str, details: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=error, details=details).model_dump())


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.post("/rank-resumes")
async def rank_resumes(request: Request):
    """
    Ranks resumes against one job description in parallel batches and streams
    one NDJSON record per settled batch: a candidate array, or an error object.
    """
    try:
        payload = RankResumesRequest.model_validate(await request.json())
        orchestrator = ParallelBatchOrchestrator(gemini_screener, timeout=settings.BATCH_TIMEOUT_SECONDS)
        records = orchestrator.stream(payload.job_description, payload.resumes, settings.BATCH_SIZE)
    except Exception as e:
        app_logger.error(f"Error in rank-resumes request setup: {e}")
        return error_response(500, "Failed to process request", str(e))

    app_logger.info(
        f"Ranking {len(payload.resumes)} resumes against '{payload.job_description.name}' "
        f"in batches of {settings.BATCH_SIZE}"
    )
    return StreamingResponse(records, media_type=NDJSON_MEDIA_TYPE)


@router.post("/extract-job-roles", response_model=List[ExtractedJobRole])
async def extract_job_roles(payload: ExtractJobRolesRequest):
    roles = await gemini_screener.extract_job_roles(payload.job_description_documents)
    app_logger.info(f"Extracted {len(roles)} job roles from {len(payload.job_description_documents)} documents")
    return roles


@router.post("/ats-score", response_model=List[AtsScoreResult])
async def ats_score(payload: AtsScoreRequest):
    return await gemini_screener.calculate_ats_scores(payload.resumes)


@router.post("/candidate-feedback", response_model=CandidateFeedbackResponse)
async def candidate_feedback(payload: CandidateFeedbackRequest):
    try:
        feedback = await gemini_screener.generate_candidate_feedback(
            payload.job_description, payload.resume, payload.candidate_name, payload.match_score
        )
    except RankingError as e:
        app_logger.error(f"Feedback generation failed for {payload.candidate_name}: {e}")
        return error_response(502, "Failed to generate feedback", str(e))
    return CandidateFeedbackResponse(feedback=feedback)


@router.post("/interview-questions", response_model=InterviewQuestionsResponse)
async def interview_questions(payload: InterviewQuestionsRequest):
    try:
        questions = await gemini_screener.generate_interview_questions(
            payload.job_description, payload.resume, payload.candidate_name, payload.key_skills
        )
    except RankingError as e:
        app_logger.error(f"Interview question generation failed for {payload.candidate_name}: {e}")
        return error_response(502, "Failed to generate interview questions", str(e))
    return InterviewQuestionsResponse(interview_questions=questions)


@router.post("/jd-interview-questions", response_model=JDInterviewQuestionsResponse)
async def jd_interview_questions(payload: JDInterviewQuestionsRequest):
    try:
        return await gemini_screener.generate_jd_interview_questions(
            payload.job_description, payload.role_title, payload.focus_areas
        )
    except RankingError as e:
        app_logger.error(f"JD interview question generation failed for '{payload.job_description.name}': {e}")
        return error_response(502, "Failed to generate interview questions", str(e))


@router.post("/screening-results", response_model=JobScreeningResult, status_code=201)
async def save_screening_result(payload: JobScreeningResultIn):
    return await screening_history.save(payload)


@router.get("/screening-results/{user_id}", response_model=List[JobScreeningResult])
async def list_screening_results(user_id: str):
    return await screening_history.list_for_user(user_id)
