import asyncio
import json
import re
import uuid
from typing import List, Optional, Sequence, Union

from google import genai
from google.genai import types
from pydantic import ValidationError

from resume_screener.api.schemas import (
    AtsScoreResult,
    DocumentInput,
    ExtractedJobRole,
    JDInterviewQuestionsResponse,
    JobDescriptionInput,
    RankedCandidate,
    ResumeInput,
)
from resume_screener.core.config import settings
from resume_screener.core.logger import app_logger
from resume_screener.modules.documents import parse_data_uri, text_to_data_uri

UNTITLED_ROLE = "Untitled Job Role"


class RankingError(RuntimeError):
    """The model call failed or its output could not be turned into results."""


def _document_part(document: DocumentInput) -> types.Part:
    mime_type, payload = parse_data_uri(document.data_uri)
    return types.Part.from_bytes(data=payload, mime_type=mime_type)


def _clamp_score(value) -> float:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    return min(100.0, max(0.0, score))


def _clean_title(title: Optional[str]) -> str:
    return re.sub(r"[^\w\s.-]", "", title or "").strip()


class GeminiScreener:
    """
    All AI operations of the screener, backed by one async Gemini client.
    `rank` is the RankingInvoker used by the bulk ranking pipeline.
    """

    def __init__(self, model_id: str = settings.LLM_MODEL_ID, api_key: Optional[str] = settings.GOOGLE_API_KEY):
        self.model_id = model_id
        self.api_key = api_key
        self._client: Optional[genai.Client] = None

    @property
    def client(self) -> genai.Client:
        # Created on first use so the service boots without credentials.
        if self._client is None:
            if not self.api_key:
                raise RankingError("GOOGLE_API_KEY is not configured")
            app_logger.info(f"Initialising Gemini client for model {self.model_id}")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def _generate_json(self, parts: List[types.Part], temperature: float) -> Union[dict, list]:
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model_id,
                contents=parts,
                config=types.GenerateContentConfig(
                    temperature=temperature,
                    response_mime_type="application/json",
                ),
            )
        except RankingError:
            raise
        except Exception as e:
            raise RankingError(f"Gemini request failed: {e}") from e

        text = response.text or ""
        app_logger.debug(f"RAW MODEL OUTPUT:\n{text}")
        return self._clean_and_parse_json(text)

    async def rank(self, job_description: JobDescriptionInput, resumes: Sequence[ResumeInput]) -> List[RankedCandidate]:
        """
        Ranks one batch of resumes against a job description in a single model call.
        Every resume in the batch must come back ranked, otherwise the batch fails.
        """
        if not resumes:
            return []

        parts = [
            types.Part.from_text(text=(
                "You are an expert HR assistant ranking candidate resumes against one job description.\n"
                "Job Description:"
            )),
            _document_part(job_description),
        ]
        for i, resume in enumerate(resumes):
            parts.append(types.Part.from_text(text=f"Resume {i} (original file name: {resume.name}):"))
            parts.append(_document_part(resume))

        parts.append(types.Part.from_text(text=f"""
For EACH of the {len(resumes)} resumes above return one entry with:
- resumeIndex: the number of the resume as labelled above
- name: the candidate's full name, extracted from the resume
- score: match score 0-100 against THIS job description
- atsScore: ATS compatibility score 0-100 (formatting, keywords, clarity)
- keySkills: comma-separated skills matching the job description
- feedback: strengths, weaknesses and improvement suggestions; mention how to raise a low ATS score

Return ONLY JSON: {{"candidates": [{{"resumeIndex": 0, "name": "", "score": 0, "atsScore": 0, "keySkills": "", "feedback": ""}}]}}
"""))

        parsed = await self._generate_json(parts, settings.RANKING_TEMPERATURE)

        entries = parsed.get("candidates", []) if isinstance(parsed, dict) else parsed
        by_index = {}
        for entry in entries if isinstance(entries, list) else []:
            if not isinstance(entry, dict):
                continue
            try:
                idx = int(entry.get("resumeIndex"))
            except (TypeError, ValueError):
                continue
            if 0 <= idx < len(resumes):
                by_index.setdefault(idx, entry)

        missing = [r.name for i, r in enumerate(resumes) if i not in by_index]
        if missing:
            raise RankingError(f"AI returned no ranking for: {', '.join(missing)}")

        candidates = []
        for i, resume in enumerate(resumes):
            entry = by_index[i]
            candidates.append(RankedCandidate(
                id=resume.id,
                name=str(entry.get("name") or resume.name),
                score=_clamp_score(entry.get("score")),
                ats_score=_clamp_score(entry.get("atsScore")),
                key_skills=str(entry.get("keySkills") or ""),
                feedback=str(entry.get("feedback") or ""),
                original_resume_name=resume.name,
                resume_data_uri=resume.data_uri,
            ))

        candidates.sort(key=lambda c: c.score, reverse=True)
        return candidates

    async def extract_job_roles(self, documents: Sequence[DocumentInput]) -> List[ExtractedJobRole]:
        """Splits each uploaded JD document into its individual job roles, concurrently."""
        per_document = await asyncio.gather(*(self._segment_document(doc) for doc in documents))
        return [role for roles in per_document for role in roles]

    async def _segment_document(self, document: DocumentInput) -> List[ExtractedJobRole]:
        fallback = [ExtractedJobRole(
            id=str(uuid.uuid4()),
            name=UNTITLED_ROLE,
            content_data_uri=document.data_uri,
            original_document_name=document.name,
        )]

        parts = [
            types.Part.from_text(text=(
                "You are an expert HR document parser. Identify every distinct job description in the "
                f"document below (original file: {document.name})."
            )),
            _document_part(document),
            types.Part.from_text(text=(
                "Return ONLY a JSON array, one item per job description: "
                '[{"title": "<concise job title>", "content": "<full text of that job description>"}]. '
                "Return [] if the document is not a job description."
            )),
        ]

        try:
            segments = await self._generate_json(parts, settings.EXTRACTION_TEMPERATURE)
        except RankingError as e:
            app_logger.error(f"Job role segmentation failed for {document.name}: {e}")
            return fallback

        if isinstance(segments, dict):
            segments = segments.get("roles") or segments.get("jobDescriptions") or []
        segments = [s for s in segments if isinstance(s, dict)] if isinstance(segments, list) else []
        if not segments:
            app_logger.warning(f"No job roles found in {document.name}; using the whole document")
            return fallback

        roles = []
        for i, segment in enumerate(segments):
            title = segment.get("title")
            name = _clean_title(title if isinstance(title, str) else None)
            if not name:
                name = f"Job Role {i + 1}" if len(segments) > 1 else UNTITLED_ROLE
            content = str(segment.get("content") or "No content extracted for this job description.")
            roles.append(ExtractedJobRole(
                id=str(uuid.uuid4()),
                name=name,
                content_data_uri=text_to_data_uri(content),
                original_document_name=document.name,
            ))
        return roles

    async def calculate_ats_scores(self, resumes: Sequence[ResumeInput]) -> List[AtsScoreResult]:
        return list(await asyncio.gather(*(self.calculate_ats_score(r) for r in resumes)))

    async def calculate_ats_score(self, resume: ResumeInput) -> AtsScoreResult:
        parts = [
            types.Part.from_text(text=(
                "You are an expert ATS (Applicant Tracking System) compatibility checker. Assess how easily "
                f"typical ATS software would parse this resume (original file name: {resume.name}). "
                "Do not judge fitness for any particular job."
            )),
            _document_part(resume),
            types.Part.from_text(text=(
                'Return ONLY JSON: {"candidateName": "<full name or empty>", "atsScore": 0-100, '
                '"atsFeedback": "<2-3 strengths and 2-3 concrete improvements>"}'
            )),
        ]

        try:
            parsed = await self._generate_json(parts, settings.ATS_TEMPERATURE)
            if not isinstance(parsed, dict) or "atsScore" not in parsed:
                raise RankingError("AI did not return an output for ATS score calculation.")
        except RankingError as e:
            app_logger.error(f"ATS scoring failed for {resume.name}: {e}")
            return AtsScoreResult(
                resume_id=resume.id,
                resume_name=resume.name,
                ats_score=0,
                ats_feedback=f"Error processing resume for ATS score: {e}. Please ensure the file is a standard text-based document.",
            )

        return AtsScoreResult(
            resume_id=resume.id,
            resume_name=resume.name,
            candidate_name=(str(parsed["candidateName"]) if parsed.get("candidateName") else None),
            ats_score=_clamp_score(parsed.get("atsScore")),
            ats_feedback=str(parsed.get("atsFeedback") or ""),
        )

    async def generate_candidate_feedback(self, job_description: JobDescriptionInput, resume: ResumeInput,
                                          candidate_name: str, match_score: float) -> str:
        parts = [
            types.Part.from_text(text=(
                "You are a resume feedback generator for recruiters. Explain the candidate's strengths and "
                f"weaknesses and give concise, actionable suggestions.\nCandidate Name: {candidate_name}\n"
                f"Match Score: {match_score:g}\nResume:"
            )),
            _document_part(resume),
            types.Part.from_text(text="Job Description:"),
            _document_part(job_description),
            types.Part.from_text(text='Return ONLY JSON: {"feedback": "<text>"}'),
        ]
        parsed = await self._generate_json(parts, settings.RANKING_TEMPERATURE)
        if not isinstance(parsed, dict) or not parsed.get("feedback"):
            raise RankingError("AI did not return feedback")
        return str(parsed["feedback"])

    async def generate_interview_questions(self, job_description: JobDescriptionInput, resume: ResumeInput,
                                           candidate_name: str, key_skills: str) -> List[str]:
        parts = [
            types.Part.from_text(text=(
                "You are an expert hiring assistant. Generate 3-5 interview questions probing this candidate's "
                "experience and skills against the job requirements, technical and behavioral.\n"
                f"Candidate Name: {candidate_name}\nKey Skills: {key_skills}\nJob Description:"
            )),
            _document_part(job_description),
            types.Part.from_text(text="Resume:"),
            _document_part(resume),
            types.Part.from_text(text='Return ONLY JSON: {"interviewQuestions": ["..."]}'),
        ]
        parsed = await self._generate_json(parts, settings.RANKING_TEMPERATURE)
        questions = parsed.get("interviewQuestions") if isinstance(parsed, dict) else parsed
        if not isinstance(questions, list) or not questions:
            raise RankingError("AI did not return interview questions")
        return [str(q) for q in questions]

    async def generate_jd_interview_questions(self, job_description: JobDescriptionInput,
                                              role_title: Optional[str] = None,
                                              focus_areas: Optional[str] = None) -> JDInterviewQuestionsResponse:
        intro = "You are an expert hiring assistant. Generate interview questions from the job description below"
        if role_title:
            intro += f" for the role of '{role_title}'"
        parts = [types.Part.from_text(text=intro + "."), _document_part(job_description)]
        if focus_areas:
            parts.append(types.Part.from_text(text=f"Pay special attention to: {focus_areas}."))
        parts.append(types.Part.from_text(text=(
            "Generate 3-5 distinct questions per category; use an empty array where a category does not apply. "
            'Return ONLY JSON: {"technicalQuestions": [], "behavioralQuestions": [], '
            '"situationalQuestions": [], "roleSpecificQuestions": []}'
        )))

        parsed = await self._generate_json(parts, settings.RANKING_TEMPERATURE)
        if not isinstance(parsed, dict):
            raise RankingError("AI returned an unexpected question format")
        try:
            return JDInterviewQuestionsResponse.model_validate(parsed)
        except ValidationError as e:
            raise RankingError(f"AI returned malformed interview questions: {e}") from e

    def _clean_and_parse_json(self, text: str) -> Union[dict, list]:
        """
        Parses model output that may carry code fences or stray prose around
        a JSON object or array.
        """
        text = text.replace("```json", "").replace("```", "").strip()

        try:
            return json.loads(text)
        except json.JSONDecodeError:
            pass

        match = re.search(r'(\{[\s\S]*\}|\[[\s\S]*\])', text)
        if not match:
            app_logger.error(f"No JSON found. Raw output: {text[:50]}...")
            raise RankingError("AI response did not contain JSON")

        json_str = match.group(0)
        try:
            return json.loads(json_str)
        except json.JSONDecodeError:
            json_str = re.sub(r',\s*}', '}', json_str)
            json_str = re.sub(r',\s*]', ']', json_str)
            try:
                return json.loads(json_str)
            except json.JSONDecodeError as e:
                app_logger.error("Final JSON decode failed.")
                raise RankingError(f"AI response was not valid JSON: {e}") from e

gemini_screener = GeminiScreener()
