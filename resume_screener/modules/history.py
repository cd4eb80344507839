import asyncio
from collections import defaultdict, deque
from typing import Deque, Dict, List, Tuple

from resume_screener.api.schemas import JobScreeningResult, JobScreeningResultIn
from resume_screener.core.config import settings
from resume_screener.core.logger import app_logger


class ScreeningHistoryStore:
    """
    In-process store for finished screening results.
    Keeps at most `limit` results per (user, job role); the oldest are evicted first.
    """

    def __init__(self, limit: int = settings.HISTORY_LIMIT):
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self.limit = limit
        self._results: Dict[Tuple[str, str], Deque[JobScreeningResult]] = defaultdict(deque)
        self._lock = asyncio.Lock()

    async def save(self, data: JobScreeningResultIn) -> JobScreeningResult:
        result = JobScreeningResult(**data.model_dump())
        key = (result.user_id, result.job_description_id)

        async with self._lock:
            history = self._results[key]
            while len(history) >= self.limit:
                evicted = history.popleft()
                app_logger.debug(f"Evicted screening result {evicted.id} for job role {key[1]}")
            history.append(result)

        app_logger.info(f"Saved screening result {result.id} ({len(result.candidates)} candidates) for user {result.user_id}")
        return result

    async def list_for_user(self, user_id: str) -> List[JobScreeningResult]:
        """All of a user's results across job roles, newest first."""
        async with self._lock:
            results = [r for (owner, _), history in self._results.items() if owner == user_id for r in history]
        return sorted(results, key=lambda r: r.created_at, reverse=True)

screening_history = ScreeningHistoryStore()
