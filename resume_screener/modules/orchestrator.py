import asyncio
import time
from typing import AsyncIterator, List, Optional, Protocol, Sequence

from resume_screener.api.schemas import JobDescriptionInput, RankedCandidate, ResumeInput
from resume_screener.core.logger import app_logger
from resume_screener.modules.batching import Batch, partition_resumes
from resume_screener.modules.outcomes import BatchFailure, BatchOutcome, BatchSuccess
from resume_screener.modules.streaming import StreamingResponseWriter


class RankingInvoker(Protocol):
    async def rank(self, job_description: JobDescriptionInput, resumes: Sequence[ResumeInput]) -> List[RankedCandidate]: ...


class OutcomeSink(Protocol):
    async def emit(self, outcome: BatchOutcome) -> None: ...


class ParallelBatchOrchestrator:
    def __init__(self, invoker: RankingInvoker, timeout: Optional[float] = None):
        self.invoker = invoker
        self.timeout = timeout or None

    async def run(self, job_description: JobDescriptionInput, batches: Sequence[Batch], sink: OutcomeSink) -> List[BatchOutcome]:
        """
        Ranks every batch concurrently and hands each outcome to `sink` as soon as
        that batch settles. Returns once all batches have settled; a failing batch
        becomes a BatchFailure and never interrupts its siblings.
        """
        if not batches:
            return []

        app_logger.info(f"Dispatching {len(batches)} ranking batches for JD '{job_description.name}'")
        started = time.perf_counter()

        tasks = [asyncio.create_task(self._run_batch(job_description, batch, sink)) for batch in batches]
        settled = await asyncio.gather(*tasks)

        outcomes = [o for o in settled if o is not None]
        failures = sum(isinstance(o, BatchFailure) for o in outcomes)
        app_logger.info(
            f"All {len(batches)} batches settled in {time.perf_counter() - started:.2f}s "
            f"({len(outcomes) - failures} ranked, {failures} failed, {len(batches) - len(outcomes)} empty)"
        )
        return outcomes

    async def _run_batch(self, job_description: JobDescriptionInput, batch: Batch, sink: OutcomeSink) -> Optional[BatchOutcome]:
        try:
            candidates = await asyncio.wait_for(
                self.invoker.rank(job_description, list(batch.resumes)),
                timeout=self.timeout,
            )
        except Exception as e:
            # wait_for's own timeout carries no message; invoker-raised timeouts keep theirs.
            if self.timeout and isinstance(e, asyncio.TimeoutError) and not str(e):
                message = f"Ranking timed out after {self.timeout:g} seconds"
            else:
                message = str(e) or e.__class__.__name__
            app_logger.error(f"Batch {batch.index} failed ({', '.join(batch.resume_names)}): {message}")
            outcome = BatchFailure(
                batch_index=batch.index,
                error_message=message,
                resume_names=tuple(batch.resume_names),
            )
        else:
            if not candidates:
                app_logger.info(f"Batch {batch.index} returned no candidates; nothing to report")
                return None
            outcome = BatchSuccess(batch_index=batch.index, candidates=tuple(candidates))

        await sink.emit(outcome)
        return outcome

    def stream(self, job_description: JobDescriptionInput, resumes: Sequence[ResumeInput], batch_size: int) -> AsyncIterator[bytes]:
        """
        Partitions eagerly (so bad input fails before any byte is sent) and returns
        an async iterator of NDJSON records in completion order.
        """
        batches = partition_resumes(resumes, batch_size)
        return self._stream_batches(job_description, batches)

    async def _stream_batches(self, job_description: JobDescriptionInput, batches: List[Batch]) -> AsyncIterator[bytes]:
        writer = StreamingResponseWriter()

        async def produce():
            try:
                await self.run(job_description, batches, writer)
            finally:
                await writer.close()

        producer = asyncio.create_task(produce())
        try:
            async for record in writer.records():
                yield record
            await producer
        finally:
            if not producer.done():
                app_logger.warning("Stream consumer went away; cancelling in-flight ranking batches")
                producer.cancel()
