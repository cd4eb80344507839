import asyncio
import json

import pytest

from resume_screener.modules.outcomes import (
    BATCH_ERROR_LABEL,
    BatchFailure,
    BatchSuccess,
    decode_records,
    encode_outcome,
)
from resume_screener.modules.streaming import StreamingResponseWriter


def test_success_encodes_as_single_line_array(make_resumes, candidate_factory):
    resumes = make_resumes(2)
    outcome = BatchSuccess(batch_index=0, candidates=tuple(candidate_factory(r) for r in resumes))

    line = encode_outcome(outcome)

    assert line.endswith(b"\n") and line.count(b"\n") == 1
    record = json.loads(line)
    assert isinstance(record, list)
    assert record[0]["id"] == "r0"
    assert record[0]["atsScore"] == 70
    assert record[0]["originalResumeName"] == "resume_0.txt"
    assert "resumeDataUri" in record[0]


def test_failure_encodes_as_error_object():
    outcome = BatchFailure(batch_index=3, error_message="quota\nexceeded", resume_names=("a.pdf", "b.pdf"))

    record = json.loads(encode_outcome(outcome))

    assert record == {
        "error": BATCH_ERROR_LABEL,
        "details": "quota\nexceeded",
        "batchIndex": 3,
        "resumeNames": ["a.pdf", "b.pdf"],
    }


def test_writer_yields_in_arrival_order_and_stops_on_close():
    async def scenario():
        writer = StreamingResponseWriter()
        await writer.emit(BatchFailure(batch_index=1, error_message="boom"))
        await writer.emit(BatchSuccess(batch_index=0, candidates=()))
        await writer.close()
        return [line async for line in writer.records()], writer

    lines, writer = asyncio.run(scenario())

    records = decode_records(b"".join(lines))
    assert records[0]["batchIndex"] == 1
    assert records[1] == []
    assert writer.records_written == 2


def test_emit_after_close_is_an_error():
    async def scenario():
        writer = StreamingResponseWriter()
        await writer.close()
        await writer.close()
        assert writer.closed
        await writer.emit(BatchFailure(batch_index=0, error_message="late"))

    with pytest.raises(RuntimeError):
        asyncio.run(scenario())


def test_concurrent_producers_never_interleave_records():
    async def scenario():
        writer = StreamingResponseWriter()

        async def produce(i):
            await asyncio.sleep(0.001 * (i % 3))
            await writer.emit(BatchFailure(batch_index=i, error_message="x" * 5000))

        async def producers():
            await asyncio.gather(*(produce(i) for i in range(20)))
            await writer.close()

        task = asyncio.create_task(producers())
        lines = [line async for line in writer.records()]
        await task
        return lines

    lines = asyncio.run(scenario())

    records = [json.loads(line) for line in lines]
    assert sorted(r["batchIndex"] for r in records) == list(range(20))
