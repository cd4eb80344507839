import json
from dataclasses import dataclass
from typing import List, Tuple, Union

from resume_screener.api.schemas import RankedCandidate

BATCH_ERROR_LABEL = "Batch Processing Error"


@dataclass(frozen=True)
class BatchSuccess:
    batch_index: int
    candidates: Tuple[RankedCandidate, ...]


@dataclass(frozen=True)
class BatchFailure:
    batch_index: int
    error_message: str
    resume_names: Tuple[str, ...] = ()


BatchOutcome = Union[BatchSuccess, BatchFailure]


def outcome_payload(outcome: BatchOutcome) -> Union[list, dict]:
    """JSON-ready value for one outcome: a candidate array, or an error object."""
    if isinstance(outcome, BatchSuccess):
        return [c.model_dump(mode="json", by_alias=True) for c in outcome.candidates]

    return {
        "error": BATCH_ERROR_LABEL,
        "details": outcome.error_message,
        "batchIndex": outcome.batch_index,
        "resumeNames": list(outcome.resume_names),
    }


def encode_outcome(outcome: BatchOutcome) -> bytes:
    """One self-delimited NDJSON record."""
    return (json.dumps(outcome_payload(outcome), ensure_ascii=False) + "\n").encode("utf-8")


def decode_records(body: Union[bytes, str]) -> List[Union[list, dict]]:
    """Parses an NDJSON body back into records, skipping blank lines."""
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    return [json.loads(line) for line in body.splitlines() if line.strip()]
