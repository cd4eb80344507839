from dataclasses import dataclass
from typing import List, Sequence, Tuple

from resume_screener.api.schemas import ResumeInput


@dataclass(frozen=True)
class Batch:
    index: int
    resumes: Tuple[ResumeInput, ...]

    @property
    def resume_names(self) -> List[str]:
        return [r.name for r in self.resumes]

    def __len__(self) -> int:
        return len(self.resumes)


def partition_resumes(resumes: Sequence[ResumeInput], batch_size: int) -> List[Batch]:
    """
    Splits resumes into contiguous batches of at most `batch_size`, keeping input order.
    The last batch holds the remainder; an empty input yields no batches.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be a positive integer, got {batch_size}")

    return [
        Batch(index=i, resumes=tuple(resumes[start:start + batch_size]))
        for i, start in enumerate(range(0, len(resumes), batch_size))
    ]
