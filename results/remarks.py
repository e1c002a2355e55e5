# remarks.py
from typing import Iterable, Optional

from .normalizer import SubjectEntry, coerce_score

REMARK_PASS = "PASS"
REMARK_PAPER_BACK = "Paper Back"
REMARK_FAIL = "FAIL"
REMARK_CGPA_FAIL = "Fail"  # CGPA below the minimum, regardless of subjects

MIN_CGPA = 5.0
MIN_ESE = 25
MIN_THEORY_TOTAL = 35
MIN_PRACTICAL_TOTAL = 17.5


def is_failing(subject: SubjectEntry, min_total) -> bool:
    """A subject fails on a low ese or a low total; a missing or non-numeric value counts as failing."""
    total = coerce_score(subject.total)
    if subject.ese is None or total is None:
        return True
    return subject.ese < MIN_ESE or total < min_total


def derive_remarks(cgpa: Optional[float], theory: Iterable[SubjectEntry], practical: Iterable[SubjectEntry]) -> str:
    if cgpa is None or cgpa < MIN_CGPA:
        return REMARK_CGPA_FAIL

    failing = sum(1 for s in theory if is_failing(s, MIN_THEORY_TOTAL))
    failing += sum(1 for s in practical if is_failing(s, MIN_PRACTICAL_TOTAL))

    if failing == 0:
        return REMARK_PASS
    if failing == 1:
        return REMARK_PAPER_BACK
    return REMARK_FAIL
