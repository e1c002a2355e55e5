"""
Ingestion phases: parse every line, rank the full set, rebuild the store and
load in batches. Toppers are regenerated afterwards (see toppers.py).

Ranking needs the whole file, so records are held in memory between the
parse and load phases. Writes are strictly sequential.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from django.conf import settings

from .exceptions import RecordParseError, RecordValidationError
from .loader import LoadStats, ResultLoader, reset_results_store
from .normalizer import ExamRecord, parse_line
from .ranking import apply_ranks, compute_ranks
from .remarks import derive_remarks

logger = logging.getLogger(__name__)

INGEST_LOCK_KEY = "ingest_in_progress"


@dataclass
class IngestStats:
    lines: int = 0
    records: int = 0
    parse_errors: int = 0
    validation_errors: int = 0
    load: LoadStats = field(default_factory=LoadStats)
    college_toppers: int = 0
    branch_toppers: int = 0

    @property
    def skipped(self):
        return self.parse_errors + self.validation_errors


def parse_records(
    lines: Iterable,
    stats: IngestStats,
    course_code_positions=None,
    recompute_remarks: bool = False,
    derive_missing_remarks: Optional[bool] = None,
) -> List[ExamRecord]:
    """Normalize every non-blank line; bad lines are logged with their line number and counted."""
    positions = course_code_positions or settings.RESULTS_COURSE_CODE_POSITIONS
    if derive_missing_remarks is None:
        derive_missing_remarks = settings.RESULTS_DERIVE_MISSING_REMARKS

    records = []
    for line_no, line in enumerate(lines, start=1):
        if not line or not line.strip():
            continue
        stats.lines += 1
        try:
            record = parse_line(line, positions)
        except RecordParseError as exc:
            stats.parse_errors += 1
            logger.warning("Line %d skipped (parse error): %s", line_no, exc)
            continue
        except RecordValidationError as exc:
            stats.validation_errors += 1
            logger.warning("Line %d skipped (invalid record): %s", line_no, exc)
            continue

        if recompute_remarks or (derive_missing_remarks and record.remarks is None):
            record.remarks = derive_remarks(record.cgpa, record.theory, record.practical)
        records.append(record)

    stats.records = len(records)
    return records


def load_records(records: List[ExamRecord], batch_size: Optional[int] = None) -> LoadStats:
    apply_ranks(records, compute_ranks(records))

    reset_results_store()
    with ResultLoader(batch_size=batch_size) as loader:
        for record in records:
            loader.add(record)
    return loader.stats

