from collections import OrderedDict, defaultdict
from typing import Callable, Dict, Hashable, Iterable, List, NamedTuple

from .normalizer import ExamRecord


class RankPair(NamedTuple):
    college_rank: int
    university_rank: int


def _cgpa_order(record: ExamRecord):
    # Higher CGPA first; missing CGPA after every real value.
    return (record.cgpa is None, -(record.cgpa or 0.0))


def rank_within(records: List[ExamRecord], group_key: Callable[[ExamRecord], Hashable]) -> Dict[str, int]:
    """
    Rank records inside each group by CGPA, descending.

    The sort is stable and has no secondary key: equal CGPAs keep their input
    order, so the first one seen gets the better rank.
    """
    groups = defaultdict(list)
    for record in records:
        groups[group_key(record)].append(record)

    ranks = {}
    for members in groups.values():
        for position, record in enumerate(sorted(members, key=_cgpa_order), start=1):
            ranks[record.registration_no] = position
    return ranks


def unique_by_registration(records: Iterable[ExamRecord]) -> List[ExamRecord]:
    """Collapse repeated registration numbers: last record wins, first position is kept."""
    latest = OrderedDict()
    for record in records:
        latest[record.registration_no] = record
    return list(latest.values())


def compute_ranks(records: Iterable[ExamRecord]) -> Dict[str, RankPair]:
    students = unique_by_registration(records)
    college = rank_within(students, lambda r: (r.college_code, r.course_code))
    university = rank_within(students, lambda r: r.course_code)
    return {reg: RankPair(college[reg], university[reg]) for reg in college}


def apply_ranks(records: Iterable[ExamRecord], ranks: Dict[str, RankPair]) -> None:
    for record in records:
        pair = ranks[record.registration_no]
        record.college_rank = pair.college_rank
        record.university_rank = pair.university_rank
