"""
Turn one raw exam record (a decoded JSONL line) into a canonical ExamRecord.

The raw files come from several scraping generations and disagree on shapes:
course codes as strings or numbers, college names with the city glued on
("NAME, CITY"), registration numbers under different keys, and scores that may
be integers, numeric strings, strings with a note marker ("20*") or absence
sentinels ("AB", "NE"). Everything is repaired here so the ranking and loading
code only ever sees one shape.
"""
import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import RecordParseError, RecordValidationError

REGISTRATION_KEYS = ("registration_no", "reg_no", "regno", "roll_no", "rollno")
SUBJECT_CODE_KEYS = ("subject_code", "course_code", "code")
SUBJECT_NAME_KEYS = ("subject_name", "course_name", "name")

# Registration numbers look like 24101103001: the course code sits at
# digits 3..5 (1-indexed, inclusive), i.e. "101" here.
DEFAULT_COURSE_CODE_POSITIONS = (3, 5)

STATUS_NORMAL = "NORMAL"

# Integer columns are signed 64-bit.
MAX_STORED_INT = 2 ** 63 - 1
MIN_STORED_INT = -(2 ** 63)

_NON_NUMERIC = re.compile(r"[^0-9.]")
_NUMBER = re.compile(r"\d+(?:\.\d+)?")


@dataclass
class ExamInfo:
    academic_year: Optional[str] = None
    semester: Optional[int] = None
    exam_month: Optional[str] = None
    exam_year: Optional[int] = None


@dataclass
class SubjectEntry:
    subject_code: str
    subject_name: str
    ese: Optional[int]
    ia: Optional[int]
    total: Optional[str]
    grade: Optional[str]
    credit: float
    status: str = STATUS_NORMAL


@dataclass
class ExamRecord:
    registration_no: str
    name: str
    father_name: Optional[str]
    mother_name: Optional[str]
    college_code: str
    college_name: str
    city: str
    course_code: int
    course_name: str
    cgpa: Optional[float]
    sgpa: Optional[float]
    remarks: Optional[str]
    exam: ExamInfo = field(default_factory=ExamInfo)
    theory: List[SubjectEntry] = field(default_factory=list)
    practical: List[SubjectEntry] = field(default_factory=list)
    college_rank: Optional[int] = None
    university_rank: Optional[int] = None


def coerce_score(value: Any):
    """
    Coerce a raw score component to a number, or None when there is nothing numeric.

    Policy:
        18 -> 18, 18.0 -> 18, 17.5 -> 17.5, "18" -> 18, " 20* " -> 20,
        "17.5" -> 17.5, "AB" / "NE" / "" -> None, None / bool / containers -> None.

    Strings are reduced to their digits (and decimal point) before parsing, so
    trailing note markers are dropped. Never raises.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value) if value.is_integer() else value
    if not isinstance(value, str):
        return None

    match = _NUMBER.match(_NON_NUMERIC.sub("", value))
    if match is None:
        return None
    number = float(match.group(0))
    if number in (float("inf"), float("-inf")):
        return None
    return int(number) if number.is_integer() else number


def coerce_mark(value: Any) -> Optional[int]:
    """Integer form of coerce_score, used for the ese / ia columns. Marks outside a 64-bit column become None."""
    score = coerce_score(value)
    return None if score is None else _bounded(int(score))


def _bounded(number: int) -> Optional[int]:
    return number if MIN_STORED_INT <= number <= MAX_STORED_INT else None


def sentinel_of(value: Any) -> Optional[str]:
    """Return the upper-cased marker when value is a non-empty string with no digits ("AB", "NE")."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text or any(ch.isdigit() for ch in text):
        return None
    return text.upper()


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def _to_int(value: Any) -> Optional[int]:
    number = _to_float(value)
    return None if number is None else _bounded(int(number))


def _block(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _first_present(data: Dict[str, Any], keys) -> Optional[str]:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def split_college_name(raw_name: Optional[str]) -> Tuple[str, str]:
    """Split "NAME, CITY" on the first comma; no comma means no city."""
    name, sep, city = (raw_name or "").partition(",")
    return name.strip(), city.strip() if sep else ""


def course_code_from_registration(registration_no: str, positions=DEFAULT_COURSE_CODE_POSITIONS) -> Optional[int]:
    start, end = positions
    digits = registration_no[start - 1:end]
    if len(digits) != end - start + 1 or not digits.isdigit():
        return None
    return int(digits)


def normalize_subject(raw: Dict[str, Any]) -> Optional[SubjectEntry]:
    if not isinstance(raw, dict):
        return None
    code = _first_present(raw, SUBJECT_CODE_KEYS)
    if not code:
        return None

    status = STATUS_NORMAL
    for component in ("ese", "ia", "total"):
        marker = sentinel_of(raw.get(component))
        if marker:
            status = marker

    return SubjectEntry(
        subject_code=code,
        subject_name=_first_present(raw, SUBJECT_NAME_KEYS) or "",
        ese=coerce_mark(raw.get("ese")),
        ia=coerce_mark(raw.get("ia")),
        total=_text(raw.get("total")),
        grade=_text(raw.get("grade")),
        credit=_to_float(raw.get("credit")) or 0.0,
        status=status,
    )


def _subject_list(subjects: Any, kind: str) -> List[SubjectEntry]:
    if not isinstance(subjects, dict):
        return []
    entries = subjects.get(kind) or []
    if not isinstance(entries, list):
        return []
    return [entry for entry in (normalize_subject(raw) for raw in entries) if entry is not None]


def normalize_record(raw: Any, course_code_positions=DEFAULT_COURSE_CODE_POSITIONS) -> ExamRecord:
    if not isinstance(raw, dict):
        raise RecordParseError("record is not a JSON object")

    student = _block(raw, "student")
    registration_no = _first_present(student, REGISTRATION_KEYS)
    if not registration_no:
        raise RecordValidationError("missing registration number")

    college = _block(student, "college")
    course = _block(student, "course")

    college_code = _first_present(college, ("college_code",))
    if not college_code:
        raise RecordValidationError(f"{registration_no}: missing college code")
    college_name, city = split_college_name(college.get("college_name"))
    if not city:
        city = _text(college.get("city")) or ""

    course_code = _to_int(course.get("course_code"))
    if course_code is None:
        course_code = course_code_from_registration(registration_no, course_code_positions)
    if course_code is None:
        raise RecordValidationError(f"{registration_no}: no course code and none derivable from registration number")

    performance = _block(raw, "performance")
    exam = _block(raw, "exam")

    return ExamRecord(
        registration_no=registration_no,
        name=_text(student.get("name")) or "",
        father_name=_text(student.get("father_name")),
        mother_name=_text(student.get("mother_name")),
        college_code=college_code,
        college_name=college_name,
        city=city,
        course_code=course_code,
        course_name=_text(course.get("course_name")) or "",
        cgpa=_to_float(performance.get("cgpa")),
        sgpa=_to_float(performance.get("sgpa")),
        remarks=_text(performance.get("remarks")),
        exam=ExamInfo(
            academic_year=_text(exam.get("academic_year")),
            semester=_to_int(exam.get("semester")),
            exam_month=_text(exam.get("exam_month")),
            exam_year=_to_int(exam.get("exam_year")),
        ),
        theory=_subject_list(raw.get("subjects"), "theory"),
        practical=_subject_list(raw.get("subjects"), "practical"),
        college_rank=_to_int(performance.get("college_rank_branchwise")),
        university_rank=_to_int(performance.get("university_rank_branchwise")),
    )


def parse_line(line: str, course_code_positions=DEFAULT_COURSE_CODE_POSITIONS) -> ExamRecord:
    try:
        raw = json.loads(line)
    except ValueError as exc:
        raise RecordParseError(f"invalid JSON: {exc}") from exc
    return normalize_record(raw, course_code_positions)
