import copy
import json

import pytest

from results.normalizer import normalize_record
from results.pipeline import load_records
from results.toppers import rebuild_toppers

BASE_RECORD = {
    "exam": {"academic_year": "2024-25", "semester": "1", "exam_month": "November", "exam_year": "2024"},
    "student": {
        "registration_no": "24101103001",
        "name": "ASHA KUMARI",
        "father_name": "RAMESH PRASAD",
        "mother_name": "SUNITA DEVI",
        "college": {"college_code": "103", "college_name": "GOVERNMENT ENGINEERING COLLEGE, VAISHALI"},
        "course": {"course_code": "101", "course_name": "CIVIL ENGINEERING"},
    },
    "performance": {"cgpa": 8.5, "sgpa": 8.5, "remarks": "PASS"},
    "subjects": {
        "theory": [
            {"subject_code": "100101", "subject_name": "MATHEMATICS-I", "ese": 50, "ia": 20, "total": "70",
             "grade": "A", "credit": 4},
            {"subject_code": "100102", "subject_name": "PHYSICS", "ese": "45", "ia": 18, "total": "63",
             "grade": "B", "credit": 3},
        ],
        "practical": [
            {"subject_code": "100107", "subject_name": "PHYSICS LAB", "ese": 28, "ia": 10, "total": "38",
             "grade": "A", "credit": 1},
        ],
    },
}


def make_raw(registration_no="24101103001", cgpa=8.5, college_code="103", course_code="101", **changes):
    """A raw JSONL record with the common fields overridden."""
    raw = copy.deepcopy(BASE_RECORD)
    raw["student"]["registration_no"] = registration_no
    raw["student"]["college"]["college_code"] = college_code
    raw["student"]["course"]["course_code"] = course_code
    raw["performance"]["cgpa"] = cgpa
    for section, values in changes.items():
        if isinstance(values, dict) and isinstance(raw.get(section), dict):
            raw[section].update(values)
        else:
            raw[section] = values
    return raw


def make_record(**kwargs):
    return normalize_record(make_raw(**kwargs))


@pytest.fixture
def raw_record():
    return make_raw


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def jsonl_file(tmp_path):
    def write(rows, name="results.jsonl"):
        path = tmp_path / name
        lines = [row if isinstance(row, str) else json.dumps(row) for row in rows]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return write


@pytest.fixture
def load(db):
    """Rank, load and materialize toppers for a list of canonical records."""

    def run(records, batch_size=None):
        stats = load_records(records, batch_size=batch_size)
        rebuild_toppers()
        return stats

    return run

