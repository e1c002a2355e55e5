import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Optional

from django.conf import settings
from django.db import DatabaseError, transaction

from .exceptions import BatchWriteError
from .models import (
    BranchTopper,
    College,
    CollegeTopper,
    Course,
    ExamPeriod,
    PracticalSubject,
    Student,
    Subject,
    SubjectType,
    TheorySubject,
)
from .normalizer import ExamInfo, ExamRecord, SubjectEntry

logger = logging.getLogger(__name__)

STUDENT_UPDATE_FIELDS = [
    "name",
    "father_name",
    "mother_name",
    "college",
    "course",
    "exam_period",
    "cgpa",
    "sgpa_1st",
    "remarks",
    "overall_branch_rank",
    "college_branch_rank",
]

# Children before parents so protected foreign keys never block the wipe.
RESULT_TABLES = (
    BranchTopper,
    CollegeTopper,
    PracticalSubject,
    TheorySubject,
    Student,
    ExamPeriod,
    Subject,
    Course,
    College,
)


def reset_results_store():
    """Empty every results table. Each load is a full rebuild, never an append."""
    with transaction.atomic():
        for model in RESULT_TABLES:
            deleted, _ = model.objects.all().delete()
            if deleted:
                logger.info("Cleared %d rows from %s", deleted, model._meta.db_table)


@dataclass
class SeenKeys:
    """Reference keys already queued during this run."""

    colleges: set = field(default_factory=set)
    courses: set = field(default_factory=set)
    subjects: set = field(default_factory=set)


@dataclass
class LoadStats:
    students: int = 0
    theory_rows: int = 0
    practical_rows: int = 0
    colleges: int = 0
    courses: int = 0
    subjects: int = 0
    batches: int = 0


class ResultLoader:
    """
    Buffered, transactional writer for canonical exam records.

    Use as a context manager: leaving the block normally flushes the last
    partial batch, leaving it through an exception discards what is buffered.
    Committed batches are never undone.
    """

    def __init__(self, batch_size: Optional[int] = None, exam_defaults: Optional[dict] = None):
        self.batch_size = batch_size or settings.RESULTS_BATCH_SIZE
        self.exam_defaults = exam_defaults or settings.RESULTS_EXAM_PERIOD_DEFAULTS
        self.seen = SeenKeys()
        self.stats = LoadStats()
        self.exam_period = None
        self._exam = None

        self._colleges = []
        self._courses = []
        self._subjects = []
        self._students = OrderedDict()
        self._theory = []
        self._practical = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.flush()
        else:
            logger.warning("Load aborted, discarding %d buffered students", len(self._students))
            self._clear()
        return False

    def add(self, record: ExamRecord) -> None:
        if self._exam is None:
            self._exam = record.exam

        if record.college_code not in self.seen.colleges:
            self.seen.colleges.add(record.college_code)
            self._colleges.append(
                College(college_code=record.college_code, college_name=record.college_name, city=record.city)
            )
        if record.course_code not in self.seen.courses:
            self.seen.courses.add(record.course_code)
            self._courses.append(Course(course_code=record.course_code, course_name=record.course_name))

        # Re-ingesting a registration number replaces the pending row too.
        self._students.pop(record.registration_no, None)
        self._students[record.registration_no] = Student(
            registration_no=record.registration_no,
            name=record.name,
            father_name=record.father_name,
            mother_name=record.mother_name,
            college_id=record.college_code,
            course_id=record.course_code,
            cgpa=record.cgpa,
            sgpa_1st=record.sgpa,
            remarks=record.remarks,
            overall_branch_rank=record.university_rank,
            college_branch_rank=record.college_rank,
        )

        for entry in record.theory:
            self._queue_subject(entry, SubjectType.THEORY)
            self._theory.append(self._result_row(TheorySubject, record.registration_no, entry))
        for entry in record.practical:
            self._queue_subject(entry, SubjectType.PRACTICAL)
            self._practical.append(self._result_row(PracticalSubject, record.registration_no, entry))

        if max(len(self._students), len(self._theory), len(self._practical)) >= self.batch_size:
            self.flush()

    def flush(self) -> None:
        if not (self._students or self._theory or self._practical or self._colleges or self._courses or self._subjects):
            return

        batch_number = self.stats.batches + 1
        rows = len(self._students) + len(self._theory) + len(self._practical)
        period = self.exam_period
        try:
            with transaction.atomic():
                # The exam period commits with the first batch, or not at all.
                if period is None and self._exam is not None:
                    period = self._create_exam_period(self._exam)
                for student in self._students.values():
                    student.exam_period = period
                College.objects.bulk_create(self._colleges, ignore_conflicts=True)
                Course.objects.bulk_create(self._courses, ignore_conflicts=True)
                Subject.objects.bulk_create(self._subjects, ignore_conflicts=True)
                Student.objects.bulk_create(
                    list(self._students.values()),
                    update_conflicts=True,
                    unique_fields=["registration_no"],
                    update_fields=STUDENT_UPDATE_FIELDS,
                )
                TheorySubject.objects.bulk_create(self._theory, ignore_conflicts=True)
                PracticalSubject.objects.bulk_create(self._practical, ignore_conflicts=True)
        except (DatabaseError, OverflowError) as exc:
            logger.error("Batch %d rolled back (%d rows): %s", batch_number, rows, exc)
            self._clear()
            raise BatchWriteError(batch_number, rows, exc) from exc

        self.exam_period = period
        self.stats.batches = batch_number
        self.stats.colleges += len(self._colleges)
        self.stats.courses += len(self._courses)
        self.stats.subjects += len(self._subjects)
        self.stats.students += len(self._students)
        self.stats.theory_rows += len(self._theory)
        self.stats.practical_rows += len(self._practical)
        logger.info("Committed batch %d: %d students, %d subject rows", batch_number, len(self._students),
                    len(self._theory) + len(self._practical))
        self._clear()

    def _create_exam_period(self, exam: ExamInfo) -> ExamPeriod:
        defaults = self.exam_defaults
        period = ExamPeriod.objects.create(
            academic_year=exam.academic_year or defaults["academic_year"],
            semester=exam.semester or defaults["semester"],
            exam_month=exam.exam_month or defaults["exam_month"],
            exam_year=exam.exam_year or defaults["exam_year"],
        )
        logger.info("Exam period: %s", period)
        return period

    def _queue_subject(self, entry: SubjectEntry, subject_type: str) -> None:
        # First-seen type wins when a code shows up as both theory and practical.
        if entry.subject_code in self.seen.subjects:
            return
        self.seen.subjects.add(entry.subject_code)
        self._subjects.append(
            Subject(subject_code=entry.subject_code, subject_name=entry.subject_name, subject_type=subject_type)
        )

    @staticmethod
    def _result_row(model, registration_no: str, entry: SubjectEntry):
        return model(
            student_id=registration_no,
            subject_code=entry.subject_code,
            subject_name=entry.subject_name,
            ese=entry.ese,
            ia=entry.ia,
            total=entry.total,
            grade=entry.grade,
            credit=entry.credit,
            status=entry.status,
        )

    def _clear(self) -> None:
        self._colleges = []
        self._courses = []
        self._subjects = []
        self._students = OrderedDict()
        self._theory = []
        self._practical = []
