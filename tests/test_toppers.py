import pytest

from results.models import BranchTopper, CollegeTopper, Student
from results.toppers import rebuild_toppers

pytestmark = pytest.mark.django_db


@pytest.fixture
def cohort(load, record_factory):
    records = [
        record_factory(registration_no="r1", college_code="103", cgpa=8.0),
        record_factory(registration_no="r2", college_code="103", cgpa=9.2),
        record_factory(registration_no="r3", college_code="110", cgpa=9.2),
        record_factory(registration_no="r4", college_code="110", cgpa=None),
        record_factory(registration_no="r5", college_code="110", cgpa=7.5),
        record_factory(registration_no="r6", college_code="103", course_code="105", cgpa=6.0),
    ]
    load(records)
    return records


def test_college_toppers_rank_within_college_and_course(cohort):
    rows = list(
        CollegeTopper.objects.order_by("college_id", "course_id", "rank_in_college_branch")
        .values_list("registration_no", "college_id", "course_id", "rank_in_college_branch")
    )
    assert rows == [
        ("r2", "103", 101, 1),
        ("r1", "103", 101, 2),
        ("r6", "103", 105, 1),
        ("r3", "110", 101, 1),
        ("r5", "110", 101, 2),
    ]


def test_branch_toppers_span_colleges_and_keep_input_order_on_ties(cohort):
    rows = list(
        BranchTopper.objects.filter(course_id=101).order_by("overall_rank")
        .values_list("registration_no", "overall_rank")
    )
    assert rows == [("r2", 1), ("r3", 2), ("r1", 3), ("r5", 4)]


def test_missing_cgpa_is_not_a_topper(cohort):
    assert not CollegeTopper.objects.filter(registration_no="r4").exists()
    assert not BranchTopper.objects.filter(registration_no="r4").exists()
    assert Student.objects.get(registration_no="r4").college_branch_rank == 3


def test_toppers_match_stored_ranks(cohort):
    for topper in CollegeTopper.objects.all():
        student = Student.objects.get(registration_no=topper.registration_no)
        assert topper.rank_in_college_branch == student.college_branch_rank
    for topper in BranchTopper.objects.all():
        student = Student.objects.get(registration_no=topper.registration_no)
        assert topper.overall_rank == student.overall_branch_rank


def test_rebuild_replaces_previous_rows(cohort):
    Student.objects.filter(registration_no="r1").update(cgpa=9.9)

    college_rows, branch_rows = rebuild_toppers()

    assert (college_rows, branch_rows) == (5, 5)
    assert CollegeTopper.objects.count() == 5
    assert CollegeTopper.objects.get(college_id="103", course_id=101, rank_in_college_branch=1).registration_no == "r1"
