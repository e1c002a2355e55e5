# services.py
from django.conf import settings
from django.db.models import Count, Max

from .exceptions import StudentNotFound
from .models import BranchTopper, College, CollegeTopper, Course, ExamPeriod, PracticalSubject, Student, TheorySubject
from .normalizer import coerce_score
from .serializers import ExamPeriodSerializer, PracticalSubjectSerializer, TheorySubjectSerializer


def total_value(total):
    """Numeric value of a stored total; sentinels ("NE", "AB") and blanks count as 0, the lowest mark."""
    value = coerce_score(total)
    return 0 if value is None else value


def cohort_subject_maxima(model, college_code, course_code):
    """
    Highest total per subject code among students of one college and course.
    """
    maxima = {}
    rows = model.objects.filter(
        student__college_id=college_code,
        student__course_id=course_code,
    ).values_list('subject_code', 'total')
    for subject_code, total in rows:
        value = total_value(total)
        if subject_code not in maxima or value > maxima[subject_code]:
            maxima[subject_code] = value
    return [{'subject_code': code, 'max_total': maxima[code]} for code in sorted(maxima)]


def get_student_result(registration_no):
    student = (
        Student.objects.select_related('college', 'course', 'exam_period')
        .filter(registration_no=registration_no)
        .first()
    )
    if student is None:
        raise StudentNotFound()

    theory = TheorySubject.objects.filter(student=student).order_by('id')
    practical = PracticalSubject.objects.filter(student=student).order_by('id')

    return {
        'university': settings.RESULTS_UNIVERSITY_NAME,
        'exam': ExamPeriodSerializer(student.exam_period).data if student.exam_period else None,
        'student': {
            'name': student.name,
            'registration_no': student.registration_no,
            'father_name': student.father_name,
            'mother_name': student.mother_name,
            'college': {
                'college_code': student.college.college_code,
                'college_name': student.college.college_name,
                'city': student.college.city,
            },
            'course': {
                'course_code': student.course.course_code,
                'course_name': student.course.course_name,
            },
        },
        'performance': {
            'cgpa': student.cgpa,
            'sgpa_1st': student.sgpa_1st,
            'remarks': student.remarks,
            'overall_branch_rank': student.overall_branch_rank,
            'college_branch_rank': student.college_branch_rank,
        },
        'subjects': {
            'theory': TheorySubjectSerializer(theory, many=True).data,
            'practical': PracticalSubjectSerializer(practical, many=True).data,
        },
        'toppers': {
            'theory': cohort_subject_maxima(TheorySubject, student.college_id, student.course_id),
            'practical': cohort_subject_maxima(PracticalSubject, student.college_id, student.course_id),
        },
    }


def simulate_rank(college_code, course_code, cgpa):
    """
    Rank a hypothetical CGPA against the stored students without changing anything.

    Rank is 1 + the number of students strictly above the candidate, so ties
    share the better position.
    """
    higher = Student.objects.filter(course_id=course_code, cgpa__gt=cgpa)
    return {
        'simulated_college_rank': higher.filter(college_id=college_code).count() + 1,
        'simulated_overall_rank': higher.count() + 1,
    }


def get_college_toppers(college_code=None, course_code=None, limit=None):
    queryset = CollegeTopper.objects.select_related('college', 'course')
    if college_code:
        queryset = queryset.filter(college_id=college_code)
    if course_code is not None:
        queryset = queryset.filter(course_id=course_code)
    limit = limit or settings.RESULTS_TOPPER_LIMIT
    return queryset.order_by('college_id', 'course_id', 'rank_in_college_branch')[:limit]


def get_branch_toppers(course_code=None, college_code=None, limit=None):
    queryset = BranchTopper.objects.select_related('college', 'course')
    if course_code is not None:
        queryset = queryset.filter(course_id=course_code)
    if college_code:
        queryset = queryset.filter(college_id=college_code)
    limit = limit or settings.RESULTS_TOPPER_LIMIT
    return queryset.order_by('course_id', 'overall_rank')[:limit]


def get_summary():
    period = ExamPeriod.objects.order_by('exam_period_id').first()
    stats = Student.objects.aggregate(total=Count('registration_no'), best_cgpa=Max('cgpa'))
    return {
        'university': settings.RESULTS_UNIVERSITY_NAME,
        'exam': ExamPeriodSerializer(period).data if period else None,
        'total_students': stats['total'],
        'total_colleges': College.objects.count(),
        'total_courses': Course.objects.count(),
        'best_cgpa': stats['best_cgpa'],
    }
