import logging

from django.db import transaction
from django.db.models import F, Window
from django.db.models.functions import RowNumber

from .models import BranchTopper, CollegeTopper, Student

logger = logging.getLogger(__name__)

INSERT_BATCH = 1000


def _ranked_students(partition_by, tie_break):
    # Persisted ranks encode input order, so ties come out the same way they were ranked at load time.
    return (
        Student.objects.filter(cgpa__isnull=False)
        .annotate(
            position=Window(
                expression=RowNumber(),
                partition_by=partition_by,
                order_by=[F("cgpa").desc(), F(tie_break).asc()],
            )
        )
        .values("registration_no", "name", "college_id", "course_id", "cgpa", "position")
    )


def _materialize(model, rank_field, rows):
    model.objects.all().delete()
    toppers = [
        model(
            registration_no=row["registration_no"],
            name=row["name"],
            college_id=row["college_id"],
            course_id=row["course_id"],
            cgpa=row["cgpa"],
            **{rank_field: row["position"]},
        )
        for row in rows
    ]
    model.objects.bulk_create(toppers, batch_size=INSERT_BATCH)
    return len(toppers)


@transaction.atomic
def rebuild_toppers():
    """
    Regenerate both leaderboards from the students table.

    Must run after the loader's final flush; both tables are wiped and refilled.
    """
    college_rows = _materialize(
        CollegeTopper,
        "rank_in_college_branch",
        _ranked_students([F("college_id"), F("course_id")], "college_branch_rank"),
    )
    branch_rows = _materialize(
        BranchTopper,
        "overall_rank",
        _ranked_students([F("course_id")], "overall_branch_rank"),
    )
    logger.info("Toppers rebuilt: %d college rows, %d branch rows", college_rows, branch_rows)
    return college_rows, branch_rows
