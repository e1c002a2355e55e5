import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="College",
            fields=[
                ("college_code", models.CharField(max_length=20, primary_key=True, serialize=False)),
                ("college_name", models.CharField(max_length=255)),
                ("city", models.CharField(blank=True, default="", max_length=100)),
            ],
            options={
                "db_table": "college_mapping",
                "ordering": ["college_code"],
            },
        ),
        migrations.CreateModel(
            name="Course",
            fields=[
                ("course_code", models.IntegerField(primary_key=True, serialize=False)),
                ("course_name", models.CharField(max_length=255)),
            ],
            options={
                "db_table": "course_mapping",
                "ordering": ["course_code"],
            },
        ),
        migrations.CreateModel(
            name="ExamPeriod",
            fields=[
                ("exam_period_id", models.AutoField(primary_key=True, serialize=False)),
                ("academic_year", models.CharField(max_length=20)),
                ("semester", models.IntegerField()),
                ("exam_month", models.CharField(max_length=20)),
                ("exam_year", models.IntegerField()),
            ],
            options={
                "db_table": "exam_period",
            },
        ),
        migrations.CreateModel(
            name="Subject",
            fields=[
                ("subject_code", models.CharField(max_length=30, primary_key=True, serialize=False)),
                ("subject_name", models.CharField(max_length=255)),
                (
                    "subject_type",
                    models.CharField(choices=[("THEORY", "Theory"), ("PRACTICAL", "Practical")], max_length=10),
                ),
            ],
            options={
                "db_table": "subject_mapping",
            },
        ),
        migrations.CreateModel(
            name="Student",
            fields=[
                ("registration_no", models.CharField(max_length=30, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("father_name", models.CharField(blank=True, max_length=255, null=True)),
                ("mother_name", models.CharField(blank=True, max_length=255, null=True)),
                ("cgpa", models.FloatField(blank=True, null=True)),
                ("sgpa_1st", models.FloatField(blank=True, null=True)),
                ("remarks", models.CharField(blank=True, max_length=50, null=True)),
                ("overall_branch_rank", models.IntegerField(blank=True, null=True)),
                ("college_branch_rank", models.IntegerField(blank=True, null=True)),
                (
                    "college",
                    models.ForeignKey(
                        db_column="college_code",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="students",
                        to="results.college",
                    ),
                ),
                (
                    "course",
                    models.ForeignKey(
                        db_column="course_code",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="students",
                        to="results.course",
                    ),
                ),
                (
                    "exam_period",
                    models.ForeignKey(
                        db_column="exam_period_id",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="students",
                        to="results.examperiod",
                    ),
                ),
            ],
            options={
                "db_table": "students",
                "indexes": [models.Index(fields=["course", "-cgpa"], name="idx_student_cgpa")],
            },
        ),
        migrations.CreateModel(
            name="TheorySubject",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("subject_code", models.CharField(max_length=30)),
                ("subject_name", models.CharField(blank=True, default="", max_length=255)),
                ("ese", models.IntegerField(blank=True, null=True)),
                ("ia", models.IntegerField(blank=True, null=True)),
                ("total", models.CharField(blank=True, max_length=20, null=True)),
                ("grade", models.CharField(blank=True, max_length=5, null=True)),
                ("credit", models.FloatField(default=0)),
                ("status", models.CharField(default="NORMAL", max_length=10)),
                (
                    "student",
                    models.ForeignKey(
                        db_column="registration_no",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="theory_subjects",
                        to="results.student",
                    ),
                ),
            ],
            options={
                "db_table": "theory_subjects",
                "constraints": [
                    models.UniqueConstraint(fields=("student", "subject_code"), name="uniq_theory_reg_subject"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PracticalSubject",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("subject_code", models.CharField(max_length=30)),
                ("subject_name", models.CharField(blank=True, default="", max_length=255)),
                ("ese", models.IntegerField(blank=True, null=True)),
                ("ia", models.IntegerField(blank=True, null=True)),
                ("total", models.CharField(blank=True, max_length=20, null=True)),
                ("grade", models.CharField(blank=True, max_length=5, null=True)),
                ("credit", models.FloatField(default=0)),
                ("status", models.CharField(default="NORMAL", max_length=10)),
                (
                    "student",
                    models.ForeignKey(
                        db_column="registration_no",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="practical_subjects",
                        to="results.student",
                    ),
                ),
            ],
            options={
                "db_table": "practical_subjects",
                "constraints": [
                    models.UniqueConstraint(fields=("student", "subject_code"), name="uniq_practical_reg_subject"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CollegeTopper",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("registration_no", models.CharField(max_length=30)),
                ("name", models.CharField(max_length=255)),
                ("cgpa", models.FloatField()),
                ("rank_in_college_branch", models.IntegerField()),
                (
                    "college",
                    models.ForeignKey(
                        db_column="college_code",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to="results.college",
                    ),
                ),
                (
                    "course",
                    models.ForeignKey(
                        db_column="course_code",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to="results.course",
                    ),
                ),
            ],
            options={
                "db_table": "college_topper",
                "ordering": ["college", "course", "rank_in_college_branch"],
            },
        ),
        migrations.CreateModel(
            name="BranchTopper",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("registration_no", models.CharField(max_length=30)),
                ("name", models.CharField(max_length=255)),
                ("cgpa", models.FloatField()),
                ("overall_rank", models.IntegerField()),
                (
                    "college",
                    models.ForeignKey(
                        db_column="college_code",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to="results.college",
                    ),
                ),
                (
                    "course",
                    models.ForeignKey(
                        db_column="course_code",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to="results.course",
                    ),
                ),
            ],
            options={
                "db_table": "branch_topper",
                "ordering": ["course", "overall_rank"],
            },
        ),
    ]
