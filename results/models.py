# models.py
from django.db import models


class SubjectType(models.TextChoices):
    THEORY = "THEORY", "Theory"
    PRACTICAL = "PRACTICAL", "Practical"


class ExamPeriod(models.Model):
    exam_period_id = models.AutoField(primary_key=True)
    academic_year = models.CharField(max_length=20)
    semester = models.IntegerField()
    exam_month = models.CharField(max_length=20)
    exam_year = models.IntegerField()

    class Meta:
        db_table = "exam_period"

    def __str__(self):
        return f"{self.exam_month} {self.exam_year} (Sem {self.semester}, {self.academic_year})"


class College(models.Model):
    college_code = models.CharField(max_length=20, primary_key=True)
    college_name = models.CharField(max_length=255)
    city = models.CharField(max_length=100, blank=True, default="")

    class Meta:
        db_table = "college_mapping"
        ordering = ["college_code"]

    def __str__(self):
        return f"{self.college_code} - {self.college_name} ({self.city})"


class Course(models.Model):
    course_code = models.IntegerField(primary_key=True)
    course_name = models.CharField(max_length=255)

    class Meta:
        db_table = "course_mapping"
        ordering = ["course_code"]

    def __str__(self):
        return f"{self.course_code} - {self.course_name}"


class Subject(models.Model):
    subject_code = models.CharField(max_length=30, primary_key=True)
    subject_name = models.CharField(max_length=255)
    subject_type = models.CharField(max_length=10, choices=SubjectType.choices)

    class Meta:
        db_table = "subject_mapping"

    def __str__(self):
        return f"{self.subject_code} - {self.subject_name} ({self.subject_type})"


class Student(models.Model):
    registration_no = models.CharField(max_length=30, primary_key=True)
    name = models.CharField(max_length=255)
    father_name = models.CharField(max_length=255, null=True, blank=True)
    mother_name = models.CharField(max_length=255, null=True, blank=True)
    college = models.ForeignKey(College, on_delete=models.PROTECT, db_column="college_code", related_name="students")
    course = models.ForeignKey(Course, on_delete=models.PROTECT, db_column="course_code", related_name="students")
    exam_period = models.ForeignKey(
        ExamPeriod, on_delete=models.PROTECT, db_column="exam_period_id", related_name="students", null=True
    )

    cgpa = models.FloatField(null=True, blank=True)  # Higher is better
    sgpa_1st = models.FloatField(null=True, blank=True)
    remarks = models.CharField(max_length=50, null=True, blank=True)

    overall_branch_rank = models.IntegerField(null=True, blank=True)  # Within course, all colleges
    college_branch_rank = models.IntegerField(null=True, blank=True)  # Within college + course

    class Meta:
        db_table = "students"
        indexes = [
            models.Index(fields=["course", "-cgpa"], name="idx_student_cgpa"),
        ]

    def __str__(self):
        return f"{self.registration_no} - {self.name} (CGPA: {self.cgpa})"


class SubjectResult(models.Model):
    subject_code = models.CharField(max_length=30)
    subject_name = models.CharField(max_length=255, blank=True, default="")
    ese = models.IntegerField(null=True, blank=True)  # End-semester exam
    ia = models.IntegerField(null=True, blank=True)  # Internal assessment
    total = models.CharField(max_length=20, null=True, blank=True)  # Text: may hold "NE", "AB", "20*"
    grade = models.CharField(max_length=5, null=True, blank=True)
    credit = models.FloatField(default=0)
    status = models.CharField(max_length=10, default="NORMAL")  # NORMAL or the sentinel seen ("AB", "NE")

    class Meta:
        abstract = True

    def __str__(self):
        return f"{self.student_id} {self.subject_code}: {self.total} ({self.grade})"


class TheorySubject(SubjectResult):
    student = models.ForeignKey(
        Student, on_delete=models.CASCADE, db_column="registration_no", related_name="theory_subjects"
    )

    class Meta:
        db_table = "theory_subjects"
        constraints = [
            models.UniqueConstraint(fields=["student", "subject_code"], name="uniq_theory_reg_subject"),
        ]


class PracticalSubject(SubjectResult):
    student = models.ForeignKey(
        Student, on_delete=models.CASCADE, db_column="registration_no", related_name="practical_subjects"
    )

    class Meta:
        db_table = "practical_subjects"
        constraints = [
            models.UniqueConstraint(fields=["student", "subject_code"], name="uniq_practical_reg_subject"),
        ]


class CollegeTopper(models.Model):
    registration_no = models.CharField(max_length=30)
    name = models.CharField(max_length=255)
    college = models.ForeignKey(College, on_delete=models.CASCADE, db_column="college_code", related_name="+")
    course = models.ForeignKey(Course, on_delete=models.CASCADE, db_column="course_code", related_name="+")
    cgpa = models.FloatField()
    rank_in_college_branch = models.IntegerField()

    class Meta:
        db_table = "college_topper"
        ordering = ["college", "course", "rank_in_college_branch"]

    def __str__(self):
        return f"#{self.rank_in_college_branch} {self.name} ({self.college_id}/{self.course_id}) - CGPA: {self.cgpa}"


class BranchTopper(models.Model):
    registration_no = models.CharField(max_length=30)
    name = models.CharField(max_length=255)
    college = models.ForeignKey(College, on_delete=models.CASCADE, db_column="college_code", related_name="+")
    course = models.ForeignKey(Course, on_delete=models.CASCADE, db_column="course_code", related_name="+")
    cgpa = models.FloatField()
    overall_rank = models.IntegerField()

    class Meta:
        db_table = "branch_topper"
        ordering = ["course", "overall_rank"]

    def __str__(self):
        return f"#{self.overall_rank} {self.name} ({self.course_id}) - CGPA: {self.cgpa}"
