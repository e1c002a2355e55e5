from django.contrib import admin
from .models import College, Course, Subject, Student, TheorySubject, PracticalSubject, CollegeTopper, BranchTopper


@admin.register(College)
class CollegeAdmin(admin.ModelAdmin):
    list_display = ("college_code", "college_name", "city")
    search_fields = ("college_code", "college_name", "city")
    list_filter = ("city",)


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("course_code", "course_name")
    search_fields = ("course_code", "course_name")


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    list_display = ("subject_code", "subject_name", "subject_type")
    search_fields = ("subject_code", "subject_name")
    list_filter = ("subject_type",)


class TheorySubjectInline(admin.TabularInline):
    model = TheorySubject
    extra = 0


class PracticalSubjectInline(admin.TabularInline):
    model = PracticalSubject
    extra = 0


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ("registration_no", "name", "college", "course", "cgpa", "college_branch_rank", "overall_branch_rank", "remarks")
    search_fields = ("registration_no", "name", "college__college_name", "college__college_code")
    list_filter = ("course", "remarks")
    ordering = ("course", "overall_branch_rank")
    inlines = [TheorySubjectInline, PracticalSubjectInline]


@admin.register(CollegeTopper)
class CollegeTopperAdmin(admin.ModelAdmin):
    list_display = ("rank_in_college_branch", "name", "registration_no", "college", "course", "cgpa")
    list_filter = ("course",)
    ordering = ("college", "course", "rank_in_college_branch")


@admin.register(BranchTopper)
class BranchTopperAdmin(admin.ModelAdmin):
    list_display = ("overall_rank", "name", "registration_no", "college", "course", "cgpa")
    list_filter = ("course",)
    ordering = ("course", "overall_rank")
