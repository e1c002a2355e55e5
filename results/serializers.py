import math

from rest_framework import serializers

from .models import BranchTopper, College, CollegeTopper, Course, ExamPeriod, PracticalSubject, TheorySubject


class CollegeSerializer(serializers.ModelSerializer):
    class Meta:
        model = College
        fields = '__all__'


class CourseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Course
        fields = '__all__'


class ExamPeriodSerializer(serializers.ModelSerializer):
    class Meta:
        model = ExamPeriod
        fields = ('academic_year', 'semester', 'exam_month', 'exam_year')


SUBJECT_FIELDS = ('id', 'registration_no', 'subject_code', 'subject_name', 'ese', 'ia', 'total', 'grade', 'credit', 'status')


class TheorySubjectSerializer(serializers.ModelSerializer):
    registration_no = serializers.CharField(source='student_id', read_only=True)

    class Meta:
        model = TheorySubject
        fields = SUBJECT_FIELDS


class PracticalSubjectSerializer(serializers.ModelSerializer):
    registration_no = serializers.CharField(source='student_id', read_only=True)

    class Meta:
        model = PracticalSubject
        fields = SUBJECT_FIELDS


TOPPER_FIELDS = ('id', 'registration_no', 'name', 'college_code', 'course_code', 'cgpa', 'college_name', 'city', 'course_name')


class TopperSerializer(serializers.ModelSerializer):
    college_code = serializers.CharField(source='college_id', read_only=True)
    course_code = serializers.IntegerField(source='course_id', read_only=True)
    college_name = serializers.CharField(source='college.college_name', read_only=True)
    city = serializers.CharField(source='college.city', read_only=True)
    course_name = serializers.CharField(source='course.course_name', read_only=True)


class CollegeTopperSerializer(TopperSerializer):
    class Meta:
        model = CollegeTopper
        fields = TOPPER_FIELDS + ('rank_in_college_branch',)


class BranchTopperSerializer(TopperSerializer):
    class Meta:
        model = BranchTopper
        fields = TOPPER_FIELDS + ('overall_rank',)


class SimulateRankQuerySerializer(serializers.Serializer):
    college_code = serializers.RegexField(r'^\d+$', max_length=20)
    course_code = serializers.IntegerField()
    sgpa = serializers.FloatField()

    def validate_sgpa(self, value):
        if math.isnan(value) or math.isinf(value):
            raise serializers.ValidationError('A finite number is required.')
        return value
