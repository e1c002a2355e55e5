from django.core.cache import cache
from rest_framework import viewsets
from rest_framework.decorators import api_view
from rest_framework.response import Response

from . import services
from .exceptions import InvalidRequest
from .models import College, Course
from .pipeline import INGEST_LOCK_KEY
from .serializers import (
    BranchTopperSerializer,
    CollegeSerializer,
    CollegeTopperSerializer,
    CourseSerializer,
    SimulateRankQuerySerializer,
)


class CollegeViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = College.objects.all()
    serializer_class = CollegeSerializer


class CourseViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Course.objects.all()
    serializer_class = CourseSerializer


def _optional_int(request, name):
    value = request.query_params.get(name)
    if value in (None, ''):
        return None
    try:
        return int(value)
    except ValueError:
        raise InvalidRequest({name: ['A valid integer is required.']})


@api_view(['GET'])
def student_detail(request, reg_no):
    reg_no = reg_no.strip()
    if not reg_no:
        raise InvalidRequest('Registration number is required.')
    return Response(services.get_student_result(reg_no))


@api_view(['GET'])
def simulate_rank(request):
    """
    What rank would this CGPA get? Read-only; stored ranks are not touched.
    """
    query = SimulateRankQuerySerializer(data=request.query_params)
    if not query.is_valid():
        raise InvalidRequest(query.errors)
    params = query.validated_data
    return Response(services.simulate_rank(params['college_code'], params['course_code'], params['sgpa']))


@api_view(['GET'])
def college_toppers(request):
    toppers = services.get_college_toppers(
        college_code=request.query_params.get('college_code'),
        course_code=_optional_int(request, 'course_code'),
    )
    return Response(CollegeTopperSerializer(toppers, many=True).data)


@api_view(['GET'])
def branch_toppers(request):
    toppers = services.get_branch_toppers(
        course_code=_optional_int(request, 'course_code'),
        college_code=request.query_params.get('college_code'),
    )
    return Response(BranchTopperSerializer(toppers, many=True).data)


@api_view(['GET'])
def home_data(request):
    return Response(services.get_summary())


@api_view(['GET'])
def ingest_status(request):
    """
    Check if a load_results run is in progress
    """
    return Response({
        'ingest_in_progress': bool(cache.get(INGEST_LOCK_KEY))
    })
