from django.urls import include, path, re_path
from rest_framework.routers import DefaultRouter
from results.views import (
    CollegeViewSet, CourseViewSet, student_detail, simulate_rank,
    college_toppers, branch_toppers, home_data, ingest_status
)

router = DefaultRouter()
router.register(r'colleges', CollegeViewSet)
router.register(r'courses', CourseViewSet)

urlpatterns = [
    path('api/', include(router.urls)),
    path('api/home/', home_data, name='api_home'),
    re_path(r'^api/student/(?P<reg_no>[^/]+)/?$', student_detail, name='api_student'),
    re_path(r'^api/simulate/rank/?$', simulate_rank, name='api_simulate_rank'),
    re_path(r'^api/toppers/college/?$', college_toppers, name='api_college_toppers'),
    re_path(r'^api/toppers/branch/?$', branch_toppers, name='api_branch_toppers'),
    path('api/ingest/status/', ingest_status, name='api_ingest_status'),
]
