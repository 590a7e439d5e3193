from django.urls import path, include
from rest_framework_nested import routers
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from CoursePlatformApp.api.views import (
    AssignmentViewSet,
    CourseModuleViewSet,
    CourseViewSet,
    MaterialViewSet,
    ModuleViewSet,
    SubmissionViewSet,
)

router = routers.SimpleRouter()
router.register(r"courses", CourseViewSet, basename="course")
router.register(r"modules", ModuleViewSet, basename="module")
router.register(r"materials", MaterialViewSet, basename="material")
router.register(r"assignments", AssignmentViewSet, basename="assignment")

courses_router = routers.NestedSimpleRouter(router, r"courses", lookup="course")
courses_router.register(r"modules", CourseModuleViewSet, basename="course-modules")

assignments_router = routers.NestedSimpleRouter(router, r"assignments", lookup="assignment")
assignments_router.register(r"submissions", SubmissionViewSet, basename="assignment-submissions")

urlpatterns = [
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="docs"),
    path("auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("", include(router.urls)),
    path("", include(courses_router.urls)),
    path("", include(assignments_router.urls)),
]
