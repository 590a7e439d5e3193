"""REST API views for courses, lifecycle actions, the content tree, assignments and submissions."""

from django.shortcuts import get_object_or_404
from django.db.models import Prefetch

from rest_framework import mixins, serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.request import Request

from drf_spectacular.utils import (
    extend_schema,
    extend_schema_view,
    OpenApiResponse,
    OpenApiParameter,
)

from CoursePlatformApp.api.mixins import PaginationMixin
from CoursePlatformApp.api.throttles import SubmissionRateThrottle
from CoursePlatformApp.core.choices import MoveDirection
from CoursePlatformApp.core.permissions import IsAdminRole, IsCourseAuthor
from CoursePlatformApp.courses.models import Course, Material, Module
from CoursePlatformApp.domain.services import (
    content_service,
    course_service,
    grading_service,
    lifecycle_service,
    progress_service,
)
from CoursePlatformApp.learning.models import Assignment, Submission
from CoursePlatformApp.api.serializers import (
    AssignmentReadSerializer,
    AssignmentWriteSerializer,
    CourseReadSerializer,
    CourseTransitionSerializer,
    CourseWriteSerializer,
    EnrollmentSerializer,
    GradeWriteSerializer,
    MaterialReadSerializer,
    MaterialUpdateSerializer,
    MaterialWriteSerializer,
    ModuleReadSerializer,
    ModuleUpdateSerializer,
    ModuleWriteSerializer,
    PendingCountSerializer,
    RejectSerializer,
    SubmissionReadSerializer,
    SubmissionWriteSerializer,
    VersionSerializer,
)

AUTH_RESPONSES = {
    401: OpenApiResponse(description="Authentication required."),
    403: OpenApiResponse(description="Forbidden"),
    404: OpenApiResponse(description="Not Found"),
}

VALIDATION_RESPONSE = {
    400: OpenApiResponse(description="Validation failed."),
}

CONFLICT_RESPONSE = {
    409: OpenApiResponse(description="Concurrent modification; reload and retry."),
}

TRANSITION_RESPONSES = {
    200: CourseReadSerializer,
    422: OpenApiResponse(description="No transition from the current status."),
    **AUTH_RESPONSES,
    **CONFLICT_RESPONSE,
}


def _expected_version(request: Request) -> int | None:
    ser = VersionSerializer(data=request.data)
    ser.is_valid(raise_exception=True)
    return ser.validated_data.get("version")


# ---------- Courses ----------
@extend_schema_view(
    list=extend_schema(
        tags=["Courses"],
        responses={200: CourseReadSerializer(many=True), **AUTH_RESPONSES},
    ),
    retrieve=extend_schema(
        tags=["Courses"],
        responses={200: CourseReadSerializer, **AUTH_RESPONSES},
    ),
    create=extend_schema(
        tags=["Courses"],
        request=CourseWriteSerializer,
        responses={201: CourseReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["tutor", "admin"], "ownership": "owner-on-create"}},
    ),
    update=extend_schema(
        tags=["Courses"],
        request=CourseWriteSerializer,
        responses={200: CourseReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE, **CONFLICT_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["owner", "tutor", "admin"]}},
    ),
    partial_update=extend_schema(
        tags=["Courses"],
        request=CourseWriteSerializer,
        responses={200: CourseReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE, **CONFLICT_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["owner", "tutor", "admin"]}},
    ),
    destroy=extend_schema(
        tags=["Courses"],
        responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES, **CONFLICT_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["owner", "admin"]}},
    ),
    submit_review=extend_schema(
        tags=["Lifecycle"], request=VersionSerializer, responses=TRANSITION_RESPONSES,
        extensions={"x-permissions": {"required_roles": ["owner"]}},
    ),
    publish=extend_schema(
        tags=["Lifecycle"], request=VersionSerializer, responses=TRANSITION_RESPONSES,
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    reject=extend_schema(
        tags=["Lifecycle"], request=RejectSerializer, responses=TRANSITION_RESPONSES,
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    resubmit=extend_schema(
        tags=["Lifecycle"], request=VersionSerializer, responses=TRANSITION_RESPONSES,
        description="Return a rejected course to DRAFT for editing.",
        extensions={"x-permissions": {"required_roles": ["owner"]}},
    ),
    archive=extend_schema(
        tags=["Lifecycle"], request=VersionSerializer, responses=TRANSITION_RESPONSES,
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    transitions=extend_schema(
        tags=["Lifecycle"],
        responses={200: CourseTransitionSerializer(many=True), **AUTH_RESPONSES},
    ),
    pending=extend_schema(
        tags=["Lifecycle"],
        responses={200: CourseReadSerializer(many=True), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    pending_count=extend_schema(
        tags=["Lifecycle"],
        responses={200: PendingCountSerializer, **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    enroll=extend_schema(
        tags=["Enrollment"],
        request=None,
        responses={201: EnrollmentSerializer, **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["student"], "ownership": "self"}},
    ),
)
class CourseViewSet(PaginationMixin, viewsets.ModelViewSet):
    """Course catalog CRUD and lifecycle events."""
    lookup_value_regex = r"\d+"
    serializer_class = CourseWriteSerializer
    permission_classes = [IsAuthenticated]

    def get_serializer_class(self):
        if self.action in ("list", "retrieve", "pending"):
            return CourseReadSerializer
        if self.action == "transitions":
            return CourseTransitionSerializer
        return CourseWriteSerializer

    def get_permissions(self) -> list:
        """Respect `permission_classes` declared on an @action, otherwise fall back to action rules."""
        method = getattr(self, self.action, None) if self.action else None
        pcs = getattr(method, "kwargs", {}).get("permission_classes")
        if pcs:
            return [p() if isinstance(p, type) else p for p in pcs]
        if self.action in ("list", "retrieve"):
            return [AllowAny()]
        if self.action == "create":
            return [IsAuthenticated(), IsCourseAuthor()]
        return [IsAuthenticated()]

    def get_queryset(self):
        """Return course queryset filtered by visibility."""
        return Course.objects.visible_to(self.request.user).select_related("creator", "tutor", "category")

    def list(self, request: Request, *args, **kwargs) -> Response:
        """List courses visible to the requesting user."""
        qs = self.get_queryset().order_by("id")
        return self.paginate_and_respond(qs, CourseReadSerializer)

    def create(self, request: Request, *args, **kwargs) -> Response:
        """Create a course in DRAFT and return read representation."""
        write_ser = self.get_serializer(data=request.data)
        write_ser.is_valid(raise_exception=True)
        course = course_service.create_course(request.user, write_ser.validated_data)
        read_ser = CourseReadSerializer(course, context={"request": request})
        headers = self.get_success_headers(read_ser.data)
        return Response(read_ser.data, status=status.HTTP_201_CREATED, headers=headers)

    def partial_update(self, request: Request, pk: int | None = None) -> Response:
        """Update catalog fields; status can only change through lifecycle actions."""
        course = self.get_object()
        ser = CourseWriteSerializer(course, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        updated = course_service.update_course(
            request.user, course.pk, ser.validated_data, expected_version=_expected_version(request)
        )
        return Response(CourseReadSerializer(updated).data)

    def update(self, request: Request, *args, **kwargs) -> Response:
        """Alias to partial_update for full update."""
        return self.partial_update(request, *args, **kwargs)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        """Delete a course (owner or admin)."""
        course = self.get_object()
        course_service.delete_course(request.user, course.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="submit-review")
    def submit_review(self, request: Request, pk: int | None = None) -> Response:
        course = lifecycle_service.submit_for_review(request.user, pk, expected_version=_expected_version(request))
        return Response(CourseReadSerializer(course).data)

    @action(detail=True, methods=["put"], url_path="publish")
    def publish(self, request: Request, pk: int | None = None) -> Response:
        course = lifecycle_service.publish(request.user, pk, expected_version=_expected_version(request))
        return Response(CourseReadSerializer(course).data)

    @action(detail=True, methods=["put"], url_path="reject")
    def reject(self, request: Request, pk: int | None = None) -> Response:
        """Reject a course under review; the optional reason is stored on the course."""
        ser = RejectSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        course = lifecycle_service.reject(
            request.user,
            pk,
            reason=ser.validated_data.get("reason"),
            expected_version=ser.validated_data.get("version"),
        )
        return Response(CourseReadSerializer(course).data)

    @action(detail=True, methods=["post"], url_path="resubmit")
    def resubmit(self, request: Request, pk: int | None = None) -> Response:
        course = lifecycle_service.edit_and_resubmit(request.user, pk, expected_version=_expected_version(request))
        return Response(CourseReadSerializer(course).data)

    @action(detail=True, methods=["put"], url_path="archive")
    def archive(self, request: Request, pk: int | None = None) -> Response:
        course = lifecycle_service.archive(request.user, pk, expected_version=_expected_version(request))
        return Response(CourseReadSerializer(course).data)

    @action(detail=True, methods=["get"], url_path="transitions")
    def transitions(self, request: Request, pk: int | None = None) -> Response:
        """Lifecycle audit log of the course, oldest first."""
        course = self.get_object()
        return self.paginate_and_respond(lifecycle_service.transition_history(course), CourseTransitionSerializer)

    @action(detail=False, methods=["get"], url_path="pending", permission_classes=[IsAuthenticated, IsAdminRole])
    def pending(self, request: Request) -> Response:
        """Courses awaiting review."""
        qs = Course.objects.pending_review().select_related("creator", "tutor", "category").order_by("updated_at", "id")
        return self.paginate_and_respond(qs, CourseReadSerializer)

    @action(
        detail=False, methods=["get"], url_path="pending/count", permission_classes=[IsAuthenticated, IsAdminRole]
    )
    def pending_count(self, request: Request) -> Response:
        return Response({"count": lifecycle_service.pending_review_count()})

    @action(detail=True, methods=["post"], url_path="enroll")
    def enroll(self, request: Request, pk: int | None = None) -> Response:
        """Enroll the requesting student (idempotent)."""
        enrollment = course_service.enroll(request.user, pk)
        return Response(EnrollmentSerializer(enrollment).data, status=status.HTTP_201_CREATED)


# ---------- Course content tree ----------
@extend_schema(
    tags=["Modules"],
    parameters=[OpenApiParameter("course_pk", int, OpenApiParameter.PATH)],
    responses={200: ModuleReadSerializer(many=True), **AUTH_RESPONSES},
)
class CourseModuleViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Ordered module/material tree of a course."""
    permission_classes = [AllowAny]
    serializer_class = ModuleReadSerializer
    pagination_class = None

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Module.objects.none()
        course = get_object_or_404(Course.objects.visible_to(self.request.user), pk=self.kwargs.get("course_pk"))
        return content_service.course_tree(course)


MOVE_RESPONSES = {200: OpenApiResponse(description="Item after the move."), **AUTH_RESPONSES, **CONFLICT_RESPONSE}


class ContentViewSet(
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Shared create/edit/delete/move plumbing for modules and materials."""
    lookup_value_regex = r"\d+"
    permission_classes = [IsAuthenticated]
    read_serializer_class = None
    write_serializer_class = None
    update_serializer_class = None

    def get_serializer_class(self):
        if self.action == "create":
            return self.write_serializer_class
        if self.action in ("update", "partial_update"):
            return self.update_serializer_class
        return self.read_serializer_class

    def read(self, obj, status_code: int = status.HTTP_200_OK) -> Response:
        return Response(self.read_serializer_class(obj, context={"request": self.request}).data, status=status_code)

    def update(self, request: Request, *args, **kwargs) -> Response:
        obj = self.get_object()
        ser = self.update_serializer_class(obj, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        return self.read(self.perform_edit(obj, ser.validated_data))

    def partial_update(self, request: Request, *args, **kwargs) -> Response:
        return self.update(request, *args, **kwargs)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        obj = self.get_object()
        self.perform_remove(obj)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="move-up")
    def move_up(self, request: Request, pk: int | None = None) -> Response:
        return self.read(self.perform_move(self.get_object(), MoveDirection.UP))

    @action(detail=True, methods=["post"], url_path="move-down")
    def move_down(self, request: Request, pk: int | None = None) -> Response:
        return self.read(self.perform_move(self.get_object(), MoveDirection.DOWN))


@extend_schema_view(
    create=extend_schema(
        tags=["Modules"],
        request=ModuleWriteSerializer,
        responses={201: ModuleReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["owner", "tutor", "admin"]}},
    ),
    retrieve=extend_schema(tags=["Modules"], responses={200: ModuleReadSerializer, **AUTH_RESPONSES}),
    update=extend_schema(tags=["Modules"], request=ModuleUpdateSerializer, responses={200: ModuleReadSerializer}),
    partial_update=extend_schema(
        tags=["Modules"], request=ModuleUpdateSerializer, responses={200: ModuleReadSerializer, **AUTH_RESPONSES}
    ),
    destroy=extend_schema(
        tags=["Modules"],
        responses={204: OpenApiResponse(description="Deleted; later modules shift up."), **AUTH_RESPONSES},
    ),
    move_up=extend_schema(tags=["Modules"], request=None, responses=MOVE_RESPONSES),
    move_down=extend_schema(tags=["Modules"], request=None, responses=MOVE_RESPONSES),
)
class ModuleViewSet(ContentViewSet):
    """Modules: append, edit, delete with compaction, and reorder."""
    read_serializer_class = ModuleReadSerializer
    write_serializer_class = ModuleWriteSerializer
    update_serializer_class = ModuleUpdateSerializer

    def get_queryset(self):
        return (
            Module.objects.visible_to(self.request.user)
            .select_related("course")
            .prefetch_related(Prefetch("materials", queryset=Material.objects.in_order()))
        )

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = ModuleWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        module = content_service.create_module(
            request.user, data["course"].pk, data["title"], data.get("description", "")
        )
        return self.read(module, status.HTTP_201_CREATED)

    def perform_edit(self, obj: Module, data: dict) -> Module:
        return content_service.update_module(self.request.user, obj.pk, data)

    def perform_remove(self, obj: Module) -> None:
        content_service.delete_module(self.request.user, obj.pk)

    def perform_move(self, obj: Module, direction: MoveDirection) -> Module:
        return content_service.move_module(self.request.user, obj.pk, direction)


@extend_schema_view(
    create=extend_schema(
        tags=["Materials"],
        request={"multipart/form-data": MaterialWriteSerializer, "application/json": MaterialWriteSerializer},
        responses={201: MaterialReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["owner", "tutor", "admin"]}},
    ),
    retrieve=extend_schema(tags=["Materials"], responses={200: MaterialReadSerializer, **AUTH_RESPONSES}),
    update=extend_schema(tags=["Materials"], request=MaterialUpdateSerializer, responses={200: MaterialReadSerializer}),
    partial_update=extend_schema(
        tags=["Materials"], request=MaterialUpdateSerializer, responses={200: MaterialReadSerializer, **AUTH_RESPONSES}
    ),
    destroy=extend_schema(
        tags=["Materials"],
        responses={204: OpenApiResponse(description="Deleted; later materials shift up."), **AUTH_RESPONSES},
    ),
    move_up=extend_schema(tags=["Materials"], request=None, responses=MOVE_RESPONSES),
    move_down=extend_schema(tags=["Materials"], request=None, responses=MOVE_RESPONSES),
    complete=extend_schema(
        tags=["Enrollment"],
        request=None,
        responses={200: EnrollmentSerializer, **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["student"], "ownership": "enrolled"}},
    ),
)
class MaterialViewSet(ContentViewSet):
    """Materials: append (with optional upload), edit, delete with compaction, reorder, complete."""
    read_serializer_class = MaterialReadSerializer
    write_serializer_class = MaterialWriteSerializer
    update_serializer_class = MaterialUpdateSerializer

    def get_queryset(self):
        return Material.objects.visible_to(self.request.user).select_related("module__course")

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = MaterialWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        module = data.pop("module")
        material_type = data.pop("type")
        material = content_service.create_material(request.user, module.pk, material_type, data)
        return self.read(material, status.HTTP_201_CREATED)

    def perform_edit(self, obj: Material, data: dict) -> Material:
        return content_service.update_material(self.request.user, obj.pk, data)

    def perform_remove(self, obj: Material) -> None:
        content_service.delete_material(self.request.user, obj.pk)

    def perform_move(self, obj: Material, direction: MoveDirection) -> Material:
        return content_service.move_material(self.request.user, obj.pk, direction)

    @action(detail=True, methods=["post"], url_path="complete")
    def complete(self, request: Request, pk: int | None = None) -> Response:
        """Mark the material completed for the requesting student and return the updated enrollment."""
        material = self.get_object()
        progress_service.complete_material(request.user, material.pk)
        enrollment = material.module.course.enrollments.get(student=request.user)
        return Response(EnrollmentSerializer(enrollment).data)


# ---------- Assignments ----------
@extend_schema_view(
    list=extend_schema(
        tags=["Assignments"],
        parameters=[OpenApiParameter("course", int, OpenApiParameter.QUERY, required=False)],
        responses={200: AssignmentReadSerializer(many=True), **AUTH_RESPONSES},
    ),
    retrieve=extend_schema(tags=["Assignments"], responses={200: AssignmentReadSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Assignments"],
        request=AssignmentWriteSerializer,
        responses={201: AssignmentReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["owner", "tutor", "admin"]}},
    ),
    update=extend_schema(tags=["Assignments"], request=AssignmentWriteSerializer, responses={200: AssignmentReadSerializer}),
    partial_update=extend_schema(
        tags=["Assignments"],
        request=AssignmentWriteSerializer,
        responses={200: AssignmentReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
    ),
    destroy=extend_schema(tags=["Assignments"], responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES}),
)
class AssignmentViewSet(PaginationMixin, viewsets.ModelViewSet):
    """Assignments with derived submission counts."""
    lookup_value_regex = r"\d+"
    permission_classes = [IsAuthenticated]

    def get_serializer_class(self):
        if self.action in ("create", "update", "partial_update"):
            return AssignmentWriteSerializer
        return AssignmentReadSerializer

    def get_queryset(self):
        qs = Assignment.objects.visible_to(self.request.user).with_grading_counts().order_by("created_at", "id")
        course_id = self.request.query_params.get("course")
        if course_id:
            qs = qs.filter(course_id=serializers.IntegerField(min_value=1).run_validation(course_id))
        return qs

    def _read(self, assignment_id: int, status_code: int = status.HTTP_200_OK) -> Response:
        assignment = Assignment.objects.with_grading_counts().get(pk=assignment_id)
        return Response(AssignmentReadSerializer(assignment).data, status=status_code)

    def list(self, request: Request, *args, **kwargs) -> Response:
        return self.paginate_and_respond(self.get_queryset(), AssignmentReadSerializer)

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = AssignmentWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        course = data.pop("course")
        assignment = grading_service.create_assignment(request.user, course.pk, data)
        return self._read(assignment.pk, status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: int | None = None) -> Response:
        assignment = self.get_object()
        ser = AssignmentWriteSerializer(assignment, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        data.pop("course", None)
        grading_service.update_assignment(request.user, assignment.pk, data)
        return self._read(assignment.pk)

    def update(self, request: Request, *args, **kwargs) -> Response:
        """Alias to partial_update for full update."""
        return self.partial_update(request, *args, **kwargs)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        assignment = self.get_object()
        grading_service.delete_assignment(request.user, assignment.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


# ---------- Submissions ----------
@extend_schema_view(
    list=extend_schema(
        tags=["Submissions"],
        responses={200: SubmissionReadSerializer(many=True), **AUTH_RESPONSES},
    ),
    retrieve=extend_schema(
        tags=["Submissions"],
        responses={200: SubmissionReadSerializer, **AUTH_RESPONSES},
    ),
    create=extend_schema(
        tags=["Submissions"],
        request={"multipart/form-data": SubmissionWriteSerializer, "application/json": SubmissionWriteSerializer},
        description=(
            "Create or resubmit the caller's submission. A resubmission overwrites the answer and "
            "clears any grade. Endpoint is rate-limited."
        ),
        responses={
            201: SubmissionReadSerializer,
            429: OpenApiResponse(description="Too many requests / throttled."),
            **AUTH_RESPONSES,
            **VALIDATION_RESPONSE,
        },
        extensions={"x-permissions": {"required_roles": ["student"], "ownership": "enrolled"}},
    ),
)
@extend_schema(parameters=[OpenApiParameter("assignment_pk", int, OpenApiParameter.PATH)])
class SubmissionViewSet(
    PaginationMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.ListModelMixin,
    viewsets.GenericViewSet,
):
    """Submission upsert, listing and grading with throttling."""

    lookup_value_regex = r"\d+"
    permission_classes = [IsAuthenticated]
    throttle_classes: list[type] = []

    def get_serializer_class(self):
        if self.action == "create":
            return SubmissionWriteSerializer
        if self.action == "grade":
            return GradeWriteSerializer
        return SubmissionReadSerializer

    def get_throttles(self):
        """Apply rate throttle only on create."""
        if self.action == "create":
            self.throttle_classes = [SubmissionRateThrottle]
        return super().get_throttles()

    def get_queryset(self):
        """Graders see every submission of the assignment; students only their own."""
        if getattr(self, "swagger_fake_view", False):
            return Submission.objects.none()
        return grading_service.list_assignment_submissions(self.request.user, self.kwargs.get("assignment_pk"))

    def list(self, request: Request, *args, **kwargs) -> Response:
        return self.paginate_and_respond(self.get_queryset(), SubmissionReadSerializer)

    def create(self, request: Request, *args, **kwargs) -> Response:
        """Create or resubmit a submission."""
        ser = SubmissionWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        submission = grading_service.submit(
            request.user,
            self.kwargs.get("assignment_pk"),
            content=ser.validated_data.get("content", ""),
            file=ser.validated_data.get("file"),
            file_url=ser.validated_data.get("file_url"),
        )
        return Response(SubmissionReadSerializer(submission).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Submissions"],
        request=GradeWriteSerializer,
        responses={200: SubmissionReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["owner", "tutor", "admin"]}},
    )
    @action(detail=True, methods=["post"], url_path="grade")
    def grade(self, request: Request, pk: int | None = None, *args, **kwargs) -> Response:
        """Grade or regrade a submission (course owner, tutor of record or admin)."""
        submission = self.get_object()
        ser = GradeWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        graded = grading_service.grade_submission(
            request.user,
            submission.pk,
            ser.validated_data["score"],
            ser.validated_data.get("feedback"),
        )
        return Response(SubmissionReadSerializer(graded).data)
