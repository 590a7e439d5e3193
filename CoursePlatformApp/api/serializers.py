"""Serializers for users, courses, the content tree, assignments, submissions and lifecycle actions."""

from rest_framework import serializers
from django.contrib.auth import get_user_model

from CoursePlatformApp.courses.models import Category, Course, CourseTransition, Enrollment, Material, Module
from CoursePlatformApp.learning.models import Assignment, Submission
from CoursePlatformApp.core.choices import MaterialType, UserRole

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Public, safe representation of a user."""

    class Meta:
        model = User
        fields = ["id", "email", "first_name", "last_name", "role"]


class CourseWriteSerializer(serializers.ModelSerializer):
    """Serializer for creating/updating a course; status and version are never written here."""
    category = serializers.PrimaryKeyRelatedField(queryset=Category.objects.all(), required=False, allow_null=True)
    tutor = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(role=UserRole.TUTOR),
        required=False,
        allow_null=True,
        help_text="Tutor of record; must have the tutor role.",
    )
    requirements = serializers.ListField(child=serializers.CharField(), required=False)
    prerequisites = serializers.ListField(child=serializers.CharField(), required=False)

    class Meta:
        model = Course
        fields = [
            "title", "description", "price", "duration", "level", "is_public",
            "category", "tutor", "requirements", "prerequisites",
        ]


class CourseReadSerializer(serializers.ModelSerializer):
    """Serializer for reading course details including creator and tutor."""
    creator = UserSerializer(read_only=True)
    tutor = UserSerializer(read_only=True)
    category = serializers.StringRelatedField()

    class Meta:
        model = Course
        fields = [
            "id", "title", "description", "price", "duration", "level", "status", "is_public",
            "rejection_reason", "rejected_at", "creator", "tutor", "category",
            "requirements", "prerequisites", "version", "created_at", "updated_at",
        ]


class VersionSerializer(serializers.Serializer):
    """Optional expected version for optimistic locking."""
    version = serializers.IntegerField(required=False, min_value=0)


class RejectSerializer(VersionSerializer):
    """Body of a reject request."""
    reason = serializers.CharField(required=False, allow_blank=True, help_text="Optional rejection reason.")


class CourseTransitionSerializer(serializers.ModelSerializer):
    """Audit log row of a lifecycle transition."""
    actor = UserSerializer(read_only=True)

    class Meta:
        model = CourseTransition
        fields = ["id", "event", "from_status", "to_status", "actor", "actor_role", "reason", "created_at"]


class PendingCountSerializer(serializers.Serializer):
    count = serializers.IntegerField()


class EnrollmentSerializer(serializers.ModelSerializer):
    """Enrollment with cached progress."""

    class Meta:
        model = Enrollment
        fields = ["id", "course", "student", "progress", "enrolled_at", "completed_at"]
        read_only_fields = fields


class MaterialWriteSerializer(serializers.ModelSerializer):
    """Serializer for creating a material; order_index is assigned by the server."""
    module = serializers.PrimaryKeyRelatedField(queryset=Module.objects.all())
    type = serializers.ChoiceField(choices=MaterialType.choices)
    file = serializers.FileField(
        required=False,
        allow_null=True,
        write_only=True,
        help_text="Uploaded file; size and MIME type are validated against the material type.",
    )
    file_url = serializers.CharField(required=False, allow_blank=True, max_length=500)
    content = serializers.CharField(required=False, allow_blank=True)

    class Meta:
        model = Material
        fields = ["module", "type", "title", "description", "file", "file_url", "content"]


class MaterialUpdateSerializer(serializers.ModelSerializer):
    """Serializer for editing a material; type, module and order_index are fixed."""

    class Meta:
        model = Material
        fields = ["title", "description", "file_url", "content"]


class MaterialReadSerializer(serializers.ModelSerializer):
    """Serializer for reading a material."""

    class Meta:
        model = Material
        fields = [
            "id", "module", "title", "description", "type", "file_url", "content",
            "order_index", "created_at", "updated_at",
        ]
        read_only_fields = fields


class ModuleWriteSerializer(serializers.ModelSerializer):
    """Serializer for creating a module; order_index is assigned by the server."""
    course = serializers.PrimaryKeyRelatedField(queryset=Course.objects.all())

    class Meta:
        model = Module
        fields = ["course", "title", "description"]


class ModuleUpdateSerializer(serializers.ModelSerializer):

    class Meta:
        model = Module
        fields = ["title", "description"]


class ModuleReadSerializer(serializers.ModelSerializer):
    """Module with its materials in order."""
    materials = MaterialReadSerializer(many=True, read_only=True)

    class Meta:
        model = Module
        fields = ["id", "course", "title", "description", "order_index", "materials", "created_at", "updated_at"]
        read_only_fields = fields


class AssignmentWriteSerializer(serializers.ModelSerializer):
    """Serializer for creating/updating an assignment."""
    course = serializers.PrimaryKeyRelatedField(queryset=Course.objects.all())
    max_score = serializers.IntegerField(required=False, min_value=1)

    class Meta:
        model = Assignment
        fields = ["course", "title", "description", "due_date", "max_score"]


class AssignmentReadSerializer(serializers.ModelSerializer):
    """Assignment with derived submission counts."""
    submission_count = serializers.IntegerField(read_only=True, default=0)
    ungraded_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Assignment
        fields = [
            "id", "course", "title", "description", "due_date", "max_score",
            "created_by", "submission_count", "ungraded_count", "created_at", "updated_at",
        ]
        read_only_fields = fields


class SubmissionWriteSerializer(serializers.Serializer):
    """Serializer for creating or resubmitting a submission."""
    content = serializers.CharField(
        required=False,
        allow_blank=True,
        help_text="Textual answer (optional if a file or file URL is provided).",
    )
    file = serializers.FileField(required=False, allow_null=True, help_text="Optional file attachment.")
    file_url = serializers.CharField(required=False, allow_blank=True, max_length=500)

    def validate(self, data):
        if not data.get("content") and not data.get("file") and not data.get("file_url"):
            raise serializers.ValidationError("At least one of `content`, `file` or `file_url` is required.")
        return super().validate(data)


class SubmissionReadSerializer(serializers.ModelSerializer):
    """Detailed submission view including student and grading."""
    student = UserSerializer(read_only=True)
    graded_by = UserSerializer(read_only=True)

    class Meta:
        model = Submission
        fields = [
            "id", "assignment", "student", "content", "file_url", "score", "feedback",
            "is_graded", "graded_by", "submitted_at", "graded_at", "is_late", "updated_at",
        ]
        read_only_fields = fields


class GradeWriteSerializer(serializers.Serializer):
    """Score and optional feedback for a submission; the range is checked against max_score."""
    score = serializers.IntegerField()
    feedback = serializers.CharField(required=False, allow_blank=True)
