from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin

from CoursePlatformApp.learning.models import Assignment, MaterialCompletion, Submission


@admin.register(Assignment)
class AssignmentAdmin(SimpleHistoryAdmin):
    list_display = ["id", "course", "title", "due_date", "max_score"]


@admin.register(Submission)
class SubmissionAdmin(SimpleHistoryAdmin):
    list_display = ["id", "assignment", "student", "is_graded", "score", "is_late", "submitted_at"]
    list_filter = ["is_graded", "is_late"]


admin.site.register(MaterialCompletion)
