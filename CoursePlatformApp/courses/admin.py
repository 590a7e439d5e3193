from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin

from CoursePlatformApp.courses.models import Category, Course, CourseTransition, Enrollment, Material, Module


@admin.register(Course)
class CourseAdmin(SimpleHistoryAdmin):
    list_display = ["id", "title", "status", "is_public", "creator", "tutor", "version"]
    list_filter = ["status", "is_public"]
    search_fields = ["title"]
    # status moves only through lifecycle events
    readonly_fields = ["status", "version", "rejection_reason", "rejected_at"]


@admin.register(Module)
class ModuleAdmin(admin.ModelAdmin):
    list_display = ["id", "course", "order_index", "title"]
    readonly_fields = ["order_index"]


@admin.register(Material)
class MaterialAdmin(admin.ModelAdmin):
    list_display = ["id", "module", "order_index", "title", "type"]
    readonly_fields = ["order_index"]


@admin.register(CourseTransition)
class CourseTransitionAdmin(admin.ModelAdmin):
    list_display = ["id", "course", "event", "from_status", "to_status", "actor", "created_at"]
    list_filter = ["event"]


admin.site.register(Category)
admin.site.register(Enrollment)
