from django.contrib import admin, messages
from django.utils import timezone

from .models import MigrationTask, SnapshotImport


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.action(description="Reset selected migration tasks to idle")
def reset_to_idle(modeladmin, request, queryset):
    count = queryset.exclude(status=MigrationTask.Status.IDLE).update(
        status=MigrationTask.Status.IDLE,
        last_finished=timezone.now(),
        last_message="Reset by operator",
    )
    messages.info(
        request, "Reset %d migration tasks to idle" % count, fail_silently=True
    )


@admin.register(SnapshotImport)
class SnapshotImportAdmin(ReadOnlyAdmin):
    list_display = ("directory", "sync", "last_started", "completed", "failed")
    list_filter = ("sync", "completed", "failed")
    search_fields = ("directory", "status")
    readonly_fields = (
        "directory",
        "sync",
        "created",
        "modified",
        "last_started",
        "completed",
        "failed",
        "status",
    )


@admin.register(MigrationTask)
class MigrationTaskAdmin(ReadOnlyAdmin):
    actions = (reset_to_idle,)
    list_display = (
        "name",
        "group",
        "weight",
        "status",
        "last_started",
        "last_finished",
        "processed",
        "deleted",
    )
    list_filter = ("group", "status")
    readonly_fields = (
        "name",
        "group",
        "weight",
        "status",
        "last_started",
        "last_finished",
        "last_message",
        "processed",
        "deleted",
    )
