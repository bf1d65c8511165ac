from django.contrib import admin

from catalog.models import Program, ProgramCategory, ProgramClass, Session, SessionTime


class ImportedModelAdmin(admin.ModelAdmin):
    list_display = ("title", "source_id", "modified")
    search_fields = ("title", "source_id")
    readonly_fields = ("source_id", "created", "modified")


@admin.register(Program)
class ProgramAdmin(ImportedModelAdmin):
    list_display = ("title", "source_id", "available", "modified")
    list_filter = ("available",)


@admin.register(ProgramCategory)
class ProgramCategoryAdmin(ImportedModelAdmin):
    list_display = ("title", "source_id", "program", "modified")


@admin.register(ProgramClass)
class ProgramClassAdmin(ImportedModelAdmin):
    list_display = ("title", "source_id", "category", "modified")


@admin.register(Session)
class SessionAdmin(ImportedModelAdmin):
    list_display = ("title", "source_id", "program_class", "location", "modified")
    list_filter = ("location",)


@admin.register(SessionTime)
class SessionTimeAdmin(admin.ModelAdmin):
    list_display = ("pk", "parent_type", "parent_id", "days", "start_date", "end_date")
    list_filter = ("parent_type",)
