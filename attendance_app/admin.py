from django.contrib import admin, messages

from .models import AttendanceRecord, AttendanceSession


class AttendanceRecordInline(admin.TabularInline):
    model = AttendanceRecord
    extra = 0
    fields = ("student_name", "status", "marked_at")
    readonly_fields = ("student_name", "status", "marked_at")
    can_delete = False


@admin.register(AttendanceSession)
class AttendanceSessionAdmin(admin.ModelAdmin):
    list_display = ("session_date", "batch", "session_name", "session_code", "is_active", "expires_at")
    search_fields = ("session_code", "session_name", "batch__name", "public_id")
    list_filter = ("is_active", "batch", "session_date")
    readonly_fields = ("session_code", "public_id", "created_at")
    inlines = (AttendanceRecordInline,)
    actions = ("close_sessions",)

    @admin.action(description="Deactivate selected sessions")
    def close_sessions(self, request, queryset):
        updated = queryset.filter(is_active=True).update(is_active=False)
        self.message_user(request, f"Deactivated {updated} sessions.", level=messages.SUCCESS)


@admin.register(AttendanceRecord)
class AttendanceRecordAdmin(admin.ModelAdmin):
    list_display = ("session", "student_name", "status", "marked_at")
    search_fields = ("student_name", "session__session_code", "session__batch__name")
    list_filter = ("status", "session__batch")
    date_hierarchy = "marked_at"

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("session__batch")

    def has_change_permission(self, request, obj=None):
        # Records are append-only from the public form.
        return False
