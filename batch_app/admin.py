from django.contrib import admin, messages

from .models import Batch, BatchPublicUrl, BatchStudent


class BatchStudentInline(admin.TabularInline):
    model = BatchStudent
    extra = 0
    fields = ("student_name", "student_email")


@admin.register(Batch)
class BatchAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active", "student_count", "created_by", "created_at")
    search_fields = ("name", "description")
    list_filter = ("is_active",)
    inlines = (BatchStudentInline,)
    actions = ("deactivate_batches", "activate_batches")

    @admin.display(description="Students")
    def student_count(self, obj):
        return obj.students.count()

    @admin.action(description="Deactivate selected batches")
    def deactivate_batches(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f"Deactivated {updated} batches.", level=messages.SUCCESS)

    @admin.action(description="Activate selected batches")
    def activate_batches(self, request, queryset):
        updated = queryset.update(is_active=True)
        self.message_user(request, f"Activated {updated} batches.", level=messages.SUCCESS)

    def save_model(self, request, obj, form, change):
        if not change and obj.created_by_id is None:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)


@admin.register(BatchStudent)
class BatchStudentAdmin(admin.ModelAdmin):
    list_display = ("student_name", "student_email", "batch")
    search_fields = ("student_name", "student_email", "batch__name")
    list_filter = ("batch",)
    ordering = ("batch__name", "student_name")


@admin.register(BatchPublicUrl)
class BatchPublicUrlAdmin(admin.ModelAdmin):
    list_display = ("public_id", "batch", "is_active", "expires_at", "last_accessed_at")
    search_fields = ("public_id", "batch__name")
    list_filter = ("is_active",)
    readonly_fields = ("public_id", "created_at", "last_accessed_at")
    actions = ("revoke_links",)

    @admin.action(description="Revoke selected links")
    def revoke_links(self, request, queryset):
        updated = queryset.filter(is_active=True).update(is_active=False)
        self.message_user(request, f"Revoked {updated} links.", level=messages.SUCCESS)
