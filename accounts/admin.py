from django.contrib import admin, messages
from django.contrib.auth.models import User

from .models import AdminProfile


@admin.register(AdminProfile)
class AdminProfileAdmin(admin.ModelAdmin):
    list_display = (
        'user',
        'name',
        'role',
        'created_by',
        'created_at',
    )

    search_fields = (
        'user__username',
        'user__email',
        'name',
    )

    list_filter = ('role',)
    actions = ("delete_profiles_with_user_accounts", "make_viewers")

    @admin.action(description="Delete selected profiles and linked user accounts")
    def delete_profiles_with_user_accounts(self, request, queryset):
        user_ids = list(queryset.exclude(user=request.user).values_list("user_id", flat=True))
        User.objects.filter(id__in=user_ids).delete()
        self.message_user(request, f"Deleted {len(user_ids)} accounts.", level=messages.SUCCESS)

    @admin.action(description="Downgrade selected profiles to viewer")
    def make_viewers(self, request, queryset):
        updated = queryset.exclude(user=request.user).update(role=AdminProfile.ROLE_VIEWER)
        self.message_user(request, f"{updated} profiles set to viewer.", level=messages.SUCCESS)

    def delete_model(self, request, obj):
        user_id = obj.user_id
        super().delete_model(request, obj)
        User.objects.filter(id=user_id).delete()

    def delete_queryset(self, request, queryset):
        user_ids = list(queryset.values_list("user_id", flat=True))
        super().delete_queryset(request, queryset)
        User.objects.filter(id__in=user_ids).delete()
