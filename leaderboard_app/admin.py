from django.contrib import admin, messages

from .models import ActivenessBoard, InterviewRound, Leaderboard, ModuleScore


class InterviewRoundInline(admin.TabularInline):
    model = InterviewRound
    extra = 0
    fields = ("student_name", "round_number", "score", "interviewer_name", "interview_date")


class ModuleScoreInline(admin.TabularInline):
    model = ModuleScore
    extra = 0
    fields = ("student_name", "module_name", "score", "recorded_at")


class PublicBoardAdmin(admin.ModelAdmin):
    list_display = ("name", "public_id", "is_public", "public_expires_at", "created_at")
    search_fields = ("name", "description", "public_id")
    list_filter = ("is_public",)
    readonly_fields = ("public_id", "created_at")
    actions = ("revoke_public_links",)

    @admin.action(description="Revoke public links of selected boards")
    def revoke_public_links(self, request, queryset):
        updated = queryset.filter(is_public=True).update(is_public=False)
        self.message_user(request, f"Revoked {updated} public links.", level=messages.SUCCESS)


@admin.register(Leaderboard)
class LeaderboardAdmin(PublicBoardAdmin):
    inlines = (InterviewRoundInline,)


@admin.register(ActivenessBoard)
class ActivenessBoardAdmin(PublicBoardAdmin):
    inlines = (ModuleScoreInline,)


@admin.register(InterviewRound)
class InterviewRoundAdmin(admin.ModelAdmin):
    list_display = ("student_name", "leaderboard", "round_number", "score", "interviewer_name", "interview_date")
    search_fields = ("student_name", "interviewer_name", "leaderboard__name")
    list_filter = ("leaderboard", "round_number")


@admin.register(ModuleScore)
class ModuleScoreAdmin(admin.ModelAdmin):
    list_display = ("student_name", "module_name", "board", "score", "recorded_at")
    search_fields = ("student_name", "module_name", "board__name")
    list_filter = ("board", "module_name")
