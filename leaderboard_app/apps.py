from django.apps import AppConfig


class LeaderboardAppConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "leaderboard_app"
    verbose_name = "Leaderboards"
