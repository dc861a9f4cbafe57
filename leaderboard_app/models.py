"""
Leaderboard app models
Interview leaderboards and activeness (engagement) boards.
Each board has a permanent public id; turning is_public off revokes it.
"""
from django.contrib.auth.models import User
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from trackboard_main.sharing import generate_public_id


class PublicBoard(models.Model):
    """Common fields for boards that can be shared read-only."""
    PUBLIC_ID_PREFIX = "board"

    name = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    public_id = models.CharField(max_length=64, unique=True, db_index=True)
    is_public = models.BooleanField(default=True)
    # No expiry when empty.
    public_expires_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ("-created_at",)

    def save(self, *args, **kwargs):
        if not self.public_id:
            self.public_id = generate_public_id(self.PUBLIC_ID_PREFIX)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name


class Leaderboard(PublicBoard):
    PUBLIC_ID_PREFIX = "lb"


class InterviewRound(models.Model):
    """One scored interview for a student (score out of 100)."""
    leaderboard = models.ForeignKey(Leaderboard, on_delete=models.CASCADE, related_name="rounds")
    student_name = models.CharField(max_length=150)
    score = models.PositiveSmallIntegerField(validators=[MaxValueValidator(100)])
    interviewer_name = models.CharField(max_length=150, blank=True)
    round_number = models.PositiveSmallIntegerField(default=1)
    interview_date = models.DateField(default=timezone.localdate)
    feedback = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-score", "created_at")

    def __str__(self):
        return f"{self.student_name} R{self.round_number}: {self.score}"


class ActivenessBoard(PublicBoard):
    PUBLIC_ID_PREFIX = "act"


class ModuleScore(models.Model):
    """Engagement rating (0-10) for a student in one module."""
    board = models.ForeignKey(ActivenessBoard, on_delete=models.CASCADE, related_name="scores")
    student_name = models.CharField(max_length=150)
    module_name = models.CharField(max_length=150)
    score = models.DecimalField(
        max_digits=3,
        decimal_places=1,
        validators=[MinValueValidator(0), MaxValueValidator(10)],
    )
    notes = models.TextField(blank=True)
    recorded_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ("-score", "recorded_at")

    def __str__(self):
        return f"{self.student_name} / {self.module_name}: {self.score}"
