"""
Attendance app models
Daily attendance sessions per batch and the records students submit to them
"""
import secrets
from datetime import datetime, time

from django.contrib.auth.models import User
from django.db import models
from django.utils import timezone

from trackboard_main.sharing import generate_public_id


def end_of_day(day):
    """Last instant of ``day`` in the current time zone."""
    return timezone.make_aware(datetime.combine(day, time.max))


def make_session_code(day):
    return f"attend-{day.isoformat()}-{secrets.token_hex(3)}"


class AttendanceSession(models.Model):
    """
    One day's attendance-taking instance for a batch.
    Created at most once per (batch, date); expires at the end of that day.
    """
    batch = models.ForeignKey("batch_app.Batch", on_delete=models.CASCADE, related_name="sessions")
    session_date = models.DateField(default=timezone.localdate)
    session_code = models.CharField(max_length=64, unique=True, db_index=True)
    session_name = models.CharField(max_length=150, blank=True)
    public_id = models.CharField(max_length=64, unique=True, db_index=True)
    is_active = models.BooleanField(default=True)
    expires_at = models.DateTimeField()
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="attendance_sessions",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-session_date", "-created_at")
        constraints = [
            models.UniqueConstraint(fields=["batch", "session_date"], name="uniq_batch_session_date")
        ]

    def save(self, *args, **kwargs):
        if not self.session_code:
            self.session_code = make_session_code(self.session_date)
        if not self.public_id:
            self.public_id = generate_public_id("session")
        if not self.expires_at:
            self.expires_at = end_of_day(self.session_date)
        if not self.session_name:
            self.session_name = f"Attendance {self.session_date:%d %b %Y}"
        super().save(*args, **kwargs)

    @property
    def is_expired(self):
        return timezone.now() >= self.expires_at

    @property
    def is_open(self):
        """Students may mark attendance only while active and unexpired."""
        return self.is_active and not self.is_expired

    @property
    def status_label(self):
        if self.is_open:
            return "Active"
        if self.is_expired:
            return "Expired"
        return "Inactive"

    def __str__(self):
        return f"{self.batch} @ {self.session_date:%Y-%m-%d}"


class AttendanceRecord(models.Model):
    """
    A student's mark for one session.
    Append-only from the public form; one record per name per session.
    """
    STATUS_PRESENT = "present"
    STATUS_CHOICES = (
        (STATUS_PRESENT, "Present"),
    )

    session = models.ForeignKey(AttendanceSession, on_delete=models.CASCADE, related_name="records")
    student_name = models.CharField(max_length=150)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PRESENT)
    marked_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ("marked_at",)
        constraints = [
            models.UniqueConstraint(fields=["session", "student_name"], name="uniq_session_student_record")
        ]

    def __str__(self):
        return f"{self.student_name} - {self.session_id} - {self.status}"
