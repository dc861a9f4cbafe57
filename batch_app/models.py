"""
Batch app models
Defines batches (student cohorts), their rosters and expiring public stats links
"""
import uuid

from django.contrib.auth.models import User
from django.db import models
from django.utils import timezone

from trackboard_main.sharing import generate_public_id, is_link_valid, link_lifetime


class Batch(models.Model):
    """
    A named cohort of students.
    Deleting a batch cascades to its roster, sessions and public links.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="batches",
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at",)
        verbose_name_plural = "Batches"

    def active_public_url(self, now=None):
        """The newest link that is still active and unexpired, if any."""
        now = now or timezone.now()
        return (
            self.public_urls.filter(is_active=True, expires_at__gt=now)
            .order_by("-created_at")
            .first()
        )

    def __str__(self):
        return self.name


class BatchStudent(models.Model):
    """One roster entry. Names are unique within a batch."""
    batch = models.ForeignKey(Batch, on_delete=models.CASCADE, related_name="students")
    student_name = models.CharField(max_length=150)
    student_email = models.EmailField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("student_name",)
        constraints = [
            models.UniqueConstraint(fields=["batch", "student_name"], name="uniq_batch_student_name")
        ]

    def __str__(self):
        return f"{self.student_name} ({self.batch.name})"


class BatchPublicUrl(models.Model):
    """
    Shareable read-only link to a batch's attendance statistics.
    Valid while active and before expires_at (24h after creation by default).
    """
    batch = models.ForeignKey(Batch, on_delete=models.CASCADE, related_name="public_urls")
    public_id = models.CharField(max_length=64, unique=True, db_index=True)
    is_active = models.BooleanField(default=True)
    expires_at = models.DateTimeField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    last_accessed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ("-created_at",)
        verbose_name = "Batch public URL"

    def save(self, *args, **kwargs):
        if not self.public_id:
            self.public_id = generate_public_id("batch", self.batch_id)
        if not self.expires_at:
            self.expires_at = timezone.now() + link_lifetime()
        super().save(*args, **kwargs)

    @property
    def is_expired(self):
        return timezone.now() >= self.expires_at

    @property
    def is_valid(self):
        return is_link_valid(self.is_active, self.expires_at)

    @property
    def status_label(self):
        if not self.is_active:
            return "Revoked"
        if self.is_expired:
            return "Expired"
        return "Active"

    def __str__(self):
        return f"{self.public_id} ({self.status_label})"
