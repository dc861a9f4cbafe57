"""
Accounts app models
Defines the AdminProfile model which attaches a dashboard role to a Django User
"""
from django.contrib.auth.models import User
from django.db import models


class AdminProfile(models.Model):
    """
    Dashboard account - extends Django User with a display name and role.
    Admins manage users and may delete, editors create and edit, viewers only read.
    """
    ROLE_ADMIN = "admin"
    ROLE_EDITOR = "editor"
    ROLE_VIEWER = "viewer"
    ROLE_CHOICES = (
        (ROLE_ADMIN, "Admin"),
        (ROLE_EDITOR, "Editor"),
        (ROLE_VIEWER, "Viewer"),
    )
    EDIT_ROLES = (ROLE_ADMIN, ROLE_EDITOR)

    # Link to Django User account (one profile per user)
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="admin_profile")
    name = models.CharField(max_length=150)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_VIEWER)
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_profiles",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at",)

    @property
    def is_admin(self):
        return self.role == self.ROLE_ADMIN

    @property
    def can_edit(self):
        return self.role in self.EDIT_ROLES

    def __str__(self):
        return f"{self.name} ({self.role})"
