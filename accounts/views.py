"""
Accounts app views for dashboard user management
Only admins may list, create and delete dashboard accounts.
"""
import logging

from django.contrib import messages
from django.contrib.auth.hashers import make_password
from django.contrib.auth.models import User
from django.db import DatabaseError, IntegrityError, transaction
from django.shortcuts import redirect, render
from django.views.decorators.http import require_POST

from .models import AdminProfile
from .permissions import admin_required

logger = logging.getLogger(__name__)


@admin_required
def user_list(request):
    """Render every dashboard account with its role."""
    profiles = AdminProfile.objects.select_related("user", "created_by").order_by("-created_at")
    return render(request, "accounts/user_list.html", {
        "profiles": profiles,
        "role_choices": AdminProfile.ROLE_CHOICES,
    })


@admin_required
@require_POST
def create_user(request):
    """
    Create a Django User plus its AdminProfile.
    The email doubles as the login username.
    """
    email = (request.POST.get("email") or "").strip().lower()
    password = (request.POST.get("password") or "").strip()
    name = (request.POST.get("name") or "").strip()
    role = request.POST.get("role") or AdminProfile.ROLE_VIEWER

    if not email or not password or not name:
        messages.error(request, "Please fill in all required fields")
        return redirect("userList")
    if role not in dict(AdminProfile.ROLE_CHOICES):
        messages.error(request, "Unknown role")
        return redirect("userList")

    try:
        with transaction.atomic():
            user = User.objects.create(
                username=email,
                email=email,
                password=make_password(password),
            )
            AdminProfile.objects.create(
                user=user,
                name=name,
                role=role,
                created_by=request.user,
            )
    except IntegrityError:
        messages.error(request, "A user with this email already exists")
        return redirect("userList")
    except DatabaseError:
        logger.exception("Failed to create user %s", email)
        messages.error(request, "Failed to create user")
        return redirect("userList")

    logger.info("User %s created %s account %s", request.user.username, role, email)
    messages.success(request, "User created successfully!")
    return redirect("userList")


@admin_required
@require_POST
def delete_user(request, profile_id):
    """Delete an account and its linked Django User. Self-deletion is refused."""
    profile = AdminProfile.objects.filter(id=profile_id).select_related("user").first()
    if not profile:
        messages.error(request, "User not found")
        return redirect("userList")
    if profile.user_id == request.user.id:
        messages.error(request, "You cannot delete your own account")
        return redirect("userList")

    try:
        # Deleting the User cascades to the profile.
        profile.user.delete()
    except DatabaseError:
        logger.exception("Failed to delete user %s", profile.user.username)
        messages.error(request, "Failed to delete user")
        return redirect("userList")

    logger.info("User %s deleted account %s", request.user.username, profile.user.username)
    messages.success(request, "User deleted successfully!")
    return redirect("userList")
