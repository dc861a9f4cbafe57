"""
Main views for Trackboard
Handles the admin home page, login, first-run setup, logout and error pages
"""
import logging

from django.contrib import messages
from django.contrib.auth import authenticate, login as auth_login, logout
from django.contrib.auth.hashers import make_password
from django.contrib.auth.models import User
from django.db import DatabaseError, IntegrityError, transaction
from django.shortcuts import redirect, render
from django.utils import timezone
from django.utils.http import url_has_allowed_host_and_scheme

from accounts.models import AdminProfile
from accounts.permissions import get_profile, viewer_required
from attendance_app.models import AttendanceSession
from batch_app.models import Batch
from leaderboard_app.models import ActivenessBoard, Leaderboard

logger = logging.getLogger(__name__)


@viewer_required
def home(request):
    """Admin panel landing page with a count per section"""
    today = timezone.localdate()
    return render(request, 'home.html', {
        'leaderboard_count': Leaderboard.objects.count(),
        'activeness_count': ActivenessBoard.objects.count(),
        'batch_count': Batch.objects.filter(is_active=True).count(),
        'today_sessions': AttendanceSession.objects.filter(session_date=today).select_related('batch'),
    })


def loginView(request):
    """
    Handle dashboard login
    Only users with an AdminProfile may sign in
    """
    if request.user.is_authenticated and get_profile(request.user):
        return redirect('home')

    credential_error = False

    if request.method == "POST":
        username = (request.POST.get("email") or "").strip().lower()
        password = request.POST.get("password")

        # Authenticate user with Django's built-in authentication
        user = authenticate(request, username=username, password=password)

        if user is None or get_profile(user) is None:
            logger.warning("Failed login for %s", username)
            credential_error = True
        else:
            auth_login(request, user)
            next_url = request.GET.get("next")
            if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
                return redirect(next_url)
            return redirect("home")

    return render(request, "login.html", {
        "credential_error": credential_error,
        "setup_available": not AdminProfile.objects.filter(role=AdminProfile.ROLE_ADMIN).exists(),
    })


def setupView(request):
    """
    First-run setup: create the initial admin account
    Closed once any admin profile exists
    """
    if AdminProfile.objects.filter(role=AdminProfile.ROLE_ADMIN).exists():
        messages.info(request, "Setup is already complete. Please login.")
        return redirect('login')

    if request.method == "POST":
        email = (request.POST.get("email") or "").strip().lower()
        password = (request.POST.get("password") or "").strip()
        name = (request.POST.get("name") or "").strip()

        if not email or not password or not name:
            messages.error(request, "Please fill in all required fields")
            return render(request, "setup.html", status=400)

        try:
            with transaction.atomic():
                user = User.objects.create(
                    username=email,
                    email=email,
                    password=make_password(password),
                )
                AdminProfile.objects.create(user=user, name=name, role=AdminProfile.ROLE_ADMIN)
        except IntegrityError:
            messages.error(request, "A user with this email already exists")
            return render(request, "setup.html", status=400)
        except DatabaseError:
            logger.exception("Failed to create initial admin %s", email)
            messages.error(request, "Failed to create admin account")
            return render(request, "setup.html", status=500)

        logger.info("Initial admin %s created", email)
        auth_login(request, user)
        messages.success(request, "Admin account created")
        return redirect('home')

    return render(request, "setup.html")


def logoutView(request):
    """
    Handle user logout
    Clears all session data and logs out the user
    """
    request.session.flush()
    logout(request)

    return redirect('login')


def _error_page(request, status, title, detail):
    return render(request, "error.html", {"status": status, "title": title, "detail": detail}, status=status)


def error_400(request, exception=None):
    return _error_page(request, 400, "Bad request", "The request could not be understood.")


def error_403(request, exception=None):
    return _error_page(request, 403, "Forbidden", "Your role does not allow this action.")


def error_404(request, exception=None):
    return _error_page(request, 404, "Not found", "The page you requested does not exist.")


def error_500(request):
    return _error_page(request, 500, "Server error", "Something went wrong. Please try again.")
