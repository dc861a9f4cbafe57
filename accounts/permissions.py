"""
Role checks for dashboard views
"""
import logging
from functools import wraps

from django.contrib.auth.views import redirect_to_login
from django.core.exceptions import PermissionDenied

from .models import AdminProfile

logger = logging.getLogger(__name__)


def get_profile(user):
    """Return the AdminProfile for ``user`` or None."""
    if not user.is_authenticated:
        return None
    try:
        return user.admin_profile
    except AdminProfile.DoesNotExist:
        return None


def role_required(*roles):
    """
    Restrict a view to logged-in users holding one of ``roles``.
    With no roles any profile may pass. Anonymous users go to the login page,
    users without a matching role get a 403.
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            if not request.user.is_authenticated:
                return redirect_to_login(request.get_full_path())
            profile = get_profile(request.user)
            if profile is None or (roles and profile.role not in roles):
                logger.warning(
                    "Denied %s to %s (role=%s)",
                    request.path,
                    request.user.username,
                    profile.role if profile else None,
                )
                raise PermissionDenied
            request.admin_profile = profile
            return view_func(request, *args, **kwargs)
        return _wrapped
    return decorator


viewer_required = role_required()
editor_required = role_required(*AdminProfile.EDIT_ROLES)
admin_required = role_required(AdminProfile.ROLE_ADMIN)
