from .permissions import get_profile


def admin_profile(request):
    """Expose the signed-in user's profile so templates can hide gated actions."""
    user = getattr(request, "user", None)
    profile = get_profile(user) if user is not None else None
    return {
        "admin_profile": profile,
        "can_edit": bool(profile and profile.can_edit),
        "is_admin": bool(profile and profile.is_admin),
    }
