"""
Public share links
Shared helpers for capability-style public identifiers: generation,
validity checks and the not-found / revoked / expired classification
used by every public page.
"""
import logging
import secrets
import time
from datetime import timedelta

from django.conf import settings
from django.shortcuts import render
from django.utils import timezone

logger = logging.getLogger(__name__)

NOT_FOUND = "not_found"
REVOKED = "revoked"
EXPIRED = "expired"


class PublicLinkError(Exception):
    """Raised when a public identifier cannot be served."""
    kind = None
    status = 404
    template = "{noun} link not found"

    def __init__(self, noun="This", public_id=None):
        self.noun = noun
        self.public_id = public_id
        super().__init__(self.message)

    @property
    def message(self):
        return self.template.format(noun=self.noun, noun_lower=self.noun.lower())


class LinkNotFound(PublicLinkError):
    kind = NOT_FOUND


class LinkRevoked(PublicLinkError):
    kind = REVOKED
    status = 410
    template = "This {noun_lower} link has been revoked"


class LinkExpired(PublicLinkError):
    kind = EXPIRED
    status = 410
    template = "This {noun_lower} link has expired"


def link_lifetime():
    return timedelta(hours=getattr(settings, "TRACKBOARD_PUBLIC_LINK_HOURS", 24))


def generate_public_id(prefix, owner_id=None):
    """
    Build a random-looking public identifier.
    With an owner id the result is "<prefix>-<first 8 chars of id>-<epoch ms>",
    otherwise "<prefix>-<url-safe token>".
    """
    if owner_id is not None:
        return f"{prefix}-{str(owner_id)[:8]}-{int(time.time() * 1000)}"
    return f"{prefix}-{secrets.token_urlsafe(9)}"


def is_link_valid(is_active, expires_at, now=None):
    """A link is valid only while active and, when it has an expiry, before it."""
    now = now or timezone.now()
    if not is_active:
        return False
    return expires_at is None or now < expires_at


def classify_link(link, noun, is_active_attr="is_active", expires_attr="expires_at", now=None):
    """
    Raise the PublicLinkError matching why ``link`` cannot be served.
    Revocation is checked before expiry.
    """
    if link is None:
        raise LinkNotFound(noun)
    if not getattr(link, is_active_attr):
        raise LinkRevoked(noun, getattr(link, "public_id", None))
    expires_at = getattr(link, expires_attr, None)
    now = now or timezone.now()
    if expires_at is not None and now >= expires_at:
        raise LinkExpired(noun, getattr(link, "public_id", None))
    return link


def render_link_error(request, error):
    """Full-page message for a rejected public link."""
    logger.warning("Rejected public %s link %s: %s", error.noun, error.public_id, error.kind)
    return render(
        request,
        "public/link_error.html",
        {"error": error, "kind": error.kind, "message": error.message},
        status=error.status,
    )
