from datetime import timedelta
from types import SimpleNamespace

import pytest
from django.utils import timezone

from trackboard_main.sharing import (
    EXPIRED,
    NOT_FOUND,
    REVOKED,
    LinkExpired,
    LinkNotFound,
    LinkRevoked,
    classify_link,
    generate_public_id,
    is_link_valid,
)


def _link(is_active=True, expires_in=timedelta(hours=1)):
    expires_at = timezone.now() + expires_in if expires_in is not None else None
    return SimpleNamespace(public_id="batch-abc", is_active=is_active, expires_at=expires_at)


def test_valid_link_is_returned():
    link = _link()
    assert classify_link(link, "Batch statistics") is link


def test_missing_link_is_not_found():
    with pytest.raises(LinkNotFound) as exc:
        classify_link(None, "Batch statistics")
    assert exc.value.kind == NOT_FOUND
    assert exc.value.status == 404
    assert exc.value.message == "Batch statistics link not found"


def test_inactive_link_is_revoked():
    with pytest.raises(LinkRevoked) as exc:
        classify_link(_link(is_active=False), "Batch statistics")
    assert exc.value.kind == REVOKED
    assert exc.value.status == 410
    assert exc.value.message == "This batch statistics link has been revoked"


def test_past_expiry_is_expired():
    with pytest.raises(LinkExpired) as exc:
        classify_link(_link(expires_in=-timedelta(seconds=1)), "Leaderboard")
    assert exc.value.kind == EXPIRED
    assert exc.value.message == "This leaderboard link has expired"


def test_revocation_wins_over_expiry():
    with pytest.raises(LinkRevoked):
        classify_link(_link(is_active=False, expires_in=-timedelta(hours=2)), "Batch statistics")


def test_expiry_boundary_is_exclusive():
    link = _link()
    with pytest.raises(LinkExpired):
        classify_link(link, "Batch statistics", now=link.expires_at)


def test_no_expiry_means_permanent():
    board = SimpleNamespace(public_id="lb-x", is_public=True, public_expires_at=None)
    assert classify_link(board, "Leaderboard", is_active_attr="is_public", expires_attr="public_expires_at") is board
    assert is_link_valid(True, None)
    assert not is_link_valid(False, None)


def test_generate_public_id_with_owner():
    public_id = generate_public_id("batch", "0123456789abcdef")
    prefix, owner, millis = public_id.split("-")
    assert prefix == "batch"
    assert owner == "01234567"
    assert millis.isdigit()


def test_generate_public_id_is_random_without_owner():
    assert generate_public_id("lb") != generate_public_id("lb")
