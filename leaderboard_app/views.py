"""
Leaderboard app views
Interview leaderboards and activeness boards: CRUD, ranking display
and their public read-only pages.
"""
import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from django.contrib import messages
from django.db import DatabaseError
from django.shortcuts import redirect, render
from django.urls import reverse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST

from accounts.permissions import admin_required, editor_required, viewer_required
from trackboard_main.sharing import PublicLinkError, classify_link, render_link_error

from . import stats
from .models import ActivenessBoard, InterviewRound, Leaderboard, ModuleScore

logger = logging.getLogger(__name__)

INTERVIEW_BAND = (80, 60)
ACTIVENESS_BAND = (7, 5)


def _board_redirect(url_name, board=None):
    url = reverse(url_name)
    return redirect(f"{url}?board={board.id}") if board else redirect(url)


def _selected_board(model, request):
    boards = list(model.objects.order_by("-created_at"))
    selected = None
    board_id = request.GET.get("board")
    if board_id:
        selected = next((b for b in boards if str(b.id) == board_id), None)
    if selected is None and boards:
        selected = boards[0]
    return boards, selected


def _parse_round_fields(request):
    """Validated interview round fields, or raise ValueError with a user message."""
    student_name = (request.POST.get("student_name") or "").strip()
    if not student_name:
        raise ValueError("Please enter student name")
    try:
        score = int(request.POST.get("score", ""))
    except ValueError:
        raise ValueError("Score must be a whole number between 0 and 100")
    if not 0 <= score <= 100:
        raise ValueError("Score must be a whole number between 0 and 100")
    try:
        round_number = int(request.POST.get("round_number") or 1)
    except ValueError:
        raise ValueError("Round number must be a positive number")
    if round_number < 1:
        raise ValueError("Round number must be a positive number")
    try:
        raw_date = request.POST.get("interview_date")
        interview_date = date.fromisoformat(raw_date) if raw_date else timezone.localdate()
    except ValueError:
        raise ValueError("Invalid interview date")
    return {
        "student_name": student_name,
        "score": score,
        "round_number": round_number,
        "interview_date": interview_date,
        "interviewer_name": (request.POST.get("interviewer_name") or "").strip(),
        "feedback": (request.POST.get("feedback") or "").strip(),
    }


def _parse_module_fields(request):
    """Validated module score fields, or raise ValueError with a user message."""
    student_name = (request.POST.get("student_name") or "").strip()
    module_name = (request.POST.get("module_name") or "").strip()
    if not student_name or not module_name:
        raise ValueError("Please enter student and module name")
    try:
        score = Decimal(request.POST.get("score", "")).quantize(Decimal("0.1"))
    except InvalidOperation:
        raise ValueError("Score must be between 0 and 10")
    if not score.is_finite() or not Decimal(0) <= score <= Decimal(10):
        raise ValueError("Score must be between 0 and 10")
    return {
        "student_name": student_name,
        "module_name": module_name,
        "score": score,
        "notes": (request.POST.get("notes") or "").strip(),
    }


def _create_board(request, model, noun, url_name):
    name = (request.POST.get("name") or "").strip()
    if not name:
        messages.error(request, f"Please enter a {noun} name")
        return _board_redirect(url_name)
    try:
        board = model.objects.create(
            name=name,
            description=(request.POST.get("description") or "").strip(),
            created_by=request.user,
        )
    except DatabaseError:
        logger.exception("Failed to create %s %r", noun, name)
        messages.error(request, f"Failed to create {noun}")
        return _board_redirect(url_name)

    logger.info("Created %s %s (%s)", noun, board.id, board.public_id)
    messages.success(request, f"{noun.capitalize()} created successfully!")
    return _board_redirect(url_name, board)


def _delete_board(request, model, board_id, noun, url_name):
    board = model.objects.filter(id=board_id).first()
    if not board:
        messages.error(request, f"{noun.capitalize()} not found")
        return _board_redirect(url_name)
    try:
        board.delete()
    except DatabaseError:
        logger.exception("Failed to delete %s %s", noun, board_id)
        messages.error(request, f"Failed to delete {noun}")
        return _board_redirect(url_name, board)

    messages.success(request, f"{noun.capitalize()} deleted successfully!")
    return _board_redirect(url_name)


def _toggle_public(request, model, board_id, noun, url_name):
    """Enable or revoke the board's public page."""
    board = model.objects.filter(id=board_id).first()
    if not board:
        messages.error(request, f"{noun.capitalize()} not found")
        return _board_redirect(url_name)
    board.is_public = not board.is_public
    try:
        board.save(update_fields=["is_public"])
    except DatabaseError:
        logger.exception("Failed to toggle public page of %s %s", noun, board_id)
        messages.error(request, f"Failed to update {noun}")
        return _board_redirect(url_name, board)

    state = "enabled" if board.is_public else "revoked"
    messages.success(request, f"Public link {state}.")
    return _board_redirect(url_name, board)


# ---------------------------------------------------------------------------
# Interview leaderboards
# ---------------------------------------------------------------------------

@viewer_required
@require_GET
def leaderboard_list(request):
    boards, board = _selected_board(Leaderboard, request)
    rounds = list(board.rounds.order_by("-score", "created_at")) if board else []
    high, medium = INTERVIEW_BAND
    for r in rounds:
        r.band = stats.score_band(r.score, high, medium)
    return render(request, "leaderboards/leaderboard_list.html", {
        "boards": boards,
        "board": board,
        "ranked": stats.ranked(rounds),
        "summary": stats.leaderboard_summary(rounds),
        "public_url": request.build_absolute_uri(reverse("publicLeaderboard", args=[board.public_id])) if board else "",
    })


@editor_required
@require_POST
def create_leaderboard(request):
    return _create_board(request, Leaderboard, "leaderboard", "leaderboardList")


@admin_required
@require_POST
def delete_leaderboard(request, board_id):
    return _delete_board(request, Leaderboard, board_id, "leaderboard", "leaderboardList")


@editor_required
@require_POST
def toggle_leaderboard_public(request, board_id):
    return _toggle_public(request, Leaderboard, board_id, "leaderboard", "leaderboardList")


@editor_required
@require_POST
def add_round(request, board_id):
    board = Leaderboard.objects.filter(id=board_id).first()
    if not board:
        messages.error(request, "Leaderboard not found")
        return _board_redirect("leaderboardList")
    try:
        fields = _parse_round_fields(request)
    except ValueError as exc:
        messages.error(request, str(exc))
        return _board_redirect("leaderboardList", board)

    try:
        InterviewRound.objects.create(leaderboard=board, **fields)
    except DatabaseError:
        logger.exception("Failed to add interview round to leaderboard %s", board.id)
        messages.error(request, "Failed to add interview round")
        return _board_redirect("leaderboardList", board)

    messages.success(request, "Interview round added successfully!")
    return _board_redirect("leaderboardList", board)


@editor_required
@require_POST
def update_round(request, round_id):
    interview = InterviewRound.objects.filter(id=round_id).select_related("leaderboard").first()
    if not interview:
        messages.error(request, "Interview round not found")
        return _board_redirect("leaderboardList")
    board = interview.leaderboard
    try:
        fields = _parse_round_fields(request)
    except ValueError as exc:
        messages.error(request, str(exc))
        return _board_redirect("leaderboardList", board)

    try:
        InterviewRound.objects.filter(id=interview.id).update(**fields)
    except DatabaseError:
        logger.exception("Failed to update interview round %s", round_id)
        messages.error(request, "Failed to update interview round")
        return _board_redirect("leaderboardList", board)

    messages.success(request, "Interview round updated successfully!")
    return _board_redirect("leaderboardList", board)


@editor_required
@require_POST
def delete_round(request, round_id):
    interview = InterviewRound.objects.filter(id=round_id).select_related("leaderboard").first()
    if not interview:
        messages.error(request, "Interview round not found")
        return _board_redirect("leaderboardList")
    board = interview.leaderboard
    try:
        interview.delete()
    except DatabaseError:
        logger.exception("Failed to delete interview round %s", round_id)
        messages.error(request, "Failed to delete interview round")
        return _board_redirect("leaderboardList", board)

    messages.success(request, "Interview round deleted successfully!")
    return _board_redirect("leaderboardList", board)


@require_GET
def public_leaderboard(request, public_id):
    try:
        board = classify_link(
            Leaderboard.objects.filter(public_id=public_id).first(),
            "Leaderboard",
            is_active_attr="is_public",
            expires_attr="public_expires_at",
        )
    except PublicLinkError as error:
        error.public_id = public_id
        return render_link_error(request, error)

    rounds = list(board.rounds.order_by("-score", "created_at"))
    high, medium = INTERVIEW_BAND
    for r in rounds:
        r.band = stats.score_band(r.score, high, medium)
    return render(request, "public/leaderboard.html", {
        "board": board,
        "ranked": stats.ranked(rounds),
        "summary": stats.leaderboard_summary(rounds),
    })


# ---------------------------------------------------------------------------
# Activeness boards
# ---------------------------------------------------------------------------

def _activeness_context(board):
    scores = list(board.scores.order_by("-score", "recorded_at")) if board else []
    high, medium = ACTIVENESS_BAND
    for s in scores:
        s.band = stats.score_band(s.score, high, medium)
    return {
        "ranked": stats.ranked(scores),
        "summary": stats.activeness_summary(scores),
        "student_totals": stats.student_totals(scores),
    }


@viewer_required
@require_GET
def activeness_list(request):
    boards, board = _selected_board(ActivenessBoard, request)
    context = {
        "boards": boards,
        "board": board,
        "public_url": request.build_absolute_uri(reverse("publicActiveness", args=[board.public_id])) if board else "",
    }
    context.update(_activeness_context(board))
    return render(request, "leaderboards/activeness_list.html", context)


@editor_required
@require_POST
def create_activeness_board(request):
    return _create_board(request, ActivenessBoard, "activeness board", "activenessList")


@admin_required
@require_POST
def delete_activeness_board(request, board_id):
    return _delete_board(request, ActivenessBoard, board_id, "activeness board", "activenessList")


@editor_required
@require_POST
def toggle_activeness_public(request, board_id):
    return _toggle_public(request, ActivenessBoard, board_id, "activeness board", "activenessList")


@editor_required
@require_POST
def add_score(request, board_id):
    board = ActivenessBoard.objects.filter(id=board_id).first()
    if not board:
        messages.error(request, "Activeness board not found")
        return _board_redirect("activenessList")
    try:
        fields = _parse_module_fields(request)
    except ValueError as exc:
        messages.error(request, str(exc))
        return _board_redirect("activenessList", board)

    try:
        ModuleScore.objects.create(board=board, **fields)
    except DatabaseError:
        logger.exception("Failed to add module score to board %s", board.id)
        messages.error(request, "Failed to add module score")
        return _board_redirect("activenessList", board)

    messages.success(request, "Module score added successfully!")
    return _board_redirect("activenessList", board)


@editor_required
@require_POST
def update_score(request, score_id):
    score = ModuleScore.objects.filter(id=score_id).select_related("board").first()
    if not score:
        messages.error(request, "Module score not found")
        return _board_redirect("activenessList")
    board = score.board
    try:
        fields = _parse_module_fields(request)
    except ValueError as exc:
        messages.error(request, str(exc))
        return _board_redirect("activenessList", board)

    try:
        ModuleScore.objects.filter(id=score.id).update(**fields)
    except DatabaseError:
        logger.exception("Failed to update module score %s", score_id)
        messages.error(request, "Failed to update module score")
        return _board_redirect("activenessList", board)

    messages.success(request, "Module score updated successfully!")
    return _board_redirect("activenessList", board)


@editor_required
@require_POST
def delete_score(request, score_id):
    score = ModuleScore.objects.filter(id=score_id).select_related("board").first()
    if not score:
        messages.error(request, "Module score not found")
        return _board_redirect("activenessList")
    board = score.board
    try:
        score.delete()
    except DatabaseError:
        logger.exception("Failed to delete module score %s", score_id)
        messages.error(request, "Failed to delete module score")
        return _board_redirect("activenessList", board)

    messages.success(request, "Module score deleted successfully!")
    return _board_redirect("activenessList", board)


@require_GET
def public_activeness(request, public_id):
    try:
        board = classify_link(
            ActivenessBoard.objects.filter(public_id=public_id).first(),
            "Activeness board",
            is_active_attr="is_public",
            expires_attr="public_expires_at",
        )
    except PublicLinkError as error:
        error.public_id = public_id
        return render_link_error(request, error)

    context = {"board": board}
    context.update(_activeness_context(board))
    return render(request, "public/activeness.html", context)
