"""
Summary statistics for leaderboards and activeness boards.
Inputs are rows already ordered by score descending.
"""
from decimal import Decimal

MEDALS = ("gold", "silver", "bronze")


def _average(values):
    values = list(values)
    if not values:
        return 0.0
    return round(float(sum(Decimal(str(v)) for v in values) / len(values)), 1)


def score_band(score, high, medium):
    if score >= high:
        return "high"
    if score >= medium:
        return "medium"
    return "low"


def ranked(rows):
    """Pair each row with its 1-based rank and a medal for the top three."""
    return [
        {"rank": index + 1, "medal": MEDALS[index] if index < len(MEDALS) else None, "row": row}
        for index, row in enumerate(rows)
    ]


def leaderboard_summary(rounds):
    rounds = list(rounds)
    return {
        "average": _average(r.score for r in rounds),
        "highest": max((r.score for r in rounds), default=0),
        "total": len(rounds),
        "students": len({r.student_name for r in rounds}),
    }


def activeness_summary(scores):
    scores = list(scores)
    return {
        "average": _average(s.score for s in scores),
        "highest": max((s.score for s in scores), default=0),
        "total": len(scores),
        "students": len({s.student_name for s in scores}),
        "modules": len({s.module_name for s in scores}),
    }


def student_totals(scores):
    """Average module score per student, best first."""
    by_student = {}
    for s in scores:
        by_student.setdefault(s.student_name, []).append(s.score)
    totals = [
        {"student_name": name, "modules": len(values), "average": _average(values)}
        for name, values in by_student.items()
    ]
    totals.sort(key=lambda row: (-row["average"], row["student_name"].lower()))
    return totals
