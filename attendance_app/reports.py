"""
Attendance reporting helpers
Month aggregation for the calendar, per-student rows for the dashboard,
and the search / sort / CSV plumbing shared with the batch statistics pages.
"""
import calendar
import csv
from datetime import date

from django.db.models import Count
from django.http import HttpResponse
from django.utils import timezone

from .models import AttendanceRecord, AttendanceSession

BUCKET_HIGH = 70
BUCKET_MEDIUM = 50

SORT_NAME = "name"
SORT_PERCENTAGE = "percentage"
SORT_PRESENT = "present"
SORT_COLUMNS = (SORT_NAME, SORT_PERCENTAGE, SORT_PRESENT)
ORDER_ASC = "asc"
ORDER_DESC = "desc"

# Sunday-first padding reaches into the neighbouring year.
MIN_YEAR = 2
MAX_YEAR = 9998


def attendance_bucket(percentage, high=BUCKET_HIGH, medium=BUCKET_MEDIUM):
    """Visual band for a percentage: high, medium or low."""
    if percentage >= high:
        return "high"
    if percentage >= medium:
        return "medium"
    return "low"


def daily_percentage(present_count):
    # Binary per day: any record means 100%.
    return 100 if present_count > 0 else 0


def month_bounds(year, month):
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def shift_month(year, month, delta):
    """Move by ``delta`` months, staying inside MIN_YEAR..MAX_YEAR."""
    index = year * 12 + (month - 1) + delta
    index = max(MIN_YEAR * 12, min(index, MAX_YEAR * 12 + 11))
    return index // 12, index % 12 + 1


def calendar_weeks(year, month):
    """Sunday-first week rows; days outside the month are None."""
    cal = calendar.Calendar(firstweekday=6)
    return [
        [day if day.month == month else None for day in week]
        for week in cal.monthdatescalendar(year, month)
    ]


def month_attendance(year, month, batch=None):
    """
    Map each date in the month that has a session to
    {date, count, percentage, bucket, session}.
    Without a batch filter the latest-created session of a day wins.
    """
    start, end = month_bounds(year, month)
    sessions = AttendanceSession.objects.filter(session_date__gte=start, session_date__lte=end)
    if batch is not None:
        sessions = sessions.filter(batch=batch)
    sessions = (
        sessions
        .annotate(record_count=Count("records"))
        .order_by("session_date", "created_at", "id")
    )
    days = {}
    for session in sessions:
        percentage = daily_percentage(session.record_count)
        days[session.session_date] = {
            "date": session.session_date,
            "count": session.record_count,
            "percentage": percentage,
            "bucket": attendance_bucket(percentage),
            "session": session,
        }
    return days


def session_rows(session):
    """
    Per-student rows for one session: every roster student plus any
    name that marked attendance without being on the roster.
    """
    records = {
        record.student_name: record
        for record in AttendanceRecord.objects.filter(session=session).order_by("marked_at")
    }
    names = list(session.batch.students.values_list("student_name", flat=True))
    roster = set(names)
    names.extend(name for name in records if name not in roster)

    rows = []
    for name in names:
        record = records.get(name)
        present = 1 if record else 0
        rows.append(
            {
                "name": name,
                "present_count": present,
                "percentage": daily_percentage(present),
                "status": record.get_status_display() if record else "Absent",
                "marked_at": timezone.localtime(record.marked_at) if record else None,
            }
        )
    return rows


def filter_rows(rows, query, name_key="name"):
    """Case-insensitive substring match on the name column."""
    query = (query or "").strip().lower()
    if not query:
        return list(rows)
    return [row for row in rows if query in str(row[name_key]).lower()]


def sort_rows(rows, sort_by, order, key_map):
    """
    Sort rows by one of SORT_COLUMNS. ``key_map`` maps a column to the
    row key holding it. Names compare case-insensitively.
    """
    key = key_map[sort_by]

    def keyfunc(row):
        value = row[key]
        return str(value).lower() if sort_by == SORT_NAME else value

    return sorted(rows, key=keyfunc, reverse=(order == ORDER_DESC))


def parse_sort(params, default=SORT_PERCENTAGE):
    sort_by = params.get("sort")
    order = params.get("order")
    if sort_by not in SORT_COLUMNS:
        sort_by = default
    if order not in (ORDER_ASC, ORDER_DESC):
        order = ORDER_DESC
    return sort_by, order


def next_sort(sort_by, order, column):
    """Clicking the current column flips the order; a new column starts descending."""
    if column == sort_by:
        return column, ORDER_ASC if order == ORDER_DESC else ORDER_DESC
    return column, ORDER_DESC


def sort_links(sort_by, order):
    """Query-string state for each sortable column header."""
    links = {}
    for column in SORT_COLUMNS:
        col, col_order = next_sort(sort_by, order, column)
        links[column] = {"sort": col, "order": col_order, "active": column == sort_by}
    return links


def csv_response(filename, headers, rows, preamble=()):
    """
    Stream ``rows`` as a CSV download with every table field quoted.
    ``preamble`` lines are written before the table, followed by a blank line.
    They are quoted only when they contain a quote, comma or line break.
    """
    response = HttpResponse(content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{safe_filename(filename)}.csv"'
    if preamble:
        header_writer = csv.writer(response, lineterminator="\n")
        header_writer.writerows([line] for line in preamble)
        header_writer.writerow([])
    writer = csv.writer(response, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return response


def safe_filename(raw, fallback="export"):
    cleaned = "".join(ch for ch in raw if ch not in '\\/:*?"<>|').strip()
    return cleaned or fallback
