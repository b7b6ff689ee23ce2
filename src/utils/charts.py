"""Chart and ranking helpers for daily solved-question counts.

Pure functions over students (``id``, ``name``) and solution records
(``student_id``, ``date`` as YYYY-MM-DD, ``solved_questions``). No I/O.
"""

from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from utils.timeutils import today_utc

TIMEFRAME_DAYS = {
    "all": None,
    "30days": 30,
    "month": 30,
    "7days": 7,
    "week": 7,
}


def _day(value) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def filter_by_timeframe(solutions: Iterable, timeframe: str = "all", today: Optional[date] = None) -> List:
    """Keep solutions dated on or after ``today`` minus the timeframe.

    Raises:
        ValueError: If the timeframe is unknown.
    """
    if timeframe not in TIMEFRAME_DAYS:
        raise ValueError(f"Unknown timeframe: {timeframe}")
    days = TIMEFRAME_DAYS[timeframe]
    solutions = list(solutions)
    if days is None:
        return solutions
    cutoff = (today or today_utc()) - timedelta(days=days)
    return [s for s in solutions if _day(s.date) >= cutoff]


def to_series(
    students: Sequence,
    solutions: Iterable,
    date_range: Optional[Tuple[str, str]] = None,
) -> List[Dict[str, Any]]:
    """One row per distinct solution date, with a count per student.

    Args:
        students: Students to include as series.
        solutions: Solution records.
        date_range: Optional inclusive ``(start, end)`` pair of ISO dates.

    Returns:
        Rows sorted by date. Each row has ``date``, one key per student id
        holding the count (0 if absent) and ``<student id>_name``.
    """
    counts: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
    start, end = (_day(date_range[0]), _day(date_range[1])) if date_range else (None, None)
    for solution in solutions:
        day = _day(solution.date)
        if start is not None and not (start <= day <= end):
            continue
        counts[day.isoformat()][solution.student_id] += solution.solved_questions

    rows = []
    for day in sorted(counts):
        row: Dict[str, Any] = {"date": day}
        for student in students:
            row[student.id] = counts[day].get(student.id, 0)
            row[f"{student.id}_name"] = student.name
        rows.append(row)
    return rows


def _best_day(daily: Dict[str, int]) -> Optional[Dict[str, Any]]:
    best_date, best_count = None, 0
    for day in sorted(daily):
        if daily[day] > best_count:
            best_date, best_count = day, daily[day]
    if best_date is None:
        return None
    return {"date": best_date, "count": best_count}


def _change_percentage(current: int, previous: int) -> int:
    if previous > 0:
        return round((current - previous) / previous * 100)
    return 100 if current > 0 else 0


def rank_students(
    students: Sequence, solutions: Iterable, today: Optional[date] = None
) -> List[Dict[str, Any]]:
    """Leaderboard of students by total solved questions.

    Every student appears, including those without any solutions (total 0).
    Ties keep the order of ``students``.
    """
    today = today or today_utc()
    week_start = today - timedelta(days=7)
    previous_week_start = today - timedelta(days=14)

    daily: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for solution in solutions:
        daily[solution.student_id][_day(solution.date).isoformat()] += solution.solved_questions

    rankings = []
    for student in students:
        per_day = daily.get(student.id, {})
        last_week = sum(c for d, c in per_day.items() if _day(d) >= week_start)
        previous_week = sum(
            c for d, c in per_day.items() if previous_week_start <= _day(d) < week_start
        )
        rankings.append(
            {
                "student_id": student.id,
                "student_name": student.name,
                "total": sum(per_day.values()),
                "last_week_total": last_week,
                "previous_week_total": previous_week,
                "change_percentage": _change_percentage(last_week, previous_week),
                "best_day": _best_day(per_day),
            }
        )
    # sorted() is stable
    return sorted(rankings, key=lambda r: r["total"], reverse=True)


def weekly_best(rankings: Sequence[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """The summary with the highest ``last_week_total``, or None if nobody solved any."""
    if not rankings:
        return None
    best = max(rankings, key=lambda r: r["last_week_total"])
    return best if best["last_week_total"] > 0 else None
