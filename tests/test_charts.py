from datetime import date
from types import SimpleNamespace

import pytest

from utils import charts

TODAY = date(2024, 3, 20)


def _student(sid, name):
    return SimpleNamespace(id=sid, name=name)


def _solution(student_id, day, count):
    return SimpleNamespace(student_id=student_id, date=day, solved_questions=count)


STUDENTS = [_student("s1", "Ali"), _student("s2", "Ayşe"), _student("s3", "Can")]
SOLUTIONS = [
    _solution("s1", "2024-03-18", 10),
    _solution("s1", "2024-03-10", 4),
    _solution("s2", "2024-03-18", 3),
    _solution("s2", "2024-03-19", 20),
    _solution("s2", "2024-01-02", 5),
]


def test_to_series_rows_per_date():
    rows = charts.to_series(STUDENTS, SOLUTIONS)

    assert [row["date"] for row in rows] == [
        "2024-01-02",
        "2024-03-10",
        "2024-03-18",
        "2024-03-19",
    ]
    march_18 = rows[2]
    assert march_18["s1"] == 10
    assert march_18["s2"] == 3
    assert march_18["s3"] == 0
    assert march_18["s3_name"] == "Can"


def test_to_series_date_range_is_inclusive():
    rows = charts.to_series(STUDENTS, SOLUTIONS, date_range=("2024-03-10", "2024-03-18"))

    assert [row["date"] for row in rows] == ["2024-03-10", "2024-03-18"]


def test_to_series_empty():
    assert charts.to_series(STUDENTS, []) == []


@pytest.mark.parametrize(
    "timeframe, expected",
    [("all", 5), ("30days", 4), ("month", 4), ("7days", 3), ("week", 3)],
)
def test_filter_by_timeframe(timeframe, expected):
    assert len(charts.filter_by_timeframe(SOLUTIONS, timeframe, today=TODAY)) == expected


def test_filter_by_unknown_timeframe():
    with pytest.raises(ValueError):
        charts.filter_by_timeframe(SOLUTIONS, "year", today=TODAY)


def test_rank_students():
    rankings = charts.rank_students(STUDENTS, SOLUTIONS, today=TODAY)

    assert [r["student_id"] for r in rankings] == ["s2", "s1", "s3"]
    ayse, ali, can = rankings
    assert ayse["total"] == 28
    assert ayse["last_week_total"] == 23
    assert ayse["best_day"] == {"date": "2024-03-19", "count": 20}
    assert ali["last_week_total"] == 10
    assert ali["previous_week_total"] == 4
    assert ali["change_percentage"] == 150
    # no previous week activity counts as a full increase
    assert ayse["change_percentage"] == 100


def test_students_without_solutions_rank_last_with_zero():
    rankings = charts.rank_students(STUDENTS, [], today=TODAY)

    assert [r["student_id"] for r in rankings] == ["s1", "s2", "s3"]
    assert all(r["total"] == 0 for r in rankings)
    assert all(r["best_day"] is None for r in rankings)
    assert all(r["change_percentage"] == 0 for r in rankings)


def test_ties_keep_input_order():
    solutions = [_solution("s3", "2024-03-19", 5), _solution("s1", "2024-03-19", 5)]

    rankings = charts.rank_students(STUDENTS, solutions, today=TODAY)

    assert [r["student_id"] for r in rankings] == ["s1", "s3", "s2"]


def test_weekly_best():
    rankings = charts.rank_students(STUDENTS, SOLUTIONS, today=TODAY)

    assert charts.weekly_best(rankings)["student_id"] == "s2"
    assert charts.weekly_best(charts.rank_students(STUDENTS, [], today=TODAY)) is None
    assert charts.weekly_best([]) is None
