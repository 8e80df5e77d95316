"""
Evaluation and leaderboard aggregation.

Plain functions over submission rows so they can be tested without a
database. A row only needs ``user_id``, ``quiz_day_id``, ``total_score``,
``section_scores``, ``time_taken_seconds`` and ``answered_count``; ``users``
maps user ids to objects with ``name`` and ``email``.

Two different averages are produced and must not be confused:

- ``average_percent_per_question`` (module evaluation): correct answers as a
  percentage of answer records, rounded to two places
- ``average_score_per_quiz`` (leaderboards): points per submission

Groups keep first-seen order and every sort is stable, so ties stay in the
order their first submission appeared.
"""
from alfitra.common.errors import ValidationError
from alfitra.modules.models import SECTIONS

SECTION_ALL = "All"
SECTION_FILTERS = (SECTION_ALL,) + SECTIONS
QUIZ_DAY_LEADERBOARD_LIMIT = 100


def parse_section(value) -> str:
    """Validate a ``section`` filter; a missing value means ``All``."""
    if value in (None, ""):
        return SECTION_ALL
    if value not in SECTION_FILTERS:
        raise ValidationError(f"section must be one of: {', '.join(SECTION_FILTERS)}")
    return value


def _user_fields(users: dict, user_id: int) -> dict:
    user = users.get(user_id)
    return {
        "user_id": user_id,
        "name": user.name if user else "Unknown",
        "email": user.email if user else "",
    }


def _assign_ranks(entries: list) -> list:
    for position, entry in enumerate(entries, start=1):
        entry["rank"] = position
    return entries


def evaluate_module(submissions, users: dict) -> list:
    """Per-user totals over one module's submissions, best first."""
    groups = {}
    for sub in submissions:
        entry = groups.get(sub.user_id)
        if entry is None:
            entry = groups[sub.user_id] = {
                **_user_fields(users, sub.user_id),
                "total_score": 0,
                "total_questions": 0,
                "quiz_day_ids": set(),
                "submission_ids": [],
            }
        entry["total_score"] += sub.total_score or 0
        entry["total_questions"] += sub.answered_count
        entry["quiz_day_ids"].add(sub.quiz_day_id)
        entry["submission_ids"].append(sub.id)

    results = []
    for entry in groups.values():
        days = entry.pop("quiz_day_ids")
        entry["quiz_days_completed"] = len(days)
        if entry["total_questions"] > 0:
            entry["average_percent_per_question"] = round(
                entry["total_score"] / entry["total_questions"] * 100, 2
            )
        else:
            entry["average_percent_per_question"] = 0
        results.append(entry)

    results.sort(key=lambda e: e["total_score"], reverse=True)
    return _assign_ranks(results)


def aggregate_leaderboard(submissions, users: dict, section: str = SECTION_ALL) -> list:
    """
    Per-user totals across submissions, best first.

    With a ``section`` other than ``All`` the summed section score replaces
    ``total_score`` before sorting; ``combined_score`` always keeps the
    overall total.
    """
    groups = {}
    for sub in submissions:
        entry = groups.get(sub.user_id)
        if entry is None:
            entry = groups[sub.user_id] = {
                **_user_fields(users, sub.user_id),
                "total_score": 0,
                "quizzes_taken": 0,
                "section_scores": {s: 0 for s in SECTIONS},
            }
        entry["total_score"] += sub.total_score or 0
        entry["quizzes_taken"] += 1
        for name, score in (sub.section_scores or {}).items():
            entry["section_scores"][name] = entry["section_scores"].get(name, 0) + (score or 0)

    results = []
    for entry in groups.values():
        entry["average_score_per_quiz"] = (
            entry["total_score"] / entry["quizzes_taken"] if entry["quizzes_taken"] else 0
        )
        entry["combined_score"] = entry["total_score"]
        if section != SECTION_ALL:
            entry["total_score"] = entry["section_scores"].get(section, 0)
        results.append(entry)

    results.sort(key=lambda e: e["total_score"], reverse=True)
    return _assign_ranks(results)


def quiz_day_leaderboard(submissions, users: dict, limit: int = QUIZ_DAY_LEADERBOARD_LIMIT) -> list:
    """Totals with summed time; highest score first, then fastest."""
    groups = {}
    for sub in submissions:
        entry = groups.get(sub.user_id)
        if entry is None:
            entry = groups[sub.user_id] = {
                **_user_fields(users, sub.user_id),
                "total_score": 0,
                "total_time": 0,
                "submission_count": 0,
            }
        entry["total_score"] += sub.total_score or 0
        entry["total_time"] += sub.time_taken_seconds or 0
        entry["submission_count"] += 1

    results = sorted(groups.values(), key=lambda e: (-e["total_score"], e["total_time"]))
    return _assign_ranks(results[:limit])
