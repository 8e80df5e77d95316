"""
Quiz-taking and scoring engine.

Everything here works on plain values and model instances without touching
the session, so the rules can be tested without a database:

- options are shuffled per fetch; the permutation travels with the question
  (``option_order``: shuffled position -> canonical index) so a submitted
  position can be mapped back without ever sending the correct index
- an MCQ answer is correct iff its canonical index equals ``correct_index``
- a fill-blank answer is correct iff both trimmed answers equal the stored
  strings exactly (no numeric coercion, "07" != "7")
- each correct answer adds one point to its module's section and to the total
"""
import random
from dataclasses import dataclass, field

from alfitra.common.errors import ValidationError
from alfitra.modules.models import SECTIONS
from alfitra.quiz.models import QUESTION_FILLBLANK

_rng = random.SystemRandom()

STATUS_NOT_STARTED = "not_started"
STATUS_IN_PROGRESS = "in_progress"
STATUS_LOCKED = "locked"


def shuffle_options(options: list, rng: random.Random | None = None) -> tuple[list, list[int]]:
    """
    Fisher-Yates shuffle of an option list.

    Returns ``(shuffled, order)`` where ``shuffled[i] == options[order[i]]``.
    """
    rng = rng or _rng
    order = list(range(len(options)))
    for i in range(len(order) - 1, 0, -1):
        j = rng.randint(0, i)
        order[i], order[j] = order[j], order[i]
    return [options[i] for i in order], order


def canonical_index(selected_index, option_order, option_count: int) -> int | None:
    """
    Map a submitted MCQ position back to the stored option index.

    ``option_order`` is the permutation the participant was shown; without it
    the position is taken as already canonical. Returns None for a missing or
    out-of-range selection. A malformed ``option_order`` is a client error.
    """
    if option_order is not None:
        if (not isinstance(option_order, list)
                or any(isinstance(i, bool) or not isinstance(i, int) for i in option_order)
                or sorted(option_order) != list(range(option_count))):
            raise ValidationError("option_order must be a permutation of the option indices")

    if isinstance(selected_index, bool) or not isinstance(selected_index, int):
        return None
    if not 0 <= selected_index < option_count:
        return None
    if option_order is None:
        return selected_index
    return option_order[selected_index]


def _text_answer(value) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError("Fill-in-the-blank answers must be text")
    return value


def parse_question_id(value) -> int | None:
    """An int (not bool) or a string of ASCII digits; anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    return None


def check_fillblank(question, answer1: str, answer2: str) -> bool:
    return (answer1.strip() == (question.correct_answer1 or "")
            and answer2.strip() == (question.correct_answer2 or ""))


@dataclass
class ScoredAnswer:
    question_id: int
    is_correct: bool
    selected_index: int | None = None
    user_answer1: str | None = None
    user_answer2: str | None = None


@dataclass
class ScoreResult:
    answers: list[ScoredAnswer] = field(default_factory=list)
    section_scores: dict = field(default_factory=lambda: {s: 0 for s in SECTIONS})
    total_score: int = 0


def score_answers(submitted: list, questions: dict) -> ScoreResult:
    """
    Score a submitted answer list.

    Args:
        submitted: answer dicts as sent by the client
            (``question_id`` plus ``selected_index``/``option_order`` or
            ``user_answer1``/``user_answer2``)
        questions: ``{question_id: (question, section)}``, where ``section``
            was resolved through the question's quiz day and module

    Answers for unknown questions are dropped, as are repeated answers to a
    question already answered earlier in the list.
    """
    result = ScoreResult()
    seen = set()

    for raw in submitted:
        if not isinstance(raw, dict):
            raise ValidationError("Each answer must be an object")
        question_id = parse_question_id(raw.get("question_id"))
        if question_id not in questions or question_id in seen:
            continue
        seen.add(question_id)
        question, section = questions[question_id]

        if question.question_type == QUESTION_FILLBLANK:
            answer1 = _text_answer(raw.get("user_answer1"))
            answer2 = _text_answer(raw.get("user_answer2"))
            scored = ScoredAnswer(
                question_id=question_id,
                is_correct=check_fillblank(question, answer1, answer2),
                user_answer1=answer1,
                user_answer2=answer2,
            )
        else:
            index = canonical_index(
                raw.get("selected_index"), raw.get("option_order"), len(question.options or [])
            )
            scored = ScoredAnswer(
                question_id=question_id,
                is_correct=index is not None and index == question.correct_index,
                selected_index=index,
            )

        if scored.is_correct:
            result.section_scores[section] = result.section_scores.get(section, 0) + 1
            result.total_score += 1
        result.answers.append(scored)

    return result


def participant_status(quiz_day, submission) -> str:
    """Where a participant stands on a quiz day (results visibility is separate)."""
    if not quiz_day.accepting_responses:
        return STATUS_LOCKED
    if submission is None:
        return STATUS_NOT_STARTED
    return STATUS_IN_PROGRESS


def question_for_participant(question, rng: random.Random | None = None) -> dict:
    """
    Serialize a question for taking: MCQ options shuffled with their
    ``option_order``; correct answers are never included.
    """
    data = {
        "id": question.id,
        "quiz_day_id": question.quiz_day_id,
        "text": question.text,
        "question_type": question.question_type,
    }
    if question.question_type != QUESTION_FILLBLANK:
        shuffled, order = shuffle_options(list(question.options or []), rng)
        data["options"] = shuffled
        data["option_order"] = order
    data.update(question.reference_dict())
    return data
