"""
Participant routes for quiz functionality.

Participants can:
- Fetch the current (or a chosen) published quiz day with shuffled options
- Submit or update their answers while responses are open
- Review their previous submissions
"""
from datetime import datetime

from flask import current_app, jsonify, request
from flask_login import current_user
from sqlalchemy.exc import IntegrityError

from alfitra import db
from alfitra.quiz import quiz_bp
from alfitra.quiz.models import Question, Submission, SubmissionAnswer
from alfitra.quiz.scoring import (
    parse_question_id, participant_status, question_for_participant, score_answers,
)
from alfitra.modules.models import Module, QuizDay
from alfitra.common.decorators import get_json_body, login_required
from alfitra.common.errors import AuthorizationError, NotFoundError, ValidationError
from alfitra.common.lookups import parse_id


def _find_submission(user_id: int, quiz_day_id: int):
    return Submission.query.filter_by(user_id=user_id, quiz_day_id=quiz_day_id).first()


def _parse_time_taken(value):
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError("time_taken_seconds must be a non-negative number")
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        raise ValidationError("time_taken_seconds must be a non-negative number")
    if seconds < 0:
        raise ValidationError("time_taken_seconds must be a non-negative number")
    return seconds


def _load_scoring_questions(quiz_day_id: int, answers: list) -> dict:
    """
    Resolve the answered questions of this quiz day together with their
    section, joining Question -> QuizDay -> Module.
    """
    ids = {parse_question_id(a.get("question_id")) for a in answers if isinstance(a, dict)}
    ids.discard(None)
    if not ids:
        return {}

    rows = (
        db.session.query(Question, Module.section)
        .join(QuizDay, Question.quiz_day_id == QuizDay.id)
        .join(Module, QuizDay.module_id == Module.id)
        .filter(Question.id.in_(ids), Question.quiz_day_id == quiz_day_id)
        .all()
    )
    return {question.id: (question, section) for question, section in rows}


def _apply_result(submission: Submission, result, time_taken) -> None:
    """Replace the stored answer set and scores with a freshly scored one."""
    submission.answers = [
        SubmissionAnswer(
            question_id=a.question_id,
            position=position,
            selected_index=a.selected_index,
            user_answer1=a.user_answer1,
            user_answer2=a.user_answer2,
            is_correct=a.is_correct,
        )
        for position, a in enumerate(result.answers)
    ]
    # New dict so the JSON column is flagged dirty
    submission.section_scores = dict(result.section_scores)
    submission.total_score = result.total_score
    if time_taken is not None:
        submission.time_taken_seconds = time_taken
    submission.last_updated = datetime.utcnow()


@quiz_bp.route('/quiz', methods=['GET'])
@login_required
def fetch_quiz():
    """
    Get a quiz day to take: the requested one, or the newest published and
    active day. Includes the caller's existing submission for prefilling.
    """
    query = QuizDay.query.filter_by(is_published=True, is_active=True)
    quiz_day_id = request.args.get('quiz_day_id')
    if quiz_day_id:
        quiz_day = query.filter_by(id=parse_id(quiz_day_id, 'quiz day id')).first()
    else:
        quiz_day = query.order_by(QuizDay.created_at.desc(), QuizDay.id.desc()).first()
    if not quiz_day:
        raise NotFoundError('No published quiz found')

    questions = Question.query.filter_by(quiz_day_id=quiz_day.id).order_by(Question.id).all()
    submission = _find_submission(current_user.id, quiz_day.id)
    reveal = bool(quiz_day.results_published)

    return jsonify({
        'success': True,
        'quiz_day': quiz_day.to_dict(include_module=True),
        'status': participant_status(quiz_day, submission),
        'accepting_responses': quiz_day.accepting_responses,
        'questions': [question_for_participant(q) for q in questions],
        'submission': submission.to_dict(reveal_scores=reveal) if submission else None,
    }), 200


@quiz_bp.route('/quiz/submit', methods=['POST'])
@login_required
def submit_quiz():
    """
    Submit or update answers for a quiz day.

    Request body:
    {
        "quiz_day_id": 12,
        "answers": [
            {"question_id": 1, "selected_index": 2, "option_order": [1, 0, 2]},
            {"question_id": 2, "user_answer1": "2", "user_answer2": "255"}
        ],
        "time_taken_seconds": 340  // Optional
    }

    Each call replaces the previous answer set entirely.
    """
    data = get_json_body()

    if data.get('quiz_day_id') in (None, ''):
        raise ValidationError('Invalid quiz day')
    quiz_day = db.session.get(QuizDay, parse_id(data.get('quiz_day_id'), 'quiz day'))
    if not quiz_day:
        raise ValidationError('Invalid quiz day')

    if not quiz_day.is_published:
        raise AuthorizationError('Quiz is not published')
    if not quiz_day.responses_open:
        raise AuthorizationError('Responses are closed for this quiz')

    answers = data.get('answers')
    if not isinstance(answers, list):
        raise ValidationError('answers must be a list')
    time_taken = _parse_time_taken(data.get('time_taken_seconds'))

    result = score_answers(answers, _load_scoring_questions(quiz_day.id, answers))

    submission = _find_submission(current_user.id, quiz_day.id)
    created = submission is None
    if created:
        submission = Submission(user_id=current_user.id, quiz_day_id=quiz_day.id, time_taken_seconds=0)
        db.session.add(submission)
    _apply_result(submission, result, time_taken)
    try:
        db.session.commit()
    except IntegrityError:
        # A concurrent request created the row first; overwrite it instead
        db.session.rollback()
        submission = _find_submission(current_user.id, quiz_day.id)
        if submission is None:
            raise
        created = False
        _apply_result(submission, result, time_taken)
        db.session.commit()

    current_app.logger.info(
        f"Submission {'created' if created else 'updated'}: user {current_user.id}, "
        f"quiz day {quiz_day.id}, {len(result.answers)} answers, score {result.total_score}"
    )
    return jsonify({
        'success': True,
        'submission': submission.to_dict(reveal_scores=bool(quiz_day.results_published)),
    }), 201


@quiz_bp.route('/me/submissions', methods=['GET'])
@login_required
def my_submissions():
    """The caller's submissions, newest first; scores only for published results."""
    submissions = (
        Submission.query.filter_by(user_id=current_user.id)
        .order_by(Submission.created_at.desc(), Submission.id.desc())
        .all()
    )
    data = []
    for submission in submissions:
        day = submission.quiz_day
        item = submission.to_dict(reveal_scores=bool(day.results_published))
        item['quiz_day'] = {
            'id': day.id,
            'date_label': day.date_label,
            'results_published': day.results_published,
        }
        data.append(item)
    return jsonify({'success': True, 'submissions': data}), 200
