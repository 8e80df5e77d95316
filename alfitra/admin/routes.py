"""Admin routes for evaluating modules and ranking participants."""
from flask import jsonify, request

from alfitra import db
from alfitra.admin import admin_bp
from alfitra.admin.leaderboard import (
    aggregate_leaderboard,
    evaluate_module,
    parse_section,
    quiz_day_leaderboard,
)
from alfitra.auth.models import User
from alfitra.modules.models import Module, QuizDay
from alfitra.quiz.models import Submission
from alfitra.common.decorators import admin_required
from alfitra.common.lookups import get_or_404, parse_id


def _users_for(submissions) -> dict:
    ids = {s.user_id for s in submissions}
    if not ids:
        return {}
    return {u.id: u for u in User.query.filter(User.id.in_(ids)).all()}


def _module_submissions(module_id: int, newest_first: bool = False):
    query = Submission.query.join(QuizDay, Submission.quiz_day_id == QuizDay.id)\
        .filter(QuizDay.module_id == module_id)
    if newest_first:
        query = query.order_by(Submission.created_at.desc(), Submission.id.desc())
    else:
        query = query.order_by(Submission.id)
    return query.all()


@admin_bp.route('/modules/<int:module_id>/evaluation', methods=['GET'])
@admin_required
def module_evaluation(module_id):
    """
    Evaluate every participant of a module.

    Each result carries ``total_score``, ``total_questions`` (answer records),
    ``quiz_days_completed`` and ``average_percent_per_question``.
    """
    module = get_or_404(Module, module_id, 'Module')
    quiz_days = QuizDay.query.filter_by(module_id=module.id)\
        .order_by(QuizDay.created_at.desc(), QuizDay.id.desc()).all()

    submissions = _module_submissions(module.id, newest_first=True)
    results = evaluate_module(submissions, _users_for(submissions))

    return jsonify({
        'success': True,
        'module': module.to_dict(),
        'quiz_days': [d.to_dict() for d in quiz_days],
        'results': results,
        'total_participants': len(results),
    }), 200


@admin_bp.route('/leaderboard/all', methods=['GET'])
@admin_required
def overall_leaderboard():
    """Ranking across all modules, optionally by one section's score."""
    section = parse_section(request.args.get('section'))
    submissions = Submission.query.order_by(Submission.id).all()
    leaderboard = aggregate_leaderboard(submissions, _users_for(submissions), section)
    return jsonify({'success': True, 'section': section, 'leaderboard': leaderboard}), 200


@admin_bp.route('/leaderboard/<int:module_id>', methods=['GET'])
@admin_required
def module_leaderboard(module_id):
    module = get_or_404(Module, module_id, 'Module')
    section = parse_section(request.args.get('section'))
    submissions = _module_submissions(module.id)
    leaderboard = aggregate_leaderboard(submissions, _users_for(submissions), section)
    return jsonify({
        'success': True,
        'module': module.to_dict(),
        'section': section,
        'leaderboard': leaderboard,
    }), 200


@admin_bp.route('/leaderboard', methods=['GET'])
@admin_required
def score_leaderboard():
    """
    Top 100 by total score, then by least total time.

    Optional ``quiz_day_id`` query parameter restricts it to one quiz day.
    """
    query = Submission.query
    quiz_day_id = request.args.get('quiz_day_id')
    if quiz_day_id:
        query = query.filter_by(quiz_day_id=parse_id(quiz_day_id, 'quiz day id'))
    submissions = query.order_by(Submission.id).all()
    return jsonify({
        'success': True,
        'leaderboard': quiz_day_leaderboard(submissions, _users_for(submissions)),
    }), 200


@admin_bp.route('/participants/<int:quiz_day_id>', methods=['GET'])
@admin_required
def quiz_day_participants(quiz_day_id):
    """Everyone who submitted on a quiz day, best score first, then fastest."""
    quiz_day = get_or_404(QuizDay, quiz_day_id, 'Quiz day')
    submissions = Submission.query.filter_by(quiz_day_id=quiz_day.id)\
        .order_by(Submission.total_score.desc(), Submission.time_taken_seconds.asc(), Submission.id)\
        .all()
    users = _users_for(submissions)

    participants = []
    for submission in submissions:
        item = submission.to_dict()
        user = users.get(submission.user_id)
        item['user'] = {
            'id': submission.user_id,
            'name': user.name if user else 'Unknown',
            'email': user.email if user else '',
        }
        participants.append(item)

    return jsonify({
        'success': True,
        'quiz_day': quiz_day.to_dict(include_module=True),
        'participants': participants,
    }), 200


@admin_bp.route('/participant-profile/<int:user_id>', methods=['GET'])
@admin_required
def participant_profile(user_id):
    """
    A participant's profile and full quiz history.

    Scores are always included; ``results_published`` on each entry tells
    the caller whether the participant can see them yet.
    """
    user = get_or_404(User, user_id, 'User')
    rows = db.session.query(Submission, QuizDay)\
        .join(QuizDay, Submission.quiz_day_id == QuizDay.id)\
        .filter(Submission.user_id == user.id)\
        .order_by(Submission.created_at.desc(), Submission.id.desc())\
        .all()

    submissions = []
    for submission, quiz_day in rows:
        item = submission.to_dict()
        item['quiz_day'] = {
            'id': quiz_day.id,
            'date_label': quiz_day.date_label,
            'results_published': quiz_day.results_published,
        }
        submissions.append(item)

    return jsonify({
        'success': True,
        'user': user.profile_dict(),
        'submissions': submissions,
    }), 200
