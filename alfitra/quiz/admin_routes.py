"""
Admin routes for question management.

Questions are append-only: they can be created and listed but not edited.
"""
import re

from flask import current_app, jsonify

from alfitra import db
from alfitra.quiz import quiz_bp
from alfitra.quiz.models import (
    Question,
    QUESTION_FILLBLANK,
    QUESTION_MCQ,
    QUESTION_TYPES,
    REFERENCE_TYPES,
)
from alfitra.modules.models import QuizDay
from alfitra.common.decorators import admin_required, get_json_body
from alfitra.common.errors import ValidationError
from alfitra.common.lookups import get_or_404, parse_id


DIGITS_REGEX = re.compile(r"^[0-9]+$")


def _reference_text(data: dict, key: str) -> str:
    value = data.get(key) or ""
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be text")
    return value


def _digits(value, label: str) -> str:
    if not isinstance(value, str) or not DIGITS_REGEX.match(value.strip()):
        raise ValidationError(f"{label} must contain digits only")
    return value.strip()


@quiz_bp.route('/admin/questions', methods=['POST'])
@admin_required
def create_question():
    """
    Create a question on a quiz day.

    Request body:
    {
        "quiz_day_id": 12,
        "text": "Question text",
        "question_type": "mcq" | "fillblank",   // default mcq
        "options": ["A", "B", "C"],             // mcq
        "correct_index": 1,                     // mcq
        "correct_answer1": "2",                 // fillblank: Surah number
        "correct_answer2": "255",               // fillblank: Ayat number
        "reference_type": "none" | "pdf" | "url",
        "reference_pdf_url": "", "reference_pdf_public_id": "",
        "reference_url": "", "reference_title": ""
    }
    """
    data = get_json_body()

    if data.get('quiz_day_id') in (None, ''):
        raise ValidationError('quiz_day_id is required')
    quiz_day = get_or_404(QuizDay, parse_id(data['quiz_day_id'], 'quiz day id'), 'Quiz day')

    text = data.get('text')
    if not isinstance(text, str) or not text.strip():
        raise ValidationError('Question text is required')

    question_type = data.get('question_type') or QUESTION_MCQ
    if question_type not in QUESTION_TYPES:
        raise ValidationError(f"question_type must be one of: {', '.join(QUESTION_TYPES)}")

    reference_type = data.get('reference_type') or 'none'
    if reference_type not in REFERENCE_TYPES:
        raise ValidationError(f"reference_type must be one of: {', '.join(REFERENCE_TYPES)}")

    question = Question(
        quiz_day_id=quiz_day.id,
        text=text.strip(),
        question_type=question_type,
        reference_type=reference_type,
        reference_pdf_url=_reference_text(data, 'reference_pdf_url'),
        reference_pdf_public_id=_reference_text(data, 'reference_pdf_public_id'),
        reference_url=_reference_text(data, 'reference_url'),
        reference_title=_reference_text(data, 'reference_title'),
    )

    if question_type == QUESTION_MCQ:
        options = data.get('options')
        if not isinstance(options, list) or len(options) < 2:
            raise ValidationError('Multiple choice questions need at least two options')
        if any(not isinstance(o, str) or not o.strip() for o in options):
            raise ValidationError('Options cannot be empty')
        correct_index = data.get('correct_index')
        if isinstance(correct_index, bool) or not isinstance(correct_index, int):
            raise ValidationError('correct_index is required')
        if not 0 <= correct_index < len(options):
            raise ValidationError('correct_index is out of range')
        question.options = [o.strip() for o in options]
        question.correct_index = correct_index
    elif question_type == QUESTION_FILLBLANK:
        question.correct_answer1 = _digits(data.get('correct_answer1'), 'Surah number')
        question.correct_answer2 = _digits(data.get('correct_answer2'), 'Ayat number')

    db.session.add(question)
    db.session.commit()

    current_app.logger.info(f"Question {question.id} ({question_type}) added to quiz day {quiz_day.id}")
    return jsonify({'success': True, 'question': question.to_admin_dict()}), 201


@quiz_bp.route('/admin/quiz-days/<int:quiz_day_id>/questions', methods=['GET'])
@admin_required
def list_questions(quiz_day_id):
    quiz_day = get_or_404(QuizDay, quiz_day_id, 'Quiz day')
    questions = Question.query.filter_by(quiz_day_id=quiz_day.id).order_by(Question.id).all()
    return jsonify({
        'success': True,
        'quiz_day': quiz_day.to_dict(),
        'questions': [q.to_admin_dict() for q in questions],
    }), 200
