from flask import current_app, jsonify, request
from flask_login import current_user

from alfitra import db
from alfitra.modules import modules_bp
from alfitra.modules.models import Module, QuizDay, SECTIONS
from alfitra.common.decorators import admin_required, get_json_body, login_required
from alfitra.common.errors import ValidationError
from alfitra.common.lookups import get_or_404, parse_bool, parse_id


def _newest_first(query, model):
    return query.order_by(model.created_at.desc(), model.id.desc())


def _participant_day(day: QuizDay) -> dict:
    data = day.to_dict(include_module=True)
    data["accepting_responses"] = day.accepting_responses
    return data


# ---------------------------------------------------------------------------
# Modules
# ---------------------------------------------------------------------------

@modules_bp.route("/modules", methods=["GET"])
@login_required
def list_modules():
    """All modules, for participants to browse."""
    modules = _newest_first(Module.query, Module).all()
    return jsonify({"success": True, "modules": [m.to_dict() for m in modules]}), 200


@modules_bp.route("/admin/modules", methods=["GET"])
@admin_required
def admin_list_modules():
    modules = _newest_first(Module.query, Module).all()
    return jsonify({
        "success": True,
        "modules": [m.to_dict(include_creator=True) for m in modules],
    }), 200


@modules_bp.route("/admin/modules", methods=["POST"])
@admin_required
def create_module():
    """
    Create a module.

    Request body:
    {
        "name": "Seerat Basics",
        "description": "Optional description",
        "section": "Quran" | "Seerat"
    }
    """
    data = get_json_body()

    name = (data.get("name") or "").strip() if isinstance(data.get("name"), str) else ""
    if not name:
        raise ValidationError("Module name is required")

    section = data.get("section")
    if section not in SECTIONS:
        raise ValidationError(f"Section must be one of: {', '.join(SECTIONS)}")

    description = data.get("description") or ""
    if not isinstance(description, str):
        raise ValidationError("Description must be text")

    module = Module(
        name=name,
        description=description.strip(),
        section=section,
        created_by=current_user.id,
    )
    db.session.add(module)
    db.session.commit()

    current_app.logger.info(f"Module {module.id} '{module.name}' ({section}) created by user {current_user.id}")
    return jsonify({"success": True, "module": module.to_dict()}), 201


@modules_bp.route("/admin/modules/<int:module_id>", methods=["GET"])
@admin_required
def get_module(module_id):
    """A module with its quiz days, newest first."""
    module = get_or_404(Module, module_id, "Module")
    quiz_days = _newest_first(QuizDay.query.filter_by(module_id=module.id), QuizDay).all()
    return jsonify({
        "success": True,
        "module": module.to_dict(include_creator=True),
        "quiz_days": [d.to_dict() for d in quiz_days],
    }), 200


@modules_bp.route("/admin/modules/<int:module_id>", methods=["PUT"])
@admin_required
def update_module(module_id):
    """Only name and description can change; the section is fixed at creation."""
    module = get_or_404(Module, module_id, "Module")
    data = get_json_body()

    if "name" in data:
        name = data["name"].strip() if isinstance(data["name"], str) else ""
        if not name:
            raise ValidationError("Module name cannot be empty")
        module.name = name
    if "description" in data:
        description = data["description"] or ""
        if not isinstance(description, str):
            raise ValidationError("Description must be text")
        module.description = description.strip()

    db.session.commit()
    return jsonify({"success": True, "module": module.to_dict()}), 200


@modules_bp.route("/admin/modules/<int:module_id>", methods=["DELETE"])
@admin_required
def delete_module(module_id):
    """
    Delete a module together with its quiz days, their questions and
    submissions, and the module's reference materials.
    """
    from alfitra.materials import storage

    module = get_or_404(Module, module_id, "Module")
    public_ids = [m.storage_public_id for m in module.materials if m.storage_public_id]
    day_count = len(module.quiz_days)

    db.session.delete(module)
    db.session.commit()

    for public_id in public_ids:
        storage.destroy_quietly(public_id)

    current_app.logger.info(
        f"Module {module_id} deleted with {day_count} quiz days and {len(public_ids)} stored files"
    )
    return jsonify({"success": True, "message": "Module deleted successfully"}), 200


# ---------------------------------------------------------------------------
# Quiz days
# ---------------------------------------------------------------------------

@modules_bp.route("/admin/quiz-days", methods=["POST"])
@admin_required
def save_quiz_day():
    """
    Create a quiz day, or update one when ``id`` is given.

    An update only touches ``date_label`` and ``is_active``; a day never
    moves to another module.
    """
    data = get_json_body()

    is_active = data.get("is_active")
    if is_active is not None and not isinstance(is_active, bool):
        raise ValidationError("is_active must be true or false")

    date_label = data.get("date_label")
    if date_label is not None and not isinstance(date_label, str):
        raise ValidationError("date_label must be text")

    if data.get("id") not in (None, ""):
        quiz_day = get_or_404(QuizDay, parse_id(data["id"], "quiz day id"), "Quiz day")
        if date_label is not None:
            if not date_label.strip():
                raise ValidationError("date_label cannot be empty")
            quiz_day.date_label = date_label.strip()
        if is_active is not None:
            quiz_day.is_active = is_active
        db.session.commit()
        return jsonify({"success": True, "quiz_day": quiz_day.to_dict()}), 200

    if data.get("module_id") in (None, ""):
        raise ValidationError("Module ID is required")
    module = get_or_404(Module, parse_id(data["module_id"], "module id"), "Module")
    if not date_label or not date_label.strip():
        raise ValidationError("date_label is required")

    quiz_day = QuizDay(
        module_id=module.id,
        date_label=date_label.strip(),
        is_active=True if is_active is None else is_active,
        is_published=False,
        responses_open=True,
        results_published=False,
    )
    db.session.add(quiz_day)
    db.session.commit()

    current_app.logger.info(f"Quiz day {quiz_day.id} '{quiz_day.date_label}' created in module {module.id}")
    return jsonify({"success": True, "quiz_day": quiz_day.to_dict()}), 201


@modules_bp.route("/admin/quiz-days", methods=["GET"])
@admin_required
def admin_list_quiz_days():
    query = QuizDay.query
    module_id = request.args.get("module_id")
    if module_id:
        query = query.filter_by(module_id=parse_id(module_id, "module id"))
    days = _newest_first(query, QuizDay).all()
    return jsonify({"success": True, "quiz_days": [d.to_dict(include_module=True) for d in days]}), 200


def _toggle(quiz_day_id: int, attribute: str):
    quiz_day = get_or_404(QuizDay, quiz_day_id, "Quiz day")
    value = parse_bool(get_json_body(), attribute)
    setattr(quiz_day, attribute, value)
    db.session.commit()
    current_app.logger.info(f"Quiz day {quiz_day.id}: {attribute} set to {value}")
    return jsonify({"success": True, "quiz_day": quiz_day.to_dict()}), 200


@modules_bp.route("/admin/quiz-days/<int:quiz_day_id>/publish", methods=["PUT"])
@admin_required
def set_published(quiz_day_id):
    return _toggle(quiz_day_id, "is_published")


@modules_bp.route("/admin/quiz-days/<int:quiz_day_id>/responses", methods=["PUT"])
@admin_required
def set_responses_open(quiz_day_id):
    return _toggle(quiz_day_id, "responses_open")


@modules_bp.route("/admin/quiz-days/<int:quiz_day_id>/publish-results", methods=["PUT"])
@admin_required
def set_results_published(quiz_day_id):
    return _toggle(quiz_day_id, "results_published")


@modules_bp.route("/quiz-days/all", methods=["GET"])
@login_required
def list_published_quiz_days():
    """Published quiz days for the participant home page."""
    days = _newest_first(QuizDay.query.filter_by(is_published=True), QuizDay).all()
    return jsonify({"success": True, "quiz_days": [_participant_day(d) for d in days]}), 200


@modules_bp.route("/quiz-days/module/<int:module_id>", methods=["GET"])
@login_required
def list_module_quiz_days(module_id):
    days = _newest_first(
        QuizDay.query.filter_by(module_id=module_id, is_published=True), QuizDay
    ).all()
    return jsonify({"success": True, "quiz_days": [_participant_day(d) for d in days]}), 200
