from datetime import datetime

from alfitra import db


SECTION_QURAN = "Quran"
SECTION_SEERAT = "Seerat"
SECTIONS = (SECTION_QURAN, SECTION_SEERAT)


class Module(db.Model):
    """A named content track inside one section."""
    __tablename__ = "modules"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    section = db.Column(db.String(20), nullable=False, index=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    creator = db.relationship("User", foreign_keys=[created_by])
    quiz_days = db.relationship(
        "QuizDay", backref="module", cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Module {self.id}: {self.name} ({self.section})>"

    def to_dict(self, include_creator: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description or "",
            "section": self.section,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_creator:
            data["creator_name"] = self.creator.name if self.creator else None
        return data


class QuizDay(db.Model):
    """
    A single labelled quiz inside a module.

    Participants can take it only while published and active, and can
    save answers only while published and responses are open.
    """
    __tablename__ = "quiz_days"

    id = db.Column(db.Integer, primary_key=True)
    module_id = db.Column(db.Integer, db.ForeignKey("modules.id", ondelete="CASCADE"), nullable=False, index=True)
    date_label = db.Column(db.String(255), nullable=False)  # free text, e.g. '2025-12-04' or 'Day 1'
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    is_published = db.Column(db.Boolean, default=False, nullable=False, index=True)
    responses_open = db.Column(db.Boolean, default=True, nullable=False)
    results_published = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    questions = db.relationship(
        "Question", backref="quiz_day", cascade="all, delete-orphan", order_by="Question.id",
    )
    submissions = db.relationship(
        "Submission", backref="quiz_day", cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.Index("ix_quiz_days_published_active", "is_published", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<QuizDay {self.id}: {self.date_label}>"

    @property
    def accepting_responses(self) -> bool:
        return self.responses_open is not False

    def to_dict(self, include_module: bool = False) -> dict:
        data = {
            "id": self.id,
            "module_id": self.module_id,
            "date_label": self.date_label,
            "is_active": self.is_active,
            "is_published": self.is_published,
            "responses_open": self.responses_open,
            "results_published": self.results_published,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_module:
            data["module"] = {
                "id": self.module.id,
                "name": self.module.name,
                "section": self.module.section,
            } if self.module else None
        return data
