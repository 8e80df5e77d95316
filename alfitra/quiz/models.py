"""
Database models for quiz functionality.

Supports two question types:
- mcq: ordered options with a zero-based correct_index
- fillblank: two digit-only expected answers (Surah number, Ayat number)
"""
from datetime import datetime

from alfitra import db


QUESTION_MCQ = "mcq"
QUESTION_FILLBLANK = "fillblank"
QUESTION_TYPES = (QUESTION_MCQ, QUESTION_FILLBLANK)

REFERENCE_NONE = "none"
REFERENCE_PDF = "pdf"
REFERENCE_URL = "url"
REFERENCE_TYPES = (REFERENCE_NONE, REFERENCE_PDF, REFERENCE_URL)


class Question(db.Model):
    """A question on one quiz day. Questions are append-only."""
    __tablename__ = "questions"

    id = db.Column(db.Integer, primary_key=True)
    quiz_day_id = db.Column(db.Integer, db.ForeignKey("quiz_days.id", ondelete='CASCADE'), nullable=False, index=True)
    text = db.Column(db.Text, nullable=False)
    question_type = db.Column(db.String(20), nullable=False, default=QUESTION_MCQ)

    # mcq
    options = db.Column(db.JSON, nullable=True)
    correct_index = db.Column(db.Integer, nullable=True)

    # fillblank
    correct_answer1 = db.Column(db.String(50), nullable=True)
    correct_answer2 = db.Column(db.String(50), nullable=True)

    # Optional reference, stored verbatim
    reference_type = db.Column(db.String(10), nullable=False, default=REFERENCE_NONE)
    reference_pdf_url = db.Column(db.String(1000), nullable=False, default="")
    reference_pdf_public_id = db.Column(db.String(500), nullable=False, default="")
    reference_url = db.Column(db.String(1000), nullable=False, default="")
    reference_title = db.Column(db.String(255), nullable=False, default="")

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Question {self.id}: {self.question_type}>"

    @property
    def is_mcq(self) -> bool:
        return self.question_type != QUESTION_FILLBLANK

    def reference_dict(self) -> dict:
        return {
            "reference_type": self.reference_type,
            "reference_pdf_url": self.reference_pdf_url or "",
            "reference_url": self.reference_url or "",
            "reference_title": self.reference_title or "",
        }

    def to_admin_dict(self) -> dict:
        """Full question, answers included."""
        data = {
            "id": self.id,
            "quiz_day_id": self.quiz_day_id,
            "text": self.text,
            "question_type": self.question_type,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if self.is_mcq:
            data["options"] = list(self.options or [])
            data["correct_index"] = self.correct_index
        else:
            data["correct_answer1"] = self.correct_answer1
            data["correct_answer2"] = self.correct_answer2
        data.update(self.reference_dict())
        data["reference_pdf_public_id"] = self.reference_pdf_public_id or ""
        return data


class Submission(db.Model):
    """
    A participant's answers and scores for one quiz day.
    Exactly one row per (user, quiz day); re-submitting overwrites it.
    """
    __tablename__ = "submissions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete='CASCADE'), nullable=False, index=True)
    quiz_day_id = db.Column(db.Integer, db.ForeignKey("quiz_days.id", ondelete='CASCADE'), nullable=False, index=True)
    section_scores = db.Column(db.JSON, nullable=False, default=dict)
    total_score = db.Column(db.Integer, nullable=False, default=0)
    time_taken_seconds = db.Column(db.Integer, nullable=False, default=0)
    last_updated = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    user = db.relationship("User", backref="submissions")
    answers = db.relationship(
        "SubmissionAnswer", backref="submission", cascade="all, delete-orphan",
        order_by="SubmissionAnswer.position",
    )

    __table_args__ = (
        db.UniqueConstraint('user_id', 'quiz_day_id', name='uq_submission_user_quiz_day'),
    )

    def __repr__(self) -> str:
        return f"<Submission {self.id}: User {self.user_id}, QuizDay {self.quiz_day_id}>"

    @property
    def answered_count(self) -> int:
        return len(self.answers)

    def to_dict(self, reveal_scores: bool = True) -> dict:
        """
        Serialize the submission. With ``reveal_scores`` off, correctness and
        scores are withheld so participants only see them once results are
        published.
        """
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "quiz_day_id": self.quiz_day_id,
            "answers": [a.to_dict(reveal_scores) for a in self.answers],
            "time_taken_seconds": self.time_taken_seconds,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "results_visible": reveal_scores,
        }
        if reveal_scores:
            data["section_scores"] = dict(self.section_scores or {})
            data["total_score"] = self.total_score
        return data


class SubmissionAnswer(db.Model):
    """One answer record inside a submission."""
    __tablename__ = "submission_answers"

    id = db.Column(db.Integer, primary_key=True)
    submission_id = db.Column(db.Integer, db.ForeignKey("submissions.id", ondelete='CASCADE'), nullable=False, index=True)
    question_id = db.Column(db.Integer, db.ForeignKey("questions.id", ondelete='CASCADE'), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)
    selected_index = db.Column(db.Integer, nullable=True)  # mcq, canonical (unshuffled) index
    user_answer1 = db.Column(db.String(50), nullable=True)  # fillblank
    user_answer2 = db.Column(db.String(50), nullable=True)  # fillblank
    is_correct = db.Column(db.Boolean, nullable=False, default=False)

    question = db.relationship("Question")

    def __repr__(self) -> str:
        return f"<SubmissionAnswer {self.id}: Question {self.question_id}>"

    def to_dict(self, reveal_scores: bool = True) -> dict:
        data = {"question_id": self.question_id}
        if self.user_answer1 is not None or self.user_answer2 is not None:
            data["user_answer1"] = self.user_answer1 or ""
            data["user_answer2"] = self.user_answer2 or ""
        else:
            data["selected_index"] = self.selected_index
        if reveal_scores:
            data["is_correct"] = self.is_correct
        return data
