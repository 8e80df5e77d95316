from datetime import datetime
from flask_login import UserMixin

from alfitra import db


ROLE_USER = "user"
ROLE_ADMIN = "admin"

# Teacher profile fields a user may change through the profile endpoint
PROFILE_FIELDS = ("name", "subjects", "classes", "phone", "age", "qualification", "teacher_id")


class User(db.Model, UserMixin):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_USER)

    # --- Teacher Profile Fields ---
    subjects = db.Column(db.String(255), nullable=False, default="")
    classes = db.Column(db.String(255), nullable=False, default="")
    phone = db.Column(db.String(50), nullable=False, default="")
    age = db.Column(db.Integer, nullable=True)
    qualification = db.Column(db.String(255), nullable=False, default="")
    teacher_id = db.Column(db.String(100), nullable=False, default="")

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User {self.email} ({self.role})>"

    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def public_dict(self) -> dict:
        """Fields returned alongside a token."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
        }

    def profile_dict(self) -> dict:
        """Everything except the password hash."""
        data = self.public_dict()
        data.update({
            "subjects": self.subjects or "",
            "classes": self.classes or "",
            "phone": self.phone or "",
            "age": self.age,
            "qualification": self.qualification or "",
            "teacher_id": self.teacher_id or "",
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        })
        return data
