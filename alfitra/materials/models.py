from datetime import datetime

from alfitra import db


MATERIAL_PDF = "pdf"


class ReferenceMaterial(db.Model):
    """A reference PDF belonging to a module."""
    __tablename__ = "reference_materials"

    id = db.Column(db.Integer, primary_key=True)
    module_id = db.Column(db.Integer, db.ForeignKey("modules.id", ondelete='CASCADE'), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(20), nullable=False, default=MATERIAL_PDF)
    url = db.Column(db.String(1000), nullable=False)
    storage_public_id = db.Column(db.String(500), nullable=True)  # For deleting from the object store
    original_filename = db.Column(db.String(255), nullable=True)  # Original filename for downloads
    description = db.Column(db.Text, nullable=False, default="")
    uploaded_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete='SET NULL'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    module = db.relationship("Module", backref=db.backref("materials", cascade="all, delete-orphan"))
    uploader = db.relationship("User", foreign_keys=[uploaded_by])

    def __repr__(self) -> str:
        return f"<ReferenceMaterial {self.id}: {self.title}>"

    def to_dict(self, url: str | None = None) -> dict:
        return {
            "id": self.id,
            "module_id": self.module_id,
            "title": self.title,
            "type": self.type,
            "url": url if url is not None else self.url,
            "original_filename": self.original_filename,
            "description": self.description or "",
            "uploaded_by": self.uploaded_by,
            "uploader_name": self.uploader.name if self.uploader else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
