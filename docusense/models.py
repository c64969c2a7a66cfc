from datetime import datetime, timezone

from flask_login import UserMixin

from docusense import db


def _utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


class User(UserMixin, db.Model):
    """Registered user account."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(200), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    def __repr__(self):
        return f"<User {self.email}>"


class Document(db.Model):
    """An uploaded file: metadata plus the text extracted from it."""

    __tablename__ = "documents"
    __table_args__ = (db.Index("ix_documents_user_upload", "user_id", "upload_date"),)

    id = db.Column(db.Integer, primary_key=True)
    filename = db.Column(db.String(300), nullable=False)   # user-facing name
    filepath = db.Column(db.String(600), nullable=False)   # location on disk
    text = db.Column(db.Text, nullable=False, default="")
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    upload_date = db.Column(db.DateTime, nullable=False, default=_utcnow)
    file_size = db.Column(db.Integer)
    mime_type = db.Column(db.String(100))
    # When the stored file is due for removal; NULL once it has been purged
    purge_after = db.Column(db.DateTime, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "filename": self.filename,
            "text": self.text,
            "userId": self.user_id,
            "uploadDate": _iso(self.upload_date),
            "fileSize": self.file_size,
            "mimeType": self.mime_type,
        }

    def __repr__(self):
        return f"<Document {self.filename}>"


class Summary(db.Model):
    """Combined summary of a document, at most one per (document, user)."""

    __tablename__ = "summaries"
    __table_args__ = (
        db.UniqueConstraint("document_id", "user_id", name="uq_summary_document_user"),
    )

    id = db.Column(db.Integer, primary_key=True)
    document_id = db.Column(
        db.Integer, db.ForeignKey("documents.id", ondelete="CASCADE"), nullable=False
    )
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<Summary document={self.document_id}>"


class QAHistory(db.Model):
    """One question asked about a document and the answer it got."""

    __tablename__ = "qa_history"
    __table_args__ = (db.Index("ix_qa_history_document_user", "document_id", "user_id"),)

    id = db.Column(db.Integer, primary_key=True)
    document_id = db.Column(
        db.Integer, db.ForeignKey("documents.id", ondelete="CASCADE"), nullable=False
    )
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    question = db.Column(db.Text, nullable=False)
    answer = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "documentId": self.document_id,
            "userId": self.user_id,
            "question": self.question,
            "answer": self.answer,
            "createdAt": _iso(self.created_at),
        }
