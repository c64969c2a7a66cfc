"""
Document store operations, always scoped to the calling user.
"""

import logging
import os
import uuid
from datetime import datetime, timezone

from flask import current_app
from werkzeug.utils import secure_filename

from docusense import db
from docusense.errors import AuthorizationError, NotFoundError, ValidationError
from docusense.extraction import check_mime_type, extract_text
from docusense.models import Document, QAHistory, Summary

logger = logging.getLogger(__name__)

# Largest value an integer primary key column can hold
MAX_DOCUMENT_ID = 2 ** 63 - 1


def _remove_file(filepath):
    if filepath and os.path.exists(filepath):
        os.remove(filepath)
        return True
    return False


def list_documents(user) -> list:
    return (
        Document.query.filter_by(user_id=user.id)
        .order_by(Document.upload_date.desc(), Document.id.desc())
        .all()
    )


def get_owned_document(document_id, user) -> Document:
    """Load a document, enforcing that ``user`` owns it.

    Raises NotFoundError when it does not exist and AuthorizationError when
    it belongs to someone else.
    """
    if not 0 < document_id <= MAX_DOCUMENT_ID:
        raise NotFoundError("Document not found")
    document = db.session.get(Document, document_id)
    if document is None:
        raise NotFoundError("Document not found")
    if document.user_id != user.id:
        raise AuthorizationError("You do not have access to this document")
    return document


def store_upload(file, user) -> Document:
    """Save an uploaded file, extract its text and record the Document."""
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")

    config = current_app.config
    check_mime_type(file.mimetype, config["ALLOWED_MIME_TYPES"])

    original_name = file.filename
    safe_name = str(uuid.uuid4()) + "_" + secure_filename(original_name)
    filepath = os.path.join(config["UPLOAD_FOLDER"], safe_name)

    # Step 1: save file to disk (outside DB transaction)
    file.save(filepath)

    # Steps 2 + 3: extract text and create the DB record
    try:
        text = extract_text(filepath, file.mimetype)
        now = datetime.now(timezone.utc)
        document = Document(
            filename=original_name,
            filepath=filepath,
            text=text,
            user_id=user.id,
            upload_date=now,
            file_size=os.path.getsize(filepath),
            mime_type=file.mimetype,
            purge_after=now + config["UPLOAD_RETENTION"],
        )
        db.session.add(document)
        db.session.commit()
    except Exception:
        db.session.rollback()
        _remove_file(filepath)
        raise

    logger.info(f"Stored document {document.id} ({original_name}) for user {user.id}")
    return document


def delete_document(document, user):
    """Delete a document with its summaries, Q&A history and stored file.

    Children go first, then the file, then the row. The file system step is
    outside the transaction, so a crash in between can leave an orphan.
    """
    Summary.query.filter_by(document_id=document.id, user_id=user.id).delete()
    QAHistory.query.filter_by(document_id=document.id, user_id=user.id).delete()

    try:
        _remove_file(document.filepath)
    except OSError as e:
        logger.warning(f"Could not remove {document.filepath}: {e}")

    db.session.delete(document)
    db.session.commit()
    logger.info(f"Deleted document {document.id} for user {user.id}")


def purge_expired_uploads(now=None) -> int:
    """Remove stored files whose retention window has passed.

    The Document rows and their extracted text are kept. Returns how many
    files were purged.
    """
    now = now or datetime.now(timezone.utc)
    expired = Document.query.filter(
        Document.purge_after.isnot(None), Document.purge_after <= now
    ).all()

    purged = 0
    for document in expired:
        try:
            _remove_file(document.filepath)
        except OSError as e:
            logger.warning(f"Could not purge {document.filepath}: {e}")
            continue
        document.purge_after = None
        purged += 1

    db.session.commit()
    if purged:
        logger.info(f"Purged {purged} expired upload(s)")
    return purged
