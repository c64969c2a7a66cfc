"""Text extraction for uploaded PDF and plain-text files."""

import logging
from pathlib import Path

from docusense.errors import ExtractionError, ValidationError

logger = logging.getLogger(__name__)

PDF = "application/pdf"
PLAIN_TEXT = "text/plain"
SUPPORTED_MIME_TYPES = (PDF, PLAIN_TEXT)


def check_mime_type(mime_type: str, allowed=SUPPORTED_MIME_TYPES):
    if mime_type not in allowed:
        raise ValidationError("Only PDF and text files are allowed")


def _read_pdf(filepath: str) -> str:
    from langchain_community.document_loaders import PyPDFLoader

    pages = PyPDFLoader(filepath).load()
    return "\n".join(page.page_content for page in pages)


def _read_plain_text(filepath: str) -> str:
    # Decoded from raw bytes so line endings are kept exactly as uploaded
    return Path(filepath).read_bytes().decode("utf-8")


def extract_text(filepath: str, mime_type: str) -> str:
    """
    Extract the plain text of a saved upload.
    PDF pages are joined with newlines; layout and ligatures are not repaired.
    """
    check_mime_type(mime_type)

    try:
        if mime_type == PDF:
            return _read_pdf(filepath)
        return _read_plain_text(filepath)
    except Exception as e:
        logger.error(f"Text extraction failed for {filepath}: {e}")
        raise ExtractionError() from e
