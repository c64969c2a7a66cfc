"""
Chunk-and-summarize pipeline.

A document's text is cut into fixed word-count chunks, each chunk is
summarized by the language model in order, and the partial summaries are
joined into one stored Summary.
"""

import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError

from docusense import db, llm
from docusense.errors import NotFoundError, SummarizationError, ValidationError
from docusense.llm import truncate_text
from docusense.models import Summary

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPT = (
    "You are a helpful assistant that summarizes documents. "
    "Write a concise, factual summary of the text you are given. "
    "Keep the key points and leave out filler."
)


def split_into_chunks(text: str, chunk_size: int = 1000) -> list:
    """Group whitespace-separated words into chunks of ``chunk_size`` words."""
    words = text.split()
    return [
        " ".join(words[i:i + chunk_size])
        for i in range(0, len(words), chunk_size)
    ]


def summarize_chunk(chunk: str) -> str:
    config = current_app.config
    return llm.complete(
        SUMMARY_SYSTEM_PROMPT,
        truncate_text(chunk, config["SUMMARY_INPUT_CHARS"]),
        max_tokens=config["SUMMARY_MAX_TOKENS"],
    )


def find_summary(document, user):
    return Summary.query.filter_by(document_id=document.id, user_id=user.id).first()


def get_summary(document, user) -> Summary:
    summary = find_summary(document, user)
    if summary is None:
        raise NotFoundError("Summary not found")
    return summary


def summarize_document(document, user) -> Summary:
    """Return the caller's summary of ``document``, generating it if needed.

    An existing summary is returned as is, even if the text changed since.
    A failing model call aborts the run and nothing is stored.
    """
    existing = find_summary(document, user)
    if existing is not None:
        return existing

    chunks = split_into_chunks(document.text, current_app.config["SUMMARY_CHUNK_WORDS"])
    if not chunks:
        raise ValidationError("Document has no text to summarize")

    logger.info(f"Summarizing document {document.id} in {len(chunks)} chunk(s)")
    partials = []
    for index, chunk in enumerate(chunks):
        try:
            partials.append(summarize_chunk(chunk))
        except Exception as e:
            logger.error(
                f"Summarization failed for document {document.id} "
                f"at chunk {index + 1}/{len(chunks)}: {e}"
            )
            raise SummarizationError() from e

    summary = Summary(
        document_id=document.id,
        user_id=user.id,
        content=" ".join(partials),
    )
    db.session.add(summary)
    try:
        db.session.commit()
    except IntegrityError:
        # Another request stored its summary between our check and insert
        db.session.rollback()
        logger.info(f"Summary for document {document.id} already stored, reusing it")
        return get_summary(document, user)
    return summary
