"""Question answering over a single document's text."""

import logging

from flask import current_app

from docusense import db, llm
from docusense.errors import AnswerError, ValidationError
from docusense.llm import truncate_text
from docusense.models import QAHistory

logger = logging.getLogger(__name__)

QA_SYSTEM_PROMPT = (
    "You answer questions about a document. "
    "Use ONLY the document text provided by the user as your source. "
    'If the answer is not in the document, reply: "I could not find that in the document."'
)


def build_question_prompt(context: str, question: str) -> str:
    return f"""Document:
{context}

Question: {question}"""


def answer_question(document, user, question: str) -> QAHistory:
    """Ask the model ``question`` about ``document`` and record the exchange."""
    if not isinstance(question, str) or not question.strip():
        raise ValidationError("Question is required")
    question = question.strip()

    config = current_app.config
    context = truncate_text(document.text, config["QA_CONTEXT_CHARS"])

    try:
        answer = llm.complete(
            QA_SYSTEM_PROMPT,
            build_question_prompt(context, question),
            max_tokens=config["QA_MAX_TOKENS"],
        )
    except Exception as e:
        logger.error(f"Q&A failed for document {document.id}: {e}")
        raise AnswerError() from e

    entry = QAHistory(
        document_id=document.id,
        user_id=user.id,
        question=question,
        answer=answer,
    )
    db.session.add(entry)
    db.session.commit()
    return entry


def list_qa_history(document, user) -> list:
    return (
        QAHistory.query.filter_by(document_id=document.id, user_id=user.id)
        .order_by(QAHistory.created_at.desc(), QAHistory.id.desc())
        .all()
    )
