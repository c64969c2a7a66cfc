from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from docusense import limiter
from docusense.documents import (
    delete_document,
    get_owned_document,
    list_documents,
    store_upload,
)
from docusense.errors import ValidationError
from docusense.qa import answer_question, list_qa_history
from docusense.summaries import get_summary, summarize_document

api = Blueprint("api", __name__, url_prefix="/api")


def _ai_rate_limit():
    return current_app.config["AI_RATE_LIMIT"]


# ╔══════════════════════════════════════════════════════════════════════╗
# ║  HELPERS                                                           ║
# ╚══════════════════════════════════════════════════════════════════════╝

def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Invalid request.")
    return data


def _document_id(data: dict) -> int:
    """Read ``documentId`` from a JSON body as an integer."""
    value = data.get("documentId")
    if value is None or value == "":
        raise ValidationError("documentId is required")
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError("documentId must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("documentId must be an integer")


# ╔══════════════════════════════════════════════════════════════════════╗
# ║  UPLOAD  (Create)                                                  ║
# ╚══════════════════════════════════════════════════════════════════════╝

@api.route("/upload", methods=["POST"])
@login_required
def upload():
    document = store_upload(request.files.get("file"), current_user)
    return jsonify(
        {"message": "File uploaded successfully", "document": document.to_dict()}
    )


# ╔══════════════════════════════════════════════════════════════════════╗
# ║  DOCUMENTS  (Read / Delete)                                        ║
# ╚══════════════════════════════════════════════════════════════════════╝

@api.route("/documents", methods=["GET"])
@login_required
def documents():
    # Filter by current user: multi-user isolation
    return jsonify([doc.to_dict() for doc in list_documents(current_user)])


@api.route("/documents/<int:document_id>", methods=["GET"])
@login_required
def document_detail(document_id):
    document = get_owned_document(document_id, current_user)
    return jsonify(document.to_dict())


@api.route("/documents/<int:document_id>", methods=["DELETE"])
@login_required
def document_delete(document_id):
    # ── Ownership check, NEVER skip this ─────────────────────────────
    document = get_owned_document(document_id, current_user)
    delete_document(document, current_user)
    return jsonify({"message": "Document deleted successfully"})


# ╔══════════════════════════════════════════════════════════════════════╗
# ║  SUMMARIES                                                         ║
# ╚══════════════════════════════════════════════════════════════════════╝

@api.route("/summary/<int:document_id>", methods=["GET"])
@login_required
def summary_detail(document_id):
    document = get_owned_document(document_id, current_user)
    summary = get_summary(document, current_user)
    return jsonify(
        {"summary": summary.content, "createdAt": summary.created_at.isoformat()}
    )


@api.route("/summarize", methods=["POST"])
@login_required
@limiter.limit(_ai_rate_limit)
def summarize():
    data = _json_body()
    document = get_owned_document(_document_id(data), current_user)
    summary = summarize_document(document, current_user)
    return jsonify({"summary": summary.content})


# ╔══════════════════════════════════════════════════════════════════════╗
# ║  QUESTION ANSWERING                                                ║
# ╚══════════════════════════════════════════════════════════════════════╝

@api.route("/ask", methods=["POST"])
@login_required
@limiter.limit(_ai_rate_limit)
def ask():
    data = _json_body()
    document = get_owned_document(_document_id(data), current_user)
    entry = answer_question(document, current_user, data.get("question"))
    return jsonify({"answer": entry.answer})


@api.route("/qa-history/<int:document_id>", methods=["GET"])
@login_required
def qa_history(document_id):
    document = get_owned_document(document_id, current_user)
    return jsonify([entry.to_dict() for entry in list_qa_history(document, current_user)])
