import os

import pytest

from conftest import signup, upload
from docusense.models import Document, QAHistory, Summary


def test_upload_plain_text(app, client, owner):
    response = upload(client, owner, content=b"Hello world", filename="hello.txt")

    assert response.status_code == 200
    body = response.get_json()
    assert body["message"] == "File uploaded successfully"
    document = body["document"]
    assert document["text"] == "Hello world"
    assert document["filename"] == "hello.txt"
    assert document["fileSize"] == 11
    assert document["mimeType"] == "text/plain"

    with app.app_context():
        stored = Document.query.filter_by(id=document["id"]).one()
        assert os.path.exists(stored.filepath)
        assert stored.purge_after is not None


def test_upload_rejects_png(app, client, owner):
    response = upload(
        client, owner, content=b"\x89PNG\r\n", filename="pic.png", mime_type="image/png"
    )

    assert response.status_code == 400
    assert response.get_json()["message"] == "Only PDF and text files are allowed"
    with app.app_context():
        assert Document.query.count() == 0
    assert os.listdir(app.config["UPLOAD_FOLDER"]) == []


def test_upload_without_file(client, owner):
    response = client.post("/api/upload", headers=owner)

    assert response.status_code == 400
    assert response.get_json()["message"] == "No file uploaded"


def test_upload_over_size_limit(client, owner):
    response = upload(client, owner, content=b"a" * (10 * 1024 * 1024 + 1))

    assert response.status_code == 413


def test_upload_extraction_failure_leaves_nothing_behind(app, client, owner, monkeypatch):
    class BrokenLoader:
        def __init__(self, path):
            self.path = path

        def load(self):
            raise ValueError("EOF marker not found")

    monkeypatch.setattr(
        "langchain_community.document_loaders.PyPDFLoader", BrokenLoader
    )

    response = upload(
        client, owner, content=b"%PDF-1.4 garbage", filename="bad.pdf",
        mime_type="application/pdf",
    )

    assert response.status_code == 500
    assert response.get_json()["message"] == "File upload failed"
    with app.app_context():
        assert Document.query.count() == 0
    assert os.listdir(app.config["UPLOAD_FOLDER"]) == []


def test_list_documents_only_returns_callers_newest_first(client, owner, stranger):
    first = upload(client, owner, content=b"first", filename="a.txt").get_json()
    second = upload(client, owner, content=b"second", filename="b.txt").get_json()
    upload(client, stranger, content=b"theirs", filename="c.txt")

    response = client.get("/api/documents", headers=owner)

    assert response.status_code == 200
    ids = [doc["id"] for doc in response.get_json()]
    assert ids == [second["document"]["id"], first["document"]["id"]]


def test_get_document(client, owner, document_id):
    response = client.get(f"/api/documents/{document_id}", headers=owner)

    assert response.status_code == 200
    assert response.get_json()["text"] == "Hello world"


def test_get_missing_document(client, owner):
    response = client.get("/api/documents/12345", headers=owner)

    assert response.status_code == 404
    assert response.get_json()["message"] == "Document not found"


@pytest.mark.parametrize(
    "method, path, body",
    [
        ("get", "/api/documents/{id}", None),
        ("delete", "/api/documents/{id}", None),
        ("get", "/api/summary/{id}", None),
        ("get", "/api/qa-history/{id}", None),
        ("post", "/api/summarize", {"documentId": "{id}"}),
        ("post", "/api/ask", {"documentId": "{id}", "question": "What?"}),
    ],
)
def test_non_owner_is_forbidden(client, stranger, document_id, fake_llm, method, path, body):
    kwargs = {"headers": stranger}
    if body is not None:
        kwargs["json"] = {
            key: (document_id if value == "{id}" else value) for key, value in body.items()
        }

    response = getattr(client, method)(path.format(id=document_id), **kwargs)

    assert response.status_code == 403
    assert fake_llm.calls == []


def test_delete_cascades_to_history_and_file(app, client, owner, document_id):
    assert client.post("/api/summarize", json={"documentId": document_id}, headers=owner).status_code == 200
    assert client.post(
        "/api/ask", json={"documentId": document_id, "question": "Greeting?"}, headers=owner
    ).status_code == 200
    with app.app_context():
        filepath = Document.query.filter_by(id=document_id).one().filepath
    assert os.path.exists(filepath)

    response = client.delete(f"/api/documents/{document_id}", headers=owner)

    assert response.status_code == 200
    assert response.get_json()["message"] == "Document deleted successfully"
    assert not os.path.exists(filepath)
    with app.app_context():
        assert Document.query.count() == 0
        assert Summary.query.filter_by(document_id=document_id).count() == 0
        assert QAHistory.query.filter_by(document_id=document_id).count() == 0
    assert client.get(f"/api/summary/{document_id}", headers=owner).status_code == 404
    assert client.get(f"/api/qa-history/{document_id}", headers=owner).status_code == 404
    assert client.get(f"/api/documents/{document_id}", headers=owner).status_code == 404


def test_delete_when_file_already_gone(app, client, owner, document_id):
    with app.app_context():
        os.remove(Document.query.filter_by(id=document_id).one().filepath)

    response = client.delete(f"/api/documents/{document_id}", headers=owner)

    assert response.status_code == 200


def test_delete_missing_document(client, owner):
    response = client.delete("/api/documents/999", headers=owner)

    assert response.status_code == 404


def test_second_user_sees_empty_list(client, document_id):
    headers = signup(client, "late@example.com")

    response = client.get("/api/documents", headers=headers)

    assert response.get_json() == []


def test_upload_keeps_line_endings_verbatim(client, owner):
    response = upload(client, owner, content=b"a\r\nb\rc", filename="crlf.txt")

    assert response.status_code == 200
    assert response.get_json()["document"]["text"] == "a\r\nb\rc"


@pytest.mark.parametrize("method", ["get", "delete"])
def test_out_of_range_document_id_is_not_found(client, owner, method):
    response = getattr(client, method)("/api/documents/99999999999999999999", headers=owner)

    assert response.status_code == 404
    assert response.get_json()["message"] == "Document not found"


def test_cors_preflight_allows_browser_origin(client):
    response = client.options(
        "/api/documents",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "Authorization",
        },
    )

    assert response.headers["Access-Control-Allow-Origin"] == "*"
