import io

import pytest
from langchain_core.messages import AIMessage

from docusense import create_app, db
from docusense.config import TestingConfig


class FakeChatModel:
    """Stands in for the hosted chat model and records every call."""

    def __init__(self):
        self.responses = []
        self.error = None
        self.calls = []

    def invoke(self, messages, **kwargs):
        self.calls.append({"messages": messages, **kwargs})
        if self.error is not None:
            raise self.error
        if self.responses:
            return AIMessage(content=self.responses.pop(0))
        return AIMessage(content=f"Summary {len(self.calls)}")


@pytest.fixture
def app(tmp_path):
    class _Config(TestingConfig):
        UPLOAD_FOLDER = str(tmp_path / "uploads")

    app = create_app(_Config)
    app.extensions["llm"] = FakeChatModel()
    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def fake_llm(app):
    return app.extensions["llm"]


def signup(client, email, username="reader", password="secret123"):
    response = client.post(
        "/api/auth/signup",
        json={"username": username, "email": email, "password": password},
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.get_json()['token']}"}


def upload(client, headers, content=b"Hello world", filename="hello.txt",
           mime_type="text/plain"):
    return client.post(
        "/api/upload",
        data={"file": (io.BytesIO(content), filename, mime_type)},
        headers=headers,
        content_type="multipart/form-data",
    )


@pytest.fixture
def owner(client):
    return signup(client, "owner@example.com", username="owner")


@pytest.fixture
def stranger(client):
    return signup(client, "stranger@example.com", username="stranger")


@pytest.fixture
def document_id(client, owner):
    response = upload(client, owner)
    assert response.status_code == 200
    return response.get_json()["document"]["id"]
