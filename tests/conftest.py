import pytest
from fastapi.testclient import TestClient

from main import create_app

PANIDA_ID = 18581680
KUY_ID = 71157855


@pytest.fixture
def app():
    return create_app(seed=True)


@pytest.fixture
def store(app):
    return app.state.store


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def post_message(client):
    def _post(content="hello", user_id=PANIDA_ID, username="panida", **extra):
        res = client.post("/messages", json={"content": content, "userId": user_id, "username": username, **extra})
        assert res.status_code == 201, res.text
        return res.json()
    return _post
