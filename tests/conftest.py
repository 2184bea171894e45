from types import SimpleNamespace

import mongomock
import pytest

from tasktracker.app import create_app

from .fakes import FakeStorage, future


@pytest.fixture()
def storage():
    return FakeStorage()


@pytest.fixture()
def mongo_client():
    return mongomock.MongoClient()


@pytest.fixture()
def app(mongo_client, storage):
    return create_app("tasktracker.config.TestConfig", mongo_client=mongo_client, storage=storage)


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def db(app, mongo_client):
    return mongo_client[app.config["MONGO_DB_NAME"]]


@pytest.fixture()
def register(client):
    def _register(name, email=None, password="secret123"):
        email = email or f"{name.lower()}@example.com"
        resp = client.post(
            "/api/users/register",
            json={
                "name": name,
                "email": email,
                "password": password,
                "confirm_password": password,
            },
        )
        assert resp.status_code == 201, resp.get_json()
        data = resp.get_json()["data"]
        return SimpleNamespace(
            id=data["user"]["_id"],
            name=name,
            email=email,
            password=password,
            token=data["token"],
            headers={"Authorization": f"Bearer {data['token']}"},
        )

    return _register


@pytest.fixture()
def alice(register):
    return register("Alice")


@pytest.fixture()
def bob(register):
    return register("Bob")


@pytest.fixture()
def carol(register):
    return register("Carol")


@pytest.fixture()
def mallory(register):
    return register("Mallory")


@pytest.fixture()
def make_task(client):
    def _make(owner, **fields):
        payload = {"title": "Write quarterly report", "due_date": future()}
        payload.update(fields)
        resp = client.post("/api/tasks/", json=payload, headers=owner.headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]["task"]

    return _make
