import pytest
from fastapi.testclient import TestClient

from task_tracker.errors import DuplicateKeyError, StoreError


def register(client, email="u@x.com", password="pw1"):
    return client.post("/register", json={"email": email, "password": password})


def login(client, email="u@x.com", password="pw1"):
    return client.post("/login", json={"email": email, "password": password})


class TestRegister:
    def test_register_created(self, client):
        res = register(client)
        assert res.status_code == 201
        assert "message" in res.json()

    def test_register_twice_conflicts(self, client, repo):
        assert register(client).status_code == 201
        res = register(client, email="  U@X.COM ")
        assert res.status_code == 409
        assert "error" in res.json()
        assert len(repo.list_users()) == 1

    @pytest.mark.parametrize(
        "body",
        [
            {"email": "", "password": "pw"},
            {"email": "u@x.com", "password": "   "},
            {"email": "   ", "password": "pw"},
            {"email": "u@x.com"},
            {},
        ],
    )
    def test_register_requires_email_and_password(self, client, body):
        res = client.post("/register", json=body)
        assert res.status_code == 400
        assert res.json()["error"] == "Email and password are required"

    def test_register_without_body(self, client):
        res = client.post("/register")
        assert res.status_code == 400
        assert res.json() == {"error": "Invalid request data"}

    def test_password_is_not_stored_verbatim(self, client, repo):
        register(client, password="  secret  ")
        stored = repo.find_user("u@x.com")["password"]
        assert stored != "secret"
        assert stored.startswith("$2")

    def test_plain_scheme_stores_trimmed_password(self, make_app):
        app = make_app(password_scheme="plain")
        client = TestClient(app)
        register(client, password="  secret  ")
        assert app.state.repository.find_user("u@x.com")["password"] == "secret"

    def test_overlong_bcrypt_password_is_rejected(self, client):
        res = register(client, password="x" * 73)
        assert res.status_code == 400
        assert "error" in res.json()

    def test_lost_race_is_still_a_conflict(self, client, repo, monkeypatch):
        # the existence check passes, but another request inserted first
        monkeypatch.setattr(repo, "find_user", lambda email: None)

        def taken(user):
            raise DuplicateKeyError("UNIQUE constraint failed: users.email")

        monkeypatch.setattr(repo, "insert_user", taken)
        res = register(client)
        assert res.status_code == 409

    def test_store_failure_is_500(self, client, repo, monkeypatch):
        def boom(user):
            raise StoreError("database is locked")

        monkeypatch.setattr(repo, "insert_user", boom)
        res = register(client)
        assert res.status_code == 500
        assert res.json() == {"error": "Failed to register user"}


class TestLogin:
    def test_login_success_with_normalization(self, client):
        register(client, email="u@x.com", password="pw1")
        res = login(client, email="U@X.COM ", password=" pw1")
        assert res.status_code == 200
        assert "message" in res.json()

    def test_password_is_case_sensitive(self, client):
        register(client, password="pw1")
        res = login(client, password="PW1")
        assert res.status_code == 401
        assert res.json()["error"] == "Incorrect password"

    def test_unknown_user(self, client):
        res = login(client, email="ghost@x.com")
        assert res.status_code == 401
        assert res.json()["error"] == "User not found"

    def test_login_requires_fields(self, client):
        res = login(client, email="u@x.com", password="")
        assert res.status_code == 400

    def test_plain_scheme_login(self, make_app):
        client = TestClient(make_app(password_scheme="plain"))
        register(client, password="pw1")
        assert login(client, password="pw1").status_code == 200
        assert login(client, password="pw2").status_code == 401


class TestUserUtilities:
    def test_list_users_projects_email_only(self, client):
        register(client, email="a@x.com")
        register(client, email="B@x.com")
        res = client.get("/users")
        assert res.status_code == 200
        users = res.json()["users"]
        assert sorted(u["email"] for u in users) == ["a@x.com", "b@x.com"]
        assert all(set(u) == {"email"} for u in users)

    def test_clear_users(self, client):
        register(client)
        res = client.delete("/users")
        assert res.status_code == 200
        assert "message" in res.json()
        assert client.get("/users").json() == {"users": []}
        # the email is free again
        assert register(client).status_code == 201


class TestEndToEnd:
    def test_register_login_and_manage_a_todo(self, client):
        assert register(client, "u@x.com", "pw1").status_code == 201
        assert login(client, "U@X.COM ", " pw1").status_code == 200

        res = client.post("/todos", json={"email": "u@x.com", "title": " wash car "})
        assert res.status_code == 201
        todo = res.json()["todo"]
        assert todo["title"] == "wash car"

        res = client.put(f"/todos/{todo['id']}", json={"completed": True})
        assert res.status_code == 200
        assert res.json()["todo"]["completed"] is True
        assert res.json()["todo"]["title"] == "wash car"

        assert client.delete(f"/todos/{todo['id']}").status_code == 200
        res = client.get("/todos", params={"email": "u@x.com"})
        assert res.json()["todos"] == []


class TestSQLiteBackedApi:
    def test_duplicate_registration_and_todo_roundtrip(self, make_app, tmp_path):
        app = make_app(
            database_url=f"sqlite:///{tmp_path / 't.db'}",
            persistence_backend="sqlite",
            sqlite_db_path=str(tmp_path / "t.db"),
        )
        client = TestClient(app)

        assert register(client, "u@x.com", "pw1").status_code == 201
        assert register(client, " U@X.com", "pw2").status_code == 409
        assert client.get("/users").json() == {"users": [{"email": "u@x.com"}]}
        assert login(client, "u@x.com", "pw1").status_code == 200

        todo = client.post("/todos", json={"email": "u@x.com", "title": "persist"}).json()["todo"]
        res = client.put(f"/todos/{todo['id']}", json={"completed": True})
        assert res.json()["todo"] == {**todo, "completed": True}
        assert client.get("/todos", params={"email": "u@x.com"}).json()["todos"] == [res.json()["todo"]]

    def test_unique_constraint_maps_to_conflict(self, make_app, tmp_path, monkeypatch):
        app = make_app(persistence_backend="sqlite", sqlite_db_path=str(tmp_path / "t.db"))
        client = TestClient(app)
        assert register(client).status_code == 201

        # skip the existence check so the insert itself hits users.email UNIQUE
        monkeypatch.setattr(app.state.repository, "find_user", lambda email: None)
        res = register(client)
        assert res.status_code == 409
        assert res.json() == {"error": "User already exists"}
        assert len(app.state.repository.list_users()) == 1
