import json
import os
import subprocess
import sys

import pytest

import task_tracker
from task_tracker.generate_openapi import generate_openapi
from task_tracker.settings import get_settings, parse_database_url


@pytest.fixture
def clean_env(monkeypatch):
    for name in [
        "DATABASE_URL",
        "CORS_ALLOW_ORIGINS",
        "PASSWORD_SCHEME",
        "BCRYPT_ROUNDS",
        "LOG_LEVEL",
        "HOST",
        "PORT",
    ]:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDatabaseUrl:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("memory://", ("memory", None)),
            ("memory", ("memory", None)),
            ("sqlite:///./data/app.db", ("sqlite", "./data/app.db")),
            ("sqlite:////var/lib/app.db", ("sqlite", "/var/lib/app.db")),
            ("mongodb://localhost:27017", ("memory", None)),
            ("sqlite:///", ("memory", None)),
        ],
    )
    def test_parse(self, url, expected):
        assert parse_database_url(url) == expected


class TestGetSettings:
    def test_defaults(self, clean_env):
        settings = get_settings()
        assert settings.persistence_backend == "sqlite"
        assert settings.sqlite_db_path == "./data/task_tracker.db"
        assert settings.cors_allow_origins == ["http://localhost:3000", "http://localhost:3001"]
        assert settings.password_scheme == "bcrypt"
        assert settings.bcrypt_rounds == 12
        assert settings.port == 8080

    def test_overrides(self, clean_env):
        clean_env.setenv("DATABASE_URL", "memory://")
        clean_env.setenv("CORS_ALLOW_ORIGINS", "https://a.example, https://b.example")
        clean_env.setenv("PASSWORD_SCHEME", "PLAIN")
        clean_env.setenv("BCRYPT_ROUNDS", "2")
        clean_env.setenv("PORT", "not-a-port")
        settings = get_settings()
        assert settings.persistence_backend == "memory"
        assert settings.cors_allow_origins == ["https://a.example", "https://b.example"]
        assert settings.password_scheme == "plain"
        assert settings.bcrypt_rounds == 4
        assert settings.port == 8080

    def test_unknown_scheme_falls_back_to_bcrypt(self, clean_env):
        clean_env.setenv("PASSWORD_SCHEME", "md5")
        assert get_settings().password_scheme == "bcrypt"


class TestCors:
    def test_allowed_origin_gets_credentials(self, client):
        res = client.get("/healthz", headers={"Origin": "http://localhost:3000"})
        assert res.headers["access-control-allow-origin"] == "http://localhost:3000"
        assert res.headers["access-control-allow-credentials"] == "true"

    def test_other_origin_is_not_allowed(self, client):
        res = client.get("/healthz", headers={"Origin": "http://evil.example"})
        assert "access-control-allow-origin" not in res.headers


class TestOpenAPI:
    def test_generate_writes_schema(self, tmp_path):
        out = generate_openapi(str(tmp_path / "interfaces" / "openapi.json"))
        with open(out, encoding="utf-8") as f:
            schema = json.load(f)
        assert "/todos/{todo_id}" in schema["paths"]
        assert "/register" in schema["paths"]
        assert {t["name"] for t in schema["tags"]} >= {"health", "users", "todos"}

    def test_import_does_not_open_a_store(self, tmp_path):
        src_dir = os.path.dirname(os.path.dirname(os.path.abspath(task_tracker.__file__)))
        env = {k: v for k, v in os.environ.items() if k != "DATABASE_URL"}
        env["PYTHONPATH"] = os.pathsep.join(filter(None, [src_dir, env.get("PYTHONPATH")]))

        subprocess.run(
            [sys.executable, "-c", "import task_tracker.generate_openapi"],
            cwd=str(tmp_path),
            env=env,
            check=True,
        )
        assert os.listdir(tmp_path) == []
