"""Integration tests for the user resource, seeding, health and the create_user CLI."""

import unittest
from unittest.mock import patch

from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import SecretStr

from app.core.config import Settings
from app.core.security import verify_password
from app.main import create_app
from app.models import Base, User
from app.schemas.users import UserCreate
from app.scripts import create_user as create_user_script
from app.services.users import create_user

SECRET = "integration-test-secret-long-enough-for-hs256"
PREFIX = "/api/v1"


def _settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "APP_ENV": "dev",
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": SecretStr(SECRET),
        "PASSWORD_SALT_ROUNDS": 4,
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def _make_app(**overrides: object) -> FastAPI:
    app = create_app(_settings(**overrides))
    Base.metadata.create_all(app.state.engine)
    return app


def _add_user(app: FastAPI, username: str, password: str = "correct-horse", role: str = "user") -> User:
    with app.state.session_factory() as db:
        return create_user(
            db,
            UserCreate(firstname="Test", username=username, password=password, role=role),
            salt_rounds=4,
        )


def _get_user(app: FastAPI, username: str) -> User | None:
    with app.state.session_factory() as db:
        return db.query(User).filter(User.username == username).first()


class _AuthenticatedTestCase(unittest.TestCase):
    """Creates an app with user 'admin' logged in; self.headers carries its access token."""

    def setUp(self) -> None:
        self.app = _make_app()
        self.client = TestClient(self.app)
        self.admin = _add_user(self.app, "admin", role="admin")
        resp = self.client.post(
            f"{PREFIX}/users/authenticate",
            json={"username": "admin", "password": "correct-horse"},
        )
        self.headers = {"x-access-token": resp.json()["accessToken"]}


class TestCreateUser(_AuthenticatedTestCase):
    def test_create_returns_projection_without_password(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/users/",
            json={
                "firstname": "Bob",
                "lastname": "Builder",
                "username": "bob",
                "password": "can-we-fix-it",
                "role": "user",
            },
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["result"], "ok")
        self.assertEqual(body["user"]["username"], "bob")
        self.assertEqual(body["user"]["lastname"], "Builder")
        self.assertIn("id", body["user"])
        self.assertIn("createdAt", body["user"])
        self.assertNotIn("password", body["user"])
        self.assertNotIn("passwordHash", body["user"])

        stored = _get_user(self.app, "bob")
        self.assertTrue(verify_password("can-we-fix-it", stored.password_hash))
        self.assertEqual(stored.refresh_token, "")

    def test_lastname_is_optional(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/users/",
            json={"firstname": "Cher", "username": "cher", "password": "believe-1998", "role": "user"},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.json()["user"]["lastname"])

    def test_missing_fields(self) -> None:
        resp = self.client.post(f"{PREFIX}/users/", json={"username": "bob"}, headers=self.headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(
            resp.json()["error"],
            ['"firstname" is required', '"password" is required', '"role" is required'],
        )

    def test_duplicate_username(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/users/",
            json={"firstname": "A", "username": "admin", "password": "another-pass", "role": "user"},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 409)
        self.assertIn("admin", resp.json()["error"])


class TestReadUsers(_AuthenticatedTestCase):
    def test_get_by_username_and_id(self) -> None:
        by_name = self.client.get(f"{PREFIX}/users/admin", headers=self.headers)
        self.assertEqual(by_name.status_code, 200)
        user = by_name.json()["user"]
        self.assertEqual(set(user), {"id", "firstname", "lastname", "username", "role"})

        by_id = self.client.get(f"{PREFIX}/users/{user['id']}", headers=self.headers)
        self.assertEqual(by_id.status_code, 200)
        self.assertEqual(by_id.json()["user"]["username"], "admin")

    def test_unknown_user_is_not_found(self) -> None:
        resp = self.client.get(f"{PREFIX}/users/ghost", headers=self.headers)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"error": "User not found"})

        resp = self.client.get(
            f"{PREFIX}/users/00000000-0000-0000-0000-000000000000", headers=self.headers
        )
        self.assertEqual(resp.status_code, 404)

    def test_pagination(self) -> None:
        for i in range(12):
            _add_user(self.app, f"user{i:02d}")

        first = self.client.get(f"{PREFIX}/users/", headers=self.headers).json()
        self.assertEqual(first["result"], "ok")
        self.assertEqual(first["totalDocs"], 13)
        self.assertEqual(len(first["docs"]), 10)
        self.assertEqual(first["limit"], 10)
        self.assertEqual(first["page"], 1)
        self.assertEqual(first["totalPages"], 2)
        self.assertEqual(first["pagingCounter"], 1)
        self.assertFalse(first["hasPrevPage"])
        self.assertTrue(first["hasNextPage"])
        self.assertIsNone(first["prevPage"])
        self.assertEqual(first["nextPage"], 2)

        second = self.client.get(
            f"{PREFIX}/users/", params={"pageNum": 2}, headers=self.headers
        ).json()
        self.assertEqual(len(second["docs"]), 3)
        self.assertEqual(second["pagingCounter"], 11)
        self.assertTrue(second["hasPrevPage"])
        self.assertFalse(second["hasNextPage"])

        names = {d["username"] for d in first["docs"]} | {d["username"] for d in second["docs"]}
        self.assertEqual(len(names), 13)

    def test_pagination_disabled(self) -> None:
        for i in range(11):
            _add_user(self.app, f"user{i:02d}")
        resp = self.client.get(f"{PREFIX}/users/", params={"pageNum": -1}, headers=self.headers)
        body = resp.json()
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(body["docs"]), 12)
        self.assertEqual(body["totalPages"], 1)
        self.assertFalse(body["hasNextPage"])

    def test_invalid_page_numbers(self) -> None:
        resp = self.client.get(f"{PREFIX}/users/", params={"pageNum": 0}, headers=self.headers)
        self.assertEqual(resp.status_code, 400)
        resp = self.client.get(f"{PREFIX}/users/", params={"pageNum": "abc"}, headers=self.headers)
        self.assertEqual(resp.status_code, 400)
        self.assertTrue(resp.json()["error"][0].startswith('"pageNum"'))


class TestUpdateUser(_AuthenticatedTestCase):
    def setUp(self) -> None:
        super().setUp()
        _add_user(self.app, "carol", password="old-password")

    def test_partial_update(self) -> None:
        resp = self.client.patch(
            f"{PREFIX}/users/carol", json={"firstname": "Caroline"}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 200)
        user = resp.json()["user"]
        self.assertEqual(user["firstname"], "Caroline")
        self.assertEqual(user["username"], "carol")
        self.assertIn("updatedAt", user)

    def test_password_is_rehashed(self) -> None:
        resp = self.client.patch(
            f"{PREFIX}/users/carol", json={"password": "new-password"}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 200)
        login = self.client.post(
            f"{PREFIX}/users/authenticate",
            json={"username": "carol", "password": "new-password"},
        )
        self.assertEqual(login.status_code, 200)
        stored = _get_user(self.app, "carol")
        self.assertNotEqual(stored.password_hash, "new-password")

    def test_unknown_field_is_rejected(self) -> None:
        resp = self.client.patch(
            f"{PREFIX}/users/carol", json={"email": "c@example.com"}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": ['"email" is not allowed']})

    def test_rename_to_taken_username(self) -> None:
        resp = self.client.patch(
            f"{PREFIX}/users/carol", json={"username": "admin"}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 409)

    def test_update_unknown_user(self) -> None:
        resp = self.client.patch(
            f"{PREFIX}/users/ghost", json={"firstname": "Casper"}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 404)


class TestDeleteUser(_AuthenticatedTestCase):
    def test_hard_delete(self) -> None:
        _add_user(self.app, "dave")
        resp = self.client.delete(f"{PREFIX}/users/dave", headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"result": "ok"})
        self.assertIsNone(_get_user(self.app, "dave"))

        again = self.client.delete(f"{PREFIX}/users/dave", headers=self.headers)
        self.assertEqual(again.status_code, 404)


class TestUnexpectedErrors(_AuthenticatedTestCase):
    def test_unexpected_error_is_generic_500(self) -> None:
        with patch(
            "app.services.users.paginate_users",
            side_effect=RuntimeError("connection string with secrets"),
        ):
            resp = self.client.get(f"{PREFIX}/users/", headers=self.headers)
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(
            resp.json(),
            {"error": "Server failed to process your request(s) please try again"},
        )
        self.assertNotIn("secrets", resp.text)


class TestSeedData(unittest.TestCase):
    """POST /system/seed-data is public and idempotent."""

    def test_seed_creates_admin_once(self) -> None:
        app = _make_app(SEED_ADMIN_PASSWORD=SecretStr("seed-password"))
        client = TestClient(app)

        first = client.post(f"{PREFIX}/system/seed-data")
        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.json(), {"result": "ok", "created": True})
        second = client.post(f"{PREFIX}/system/seed-data")
        self.assertEqual(second.json(), {"result": "ok", "created": False})

        seeded = _get_user(app, "admin")
        self.assertEqual(seeded.role, "admin")
        login = client.post(
            f"{PREFIX}/users/authenticate",
            json={"username": "admin", "password": "seed-password"},
        )
        self.assertEqual(login.status_code, 200)

    def test_seed_requires_password(self) -> None:
        client = TestClient(_make_app())
        resp = client.post(f"{PREFIX}/system/seed-data")
        self.assertEqual(resp.status_code, 400)

    def test_seed_disabled_in_prod(self) -> None:
        client = TestClient(_make_app(APP_ENV="prod", SEED_ADMIN_PASSWORD=SecretStr("seed-password")))
        resp = client.post(f"{PREFIX}/system/seed-data")
        self.assertEqual(resp.status_code, 403)


class TestHealth(unittest.TestCase):
    def test_detailed_health_is_public(self) -> None:
        client = TestClient(_make_app())
        resp = client.get(f"{PREFIX}/health/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json(), {"status": "ok", "environment": "dev", "database": "connected"}
        )


class TestCreateUserScript(unittest.TestCase):
    def setUp(self) -> None:
        self.app = _make_app()
        self.settings = self.app.state.settings

    def _run(self, argv: list[str]) -> int:
        with patch.object(create_user_script, "get_settings", return_value=self.settings):
            return create_user_script.main(argv, session_factory=self.app.state.session_factory)

    def test_creates_user(self) -> None:
        code = self._run(["erin", "erin-password", "Erin", "--lastname", "Brockovich", "--role", "admin"])
        self.assertEqual(code, 0)
        user = _get_user(self.app, "erin")
        self.assertEqual(user.role, "admin")
        self.assertEqual(user.lastname, "Brockovich")

    def test_rejects_short_password(self) -> None:
        self.assertEqual(self._run(["erin", "short", "Erin"]), 1)
        self.assertIsNone(_get_user(self.app, "erin"))

    def test_rejects_duplicate(self) -> None:
        self.assertEqual(self._run(["erin", "erin-password", "Erin"]), 0)
        self.assertEqual(self._run(["erin", "erin-password", "Erin"]), 1)


if __name__ == "__main__":
    unittest.main()
