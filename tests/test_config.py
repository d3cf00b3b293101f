"""Unit tests for app.core.config.Settings validators."""

import unittest

from pydantic import SecretStr, ValidationError

from app.core.config import Settings


def _settings(**overrides: object) -> Settings:
    values: dict[str, object] = {"DATABASE_URL": "sqlite://"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettingsDefaults(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = _settings()
        self.assertEqual(settings.API_V1_PREFIX, "/api/v1")
        self.assertEqual(settings.USERS_PAGE_SIZE, 10)
        self.assertTrue(settings.REFRESH_TOKEN_REUSE_DETECTION)
        self.assertIsNone(settings.SEED_ADMIN_PASSWORD)


class TestSettingsValidation(unittest.TestCase):
    def test_rejects_unsupported_database_url(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(DATABASE_URL="mysql://root@localhost/db")

    def test_accepts_postgres_url(self) -> None:
        settings = _settings(DATABASE_URL=" postgresql+psycopg2://u:p@db:5432/app ")
        self.assertEqual(settings.DATABASE_URL, "postgresql+psycopg2://u:p@db:5432/app")

    def test_bare_postgres_schemes_use_psycopg2(self) -> None:
        for url in ("postgresql://u:p@db/app", "postgres://u:p@db/app", "postgres+psycopg2://u:p@db/app"):
            self.assertEqual(_settings(DATABASE_URL=url).DATABASE_URL, "postgresql+psycopg2://u:p@db/app")

    def test_default_url_names_the_declared_driver(self) -> None:
        default = Settings.model_fields["DATABASE_URL"].default
        self.assertTrue(default.startswith("postgresql+psycopg2://"))

    def test_salt_rounds_bounds(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(PASSWORD_SALT_ROUNDS=3)
        with self.assertRaises(ValidationError):
            _settings(PASSWORD_SALT_ROUNDS=32)

    def test_empty_jwt_secret(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_SECRET=SecretStr("  "))

    def test_none_algorithm(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_ALGORITHM="none")

    def test_access_expiry_bounds(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_ACCESS_EXPIRE_MINUTES=0)

    def test_page_size_bounds(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(USERS_PAGE_SIZE=0)

    def test_log_level_normalized(self) -> None:
        self.assertEqual(_settings(LOG_LEVEL="debug").LOG_LEVEL, "DEBUG")
        with self.assertRaises(ValidationError):
            _settings(LOG_LEVEL="chatty")

    def test_api_prefix_normalized(self) -> None:
        self.assertEqual(_settings(API_V1_PREFIX="/api/v2/").API_V1_PREFIX, "/api/v2")
        with self.assertRaises(ValidationError):
            _settings(API_V1_PREFIX="api")


class TestCorsOrigins(unittest.TestCase):
    def test_dev_allows_any_origin(self) -> None:
        settings = _settings(APP_ENV="dev", CORS_ALLOWED_ORIGINS="https://a.example")
        self.assertEqual(settings.cors_origins, ["*"])

    def test_prod_uses_allow_list(self) -> None:
        settings = _settings(
            APP_ENV="prod", CORS_ALLOWED_ORIGINS="https://a.example, https://b.example,"
        )
        self.assertEqual(settings.cors_origins, ["https://a.example", "https://b.example"])


if __name__ == "__main__":
    unittest.main()
