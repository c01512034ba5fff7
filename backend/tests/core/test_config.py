"""Tests for application configuration."""
import pytest

from core.config import Settings

REQUIRED = {
    "database_url": "postgresql+asyncpg://test",
    "jwt_secret": "jwt-secret",
    "encryption_key": "encryption-key",
    "session_secret": "session-secret",
}


class TestCorsOriginsParsing:
    """CORS_ORIGINS is a comma-separated string, not JSON."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("http://localhost:5173", ["http://localhost:5173"]),
            (
                "http://localhost:5173,https://mnemonics.example",
                ["http://localhost:5173", "https://mnemonics.example"],
            ),
            (
                "  http://localhost:5173 , https://mnemonics.example  ",
                ["http://localhost:5173", "https://mnemonics.example"],
            ),
            ("http://localhost:5173,", ["http://localhost:5173"]),
            ("", []),
        ],
    )
    def test__cors_origins__parsed_from_string(self, raw: str, expected: list[str]) -> None:
        assert Settings(**REQUIRED, cors_origins=raw).cors_origins == expected

    def test__cors_origins__list_kept(self) -> None:
        origins = ["http://localhost:5173", "https://mnemonics.example"]
        assert Settings(**REQUIRED, cors_origins=origins).cors_origins == origins

    def test__cors_origins__read_from_environment(self, monkeypatch) -> None:  # noqa: ANN001
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example,https://b.example")
        settings = Settings(_env_file=None, **REQUIRED)
        assert settings.cors_origins == ["https://a.example", "https://b.example"]


class TestDefaults:
    """Tests for defaults of optional settings."""

    def test_defaults(self, monkeypatch) -> None:  # noqa: ANN001
        """Optional settings fall back to their defaults."""
        for name in ("DEV_MODE", "REDIS_ENABLED", "TOKEN_EXPIRY_DAYS", "CORS_ORIGINS"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None, **REQUIRED)
        assert settings.token_expiry_days == 30
        assert settings.dev_mode is False
        assert settings.redis_enabled is True
        assert settings.cors_origins == ["http://localhost:5173"]
        assert settings.log_level == "INFO"

    def test_dev_mode_from_environment(self, monkeypatch) -> None:  # noqa: ANN001
        """Boolean flags accept 'true'."""
        monkeypatch.setenv("DEV_MODE", "true")
        settings = Settings(_env_file=None, **REQUIRED)
        assert settings.dev_mode is True
