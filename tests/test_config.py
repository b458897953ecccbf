"""Tests for Settings parsing and validation."""
import pytest
from pydantic import ValidationError

from heart.config import Settings
from heart.database import normalise_database_url


class TestSettings:

    def test_defaults(self):
        settings = Settings(DATABASE_URL="sqlite+aiosqlite:///x.db", _env_file=None)
        assert settings.PROFILE_PAGE_SIZE == 50
        assert settings.PHOTO_MAX_BYTES == 5 * 1024 * 1024
        assert "image/webp" in settings.photo_content_types_list
        assert settings.is_production is False

    def test_origins_split_on_commas(self):
        settings = Settings(
            DATABASE_URL="sqlite+aiosqlite:///x.db",
            ALLOWED_ORIGINS="http://a.test, http://b.test,",
            _env_file=None,
        )
        assert settings.allowed_origins_list == ["http://a.test", "http://b.test"]

    def test_log_level_normalised(self):
        settings = Settings(DATABASE_URL="sqlite+aiosqlite:///x.db", LOG_LEVEL="debug", _env_file=None)
        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.log_level_number == 10

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(DATABASE_URL="sqlite+aiosqlite:///x.db", LOG_LEVEL="chatty", _env_file=None)

    def test_page_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(DATABASE_URL="sqlite+aiosqlite:///x.db", PROFILE_PAGE_SIZE=0, _env_file=None)


class TestDatabaseUrl:

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("postgresql://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
            ("postgres://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
            ("postgresql+asyncpg://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
            ("sqlite+aiosqlite:///heart.db", "sqlite+aiosqlite:///heart.db"),
        ],
    )
    def test_normalise(self, url, expected):
        assert normalise_database_url(url) == expected
