"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from slowlog.core.config import Settings


def test_database_url_is_built_from_db_fields():
    s = Settings(DB_HOST="db", DB_USER="app", DB_PASSWORD="secret", DB_NAME="stats", _env_file=None)

    assert s.DATABASE_URL == "postgresql+asyncpg://app:secret@db:5432/stats"


def test_password_is_url_escaped():
    s = Settings(DB_PASSWORD="p@ss:w/rd", _env_file=None)

    assert "p%40ss%3Aw%2Frd@" in s.DATABASE_URL


@pytest.mark.parametrize("field", ["DB_HOST", "DB_USER", "DB_NAME"])
def test_blank_db_fields_are_rejected(field):
    with pytest.raises(ValidationError):
        Settings(**{field: "  "}, _env_file=None)


def test_negative_page_cap_is_rejected():
    with pytest.raises(ValidationError):
        Settings(MAX_PAGE_SIZE=-1, _env_file=None)


def test_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(DB_COMMAND_TIMEOUT_SECONDS=0, _env_file=None)
