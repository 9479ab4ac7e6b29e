"""
Tests for configuration loading.
"""

import pytest
from pydantic import ValidationError

from library_api.config import APIConfig


def test_defaults(monkeypatch):
    monkeypatch.delenv("MONGODB_URL", raising=False)
    monkeypatch.delenv("DB", raising=False)

    config = APIConfig(_env_file=None)

    assert config.mongodb_url == "mongodb://localhost:27017"
    assert config.mongodb_database == "library"
    assert config.mongodb_collection == "books"
    assert config.client_error_status == 400
    assert config.log_level == "INFO"


def test_mongodb_url_from_env(monkeypatch):
    monkeypatch.delenv("DB", raising=False)
    monkeypatch.setenv("MONGODB_URL", "mongodb://db.internal:27017")

    assert APIConfig(_env_file=None).mongodb_url == "mongodb://db.internal:27017"


def test_mongodb_url_from_db_variable(monkeypatch):
    monkeypatch.delenv("MONGODB_URL", raising=False)
    monkeypatch.setenv("DB", "mongodb+srv://cluster.example.net/library")

    assert APIConfig(_env_file=None).mongodb_url == "mongodb+srv://cluster.example.net/library"


def test_log_settings_normalized():
    config = APIConfig(_env_file=None, log_level="debug", log_format="CONSOLE")
    assert config.log_level == "DEBUG"
    assert config.log_format == "console"


@pytest.mark.parametrize("field,value", [
    ("log_level", "LOUD"),
    ("log_format", "xml"),
    ("client_error_status", 404),
])
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        APIConfig(_env_file=None, **{field: value})
