"""Tests for config loading."""

import pytest

from querykv.config.loader import (
    DEFAULT_SQLITE_PATH,
    get_default_projection,
    get_log_level,
    get_sqlite_path,
    load_config,
)


def test_load_config_full(tmp_path):
    path = tmp_path / "querykv.config.yaml"
    path.write_text(
        "version: 1\n"
        "storage:\n  sqlite_path: data/records.db\n"
        "query:\n  projection: [status, owner]\n"
        "logging:\n  level: debug\n"
    )

    config = load_config(path)

    assert get_sqlite_path(config) == "data/records.db"
    assert get_default_projection(config) == ["status", "owner"]
    assert get_log_level(config) == "DEBUG"


def test_defaults_when_sections_missing(tmp_path):
    path = tmp_path / "querykv.config.yaml"
    path.write_text("version: 1\n")

    config = load_config(path)

    assert get_sqlite_path(config) == DEFAULT_SQLITE_PATH
    assert get_default_projection(config) == []
    assert get_log_level(config) == "INFO"
    assert get_sqlite_path(None) == DEFAULT_SQLITE_PATH


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "content, message",
    [
        ("- a\n- b\n", "must be a dictionary"),
        ("storage: {}\n", "'version'"),
        ("version: 1\nstorage: [a]\n", "'storage'"),
        ("version: 1\nquery:\n  projection: status\n", "must be a list"),
        ("version: 1\nquery:\n  projection: [1]\n", "non-empty strings"),
        ("version: 1\nstorage:\n  sqlite_path: 5\n", "sqlite_path"),
    ],
)
def test_invalid_config(tmp_path, content, message):
    path = tmp_path / "querykv.config.yaml"
    path.write_text(content)

    with pytest.raises(ValueError, match=message):
        load_config(path)
