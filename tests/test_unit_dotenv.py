"""
Tests for the env-file loader.
"""

import os

import pytest

from rule_canvas.core.dotenv import load_env_file, parse_env_line


class TestParseEnvLine:
    @pytest.mark.anyio
    @pytest.mark.parametrize(
        "line,expected",
        [
            ("KEY=value", ("KEY", "value")),
            ("export KEY=value", ("KEY", "value")),
            ('KEY="quoted # not a comment"', ("KEY", "quoted # not a comment")),
            ("KEY='single'", ("KEY", "single")),
            ("KEY=value # trailing", ("KEY", "value")),
            ("KEY=", ("KEY", "")),
            ("# comment", None),
            ("", None),
            ("no_equals", None),
            ("=value", None),
        ],
    )
    async def test_lines(self, line, expected):
        """Test parsing of assignments, quotes, comments and junk lines."""
        assert parse_env_line(line) == expected


class TestLoadEnvFile:
    @pytest.mark.anyio
    async def test_missing_file_loads_nothing(self, tmp_path):
        """Test that a missing env file loads nothing."""
        assert load_env_file(tmp_path / "absent.env") == {}

    @pytest.mark.anyio
    async def test_existing_vars_kept_unless_overwrite(self, tmp_path, monkeypatch):
        """Test that existing variables win unless overwrite is set."""
        env_file = tmp_path / ".env"
        env_file.write_text("RC_TEST_A=from_file\nRC_TEST_B=2\n", encoding="utf-8")
        monkeypatch.setenv("RC_TEST_A", "from_env")
        monkeypatch.delenv("RC_TEST_B", raising=False)

        loaded = load_env_file(env_file)

        assert loaded == {"RC_TEST_B": "2"}
        assert os.environ["RC_TEST_A"] == "from_env"

        load_env_file(env_file, overwrite=True)
        assert os.environ["RC_TEST_A"] == "from_file"
