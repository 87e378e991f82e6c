"""Tests for environment lookup and .env loading"""

from __future__ import annotations

import pytest

from pagewatch.infrastructure import env
from pagewatch.infrastructure.errors import ConfigError


def test_prefixed_name_takes_precedence(monkeypatch):
    monkeypatch.setenv("PAGEWATCH_TEAM_URL", "https://prefixed/")
    monkeypatch.setenv("TEAM_URL", "https://bare/")

    assert env.lookup_env("TEAM_URL") == "https://prefixed/"


def test_blank_prefixed_value_falls_back(monkeypatch):
    monkeypatch.setenv("PAGEWATCH_TEAM_URL", "  ")
    monkeypatch.setenv("TEAM_URL", " https://bare/ ")

    assert env.lookup_env("TEAM_URL") == "https://bare/"


def test_unset_returns_none(monkeypatch):
    monkeypatch.delenv("PAGEWATCH_NOT_A_KEY", raising=False)
    monkeypatch.delenv("NOT_A_KEY", raising=False)

    assert env.lookup_env("NOT_A_KEY") is None


@pytest.fixture
def dotenv_calls(monkeypatch):
    """Replace load_dotenv with a recorder and start from a fresh process state."""
    calls = []
    monkeypatch.setattr(env, "load_dotenv", lambda *args: calls.append(args))
    monkeypatch.setattr(env, "_ENV_LOADED", False)
    return calls


def test_missing_env_file_raises(dotenv_calls, tmp_path):
    with pytest.raises(ConfigError, match="env file not found"):
        env.ensure_env_loaded(tmp_path / "typo.env")

    assert dotenv_calls == []


def test_explicit_env_file_loaded_after_default(dotenv_calls, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("PAGEWATCH_DOTENV_CHECK=from-file\n")

    env.ensure_env_loaded()
    env.ensure_env_loaded(env_file)

    assert dotenv_calls[-1] == (env_file,)
    assert len(dotenv_calls) == 2


def test_default_search_runs_once(dotenv_calls):
    env.ensure_env_loaded()
    env.ensure_env_loaded()

    assert len(dotenv_calls) == 1


def test_explicit_env_file_sets_values(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("PAGEWATCH_DOTENV_CHECK=from-file\n")
    monkeypatch.delenv("PAGEWATCH_DOTENV_CHECK", raising=False)
    monkeypatch.setattr(env, "_ENV_LOADED", True)

    env.ensure_env_loaded(env_file)

    assert env.lookup_env("DOTENV_CHECK") == "from-file"
    monkeypatch.delenv("PAGEWATCH_DOTENV_CHECK")
