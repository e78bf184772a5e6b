"""
Tests for configuration loading (config.yaml + env overrides) and the line logger.
"""

from __future__ import annotations

import pytest

from influencer_iq.main import DEFAULT_CONFIG, load_config, read_names
from influencer_iq.tools.logger import make_logger, should_log

ENV_KEYS = [
    "GROQ_API_KEY",
    "INFLUENCER_IQ_CONFIG",
    "INFLUENCER_IQ_GROQ_BASE_URL",
    "INFLUENCER_IQ_MODELS",
    "INFLUENCER_IQ_TEMPERATURE",
    "INFLUENCER_IQ_MAX_TOKENS",
    "INFLUENCER_IQ_TIMEOUT_SEC",
    "INFLUENCER_IQ_SEED_RANKINGS",
    "INFLUENCER_IQ_HOST",
    "INFLUENCER_IQ_PORT",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_missing_config_file_uses_defaults(clean_env, tmp_path):
    cfg = load_config(str(tmp_path / "absent.yaml"))
    assert cfg["groq"]["models"] == DEFAULT_CONFIG["groq"]["models"]
    assert cfg["groq"]["timeout_sec"] == 30
    assert cfg["rankings"]["seed_examples"] is True
    assert cfg["web"]["port"] == 8000


def test_yaml_values_merge_over_defaults(clean_env, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "groq:\n"
        "  models: [only-model]\n"
        "  timeout_sec: 5\n"
        "rankings:\n"
        "  seed_examples: false\n",
        encoding="utf-8",
    )
    cfg = load_config(str(path))
    assert cfg["groq"]["models"] == ["only-model"]
    assert cfg["groq"]["timeout_sec"] == 5
    assert cfg["groq"]["max_tokens"] == 1500
    assert cfg["groq"]["base_url"] == "https://api.groq.com/openai/v1"
    assert cfg["rankings"]["seed_examples"] is False


def test_environment_overrides_yaml(clean_env, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("groq:\n  models: [from-yaml]\n", encoding="utf-8")
    clean_env.setenv("INFLUENCER_IQ_MODELS", "m1, m2 ,")
    clean_env.setenv("INFLUENCER_IQ_TIMEOUT_SEC", "12.5")
    clean_env.setenv("INFLUENCER_IQ_SEED_RANKINGS", "no")
    clean_env.setenv("INFLUENCER_IQ_PORT", "9001")
    clean_env.setenv("GROQ_API_KEY", "gsk-test")

    cfg = load_config(str(path))
    assert cfg["groq"]["models"] == ["m1", "m2"]
    assert cfg["groq"]["timeout_sec"] == 12.5
    assert cfg["groq"]["api_key"] == "gsk-test"
    assert cfg["rankings"]["seed_examples"] is False
    assert cfg["web"]["port"] == 9001


def test_defaults_are_not_mutated(clean_env, tmp_path):
    clean_env.setenv("INFLUENCER_IQ_MODELS", "mutant")
    load_config(str(tmp_path / "absent.yaml"))
    assert DEFAULT_CONFIG["groq"]["models"] != ["mutant"]


def test_read_names_skips_blanks_and_comments(tmp_path):
    path = tmp_path / "names.txt"
    path.write_text("MrBeast\n\n# skip me\n  Lilly Singh  \n", encoding="utf-8")
    assert read_names(str(path)) == ["MrBeast", "Lilly Singh"]


def test_should_log_respects_level(monkeypatch):
    monkeypatch.setenv("INFLUENCER_IQ_LOG_LEVEL", "WARNING")
    assert not should_log("DEBUG")
    assert not should_log("INFO")
    assert should_log("WARNING")
    assert should_log("ERROR")


def test_logger_writes_to_file_and_streams(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("INFLUENCER_IQ_LOG_LEVEL", "INFO")
    logfile = tmp_path / "logs" / "app.log"
    log = make_logger("test", str(logfile))

    log.debug("hidden")
    log.info("hello")
    log.error("broken")

    out, err = capsys.readouterr()
    assert "INFO test: hello" in out
    assert "ERROR test: broken" in err
    assert "hidden" not in out + err

    lines = logfile.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("INFO test: hello")
