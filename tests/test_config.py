"""
Configuration loading, env overrides and CLI settings.
"""

import pytest

from scanner.config import Config, DEFAULT_USER_AGENT

ENV_VARS = (
    "SCAN_INPUT_FILE",
    "SCAN_OUTPUT_FILE",
    "SCAN_KEYWORDS",
    "SCAN_CONCURRENCY",
    "SCAN_TASK_DELAY",
    "FETCHER_TIMEOUT",
    "FETCHER_USER_AGENT",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_file():
    settings = Config().to_settings()

    assert settings.input_file == "websites.xlsx"
    assert settings.output_file is None
    assert settings.concurrency == 5
    assert settings.task_delay == 1.0
    assert settings.timeout == 30.0
    assert settings.max_redirects == 10
    assert settings.user_agent == DEFAULT_USER_AGENT
    assert settings.keywords == ("keyword1", "keyword2")


def test_yaml_values_merge_over_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "input:\n  file: sites.xlsx\n"
        "classifier:\n  keywords: [alpha, ' ', beta]\n"
        "pool:\n  concurrency: 3\n",
        encoding="utf-8",
    )

    settings = Config(str(path)).to_settings()

    assert settings.input_file == "sites.xlsx"
    assert settings.keywords == ("alpha", "beta")
    assert settings.concurrency == 3
    assert settings.task_delay == 1.0


def test_env_overrides_yaml(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("pool:\n  concurrency: 3\n", encoding="utf-8")
    monkeypatch.setenv("SCAN_CONCURRENCY", "8")
    monkeypatch.setenv("SCAN_TASK_DELAY", "0.5")
    monkeypatch.setenv("SCAN_KEYWORDS", "foo, bar,,")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Config(str(path)).to_settings()

    assert settings.concurrency == 8
    assert settings.task_delay == 0.5
    assert settings.keywords == ("foo", "bar")
    assert settings.log_level == "DEBUG"


def test_keyword_override_replaces_config():
    settings = Config().to_settings(keywords=("Only",), concurrency=None)

    assert settings.keywords == ("Only",)
    assert settings.concurrency == 5


def test_missing_config_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config(str(tmp_path / "missing.yaml"))


def test_invalid_yaml_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("pool: [unclosed\n", encoding="utf-8")

    with pytest.raises(ValueError):
        Config(str(path))


@pytest.mark.parametrize(
    "overrides",
    [
        {"concurrency": 0},
        {"task_delay": -1},
        {"timeout": 0},
        {"keywords": ("", "  ")},
    ],
)
def test_invalid_settings_are_rejected(overrides):
    with pytest.raises(ValueError):
        Config().to_settings(**overrides)


def test_unknown_setting_is_a_type_error():
    with pytest.raises(TypeError):
        Config().to_settings(colour="blue")


def test_cli_arguments_become_settings(tmp_path, monkeypatch):
    import main

    monkeypatch.chdir(tmp_path)
    args = main.parse_args([
        "input.xlsx",
        "-o", "report.xlsx",
        "--concurrency", "2",
        "--timeout", "10",
        "--delay", "0",
        "-k", "first",
        "-k", "second",
        "--log-level", "warning",
    ])

    settings = main.load_settings(args)

    assert settings.input_file == "input.xlsx"
    assert settings.output_file == "report.xlsx"
    assert settings.concurrency == 2
    assert settings.timeout == 10.0
    assert settings.task_delay == 0.0
    assert settings.keywords == ("first", "second")
    assert settings.log_level == "WARNING"
