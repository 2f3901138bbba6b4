"""Tests for configuration loading."""

import json

import pytest

from secretsync.config import (
    DEFAULT_API_URL,
    SyncConfig,
    load_config,
    load_secrets_file,
    parse_secrets,
)
from secretsync.errors import ConfigError

BASE_ENV = {
    "GITHUB_ORGANIZATION": "acme",
    "GITHUB_REPOSITORY": "widgets",
    "GITHUB_TOKEN": "ghp_test",
    "GITHUB_SECRETS": '{"A": "1", "B": "2"}',
}


@pytest.fixture
def no_dotenv(tmp_path, monkeypatch):
    """Run from an empty directory so no stray .env is picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestParseSecrets:
    def test_object_form(self):
        secrets = parse_secrets('{"A": "1", "B": "2"}')
        assert [(s.name, s.value) for s in secrets] == [("A", "1"), ("B", "2")]

    def test_list_form_keeps_duplicates(self):
        raw = json.dumps([{"name": "A", "value": "1"}, {"name": "A", "value": "2"}])
        secrets = parse_secrets(raw)
        assert [s.value for s in secrets] == ["1", "2"]

    def test_invalid_json(self):
        with pytest.raises(ConfigError, match="Failed to parse secrets JSON"):
            parse_secrets("{not json")

    def test_wrong_shape(self):
        with pytest.raises(ConfigError, match="object or a list"):
            parse_secrets('"just a string"')

    def test_empty_name_rejected(self):
        with pytest.raises(ConfigError, match="Invalid secret entry"):
            parse_secrets('[{"name": "", "value": "x"}]')

    @pytest.mark.parametrize("name", ["PROD?x=1", "a/b", "1ST", "WITH SPACE", "GITHUB_TOKEN"])
    def test_invalid_name_rejected(self, name):
        with pytest.raises(ConfigError, match="Invalid secret entry"):
            parse_secrets(json.dumps({name: "x"}))

    def test_lowercase_and_underscore_names_accepted(self):
        secrets = parse_secrets('{"_private": "1", "db_password2": "2"}')
        assert [s.name for s in secrets] == ["_private", "db_password2"]

    def test_missing_value_rejected(self):
        with pytest.raises(ConfigError):
            parse_secrets('[{"name": "A"}]')


class TestLoadSecretsFile:
    def test_loads_file(self, tmp_path):
        path = tmp_path / "secrets.json"
        path.write_text('{"X": "y"}', encoding="utf-8")
        assert load_secrets_file(path)[0].name == "X"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_secrets_file(tmp_path / "nope.json")


class TestLoadConfig:
    def test_from_environ(self, no_dotenv):
        config = load_config(environ=BASE_ENV)
        assert isinstance(config, SyncConfig)
        assert config.organization == "acme"
        assert config.repository == "widgets"
        assert config.token.get_secret_value() == "ghp_test"
        assert [s.name for s in config.secrets] == ["A", "B"]
        assert config.api_url == DEFAULT_API_URL
        assert config.max_concurrency == 1

    def test_token_not_in_repr(self, no_dotenv):
        config = load_config(environ=BASE_ENV)
        assert "ghp_test" not in repr(config)

    @pytest.mark.parametrize(
        "missing",
        ["GITHUB_ORGANIZATION", "GITHUB_REPOSITORY", "GITHUB_TOKEN", "GITHUB_SECRETS"],
    )
    def test_missing_variable(self, no_dotenv, missing):
        env = {k: v for k, v in BASE_ENV.items() if k != missing}
        with pytest.raises(ConfigError, match=f"Environment variable not found: {missing}"):
            load_config(environ=env)

    def test_dotenv_fills_gaps(self, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text(
            "GITHUB_ORGANIZATION=from-file\nGITHUB_TOKEN=file-token\n", encoding="utf-8"
        )
        env = {k: v for k, v in BASE_ENV.items() if k != "GITHUB_TOKEN"}
        config = load_config(env_file=env_file, environ=env)

        assert config.organization == "acme"
        assert config.token.get_secret_value() == "file-token"

    def test_default_dotenv_in_cwd(self, no_dotenv):
        (no_dotenv / ".env").write_text("GITHUB_TOKEN=cwd-token\n", encoding="utf-8")
        env = {k: v for k, v in BASE_ENV.items() if k != "GITHUB_TOKEN"}
        assert load_config(environ=env).token.get_secret_value() == "cwd-token"

    def test_explicit_env_file_missing(self, tmp_path):
        with pytest.raises(ConfigError, match="Env file not found"):
            load_config(env_file=tmp_path / "missing.env", environ=BASE_ENV)

    def test_secrets_file_replaces_env(self, no_dotenv):
        path = no_dotenv / "secrets.json"
        path.write_text('[{"name": "F", "value": "v"}]', encoding="utf-8")
        env = {k: v for k, v in BASE_ENV.items() if k != "GITHUB_SECRETS"}
        config = load_config(environ=env, secrets_file=path)
        assert [s.name for s in config.secrets] == ["F"]

    def test_overrides(self, no_dotenv):
        env = dict(
            BASE_ENV,
            SECRETSYNC_API_URL="https://ghe.example.com/api/v3",
            SECRETSYNC_MAX_CONCURRENCY="4",
        )
        config = load_config(environ=env)
        assert config.api_url == "https://ghe.example.com/api/v3"
        assert config.max_concurrency == 4

    @pytest.mark.parametrize("value", ["zero", "0"])
    def test_bad_concurrency(self, no_dotenv, value):
        env = dict(BASE_ENV, SECRETSYNC_MAX_CONCURRENCY=value)
        with pytest.raises(ConfigError):
            load_config(environ=env)
