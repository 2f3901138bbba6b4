"""Run configuration loaded from the environment and an optional .env file."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping

from dotenv import dotenv_values
from pydantic import BaseModel, Field, SecretStr, ValidationError

from secretsync.errors import ConfigError
from secretsync.models import DesiredSecret

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"

ENV_ORGANIZATION = "GITHUB_ORGANIZATION"
ENV_REPOSITORY = "GITHUB_REPOSITORY"
ENV_TOKEN = "GITHUB_TOKEN"
ENV_SECRETS = "GITHUB_SECRETS"
ENV_API_URL = "SECRETSYNC_API_URL"
ENV_MAX_CONCURRENCY = "SECRETSYNC_MAX_CONCURRENCY"


class SyncConfig(BaseModel):
    """Everything one run needs, passed explicitly to the transport.

    Args:
        organization: Repository owner (user or organization).
        repository: Repository name.
        token: Bearer credential for the API.
        secrets: Desired secrets.
        api_url: Base URL of the GitHub REST API.
        max_concurrency: Upper bound on in-flight write/delete calls.
        timeout: Per-request timeout in seconds.
    """

    organization: str = Field(..., min_length=1)
    repository: str = Field(..., min_length=1)
    token: SecretStr
    secrets: list[DesiredSecret] = Field(default_factory=list)
    api_url: str = DEFAULT_API_URL
    max_concurrency: int = Field(1, ge=1)
    timeout: float = Field(30.0, gt=0)


def _to_desired(items: list[Any]) -> list[DesiredSecret]:
    try:
        return [DesiredSecret.model_validate(item) for item in items]
    except ValidationError as e:
        raise ConfigError(f"Invalid secret entry: {e}") from e


def parse_secrets(raw: str) -> list[DesiredSecret]:
    """Parse desired secrets from JSON.

    Accepts either an object mapping name to value, or a list of
    {"name": ..., "value": ...} objects. The list form keeps duplicate
    names as separate entries.

    Args:
        raw: JSON text.

    Returns:
        Desired secrets in document order.

    Raises:
        ConfigError: If the text is not valid JSON or has the wrong shape.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Failed to parse secrets JSON: {e}") from e

    if isinstance(data, dict):
        return _to_desired([{"name": k, "value": v} for k, v in data.items()])
    if isinstance(data, list):
        return _to_desired(data)
    raise ConfigError("Secrets JSON must be an object or a list of {name, value} objects")


def load_secrets_file(path: Path | str) -> list[DesiredSecret]:
    """Load desired secrets from a JSON file.

    Args:
        path: Path to the JSON file.

    Returns:
        Desired secrets.

    Raises:
        ConfigError: If the file is missing or malformed.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Secrets file not found: {path}")
    return parse_secrets(path.read_text(encoding="utf-8"))


def _require(env: Mapping[str, str | None], name: str) -> str:
    value = env.get(name)
    if not value:
        raise ConfigError(f"Environment variable not found: {name}")
    return value


def load_config(
    env_file: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
    secrets_file: Path | str | None = None,
) -> SyncConfig:
    """Build a SyncConfig from the process environment.

    Values from the .env file fill in variables the environment does not
    set; the environment wins on conflicts.

    Args:
        env_file: Path to a .env file. Defaults to ./.env when present.
        environ: Environment mapping. Defaults to os.environ.
        secrets_file: JSON file with desired secrets. When given,
            GITHUB_SECRETS is not required.

    Returns:
        Validated configuration.

    Raises:
        ConfigError: If a required variable is missing or invalid.
    """
    if environ is None:
        environ = os.environ

    env: dict[str, str | None] = {}
    dotenv_path = Path(env_file) if env_file is not None else Path.cwd() / ".env"
    if dotenv_path.exists():
        logger.debug("Loading environment from %s", dotenv_path)
        env.update(dotenv_values(dotenv_path))
    elif env_file is not None:
        raise ConfigError(f"Env file not found: {dotenv_path}")
    env.update(environ)

    organization = _require(env, ENV_ORGANIZATION)
    repository = _require(env, ENV_REPOSITORY)
    token = _require(env, ENV_TOKEN)

    if secrets_file is not None:
        secrets = load_secrets_file(secrets_file)
    else:
        secrets = parse_secrets(_require(env, ENV_SECRETS))

    concurrency_raw = env.get(ENV_MAX_CONCURRENCY) or "1"
    try:
        max_concurrency = int(concurrency_raw)
    except ValueError as e:
        raise ConfigError(f"{ENV_MAX_CONCURRENCY} must be an integer: {concurrency_raw!r}") from e

    try:
        return SyncConfig(
            organization=organization,
            repository=repository,
            token=SecretStr(token),
            secrets=secrets,
            api_url=env.get(ENV_API_URL) or DEFAULT_API_URL,
            max_concurrency=max_concurrency,
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
