"""Configuration loading and validation.

Usage:
    path   = default_config_path()           # per-user app config dir
    config = load(path)                      # raises ConfigError on bad config
    generate_template(path)                  # writes example file to disk
"""

import os
from dataclasses import dataclass
from pathlib import Path

import click
import yaml

APP_NAME = "redmine-new-branch"
CONFIG_VERSION = 1


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    url: str
    api_key: str
    verify_ssl: bool = True
    version: int = CONFIG_VERSION


def default_config_path() -> Path:
    """Return ``config.yaml`` inside the per-user application config directory."""
    return Path(click.get_app_dir(APP_NAME)) / "config.yaml"


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str | Path, api_key: str | None = None) -> Config:
    """Load and validate configuration from a YAML file.

    Environment variables REDMINE_URL and REDMINE_API_KEY override file
    values; an explicit *api_key* overrides both.

    Raises:
        ConfigError: if the file is missing, malformed, or required fields
                     are absent.
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(
            f"Config file not found: '{path}'\n"
            "Run `redmine-new-branch init` to generate a template."
        )

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{path}': {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{path}' must be a YAML mapping at the top level.")

    server = raw.get("server") or {}
    if not isinstance(server, dict):
        raise ConfigError(f"'server' in '{path}' must be a YAML mapping.")

    url = os.environ.get("REDMINE_URL") or server.get("url", "")
    key = api_key or os.environ.get("REDMINE_API_KEY") or server.get("api_key", "")

    config = Config(
        url=str(url or "").strip(),
        api_key=str(key or "").strip(),
        verify_ssl=server.get("verify_ssl", True),
        version=raw.get("version", CONFIG_VERSION),
    )
    _validate(config, path)
    return config


def _validate(config: Config, path: Path) -> None:
    """Raise ConfigError if required fields are missing."""
    errors: list[str] = []

    if not config.url:
        errors.append(
            "  - 'server.url' is missing (or set the REDMINE_URL environment variable)"
        )
    if not config.api_key:
        errors.append(
            "  - 'server.api_key' is empty (set it in the file, pass --api-key, "
            "or set the REDMINE_API_KEY environment variable)"
        )
    # YAML booleans only: the string "false" is truthy
    if not isinstance(config.verify_ssl, bool):
        errors.append(
            f"  - 'server.verify_ssl' must be true or false, got {config.verify_ssl!r}"
        )
    if config.version != CONFIG_VERSION:
        errors.append(
            f"  - unsupported config version {config.version!r} (expected {CONFIG_VERSION})"
        )

    if errors:
        raise ConfigError(f"Invalid configuration in '{path}':\n" + "\n".join(errors))


# ---------------------------------------------------------------------------
# Template generator (used by `init` and on first run)
# ---------------------------------------------------------------------------

TEMPLATE = """\
version: 1

server:
  url: "https://redmine.example.com"
  api_key: ""              # My account > API access key
  verify_ssl: true         # false for self-signed certificates
"""


def generate_template(output_path: str | Path, force: bool = False) -> None:
    """Write a template config file to *output_path*, creating parent dirs.

    Raises:
        ConfigError: if the file already exists and *force* is not set
                     (to avoid overwriting the API key).
    """
    path = Path(output_path)
    if path.exists() and not force:
        raise ConfigError(
            f"'{path}' already exists. Remove it first, use --force, or choose a different path."
        )
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(TEMPLATE, encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Unable to write '{path}': {exc}") from exc


def ensure_config(config_path: str | Path) -> bool:
    """Create a template config at *config_path* if none exists.

    Returns True when a file was created.
    """
    if Path(config_path).exists():
        return False
    generate_template(config_path)
    return True
