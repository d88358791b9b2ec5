"""Tests for redmine_branch/config.py"""

import textwrap
from pathlib import Path

import pytest

from redmine_branch.config import (
    APP_NAME,
    ConfigError,
    default_config_path,
    ensure_config,
    generate_template,
    load,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def write_config(tmp_path: Path, content: str) -> Path:
    p = tmp_path / "config.yaml"
    p.write_text(textwrap.dedent(content), encoding="utf-8")
    return p


VALID_YAML = """\
    version: 1
    server:
      url: "https://redmine.example.com"
      api_key: "0123abcd"
    """


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("REDMINE_URL", raising=False)
    monkeypatch.delenv("REDMINE_API_KEY", raising=False)


# ---------------------------------------------------------------------------
# load() — happy path
# ---------------------------------------------------------------------------

def test_load_valid_config(tmp_path):
    p = write_config(tmp_path, VALID_YAML)
    config = load(str(p))
    assert config.url == "https://redmine.example.com"
    assert config.api_key == "0123abcd"
    assert config.verify_ssl is True
    assert config.version == 1


def test_load_verify_ssl_false(tmp_path):
    p = write_config(tmp_path, """\
        server:
          url: "https://redmine.example.com"
          api_key: "0123abcd"
          verify_ssl: false
        """)
    assert load(p).verify_ssl is False


# ---------------------------------------------------------------------------
# load() — missing file / bad content
# ---------------------------------------------------------------------------

def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load(str(tmp_path / "no-such-file.yaml"))


def test_load_not_a_mapping(tmp_path):
    p = write_config(tmp_path, "- a\n- b\n")
    with pytest.raises(ConfigError, match="mapping"):
        load(p)


def test_load_invalid_yaml(tmp_path):
    p = write_config(tmp_path, "server: [unclosed\n")
    with pytest.raises(ConfigError, match="Failed to parse"):
        load(p)


def test_load_server_not_a_mapping(tmp_path):
    p = write_config(tmp_path, "server: oops\n")
    with pytest.raises(ConfigError, match="'server'.*mapping"):
        load(p)


@pytest.mark.parametrize("value", ['"false"', '"no"', "0"])
def test_load_verify_ssl_must_be_boolean(tmp_path, value):
    p = write_config(tmp_path, f"""\
        server:
          url: "https://redmine.example.com"
          api_key: "0123abcd"
          verify_ssl: {value}
        """)
    with pytest.raises(ConfigError, match="server.verify_ssl"):
        load(p)


def test_load_empty_api_key(tmp_path):
    p = write_config(tmp_path, """\
        server:
          url: "https://redmine.example.com"
          api_key: ""
        """)
    with pytest.raises(ConfigError, match="server.api_key"):
        load(str(p))


def test_load_missing_url(tmp_path):
    p = write_config(tmp_path, """\
        server:
          api_key: "0123abcd"
        """)
    with pytest.raises(ConfigError, match="server.url"):
        load(str(p))


def test_load_unsupported_version(tmp_path):
    p = write_config(tmp_path, VALID_YAML.replace("version: 1", "version: 7"))
    with pytest.raises(ConfigError, match="version"):
        load(p)


# ---------------------------------------------------------------------------
# load() — overrides
# ---------------------------------------------------------------------------

def test_env_url_overrides_config(tmp_path, monkeypatch):
    p = write_config(tmp_path, VALID_YAML)
    monkeypatch.setenv("REDMINE_URL", "https://override.example.com")
    assert load(str(p)).url == "https://override.example.com"


def test_env_api_key_overrides_config(tmp_path, monkeypatch):
    p = write_config(tmp_path, VALID_YAML)
    monkeypatch.setenv("REDMINE_API_KEY", "from-env")
    assert load(str(p)).api_key == "from-env"


def test_explicit_api_key_wins(tmp_path, monkeypatch):
    p = write_config(tmp_path, VALID_YAML)
    monkeypatch.setenv("REDMINE_API_KEY", "from-env")
    assert load(str(p), api_key="from-flag").api_key == "from-flag"


def test_explicit_api_key_fills_empty_template(tmp_path):
    p = tmp_path / "config.yaml"
    generate_template(p)
    assert load(p, api_key="from-flag").api_key == "from-flag"


# ---------------------------------------------------------------------------
# generate_template() / ensure_config()
# ---------------------------------------------------------------------------

def test_generate_template_creates_file_and_parents(tmp_path):
    out = tmp_path / "nested" / "dir" / "config.yaml"
    generate_template(str(out))
    content = out.read_text()
    assert "server:" in content
    assert "api_key:" in content


def test_generate_template_refuses_to_overwrite(tmp_path):
    out = tmp_path / "config.yaml"
    out.write_text("existing content")
    with pytest.raises(ConfigError, match="already exists"):
        generate_template(str(out))


def test_generate_template_force_overwrites(tmp_path):
    out = tmp_path / "config.yaml"
    out.write_text("existing content")
    generate_template(out, force=True)
    assert "server:" in out.read_text()


def test_ensure_config_creates_once(tmp_path):
    out = tmp_path / "config.yaml"
    assert ensure_config(out) is True
    out.write_text(VALID_YAML)
    assert ensure_config(out) is False
    assert out.read_text() == VALID_YAML


def test_default_config_path_is_per_user():
    path = default_config_path()
    assert path.name == "config.yaml"
    assert APP_NAME in str(path)
