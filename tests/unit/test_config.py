from pathlib import Path
from textwrap import dedent

import pytest

from fleetscaler.core.config import BuildkiteSettings, get_scaler_config, load_scaler_config, reset_scaler_config
from fleetscaler.core.errors import ConfigurationError
from fleetscaler.core.matching import available_strategies, create_strategy, unregister_strategy
from fleetscaler.core.matching.strategy import FirstFitStrategy


pytestmark = pytest.mark.usefixtures("clean_config")


def _write(path: Path, body: str) -> Path:
    path.write_text(dedent(body), encoding="utf-8")
    return path


def test_bundled_defaults():
    cfg = load_scaler_config()
    assert cfg.source is None
    assert cfg.buildkite.api_url == "https://api.buildkite.com/v2"
    assert cfg.buildkite.organization == "env:BUILDKITE_ORG"
    assert cfg.buildkite.per_page == 100
    assert cfg.aws.region is None
    assert cfg.tag_prefix == "buildkite-scaler:"
    assert cfg.matching.default_strategy == "first_fit"
    assert cfg.log_level == "INFO"


def test_env_var_config_file(tmp_path: Path, monkeypatch):
    config_file = _write(
        tmp_path / "custom.yaml",
        """
        buildkite:
          organization: acme
          token: literal-token
          timeout: 3
        aws:
          region: eu-west-1
        tags:
          prefix: "ci:"
        logging:
          level: debug
        """,
    )
    monkeypatch.setenv("FLEETSCALER_CONFIG", str(config_file))

    cfg = get_scaler_config()

    assert cfg.source == str(config_file)
    assert cfg.buildkite.resolve_credentials() == ("acme", "literal-token")
    assert cfg.buildkite.timeout == 3.0
    assert cfg.aws.region == "eu-west-1"
    assert cfg.tag_prefix == "ci:"
    assert cfg.log_level == "DEBUG"
    assert get_scaler_config() is cfg


def test_cwd_config_file_is_used(tmp_path: Path):
    _write(tmp_path / "fleetscaler.yaml", "aws:\n  region: us-east-2\n")
    assert load_scaler_config().aws.region == "us-east-2"


def test_explicit_path_must_exist(tmp_path: Path):
    with pytest.raises(ConfigurationError, match="does not exist"):
        load_scaler_config(tmp_path / "missing.yaml")


def test_credentials_from_environment(monkeypatch):
    monkeypatch.setenv("BUILDKITE_ORG", "acme")
    monkeypatch.setenv("BUILDKITE_TOKEN", "secret")
    assert BuildkiteSettings().resolve_credentials() == ("acme", "secret")


def test_missing_credentials_raise(monkeypatch):
    monkeypatch.delenv("BUILDKITE_ORG", raising=False)
    monkeypatch.setenv("BUILDKITE_TOKEN", "secret")
    with pytest.raises(ConfigurationError, match="organization"):
        BuildkiteSettings().resolve_credentials()

    with pytest.raises(ConfigurationError, match="token"):
        BuildkiteSettings(organization="acme", token=None).resolve_credentials()


@pytest.mark.parametrize(
    "body, message",
    [
        ("buildkite: [1, 2]\n", "mapping"),
        ("buildkite:\n  timeout: soon\n", "number"),
        ("buildkite:\n  per_page: 0\n", "positive"),
        ("tags:\n  prefix: '  '\n", "prefix"),
        ("matching:\n  default_strategy: nope\n", "not registered"),
        ("matching:\n  strategies: [{enabled: true}]\n", "name"),
        ("matching:\n  strategies: [{name: x, import: no_colon}]\n", "module:attr"),
        (
            "matching:\n  strategies: [{name: x, import: 'fleetscaler.core.matching.strategy:ENTRY_POINT_GROUP'}]\n",
            "Cannot load strategy",
        ),
        ("- just\n- a list\n", "mapping"),
        ("buildkite: {organization: [\n", "Invalid YAML"),
    ],
)
def test_invalid_config_is_rejected(tmp_path: Path, body, message):
    path = _write(tmp_path / "bad.yaml", body)
    with pytest.raises(ConfigurationError, match=message):
        load_scaler_config(path)


def test_load_custom_strategy(tmp_path: Path):
    path = _write(
        tmp_path / "strategy.yaml",
        """
        matching:
          default_strategy: custom_strategy
          strategies:
            - name: custom_strategy
              import: fleetscaler.core.matching.strategy:FirstFitStrategy
        """,
    )
    try:
        cfg = load_scaler_config(path)
        assert cfg.matching.default_strategy == "custom_strategy"
        assert "custom_strategy" in available_strategies()
        assert isinstance(create_strategy("custom_strategy"), FirstFitStrategy)
    finally:
        unregister_strategy("custom_strategy")


def test_disable_strategy(tmp_path: Path):
    path = _write(
        tmp_path / "strategy.yaml",
        """
        matching:
          default_strategy: first_fit
          strategies:
            - name: temporary
              import: fleetscaler.core.matching.strategy:FirstFitStrategy
            - name: temporary
              enabled: false
        """,
    )
    load_scaler_config(path)

    assert "temporary" not in available_strategies()
    assert isinstance(create_strategy("first_fit"), FirstFitStrategy)
    with pytest.raises(ValueError):
        create_strategy("temporary")


def test_reset_clears_cache():
    first = get_scaler_config()
    reset_scaler_config()
    assert get_scaler_config() is not first
