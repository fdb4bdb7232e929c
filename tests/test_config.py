"""Tests for environment configuration."""
import pytest
from registry_lister.config import ListerConfig


ENV_VARS = [
    "REGISTRY_HOST", "REFRESH_INTERVAL", "PUBLIC_PREFIXES", "PULL_HOSTNAME",
    "SHOW_INDEX", "SHOW_LISTINGS", "REQUEST_TIMEOUT", "TAG_FETCH_CONCURRENCY",
    "LISTEN_HOST", "LISTEN_PORT", "REGISTRY_TOKEN", "TOKEN_REALM",
    "TOKEN_SERVICE", "REGISTRY_USERNAME", "REGISTRY_PASSWORD",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    """Test configuration with nothing set."""
    config = ListerConfig.from_env(load_env_file=False)

    assert config.registry_host == "http://localhost:8080"
    assert config.refresh_interval == 60.0
    assert config.public_prefixes == ()
    assert config.pull_hostname is None
    assert config.show_listings is True
    assert config.show_index is False
    assert config.request_timeout == 30.0
    assert config.tag_fetch_concurrency == 4


def test_values_from_environment(monkeypatch):
    """Test reading every kind of value."""
    monkeypatch.setenv("REGISTRY_HOST", "https://registry.example.com")
    monkeypatch.setenv("REFRESH_INTERVAL", "15")
    monkeypatch.setenv("PUBLIC_PREFIXES", "pub/, tools/ ,,")
    monkeypatch.setenv("PULL_HOSTNAME", "docker.example.com")
    monkeypatch.setenv("SHOW_LISTINGS", "no")
    monkeypatch.setenv("SHOW_INDEX", "true")
    monkeypatch.setenv("LISTEN_PORT", "9000")
    monkeypatch.setenv("REGISTRY_TOKEN", "secret")

    config = ListerConfig.from_env(load_env_file=False)

    assert config.registry_host == "https://registry.example.com"
    assert config.refresh_interval == 15.0
    assert config.public_prefixes == ("pub/", "tools/")
    assert config.pull_hostname == "docker.example.com"
    assert config.show_listings is False
    assert config.show_index is True
    assert config.listen_port == 9000
    assert config.registry_token == "secret"


@pytest.mark.parametrize("name,value", [
    ("REFRESH_INTERVAL", "0"),
    ("REFRESH_INTERVAL", "soon"),
    ("REFRESH_INTERVAL", "nan"),
    ("REQUEST_TIMEOUT", "inf"),
    ("REQUEST_TIMEOUT", "nan"),
    ("REQUEST_TIMEOUT", "-1"),
    ("TAG_FETCH_CONCURRENCY", "0"),
    ("LISTEN_PORT", "eighty"),
])
def test_invalid_values_rejected(monkeypatch, name, value):
    """Test that malformed or out-of-range values fail at startup."""
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError):
        ListerConfig.from_env(load_env_file=False)


def test_config_is_immutable():
    """Test that configuration cannot change after construction."""
    config = ListerConfig()

    with pytest.raises(AttributeError):
        config.registry_host = "elsewhere"


def test_star_prefix_lists_everything(monkeypatch):
    """Test the environment spelling of the empty prefix."""
    monkeypatch.setenv("PUBLIC_PREFIXES", "pub/, *")

    config = ListerConfig.from_env(load_env_file=False)

    assert config.public_prefixes == ("pub/", "")
