"""
Tests for configuration loading.
"""
import pytest

from agent_bridge import config as config_module
from agent_bridge.config import BridgeConfig, UpstreamConfig, get_config, load_config


@pytest.fixture
def restore_config():
    original = config_module._config_path
    yield
    load_config(original)


def write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return str(path)


def test_defaults():
    config = BridgeConfig()
    assert config.upstream.run_url == "http://localhost:8081/api/agent"
    assert config.fallback_thread_id == "default-thread"
    assert config.allowed_origins == ["*"]


def test_load_from_file(tmp_path, restore_config, monkeypatch):
    monkeypatch.delenv("BACKEND_URL", raising=False)
    path = write(tmp_path, "upstream:\n  base_url: http://agent:9000/\n  read_timeout: 30\n")
    config = load_config(path)
    assert config.upstream.run_url == "http://agent:9000/api/agent"
    assert config.upstream.read_timeout == 30
    assert get_config() is config


def test_empty_file_uses_defaults(tmp_path, restore_config, monkeypatch):
    monkeypatch.delenv("BACKEND_URL", raising=False)
    config = load_config(write(tmp_path, ""))
    assert config.upstream.base_url == "http://localhost:8081"


def test_backend_url_env_overrides(tmp_path, restore_config, monkeypatch):
    monkeypatch.setenv("BACKEND_URL", "https://backend.internal")
    config = load_config(write(tmp_path, "fallback_thread_id: t\n"))
    assert config.upstream.base_url == "https://backend.internal"


def test_missing_file(tmp_path, restore_config):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


@pytest.mark.parametrize("fields", [
    {"base_url": "ftp://agent"},
    {"run_path": "api/agent"},
    {"read_timeout": 0},
    {"connect_timeout": -1},
])
def test_invalid_upstream(fields):
    with pytest.raises(ValueError):
        UpstreamConfig(**fields)


def test_empty_fallback_thread_rejected():
    with pytest.raises(ValueError):
        BridgeConfig(fallback_thread_id="")
