import pytest

from stakpak.config import DEFAULT_API_ENDPOINT, AppConfig, ConfigError, config_path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    import os

    for name in list(os.environ):
        if name.startswith("STAKPAK_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("HOME", str(tmp_path))


def test_config_path_under_home(tmp_path):
    assert config_path() == tmp_path / ".stakpak" / "config.toml"


def test_load_without_file_uses_defaults():
    config = AppConfig.load()
    assert config.api_endpoint == DEFAULT_API_ENDPOINT
    assert config.api_key is None
    assert config.mcp_server_host is None


def test_save_and_load_round_trip(tmp_path):
    api_key = "placeholder"
    original = AppConfig(api_endpoint="http://localhost:9000", api_key=api_key)
    original.save()
    assert config_path().is_file()
    assert AppConfig.load() == original


def test_save_omits_unset_values(tmp_path):
    target = tmp_path / "nested" / "dir" / "config.toml"
    AppConfig().save(target)
    text = target.read_text(encoding="utf-8")
    assert "api_endpoint" in text
    assert "api_key" not in text
    assert "mcp_server_host" not in text


def test_environment_overrides_default(monkeypatch):
    monkeypatch.setenv("STAKPAK_API_KEY", "placeholder")
    monkeypatch.setenv("STAKPAK_MCP_SERVER_HOST", "http://localhost:1234")
    config = AppConfig.load()
    assert config.api_key == "placeholder"
    assert config.mcp_server_host == "http://localhost:1234"


def test_file_overrides_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("STAKPAK_API_ENDPOINT", "http://env.example.com")
    target = tmp_path / "config.toml"
    AppConfig(api_endpoint="http://file.example.com").save(target)
    assert AppConfig.load(target).api_endpoint == "http://file.example.com"


def test_malformed_file_raises(tmp_path):
    target = tmp_path / "config.toml"
    target.write_text("api_endpoint = [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError):
        AppConfig.load(target)


def test_table_value_is_rejected(tmp_path):
    target = tmp_path / "config.toml"
    target.write_text("[api_key]\nvalue = 1\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        AppConfig.load(target)