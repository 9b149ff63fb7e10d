import pytest

from siyuancli.models import (
    AIConfig,
    APIError,
    AppConfig,
    CommandError,
    LogConfig,
    Notebook,
    SiYuanConfig,
    config_from_dict,
    config_to_dict,
)


SAMPLE = {
    "version": "1.0.0",
    "ai": {
        "provider": "openai",
        "base_url": "http://localhost:11434",
        "api_key": "placeholder",
        "model": "demo",
        "max_tokens": 2048,
        "temperature": 0.7,
        "timeout": 30,
    },
    "log": {"level": "info", "maxSize": 10, "maxBackups": 3, "maxAge": 7, "compress": True},
    "siyuan": {
        "base_url": "http://127.0.0.1:6806",
        "api_token": "token",
        "timeout": 30,
        "user_agent": "agent",
        "retry_count": 2,
        "enabled": True,
    },
    "output": {"format": "json"},
}


def test_from_dict_reads_yaml_keys():
    config = config_from_dict(SAMPLE)
    assert config.log.max_size == 10
    assert config.log.max_backups == 3
    assert config.siyuan.base_url == "http://127.0.0.1:6806"
    assert config.output.format == "json"
    assert config.ai.temperature == 0.7


def test_round_trip():
    assert config_to_dict(config_from_dict(SAMPLE)) == SAMPLE


def test_missing_sections_use_defaults():
    config = config_from_dict({"version": "2"})
    assert config.version == "2"
    assert config.ai == AIConfig()
    assert config.log == LogConfig()
    assert config.siyuan == SiYuanConfig()


def test_empty_input_gives_default_config():
    assert config_from_dict(None) == AppConfig()


def test_to_dict_uses_camel_case_log_keys():
    data = config_to_dict(AppConfig())
    assert set(data["log"]) == {"level", "maxSize", "maxBackups", "maxAge", "compress"}


def test_non_mapping_is_rejected():
    with pytest.raises(ValueError):
        config_from_dict(["not", "a", "mapping"])


def test_api_error_keeps_code_and_message():
    err = APIError(-1, "boom")
    assert err.code == -1
    assert err.msg == "boom"
    assert "boom" in str(err)


def test_notebook_defaults_open():
    nb = Notebook(id="20240101000000-abcdefg", name="Work")
    assert nb.closed is False
    assert nb.sort == 0


def test_command_error_keeps_message():
    err = CommandError("bad")
    assert str(err) == "bad"
    assert err.args == ("bad",)