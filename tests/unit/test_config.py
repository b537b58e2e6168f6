"""Unit tests for client configuration."""

import pydantic
import pytest

from whatsapp_cloud_sdk.config.settings import ClientConfig
from whatsapp_cloud_sdk.errors import ValidationError


class TestClientConfig:
    """Test ClientConfig defaults and validation."""

    def test_defaults(self):
        config = ClientConfig(access_token="token", phone_number_id="123")

        assert config.version == "v22.0"
        assert config.max_requests_per_minute == 250
        assert config.retry_after_too_many_requests is True
        assert config.max_retries == 3
        assert config.retry_delay_ms == 1000
        assert config.retry_delay == 1.0
        assert config.base_url == "https://graph.facebook.com/v22.0"

    def test_config_is_immutable(self):
        config = ClientConfig(access_token="token", phone_number_id="123")

        with pytest.raises(pydantic.ValidationError):
            config.max_retries = 10

    @pytest.mark.parametrize("field,value", [
        ("max_requests_per_minute", 0),
        ("max_retries", -1),
        ("retry_delay_ms", -5),
        ("access_token", ""),
    ])
    def test_invalid_values_rejected(self, field, value):
        values = {"access_token": "token", "phone_number_id": "123", field: value}

        with pytest.raises(pydantic.ValidationError):
            ClientConfig(**values)


class TestConfigFromEnv:
    """Test loading configuration from the environment."""

    def test_from_env(self, mock_env_vars, monkeypatch, tmp_path):
        monkeypatch.setenv("WHATSAPP_MAX_REQUESTS_PER_MINUTE", "80")
        monkeypatch.setenv("WHATSAPP_RETRY_ON_THROTTLE", "false")

        config = ClientConfig.from_env(dotenv_path=str(tmp_path / "missing.env"))

        assert config.access_token == "test-access-token"
        assert config.phone_number_id == "106540352242922"
        assert config.business_account_id == "102290129340398"
        assert config.max_requests_per_minute == 80
        assert config.retry_after_too_many_requests is False

    def test_overrides_win(self, mock_env_vars, tmp_path):
        config = ClientConfig.from_env(dotenv_path=str(tmp_path / "missing.env"), max_retries=0)

        assert config.max_retries == 0

    def test_dotenv_file_is_loaded(self, monkeypatch, tmp_path):
        monkeypatch.delenv("WHATSAPP_ACCESS_TOKEN", raising=False)
        monkeypatch.delenv("WHATSAPP_PHONE_NUMBER_ID", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("WHATSAPP_ACCESS_TOKEN=file-token\nWHATSAPP_PHONE_NUMBER_ID=555\n")

        try:
            config = ClientConfig.from_env(dotenv_path=str(env_file))
        finally:
            monkeypatch.delenv("WHATSAPP_ACCESS_TOKEN", raising=False)
            monkeypatch.delenv("WHATSAPP_PHONE_NUMBER_ID", raising=False)

        assert config.access_token == "file-token"
        assert config.phone_number_id == "555"

    def test_missing_token_raises(self, monkeypatch, tmp_path):
        monkeypatch.delenv("WHATSAPP_ACCESS_TOKEN", raising=False)
        monkeypatch.setenv("WHATSAPP_PHONE_NUMBER_ID", "123")

        with pytest.raises(ValidationError, match="access_token"):
            ClientConfig.from_env(dotenv_path=str(tmp_path / "missing.env"))
