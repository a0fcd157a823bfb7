"""Tests for configuration resolution and environment settings."""

import dataclasses

import httpx
import pytest

from waitly import ConfigError, WaitlyClient, WaitlyConfig, WaitlySettings, create_waitly_client


class TestWaitlyConfig:
    """WaitlyConfig validation and defaults."""

    def test_defaults(self):
        config = WaitlyConfig(waitlist_id="wl_1", api_key="key")

        assert config.api_url == "https://www.gowaitly.com"
        assert config.timeout_ms == 10000
        assert config.timeout_seconds == 10.0
        assert config.retry_attempts == 3
        assert dict(config.headers) == {}

    @pytest.mark.parametrize("waitlist_id", [None, ""])
    def test_missing_waitlist_id(self, waitlist_id):
        with pytest.raises(ConfigError, match="waitlistId is required"):
            WaitlyConfig(waitlist_id=waitlist_id, api_key="key")

    @pytest.mark.parametrize("api_key", [None, ""])
    def test_missing_api_key(self, api_key):
        with pytest.raises(ConfigError, match="apiKey is required"):
            WaitlyConfig(waitlist_id="wl_1", api_key=api_key)

    def test_none_values_fall_back_to_defaults(self):
        config = WaitlyConfig(
            waitlist_id="wl_1",
            api_key="key",
            api_url=None,
            timeout_ms=None,
            retry_attempts=None,
            headers=None,
        )

        assert config.api_url == "https://www.gowaitly.com"
        assert config.timeout_ms == 10000
        assert config.retry_attempts == 3
        assert dict(config.headers) == {}

    def test_trailing_slash_is_stripped(self):
        config = WaitlyConfig(waitlist_id="wl_1", api_key="key", api_url="https://api.example.com/")
        assert config.api_url == "https://api.example.com"

    @pytest.mark.parametrize("attempts", [0, -1])
    def test_retry_attempts_must_be_positive(self, attempts):
        with pytest.raises(ConfigError):
            WaitlyConfig(waitlist_id="wl_1", api_key="key", retry_attempts=attempts)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ConfigError):
            WaitlyConfig(waitlist_id="wl_1", api_key="key", timeout_ms=0)

    def test_config_is_immutable(self):
        headers = {"X-Trace": "abc"}
        config = WaitlyConfig(waitlist_id="wl_1", api_key="key", headers=headers)

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.api_key = "other"
        with pytest.raises(TypeError):
            config.headers["X-Trace"] = "changed"

        # later changes to the caller's dict do not leak in
        headers["X-Other"] = "1"
        assert "X-Other" not in config.headers

    def test_repr_hides_api_key(self):
        config = WaitlyConfig(waitlist_id="wl_1", api_key="super-secret")
        assert "super-secret" not in repr(config)
        assert "wl_1" in repr(config)

    def test_from_mapping_accepts_wire_names(self):
        config = WaitlyConfig.from_mapping({
            "waitlistId": "wl_1",
            "apiKey": "key",
            "apiUrl": "https://api.example.com",
            "timeout": 2500,
            "retryAttempts": 5,
            "headers": {"X-Trace": "abc"},
        })

        assert config.waitlist_id == "wl_1"
        assert config.api_key == "key"
        assert config.api_url == "https://api.example.com"
        assert config.timeout_ms == 2500
        assert config.retry_attempts == 5
        assert config.headers["X-Trace"] == "abc"

    @pytest.mark.parametrize("headers_key", ["extraHeaders", "extra_headers"])
    def test_from_mapping_accepts_field_names(self, headers_key):
        config = WaitlyConfig.from_mapping({
            "waitlistId": "wl_1",
            "apiKey": "key",
            "timeoutMs": 500,
            headers_key: {"X-Trace": "t"},
        })

        assert config.timeout_ms == 500
        assert dict(config.headers) == {"X-Trace": "t"}

    def test_from_mapping_rejects_unknown_keys(self):
        with pytest.raises(ConfigError, match=r"Unknown config key\(s\): retries, timeOut") as exc_info:
            WaitlyConfig.from_mapping({
                "waitlistId": "wl_1",
                "apiKey": "key",
                "timeOut": 500,
                "retries": 2,
            })

        assert exc_info.value.details == {"keys": ["retries", "timeOut"]}


class TestClientConstruction:
    """Client construction fails fast without touching the network."""

    def test_missing_credentials_make_no_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={})

        with pytest.raises(ConfigError):
            WaitlyClient({"waitlistId": "wl_1"}, transport=httpx.MockTransport(handler))
        with pytest.raises(ConfigError):
            WaitlyClient({"apiKey": "key"}, transport=httpx.MockTransport(handler))

        assert calls == []

    def test_factory_with_keyword_arguments(self):
        client = create_waitly_client(waitlist_id="wl_1", api_key="key", retry_attempts=2)

        assert isinstance(client, WaitlyClient)
        assert client.config.retry_attempts == 2

    def test_factory_with_wire_keyword_arguments(self):
        client = create_waitly_client(waitlistId="wl_1", apiKey="key", timeoutMs=500)

        assert client.config.timeout_ms == 500

    def test_factory_rejects_misspelled_keyword(self):
        with pytest.raises(ConfigError, match="apikey"):
            create_waitly_client(waitlist_id="wl_1", api_key="key", apikey="other")

    def test_factory_rejects_config_and_keywords(self):
        config = WaitlyConfig(waitlist_id="wl_1", api_key="key")
        with pytest.raises(TypeError):
            create_waitly_client(config, api_key="other")


class TestWaitlySettings:
    """Environment-driven settings."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ("WAITLIST_ID", "API_KEY", "API_URL", "TIMEOUT_MS", "RETRY_ATTEMPTS", "LOG_LEVEL"):
            monkeypatch.delenv(f"WAITLY_{name}", raising=False)

    def test_loads_from_environment(self, monkeypatch):
        monkeypatch.setenv("WAITLY_WAITLIST_ID", "wl_env")
        monkeypatch.setenv("WAITLY_API_KEY", "env-key")
        monkeypatch.setenv("WAITLY_TIMEOUT_MS", "2000")
        monkeypatch.setenv("WAITLY_RETRY_ATTEMPTS", "4")

        settings = WaitlySettings(_env_file=None)
        config = settings.to_config()

        assert config.waitlist_id == "wl_env"
        assert config.api_key == "env-key"
        assert config.timeout_ms == 2000
        assert config.retry_attempts == 4
        assert "env-key" not in repr(settings)

    def test_overrides_win_over_environment(self, monkeypatch):
        monkeypatch.setenv("WAITLY_WAITLIST_ID", "wl_env")
        monkeypatch.setenv("WAITLY_API_KEY", "env-key")

        config = WaitlySettings(_env_file=None).to_config(waitlist_id="wl_cli", api_url=None)

        assert config.waitlist_id == "wl_cli"
        assert config.api_url == "https://www.gowaitly.com"

    def test_missing_credentials_raise_config_error(self):
        with pytest.raises(ConfigError, match="waitlistId is required"):
            WaitlySettings(_env_file=None).to_config()
