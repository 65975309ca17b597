"""Tests for Settings and identity lookup."""

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError

from protoslib.core.config import Settings, get_app_id
from protoslib.core.errors import ConfigurationError


class TestGetAppId:
    def test_reads_appid(self):
        assert get_app_id({"APPID": "abc"}) == "abc"

    @pytest.mark.parametrize("environ", [{}, {"APPID": ""}, {"APPID": "   "}])
    def test_missing_appid_is_configuration_error(self, environ):
        with pytest.raises(ConfigurationError, match="APPID"):
            get_app_id(environ)

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("APPID", "from-env")
        assert get_app_id() == "from-env"


class TestSettings:
    def test_urls(self):
        settings = Settings(app_id="a", host="protos:8080")
        assert settings.base_url == "http://protos:8080/internal/"
        assert settings.ws_url == "ws://protos:8080/internal/ws"
        assert settings.identity_headers == {"Appid": "a"}

    def test_empty_prefix(self):
        settings = Settings(app_id="a", host="h", path_prefix="/")
        assert settings.base_url == "http://h/"
        assert settings.ws_url == "ws://h/ws"

    def test_prefix_slashes_are_normalized(self):
        assert Settings(app_id="a", path_prefix="/api/v1/").ws_url == "ws://protos:8080/api/v1/ws"

    def test_frozen(self):
        settings = Settings(app_id="a")
        with pytest.raises(ValidationError):
            settings.host = "other"

    def test_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            Settings(app_id="a", port=1)

    def test_from_env_defaults(self):
        settings = Settings.from_env(environ={"APPID": "a"})
        assert settings.host == "protos:8080"
        assert settings.path_prefix == "internal"

    def test_from_env_variables(self):
        settings = Settings.from_env(
            environ={"APPID": "a", "PROTOS_HOST": "10.0.0.2:8080", "PROTOS_PATH_PREFIX": "x"}
        )
        assert settings.ws_url == "ws://10.0.0.2:8080/x/ws"

    def test_arguments_override_environment(self):
        settings = Settings.from_env(
            host="h:1", path_prefix="", environ={"APPID": "a", "PROTOS_HOST": "env:2"}
        )
        assert settings.base_url == "http://h:1/"

    def test_from_env_without_identity_fails_at_startup(self):
        with pytest.raises(ConfigurationError):
            Settings.from_env(host="h", environ={})

    @given(app_id=st.from_regex(r"[A-Za-z0-9_-]+", fullmatch=True))
    def test_identity_header_carries_app_id(self, app_id: str):
        assert Settings(app_id=app_id).identity_headers["Appid"] == app_id
