"""Client configuration for talking to a Protos instance."""

import os
from collections.abc import Mapping

from pydantic import BaseModel, Field, field_validator

from protoslib.core.errors import ConfigurationError

# Name of the environment variable holding the unique application ID that
# identifies every request.
ENV_APP_ID = "APPID"
ENV_HOST = "PROTOS_HOST"
ENV_PATH_PREFIX = "PROTOS_PATH_PREFIX"

DEFAULT_HOST = "protos:8080"
DEFAULT_PATH_PREFIX = "internal"

# Header carrying the app identity on REST requests and the ws handshake
APP_ID_HEADER = "Appid"


def get_app_id(environ: Mapping[str, str] | None = None) -> str:
    """Return the app ID from the environment.

    Raises:
        ConfigurationError: If APPID is unset or empty.
    """
    env = os.environ if environ is None else environ
    app_id = env.get(ENV_APP_ID, "").strip()
    if not app_id:
        raise ConfigurationError(f"{ENV_APP_ID} environment variable is not set")
    return app_id


class Settings(BaseModel):
    """Immutable connection settings.

    Attributes:
        app_id: Identity token sent in the Appid header.
        host: host[:port] of the Protos instance.
        path_prefix: API prefix shared by the REST and websocket endpoints.
        timeout: HTTP request timeout in seconds.
    """

    app_id: str
    host: str = DEFAULT_HOST
    path_prefix: str = DEFAULT_PATH_PREFIX
    timeout: float = Field(default=30.0, gt=0)

    model_config = {
        "extra": "forbid",
        "frozen": True,
    }

    @field_validator("app_id", "host")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("path_prefix")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        return v.strip().strip("/")

    @property
    def base_url(self) -> str:
        """Root URL of the REST API, always ending in a slash."""
        if self.path_prefix:
            return f"http://{self.host}/{self.path_prefix}/"
        return f"http://{self.host}/"

    @property
    def ws_url(self) -> str:
        """URL of the websocket event endpoint."""
        if self.path_prefix:
            return f"ws://{self.host}/{self.path_prefix}/ws"
        return f"ws://{self.host}/ws"

    @property
    def identity_headers(self) -> dict[str, str]:
        return {APP_ID_HEADER: self.app_id}

    @classmethod
    def from_env(
        cls,
        host: str | None = None,
        path_prefix: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "Settings":
        """Build settings from explicit arguments, falling back to the environment.

        The identity is required here so that a missing APPID is reported at
        startup rather than when the connection is opened.

        Raises:
            ConfigurationError: If APPID is not set.
        """
        env = os.environ if environ is None else environ
        return cls(
            app_id=get_app_id(env),
            host=host or env.get(ENV_HOST) or DEFAULT_HOST,
            path_prefix=(
                path_prefix
                if path_prefix is not None
                else env.get(ENV_PATH_PREFIX, DEFAULT_PATH_PREFIX)
            ),
        )
