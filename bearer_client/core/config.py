import logging
import tomllib
from enum import StrEnum
from importlib import metadata
from pathlib import Path

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict
from yarl import URL

PROJECT_DIR = Path(__file__).parent.parent.parent
PROJECT_TOML_PATH = PROJECT_DIR / "pyproject.toml"


def _load_project_metadata() -> dict:
    if PROJECT_TOML_PATH.is_file():
        with open(PROJECT_TOML_PATH, "rb") as f:
            return tomllib.load(f)["project"]

    # Installed without the source tree next to it
    dist = metadata.metadata("bearer-client")
    return {
        "name": dist["Name"],
        "version": dist["Version"],
        "description": dist["Summary"] or "",
    }


PYPROJECT_CONTENT = _load_project_metadata()


class Environment(StrEnum):
    LOCAL = "local"
    DEV = "dev"
    STG = "stg"
    PRD = "prd"


class TokenStoreBackend(StrEnum):
    REDIS = "redis"
    MEMORY = "memory"
    NONE = "none"


class Settings(BaseSettings):
    """
    Client settings.

    These parameters can be configured
    with environment variables prefixed with ``BEARER_CLIENT_``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BEARER_CLIENT_",
        env_ignore_empty=False,
        extra="ignore",
    )

    # App variables
    app_name: str = PYPROJECT_CONTENT["name"]
    app_version: str = PYPROJECT_CONTENT["version"]
    app_description: str = PYPROJECT_CONTENT["description"]

    # Current working environment
    current_environment: Environment = Environment.LOCAL
    log_level: int = logging.INFO
    log_to_file: bool = False

    # Remote API
    api_base_url: str = "http://localhost:8080/api"
    request_timeout: float = 30.0  # Timeout for ordinary calls in seconds
    refresh_timeout: float = 15.0  # Timeout for the refresh call in seconds

    # Comma-separated 401 error codes that mean "token expired, refresh it".
    # Empty means every 401 triggers a refresh.
    refreshable_error_codes: str = ""

    # Token persistence
    token_store_backend: TokenStoreBackend = TokenStoreBackend.MEMORY
    token_store_namespace: str = "bearer_client"

    # Variables for Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_user: str | None = None
    redis_pass: str | None = None
    redis_base: int | None = None
    redis_max_pool_connections: int = 10  # Maximum number of connections in the Redis pool
    redis_socket_connect_timeout: int = 5  # Socket connect timeout in seconds
    redis_socket_timeout: int = 5  # Socket timeout in seconds

    @computed_field
    @property
    def refreshable_error_codes_set(self) -> frozenset[str]:
        """
        Parse refreshable error codes from a comma-separated string.
        """
        return frozenset(
            code.strip() for code in self.refreshable_error_codes.split(",") if code.strip()
        )

    @computed_field
    @property
    def redis_url(self) -> URL:
        """
        Assemble REDIS URL from settings.
        """
        path = ""

        if self.redis_base is not None:
            path = f"/{self.redis_base}"

        return URL.build(
            scheme="redis",
            host=self.redis_host,
            port=self.redis_port,
            user=self.redis_user,
            password=self.redis_pass,
            path=path,
        )


settings = Settings()
