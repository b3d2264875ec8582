"""Application configuration contract."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from allmind.errors import ConfigError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = Field(alias="APP_ENV", default="dev")
    log_level: str = Field(alias="LOG_LEVEL", default="INFO")

    # Strap layout; empty paths derive from STRAP_ROOT
    strap_root: str = Field(alias="STRAP_ROOT", default="~/software")
    strap_registry: str = Field(alias="STRAP_REGISTRY", default="")
    strap_config: str = Field(alias="STRAP_CONFIG", default="")
    shims_dir: str = Field(alias="SHIMS_DIR", default="")
    shim_script_suffix: str = Field(alias="SHIM_SCRIPT_SUFFIX", default=".ps1")
    shim_companion_suffix: str = Field(alias="SHIM_COMPANION_SUFFIX", default=".cmd")

    chinvex_url: str = Field(alias="CHINVEX_URL", default="http://localhost:7778")
    chinvex_api_token: str = Field(alias="CHINVEX_API_TOKEN", default="")
    chinvex_timeout_seconds: float = Field(alias="CHINVEX_TIMEOUT_SECONDS", default=5.0)
    pm2_path: str = Field(alias="PM2_PATH", default="pm2")
    git_path: str = Field(alias="GIT_PATH", default="git")

    repo_refresh_interval_seconds: float = Field(
        alias="REPO_REFRESH_INTERVAL_SECONDS", default=30.0
    )
    probe_timeout_seconds: float = Field(alias="PROBE_TIMEOUT_SECONDS", default=10.0)
    commit_history_limit: int = Field(alias="COMMIT_HISTORY_LIMIT", default=10)
    scan_max_concurrent: int = Field(alias="SCAN_MAX_CONCURRENT", default=8)

    # Security: bind host defaults to loopback
    bind_host: str = Field(alias="BIND_HOST", default="127.0.0.1")
    web_cors_origins: str = Field(alias="WEB_CORS_ORIGINS", default="http://localhost:3000")

    # Rate limiting
    rate_limit_refresh_per_minute: int = Field(
        alias="RATE_LIMIT_REFRESH_PER_MINUTE", default=6
    )

    @property
    def strap_root_path(self) -> Path:
        return Path(self.strap_root).expanduser()

    @property
    def registry_path(self) -> Path:
        if self.strap_registry.strip():
            return Path(self.strap_registry).expanduser()
        return self.strap_root_path / "_strap" / "registry.json"

    @property
    def strap_config_path(self) -> Path:
        if self.strap_config.strip():
            return Path(self.strap_config).expanduser()
        return self.strap_root_path / "_strap" / "config.json"

    @property
    def shims_path(self) -> Path:
        if self.shims_dir.strip():
            return Path(self.shims_dir).expanduser()
        return self.strap_root_path / "bin"


def validate_settings_for_env(settings: Settings) -> None:
    import logging as _logging
    import warnings

    _logger = _logging.getLogger(__name__)

    if settings.app_env == "prod" and settings.bind_host == "0.0.0.0":
        msg = (
            "SECURITY WARNING: BIND_HOST=0.0.0.0 in production. "
            "This exposes the dashboard and its actions to all network interfaces. "
            "Set BIND_HOST=127.0.0.1 and use a reverse proxy or tailnet address."
        )
        _logger.warning(msg)
        warnings.warn(msg, stacklevel=2)

    problems: list[str] = []
    if settings.repo_refresh_interval_seconds < 1:
        problems.append("REPO_REFRESH_INTERVAL_SECONDS(must be >= 1)")
    if settings.probe_timeout_seconds <= 0:
        problems.append("PROBE_TIMEOUT_SECONDS(must be > 0)")
    if settings.commit_history_limit < 0:
        problems.append("COMMIT_HISTORY_LIMIT(must be >= 0)")
    if settings.scan_max_concurrent < 1:
        problems.append("SCAN_MAX_CONCURRENT(must be >= 1)")

    if settings.app_env == "prod":
        if not settings.strap_root_path.is_absolute():
            problems.append("STRAP_ROOT(absolute path required)")
        if not settings.chinvex_url.strip():
            problems.append("CHINVEX_URL")

    if problems:
        keys = ", ".join(sorted(set(problems)))
        raise ConfigError(f"invalid configuration: {keys}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
