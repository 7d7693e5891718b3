import os
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

_CONFIG_PATH = os.getenv("DASHBOARD_CONFIG", "config.toml")
_ENV_PATH = os.getenv("DASHBOARD_ENV", ".env")
_PACKAGE_DIR = Path(__file__).resolve().parent


class GoogleOAuthSettings(BaseModel):
    client_id: str
    client_secret: str
    authorize_url: str = "https://accounts.google.com/o/oauth2/v2/auth"
    token_url: str = "https://oauth2.googleapis.com/token"
    userinfo_url: str = "https://openidconnect.googleapis.com/v1/userinfo"
    scopes: list[str] = ["openid", "profile", "email"]


class SessionSettings(BaseModel):
    secret_key: str
    algorithm: str = "HS256"
    cookie_name: str = "dashboard_session"
    state_cookie_name: str = "dashboard_oauth_state"
    expire_minutes: int = 60 * 24 * 7
    state_expire_minutes: int = 10
    https_only: bool = False


class ProbeSettings(BaseModel):
    timeout_seconds: float = 4.0
    # Protocol number reported as "Purpur"; everything else is "Java"
    purpur_protocol: int = 755
    favicon_url_template: str = "https://eu.mc-api.net/v3/server/favicon/{host}:{port}"


class AuditSettings(BaseModel):
    enabled: bool = True
    log_file: str = "operations.log"
    log_request_body: bool = True
    max_body_size: int = 10240  # 10KB
    sensitive_fields: list[str] = ["password", "token", "secret", "key", "code"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        toml_file=_CONFIG_PATH,
        env_file=_ENV_PATH,
    )

    database_url: str
    google: GoogleOAuthSettings
    session: SessionSettings
    probe: ProbeSettings = Field(default_factory=ProbeSettings)
    audit: AuditSettings = Field(default_factory=AuditSettings)

    title: str = "Minecraft Dashboard"
    host: str = "0.0.0.0"
    port: int = 3000
    logs_dir: Path = Field(default=Path("logs"))
    web_path: Path = Field(default=_PACKAGE_DIR / "web")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Source order: init args > OS env > .env > config.toml > secrets
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


settings = Settings()  # type: ignore We want the app to fail if the settings are not loaded correctly
