from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from asma.domain.constants import CATALOG_URL, DEFAULT_TARGET_DURATION, REQUEST_TIMEOUT


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/asma/config.toml",
        Path.home() / ".asma.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for asma.
    Supports loading from:
    1. Environment variables (ASMA_*)
    2. Config file (~/.config/asma/config.toml or ~/.asma.toml)
    3. Manual overrides (CLI / API)
    """

    model_config = SettingsConfigDict(
        env_prefix="ASMA_",
        extra="ignore",
    )

    # Storage
    state_dir: Path = Field(default_factory=lambda: Path.home() / ".local/share/asma")
    user_id: str | None = None

    # Catalog
    catalog_source: Literal["bundled", "remote"] = "bundled"
    catalog_url: str = CATALOG_URL
    request_timeout: float = REQUEST_TIMEOUT

    # Sessions
    target_duration_seconds: int = Field(default=DEFAULT_TARGET_DURATION, ge=0)
    ordering: Literal["grouped", "interleaved"] = "grouped"

    verbose: int = 1

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # First existing file wins; init (overrides) beats env beats file.
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("state_dir", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path:
        return Path(v).expanduser()


def resolve_config(overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/asma/config.toml (if exists)
    3. Environment variables (ASMA_*)
    4. overrides (passed from Typer or the HTTP API), None values dropped
    """
    clean = {k: v for k, v in (overrides or {}).items() if v is not None}
    return AppConfig(**clean)
