from pathlib import Path

from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


class Settings(BaseSettings):
    # Sample generator cadence and batch size
    generator_interval_seconds: float = 5.0
    batch_size: int = 100
    # Worker threads used for per-block statistics
    stats_workers: int = 4
    # One JSON record per finalized block
    block_log_path: Path = Path("blocks.log")
    metrics_enabled: bool = False
    metrics_port: int = 8000
    metrics_addr: str = "0.0.0.0"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="STATCHAIN_", env_file=".env", env_file_encoding="utf-8"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type["Settings"],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment variables take highest priority, then init, dotenv, file secrets
        return (env_settings, init_settings, dotenv_settings, file_secret_settings)
