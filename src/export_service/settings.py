from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from iotdb_export import IoTDBConfig


class ServiceSettings(BaseSettings):
    """Service settings from the environment (EXPORT_*) or a .env file.

    Nested IoTDB values use a double underscore, e.g. EXPORT_IOTDB__HOST.
    """

    model_config = SettingsConfigDict(
        env_prefix="EXPORT_",
        env_nested_delimiter="__",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    iotdb: IoTDBConfig
    persist_on_error: bool = True
    pipeline_id: str = "iotdb-export"


@lru_cache()
def get_settings() -> ServiceSettings:
    return ServiceSettings()
