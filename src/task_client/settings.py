"""Client settings: the only recognized option is the service base URL."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from taskstore_api.app.settings import PROJECT_ROOT


class ClientSettings(BaseSettings):
    api_base_url: str = ""

    model_config = SettingsConfigDict(
        env_prefix="TASKSTORE_",
        extra="ignore",
        env_file=(PROJECT_ROOT / ".env", PROJECT_ROOT / ".env.local"),
        env_file_encoding="utf-8",
    )
