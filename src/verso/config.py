from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    user_timezone: str = "UTC"

    # Fallback when the text carries no date or time
    default_offset_minutes: int = 60
    # Time of day for weekday and calendar dates stated without a time
    default_hour: int = 9

    log_level: str = "INFO"


settings = Settings()
