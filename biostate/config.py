from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./biostate.db"
    log_level: str = "INFO"

    # State window and timeline sampling
    state_window_hours: int = 24
    timeline_interval_minutes: int = 15
    timeline_window_hours: int = 24
    timeline_projection_hours: int = 4

    # Only warn about a timing conflict when the target is also in the window
    exclusion_require_target_logged: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
