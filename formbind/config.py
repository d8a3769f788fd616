"""Library defaults, overridable through FORMBIND_* environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Process-wide binding defaults."""

    # strptime patterns used when a date field declares no format
    date_format: str = "%Y-%m-%d"
    datetime_format: str = "%Y-%m-%d %H:%M:%S"

    # Separator for primitive lists supplied as a single string
    list_separator: str = ","

    # Whether create() validates every field at construction time
    eager: bool = True

    model_config = {"env_prefix": "FORMBIND_"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
