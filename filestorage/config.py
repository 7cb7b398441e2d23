from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage backend settings
    STORAGE_BACKEND: str = "local"  # local | memory
    STORAGE_ROOT_PATH: str = "storage/data"
    STORAGE_PUBLIC_BASE_URL: str | None = None

    # Defaults merged into every write, copy, move and directory creation
    STORAGE_DEFAULT_VISIBILITY: str | None = None
    STORAGE_DIRECTORY_VISIBILITY: str | None = None

    # Timeout applied to every operation, in milliseconds
    STORAGE_TIMEOUT_MS: float | None = None

    STORAGE_LOG_LEVEL: str = "INFO"

    # "env_file": read variables from .env as well as the environment
    # "extra": "ignore": variables not declared above are dropped
    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
